from typing import Optional

from vidtube.schemas.common import ApiModel


class TokenPair(ApiModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshTokenRequest(ApiModel):
    refresh_token: Optional[str] = None
