from datetime import datetime
from uuid import UUID

from pydantic import Field

from vidtube.schemas.common import ApiModel
from vidtube.schemas.user import OwnerProfile


class TweetRequest(ApiModel):
    content: str = Field(..., min_length=1)


class TweetResponse(ApiModel):
    id: UUID
    owner_id: UUID
    content: str
    created_at: datetime
    updated_at: datetime


class TweetItem(ApiModel):
    id: UUID
    content: str
    created_at: datetime
    owner: OwnerProfile
    likes_count: int
    is_liked: bool
