from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field

from vidtube.schemas.common import ApiModel
from vidtube.schemas.token import TokenPair


class UserResponse(ApiModel):
    id: UUID
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str = ""
    created_at: datetime
    updated_at: datetime


class LoginRequest(ApiModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: str = Field(..., min_length=1)


class LoginResponse(TokenPair):
    user: UserResponse


class ChangePasswordRequest(ApiModel):
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


class UpdateAccountRequest(ApiModel):
    full_name: str = Field(..., min_length=1)
    email: EmailStr


class OwnerSummary(ApiModel):
    id: UUID
    username: str
    avatar: str


class OwnerProfile(OwnerSummary):
    full_name: str


class ChannelProfile(ApiModel):
    id: UUID
    full_name: str
    username: str
    email: str
    avatar: str
    cover_image: str
    subscribers_count: int
    channels_subscribed_to_count: int
    is_subscribed: bool
