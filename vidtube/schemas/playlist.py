from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from vidtube.schemas.common import ApiModel
from vidtube.schemas.user import OwnerProfile


class PlaylistCreate(ApiModel):
    name: str = Field(..., min_length=1)
    description: str = ""


class PlaylistUpdate(ApiModel):
    name: Optional[str] = None
    description: Optional[str] = None


class PlaylistResponse(ApiModel):
    id: UUID
    owner_id: UUID
    name: str
    description: str
    videos: List[UUID] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class PlaylistVideoItem(ApiModel):
    id: UUID
    video_file: str
    thumbnail: str
    title: str
    description: str
    duration: float
    views: int
    created_at: datetime


class PlaylistSummary(ApiModel):
    id: UUID
    name: str
    description: str
    total_videos: int
    total_views: int
    updated_at: datetime


class PlaylistDetail(ApiModel):
    id: UUID
    name: str
    description: str
    created_at: datetime
    updated_at: datetime
    total_videos: int
    total_views: int
    videos: List[PlaylistVideoItem]
    owner: OwnerProfile
