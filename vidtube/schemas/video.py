from datetime import datetime
from typing import Optional
from uuid import UUID

from vidtube.schemas.common import ApiModel
from vidtube.schemas.user import OwnerProfile, OwnerSummary


class VideoResponse(ApiModel):
    id: UUID
    owner_id: UUID
    video_file: str
    thumbnail: str
    title: str
    description: str
    duration: float
    views: int
    is_published: bool
    created_at: datetime
    updated_at: datetime


class PublishStatus(ApiModel):
    id: UUID
    is_published: bool


class VideoOwner(OwnerSummary):
    subscribers_count: int
    is_subscribed: bool


class VideoDetail(ApiModel):
    id: UUID
    video_file: str
    thumbnail: str
    title: str
    description: str
    duration: float
    views: int
    is_published: bool
    created_at: datetime
    owner: VideoOwner
    likes_count: int
    is_liked: bool


class VideoFeedItem(ApiModel):
    id: UUID
    video_file: str
    thumbnail: str
    title: str
    description: str
    duration: float
    views: int
    created_at: datetime
    owner: OwnerSummary


class WatchedVideo(ApiModel):
    id: UUID
    video_file: str
    thumbnail: str
    title: str
    description: str
    duration: float
    views: int
    created_at: datetime
    owner: Optional[OwnerProfile] = None


class ChannelVideo(ApiModel):
    id: UUID
    video_file: str
    thumbnail: str
    title: str
    description: str
    duration: float
    views: int
    is_published: bool
    created_at: datetime
    likes_count: int


class ChannelStats(ApiModel):
    total_videos: int
    total_views: int
    total_subscribers: int
    total_likes: int
