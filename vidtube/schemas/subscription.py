from datetime import datetime
from typing import Optional
from uuid import UUID

from vidtube.schemas.common import ApiModel


class SubscriptionState(ApiModel):
    subscribed: bool


class LikeState(ApiModel):
    is_liked: bool


class SubscriberItem(ApiModel):
    id: UUID
    username: str
    full_name: str
    avatar: str
    subscribers_count: int
    subscribed_to_subscriber: bool


class LatestVideo(ApiModel):
    id: UUID
    video_file: str
    thumbnail: str
    title: str
    description: str
    duration: float
    views: int
    created_at: datetime


class SubscribedChannelItem(ApiModel):
    id: UUID
    username: str
    full_name: str
    avatar: str
    latest_video: Optional[LatestVideo] = None
