from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.models.comments import Comment
from vidtube.models.likes import Like
from vidtube.models.tweets import Tweet
from vidtube.models.users import Users
from vidtube.models.videos import Video
from vidtube.services.access_control import require_found
from vidtube.services.relationships import toggle_edge

TARGETS = {
    "video_id": (Video, "Video"),
    "comment_id": (Comment, "Comment"),
    "tweet_id": (Tweet, "Tweet"),
}


class LikeService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _toggle(self, principal: Users, target: str, target_id: UUID) -> bool:
        liked_by_id = principal.id
        model, name = TARGETS[target]

        found = await self.db.scalar(select(model.id).where(model.id == target_id))
        require_found(found, name)

        return await toggle_edge(self.db, Like, liked_by_id=liked_by_id, **{target: target_id})

    async def toggle_video_like(self, principal: Users, video_id: UUID) -> bool:
        return await self._toggle(principal, "video_id", video_id)

    async def toggle_comment_like(self, principal: Users, comment_id: UUID) -> bool:
        return await self._toggle(principal, "comment_id", comment_id)

    async def toggle_tweet_like(self, principal: Users, tweet_id: UUID) -> bool:
        return await self._toggle(principal, "tweet_id", tweet_id)
