from uuid import UUID

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.errors import InvalidInput
from vidtube.models.comments import Comment
from vidtube.models.likes import Like
from vidtube.models.users import Users
from vidtube.models.videos import Video
from vidtube.services.access_control import require_found, require_owner


class CommentService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, comment_id: UUID) -> Comment:
        return require_found(await self.db.get(Comment, comment_id, populate_existing=True), "Comment")

    async def add(self, principal: Users, video_id: UUID, content: str) -> Comment:
        if not (content or "").strip():
            raise InvalidInput("Comment content is required")

        video = await self.db.scalar(select(Video.id).where(Video.id == video_id))
        require_found(video, "Video")

        comment = Comment(video_id=video_id, owner_id=principal.id, content=content.strip())
        self.db.add(comment)
        await self.db.commit()
        await self.db.refresh(comment)

        logger.info(f"User {principal.id} commented {comment.id} on video {video_id}")
        return comment

    async def update(self, principal: Users, comment_id: UUID, content: str) -> Comment:
        if not (content or "").strip():
            raise InvalidInput("Comment content is required")

        comment = await self.get(comment_id)
        require_owner(principal, comment, "edit this comment")

        comment.content = content.strip()
        await self.db.commit()
        await self.db.refresh(comment)

        logger.info(f"Comment {comment_id} updated")
        return comment

    async def delete(self, principal: Users, comment_id: UUID) -> Comment:
        comment = await self.get(comment_id)
        require_owner(principal, comment, "delete this comment")

        await self.db.execute(delete(Like).where(Like.comment_id == comment_id))
        await self.db.delete(comment)
        await self.db.commit()

        logger.info(f"Comment {comment_id} deleted by {principal.id}")
        return comment
