from typing import Optional
from uuid import UUID

from loguru import logger
from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.errors import Internal, InvalidInput
from vidtube.models.comments import Comment
from vidtube.models.likes import Like
from vidtube.models.playlists import PlaylistVideo
from vidtube.models.users import Users, WatchHistory
from vidtube.models.videos import Video
from vidtube.services.access_control import require_found, require_owner
from vidtube.services.media_service import MediaGateway, discard_media


class VideoService:
    def __init__(self, db: AsyncSession, media: Optional[MediaGateway] = None):
        self.db = db
        self.media = media

    async def get(self, video_id: UUID) -> Video:
        return require_found(await self.db.get(Video, video_id, populate_existing=True), "Video")

    async def publish(
        self,
        owner: Users,
        title: str,
        description: str,
        video_path: Optional[str],
        thumbnail_path: Optional[str],
    ) -> Video:
        if not (title or "").strip() or not (description or "").strip():
            raise InvalidInput("Title and description are required")
        if not video_path:
            raise InvalidInput("Video file is required")
        if not thumbnail_path:
            raise InvalidInput("Thumbnail is required")

        video_file = await self.media.upload(video_path)
        if video_file is None:
            raise Internal("Error while uploading video file")

        thumbnail = await self.media.upload(thumbnail_path)
        if thumbnail is None:
            await discard_media(self.media, video_file.url, "video")
            raise Internal("Error while uploading thumbnail")

        video = Video(
            owner_id=owner.id,
            video_file=video_file.url,
            thumbnail=thumbnail.url,
            title=title.strip(),
            description=description.strip(),
            duration=video_file.duration or 0,
            is_published=True,
        )
        self.db.add(video)
        await self.db.commit()
        await self.db.refresh(video)

        logger.info(f"User {owner.id} published video {video.id}")
        return video

    async def update(
        self,
        principal: Users,
        video_id: UUID,
        title: Optional[str] = None,
        description: Optional[str] = None,
        thumbnail_path: Optional[str] = None,
    ) -> Video:
        changes = {}
        if title and title.strip():
            changes["title"] = title.strip()
        if description and description.strip():
            changes["description"] = description.strip()
        if not changes and not thumbnail_path:
            raise InvalidInput("No fields to update")

        video = await self.get(video_id)
        require_owner(principal, video, "edit this video")

        previous_thumbnail = None
        if thumbnail_path:
            thumbnail = await self.media.upload(thumbnail_path)
            if thumbnail is None:
                raise Internal("Error while uploading thumbnail")
            previous_thumbnail = video.thumbnail
            changes["thumbnail"] = thumbnail.url

        for field, value in changes.items():
            setattr(video, field, value)
        await self.db.commit()
        await self.db.refresh(video)

        logger.info(f"Video {video_id} updated: {sorted(changes)}")
        await discard_media(self.media, previous_thumbnail)
        return video

    async def delete(self, principal: Users, video_id: UUID) -> Video:
        video = await self.get(video_id)
        require_owner(principal, video, "delete this video")
        video_file, thumbnail = video.video_file, video.thumbnail

        comment_ids = select(Comment.id).where(Comment.video_id == video_id)
        await self.db.execute(
            delete(Like).where(or_(Like.video_id == video_id, Like.comment_id.in_(comment_ids)))
        )
        await self.db.execute(delete(Comment).where(Comment.video_id == video_id))
        await self.db.execute(delete(PlaylistVideo).where(PlaylistVideo.video_id == video_id))
        await self.db.execute(delete(WatchHistory).where(WatchHistory.video_id == video_id))
        await self.db.delete(video)
        await self.db.commit()

        logger.info(f"Video {video_id} deleted by {principal.id}")
        await discard_media(self.media, video_file, "video")
        await discard_media(self.media, thumbnail)
        return video

    async def toggle_publish(self, principal: Users, video_id: UUID) -> Video:
        video = await self.get(video_id)
        require_owner(principal, video, "change the publish status of this video")

        video.is_published = not video.is_published
        await self.db.commit()
        await self.db.refresh(video)

        logger.info(f"Video {video_id} is_published={video.is_published}")
        return video
