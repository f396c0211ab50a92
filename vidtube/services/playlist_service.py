from typing import List, Optional, Tuple
from uuid import UUID

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.errors import InvalidInput
from vidtube.models.playlists import Playlist, PlaylistVideo
from vidtube.models.users import Users
from vidtube.models.videos import Video
from vidtube.services.access_control import require_any_owner, require_found, require_owner
from vidtube.services.relationships import insert_unique


class PlaylistService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, playlist_id: UUID) -> Playlist:
        return require_found(await self.db.get(Playlist, playlist_id, populate_existing=True), "Playlist")

    async def video_ids(self, playlist_id: UUID) -> List[UUID]:
        result = await self.db.execute(
            select(PlaylistVideo.video_id)
            .where(PlaylistVideo.playlist_id == playlist_id)
            .order_by(PlaylistVideo.id)
        )
        return list(result.scalars().all())

    async def create(self, principal: Users, name: str, description: Optional[str] = None) -> Playlist:
        if not (name or "").strip():
            raise InvalidInput("Playlist name is required")

        playlist = Playlist(
            owner_id=principal.id,
            name=name.strip(),
            description=(description or "").strip(),
        )
        self.db.add(playlist)
        await self.db.commit()
        await self.db.refresh(playlist)

        logger.info(f"User {principal.id} created playlist {playlist.id}")
        return playlist

    async def update(
        self,
        principal: Users,
        playlist_id: UUID,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Playlist:
        changes = {}
        if name and name.strip():
            changes["name"] = name.strip()
        if description and description.strip():
            changes["description"] = description.strip()
        if not changes:
            raise InvalidInput("No fields to update")

        playlist = await self.get(playlist_id)
        require_owner(principal, playlist, "edit this playlist")

        for field, value in changes.items():
            setattr(playlist, field, value)
        await self.db.commit()
        await self.db.refresh(playlist)

        logger.info(f"Playlist {playlist_id} updated: {sorted(changes)}")
        return playlist

    async def delete(self, principal: Users, playlist_id: UUID) -> None:
        playlist = await self.get(playlist_id)
        require_owner(principal, playlist, "delete this playlist")

        await self.db.execute(delete(PlaylistVideo).where(PlaylistVideo.playlist_id == playlist_id))
        await self.db.delete(playlist)
        await self.db.commit()

        logger.info(f"Playlist {playlist_id} deleted by {principal.id}")

    async def _membership_targets(
        self, principal: Users, playlist_id: UUID, video_id: UUID, action: str
    ) -> Tuple[Playlist, Video]:
        playlist = await self.get(playlist_id)
        video = require_found(await self.db.get(Video, video_id), "Video")
        # either owner may change membership
        require_any_owner(principal, playlist, video, action=action)
        return playlist, video

    async def add_video(self, principal: Users, playlist_id: UUID, video_id: UUID) -> Playlist:
        principal_id = principal.id
        await self._membership_targets(principal, playlist_id, video_id, "add videos to this playlist")

        present = await self.db.scalar(
            select(PlaylistVideo.id).where(
                PlaylistVideo.playlist_id == playlist_id, PlaylistVideo.video_id == video_id
            )
        )
        if present is None and await insert_unique(
            self.db, PlaylistVideo(playlist_id=playlist_id, video_id=video_id)
        ):
            logger.info(f"User {principal_id} added video {video_id} to playlist {playlist_id}")

        return await self.get(playlist_id)

    async def remove_video(self, principal: Users, playlist_id: UUID, video_id: UUID) -> Playlist:
        await self._membership_targets(principal, playlist_id, video_id, "remove videos from this playlist")

        await self.db.execute(
            delete(PlaylistVideo).where(
                PlaylistVideo.playlist_id == playlist_id, PlaylistVideo.video_id == video_id
            )
        )
        await self.db.commit()

        logger.info(f"User {principal.id} removed video {video_id} from playlist {playlist_id}")
        return await self.get(playlist_id)
