import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid

from vidtube.db.database import Base, utcnow


class Playlist(Base):
    __tablename__ = "playlists"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    owner_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class PlaylistVideo(Base):
    __tablename__ = "playlist_videos"
    __table_args__ = (
        UniqueConstraint("playlist_id", "video_id", name="uq_playlist_videos_playlist_video"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    playlist_id = Column(Uuid, ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False, index=True)
    video_id = Column(Uuid, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True)

    added_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
