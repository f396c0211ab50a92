import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid

from vidtube.db.database import Base, utcnow


class Users(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    username = Column(String(64), unique=True, index=True, nullable=False)
    email = Column(String(320), unique=True, index=True, nullable=False)
    full_name = Column(String(200), nullable=False)

    avatar = Column(Text, nullable=False)
    cover_image = Column(Text, nullable=False, default="")

    password_hash = Column(String(255), nullable=False)
    refresh_token = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class WatchHistory(Base):
    __tablename__ = "watch_history"
    __table_args__ = (
        UniqueConstraint("user_id", "video_id", name="uq_watch_history_user_video"),
    )

    # insertion order is the history order
    id = Column(Integer, primary_key=True, autoincrement=True)

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    video_id = Column(Uuid, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)

    watched_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
