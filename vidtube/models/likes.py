import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, UniqueConstraint, Uuid

from vidtube.db.database import Base, utcnow


class Like(Base):
    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("liked_by_id", "video_id", name="uq_likes_user_video"),
        UniqueConstraint("liked_by_id", "comment_id", name="uq_likes_user_comment"),
        UniqueConstraint("liked_by_id", "tweet_id", name="uq_likes_user_tweet"),
        CheckConstraint(
            "(CASE WHEN video_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN comment_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN tweet_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_likes_single_target",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    liked_by_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # exactly one target is set
    video_id = Column(Uuid, ForeignKey("videos.id", ondelete="CASCADE"), nullable=True, index=True)
    comment_id = Column(Uuid, ForeignKey("comments.id", ondelete="CASCADE"), nullable=True, index=True)
    tweet_id = Column(Uuid, ForeignKey("tweets.id", ondelete="CASCADE"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
