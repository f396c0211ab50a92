import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Text, Uuid

from vidtube.db.database import Base, utcnow


class Tweet(Base):
    __tablename__ = "tweets"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    owner_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    content = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
