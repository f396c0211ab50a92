from uuid import UUID

from loguru import logger
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.errors import InvalidInput
from vidtube.models.likes import Like
from vidtube.models.tweets import Tweet
from vidtube.models.users import Users
from vidtube.services.access_control import require_found, require_owner


class TweetService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, tweet_id: UUID) -> Tweet:
        return require_found(await self.db.get(Tweet, tweet_id, populate_existing=True), "Tweet")

    async def create(self, principal: Users, content: str) -> Tweet:
        if not (content or "").strip():
            raise InvalidInput("Tweet cannot be empty")

        tweet = Tweet(owner_id=principal.id, content=content.strip())
        self.db.add(tweet)
        await self.db.commit()
        await self.db.refresh(tweet)

        logger.info(f"User {principal.id} created tweet {tweet.id}")
        return tweet

    async def update(self, principal: Users, tweet_id: UUID, content: str) -> Tweet:
        if not (content or "").strip():
            raise InvalidInput("Tweet cannot be empty")

        tweet = await self.get(tweet_id)
        require_owner(principal, tweet, "edit this tweet")

        tweet.content = content.strip()
        await self.db.commit()
        await self.db.refresh(tweet)

        logger.info(f"Tweet {tweet_id} updated")
        return tweet

    async def delete(self, principal: Users, tweet_id: UUID) -> Tweet:
        tweet = await self.get(tweet_id)
        require_owner(principal, tweet, "delete this tweet")

        await self.db.execute(delete(Like).where(Like.tweet_id == tweet_id))
        await self.db.delete(tweet)
        await self.db.commit()

        logger.info(f"Tweet {tweet_id} deleted by {principal.id}")
        return tweet
