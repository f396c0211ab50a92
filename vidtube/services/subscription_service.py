from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.errors import InvalidInput
from vidtube.models.subscriptions import Subscription
from vidtube.models.users import Users
from vidtube.services.access_control import require_found
from vidtube.services.relationships import toggle_edge


class SubscriptionService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def toggle(self, principal: Users, channel_id: UUID) -> bool:
        subscriber_id = principal.id
        if subscriber_id == channel_id:
            raise InvalidInput("Cannot subscribe to your own channel")

        channel = await self.db.scalar(select(Users.id).where(Users.id == channel_id))
        require_found(channel, "Channel")

        return await toggle_edge(
            self.db, Subscription, subscriber_id=subscriber_id, channel_id=channel_id
        )
