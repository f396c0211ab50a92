from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.database import get_db
from vidtube.models.users import Users
from vidtube.schemas.subscription import SubscriptionState
from vidtube.services.subscription_service import SubscriptionService
from vidtube.services.view_composer import ViewComposer
from vidtube.utils.responses import api_response
from vidtube.utils.security import get_current_user

subscriptions_router = APIRouter()


@subscriptions_router.post("/c/{channel_id}")
async def toggle_subscription(
    channel_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    subscribed = await SubscriptionService(db).toggle(current_user, channel_id)
    message = "Subscribed successfully" if subscribed else "Unsubscribed successfully"
    return api_response(SubscriptionState(subscribed=subscribed), message)


@subscriptions_router.get("/c/{channel_id}")
async def get_user_channel_subscribers(
    channel_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    subscribers = await ViewComposer(db).channel_subscribers(channel_id)
    return api_response(subscribers, "Subscribers fetched successfully")


@subscriptions_router.get("/u/{subscriber_id}")
async def get_subscribed_channels(
    subscriber_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    channels = await ViewComposer(db).subscribed_channels(subscriber_id)
    return api_response(channels, "Subscribed channels fetched successfully")
