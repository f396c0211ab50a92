from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.database import get_db
from vidtube.models.users import Users
from vidtube.services.view_composer import ViewComposer
from vidtube.utils.responses import api_response
from vidtube.utils.security import get_current_user

dashboard_router = APIRouter()


@dashboard_router.get("/stats")
async def get_channel_stats(
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    stats = await ViewComposer(db).channel_stats(current_user.id)
    return api_response(stats, "Channel stats fetched successfully")


@dashboard_router.get("/videos")
async def get_channel_videos(
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    videos = await ViewComposer(db).channel_videos(current_user.id)
    return api_response(videos, "Channel videos fetched successfully")
