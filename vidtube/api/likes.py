from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.database import get_db
from vidtube.models.users import Users
from vidtube.schemas.subscription import LikeState
from vidtube.services.like_service import LikeService
from vidtube.services.view_composer import ViewComposer
from vidtube.utils.responses import api_response
from vidtube.utils.security import get_current_user

likes_router = APIRouter()


def _like_response(liked: bool, target: str):
    message = f"{target} liked successfully" if liked else f"{target} unliked successfully"
    return api_response(LikeState(is_liked=liked), message)


@likes_router.post("/toggle/v/{video_id}")
async def toggle_video_like(
    video_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return _like_response(await LikeService(db).toggle_video_like(current_user, video_id), "Video")


@likes_router.post("/toggle/c/{comment_id}")
async def toggle_comment_like(
    comment_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return _like_response(await LikeService(db).toggle_comment_like(current_user, comment_id), "Comment")


@likes_router.post("/toggle/t/{tweet_id}")
async def toggle_tweet_like(
    tweet_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return _like_response(await LikeService(db).toggle_tweet_like(current_user, tweet_id), "Tweet")


@likes_router.get("/videos")
async def get_liked_videos(
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    videos = await ViewComposer(db).liked_videos(current_user.id)
    return api_response(videos, "Liked videos fetched successfully")
