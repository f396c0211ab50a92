from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.database import get_db
from vidtube.models.users import Users
from vidtube.schemas.tweet import TweetRequest, TweetResponse
from vidtube.services.tweet_service import TweetService
from vidtube.services.view_composer import ViewComposer
from vidtube.utils.responses import api_response
from vidtube.utils.security import get_current_user

tweets_router = APIRouter()


@tweets_router.post("")
async def create_tweet(
    payload: TweetRequest,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    tweet = await TweetService(db).create(current_user, payload.content)
    return api_response(TweetResponse.model_validate(tweet), "Tweet created successfully", status.HTTP_201_CREATED)


@tweets_router.get("/user/{user_id}")
async def get_user_tweets(
    user_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    tweets = await ViewComposer(db).user_tweets(user_id, current_user.id, page, limit)
    return api_response(tweets, "User tweets fetched successfully")


@tweets_router.patch("/{tweet_id}")
async def update_tweet(
    tweet_id: UUID,
    payload: TweetRequest,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    tweet = await TweetService(db).update(current_user, tweet_id, payload.content)
    return api_response(TweetResponse.model_validate(tweet), "Tweet updated successfully")


@tweets_router.delete("/{tweet_id}")
async def delete_tweet(
    tweet_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await TweetService(db).delete(current_user, tweet_id)
    return api_response({"tweetId": str(tweet_id)}, "Tweet deleted successfully")
