from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.database import get_db
from vidtube.models.users import Users
from vidtube.schemas.video import PublishStatus, VideoResponse
from vidtube.services.media_service import MediaGateway, get_media_gateway
from vidtube.services.video_service import VideoService
from vidtube.services.view_composer import ViewComposer
from vidtube.utils.responses import api_response
from vidtube.utils.security import get_current_user
from vidtube.utils.uploads import staged_upload

videos_router = APIRouter()


@videos_router.get("")
async def get_all_videos(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    query: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_type: Optional[str] = Query(None, alias="sortType"),
    user_id: Optional[UUID] = Query(None, alias="userId"),
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    videos = await ViewComposer(db).video_feed(
        query=query,
        sort_by=sort_by,
        sort_type=sort_type,
        owner_id=user_id,
        page=page,
        limit=limit,
    )
    return api_response(videos, "Videos fetched successfully")


@videos_router.post("")
async def publish_a_video(
    title: str = Form(...),
    description: str = Form(...),
    video_file: Optional[UploadFile] = File(None, alias="videoFile"),
    thumbnail: Optional[UploadFile] = File(None),
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    media: MediaGateway = Depends(get_media_gateway),
):
    async with staged_upload(video_file) as video_path, staged_upload(thumbnail) as thumbnail_path:
        video = await VideoService(db, media).publish(
            current_user, title, description, video_path, thumbnail_path
        )
    return api_response(VideoResponse.model_validate(video), "Video published", status.HTTP_201_CREATED)


@videos_router.get("/{video_id}")
async def get_video_by_id(
    video_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    video = await ViewComposer(db).video_detail(video_id, current_user.id)
    return api_response(video, "Video details fetched successfully")


@videos_router.patch("/{video_id}")
async def update_video(
    video_id: UUID,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    media: MediaGateway = Depends(get_media_gateway),
):
    async with staged_upload(thumbnail) as thumbnail_path:
        video = await VideoService(db, media).update(
            current_user, video_id, title, description, thumbnail_path
        )
    return api_response(VideoResponse.model_validate(video), "Video details updated")


@videos_router.delete("/{video_id}")
async def delete_video(
    video_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    media: MediaGateway = Depends(get_media_gateway),
):
    video = await VideoService(db, media).delete(current_user, video_id)
    return api_response(VideoResponse.model_validate(video), "Video deleted successfully")


@videos_router.patch("/toggle/publish/{video_id}")
async def toggle_publish_status(
    video_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    video = await VideoService(db).toggle_publish(current_user, video_id)
    return api_response(
        PublishStatus(id=video.id, is_published=video.is_published), "Video publish status toggled"
    )
