from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.database import get_db
from vidtube.models.users import Users
from vidtube.schemas.comment import CommentRequest, CommentResponse
from vidtube.services.comment_service import CommentService
from vidtube.services.view_composer import ViewComposer
from vidtube.utils.responses import api_response
from vidtube.utils.security import get_current_user

comments_router = APIRouter()


@comments_router.get("/{video_id}")
async def get_video_comments(
    video_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    comments = await ViewComposer(db).video_comments(video_id, current_user.id, page, limit)
    return api_response(comments, "Comments fetched successfully")


@comments_router.post("/{video_id}")
async def add_comment(
    video_id: UUID,
    payload: CommentRequest,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    comment = await CommentService(db).add(current_user, video_id, payload.content)
    return api_response(CommentResponse.model_validate(comment), "Comment added successfully", status.HTTP_201_CREATED)


@comments_router.patch("/c/{comment_id}")
async def update_comment(
    comment_id: UUID,
    payload: CommentRequest,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    comment = await CommentService(db).update(current_user, comment_id, payload.content)
    return api_response(CommentResponse.model_validate(comment), "Comment updated successfully")


@comments_router.delete("/c/{comment_id}")
async def delete_comment(
    comment_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    comment = await CommentService(db).delete(current_user, comment_id)
    return api_response(CommentResponse.model_validate(comment), "Comment deleted successfully")
