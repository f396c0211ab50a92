from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.database import get_db
from vidtube.models.playlists import Playlist
from vidtube.models.users import Users
from vidtube.schemas.playlist import PlaylistCreate, PlaylistResponse, PlaylistUpdate
from vidtube.services.playlist_service import PlaylistService
from vidtube.services.view_composer import ViewComposer
from vidtube.utils.responses import api_response
from vidtube.utils.security import get_current_user

playlists_router = APIRouter()


async def _playlist_response(service: PlaylistService, playlist: Playlist) -> PlaylistResponse:
    return PlaylistResponse(
        id=playlist.id,
        owner_id=playlist.owner_id,
        name=playlist.name,
        description=playlist.description,
        videos=await service.video_ids(playlist.id),
        created_at=playlist.created_at,
        updated_at=playlist.updated_at,
    )


@playlists_router.post("")
async def create_playlist(
    payload: PlaylistCreate,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = PlaylistService(db)
    playlist = await service.create(current_user, payload.name, payload.description)
    return api_response(
        await _playlist_response(service, playlist), "Playlist created successfully", status.HTTP_201_CREATED
    )


@playlists_router.get("/user/{user_id}")
async def get_user_playlists(
    user_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    playlists = await ViewComposer(db).user_playlists(user_id)
    return api_response(playlists, "User playlists fetched successfully")


@playlists_router.get("/{playlist_id}")
async def get_playlist_by_id(
    playlist_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    playlist = await ViewComposer(db).playlist_detail(playlist_id)
    return api_response(playlist, "Playlist fetched successfully")


@playlists_router.patch("/add/{video_id}/{playlist_id}")
async def add_video_to_playlist(
    video_id: UUID,
    playlist_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = PlaylistService(db)
    playlist = await service.add_video(current_user, playlist_id, video_id)
    return api_response(await _playlist_response(service, playlist), "Added video to playlist successfully")


@playlists_router.patch("/remove/{video_id}/{playlist_id}")
async def remove_video_from_playlist(
    video_id: UUID,
    playlist_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = PlaylistService(db)
    playlist = await service.remove_video(current_user, playlist_id, video_id)
    return api_response(await _playlist_response(service, playlist), "Removed video from playlist successfully")


@playlists_router.patch("/{playlist_id}")
async def update_playlist(
    playlist_id: UUID,
    payload: PlaylistUpdate,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = PlaylistService(db)
    playlist = await service.update(current_user, playlist_id, payload.name, payload.description)
    return api_response(await _playlist_response(service, playlist), "Playlist updated successfully")


@playlists_router.delete("/{playlist_id}")
async def delete_playlist(
    playlist_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await PlaylistService(db).delete(current_user, playlist_id)
    return api_response({}, "Playlist deleted successfully")
