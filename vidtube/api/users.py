from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import JSONResponse
from pydantic import EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.config import AppSettings
from vidtube.db.database import get_db
from vidtube.models.users import Users
from vidtube.schemas.token import RefreshTokenRequest, TokenPair
from vidtube.schemas.user import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    UpdateAccountRequest,
    UserResponse,
)
from vidtube.services.auth_service import AuthService
from vidtube.services.media_service import MediaGateway, get_media_gateway
from vidtube.services.user_service import UserService
from vidtube.services.view_composer import ViewComposer
from vidtube.utils.responses import api_response
from vidtube.utils.security import get_current_user, get_optional_user
from vidtube.utils.uploads import staged_upload

users_router = APIRouter()


def _set_token_cookies(response: JSONResponse, access_token: str, refresh_token: str) -> JSONResponse:
    secure = AppSettings().cookie_secure
    response.set_cookie("accessToken", access_token, httponly=True, secure=secure)
    response.set_cookie("refreshToken", refresh_token, httponly=True, secure=secure)
    return response


@users_router.post("/register")
async def register_user(
    full_name: str = Form(..., alias="fullName"),
    email: EmailStr = Form(...),
    username: str = Form(...),
    password: str = Form(...),
    avatar: Optional[UploadFile] = File(None),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    db: AsyncSession = Depends(get_db),
    media: MediaGateway = Depends(get_media_gateway),
):
    async with staged_upload(avatar) as avatar_path, staged_upload(cover_image) as cover_image_path:
        user = await AuthService(db, media).register(
            full_name=full_name,
            email=email,
            username=username,
            password=password,
            avatar_path=avatar_path,
            cover_image_path=cover_image_path,
        )
    return api_response(
        UserResponse.model_validate(user), "User registered successfully", status.HTTP_201_CREATED
    )


@users_router.post("/login")
async def login_user(payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    user, access_token, refresh_token = await AuthService(db).login(
        payload.username, payload.email, payload.password
    )
    body = LoginResponse(
        user=UserResponse.model_validate(user),
        access_token=access_token,
        refresh_token=refresh_token,
    )
    response = api_response(body, "User logged in successfully")
    return _set_token_cookies(response, access_token, refresh_token)


@users_router.post("/logout")
async def logout_user(
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await AuthService(db).logout(current_user.id)
    response = api_response({}, "User logged out successfully")
    response.delete_cookie("accessToken")
    response.delete_cookie("refreshToken")
    return response


@users_router.post("/refresh-token")
async def refresh_access_token(
    request: Request,
    payload: Optional[RefreshTokenRequest] = None,
    db: AsyncSession = Depends(get_db),
):
    incoming = (payload.refresh_token if payload else None) or request.cookies.get("refreshToken")
    access_token, refresh_token = await AuthService(db).refresh(incoming)
    response = api_response(
        TokenPair(access_token=access_token, refresh_token=refresh_token), "Access token refreshed"
    )
    return _set_token_cookies(response, access_token, refresh_token)


@users_router.post("/change-password")
async def change_current_password(
    payload: ChangePasswordRequest,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await AuthService(db).change_password(current_user, payload.old_password, payload.new_password)
    return api_response({}, "Password changed successfully")


@users_router.get("/current-user")
async def get_current_user_details(current_user: Users = Depends(get_current_user)):
    return api_response(UserResponse.model_validate(current_user), "User fetched successfully")


@users_router.patch("/update-account")
async def update_account_details(
    payload: UpdateAccountRequest,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await UserService(db).update_account(current_user, payload.full_name, payload.email)
    return api_response(UserResponse.model_validate(user), "Account details updated successfully")


@users_router.patch("/avatar")
async def update_user_avatar(
    avatar: Optional[UploadFile] = File(None),
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    media: MediaGateway = Depends(get_media_gateway),
):
    async with staged_upload(avatar) as avatar_path:
        user = await UserService(db, media).update_avatar(current_user, avatar_path)
    return api_response(UserResponse.model_validate(user), "Avatar updated successfully")


@users_router.patch("/cover-image")
async def update_user_cover_image(
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    media: MediaGateway = Depends(get_media_gateway),
):
    async with staged_upload(cover_image) as cover_image_path:
        user = await UserService(db, media).update_cover_image(current_user, cover_image_path)
    return api_response(UserResponse.model_validate(user), "Cover image updated successfully")


@users_router.get("/c/{username}")
async def get_user_channel_profile(
    username: str,
    viewer: Optional[Users] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    profile = await ViewComposer(db).channel_profile(username, viewer.id if viewer else None)
    return api_response(profile, "Channel fetched successfully")


@users_router.get("/history")
async def get_watch_history(
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    history = await ViewComposer(db).watch_history(current_user.id)
    return api_response(history, "Watch history fetched successfully")
