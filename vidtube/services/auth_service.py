from typing import Optional, Tuple
from uuid import UUID

from loguru import logger
from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.errors import Conflict, Internal, InvalidInput, NotFound, Unauthorized
from vidtube.models.users import Users
from vidtube.services.media_service import MediaGateway, discard_media
from vidtube.utils.security import (
    create_access_token,
    create_refresh_token,
    decode_token_subject,
    hash_password,
    verify_password,
)


class AuthService:
    def __init__(self, db: AsyncSession, media: Optional[MediaGateway] = None):
        self.db = db
        self.media = media

    async def _find_by_login(self, username: Optional[str], email: Optional[str]) -> Optional[Users]:
        clauses = []
        if username:
            clauses.append(Users.username == username.strip().lower())
        if email:
            clauses.append(Users.email == email.strip().lower())
        result = await self.db.execute(select(Users).where(or_(*clauses)))
        return result.scalars().first()

    async def register(
        self,
        full_name: str,
        email: str,
        username: str,
        password: str,
        avatar_path: Optional[str],
        cover_image_path: Optional[str] = None,
    ) -> Users:
        if any(not (field or "").strip() for field in (full_name, email, username, password)):
            raise InvalidInput("All fields are required")
        if not avatar_path:
            raise InvalidInput("Avatar is required")

        username = username.strip().lower()
        email = email.strip().lower()

        if await self._find_by_login(username, email) is not None:
            raise Conflict("User with email or username already exists")

        avatar = await self.media.upload(avatar_path)
        if avatar is None:
            raise Internal("Error while uploading avatar")
        cover_image = await self.media.upload(cover_image_path) if cover_image_path else None

        user = Users(
            full_name=full_name.strip(),
            email=email,
            username=username,
            password_hash=hash_password(password),
            avatar=avatar.url,
            cover_image=cover_image.url if cover_image else "",
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            await discard_media(self.media, avatar.url)
            if cover_image:
                await discard_media(self.media, cover_image.url)
            raise Conflict("User with email or username already exists")

        await self.db.refresh(user)
        logger.info(f"Registered user {user.id} ({user.username})")
        return user

    async def issue_tokens(self, user: Users) -> Tuple[str, str]:
        access_token = await create_access_token(user)
        refresh_token = await create_refresh_token(user)

        user.refresh_token = refresh_token
        await self.db.commit()

        return access_token, refresh_token

    async def login(self, username: Optional[str], email: Optional[str], password: str) -> Tuple[Users, str, str]:
        if not ((username or "").strip() or (email or "").strip()):
            raise InvalidInput("Username or email is required")

        user = await self._find_by_login(username, email)
        if user is None:
            raise NotFound("User does not exist")

        if not verify_password(password, user.password_hash):
            raise Unauthorized("Invalid user credentials")

        access_token, refresh_token = await self.issue_tokens(user)
        logger.info(f"User {user.id} logged in")
        return user, access_token, refresh_token

    async def logout(self, user_id: UUID) -> None:
        await self.db.execute(update(Users).where(Users.id == user_id).values(refresh_token=None))
        await self.db.commit()
        logger.info(f"User {user_id} logged out")

    async def refresh(self, incoming_refresh_token: Optional[str]) -> Tuple[str, str]:
        if not incoming_refresh_token:
            raise Unauthorized("Unauthorized request")

        user_id = await decode_token_subject(incoming_refresh_token, "refresh")

        user = await self.db.get(Users, user_id, populate_existing=True)
        if user is None:
            raise Unauthorized("Invalid refresh token")

        access_token = await create_access_token(user)
        refresh_token = await create_refresh_token(user)

        # compare-and-swap so a token can be rotated only once
        result = await self.db.execute(
            update(Users)
            .where(Users.id == user_id, Users.refresh_token == incoming_refresh_token)
            .values(refresh_token=refresh_token)
        )
        if result.rowcount != 1:
            await self.db.rollback()
            logger.warning(f"Rejected stale refresh token for user {user_id}")
            raise Unauthorized("Refresh token is expired or used")

        await self.db.commit()
        return access_token, refresh_token

    async def change_password(self, user: Users, old_password: str, new_password: str) -> None:
        if not verify_password(old_password, user.password_hash):
            raise InvalidInput("Invalid old password")
        if not new_password.strip():
            raise InvalidInput("New password is required")

        user.password_hash = hash_password(new_password)
        await self.db.commit()
        logger.info(f"Password changed for user {user.id}")
