from typing import Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.errors import Conflict, Internal, InvalidInput
from vidtube.models.users import Users
from vidtube.services.media_service import MediaGateway, discard_media


class UserService:
    def __init__(self, db: AsyncSession, media: Optional[MediaGateway] = None):
        self.db = db
        self.media = media

    async def update_account(self, user: Users, full_name: str, email: str) -> Users:
        if not (full_name or "").strip() or not (email or "").strip():
            raise InvalidInput("All fields are required")

        email = email.strip().lower()
        taken = await self.db.scalar(select(Users.id).where(Users.email == email, Users.id != user.id))
        if taken is not None:
            raise Conflict("Email is already in use")

        user_id = user.id
        user.full_name = full_name.strip()
        user.email = email
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise Conflict("Email is already in use")

        await self.db.refresh(user)
        logger.info(f"Account details updated for user {user_id}")
        return user

    async def update_avatar(self, user: Users, avatar_path: Optional[str]) -> Users:
        return await self._replace_image(user, "avatar", avatar_path)

    async def update_cover_image(self, user: Users, cover_image_path: Optional[str]) -> Users:
        return await self._replace_image(user, "cover_image", cover_image_path)

    async def _replace_image(self, user: Users, field: str, local_path: Optional[str]) -> Users:
        label = field.replace("_", " ")
        if not local_path:
            raise InvalidInput(f"{label.capitalize()} is required")

        uploaded = await self.media.upload(local_path)
        if uploaded is None:
            raise Internal(f"Error while uploading {label}")

        previous = getattr(user, field)
        setattr(user, field, uploaded.url)
        await self.db.commit()
        await self.db.refresh(user)
        logger.info(f"Updated {label} for user {user.id}")

        await discard_media(self.media, previous)
        return user
