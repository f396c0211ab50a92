from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from fastapi import Depends
from fastapi.security import APIKeyCookie, APIKeyHeader
import jwt
from loguru import logger
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from vidtube.core.config import JWTSettings
from vidtube.core.errors import Unauthorized
from vidtube.db.database import get_db
from vidtube.models.users import Users

auth_scheme = APIKeyHeader(name="Authorization", scheme_name="Bearer", auto_error=False)
cookie_scheme = APIKeyCookie(name="accessToken", scheme_name="AccessTokenCookie", auto_error=False)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

jwt_settings = JWTSettings()


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def _encode(payload: Dict[str, Any], secret_key: str, minutes: int, token_type: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    to_encode = dict(payload)
    # jti keeps tokens issued within the same second distinct
    to_encode.update({"exp": expire, "type": token_type, "jti": uuid4().hex})
    return jwt.encode(to_encode, secret_key, algorithm=jwt_settings.algorithm)

async def create_access_token(user: Users) -> str:
    return _encode(
        {"id": str(user.id), "username": user.username, "email": user.email},
        jwt_settings.secret_key,
        jwt_settings.access_token_expire_minutes,
        "access",
    )

async def create_refresh_token(user: Users) -> str:
    return _encode(
        {"id": str(user.id)},
        jwt_settings.refresh_token_secret_key,
        jwt_settings.refresh_token_expire_minutes,
        "refresh",
    )

async def verify_token(token: str, secret_key: str, algorithm: str) -> Dict[str, Any]:
    try:
        payload = jwt.decode(token, secret_key, algorithms=[algorithm])
        return payload
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token has expired")
    except jwt.InvalidTokenError:
        raise Unauthorized("Could not validate credentials")

async def decode_token_subject(token: str, token_type: str) -> UUID:
    secret_key = (
        jwt_settings.refresh_token_secret_key if token_type == "refresh" else jwt_settings.secret_key
    )
    payload = await verify_token(token, secret_key, jwt_settings.algorithm)
    if payload.get("type") != token_type:
        raise Unauthorized("Invalid token type")
    try:
        return UUID(str(payload.get("id")))
    except (ValueError, TypeError):
        raise Unauthorized("Invalid token payload")


def _pick_token(cookie_token: Optional[str], header_token: Optional[str]) -> Optional[str]:
    if header_token:
        if header_token.startswith("Bearer "):
            return header_token[7:]
        return header_token
    return cookie_token or None

async def _resolve_user(token: str, db: AsyncSession) -> Users:
    user_id = await decode_token_subject(token, "access")

    result = await db.execute(select(Users).where(Users.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        logger.warning(f"Access token for unknown user {user_id}")
        raise Unauthorized("Invalid access token")

    return user

async def get_current_user(
    cookie_token: Optional[str] = Depends(cookie_scheme),
    header_token: Optional[str] = Depends(auth_scheme),
    db: AsyncSession = Depends(get_db),
) -> Users:
    token = _pick_token(cookie_token, header_token)
    if not token:
        raise Unauthorized("Unauthorized request")
    return await _resolve_user(token, db)

async def get_optional_user(
    cookie_token: Optional[str] = Depends(cookie_scheme),
    header_token: Optional[str] = Depends(auth_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[Users]:
    token = _pick_token(cookie_token, header_token)
    if not token:
        return None
    return await _resolve_user(token, db)
