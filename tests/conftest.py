import os
import tempfile
from pathlib import Path

os.environ.setdefault("APP_NAME", "VidTube Test")
os.environ.setdefault("APP_PORT", "8000")
os.environ.setdefault("COOKIE_SECURE", "false")
os.environ.setdefault("LOG_FILE", str(Path(tempfile.gettempdir()) / "vidtube-tests.log"))
os.environ.setdefault("SECRET_KEY", "test-access-token-secret-0123456789abcdef")
os.environ.setdefault("REFRESH_TOKEN_SECRET_KEY", "test-refresh-token-secret-0123456789abcdef")
os.environ.setdefault("ACCESS_TOKEN_EXPIRE_MINUTES", "15")
os.environ.setdefault("REFRESH_TOKEN_EXPIRE_MINUTES", "1440")
os.environ.setdefault("CLOUDINARY_CLOUD_NAME", "test-cloud")
os.environ.setdefault("CLOUDINARY_API_KEY", "test-key")
os.environ.setdefault("CLOUDINARY_API_SECRET", "test-secret")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from vidtube.db.database import get_db, init_models
from vidtube.main import app
from vidtube.models.comments import Comment
from vidtube.models.playlists import Playlist, PlaylistVideo
from vidtube.models.tweets import Tweet
from vidtube.models.users import Users
from vidtube.models.videos import Video
from vidtube.services.media_service import MediaGatewayError, UploadedMedia, get_media_gateway
from vidtube.utils.security import hash_password


class FakeMediaGateway:
    def __init__(self):
        self.staged_paths = []
        self.uploaded = []
        self.deleted = []
        self.fail_uploads = False
        self.fail_deletes = False

    async def upload(self, local_path):
        if not local_path:
            return None
        path = Path(local_path)
        self.staged_paths.append(path)
        content = path.read_bytes()
        if self.fail_uploads:
            return None

        number = len(self.uploaded)
        kind = "video" if path.suffix == ".mp4" else "image"
        self.uploaded.append(content)
        return UploadedMedia(
            url=f"https://res.cloudinary.com/test-cloud/{kind}/upload/v1/vidtube/file{number}{path.suffix}",
            public_id=f"vidtube/file{number}",
            resource_type=kind,
            duration=42.5 if kind == "video" else None,
        )

    async def delete(self, url, kind="image"):
        if self.fail_deletes:
            raise MediaGatewayError(f"cannot delete {url}")
        self.deleted.append((url, kind))
        return True


class Factory:
    def __init__(self, db: AsyncSession):
        self.db = db
        self._counter = 0

    async def _save(self, entity):
        self.db.add(entity)
        await self.db.commit()
        await self.db.refresh(entity)
        return entity

    async def user(self, username=None, password="secret-password"):
        self._counter += 1
        username = username or f"user{self._counter}"
        return await self._save(
            Users(
                username=username.lower(),
                email=f"{username.lower()}@example.com",
                full_name=f"{username.title()} Tester",
                avatar=f"https://res.cloudinary.com/test-cloud/image/upload/v1/{username}.png",
                cover_image="",
                password_hash=hash_password(password),
            )
        )

    async def video(self, owner, title="Video", description="About it", views=0, is_published=True):
        return await self._save(
            Video(
                owner_id=owner.id,
                video_file="https://res.cloudinary.com/test-cloud/video/upload/v1/clip.mp4",
                thumbnail="https://res.cloudinary.com/test-cloud/image/upload/v1/thumb.png",
                title=title,
                description=description,
                duration=10,
                views=views,
                is_published=is_published,
            )
        )

    async def tweet(self, owner, content="hello"):
        return await self._save(Tweet(owner_id=owner.id, content=content))

    async def comment(self, owner, video, content="nice"):
        return await self._save(Comment(owner_id=owner.id, video_id=video.id, content=content))

    async def playlist(self, owner, name="Favourites", videos=()):
        playlist = await self._save(Playlist(owner_id=owner.id, name=name, description=""))
        for video in videos:
            self.db.add(PlaylistVideo(playlist_id=playlist.id, video_id=video.id))
        await self.db.commit()
        return playlist


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'vidtube.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def sessionmaker(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(sessionmaker):
    async with sessionmaker() as session:
        yield session


@pytest.fixture
def factory(db):
    return Factory(db)


@pytest.fixture
async def strict_db(tmp_path):
    """Session on a database that enforces foreign keys."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'strict.db'}")

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    await init_models(engine)
    async with async_sessionmaker(bind=engine, expire_on_commit=False)() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def strict_factory(strict_db):
    return Factory(strict_db)


@pytest.fixture
def media():
    return FakeMediaGateway()


@pytest.fixture
async def client(sessionmaker, media):
    async def override_get_db():
        async with sessionmaker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_gateway] = lambda: media
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    async def _register(username, password="secret-password", email=None):
        response = await client.post(
            "/api/v1/users/register",
            data={
                "fullName": f"{username.title()} Tester",
                "email": email or f"{username}@example.com",
                "username": username,
                "password": password,
            },
            files={"avatar": ("avatar.png", b"png-bytes", "image/png")},
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _register


@pytest.fixture
def login(client):
    async def _login(username, password="secret-password"):
        response = await client.post(
            "/api/v1/users/login", json={"username": username, "password": password}
        )
        assert response.status_code == 200, response.text
        data = response.json()["data"]
        client.cookies.clear()
        return {"Authorization": f"Bearer {data['accessToken']}"}, data

    return _login
