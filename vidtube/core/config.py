from typing import List, Optional
from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings
from enum import Enum

class BaseConfig(BaseSettings):
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name":True
    }

class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

class CompressionType(str, Enum):
    GZIP = "gz"
    BZIP2 = "bz2"
    ZIP = "zip"

class AppSettings(BaseSettings):
    app_name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        alias="APP_NAME"
    )
    app_port: int = Field(
        ...,
        ge=1,
        le=65535,
        alias="APP_PORT"
    )

    app_host: str = Field(default="0.0.0.0")
    app_reload: bool = Field(default=False)
    app_log_level: LogLevel = Field(default=LogLevel.INFO)
    api_prefix: str = Field(default="/api/v1", alias="API_PREFIX")
    cors_origins: List[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cookie_secure: bool = Field(default=True, alias="COOKIE_SECURE")
    upload_temp_dir: Optional[str] = Field(default=None, alias="UPLOAD_TEMP_DIR")
    log_format: str = Field(default="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}")
    log_file: str = Field(default="logs/app.log")
    log_rotation: str = Field(default="1 day")
    log_compression: CompressionType = Field(default=CompressionType.GZIP)

    model_config = BaseConfig.model_config

class DatabaseSettings(BaseSettings):
    postgres_user: str = Field(default="postgres", min_length=1, alias="POSTGRES_USER")
    postgres_password: str = Field(default="postgres", min_length=1, alias="POSTGRES_PASSWORD")
    postgres_db: str = Field(default="vidtube", min_length=1, alias="POSTGRES_DB")
    postgres_host: str = Field(default="localhost", alias="POSTGRES_HOST")
    postgres_port: int = Field(default=5432, ge=1, le=65535, alias="POSTGRES_PORT")
    database_url_override: Optional[str] = Field(default=None, alias="DATABASE_URL")
    debug_sql: bool = Field(default=False, alias="DB_ECHO")
    create_tables: bool = Field(default=False, alias="DB_CREATE_TABLES")

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    model_config = BaseConfig.model_config


class JWTSettings(BaseSettings):
    secret_key: str = Field(..., min_length=32, alias="SECRET_KEY")
    refresh_token_secret_key: str = Field(..., min_length=32, alias="REFRESH_TOKEN_SECRET_KEY")
    algorithm: str = Field(default="HS256", alias="ALGORITHM")
    access_token_expire_minutes: int = Field(..., alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    refresh_token_expire_minutes: int = Field(..., alias="REFRESH_TOKEN_EXPIRE_MINUTES")

    model_config = BaseConfig.model_config


class CloudinarySettings(BaseSettings):
    cloud_name: str = Field(..., min_length=1, alias="CLOUDINARY_CLOUD_NAME")
    api_key: str = Field(..., min_length=1, alias="CLOUDINARY_API_KEY")
    api_secret: str = Field(..., min_length=1, alias="CLOUDINARY_API_SECRET")
    api_url: HttpUrl = Field(default="https://api.cloudinary.com", alias="CLOUDINARY_API_URL")
    folder: Optional[str] = Field(default=None, alias="CLOUDINARY_FOLDER")
    timeout: float = Field(default=120.0, gt=0, alias="CLOUDINARY_TIMEOUT")

    model_config = BaseConfig.model_config
