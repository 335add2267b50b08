# export_urls/core/config.py
from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache
from typing import List, Optional, Union
import os

class Settings(BaseSettings):
    # —–– Base de données
    DATABASE_URL: str = Field("sqlite:///./data/site.db", env="DATABASE_URL")

    # —–– Authentification
    JWT_SECRET_KEY: str = Field(..., env="JWT_SECRET_KEY")
    JWT_ALGORITHM: str = Field("HS256", env="JWT_ALGORITHM")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60, env="ACCESS_TOKEN_EXPIRE_MINUTES")
    REFRESH_TOKEN_EXPIRE_MINUTES: int = Field(1440, env="REFRESH_TOKEN_EXPIRE_MINUTES")
    NONCE_EXPIRE_MINUTES: int = Field(1440, env="NONCE_EXPIRE_MINUTES")

    # —–– CORS
    CORS_ORIGINS: Union[str, List[str]] = Field(default="*", env="CORS_ORIGINS")

    # —–– Site
    SITE_URL: str = Field("http://localhost:8000", env="SITE_URL")
    CONTENT_DIR: str = Field("data/content", env="CONTENT_DIR")
    UPLOADS_DIR: Optional[str] = Field(None, env="UPLOADS_DIR")
    UPLOADS_URL: Optional[str] = Field(None, env="UPLOADS_URL")
    DEBUG_LOG_NAME: str = Field("export-debug.log", env="DEBUG_LOG_NAME")

    # —–– Export
    EXPORT_MAX_ROWS: Optional[int] = Field(None, env="EXPORT_MAX_ROWS")
    EXPORT_SOFT_TIMEOUT: int = Field(300, env="EXPORT_SOFT_TIMEOUT")
    EXPORT_SCRATCH_DIR: Optional[str] = Field(None, env="EXPORT_SCRATCH_DIR")

    # —–– Fuseau horaire
    TIME_ZONE: str = Field("UTC", env="TIME_ZONE")

    class Config:
        case_sensitive = True
        env_file = ".env"
        env_file_encoding = "utf-8"

    def cors_list(self) -> List[str]:
        if isinstance(self.CORS_ORIGINS, list):
            return self.CORS_ORIGINS
        return [origin.strip() for origin in str(self.CORS_ORIGINS).split(",") if origin.strip()]

    def site_url(self) -> str:
        return self.SITE_URL.rstrip("/")

    def uploads_dir(self) -> str:
        return self.UPLOADS_DIR or os.path.join(self.CONTENT_DIR, "uploads")

    def uploads_url(self) -> str:
        if self.UPLOADS_URL:
            return self.UPLOADS_URL.rstrip("/")
        return f"{self.site_url()}/content/uploads"

    def debug_log_path(self) -> str:
        return os.path.join(self.CONTENT_DIR, self.DEBUG_LOG_NAME)


@lru_cache
def get_settings():
    return Settings()

settings = get_settings()
