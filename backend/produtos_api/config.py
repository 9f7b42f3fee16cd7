from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./produtos.db"

    # Application
    environment: str = "development"
    api_prefix: str = ""
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # Static files / uploaded images
    static_dir: str = "static"
    static_url: str = "/static"
    upload_subdir: str = "uploads/produtos"

    # Image processing
    max_image_bytes: int = 5 * 1024 * 1024  # 5MB
    image_size: int = 400  # Square output, in pixels
    jpeg_quality: int = 85

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    return Settings()
