"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    api_version: str = "0.1.0"
    debug: bool = False

    # Database
    database_url: str = "postgresql+asyncpg://catalog:catalog_dev_password@db:5432/catalog"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Image storage
    image_storage_dir: str = "media/categories"
    image_base_url: str = "/media/categories"

    # Categories
    popular_categories_limit: int = 10
    slug_max_length: int = 100

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
