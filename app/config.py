"""
Application settings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List


class Settings(BaseSettings):
    # App
    PROJECT_NAME: str = "Shop Back-Office"
    VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"
    DEFAULT_CURRENCY: str = "USD"

    # Database
    DATABASE_URL: str = "sqlite:///./backoffice.db"

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # Expense buckets shown on the expenses screen
    EXPENSE_CATEGORIES: List[str] = ["Liiban", "Abdirazak", "MATO"]

    # Image bucket (served under MEDIA_URL)
    MEDIA_DIR: str = "media"
    MEDIA_URL: str = "/media"
    IMAGE_BUCKET: str = "product-images"
    MAX_UPLOAD_SIZE: int = 5242880  # 5MB
    ALLOWED_IMAGE_EXTENSIONS: List[str] = ["jpg", "jpeg", "png", "gif", "webp"]

    # Fetch limits per screen
    CREDITS_FETCH_LIMIT: int = 800
    SALES_FETCH_LIMIT: int = 800
    ORDERS_FETCH_LIMIT: int = 300
    MOVEMENTS_FETCH_LIMIT: int = 50
    CUSTOMERS_FETCH_LIMIT: int = 1000
    EXPENSES_FETCH_LIMIT: int = 500

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=True
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
