# storefront/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./storefront.db"

    FRONTEND_URL: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    # Checkout pricing rules
    FREE_SHIPPING_THRESHOLD: float = 500.0
    FLAT_SHIPPING_COST: float = 15.0
    TAX_RATE: float = 0.10
    DEFAULT_COUNTRY: str = "INDONESIA"
    DEFAULT_SHIPPING_METHOD: str = "STANDARD"
    CURRENCY: str = "IDR"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()
