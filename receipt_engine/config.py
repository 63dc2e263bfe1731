from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    APP_NAME: str = "ReceiptEngine"
    LOG_LEVEL: str = "INFO"

    # Scan windows
    DATE_SCAN_LINES: int = Field(default=15, ge=0)
    MERCHANT_SCAN_LINES: int = Field(default=5, ge=0)

    # Merchant heuristics
    MERCHANT_MIN_ALPHA_RATIO: float = Field(default=0.6, ge=0, le=1)

    # Limits
    MAX_ITEMS: int = Field(default=10, ge=0)
    REVIEW_CANDIDATES: int = Field(default=3, ge=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="RECEIPT_",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
