from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Literal


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # App
    APP_NAME: str = "BillParser"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000"]

    # Parser
    DEFAULT_CURRENCY: str = "INR"
    MERCHANT_SCAN_LINES: int = 6
    TOTAL_TAIL_LINES: int = 20
    ITEM_NAME_MAX_LENGTH: int = 120
    TOTAL_SELECTION: Literal["max", "last"] = "max"

    # OCR
    TESSERACT_CMD: str = "tesseract"
    MAX_PDF_PAGES: int = 20

    # Upload
    MAX_UPLOAD_MB: int = 10


settings = Settings()
