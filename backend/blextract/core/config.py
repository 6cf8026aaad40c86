from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # OCR (tesseract language codes joined with "+")
    OCR_LANGUAGES: str = "eng+fra"
    OCR_DPI: int = 300
    MAX_OCR_PAGES: int = 5
    TESSERACT_CMD: Optional[str] = None

    # Below this many non-whitespace characters a PDF is treated as scanned
    MIN_NATIVE_TEXT_CHARS: int = 50

    # Extraction defaults
    DEFAULT_CURRENCY: str = "USD"
    DEFAULT_CONTAINER_TYPE: str = "DRY_40HC"

    # Upload surface
    ALLOWED_MEDIA_TYPES: list[str] = [
        "application/pdf",
        "image/jpeg",
        "image/png",
        "image/webp",
    ]
    MAX_UPLOAD_BYTES: int = 15 * 1024 * 1024
    EXTRACTION_TIMEOUT_SECONDS: float = 120.0

    # Service
    SERVICE_NAME: str = "bl-extract"
    DEBUG: bool = False
    GCP_PROJECT_ID: Optional[str] = None
    PORT: int = 8080
    # Comma separated, added to the local dev origins
    ALLOWED_ORIGINS: str = ""

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


settings = Settings()
