# app/core/config.py
import os
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).parent.parent.parent

class Settings(BaseSettings):
    app_name: str = "PDF Text Extractor Pro"
    env: str = "local"

    # =========================
    # OCR (Gemini)
    # =========================
    GEMINI_API_KEY: str | None = None  # missing key -> simulated OCR
    GEMINI_MODEL: str = "gemini-2.5-flash"
    OCR_TIMEOUT_SECONDS: int = 60
    OCR_MAX_CONCURRENCY: int = 0  # 0 = one request per image page, no cap

    # =========================
    # Extraction
    # =========================
    RENDER_DPI: int = 300
    TEXT_MIN_CHARS: int = 20
    MAX_UPLOAD_BYTES: int = 200 * 1024 * 1024

    # Comma separated, e.g. "http://localhost:3000,https://app.example.com"
    CORS_ALLOW_ORIGINS: str | None = None

    model_config = SettingsConfigDict(
        env_file=os.path.join(PROJECT_ROOT, ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

settings = Settings()
