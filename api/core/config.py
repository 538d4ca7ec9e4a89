"""
Configuration settings for the FastAPI application
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "Cedora API"
    version: str = "1.0.0"
    environment: str = "development"
    debug: bool = True

    # CORS
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # Google AI Studio
    google_ai_api_key: str = ""
    google_ai_image_model: str = "gemini-2.5-flash-image"
    composition_timeout: int = 90  # seconds

    # Image encoding
    image_fetch_timeout: int = 30  # seconds
    jpeg_quality: int = 80

    # File upload
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    allowed_image_types: List[str] = ["image/jpeg", "image/png", "image/webp", "image/gif"]

    # Preview viewport
    preview_zoom_scale: float = 3.0
    pan_sensitivity: float = 0.8
    preview_max_pan: float = 200.0  # CSS px, before zoom scale

    # Staging sessions
    preview_session_ttl_minutes: int = 60

    # Result actions
    preview_filename_prefix: str = "cedora-preview"
    preview_download_dir: str = ""

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields from .env


# Global settings instance
settings = Settings()
