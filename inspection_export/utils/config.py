"""Configuration for the export engine"""
from typing import Dict, List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_prefix="EXPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Service info
    app_name: str = "Inspection Export"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # ========== Page layout ==========
    page_size: str = "letter"  # letter | a4
    page_margin: float = 72.0  # points, all four sides
    line_gap: float = 0.0      # extra points added to every line height

    # ========== Numbered lists ==========
    list_overflow_threshold: float = 600.0  # below the top margin
    list_top_of_page: float = 72.0          # absolute y after an overflow break
    list_number_x: float = 72.0
    list_text_x: float = 90.0

    # ========== Header imagery ==========
    header_image_height: float = 24.0
    header_image_offset: float = 10.0

    # ========== Fonts ==========
    font_dirs: List[str] = []
    extra_fonts: Dict[str, str] = {}  # registered name -> .ttf filename

    # ========== PDF metadata ==========
    document_title: str = "Inspection Summary"
    document_author: str = ""
    document_creator: str = "Inspection Export"

    # ========== Delivery ==========
    finalize_timeout_seconds: float = 30.0
    delivery_dir: Optional[str] = None

    # ========== Photo export ==========
    photo_batch_size: int = 150


settings = Settings()
