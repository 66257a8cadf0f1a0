from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """إعدادات خدمة التوقيع مع تحميل القيم من ملف .env عند توفره."""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "PDF Signature API"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    base_dir: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2])
    storage_dir: Optional[Path] = None
    public_dir: Optional[Path] = None
    outputs_dir: Optional[Path] = None

    allow_origins: list[str] = Field(default_factory=lambda: ["*"])
    allow_credentials: bool = False

    # معامل تصغير صور التواقيع قبل رسمها (0.2 افتراضيًا)
    signature_image_scale: float = Field(default=0.2, gt=0)
    default_font_name: str = "Helvetica"
    default_font_size: float = Field(default=12, gt=0)
    default_color: str = "#000000"
    signed_filename: str = "signed_document.pdf"

    document_ttl_hours: int = Field(default=24, ge=1)

    def configure_paths(self) -> None:
        """تهيئة المسارات الافتراضية وإنشاء المجلدات في حال غيابها."""
        self.storage_dir = (self.storage_dir or (self.base_dir / "outputs")).resolve()
        self.public_dir = (self.public_dir or (self.base_dir / "public")).resolve()
        self.outputs_dir = (self.outputs_dir or (self.storage_dir / "signed")).resolve()

        for directory in (self.storage_dir, self.outputs_dir, self.public_dir):
            directory.mkdir(parents=True, exist_ok=True)

        (self.public_dir / "downloads").mkdir(parents=True, exist_ok=True)


@lru_cache()
def get_settings() -> Settings:
    settings = Settings()
    settings.configure_paths()
    return settings
