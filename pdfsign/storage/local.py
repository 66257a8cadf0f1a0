from pathlib import Path
from typing import Optional, Tuple
from uuid import uuid4

from pdfsign.core.config import get_settings


class LocalStorage:
    """تخزين محلي للملفات الأصلية والنسخ الموقعة القابلة للتنزيل."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        settings = get_settings()
        self.originals_dir = Path(base_dir or settings.storage_dir)
        self.signed_dir = settings.outputs_dir
        self.download_root = settings.public_dir / "downloads"

        for directory in (self.originals_dir, self.signed_dir, self.download_root):
            directory.mkdir(parents=True, exist_ok=True)

    def save_original(self, data: bytes) -> Path:
        target_path = self.originals_dir / f"{uuid4().hex}.pdf"
        target_path.write_bytes(data)
        return target_path

    def save_signed(self, data: bytes, document_filename: str) -> Tuple[Path, Path]:
        """
        حفظ النسخة الموقعة ونشرها للتنزيل باسم مشتق من اسم الملف الأصلي.

        يعيد (مسار النسخة الداخلية، مسار نسخة التنزيل العامة).
        """
        stem = Path(document_filename or "document").stem or "document"
        signed_path = self.signed_dir / f"{stem}_{uuid4().hex[:8]}_signed.pdf"
        signed_path.write_bytes(data)

        public_path = self.download_root / f"{stem}_signed.pdf"
        if public_path.exists():
            public_path = self.download_root / f"{stem}_signed-{uuid4().hex[:6]}.pdf"
        public_path.write_bytes(data)
        return signed_path, public_path

    @staticmethod
    def read_bytes(path: Path) -> bytes:
        return Path(path).read_bytes()
