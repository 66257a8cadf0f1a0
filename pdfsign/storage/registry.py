from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional, Sequence
from uuid import uuid4

from fastapi import HTTPException, status

from pdfsign.core.config import get_settings
from pdfsign.models.signature import SignatureRequest


@dataclass
class AppliedSignature:
    type: str
    page_number: int
    x: float
    y: float
    data: str
    font: Optional[str] = None
    font_size: Optional[float] = None
    color: Optional[str] = None
    applied_at: datetime = field(default_factory=datetime.utcnow)

    @classmethod
    def from_request(cls, request: SignatureRequest, applied_at: datetime) -> "AppliedSignature":
        return cls(
            type=request.type,
            page_number=request.page_number,
            x=request.x,
            y=request.y,
            data=request.data,
            font=request.font,
            font_size=request.font_size,
            color=request.color,
            applied_at=applied_at,
        )

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "pageNumber": self.page_number,
            "x": self.x,
            "y": self.y,
            "font": self.font,
            "fontSize": self.font_size,
            "color": self.color,
            "appliedAt": self.applied_at.isoformat() + "Z",
        }


@dataclass
class PersistedDocument:
    document_id: str
    filename: str
    original_path: Path
    page_count: int
    uploaded_at: datetime
    signed_path: Optional[Path] = None
    signed_at: Optional[datetime] = None
    signatures: List[AppliedSignature] = field(default_factory=list)

    def to_card(self, preview: Optional[str] = None) -> dict:
        card: dict = {
            "document_id": self.document_id,
            "filename": self.filename,
            "page_count": self.page_count,
            "uploaded_at": self.uploaded_at.isoformat() + "Z",
            "signed": self.signed_path is not None,
            "signatures": [signature.to_dict() for signature in self.signatures],
        }
        if self.signed_at is not None:
            card["signed_at"] = self.signed_at.isoformat() + "Z"
        if preview:
            card["preview"] = preview
        return card


_registry: Dict[str, PersistedDocument] = {}
_lock = threading.Lock()


def _ttl() -> timedelta:
    return timedelta(hours=get_settings().document_ttl_hours)


def register_document(path: Path, filename: str, page_count: int) -> PersistedDocument:
    """تسجيل ملف أصلي مرفوع وإرجاع سجله."""
    entry = PersistedDocument(
        document_id=uuid4().hex,
        filename=filename or path.name,
        original_path=path,
        page_count=page_count,
        uploaded_at=datetime.utcnow(),
    )
    with _lock:
        _cleanup_locked()
        _registry[entry.document_id] = entry
    return entry


def get_document(document_id: str) -> PersistedDocument:
    with _lock:
        _cleanup_locked()
        entry = _registry.get(document_id)
        if not entry:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="المعرف المطلوب غير موجود أو انتهت صلاحيته.",
            )
        if not entry.original_path.exists():
            _registry.pop(document_id, None)
            raise HTTPException(
                status_code=status.HTTP_410_GONE,
                detail="الملف لم يعد متاحًا على الخادم.",
            )
        return entry


def mark_signed(
    document_id: str,
    signed_path: Path,
    requests: Sequence[SignatureRequest],
) -> PersistedDocument:
    """تسجيل مسار الملف الموقع والتواقيع المطبقة عليه."""
    entry = get_document(document_id)
    signed_at = datetime.utcnow()
    with _lock:
        entry.signed_path = signed_path
        entry.signed_at = signed_at
        entry.signatures.extend(AppliedSignature.from_request(request, signed_at) for request in requests)
    return entry


def list_documents() -> List[PersistedDocument]:
    with _lock:
        _cleanup_locked()
        return sorted(_registry.values(), key=lambda entry: entry.uploaded_at)


def unregister_document(document_id: str) -> None:
    with _lock:
        _registry.pop(document_id, None)


def _cleanup_locked() -> None:
    """حذف السجلات المنتهية الصلاحية وفق مدة الاحتفاظ المحددة."""
    now = datetime.utcnow()
    ttl = _ttl()
    expired = [document_id for document_id, entry in _registry.items() if now - entry.uploaded_at > ttl]
    for document_id in expired:
        _registry.pop(document_id, None)
