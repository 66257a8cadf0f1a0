import math
from typing import Optional

from fastapi import HTTPException, UploadFile, status

from pdfsign.core.errors import InvalidNumericField


def ensure_pdf(upload: UploadFile) -> None:
    """التحقق من أن الملف المرفوع هو PDF."""
    content_type = (upload.content_type or "").lower()
    if not content_type.endswith("pdf"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="يجب أن يكون الملف من نوع PDF.",
        )


def parse_float(field: str, value: Optional[str]) -> float:
    """تحويل قيمة نصية من النموذج إلى رقم عشري مع رفض القيم غير الرقمية."""
    if value is None or not str(value).strip():
        raise InvalidNumericField(field, value)
    try:
        number = float(str(value).strip())
    except ValueError as exc:
        raise InvalidNumericField(field, value) from exc
    if not math.isfinite(number):
        raise InvalidNumericField(field, value)
    return number


def parse_int(field: str, value: Optional[str]) -> int:
    number = parse_float(field, value)
    if not number.is_integer():
        raise InvalidNumericField(field, value)
    return int(number)


def parse_optional_float(field: str, value: Optional[str]) -> Optional[float]:
    if value is None or not str(value).strip():
        return None
    return parse_float(field, value)
