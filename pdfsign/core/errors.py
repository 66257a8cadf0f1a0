from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import status


class SigningError(Exception):
    """الخطأ الأساسي لكل إخفاقات محرك التوقيع."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


class MalformedDocument(SigningError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, reason: str) -> None:
        super().__init__(f"تعذرت قراءة ملف PDF: {reason}")
        self.reason = reason


class PageOutOfBounds(SigningError):
    def __init__(self, page_number: int, page_count: int) -> None:
        super().__init__(
            f"Page number {page_number} is out of bounds. PDF has {page_count} pages."
        )
        self.page_number = page_number
        self.page_count = page_count

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"page_number": self.page_number, "page_count": self.page_count})
        return data


class UnsupportedImageFormat(SigningError):
    def __init__(self, mime: str) -> None:
        super().__init__(
            f"صيغة الصورة غير مدعومة ({mime or 'غير معروفة'}). الصيغ المدعومة: PNG و JPEG."
        )
        self.mime = mime


class ImageDecodeError(SigningError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"تعذر فك ترميز صورة التوقيع: {reason}")
        self.reason = reason


class InvalidColorFormat(SigningError):
    def __init__(self, value: Any) -> None:
        super().__init__(f"صيغة اللون غير صالحة: {value!r} (المتوقع #RRGGBB).")
        self.value = value


class InvalidNumericField(SigningError):
    def __init__(self, field: str, value: Any) -> None:
        super().__init__(f"قيمة الحقل '{field}' ليست رقمًا صالحًا: {value!r}")
        self.field = field
        self.value = value

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["field"] = self.field
        return data


class UnencodableText(SigningError):
    def __init__(self, text: str, font_name: str, characters: str) -> None:
        super().__init__(
            f"لا يمكن رسم الأحرف {characters!r} بالخط {font_name}. استخدم صورة توقيع لهذه النصوص."
        )
        self.text = text
        self.font_name = font_name
        self.characters = characters

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"font": self.font_name, "characters": self.characters})
        return data


class NoSignaturesProvided(SigningError):
    def __init__(self) -> None:
        super().__init__("No signatures provided")


class UnknownSignatureType(SigningError):
    def __init__(self, signature_type: Optional[str]) -> None:
        super().__init__(f"Unknown signature type: {signature_type}")
        self.signature_type = signature_type


class SignatureApplicationError(SigningError):
    """تغليف خطأ إحدى خطوات الدفعة مع رقم التوقيع (يبدأ من 1)."""

    def __init__(self, position: int, cause: SigningError) -> None:
        super().__init__(f"Failed to apply signature {position}: {cause.message}")
        self.position = position
        self.cause = cause
        self.status_code = cause.status_code

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "message": self.message,
            "position": self.position,
            "cause": self.cause.to_dict(),
        }
