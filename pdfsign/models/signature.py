from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SignatureType(str, Enum):
    image = "image"
    text = "text"


class SignatureRequest(BaseModel):
    """طلب توقيع واحد (صورة أو نص) غير قابل للتعديل بعد إنشائه."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, allow_inf_nan=False)

    type: str = Field(..., description="نوع التوقيع (image | text).")
    data: str = Field(..., description="رابط data-URL للصورة أو نص التوقيع.")
    x: float = Field(..., description="الإحداثي الأفقي (من أسفل يسار الصفحة).")
    y: float = Field(..., description="الإحداثي العمودي (من أسفل يسار الصفحة).")
    page_number: int = Field(..., alias="pageNumber", description="رقم الصفحة (يبدأ من 1).")
    font: Optional[str] = Field(default=None, description="اسم الخط للتواقيع النصية.")
    font_size: Optional[float] = Field(default=None, alias="fontSize", gt=0, description="حجم الخط.")
    color: Optional[str] = Field(default=None, description="لون النص بصيغة #RRGGBB.")
    scale: Optional[float] = Field(default=None, gt=0, description="معامل تصغير الصورة (اختياري).")

    @property
    def signature_type(self) -> Optional[SignatureType]:
        try:
            return SignatureType((self.type or "").strip().lower())
        except ValueError:
            return None

