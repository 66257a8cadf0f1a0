from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from io import BytesIO
from typing import Tuple

from PIL import Image, UnidentifiedImageError
from reportlab.lib.utils import ImageReader

from pdfsign.core.errors import ImageDecodeError, InvalidNumericField, UnsupportedImageFormat

# بادئة data-URL -> الصيغة التي يجب أن يطابقها محتوى الصورة فعليًا
FORMAT_PREFIXES = (
    ("data:image/png", "PNG"),
    ("data:image/jpeg", "JPEG"),
    ("data:image/jpg", "JPEG"),
)


@dataclass
class DecodedImage:
    image_format: str
    width: int
    height: int
    reader: ImageReader

    def scale(self, factor: float) -> Tuple[float, float]:
        if factor <= 0:
            raise InvalidNumericField("scale", factor)
        return self.width * factor, self.height * factor


def detect_format(data_url: str) -> str:
    header = data_url.split(",", 1)[0].strip().lower()
    for prefix, image_format in FORMAT_PREFIXES:
        if header.startswith(prefix):
            return image_format
    raise UnsupportedImageFormat(header[5:].split(";", 1)[0] if header.startswith("data:") else header[:32])


def decode_image(data_url: str) -> DecodedImage:
    """
    فك ترميز صورة توقيع مرسلة بصيغة data:<mime>;base64,<payload>.

    يتم اختيار الصيغة من البادئة (PNG أو JPEG فقط)، ثم يتم التحقق من أن
    البيانات تمثل صورة صالحة من الصيغة المعلنة نفسها.
    """
    if not isinstance(data_url, str) or "," not in data_url:
        raise UnsupportedImageFormat("")

    image_format = detect_format(data_url)
    payload = data_url.split(",", 1)[1].strip()

    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImageDecodeError(f"base64 غير صالح ({exc})") from exc

    if not raw:
        raise ImageDecodeError("بيانات الصورة فارغة")

    try:
        image = Image.open(BytesIO(raw))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageDecodeError(str(exc)) from exc

    if image.format != image_format:
        raise ImageDecodeError(f"المحتوى من نوع {image.format} وليس {image_format}")

    width, height = image.size
    return DecodedImage(
        image_format=image_format,
        width=width,
        height=height,
        reader=ImageReader(image),
    )
