from __future__ import annotations

import string
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from reportlab.lib.colors import Color
from reportlab.pdfbase import pdfmetrics

from pdfsign.core.errors import InvalidColorFormat, UnencodableText
from pdfsign.core.logging import configure_logging

logger = configure_logging()

FALLBACK_FONT = "Helvetica"

# ترميزات ReportLab للخطوط القياسية -> ترميز بايثون المقابل
ENCODING_CODECS = {
    "WinAnsiEncoding": "cp1252",
    "MacRomanEncoding": "mac_roman",
}


@dataclass(frozen=True)
class EmbeddableFont:
    name: str
    requested: Optional[str]
    is_fallback: bool = False


@dataclass(frozen=True)
class RGB:
    red: float
    green: float
    blue: float

    def to_color(self) -> Color:
        return Color(self.red, self.green, self.blue)


def _standard_font(name: str) -> Callable[[], str]:
    def factory() -> str:
        # يرفع KeyError إن لم يكن الخط متاحًا في ReportLab
        return pdfmetrics.getFont(name).fontName

    return factory


# جدول مرتب: (الأسماء المقبولة، مصنع الخط). آخر عنصر هو البديل المضمون.
FONT_TABLE: Sequence[Tuple[Tuple[str, ...], Callable[[], str]]] = (
    (("helvetica-bold", "helveticabold"), _standard_font("Helvetica-Bold")),
    (("helvetica-oblique", "helveticaoblique"), _standard_font("Helvetica-Oblique")),
    (("times-roman", "timesroman", "times"), _standard_font("Times-Roman")),
    (("times-bold", "timesbold"), _standard_font("Times-Bold")),
    (("times-italic", "timesitalic"), _standard_font("Times-Italic")),
    (("courier",), _standard_font("Courier")),
    (("courier-bold", "courierbold"), _standard_font("Courier-Bold")),
    (("helvetica",), lambda: FALLBACK_FONT),
)


def resolve_font(name: Optional[str]) -> EmbeddableFont:
    """مطابقة اسم الخط (دون حساسية لحالة الأحرف) مع الخطوط القياسية، مع Helvetica كبديل."""
    key = (name or "").strip().lower()

    for aliases, factory in FONT_TABLE:
        if key not in aliases:
            continue
        try:
            return EmbeddableFont(name=factory(), requested=name)
        except Exception as exc:  # noqa: BLE001 - أي فشل يعيدنا إلى الخط البديل
            logger.warning("تعذر تحميل الخط %s (%s). سيتم استخدام %s.", name, exc, FALLBACK_FONT)
            return EmbeddableFont(name=FALLBACK_FONT, requested=name, is_fallback=True)

    logger.warning("الخط \"%s\" ليس من الخطوط القياسية. سيتم استخدام %s.", name, FALLBACK_FONT)
    return EmbeddableFont(name=FALLBACK_FONT, requested=name, is_fallback=True)


def resolve_color(value: Optional[str]) -> RGB:
    """تحويل لون بصيغة #RRGGBB (أو RRGGBB) إلى قيم RGB بين 0 و 1."""
    if not isinstance(value, str):
        raise InvalidColorFormat(value)

    hex_value = value.strip()
    if hex_value.startswith("#"):
        hex_value = hex_value[1:]

    if len(hex_value) != 6 or any(ch not in string.hexdigits for ch in hex_value):
        raise InvalidColorFormat(value)

    red, green, blue = (int(hex_value[i : i + 2], 16) / 255 for i in (0, 2, 4))
    return RGB(red, green, blue)


def ensure_encodable(font: EmbeddableFont, text: str) -> None:
    """رفض النصوص التي تحتوي أحرفًا لا يغطيها ترميز الخط القياسي."""
    encoding = pdfmetrics.getFont(font.name).encName
    codec = ENCODING_CODECS.get(encoding, "cp1252")

    missing = []
    for ch in text:
        try:
            ch.encode(codec)
        except UnicodeEncodeError:
            if ch not in missing:
                missing.append(ch)

    if missing:
        raise UnencodableText(text, font.name, "".join(missing))
