from __future__ import annotations

from dataclasses import dataclass

from pypdf import PageObject, PdfReader

from pdfsign.core.errors import PageOutOfBounds
from pdfsign.core.logging import configure_logging

logger = configure_logging()


@dataclass
class PageHandle:
    index: int
    page: PageObject
    width: float
    height: float

    def contains(self, x: float, y: float) -> bool:
        return 0 <= x <= self.width and 0 <= y <= self.height


def locate_page(reader: PdfReader, page_number: int) -> PageHandle:
    """إرجاع الصفحة المطلوبة (رقمها يبدأ من 1) مع أبعادها."""
    page_count = len(reader.pages)
    if page_number < 1 or page_number > page_count:
        raise PageOutOfBounds(page_number, page_count)

    page = reader.pages[page_number - 1]
    return PageHandle(
        index=page_number - 1,
        page=page,
        width=float(page.mediabox.width),
        height=float(page.mediabox.height),
    )


def check_coordinates(handle: PageHandle, x: float, y: float) -> bool:
    # تحقق استشاري فقط: نسمح بالتواقيع قرب الهوامش أو خارجها
    inside = handle.contains(x, y)
    if not inside:
        logger.warning(
            "الإحداثيات (%s, %s) قد تكون خارج حدود الصفحة (%sx%s).",
            x,
            y,
            handle.width,
            handle.height,
        )
    return inside
