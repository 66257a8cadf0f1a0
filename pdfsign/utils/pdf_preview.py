import base64
from pathlib import Path
from typing import Union

import fitz  # PyMuPDF


def render_page_preview(
    source: Union[Path, bytes],
    page_number: int = 1,
    zoom: float = 1.5,
) -> str:
    """
    إنشاء صورة مصغرة للصفحة المحددة داخل ملف PDF وإرجاعها كسلسلة base64.

    Args:
        source: مسار ملف PDF أو محتواه كبايتات.
        page_number: رقم الصفحة (يبدأ من 1).
        zoom: معامل التكبير للحصول على جودة أفضل.
    """
    if page_number < 1:
        raise ValueError("page_number must be >= 1")

    if isinstance(source, (bytes, bytearray)):
        document = fitz.open(stream=bytes(source), filetype="pdf")
    else:
        document = fitz.open(source)

    with document:
        if page_number > document.page_count:
            raise ValueError("page_number exceeds document pages")

        page = document.load_page(page_number - 1)
        pixmap = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
        image_bytes = pixmap.tobytes("png")

    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:image/png;base64,{encoded}"
