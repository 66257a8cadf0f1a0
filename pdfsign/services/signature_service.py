from __future__ import annotations

from io import BytesIO
from typing import Callable, Optional, Sequence

from fastapi.concurrency import run_in_threadpool
from pypdf import PageObject, PdfReader, PdfWriter
from pypdf.errors import PyPdfError
from reportlab.pdfgen import canvas

from pdfsign.core.config import get_settings
from pdfsign.core.errors import (
    InvalidNumericField,
    MalformedDocument,
    NoSignaturesProvided,
    SignatureApplicationError,
    SigningError,
    UnknownSignatureType,
)
from pdfsign.core.logging import configure_logging
from pdfsign.models.signature import SignatureRequest, SignatureType
from pdfsign.services.font_resolver import ensure_encodable, resolve_color, resolve_font
from pdfsign.services.image_decoder import decode_image
from pdfsign.services.page_locator import PageHandle, check_coordinates, locate_page

logger = configure_logging()

DrawFn = Callable[[canvas.Canvas], None]

# أخطاء pypdf عند قراءة أو نسخ أو كتابة ملف تالف
PDF_ERRORS = (PyPdfError, ValueError, KeyError, TypeError)


class SignatureService:
    """محرك التوقيع: إضافة تواقيع مرئية (صور أو نصوص) إلى صفحات ملف PDF."""

    def __init__(self, image_scale: Optional[float] = None) -> None:
        settings = get_settings()
        self.image_scale = settings.signature_image_scale if image_scale is None else image_scale
        self.default_font_name = settings.default_font_name
        self.default_font_size = settings.default_font_size
        self.default_color = settings.default_color

    # ------------------------------------------------------------------
    # توقيع بصورة
    # ------------------------------------------------------------------
    def apply_image_signature(
        self,
        pdf_bytes: bytes,
        image_data_url: str,
        x: float,
        y: float,
        page_number: int,
        scale: Optional[float] = None,
    ) -> bytes:
        reader = self._load(pdf_bytes)
        handle = locate_page(reader, page_number)
        check_coordinates(handle, x, y)

        image = decode_image(image_data_url)
        width, height = image.scale(self.image_scale if scale is None else scale)

        def draw(c: canvas.Canvas) -> None:
            c.drawImage(image.reader, x, y, width=width, height=height, mask="auto")

        result = self._compose(reader, handle, draw)
        logger.info(
            "تم رسم صورة %s على الصفحة %s عند (%s, %s) بحجم %.2fx%.2f",
            image.image_format,
            page_number,
            x,
            y,
            width,
            height,
        )
        return result

    # ------------------------------------------------------------------
    # توقيع نصي
    # ------------------------------------------------------------------
    def apply_text_signature(
        self,
        pdf_bytes: bytes,
        text: str,
        x: float,
        y: float,
        page_number: int,
        font_name: Optional[str] = None,
        font_size: Optional[float] = None,
        color_hex: Optional[str] = None,
    ) -> bytes:
        font_size = self.default_font_size if font_size is None else font_size
        if font_size <= 0:
            raise InvalidNumericField("fontSize", font_size)

        reader = self._load(pdf_bytes)
        handle = locate_page(reader, page_number)
        check_coordinates(handle, x, y)

        font = resolve_font(font_name or self.default_font_name)
        ensure_encodable(font, text)
        color = resolve_color(color_hex or self.default_color)

        def draw(c: canvas.Canvas) -> None:
            c.setFillColor(color.to_color())
            c.setFont(font.name, font_size)
            c.drawString(x, y, text)

        result = self._compose(reader, handle, draw)
        logger.info(
            "تم رسم نص على الصفحة %s عند (%s, %s) بالخط %s وحجم %s",
            page_number,
            x,
            y,
            font.name,
            font_size,
        )
        return result

    # ------------------------------------------------------------------
    # توقيع واحد حسب نوع الطلب
    # ------------------------------------------------------------------
    def apply_signature(self, pdf_bytes: bytes, request: SignatureRequest) -> bytes:
        signature_type = request.signature_type
        if signature_type is SignatureType.image:
            return self.apply_image_signature(
                pdf_bytes,
                request.data,
                request.x,
                request.y,
                request.page_number,
                scale=request.scale,
            )
        if signature_type is SignatureType.text:
            return self.apply_text_signature(
                pdf_bytes,
                request.data,
                request.x,
                request.y,
                request.page_number,
                font_name=request.font,
                font_size=request.font_size,
                color_hex=request.color,
            )
        raise UnknownSignatureType(request.type)

    # ------------------------------------------------------------------
    # تطبيق دفعة من التواقيع بالترتيب
    # ------------------------------------------------------------------
    def apply_signatures(self, pdf_bytes: bytes, requests: Sequence[SignatureRequest]) -> bytes:
        if not requests:
            raise NoSignaturesProvided()

        current = pdf_bytes
        for position, request in enumerate(requests, start=1):
            current = self._apply_step(current, position, request)

        logger.info("تم تطبيق الدفعة (%s طلبات). الحجم النهائي %s بايت.", len(requests), len(current))
        return current

    async def apply_signatures_async(
        self, pdf_bytes: bytes, requests: Sequence[SignatureRequest]
    ) -> bytes:
        """نفس apply_signatures لكن كل خطوة تعمل في مجمع الخيوط دون حجب حلقة الأحداث."""
        if not requests:
            raise NoSignaturesProvided()

        current = pdf_bytes
        for position, request in enumerate(requests, start=1):
            current = await run_in_threadpool(self._apply_step, current, position, request)

        logger.info("تم تطبيق الدفعة (%s طلبات). الحجم النهائي %s بايت.", len(requests), len(current))
        return current

    def count_pages(self, pdf_bytes: bytes) -> int:
        return len(self._load(pdf_bytes).pages)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _apply_step(self, pdf_bytes: bytes, position: int, request: SignatureRequest) -> bytes:
        try:
            return self.apply_signature(pdf_bytes, request)
        except UnknownSignatureType as exc:
            logger.warning("تم تخطي التوقيع %s: %s", position, exc.message)
            return pdf_bytes
        except SigningError as exc:
            logger.error("فشل تطبيق التوقيع %s (%s): %s", position, exc.kind, exc.message)
            raise SignatureApplicationError(position, exc) from exc

    @staticmethod
    def _load(pdf_bytes: bytes) -> PdfReader:
        if not pdf_bytes:
            raise MalformedDocument("الملف فارغ")
        try:
            reader = PdfReader(BytesIO(bytes(pdf_bytes)))
            if len(reader.pages) == 0:
                raise MalformedDocument("الملف لا يحتوي على صفحات")
        except PDF_ERRORS as exc:
            raise MalformedDocument(str(exc)) from exc
        return reader

    @staticmethod
    def _compose(reader: PdfReader, handle: PageHandle, draw: DrawFn) -> bytes:
        overlay = SignatureService._create_overlay_page(handle.width, handle.height, draw)

        buffer = BytesIO()
        try:
            writer = PdfWriter(clone_from=reader)
            target: PageObject = writer.pages[handle.index]
            target.merge_page(overlay)
            writer.write(buffer)
        except PDF_ERRORS as exc:
            raise MalformedDocument(str(exc)) from exc
        return buffer.getvalue()

    @staticmethod
    def _create_overlay_page(width: float, height: float, draw: DrawFn) -> PageObject:
        packet = BytesIO()
        c = canvas.Canvas(packet, pagesize=(width, height), invariant=1)
        draw(c)
        c.showPage()
        c.save()
        packet.seek(0)
        return PdfReader(packet).pages[0]
