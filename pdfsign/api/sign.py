import json
from typing import List, Optional, Tuple

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from fastapi.responses import Response
from pydantic import TypeAdapter, ValidationError

from pdfsign.core.config import get_settings
from pdfsign.core.errors import InvalidNumericField, UnknownSignatureType
from pdfsign.core.logging import configure_logging
from pdfsign.models import SignatureRequest
from pdfsign.services.signature_service import SignatureService
from pdfsign.storage.local import LocalStorage
from pdfsign.storage.registry import PersistedDocument, get_document, mark_signed, register_document
from pdfsign.utils.file_utils import ensure_pdf, parse_float, parse_int, parse_optional_float
from pdfsign.utils.pdf_preview import render_page_preview

router = APIRouter(prefix="/pdf/sign", tags=["PDF Signing"])

settings = get_settings()
logger = configure_logging()
storage = LocalStorage()
signature_service = SignatureService()

_signature_list = TypeAdapter(List[SignatureRequest])


# ============ Helpers ============
async def _load_source(
    file: Optional[UploadFile],
    document_id: Optional[str],
) -> Tuple[bytes, Optional[PersistedDocument]]:
    if document_id:
        entry = get_document(document_id)
        # التواقيع تتراكم: نبدأ من آخر نسخة موقعة إن وجدت
        source_path = entry.signed_path or entry.original_path
        return storage.read_bytes(source_path), entry
    if file is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No PDF file provided",
        )
    ensure_pdf(file)
    return await file.read(), None


def _parse_signatures(raw: str) -> List[SignatureRequest]:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"قائمة التواقيع ليست JSON صالحًا: {exc.msg}",
        ) from exc

    if not isinstance(payload, list):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="يجب أن تكون التواقيع مصفوفة JSON.",
        )

    try:
        return _signature_list.validate_python(payload)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=json.loads(exc.json(include_url=False)),
        ) from exc


def _persist_signed(
    entry: PersistedDocument,
    signed_bytes: bytes,
    requests: List[SignatureRequest],
) -> str:
    signed_path, public_path = storage.save_signed(signed_bytes, entry.filename)
    applied = [request for request in requests if request.signature_type is not None]
    mark_signed(entry.document_id, signed_path, applied)
    logger.info("تم حفظ النسخة الموقعة من %s (%s توقيع).", entry.filename, len(applied))
    return f"/downloads/{public_path.name}"


def _pdf_response(pdf_bytes: bytes, download_url: Optional[str] = None) -> Response:
    headers = {"Content-Disposition": f"attachment; filename={settings.signed_filename}"}
    if download_url:
        headers["X-Download-Url"] = download_url
    return Response(content=bytes(pdf_bytes), media_type="application/pdf", headers=headers)


# ============ Routes ============
@router.post("/upload", summary="رفع ملف PDF وتسجيله للتوقيع لاحقًا")
async def upload_pdf(file: UploadFile = File(...)) -> dict:
    ensure_pdf(file)
    pdf_bytes = await file.read()
    page_count = signature_service.count_pages(pdf_bytes)

    path = storage.save_original(pdf_bytes)
    entry = register_document(path, file.filename, page_count)
    logger.info("تم رفع ملف للتوقيع: %s (%s صفحة)", file.filename, page_count)

    return {
        "status": "ok",
        "message": "PDF uploaded successfully",
        "document": entry.to_card(preview=render_page_preview(pdf_bytes, 1)),
    }


@router.post("/single", summary="تطبيق توقيع واحد (صورة أو نص) وإرجاع الملف الموقع")
async def sign_single(
    signature_type: str = Form(...),
    signature_data: str = Form(...),
    x: str = Form(...),
    y: str = Form(...),
    page_number: str = Form(...),
    font: Optional[str] = Form(None),
    font_size: Optional[str] = Form(None),
    color: Optional[str] = Form(None),
    document_id: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
) -> Response:
    size = parse_optional_float("fontSize", font_size)
    if size is not None and size <= 0:
        raise InvalidNumericField("fontSize", font_size)

    request = SignatureRequest(
        type=signature_type,
        data=signature_data,
        x=parse_float("x", x),
        y=parse_float("y", y),
        page_number=parse_int("pageNumber", page_number),
        font=font,
        font_size=size,
        color=color,
    )
    if request.signature_type is None:
        raise UnknownSignatureType(signature_type)

    pdf_bytes, entry = await _load_source(file, document_id)
    signed = await signature_service.apply_signatures_async(pdf_bytes, [request])

    download_url = _persist_signed(entry, signed, [request]) if entry else None
    return _pdf_response(signed, download_url)


@router.post("/apply", summary="تطبيق مجموعة تواقيع بالترتيب وإرجاع الملف الموقع")
async def apply_signatures(
    signatures: str = Form(...),
    document_id: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
) -> Response:
    requests = _parse_signatures(signatures)
    pdf_bytes, entry = await _load_source(file, document_id)
    logger.info("طلب تطبيق %s توقيع على ملف بحجم %s بايت.", len(requests), len(pdf_bytes))

    signed = await signature_service.apply_signatures_async(pdf_bytes, requests)

    download_url = _persist_signed(entry, signed, requests) if entry else None
    return _pdf_response(signed, download_url)


@router.post("/preview", summary="معاينة صفحة من الملف بعد تطبيق التواقيع دون حفظه")
async def preview_signatures(
    signatures: str = Form(...),
    preview_page: int = Form(1),
    document_id: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
) -> dict:
    requests = _parse_signatures(signatures)
    pdf_bytes, _ = await _load_source(file, document_id)
    signed = await signature_service.apply_signatures_async(pdf_bytes, requests)

    try:
        preview = render_page_preview(signed, preview_page)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return {
        "status": "ok",
        "page": preview_page,
        "preview": preview,
    }
