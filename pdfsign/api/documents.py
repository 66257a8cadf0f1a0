from fastapi import APIRouter

from pdfsign.core.logging import configure_logging
from pdfsign.storage.registry import get_document, list_documents, unregister_document

router = APIRouter(prefix="/pdf/sign/documents", tags=["Documents"])

logger = configure_logging()


@router.get("/", summary="قائمة الملفات المسجلة وتواقيعها")
async def list_registered() -> dict:
    return {"documents": [entry.to_card() for entry in list_documents()]}


@router.get("/{document_id}", summary="بيانات ملف مسجل مع التواقيع المطبقة عليه")
async def get_registered(document_id: str) -> dict:
    entry = get_document(document_id)
    return {"status": "ok", "document": entry.to_card()}


@router.delete("/{document_id}", summary="إلغاء تسجيل ملف")
async def delete_registered(document_id: str) -> dict:
    entry = get_document(document_id)
    unregister_document(entry.document_id)
    logger.info("تم إلغاء تسجيل الملف %s", entry.filename)
    return {"status": "ok"}
