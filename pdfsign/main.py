# pdfsign/main.py
from __future__ import annotations

from pathlib import Path
from typing import Iterable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from pdfsign.api import routers
from pdfsign.core.config import get_settings
from pdfsign.core.errors import SigningError
from pdfsign.core.logging import configure_logging

# === إعدادات وتسجيل ===
settings = get_settings()
logger = configure_logging()

app = FastAPI(title=settings.app_name, version=settings.app_version)


# === CORS ===
def _as_list(val: Iterable | str | None, fallback: list[str]) -> list[str]:
    if val is None:
        return fallback
    if isinstance(val, (list, tuple, set)):
        return [str(x).strip() for x in val if str(x).strip()] or fallback
    return [x.strip() for x in str(val).split(",") if x.strip()] or fallback


allow_origins = _as_list(settings.allow_origins, fallback=["*"])
allow_credentials = settings.allow_credentials

# ملاحظة أمنية: لا نجمع allow_credentials=True مع allow_origins=["*"].
if allow_credentials and ("*" in allow_origins):
    allow_credentials = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Download-Url"],
)


# === أخطاء محرك التوقيع ===
@app.exception_handler(SigningError)
async def signing_error_handler(request: Request, exc: SigningError) -> JSONResponse:
    logger.error("خطأ أثناء التوقيع (%s %s): %s", request.method, request.url.path, exc.message)
    content = {"status": "error", "error": exc.kind, "details": exc.message}
    content.update(exc.to_dict())
    return JSONResponse(status_code=exc.status_code, content=content)


# === Routers ===
for router in routers:
    app.include_router(router)

# === Static downloads ===
downloads_dir: Path = settings.public_dir / "downloads"
downloads_dir.mkdir(parents=True, exist_ok=True)
app.mount("/downloads", StaticFiles(directory=str(downloads_dir)), name="downloads")


# === Basic endpoints ===
@app.get("/")
async def root() -> dict:
    logger.debug("Root endpoint accessed")
    return {"message": f"Welcome to {settings.app_name}"}


@app.get("/health")
async def health_check() -> dict:
    logger.debug("Health check invoked")
    return {"status": "ok", "message": "PDF Signature API is running"}
