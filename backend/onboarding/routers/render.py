"""Standalone HTML to PDF conversion, kept unauthenticated for local clients."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse, Response

from onboarding.config import settings
from onboarding.schemas.document import RenderRequest
from onboarding.services.pdf_service import PDFRenderError, normalize_page_format, render_pdf
from onboarding.utils.filesystem import sanitize_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["render"])

DEFAULT_FILENAME = "document.pdf"


def _pdf_filename(name: str | None) -> str:
    name = sanitize_filename((name or "").strip()) or DEFAULT_FILENAME
    if not name.lower().endswith(".pdf"):
        name = f"{name}.pdf"
    return name


@router.post("/generate-pdf")
async def generate_pdf(req: RenderRequest):
    html = req.html_content or ""
    if not html.strip():
        return JSONResponse(status_code=400, content={"error": "HTML content is required"})
    if len(html) > settings.max_html_content_chars:
        return JSONResponse(status_code=413, content={"error": "HTML content is too large"})

    options = req.options
    try:
        page_format = normalize_page_format(options.format if options else None)
    except PDFRenderError as exc:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    try:
        content = render_pdf(html, page_format=page_format, header_text=options.header if options else None)
    except PDFRenderError as exc:
        return JSONResponse(status_code=500, content={"error": "Failed to generate PDF", "details": str(exc)})

    filename = _pdf_filename(options.filename if options else None)
    logger.info("Rendered %s (%d bytes)", filename, len(content))
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/health")
async def render_health():
    return {"status": "OK", "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")}
