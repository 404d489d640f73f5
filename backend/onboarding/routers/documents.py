from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.orm import Session

from onboarding.database import get_db
from onboarding.dependencies import require_company, require_profile
from onboarding.models.company import Company, Profile
from onboarding.models.offer import OfferDetails
from onboarding.schemas.document import DocumentPreview, DocumentSummary
from onboarding.services.context_service import load_context
from onboarding.services.document_builder import (
    DOCUMENT_FILENAMES,
    DOCUMENT_TITLES,
    DOCUMENT_TYPES,
    build_document,
    document_heading,
)
from onboarding.services.pdf_service import (
    PDFRenderError,
    normalize_page_format,
    render_pdf,
    render_print_page,
    wrap_html_document,
)
from onboarding.utils.formatting import doc_id, today_iso

router = APIRouter(prefix="/profiles/{profile_id}/documents", tags=["documents"])


def _check_type(doc_type: str):
    if doc_type not in DOCUMENT_TYPES:
        raise HTTPException(status_code=404, detail="Unknown document type")


def _assemble(db: Session, company: Company, profile: Profile, doc_type: str) -> tuple[str, str | None, str]:
    """Returns (title, document id or None for a placeholder, body html)."""
    _check_type(doc_type)
    ctx = load_context(db, company, profile, doc_type)
    if doc_type in ("pay", "offer") and ctx.offer is None:
        return DOCUMENT_TITLES[doc_type], None, build_document(doc_type, ctx)
    document_id = doc_id()
    html = build_document(doc_type, ctx, document_id=document_id, generated_on=today_iso())
    return document_heading(doc_type, ctx), document_id, html


@router.get("", response_model=list[DocumentSummary])
async def list_documents(profile: Profile = Depends(require_profile), db: Session = Depends(get_db)):
    has_offer = db.query(OfferDetails).filter(OfferDetails.profile_id == profile.id).first() is not None
    result = []
    for doc_type in DOCUMENT_TYPES:
        needs_offer = doc_type in ("pay", "offer") and not has_offer
        result.append(DocumentSummary(
            type=doc_type,
            title=DOCUMENT_TITLES[doc_type],
            filename=f"{DOCUMENT_FILENAMES[doc_type]}.pdf",
            ready=not needs_offer,
            reason="Create an offer for this hiree first" if needs_offer else None,
        ))
    return result


@router.get("/{doc_type}", response_model=DocumentPreview)
async def preview_document(
    doc_type: str,
    profile: Profile = Depends(require_profile),
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    title, document_id, html = _assemble(db, company, profile, doc_type)
    return DocumentPreview(type=doc_type, title=title, document_id=document_id, html=html)


@router.get("/{doc_type}/print", response_class=HTMLResponse)
async def print_document(
    doc_type: str,
    page_format: str | None = None,
    profile: Profile = Depends(require_profile),
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    title, _, html = _assemble(db, company, profile, doc_type)
    try:
        return HTMLResponse(render_print_page(html, title, page_format=page_format))
    except PDFRenderError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/{doc_type}/pdf")
async def download_document(
    doc_type: str,
    page_format: str | None = None,
    profile: Profile = Depends(require_profile),
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    title, document_id, html = _assemble(db, company, profile, doc_type)
    if document_id is None:
        raise HTTPException(status_code=400, detail="Create an offer for this hiree first")
    try:
        fmt = normalize_page_format(page_format)
    except PDFRenderError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    try:
        content = render_pdf(wrap_html_document(html, title), page_format=fmt, title=title)
    except PDFRenderError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to generate PDF: {exc}")
    filename = f"{DOCUMENT_FILENAMES[doc_type]}.pdf"
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
