from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy.orm import Session

from onboarding.database import get_db
from onboarding.dependencies import require_account, require_company, require_profile
from onboarding.models.account import Account
from onboarding.models.company import Company, Profile
from onboarding.models.signature import DocumentSignatureLink
from onboarding.schemas.signature import (
    SignatureLinkDetail,
    SignatureLinkResponse,
    SignatureResetRequest,
)
from onboarding.services import signature_service
from onboarding.services.document_builder import DOCUMENT_FILENAMES, DOCUMENT_TYPES
from onboarding.services.pdf_service import PDFRenderError, render_pdf, wrap_html_document

router = APIRouter(tags=["signature-links"])


def _link_to_response(link: DocumentSignatureLink) -> SignatureLinkResponse:
    return SignatureLinkResponse(
        id=link.id,
        profile_id=link.profile_id,
        document_type=link.document_type,
        document_title=link.document_title,
        document_id=link.document_id,
        signature_token=link.signature_token,
        url=signature_service.signing_url(link.signature_token),
        is_signed=bool(link.is_signed),
        signed_at=link.signed_at,
        signed_by=link.signed_by,
        created_at=link.created_at,
        updated_at=link.updated_at,
    )


def _link_to_detail(link: DocumentSignatureLink) -> SignatureLinkDetail:
    return SignatureLinkDetail(
        **_link_to_response(link).model_dump(),
        document_html=link.document_html,
        tenant_signature_data=link.tenant_signature_data,
        tenant_initial_data=link.tenant_initial_data,
        hiree_signature_data=link.hiree_signature_data,
        hiree_initial_data=link.hiree_initial_data,
    )


def _get_link(db: Session, company: Company, link_id: str) -> DocumentSignatureLink:
    link = db.query(DocumentSignatureLink).filter(
        DocumentSignatureLink.id == link_id,
        DocumentSignatureLink.company_id == company.id,
    ).first()
    if not link:
        raise HTTPException(status_code=404, detail="Signature link not found")
    return link


@router.post(
    "/profiles/{profile_id}/documents/{doc_type}/signature-link",
    response_model=SignatureLinkResponse,
    status_code=201,
)
async def create_signature_link(
    doc_type: str,
    profile: Profile = Depends(require_profile),
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    if doc_type not in DOCUMENT_TYPES:
        raise HTTPException(status_code=404, detail="Unknown document type")
    try:
        link = signature_service.create_link(db, company, profile, doc_type)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _link_to_response(link)


@router.get("/signature-links", response_model=list[SignatureLinkResponse])
async def list_signature_links(
    profile_id: str | None = None,
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    query = db.query(DocumentSignatureLink).filter(DocumentSignatureLink.company_id == company.id)
    if profile_id:
        query = query.filter(DocumentSignatureLink.profile_id == profile_id)
    links = query.order_by(DocumentSignatureLink.created_at.desc()).all()
    return [_link_to_response(link) for link in links]


@router.get("/signature-links/{link_id}", response_model=SignatureLinkDetail)
async def get_signature_link(
    link_id: str,
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    return _link_to_detail(_get_link(db, company, link_id))


@router.post("/signature-links/{link_id}/reset", response_model=SignatureLinkResponse)
async def reset_signature_link(
    link_id: str,
    req: SignatureResetRequest,
    account_id: str = Depends(require_account),
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    link = _get_link(db, company, link_id)
    account = db.query(Account).filter(Account.id == account_id).first()
    reset_by = account.email if account else account_id
    link = signature_service.reset(db, link, reset_by=reset_by, reason=req.reason)
    return _link_to_response(link)


@router.delete("/signature-links/{link_id}")
async def delete_signature_link(
    link_id: str,
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    link = _get_link(db, company, link_id)
    db.delete(link)
    db.commit()
    return {"message": "Signature link deleted"}


@router.get("/signature-links/{link_id}/pdf")
async def download_signed_document(
    link_id: str,
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    link = _get_link(db, company, link_id)
    html = signature_service.signed_document_html(link)
    try:
        content = render_pdf(wrap_html_document(html, link.document_title), title=link.document_title)
    except PDFRenderError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to generate PDF: {exc}")
    suffix = "_Signed" if link.is_signed else ""
    filename = f"{DOCUMENT_FILENAMES[link.document_type]}{suffix}.pdf"
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
