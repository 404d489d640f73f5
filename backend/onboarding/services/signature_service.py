import logging
import uuid

from sqlalchemy.orm import Session

from onboarding.config import settings
from onboarding.models.company import Company, Profile
from onboarding.models.signature import DocumentSignatureLink, SignatureResetLog
from onboarding.services.context_service import load_context
from onboarding.services.document_builder import build_document, document_heading
from onboarding.utils.formatting import doc_id, escape_html, now_iso, today_iso
from onboarding.utils.security import generate_signing_token

logger = logging.getLogger(__name__)

SIGNERS = ("hiree", "tenant")


class AlreadySignedError(Exception):
    pass


def validate_image_data(data: str | None, field: str = "signature_data") -> str:
    if not data or not data.startswith("data:image/"):
        raise ValueError(f"{field} must be an image data URL")
    if len(data) > settings.max_signature_chars:
        raise ValueError(f"{field} is too large")
    return data


def signing_url(token: str) -> str:
    return f"{settings.public_base_url.rstrip('/')}/sign/{token}"


def create_link(db: Session, company: Company, profile: Profile, doc_type: str) -> DocumentSignatureLink:
    """Render the document once and bind the snapshot to a new signing token.

    The document id and date are frozen into the snapshot, so the signer sees
    exactly what was shared.
    """
    ctx = load_context(db, company, profile, doc_type)
    if doc_type in ("pay", "offer") and ctx.offer is None:
        raise ValueError("Create an offer for this hiree before sharing this document")

    document_id = doc_id()
    html = build_document(doc_type, ctx, document_id=document_id, generated_on=today_iso())

    token = generate_signing_token()
    while db.query(DocumentSignatureLink).filter(DocumentSignatureLink.signature_token == token).first():
        token = generate_signing_token()

    now = now_iso()
    link = DocumentSignatureLink(
        id=str(uuid.uuid4()),
        company_id=company.id,
        profile_id=profile.id,
        document_type=doc_type,
        document_title=document_heading(doc_type, ctx),
        document_id=document_id,
        document_html=html,
        signature_token=token,
        is_signed=False,
        created_at=now,
        updated_at=now,
    )
    db.add(link)
    db.commit()
    db.refresh(link)
    logger.info("Created %s signature link %s for profile %s", doc_type, link.id, profile.id)
    return link


def get_by_token(db: Session, token: str) -> DocumentSignatureLink | None:
    return db.query(DocumentSignatureLink).filter(DocumentSignatureLink.signature_token == token).first()


def sign(
    db: Session,
    link: DocumentSignatureLink,
    signer: str,
    signature_data: str,
    initial_data: str | None = None,
) -> DocumentSignatureLink:
    if signer not in SIGNERS:
        raise ValueError(f"Invalid signer. Must be one of: {', '.join(SIGNERS)}")
    if link.is_signed:
        raise AlreadySignedError("This document has already been signed")
    validate_image_data(signature_data)
    if initial_data:
        validate_image_data(initial_data, field="initial_data")

    now = now_iso()
    setattr(link, f"{signer}_signature_data", signature_data)
    setattr(link, f"{signer}_initial_data", initial_data)
    link.is_signed = True
    link.signed_at = now
    link.signed_by = signer
    link.updated_at = now
    db.commit()
    db.refresh(link)
    logger.info("Signature link %s signed by %s", link.id, signer)
    return link


def reset(db: Session, link: DocumentSignatureLink, reset_by: str, reason: str | None = None) -> DocumentSignatureLink:
    link.is_signed = False
    link.signed_at = None
    link.signed_by = None
    link.tenant_signature_data = None
    link.tenant_initial_data = None
    link.hiree_signature_data = None
    link.hiree_initial_data = None
    link.updated_at = now_iso()
    db.add(SignatureResetLog(
        id=str(uuid.uuid4()),
        signature_link_id=link.id,
        reset_by=reset_by,
        reset_reason=reason,
        created_at=link.updated_at,
    ))
    db.commit()
    db.refresh(link)
    logger.info("Signature link %s reset by %s", link.id, reset_by)
    return link


def signed_document_html(link: DocumentSignatureLink) -> str:
    """The frozen snapshot followed by the electronic signature record, if any."""
    if not link.is_signed:
        return link.document_html
    images = []
    for role, label in (("tenant", "Company Representative"), ("hiree", "Hiree")):
        for kind in ("signature", "initial"):
            data = getattr(link, f"{role}_{kind}_data")
            if data:
                images.append(
                    f"<p><b>{label} {'Signature' if kind == 'signature' else 'Initials'}</b></p>"
                    f'<img src="{escape_html(data)}" alt="{label} {kind}" height="50">'
                )
    signer = "Company Representative" if link.signed_by == "tenant" else "Hiree"
    record = (
        '<div class="signature-record" style="break-before:page;page-break-before:always">'
        "<h3>Electronic Signature Record</h3>"
        f"<p>Document ID: {escape_html(link.document_id)}</p>"
        f"<p>Signed by: {signer}</p>"
        f"<p>Signed at: {escape_html(link.signed_at)}</p>"
        f"{''.join(images)}"
        "</div>"
    )
    return f"{link.document_html}\n{record}"
