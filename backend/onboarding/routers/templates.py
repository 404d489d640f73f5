import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from onboarding.database import get_db
from onboarding.dependencies import require_profile
from onboarding.models.company import Profile
from onboarding.models.offer import Template
from onboarding.schemas.offer import TemplateResponse, TemplateUpdate
from onboarding.services.document_builder import DOCUMENT_TYPES
from onboarding.utils.formatting import now_iso

router = APIRouter(prefix="/profiles/{profile_id}/templates", tags=["templates"])


def _check_type(doc_type: str):
    if doc_type not in DOCUMENT_TYPES:
        raise HTTPException(status_code=404, detail="Unknown document type")


def _template_to_response(doc_type: str, template: Template | None) -> TemplateResponse:
    if template is None:
        return TemplateResponse(document_type=doc_type, clauses=[], addendum="", updated_at=None)
    return TemplateResponse(
        document_type=doc_type,
        clauses=list(template.clauses or []),
        addendum=template.addendum or "",
        updated_at=template.updated_at,
    )


def _get_template(db: Session, profile: Profile, doc_type: str) -> Template | None:
    return db.query(Template).filter(
        Template.profile_id == profile.id,
        Template.document_type == doc_type,
    ).first()


@router.get("", response_model=list[TemplateResponse])
async def list_templates(profile: Profile = Depends(require_profile), db: Session = Depends(get_db)):
    saved = {t.document_type: t for t in db.query(Template).filter(Template.profile_id == profile.id)}
    return [_template_to_response(t, saved.get(t)) for t in DOCUMENT_TYPES]


@router.get("/{doc_type}", response_model=TemplateResponse)
async def get_template(doc_type: str, profile: Profile = Depends(require_profile), db: Session = Depends(get_db)):
    _check_type(doc_type)
    return _template_to_response(doc_type, _get_template(db, profile, doc_type))


@router.put("/{doc_type}", response_model=TemplateResponse)
async def update_template(
    doc_type: str,
    req: TemplateUpdate,
    profile: Profile = Depends(require_profile),
    db: Session = Depends(get_db),
):
    _check_type(doc_type)
    template = _get_template(db, profile, doc_type)
    if template is None:
        template = Template(id=str(uuid.uuid4()), profile_id=profile.id, document_type=doc_type)
        db.add(template)
    template.clauses = [c.strip() for c in req.clauses if c and c.strip()]
    template.addendum = (req.addendum or "").strip()
    template.updated_at = now_iso()
    db.commit()
    db.refresh(template)
    return _template_to_response(doc_type, template)
