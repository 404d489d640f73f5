import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from onboarding.database import get_db
from onboarding.dependencies import require_company
from onboarding.models.company import Company, Profile
from onboarding.models.signature import Signature
from onboarding.schemas.signature import SignatureCreate, SignatureResponse
from onboarding.services.signature_service import validate_image_data
from onboarding.utils.formatting import now_iso

router = APIRouter(prefix="/signatures", tags=["signatures"])

SIGNATURE_TYPES = ("hiree", "company")


def _signature_to_response(signature: Signature) -> SignatureResponse:
    return SignatureResponse(
        id=signature.id,
        signature_type=signature.signature_type,
        profile_id=signature.profile_id,
        name=signature.name,
        signature_data=signature.signature_data,
        created_at=signature.created_at,
    )


@router.get("", response_model=list[SignatureResponse])
async def list_signatures(
    profile_id: str | None = None,
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    query = db.query(Signature).filter(Signature.company_id == company.id)
    if profile_id:
        query = query.filter(Signature.profile_id == profile_id)
    return [_signature_to_response(s) for s in query.order_by(Signature.created_at.desc()).all()]


@router.post("", response_model=SignatureResponse, status_code=201)
async def create_signature(
    req: SignatureCreate,
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    if req.signature_type not in SIGNATURE_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid signature type. Must be one of: {', '.join(SIGNATURE_TYPES)}",
        )
    if req.signature_type == "hiree" and not req.profile_id:
        raise HTTPException(status_code=400, detail="Hiree signatures need a profile_id")
    if req.profile_id:
        profile = db.query(Profile).filter(
            Profile.id == req.profile_id,
            Profile.company_id == company.id,
        ).first()
        if not profile:
            raise HTTPException(status_code=404, detail="Profile not found")
    try:
        validate_image_data(req.signature_data)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    signature = Signature(
        id=str(uuid.uuid4()),
        company_id=company.id,
        profile_id=req.profile_id,
        signature_type=req.signature_type,
        name=req.name,
        signature_data=req.signature_data,
        created_at=now_iso(),
    )
    db.add(signature)
    db.commit()
    db.refresh(signature)
    return _signature_to_response(signature)


@router.delete("/{signature_id}")
async def delete_signature(
    signature_id: str,
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    signature = db.query(Signature).filter(
        Signature.id == signature_id,
        Signature.company_id == company.id,
    ).first()
    if not signature:
        raise HTTPException(status_code=404, detail="Signature not found")
    db.delete(signature)
    db.commit()
    return {"message": "Signature deleted"}
