import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from onboarding.database import get_db
from onboarding.dependencies import require_company, require_profile
from onboarding.models.company import Company, Profile
from onboarding.models.offer import OFFER_STATUSES, OfferDetails
from onboarding.models.pricing import SERVICE_TYPES, FlatService
from onboarding.schemas.offer import OfferResponse, OfferUpsert
from onboarding.utils.formatting import now_iso

router = APIRouter(prefix="/profiles/{profile_id}/offer", tags=["offers"])


def _offer_to_response(offer: OfferDetails) -> OfferResponse:
    return OfferResponse(
        id=offer.id,
        profile_id=offer.profile_id,
        position=offer.position,
        start_date=offer.start_date,
        end_date=offer.end_date,
        work_schedule=offer.work_schedule,
        probation_months=offer.probation_months,
        manager_name=offer.manager_name,
        manager_email=offer.manager_email,
        manager_phone=offer.manager_phone,
        manager_ext=offer.manager_ext,
        contact_ext=offer.contact_ext,
        return_by=offer.return_by,
        ceo_name=offer.ceo_name,
        base_salary=offer.base_salary or 0,
        hourly_rate=offer.hourly_rate or 0,
        commission=offer.commission or 0,
        benefits=offer.benefits,
        selected_flat_service_ids=list(offer.selected_flat_service_ids or []),
        selected_tiered_service_types=list(offer.selected_tiered_service_types or []),
        responsibilities=offer.responsibilities,
        requirements=offer.requirements,
        terms=offer.terms,
        status=offer.status,
        created_at=offer.created_at,
        updated_at=offer.updated_at,
    )


def _get_offer(db: Session, profile: Profile) -> OfferDetails | None:
    return db.query(OfferDetails).filter(OfferDetails.profile_id == profile.id).first()


@router.get("", response_model=OfferResponse)
async def get_offer(profile: Profile = Depends(require_profile), db: Session = Depends(get_db)):
    offer = _get_offer(db, profile)
    if not offer:
        raise HTTPException(status_code=404, detail="Offer not found")
    return _offer_to_response(offer)


@router.put("", response_model=OfferResponse)
async def upsert_offer(
    req: OfferUpsert,
    profile: Profile = Depends(require_profile),
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    if req.status not in OFFER_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid status. Must be one of: {', '.join(OFFER_STATUSES)}",
        )
    unknown_types = [t for t in req.selected_tiered_service_types if t not in SERVICE_TYPES]
    if unknown_types:
        raise HTTPException(status_code=400, detail=f"Unknown service types: {', '.join(unknown_types)}")
    if req.selected_flat_service_ids:
        owned = {
            row[0]
            for row in db.query(FlatService.id).filter(
                FlatService.company_id == company.id,
                FlatService.id.in_(req.selected_flat_service_ids),
            )
        }
        if owned != set(req.selected_flat_service_ids):
            raise HTTPException(status_code=400, detail="Selected services must belong to this company")
    for field in ("base_salary", "hourly_rate", "commission"):
        if getattr(req, field) < 0:
            raise HTTPException(status_code=400, detail=f"{field} cannot be negative")

    now = now_iso()
    offer = _get_offer(db, profile)
    if offer is None:
        offer = OfferDetails(id=str(uuid.uuid4()), profile_id=profile.id, created_at=now)
        db.add(offer)
    values = req.model_dump()
    # Keep the selection order stable and free of duplicates
    values["selected_flat_service_ids"] = list(dict.fromkeys(req.selected_flat_service_ids))
    values["selected_tiered_service_types"] = list(dict.fromkeys(req.selected_tiered_service_types))
    for key, value in values.items():
        setattr(offer, key, value)
    offer.updated_at = now
    db.commit()
    db.refresh(offer)
    return _offer_to_response(offer)


@router.delete("")
async def delete_offer(profile: Profile = Depends(require_profile), db: Session = Depends(get_db)):
    offer = _get_offer(db, profile)
    if not offer:
        raise HTTPException(status_code=404, detail="Offer not found")
    db.delete(offer)
    db.commit()
    return {"message": "Offer deleted"}
