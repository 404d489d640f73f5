import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from onboarding.database import get_db
from onboarding.dependencies import require_company, require_profile
from onboarding.models.company import Company, Profile
from onboarding.models.gear import ESTIMATION_TYPES, GearItem
from onboarding.models.override import HireeGearOverride
from onboarding.schemas.gear import (
    EstimateRequest,
    EstimateResponse,
    GearCreate,
    GearResponse,
    GearUpdate,
    ResolvedGearResponse,
)
from onboarding.services import estimation_service
from onboarding.services.estimation_service import EstimationError
from onboarding.services.pricing import gear_override_from_row, resolve_gear_notes, resolve_gear_required
from onboarding.utils.formatting import now_iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/gear", tags=["gear"])
profile_router = APIRouter(prefix="/profiles/{profile_id}/gear", tags=["gear"])


def _gear_to_response(item: GearItem) -> GearResponse:
    return GearResponse(
        id=item.id,
        name=item.name,
        profile_id=item.profile_id,
        is_custom=bool(item.is_custom),
        is_required=bool(item.is_required),
        notes=item.notes,
        estimated_price_cad=item.estimated_price_cad,
        price_source=item.price_source,
        last_estimated_at=item.last_estimated_at,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def _catalog(db: Session, company: Company) -> list[GearItem]:
    return (
        db.query(GearItem)
        .filter(GearItem.company_id == company.id, GearItem.profile_id.is_(None))
        .order_by(GearItem.created_at, GearItem.name)
        .all()
    )


def _custom(db: Session, profile: Profile) -> list[GearItem]:
    return (
        db.query(GearItem)
        .filter(GearItem.profile_id == profile.id)
        .order_by(GearItem.created_at, GearItem.name)
        .all()
    )


def _new_item(req: GearCreate, company: Company, profile: Profile | None) -> GearItem:
    if not req.name.strip():
        raise HTTPException(status_code=400, detail="Gear name is required")
    now = now_iso()
    return GearItem(
        id=str(uuid.uuid4()),
        company_id=company.id,
        profile_id=profile.id if profile else None,
        name=req.name.strip(),
        is_custom=profile is not None,
        is_required=req.is_required,
        notes=req.notes,
        estimated_price_cad=req.estimated_price_cad,
        price_source="manual" if req.estimated_price_cad is not None else None,
        created_at=now,
        updated_at=now,
    )


def _apply_update(item: GearItem, req: GearUpdate):
    update_data = req.model_dump(exclude_unset=True)
    if "name" in update_data:
        if not (update_data["name"] or "").strip():
            raise HTTPException(status_code=400, detail="Gear name is required")
        update_data["name"] = update_data["name"].strip()
    if "estimated_price_cad" in update_data:
        # A hand edit of an estimated price is protected from later estimation runs
        if item.price_source in ("openai-estimated", "user-overridden"):
            item.price_source = "user-overridden"
        else:
            item.price_source = "manual"
    for key, value in update_data.items():
        setattr(item, key, value)
    item.updated_at = now_iso()


# --- Company catalog ---

@router.get("", response_model=list[GearResponse])
async def list_gear(company: Company = Depends(require_company), db: Session = Depends(get_db)):
    return [_gear_to_response(i) for i in _catalog(db, company)]


@router.post("", response_model=GearResponse, status_code=201)
async def create_gear(req: GearCreate, company: Company = Depends(require_company), db: Session = Depends(get_db)):
    item = _new_item(req, company, None)
    db.add(item)
    db.commit()
    db.refresh(item)
    return _gear_to_response(item)


def _get_catalog_item(db: Session, company: Company, gear_id: str) -> GearItem:
    item = db.query(GearItem).filter(
        GearItem.id == gear_id,
        GearItem.company_id == company.id,
        GearItem.profile_id.is_(None),
    ).first()
    if not item:
        raise HTTPException(status_code=404, detail="Gear item not found")
    return item


@router.put("/{gear_id}", response_model=GearResponse)
async def update_gear(
    gear_id: str,
    req: GearUpdate,
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    item = _get_catalog_item(db, company, gear_id)
    _apply_update(item, req)
    db.commit()
    db.refresh(item)
    return _gear_to_response(item)


@router.delete("/{gear_id}")
async def delete_gear(gear_id: str, company: Company = Depends(require_company), db: Session = Depends(get_db)):
    item = _get_catalog_item(db, company, gear_id)
    db.delete(item)
    db.commit()
    return {"message": "Gear item deleted"}


# --- Per-hiree custom gear ---

def _get_custom_item(db: Session, profile: Profile, gear_id: str) -> GearItem:
    item = db.query(GearItem).filter(GearItem.id == gear_id, GearItem.profile_id == profile.id).first()
    if not item:
        raise HTTPException(status_code=404, detail="Gear item not found")
    return item


@profile_router.get("", response_model=list[GearResponse])
async def list_custom_gear(profile: Profile = Depends(require_profile), db: Session = Depends(get_db)):
    return [_gear_to_response(i) for i in _custom(db, profile)]


@profile_router.post("", response_model=GearResponse, status_code=201)
async def create_custom_gear(
    req: GearCreate,
    profile: Profile = Depends(require_profile),
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    item = _new_item(req, company, profile)
    db.add(item)
    db.commit()
    db.refresh(item)
    return _gear_to_response(item)


@profile_router.get("/resolved", response_model=list[ResolvedGearResponse])
async def resolved_gear(
    profile: Profile = Depends(require_profile),
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    """The hiree's effective gear list: catalog items with overrides applied, then custom items."""
    overrides = {
        o.gear_item_id: o
        for o in db.query(HireeGearOverride).filter(HireeGearOverride.profile_id == profile.id)
    }
    result = []
    for item in [*_catalog(db, company), *_custom(db, profile)]:
        override = gear_override_from_row(overrides.get(item.id))
        result.append(ResolvedGearResponse(
            id=item.id,
            name=item.name,
            is_custom=bool(item.is_custom),
            has_override=item.id in overrides,
            required=resolve_gear_required(item, override),
            notes=resolve_gear_notes(item, override),
            estimated_price_cad=item.estimated_price_cad,
        ))
    return result


@profile_router.post("/estimate", response_model=EstimateResponse)
async def estimate_gear(
    req: EstimateRequest,
    profile: Profile = Depends(require_profile),
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    if req.scope not in ESTIMATION_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid scope. Must be one of: {', '.join(ESTIMATION_TYPES)}",
        )

    items = []
    if req.scope in ("company_gear", "all_gear"):
        items.extend(_catalog(db, company))
    if req.scope in ("hiree_custom_gear", "all_gear"):
        items.extend(_custom(db, profile))
    # User-set prices are never replaced by an estimate
    candidates = [i for i in items if i.price_source != "user-overridden"]

    try:
        result = estimation_service.estimate_gear_prices([i.name for i in candidates])
    except EstimationError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc))

    by_name = {e["name"].strip().lower(): e for e in result["items"]}
    now = now_iso()
    updated = 0
    for item in candidates:
        estimate = by_name.get(item.name.strip().lower())
        if estimate is None:
            continue
        item.estimated_price_cad = estimate["estimated_price_cad"]
        item.price_source = "openai-estimated"
        item.last_estimated_at = now
        item.updated_at = now
        updated += 1
    db.commit()

    estimation_service.log_estimation(db, company.id, profile.id, req.scope, result)
    return EstimateResponse(updated=updated, **result)


@profile_router.put("/{gear_id}", response_model=GearResponse)
async def update_custom_gear(
    gear_id: str,
    req: GearUpdate,
    profile: Profile = Depends(require_profile),
    db: Session = Depends(get_db),
):
    item = _get_custom_item(db, profile, gear_id)
    _apply_update(item, req)
    db.commit()
    db.refresh(item)
    return _gear_to_response(item)


@profile_router.delete("/{gear_id}")
async def delete_custom_gear(
    gear_id: str,
    profile: Profile = Depends(require_profile),
    db: Session = Depends(get_db),
):
    item = _get_custom_item(db, profile, gear_id)
    db.delete(item)
    db.commit()
    return {"message": "Gear item deleted"}
