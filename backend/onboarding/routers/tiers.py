import logging
import uuid

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from onboarding.database import get_db
from onboarding.dependencies import require_company
from onboarding.models.company import Company
from onboarding.models.pricing import SERVICE_TYPES, Tier, TieredRate
from onboarding.schemas.pricing import (
    ImportResponse,
    TierCreate,
    TieredRateResponse,
    TieredRateUpdate,
    TierResponse,
    TierUpdate,
)
from onboarding.services.csv_service import export_tiers_csv, parse_tiers_csv
from onboarding.services.tiers import (
    MAX_BELOW_MIN,
    MISSING_BOUNDS,
    OVERLAP,
    next_tier_min,
    tier_label,
    tiers_are_valid,
)
from onboarding.utils.formatting import now_iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tiers", tags=["pricing"])


def _rate_to_response(rate: TieredRate) -> TieredRateResponse:
    return TieredRateResponse(id=rate.id, tier_id=rate.tier_id, service_type=rate.service_type, rate=rate.rate)


def _tier_to_response(tier: Tier) -> TierResponse:
    return TierResponse(
        id=tier.id,
        min_sqft=tier.min_sqft,
        max_sqft=tier.max_sqft,
        label=tier_label(tier.min_sqft, tier.max_sqft),
        rates={r.service_type: _rate_to_response(r) for r in tier.rates},
        created_at=tier.created_at,
        updated_at=tier.updated_at,
    )


def _company_tiers(db: Session, company: Company) -> list[Tier]:
    return db.query(Tier).filter(Tier.company_id == company.id).order_by(Tier.min_sqft).all()


def _get_tier(db: Session, company: Company, tier_id: str) -> Tier:
    tier = db.query(Tier).filter(Tier.id == tier_id, Tier.company_id == company.id).first()
    if not tier:
        raise HTTPException(status_code=404, detail="Tier not found")
    return tier


def _new_tier(company: Company, min_sqft: int, max_sqft: int, rates: dict[str, str] | None = None) -> Tier:
    now = now_iso()
    tier = Tier(
        id=str(uuid.uuid4()),
        company_id=company.id,
        min_sqft=min_sqft,
        max_sqft=max_sqft,
        created_at=now,
        updated_at=now,
    )
    # Every tier carries one rate per service type, defaulting to "0"
    tier.rates = [
        TieredRate(
            id=str(uuid.uuid4()),
            service_type=service_type,
            rate=(rates or {}).get(service_type, "0"),
            updated_at=now,
        )
        for service_type in SERVICE_TYPES
    ]
    return tier


def _check_bounds(min_sqft: int, max_sqft: int, others: list[tuple[int, int]]):
    if max_sqft < min_sqft:
        raise HTTPException(status_code=400, detail=MAX_BELOW_MIN)
    if not tiers_are_valid([*others, (min_sqft, max_sqft)]):
        raise HTTPException(status_code=400, detail=OVERLAP)


@router.get("", response_model=list[TierResponse])
async def list_tiers(company: Company = Depends(require_company), db: Session = Depends(get_db)):
    return [_tier_to_response(t) for t in _company_tiers(db, company)]


@router.post("", response_model=TierResponse, status_code=201)
async def create_tier(
    req: TierCreate,
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    existing = [(t.min_sqft, t.max_sqft) for t in _company_tiers(db, company)]
    if req.max_sqft is None:
        raise HTTPException(status_code=400, detail=MISSING_BOUNDS)
    min_sqft = req.min_sqft if req.min_sqft is not None else next_tier_min(existing)
    _check_bounds(min_sqft, req.max_sqft, existing)

    tier = _new_tier(company, min_sqft, req.max_sqft)
    db.add(tier)
    db.commit()
    db.refresh(tier)
    return _tier_to_response(tier)


@router.get("/export.csv")
async def export_tiers(company: Company = Depends(require_company), db: Session = Depends(get_db)):
    return Response(
        content=export_tiers_csv(_company_tiers(db, company)),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="tiers.csv"'},
    )


@router.post("/import", response_model=ImportResponse)
async def import_tiers(
    file: UploadFile = File(...),
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    """Replace the tier table with the rows of a CSV export."""
    try:
        rows = parse_tiers_csv((await file.read()).decode("utf-8"))
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="CSV must be UTF-8 encoded")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    if not tiers_are_valid([(r["min_sqft"], r["max_sqft"]) for r in rows]):
        raise HTTPException(status_code=400, detail=OVERLAP)

    for tier in _company_tiers(db, company):
        db.delete(tier)
    db.flush()
    for row in rows:
        db.add(_new_tier(company, row["min_sqft"], row["max_sqft"], row["rates"]))
    db.commit()
    logger.info("Replaced tiers for company %s with %d imported rows", company.id, len(rows))
    return ImportResponse(imported=len(rows), message=f"Imported {len(rows)} tiers")


@router.put("/{tier_id}", response_model=TierResponse)
async def update_tier(
    tier_id: str,
    req: TierUpdate,
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    tier = _get_tier(db, company, tier_id)
    min_sqft = req.min_sqft if req.min_sqft is not None else tier.min_sqft
    max_sqft = req.max_sqft if req.max_sqft is not None else tier.max_sqft
    others = [(t.min_sqft, t.max_sqft) for t in _company_tiers(db, company) if t.id != tier.id]
    _check_bounds(min_sqft, max_sqft, others)

    tier.min_sqft = min_sqft
    tier.max_sqft = max_sqft
    tier.updated_at = now_iso()
    db.commit()
    db.refresh(tier)
    return _tier_to_response(tier)


@router.put("/{tier_id}/rates/{service_type}", response_model=TieredRateResponse)
async def update_tiered_rate(
    tier_id: str,
    service_type: str,
    req: TieredRateUpdate,
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    if service_type not in SERVICE_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid service type. Must be one of: {', '.join(SERVICE_TYPES)}",
        )
    tier = _get_tier(db, company, tier_id)
    rate = next((r for r in tier.rates if r.service_type == service_type), None)
    if rate is None:
        rate = TieredRate(id=str(uuid.uuid4()), tier_id=tier.id, service_type=service_type)
        db.add(rate)
    rate.rate = req.rate.strip() or "0"
    rate.updated_at = now_iso()
    db.commit()
    db.refresh(rate)
    return _rate_to_response(rate)


@router.delete("/{tier_id}")
async def delete_tier(
    tier_id: str,
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    tier = _get_tier(db, company, tier_id)
    db.delete(tier)
    db.commit()
    return {"message": "Tier deleted"}
