import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from onboarding.database import get_db
from onboarding.dependencies import require_company, require_profile
from onboarding.models.company import Company, Profile
from onboarding.models.gear import GearItem
from onboarding.models.override import (
    HireeFlatServiceOverride,
    HireeGearOverride,
    HireeTieredRateOverride,
)
from onboarding.models.pricing import FlatService, Tier, TieredRate
from onboarding.schemas.pricing import (
    GearOverrideUpdate,
    PricingResponse,
    RateOverrideUpdate,
    ResolvedFlatRate,
    ResolvedTieredRate,
)
from onboarding.services.context_service import flat_service_entries, tiered_rate_entries
from onboarding.services.pricing import (
    CustomRate,
    parse_decimal_or_zero,
    resolve_flat_service_rate,
    resolve_tiered_rate,
)
from onboarding.services.tiers import tier_label
from onboarding.utils.formatting import now_iso

router = APIRouter(prefix="/profiles/{profile_id}", tags=["overrides"])


def _check_custom_rate(req: RateOverrideUpdate):
    if req.custom_rate is not None and req.custom_rate < 0:
        raise HTTPException(status_code=400, detail="Custom rate cannot be negative")


@router.get("/pricing", response_model=PricingResponse)
async def get_pricing(
    profile: Profile = Depends(require_profile),
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    """Company rates next to this hiree's overrides and the effective rate used in documents."""
    flat = []
    for entry in flat_service_entries(db, company, profile):
        custom = entry.override if isinstance(entry.override, CustomRate) else None
        flat.append(ResolvedFlatRate(
            service_id=entry.id,
            name=entry.name,
            base_rate=parse_decimal_or_zero(entry.rate),
            custom_rate=custom.rate if custom else None,
            override_enabled=bool(custom and custom.enabled),
            effective_rate=resolve_flat_service_rate(entry, entry.override),
        ))

    tiers = {t.id: t for t in db.query(Tier).filter(Tier.company_id == company.id)}
    tiered = []
    for entry in tiered_rate_entries(db, company, profile):
        tier = tiers[entry.tier_id]
        custom = entry.override if isinstance(entry.override, CustomRate) else None
        tiered.append(ResolvedTieredRate(
            tiered_rate_id=entry.id,
            tier_id=entry.tier_id,
            label=tier_label(tier.min_sqft, tier.max_sqft),
            service_type=entry.service_type,
            base_rate=parse_decimal_or_zero(entry.rate),
            custom_rate=custom.rate if custom else None,
            override_enabled=bool(custom and custom.enabled),
            effective_rate=resolve_tiered_rate(entry, entry.override),
        ))
    tiered.sort(key=lambda r: (tiers[r.tier_id].min_sqft, r.service_type))
    return PricingResponse(profile_id=profile.id, flat_services=flat, tiered_rates=tiered)


@router.put("/overrides/flat/{service_id}")
async def set_flat_override(
    service_id: str,
    req: RateOverrideUpdate,
    profile: Profile = Depends(require_profile),
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    _check_custom_rate(req)
    service = db.query(FlatService).filter(
        FlatService.id == service_id,
        FlatService.company_id == company.id,
    ).first()
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")

    override = db.query(HireeFlatServiceOverride).filter(
        HireeFlatServiceOverride.profile_id == profile.id,
        HireeFlatServiceOverride.flat_service_id == service.id,
    ).first()
    if override is None:
        override = HireeFlatServiceOverride(
            id=str(uuid.uuid4()), profile_id=profile.id, flat_service_id=service.id
        )
        db.add(override)
    override.custom_rate = req.custom_rate
    override.is_enabled = req.is_enabled
    override.updated_at = now_iso()
    db.commit()
    return {"message": "Override saved"}


@router.delete("/overrides/flat/{service_id}")
async def clear_flat_override(
    service_id: str,
    profile: Profile = Depends(require_profile),
    db: Session = Depends(get_db),
):
    db.query(HireeFlatServiceOverride).filter(
        HireeFlatServiceOverride.profile_id == profile.id,
        HireeFlatServiceOverride.flat_service_id == service_id,
    ).delete()
    db.commit()
    return {"message": "Override removed"}


@router.put("/overrides/tiered/{tiered_rate_id}")
async def set_tiered_override(
    tiered_rate_id: str,
    req: RateOverrideUpdate,
    profile: Profile = Depends(require_profile),
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    _check_custom_rate(req)
    rate = (
        db.query(TieredRate)
        .join(Tier, TieredRate.tier_id == Tier.id)
        .filter(TieredRate.id == tiered_rate_id, Tier.company_id == company.id)
        .first()
    )
    if not rate:
        raise HTTPException(status_code=404, detail="Tiered rate not found")

    override = db.query(HireeTieredRateOverride).filter(
        HireeTieredRateOverride.profile_id == profile.id,
        HireeTieredRateOverride.tiered_rate_id == rate.id,
    ).first()
    if override is None:
        override = HireeTieredRateOverride(
            id=str(uuid.uuid4()), profile_id=profile.id, tiered_rate_id=rate.id
        )
        db.add(override)
    override.custom_rate = req.custom_rate
    override.is_enabled = req.is_enabled
    override.updated_at = now_iso()
    db.commit()
    return {"message": "Override saved"}


@router.delete("/overrides/tiered/{tiered_rate_id}")
async def clear_tiered_override(
    tiered_rate_id: str,
    profile: Profile = Depends(require_profile),
    db: Session = Depends(get_db),
):
    db.query(HireeTieredRateOverride).filter(
        HireeTieredRateOverride.profile_id == profile.id,
        HireeTieredRateOverride.tiered_rate_id == tiered_rate_id,
    ).delete()
    db.commit()
    return {"message": "Override removed"}


@router.put("/overrides/gear/{gear_id}")
async def set_gear_override(
    gear_id: str,
    req: GearOverrideUpdate,
    profile: Profile = Depends(require_profile),
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    item = db.query(GearItem).filter(
        GearItem.id == gear_id,
        GearItem.company_id == company.id,
        GearItem.profile_id.is_(None),
    ).first()
    if not item:
        raise HTTPException(status_code=404, detail="Gear item not found")

    override = db.query(HireeGearOverride).filter(
        HireeGearOverride.profile_id == profile.id,
        HireeGearOverride.gear_item_id == item.id,
    ).first()
    if override is None:
        override = HireeGearOverride(id=str(uuid.uuid4()), profile_id=profile.id, gear_item_id=item.id)
        db.add(override)
    override.is_required = req.is_required
    override.notes = req.notes
    override.updated_at = now_iso()
    db.commit()
    return {"message": "Override saved"}


@router.delete("/overrides/gear/{gear_id}")
async def clear_gear_override(
    gear_id: str,
    profile: Profile = Depends(require_profile),
    db: Session = Depends(get_db),
):
    db.query(HireeGearOverride).filter(
        HireeGearOverride.profile_id == profile.id,
        HireeGearOverride.gear_item_id == gear_id,
    ).delete()
    db.commit()
    return {"message": "Override removed"}
