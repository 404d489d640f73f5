"""Builds the document assembly state for one company and hiree from the database."""

from sqlalchemy.orm import Session

from onboarding.models.company import Company, Profile
from onboarding.models.gear import GearItem
from onboarding.models.offer import OfferDetails, Template
from onboarding.models.override import (
    HireeFlatServiceOverride,
    HireeGearOverride,
    HireeTieredRateOverride,
)
from onboarding.models.pricing import FlatService, Tier, TieredRate
from onboarding.models.signature import Signature
from onboarding.services.document_builder import (
    AssemblyContext,
    CompanyInfo,
    FlatServiceEntry,
    GearEntry,
    HireeInfo,
    OfferInfo,
    TemplateInfo,
    TierEntry,
    TieredRateEntry,
)
from onboarding.services.logo_service import logo_data_url
from onboarding.services.pricing import gear_override_from_row, rate_override_from_row


def company_info(company: Company) -> CompanyInfo:
    return CompanyInfo(
        name=company.name,
        jurisdiction=company.jurisdiction,
        logo=logo_data_url(company.logo_path, company.logo_mime_type),
    )


def hiree_info(profile: Profile) -> HireeInfo:
    return HireeInfo(
        name=profile.name,
        email=profile.email,
        phone=profile.phone,
        address=profile.address,
        dob=profile.dob,
        hire_date=profile.hire_date,
    )


def flat_service_entries(db: Session, company: Company, profile: Profile | None) -> list[FlatServiceEntry]:
    services = (
        db.query(FlatService)
        .filter(FlatService.company_id == company.id)
        .order_by(FlatService.created_at, FlatService.name)
        .all()
    )
    overrides = {}
    if profile is not None:
        overrides = {
            o.flat_service_id: o
            for o in db.query(HireeFlatServiceOverride).filter(HireeFlatServiceOverride.profile_id == profile.id)
        }
    return [
        FlatServiceEntry(
            id=s.id,
            name=s.name,
            rate=s.rate,
            override=rate_override_from_row(overrides.get(s.id)),
        )
        for s in services
    ]


def tier_entries(db: Session, company: Company) -> list[TierEntry]:
    tiers = db.query(Tier).filter(Tier.company_id == company.id).order_by(Tier.min_sqft).all()
    return [TierEntry(id=t.id, min_sqft=t.min_sqft, max_sqft=t.max_sqft) for t in tiers]


def tiered_rate_entries(db: Session, company: Company, profile: Profile | None) -> list[TieredRateEntry]:
    rates = (
        db.query(TieredRate)
        .join(Tier, TieredRate.tier_id == Tier.id)
        .filter(Tier.company_id == company.id)
        .all()
    )
    overrides = {}
    if profile is not None:
        overrides = {
            o.tiered_rate_id: o
            for o in db.query(HireeTieredRateOverride).filter(HireeTieredRateOverride.profile_id == profile.id)
        }
    return [
        TieredRateEntry(
            id=r.id,
            tier_id=r.tier_id,
            service_type=r.service_type,
            rate=r.rate,
            override=rate_override_from_row(overrides.get(r.id)),
        )
        for r in rates
    ]


def gear_entries(db: Session, company: Company, profile: Profile | None) -> list[GearEntry]:
    """Catalog gear (with this hiree's overrides) followed by the hiree's custom gear."""
    catalog = (
        db.query(GearItem)
        .filter(GearItem.company_id == company.id, GearItem.profile_id.is_(None))
        .order_by(GearItem.created_at, GearItem.name)
        .all()
    )
    custom = []
    overrides = {}
    if profile is not None:
        custom = (
            db.query(GearItem)
            .filter(GearItem.company_id == company.id, GearItem.profile_id == profile.id)
            .order_by(GearItem.created_at, GearItem.name)
            .all()
        )
        overrides = {
            o.gear_item_id: o
            for o in db.query(HireeGearOverride).filter(HireeGearOverride.profile_id == profile.id)
        }
    return [
        GearEntry(
            id=item.id,
            name=item.name,
            is_custom=bool(item.is_custom),
            is_required=bool(item.is_required),
            notes=item.notes,
            estimated_price_cad=item.estimated_price_cad,
            override=gear_override_from_row(overrides.get(item.id)),
        )
        for item in [*catalog, *custom]
    ]


def offer_info(offer: OfferDetails | None) -> OfferInfo | None:
    if offer is None:
        return None
    return OfferInfo(
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
    )


def latest_signature(db: Session, company: Company, profile: Profile | None, signature_type: str) -> str | None:
    query = db.query(Signature).filter(
        Signature.company_id == company.id,
        Signature.signature_type == signature_type,
    )
    if signature_type == "hiree":
        if profile is None:
            return None
        row = query.filter(Signature.profile_id == profile.id).order_by(Signature.created_at.desc()).first()
        return row.signature_data if row else None

    # Company signatures may be tied to one hiree; prefer that over the company-wide one
    row = None
    if profile is not None:
        row = query.filter(Signature.profile_id == profile.id).order_by(Signature.created_at.desc()).first()
    if row is None:
        row = query.filter(Signature.profile_id.is_(None)).order_by(Signature.created_at.desc()).first()
    return row.signature_data if row else None


def load_context(db: Session, company: Company, profile: Profile | None, doc_type: str) -> AssemblyContext:
    template = None
    offer = None
    if profile is not None:
        template = (
            db.query(Template)
            .filter(Template.profile_id == profile.id, Template.document_type == doc_type)
            .first()
        )
        offer = db.query(OfferDetails).filter(OfferDetails.profile_id == profile.id).first()

    return AssemblyContext(
        company=company_info(company),
        profile=hiree_info(profile) if profile is not None else None,
        flat_services=flat_service_entries(db, company, profile),
        tiers=tier_entries(db, company),
        tiered_rates=tiered_rate_entries(db, company, profile),
        gear=gear_entries(db, company, profile),
        offer=offer_info(offer),
        template=TemplateInfo(
            clauses=list(template.clauses or []) if template else [],
            addendum=(template.addendum or "") if template else "",
        ),
        hiree_signature=latest_signature(db, company, profile, "hiree"),
        company_signature=latest_signature(db, company, profile, "company"),
    )
