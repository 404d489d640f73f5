"""JSON export and import of everything one company owns."""

import logging

from sqlalchemy import Boolean, Float, Integer, func
from sqlalchemy.exc import SQLAlchemyError
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
from onboarding.models.signature import DocumentSignatureLink, Signature
from onboarding.services.tiers import OVERLAP, tiers_are_valid
from onboarding.utils.formatting import now_iso

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0.0"

# (section key, model, company scoped, natural key, required references)
_SECTIONS = [
    ("profiles", Profile, True, (), ()),
    ("flat_services", FlatService, True, (), ()),
    ("tiers", Tier, True, (), ()),
    ("tiered_rates", TieredRate, False, ("tier_id", "service_type"), ("tier_id",)),
    ("gear_items", GearItem, True, (), ()),
    ("flat_service_overrides", HireeFlatServiceOverride, False,
     ("profile_id", "flat_service_id"), ("profile_id", "flat_service_id")),
    ("tiered_rate_overrides", HireeTieredRateOverride, False,
     ("profile_id", "tiered_rate_id"), ("profile_id", "tiered_rate_id")),
    ("gear_overrides", HireeGearOverride, False,
     ("profile_id", "gear_item_id"), ("profile_id", "gear_item_id")),
    ("offers", OfferDetails, False, ("profile_id",), ("profile_id",)),
    ("templates", Template, False, ("profile_id", "document_type"), ("profile_id",)),
    ("signatures", Signature, True, (), ()),
]


def _row_to_dict(obj) -> dict:
    return {c.name: getattr(obj, c.name) for c in obj.__table__.columns}


def _owned_ids(db: Session, company: Company) -> dict[str, set[str]]:
    def ids(query):
        return {row[0] for row in query}

    return {
        "profile_id": ids(db.query(Profile.id).filter(Profile.company_id == company.id)),
        "flat_service_id": ids(db.query(FlatService.id).filter(FlatService.company_id == company.id)),
        "tier_id": ids(db.query(Tier.id).filter(Tier.company_id == company.id)),
        "tiered_rate_id": ids(
            db.query(TieredRate.id).join(Tier, TieredRate.tier_id == Tier.id).filter(Tier.company_id == company.id)
        ),
        "gear_item_id": ids(db.query(GearItem.id).filter(GearItem.company_id == company.id)),
    }


def _section_rows(db: Session, company: Company, model, owned: dict[str, set[str]]) -> list:
    if "company_id" in model.__table__.columns:
        return db.query(model).filter(model.company_id == company.id).all()
    if model is TieredRate:
        return db.query(model).filter(model.tier_id.in_(owned["tier_id"])).all()
    return db.query(model).filter(model.profile_id.in_(owned["profile_id"])).all()


def export_json(db: Session, company: Company) -> dict:
    owned = _owned_ids(db, company)
    data = {
        "version": EXPORT_VERSION,
        "exportedAt": now_iso(),
        "company": {"name": company.name, "jurisdiction": company.jurisdiction},
    }
    for key, model, *_ in _SECTIONS:
        rows = _section_rows(db, company, model, owned)
        data[key] = [_row_to_dict(r) for r in rows]
    return data


def summary(db: Session, company: Company) -> dict:
    owned = _owned_ids(db, company)
    links = db.query(func.count(DocumentSignatureLink.id)).filter(
        DocumentSignatureLink.company_id == company.id
    ).scalar()
    return {
        "profiles": len(owned["profile_id"]),
        "flat_services": len(owned["flat_service_id"]),
        "tiers": len(owned["tier_id"]),
        "gear_items": len(owned["gear_item_id"]),
        "offers": db.query(func.count(OfferDetails.id)).filter(
            OfferDetails.profile_id.in_(owned["profile_id"])
        ).scalar(),
        "templates": db.query(func.count(Template.id)).filter(
            Template.profile_id.in_(owned["profile_id"])
        ).scalar(),
        "signatures": db.query(func.count(Signature.id)).filter(Signature.company_id == company.id).scalar(),
        "signature_links": links,
    }


def _coerce_numbers(model, values: dict):
    """Numeric columns must hold numbers; SQLite would store any text as-is."""
    for column in model.__table__.columns:
        value = values.get(column.name)
        if value is None or isinstance(column.type, Boolean):
            continue
        if value == "":
            values[column.name] = None
        elif isinstance(column.type, Integer):
            number = float(value)
            if not number.is_integer():
                raise ValueError(f"{column.name} must be a whole number")
            values[column.name] = int(number)
        elif isinstance(column.type, Float):
            values[column.name] = float(value)


def _import_record(db: Session, company: Company, model, company_scoped: bool,
                   natural_key: tuple, refs: tuple, record: dict, owned: dict[str, set[str]]) -> bool:
    columns = set(model.__table__.columns.keys())
    values = {k: v for k, v in record.items() if k in columns}
    if not values.get("id"):
        return False
    _coerce_numbers(model, values)

    if company_scoped:
        values["company_id"] = company.id
        # Custom gear and hiree signatures may only point at this company's hirees
        if values.get("profile_id") and values["profile_id"] not in owned["profile_id"]:
            return False
    if any(values.get(ref) not in owned[ref] for ref in refs):
        return False

    existing = db.get(model, values["id"])
    if existing is not None:
        if company_scoped and existing.company_id != company.id:
            return False
        if refs and getattr(existing, refs[0]) not in owned[refs[0]]:
            return False
    elif natural_key:
        twin = db.query(model).filter_by(**{k: values.get(k) for k in natural_key}).first()
        if twin is not None:
            values["id"] = twin.id

    now = now_iso()
    for stamp in ("created_at", "updated_at"):
        if stamp in columns and not values.get(stamp):
            values[stamp] = now
    db.merge(model(**values))
    return True


def import_json(db: Session, company: Company, data: dict) -> dict:
    """Merge exported data into the company. Rows are matched by id."""
    if not isinstance(data, dict) or "version" not in data:
        raise ValueError("Invalid data format")

    incoming_company = data.get("company") or {}
    if incoming_company.get("name"):
        company.name = incoming_company["name"]
    if incoming_company.get("jurisdiction"):
        company.jurisdiction = incoming_company["jurisdiction"]

    counts = {}
    try:
        for key, model, company_scoped, natural_key, refs in _SECTIONS:
            owned = _owned_ids(db, company)
            imported = 0
            for record in data.get(key) or []:
                if isinstance(record, dict) and _import_record(
                    db, company, model, company_scoped, natural_key, refs, record, owned
                ):
                    imported += 1
            db.flush()
            counts[key] = imported
    except (SQLAlchemyError, TypeError, ValueError, OverflowError) as exc:
        db.rollback()
        logger.warning("Rejected data import for company %s: %s", company.id, exc)
        raise ValueError("Invalid data format") from exc

    tiers = db.query(Tier).filter(Tier.company_id == company.id).all()
    if not tiers_are_valid([(t.min_sqft, t.max_sqft) for t in tiers]):
        db.rollback()
        raise ValueError(OVERLAP)

    company.updated_at = now_iso()
    db.commit()
    logger.info("Imported data for company %s: %s", company.id, counts)
    return counts


def clear_company_data(db: Session, company: Company) -> dict:
    """Delete every hiree, catalog and signature row, keeping the company itself."""
    counts = summary(db, company)
    for model in (DocumentSignatureLink, Signature, GearItem, Tier, FlatService, Profile):
        db.query(model).filter(model.company_id == company.id).delete(synchronize_session=False)
    db.commit()
    return counts
