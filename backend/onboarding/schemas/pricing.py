from pydantic import BaseModel


class FlatServiceCreate(BaseModel):
    name: str
    rate: str = "0"


class FlatServiceUpdate(BaseModel):
    name: str | None = None
    rate: str | None = None


class FlatServiceResponse(BaseModel):
    id: str
    name: str
    rate: str
    created_at: str
    updated_at: str


class TierCreate(BaseModel):
    # Blank min auto-fills to one above the current highest max
    min_sqft: int | None = None
    max_sqft: int | None = None


class TierUpdate(BaseModel):
    min_sqft: int | None = None
    max_sqft: int | None = None


class TieredRateUpdate(BaseModel):
    rate: str


class TieredRateResponse(BaseModel):
    id: str
    tier_id: str
    service_type: str
    rate: str


class TierResponse(BaseModel):
    id: str
    min_sqft: int
    max_sqft: int
    label: str
    rates: dict[str, TieredRateResponse] = {}
    created_at: str
    updated_at: str


class ImportResponse(BaseModel):
    imported: int
    message: str


class RateOverrideUpdate(BaseModel):
    custom_rate: float | None = None
    is_enabled: bool = True


class GearOverrideUpdate(BaseModel):
    is_required: bool
    notes: str | None = None


class ResolvedFlatRate(BaseModel):
    service_id: str
    name: str
    base_rate: float
    custom_rate: float | None
    override_enabled: bool
    effective_rate: float


class ResolvedTieredRate(BaseModel):
    tiered_rate_id: str
    tier_id: str
    label: str
    service_type: str
    base_rate: float
    custom_rate: float | None
    override_enabled: bool
    effective_rate: float


class PricingResponse(BaseModel):
    profile_id: str
    flat_services: list[ResolvedFlatRate]
    tiered_rates: list[ResolvedTieredRate]
