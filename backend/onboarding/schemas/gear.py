from pydantic import BaseModel


class GearCreate(BaseModel):
    name: str
    is_required: bool = True
    notes: str | None = None
    estimated_price_cad: float | None = None


class GearUpdate(BaseModel):
    name: str | None = None
    is_required: bool | None = None
    notes: str | None = None
    estimated_price_cad: float | None = None


class GearResponse(BaseModel):
    id: str
    name: str
    profile_id: str | None
    is_custom: bool
    is_required: bool
    notes: str | None
    estimated_price_cad: float | None
    price_source: str | None
    last_estimated_at: str | None
    created_at: str
    updated_at: str


class ResolvedGearResponse(BaseModel):
    id: str
    name: str
    is_custom: bool
    has_override: bool
    required: bool
    notes: str
    estimated_price_cad: float | None


class EstimateRequest(BaseModel):
    scope: str = "all_gear"


class EstimatedItem(BaseModel):
    name: str
    estimated_price_cad: float
    confidence: str
    reasoning: str


class EstimateResponse(BaseModel):
    items: list[EstimatedItem]
    updated: int
    total_estimated_cost_cad: float
    tokens_used: int
    cost_usd: float
