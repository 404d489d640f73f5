from pydantic import BaseModel


class OfferUpsert(BaseModel):
    position: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    work_schedule: str | None = None
    probation_months: int | None = None
    manager_name: str | None = None
    manager_email: str | None = None
    manager_phone: str | None = None
    manager_ext: str | None = None
    contact_ext: str | None = None
    return_by: str | None = None
    ceo_name: str | None = None
    base_salary: float = 0
    hourly_rate: float = 0
    commission: float = 0
    benefits: str | None = None
    selected_flat_service_ids: list[str] = []
    selected_tiered_service_types: list[str] = []
    responsibilities: str | None = None
    requirements: str | None = None
    terms: str | None = None
    status: str = "draft"


class OfferResponse(OfferUpsert):
    id: str
    profile_id: str
    created_at: str
    updated_at: str


class TemplateUpdate(BaseModel):
    clauses: list[str] = []
    addendum: str | None = None


class TemplateResponse(BaseModel):
    document_type: str
    clauses: list[str]
    addendum: str
    updated_at: str | None
