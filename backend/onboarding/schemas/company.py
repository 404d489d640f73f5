from pydantic import BaseModel


class CompanyUpsert(BaseModel):
    name: str
    jurisdiction: str


class CompanyResponse(BaseModel):
    id: str
    name: str
    jurisdiction: str
    has_logo: bool
    logo_mime_type: str | None
    created_at: str
    updated_at: str


class ProfileCreate(BaseModel):
    name: str
    dob: str | None = None
    address: str | None = None
    email: str | None = None
    phone: str | None = None
    hire_date: str | None = None


class ProfileUpdate(BaseModel):
    name: str | None = None
    dob: str | None = None
    address: str | None = None
    email: str | None = None
    phone: str | None = None
    hire_date: str | None = None


class ProfileResponse(BaseModel):
    id: str
    company_id: str
    name: str
    dob: str | None
    address: str | None
    email: str | None
    phone: str | None
    hire_date: str | None
    created_at: str
    updated_at: str
