from pydantic import BaseModel


class SignatureCreate(BaseModel):
    signature_type: str
    signature_data: str
    profile_id: str | None = None
    name: str | None = None


class SignatureResponse(BaseModel):
    id: str
    signature_type: str
    profile_id: str | None
    name: str | None
    signature_data: str
    created_at: str


class SignatureLinkResponse(BaseModel):
    id: str
    profile_id: str
    document_type: str
    document_title: str
    document_id: str
    signature_token: str
    url: str
    is_signed: bool
    signed_at: str | None
    signed_by: str | None
    created_at: str
    updated_at: str


class SignatureLinkDetail(SignatureLinkResponse):
    document_html: str
    tenant_signature_data: str | None
    tenant_initial_data: str | None
    hiree_signature_data: str | None
    hiree_initial_data: str | None


class SignatureResetRequest(BaseModel):
    reason: str | None = None


class PublicSignatureView(BaseModel):
    document_type: str
    document_title: str
    document_id: str
    document_html: str
    company_name: str
    hiree_name: str
    is_signed: bool
    signed_at: str | None
    signed_by: str | None


class PublicSignRequest(BaseModel):
    signer: str = "hiree"
    signature_data: str
    initial_data: str | None = None
