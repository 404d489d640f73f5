import uuid

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session

from onboarding.config import settings
from onboarding.database import get_db
from onboarding.dependencies import require_account, require_company
from onboarding.models.company import Company
from onboarding.schemas.company import CompanyResponse, CompanyUpsert
from onboarding.services.logo_service import ALLOWED_LOGO_TYPES, remove_logo, store_logo
from onboarding.utils.formatting import now_iso

router = APIRouter(prefix="/company", tags=["company"])


def _company_to_response(company: Company) -> CompanyResponse:
    return CompanyResponse(
        id=company.id,
        name=company.name,
        jurisdiction=company.jurisdiction,
        has_logo=bool(company.logo_path),
        logo_mime_type=company.logo_mime_type,
        created_at=company.created_at,
        updated_at=company.updated_at,
    )


@router.get("", response_model=CompanyResponse)
async def get_company(company: Company = Depends(require_company)):
    return _company_to_response(company)


@router.put("", response_model=CompanyResponse)
async def upsert_company(
    req: CompanyUpsert,
    account_id: str = Depends(require_account),
    db: Session = Depends(get_db),
):
    name = req.name.strip()
    jurisdiction = req.jurisdiction.strip()
    if not name or not jurisdiction:
        raise HTTPException(status_code=400, detail="Please fill in company name and jurisdiction")

    now = now_iso()
    company = db.query(Company).filter(Company.owner_id == account_id).first()
    if company is None:
        company = Company(
            id=str(uuid.uuid4()),
            owner_id=account_id,
            name=name,
            jurisdiction=jurisdiction,
            created_at=now,
            updated_at=now,
        )
        db.add(company)
    else:
        company.name = name
        company.jurisdiction = jurisdiction
        company.updated_at = now
    db.commit()
    db.refresh(company)
    return _company_to_response(company)


@router.post("/logo", response_model=CompanyResponse)
async def upload_logo(
    file: UploadFile = File(...),
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    if file.content_type not in ALLOWED_LOGO_TYPES:
        raise HTTPException(status_code=400, detail="Logo must be a PNG, JPEG or GIF image")

    max_bytes = settings.max_upload_bytes
    size = 0
    chunks: list[bytes] = []
    while True:
        chunk = await file.read(1024 * 1024)
        if not chunk:
            break
        size += len(chunk)
        if size > max_bytes:
            raise HTTPException(status_code=413, detail=f"File too large (max {max_bytes} bytes)")
        chunks.append(chunk)

    content = b"".join(chunks)
    if not content:
        raise HTTPException(status_code=400, detail="Empty file")

    previous = company.logo_path
    company.logo_path = store_logo(company.id, file.filename, content, file.content_type)
    company.logo_mime_type = file.content_type
    company.updated_at = now_iso()
    db.commit()
    db.refresh(company)
    if previous and previous != company.logo_path:
        remove_logo(previous)
    return _company_to_response(company)


@router.delete("/logo", response_model=CompanyResponse)
async def delete_logo(company: Company = Depends(require_company), db: Session = Depends(get_db)):
    remove_logo(company.logo_path)
    company.logo_path = None
    company.logo_mime_type = None
    company.updated_at = now_iso()
    db.commit()
    db.refresh(company)
    return _company_to_response(company)
