from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from onboarding.database import get_db
from onboarding.dependencies import require_company
from onboarding.models.company import Company
from onboarding.services import backup_service
from onboarding.services.logo_service import remove_logo
from onboarding.utils.formatting import now_iso

router = APIRouter(prefix="/data", tags=["data"])


@router.get("/export")
async def export_data(company: Company = Depends(require_company), db: Session = Depends(get_db)):
    return backup_service.export_json(db, company)


@router.post("/import")
async def import_data(
    data: dict = Body(...),
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    try:
        counts = backup_service.import_json(db, company, data)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"message": "Data imported", "imported": counts}


@router.get("/summary")
async def data_summary(company: Company = Depends(require_company), db: Session = Depends(get_db)):
    return backup_service.summary(db, company)


@router.delete("")
async def clear_data(company: Company = Depends(require_company), db: Session = Depends(get_db)):
    """Remove every hiree, price list, gear item and signature. The company record stays."""
    remove_logo(company.logo_path)
    company.logo_path = None
    company.logo_mime_type = None
    company.updated_at = now_iso()
    deleted = backup_service.clear_company_data(db, company)
    return {"message": "All data cleared", "deleted": deleted}
