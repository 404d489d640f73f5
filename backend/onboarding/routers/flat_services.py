import logging
import uuid

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from onboarding.database import get_db
from onboarding.dependencies import require_company
from onboarding.models.company import Company
from onboarding.models.pricing import FlatService
from onboarding.schemas.pricing import (
    FlatServiceCreate,
    FlatServiceResponse,
    FlatServiceUpdate,
    ImportResponse,
)
from onboarding.services.csv_service import export_flat_services_csv, parse_flat_services_csv
from onboarding.utils.formatting import now_iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/flat-services", tags=["pricing"])


def _service_to_response(service: FlatService) -> FlatServiceResponse:
    return FlatServiceResponse(
        id=service.id,
        name=service.name,
        rate=service.rate,
        created_at=service.created_at,
        updated_at=service.updated_at,
    )


def _get_service(db: Session, company: Company, service_id: str) -> FlatService:
    service = db.query(FlatService).filter(
        FlatService.id == service_id,
        FlatService.company_id == company.id,
    ).first()
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


@router.get("", response_model=list[FlatServiceResponse])
async def list_flat_services(company: Company = Depends(require_company), db: Session = Depends(get_db)):
    services = (
        db.query(FlatService)
        .filter(FlatService.company_id == company.id)
        .order_by(FlatService.created_at, FlatService.name)
        .all()
    )
    return [_service_to_response(s) for s in services]


@router.post("", response_model=FlatServiceResponse, status_code=201)
async def create_flat_service(
    req: FlatServiceCreate,
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    if not req.name.strip():
        raise HTTPException(status_code=400, detail="Service name is required")
    now = now_iso()
    service = FlatService(
        id=str(uuid.uuid4()),
        company_id=company.id,
        name=req.name.strip(),
        rate=req.rate.strip() or "0",
        created_at=now,
        updated_at=now,
    )
    db.add(service)
    db.commit()
    db.refresh(service)
    return _service_to_response(service)


@router.get("/export.csv")
async def export_flat_services(company: Company = Depends(require_company), db: Session = Depends(get_db)):
    services = (
        db.query(FlatService)
        .filter(FlatService.company_id == company.id)
        .order_by(FlatService.created_at, FlatService.name)
        .all()
    )
    return Response(
        content=export_flat_services_csv(services),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="flat_services.csv"'},
    )


@router.post("/import", response_model=ImportResponse)
async def import_flat_services(
    file: UploadFile = File(...),
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    """Append services from a ``service,rate`` CSV. Existing services are kept."""
    try:
        rows = parse_flat_services_csv((await file.read()).decode("utf-8"))
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="CSV must be UTF-8 encoded")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    now = now_iso()
    for name, rate in rows:
        db.add(FlatService(
            id=str(uuid.uuid4()),
            company_id=company.id,
            name=name,
            rate=rate,
            created_at=now,
            updated_at=now,
        ))
    db.commit()
    logger.info("Imported %d flat services for company %s", len(rows), company.id)
    return ImportResponse(imported=len(rows), message=f"Imported {len(rows)} services")


@router.put("/{service_id}", response_model=FlatServiceResponse)
async def update_flat_service(
    service_id: str,
    req: FlatServiceUpdate,
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    service = _get_service(db, company, service_id)
    update_data = req.model_dump(exclude_unset=True)
    if "name" in update_data:
        if not (update_data["name"] or "").strip():
            raise HTTPException(status_code=400, detail="Service name is required")
        update_data["name"] = update_data["name"].strip()
    if "rate" in update_data:
        update_data["rate"] = (update_data["rate"] or "").strip() or "0"
    for key, value in update_data.items():
        setattr(service, key, value)
    service.updated_at = now_iso()
    db.commit()
    db.refresh(service)
    return _service_to_response(service)


@router.delete("/{service_id}")
async def delete_flat_service(
    service_id: str,
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    service = _get_service(db, company, service_id)
    db.delete(service)
    db.commit()
    return {"message": "Service deleted"}
