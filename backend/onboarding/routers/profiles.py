import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from onboarding.database import get_db
from onboarding.dependencies import require_company, require_profile
from onboarding.models.company import Company, Profile
from onboarding.schemas.company import ProfileCreate, ProfileResponse, ProfileUpdate
from onboarding.utils.formatting import now_iso

router = APIRouter(prefix="/profiles", tags=["profiles"])


def _profile_to_response(profile: Profile) -> ProfileResponse:
    return ProfileResponse(
        id=profile.id,
        company_id=profile.company_id,
        name=profile.name,
        dob=profile.dob,
        address=profile.address,
        email=profile.email,
        phone=profile.phone,
        hire_date=profile.hire_date,
        created_at=profile.created_at,
        updated_at=profile.updated_at,
    )


@router.post("", response_model=ProfileResponse, status_code=201)
async def create_profile(
    req: ProfileCreate,
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
):
    if not req.name.strip():
        raise HTTPException(status_code=400, detail="Hiree name is required")
    now = now_iso()
    profile = Profile(
        id=str(uuid.uuid4()),
        company_id=company.id,
        name=req.name.strip(),
        dob=req.dob,
        address=req.address,
        email=req.email,
        phone=req.phone,
        hire_date=req.hire_date,
        created_at=now,
        updated_at=now,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return _profile_to_response(profile)


@router.get("", response_model=list[ProfileResponse])
async def list_profiles(company: Company = Depends(require_company), db: Session = Depends(get_db)):
    profiles = (
        db.query(Profile)
        .filter(Profile.company_id == company.id)
        .order_by(Profile.updated_at.desc())
        .all()
    )
    return [_profile_to_response(p) for p in profiles]


@router.get("/{profile_id}", response_model=ProfileResponse)
async def get_profile(profile: Profile = Depends(require_profile)):
    return _profile_to_response(profile)


@router.put("/{profile_id}", response_model=ProfileResponse)
async def update_profile(
    req: ProfileUpdate,
    profile: Profile = Depends(require_profile),
    db: Session = Depends(get_db),
):
    update_data = req.model_dump(exclude_unset=True)
    if "name" in update_data and not (update_data["name"] or "").strip():
        raise HTTPException(status_code=400, detail="Hiree name is required")
    for key, value in update_data.items():
        setattr(profile, key, value)
    profile.updated_at = now_iso()
    db.commit()
    db.refresh(profile)
    return _profile_to_response(profile)


@router.delete("/{profile_id}")
async def delete_profile(profile: Profile = Depends(require_profile), db: Session = Depends(get_db)):
    db.delete(profile)
    db.commit()
    return {"message": "Profile deleted"}
