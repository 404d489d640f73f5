from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from onboarding.database import get_db
from onboarding.models.company import Company, Profile
from onboarding.services.account_service import account_service


async def require_session_token(authorization: str = Header(...)) -> str:
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")
    return authorization[7:]


async def require_account(token: str = Depends(require_session_token)) -> str:
    account_id = account_service.resolve(token)
    if account_id is None:
        raise HTTPException(status_code=401, detail="Session expired or invalid token")
    return account_id


def require_company(
    account_id: str = Depends(require_account),
    db: Session = Depends(get_db),
) -> Company:
    company = db.query(Company).filter(Company.owner_id == account_id).first()
    if not company:
        raise HTTPException(status_code=404, detail="Save company information first")
    return company


def require_profile(
    profile_id: str,
    company: Company = Depends(require_company),
    db: Session = Depends(get_db),
) -> Profile:
    profile = db.query(Profile).filter(
        Profile.id == profile_id,
        Profile.company_id == company.id,
    ).first()
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile
