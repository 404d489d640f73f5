from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from onboarding.database import get_db
from onboarding.dependencies import require_account, require_session_token
from onboarding.models.account import Account
from onboarding.schemas.auth import (
    AccountResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    ThrottleResponse,
)
from onboarding.services.account_service import account_service

router = APIRouter(prefix="/auth", tags=["auth"])


def _account_to_response(account: Account) -> AccountResponse:
    return AccountResponse(id=account.id, email=account.email, created_at=account.created_at)


@router.post("/register", response_model=AccountResponse, status_code=201)
async def register(req: RegisterRequest, db: Session = Depends(get_db)):
    try:
        account = account_service.register(db, req.email, req.password, req.confirm_password)
    except LookupError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _account_to_response(account)


@router.post("/login", response_model=LoginResponse | ThrottleResponse)
async def login(req: LoginRequest, request: Request, db: Session = Depends(get_db)):
    client_host = request.client.host if request.client else "unknown"
    result = account_service.login(db, req.email, req.password, throttle_key=f"login:{client_host}")
    if result is None:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if "error" in result:
        raise HTTPException(status_code=429, detail=result)
    return LoginResponse(**result)


@router.post("/logout")
async def logout(token: str = Depends(require_session_token)):
    account_service.logout(token)
    return {"message": "Signed out"}


@router.get("/me", response_model=AccountResponse)
async def me(account_id: str = Depends(require_account), db: Session = Depends(get_db)):
    account = db.query(Account).filter(Account.id == account_id).first()
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")
    return _account_to_response(account)
