import logging
import time
import uuid

from sqlalchemy import text
from sqlalchemy.orm import Session

from onboarding.config import settings
from onboarding.models.account import Account
from onboarding.utils.formatting import now_iso
from onboarding.utils.security import generate_token, hash_password, verify_password

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class AccountService:
    def __init__(self):
        self._sessions: dict[str, tuple[str, float]] = {}  # token -> (account_id, expires_at)

    def _cleanup_expired(self):
        now = time.time()
        self._sessions = {
            t: (account_id, exp) for t, (account_id, exp) in self._sessions.items() if exp > now
        }

    def register(self, db: Session, email: str, password: str, confirm_password: str) -> Account:
        email = email.strip().lower()
        if not email or "@" not in email:
            raise ValueError("Please enter a valid email address")
        if password != confirm_password:
            raise ValueError("Passwords do not match")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if db.query(Account).filter(Account.email == email).first():
            raise LookupError("An account with this email already exists")

        account = Account(
            id=str(uuid.uuid4()),
            email=email,
            password_hash=hash_password(password),
            created_at=now_iso(),
        )
        db.add(account)
        db.commit()
        db.refresh(account)
        logger.info("Registered account %s", account.id)
        return account

    def login(self, db: Session, email: str, password: str, throttle_key: str = "login") -> dict | None:
        delay = self._get_throttle_delay(db, throttle_key)
        if delay > 0:
            return {"error": "too_many_attempts", "retry_after_seconds": delay}

        account = db.query(Account).filter(Account.email == email.strip().lower()).first()
        if account is None or not verify_password(account.password_hash, password):
            self._record_failed_attempt(db, throttle_key)
            logger.warning("Failed login attempt for %s", throttle_key)
            return None

        self._reset_failed_attempts(db, throttle_key)
        token = generate_token()
        self._sessions[token] = (account.id, time.time() + settings.session_ttl_seconds)
        return {"token": token, "expires_in_seconds": settings.session_ttl_seconds}

    def logout(self, token: str):
        self._sessions.pop(token, None)

    def resolve(self, token: str) -> str | None:
        """Account id for a live session, extending its expiry."""
        self._cleanup_expired()
        session = self._sessions.get(token)
        if session is None:
            return None
        account_id, _ = session
        self._sessions[token] = (account_id, time.time() + settings.session_ttl_seconds)
        return account_id

    def _get_throttle_delay(self, db: Session, key: str) -> float:
        row = db.execute(
            text("SELECT failed_attempts, last_failed_at FROM auth_throttle WHERE key = :key"),
            {"key": key},
        ).fetchone()
        if not row:
            return 0
        failed_attempts = int(row[0])
        last_failed_at = float(row[1])

        if failed_attempts < 3:
            return 0
        if failed_attempts < 5:
            delay = 5.0
        elif failed_attempts < 10:
            delay = 30.0
        else:
            delay = 300.0
        remaining = delay - (time.time() - last_failed_at)
        return max(0, remaining)

    def _record_failed_attempt(self, db: Session, key: str):
        db.execute(
            text(
                """
                INSERT INTO auth_throttle (key, failed_attempts, last_failed_at)
                VALUES (:key, 1, :now)
                ON CONFLICT(key) DO UPDATE SET
                    failed_attempts = failed_attempts + 1,
                    last_failed_at = :now
                """
            ),
            {"key": key, "now": time.time()},
        )
        db.commit()

    def _reset_failed_attempts(self, db: Session, key: str):
        db.execute(
            text("DELETE FROM auth_throttle WHERE key = :key"),
            {"key": key},
        )
        db.commit()


account_service = AccountService()
