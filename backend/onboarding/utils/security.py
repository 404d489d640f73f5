import secrets
import string
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError

ph = PasswordHasher(time_cost=3, memory_cost=65536, parallelism=4)

_TOKEN_ALPHABET = string.ascii_letters + string.digits


def hash_password(password: str) -> str:
    return ph.hash(password)


def verify_password(stored_hash: str, password: str) -> bool:
    try:
        return ph.verify(stored_hash, password)
    except VerifyMismatchError:
        return False


def generate_token() -> str:
    return secrets.token_hex(32)


def generate_signing_token(length: int = 32) -> str:
    """Opaque alphanumeric token for public signing links."""
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(length))
