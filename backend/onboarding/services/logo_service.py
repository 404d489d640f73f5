import base64
import hashlib
import logging
from pathlib import Path

from onboarding.config import settings
from onboarding.utils.filesystem import ensure_data_dirs, sanitize_filename

logger = logging.getLogger(__name__)

ALLOWED_LOGO_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
}


def store_logo(company_id: str, filename: str | None, content: bytes, mime_type: str) -> str:
    """Write logo bytes under the data dir. Returns the path relative to it."""
    ensure_data_dirs()
    digest = hashlib.sha256(content).hexdigest()[:12]
    stem = Path(sanitize_filename(filename or "logo")).stem or "logo"
    name = f"{company_id}_{digest}_{stem}{ALLOWED_LOGO_TYPES[mime_type]}"
    target = settings.logos_dir / name
    target.write_bytes(content)
    return str(target.relative_to(settings.data_dir))


def remove_logo(relative_path: str | None):
    if not relative_path:
        return
    target = settings.data_dir / relative_path
    if target.exists():
        target.unlink()


def logo_data_url(relative_path: str | None, mime_type: str | None) -> str | None:
    """Inline a stored logo so rendered documents do not depend on file URLs."""
    if not relative_path or not mime_type:
        return None
    target = settings.data_dir / relative_path
    if not target.exists():
        logger.warning("Logo file missing from data dir: %s", relative_path)
        return None
    encoded = base64.b64encode(target.read_bytes()).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
