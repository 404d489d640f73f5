from pathlib import Path
from onboarding.config import settings


def ensure_data_dirs(data_dir: Path | None = None) -> Path:
    path = data_dir or settings.data_dir
    path.mkdir(parents=True, exist_ok=True)
    (path / "logos").mkdir(exist_ok=True)
    return path


def sanitize_filename(name: str) -> str:
    keep = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789._-")
    return "".join(c if c in keep else "_" for c in name)
