from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_dir: Path = Path.home() / "OnboardingDocs"
    session_ttl_seconds: int = 8 * 60 * 60
    # Upload and payload caps keep logo, signature and render requests bounded.
    max_upload_bytes: int = 2 * 1024 * 1024  # 2 MiB
    max_signature_chars: int = 500_000
    max_html_content_chars: int = 2_000_000
    pdf_format: str = "A4"
    pdf_margin_mm: float = 12.7
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str | None = None
    public_base_url: str = "http://127.0.0.1:5173"
    cors_origins: list[str] = [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
    ]
    api_prefix: str = "/api/v1"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    @property
    def db_path(self) -> Path:
        return self.data_dir / "db.sqlite"

    @property
    def logos_dir(self) -> Path:
        return self.data_dir / "logos"

    model_config = {"env_prefix": "ONBOARD_"}


settings = Settings()
