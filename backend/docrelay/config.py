"""Application configuration."""
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings.

    Built once at startup and handed to the services that need it.
    The remote endpoint and both credentials have no default, so a
    missing value fails validation before the server starts.
    """
    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "info"
    log_format: str = "console"  # console|json
    cors_origins: list[str] = ["*"]

    # Remote document translation API
    papago_base: str
    ncp_key_id: str
    ncp_key: str

    # Per-call timeouts (seconds)
    submit_timeout: float = 180.0
    status_timeout: float = 30.0
    download_timeout: float = 120.0

    # Job polling
    poll_interval_seconds: float = 1.5
    job_deadline_seconds: float = 12 * 60

    # Filesystem
    upload_dir: Path = Path("uploads")
    public_dir: Path = Path("public")

    @property
    def api_base(self) -> str:
        """Remote base URL without a trailing slash."""
        return self.papago_base.rstrip("/")

    @property
    def auth_headers(self) -> dict[str, str]:
        """Credential headers required by every remote call."""
        return {
            "X-NCP-APIGW-API-KEY-ID": self.ncp_key_id,
            "X-NCP-APIGW-API-KEY": self.ncp_key,
        }

    class Config:
        env_file = ".env"
        case_sensitive = False
        frozen = True
