import logging
import secrets
from typing import Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings

from feetracker.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    # Backend endpoint: an http(s) URL for a hosted REST backend, otherwise a
    # SQLAlchemy database URL.
    backend_url: str = Field(..., alias="BACKEND_URL")
    backend_api_key: str = Field(..., alias="BACKEND_API_KEY")
    backend_timeout_seconds: float = Field(10.0, alias="BACKEND_TIMEOUT_SECONDS")

    session_secret_key: Optional[str] = Field(None, alias="SESSION_SECRET_KEY")
    session_algorithm: str = Field("HS256", alias="SESSION_ALGORITHM")
    session_expire_minutes: int = Field(720, alias="SESSION_EXPIRE_MINUTES")
    session_cookie_name: str = Field("token", alias="SESSION_COOKIE_NAME")

    login_path: str = Field("/login", alias="LOGIN_PATH")
    landing_path: str = Field("/dashboard", alias="LANDING_PATH")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        populate_by_name = True

    @property
    def uses_rest_backend(self) -> bool:
        return self.backend_url.startswith(("http://", "https://"))


def load_settings(**overrides) -> Settings:
    """Load settings, turning missing required values into a ConfigurationError."""
    try:
        settings = Settings(**overrides)
    except ValidationError as e:
        missing = [
            str(err["loc"][0]) for err in e.errors() if err.get("type") == "missing"
        ]
        if missing:
            raise ConfigurationError(f"Missing env var: {', '.join(missing)}") from e
        raise ConfigurationError(str(e)) from e

    for name, value in (("BACKEND_URL", settings.backend_url), ("BACKEND_API_KEY", settings.backend_api_key)):
        if not value.strip():
            raise ConfigurationError(f"Missing env var: {name}")

    if not settings.session_secret_key:
        logger.warning("SESSION_SECRET_KEY not set; sessions will not survive a restart")
        settings.session_secret_key = secrets.token_urlsafe(32)
    return settings
