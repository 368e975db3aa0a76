from feetracker.backend.base import Backend
from feetracker.backend.rest import RestBackend
from feetracker.backend.sql import SqlBackend
from feetracker.core.config import Settings


def build_backend(settings: Settings) -> Backend:
    """Construct the backend the configuration points at."""
    if settings.uses_rest_backend:
        return RestBackend(
            settings.backend_url,
            settings.backend_api_key,
            timeout=settings.backend_timeout_seconds,
        )
    return SqlBackend.from_url(
        settings.backend_url,
        settings.backend_api_key,
        token_expire_minutes=settings.session_expire_minutes,
    )
