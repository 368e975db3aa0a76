import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from feetracker.api.v1.auth.router import router as auth_router
from feetracker.api.v1.classes.router import router as classes_router
from feetracker.api.v1.pages.router import router as pages_router
from feetracker.api.v1.records.router import router as records_router
from feetracker.api.v1.reports.router import router as reports_router
from feetracker.api.v1.scan.router import router as scan_router
from feetracker.api.v1.staff.router import router as staff_router
from feetracker.api.v1.students.router import router as students_router
from feetracker.auth.guard import SessionGuardMiddleware
from feetracker.auth.services import AuthGateway
from feetracker.backend.base import Backend
from feetracker.backend.factory import build_backend
from feetracker.core.config import Settings, load_settings
from feetracker.core.logging import configure_logging
from feetracker.payments.scanning import ScanSessionStore

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, backend: Optional[Backend] = None) -> FastAPI:
    """Build the application around an explicitly constructed backend."""
    settings = settings or load_settings()
    configure_logging(settings.log_level)
    backend = backend or build_backend(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await backend.prepare()
        logger.info("Backend ready: %s", type(backend).__name__)
        yield
        await backend.close()

    app = FastAPI(title="School Fee Tracker", lifespan=lifespan)
    app.state.settings = settings
    app.state.backend = backend
    app.state.gateway = AuthGateway(backend, settings)
    app.state.scan_sessions = ScanSessionStore()

    app.add_middleware(SessionGuardMiddleware)
    # CORS: allow frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(pages_router)
    app.include_router(auth_router)
    app.include_router(classes_router)
    app.include_router(students_router)
    app.include_router(staff_router)
    app.include_router(scan_router)
    app.include_router(records_router)
    app.include_router(reports_router)

    return app
