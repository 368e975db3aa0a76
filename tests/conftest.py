from datetime import date
from typing import AsyncGenerator, Dict

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from feetracker.auth.dependencies import get_clock
from feetracker.backend.base import BackendUser
from feetracker.backend.sql import SqlBackend
from feetracker.core.config import Settings, load_settings
from feetracker.core.enums import Role
from feetracker.db.session import build_sessionmaker
from feetracker.main import create_app

TEST_DATABASE_URL = "sqlite+aiosqlite://"
BACKEND_SECRET = "test-backend-secret"
TODAY = date(2026, 3, 2)

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "AdminPass123"
STAFF_EMAIL = "staff@example.com"
STAFF_PASSWORD = "StaffPass123"


@pytest.fixture()
def settings() -> Settings:
    return load_settings(
        _env_file=None,
        BACKEND_URL=TEST_DATABASE_URL,
        BACKEND_API_KEY=BACKEND_SECRET,
        SESSION_SECRET_KEY="test-session-secret",
    )


@pytest.fixture()
async def backend() -> AsyncGenerator[SqlBackend, None]:
    """SQL backend over a private in-memory SQLite database."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    sql_backend = SqlBackend(build_sessionmaker(engine), BACKEND_SECRET, engine=engine)
    await sql_backend.prepare()
    yield sql_backend
    await engine.dispose()


@pytest.fixture()
def app(settings: Settings, backend: SqlBackend):
    application = create_app(settings, backend)
    application.dependency_overrides[get_clock] = lambda: (lambda: TODAY)
    return application


@pytest.fixture()
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def make_account(backend: SqlBackend, email: str, password: str, full_name: str, role: Role) -> BackendUser:
    user = await backend.create_user(email, password)
    await backend.insert("user_profiles", {"id": user.id, "full_name": full_name, "role": role.value})
    return user


async def login(client: AsyncClient, email: str, password: str) -> Dict[str, str]:
    response = await client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    # Authenticate by header only; keep the cookie jar empty between logins
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture()
async def admin_user(backend: SqlBackend) -> BackendUser:
    return await make_account(backend, ADMIN_EMAIL, ADMIN_PASSWORD, "Ama Mensah", Role.ADMIN)


@pytest.fixture()
async def staff_user(backend: SqlBackend) -> BackendUser:
    return await make_account(backend, STAFF_EMAIL, STAFF_PASSWORD, "Kofi Boateng", Role.STAFF)


@pytest.fixture()
async def admin_headers(client: AsyncClient, admin_user: BackendUser) -> Dict[str, str]:
    return await login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture()
async def staff_headers(client: AsyncClient, staff_user: BackendUser) -> Dict[str, str]:
    return await login(client, STAFF_EMAIL, STAFF_PASSWORD)


@pytest.fixture()
async def school(backend: SqlBackend) -> Dict[str, dict]:
    """One class with a feeding fee of 6 and one student scanned as STU-1001."""
    primary = await backend.insert(
        "classes",
        {
            "class_name": "Primary 1",
            "set_feeding_fees": 6,
            "set_transport_fees": 6,
            "set_school_fees": 300,
        },
    )
    student = await backend.insert(
        "students",
        {
            "student_code": "STU-1001",
            "name": "Akosua Owusu",
            "class_id": primary["id"],
            "parent_contact": "0244000001",
        },
    )
    return {"class": primary, "student": student}
