"""
Pytest fixtures for WorkHub API tests.
Each test gets its own SQLite file database so that concurrent sessions
really compete for the same rows.
"""
import os

# Must be set before workhub.config.settings is imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./workhub_test.db"
os.environ["SECRET_KEY"] = "test-secret-key-with-enough-length-for-hs256"
os.environ["ENVIRONMENT"] = "testing"
os.environ["DEBUG"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["OTP_BACKEND"] = "memory"

from datetime import timedelta
from typing import Any, Dict

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from workhub.config.database import Base, build_engine, get_db
from workhub.core.otp_store import InMemoryOtpStore
from workhub.core.security import create_user_token
from workhub.database.models import Job, User
from workhub.main import app
from workhub.services.job_guard import utcnow
from workhub.services.notification_service import NotificationHub, get_notification_hub
from workhub.services.otp_service import OtpService, get_otp_service

TEST_OTP = "123456"


@pytest.fixture
async def engine(tmp_path):
    test_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'workhub.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def hub():
    return NotificationHub()


@pytest.fixture
def otp_store():
    return InMemoryOtpStore()


@pytest.fixture
async def client(session_factory, hub, otp_store):
    """Async client against the ASGI app with the test database wired in."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_hub] = lambda: hub
    app.dependency_overrides[get_otp_service] = lambda: OtpService(otp_store, mock_code=TEST_OTP)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()

# =============================================
# DATA BUILDERS
# =============================================

_phone_counter = iter(range(9000000000, 9999999999))


async def create_user(session: AsyncSession, role: str = "worker", **overrides: Any) -> User:
    values: Dict[str, Any] = {
        "name": f"Test {role.title()}",
        "phone": str(next(_phone_counter)),
        "role": role,
        "city": "Pune",
        "state": "Maharashtra",
        "skills": [],
        "experience": "fresher",
    }
    values.update(overrides)
    user = User(**values)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def create_job(session: AsyncSession, employer: User, **overrides: Any) -> Job:
    """Insert a job directly, bypassing schema checks such as future deadlines."""
    values: Dict[str, Any] = {
        "title": "Plumber needed",
        "description": "Fix leaking pipes in a two bedroom flat",
        "category": "plumbing",
        "job_type": "temporary",
        "address": "12 MG Road",
        "city": "Pune",
        "state": "Maharashtra",
        "pincode": "411001",
        "salary_type": "daily",
        "salary_min": 800,
        "salary_max": 1200,
        "experience": "fresher",
        "skills": ["plumbing"],
        "tags": [],
        "status": "active",
        "priority": "medium",
        "current_applications": 0,
        "created_date": utcnow(),
        "employer_id": employer.user_id,
    }
    values.update(overrides)
    job = Job(**values)
    job.refresh_search_fields()
    session.add(job)
    await session.commit()
    await session.refresh(job)
    return job


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_user_token(user.user_id, user.role)}"}


def days_from_now(days: float):
    return utcnow() + timedelta(days=days)


@pytest.fixture
async def employer(db_session):
    return await create_user(db_session, role="employer", name="Asha Builders", company_name="Asha Constructions")


@pytest.fixture
async def other_employer(db_session):
    return await create_user(db_session, role="employer", name="Other Employer")


@pytest.fixture
async def worker(db_session):
    return await create_user(db_session, role="worker", name="Ravi Kumar", skills=["plumbing", "welding"])


@pytest.fixture
async def worker_b(db_session):
    return await create_user(db_session, role="worker", name="Sunita Devi")


@pytest.fixture
async def admin(db_session):
    return await create_user(db_session, role="admin", name="Site Admin")


@pytest.fixture
async def job(db_session, employer):
    return await create_job(db_session, employer)


@pytest.fixture
async def service_session(session_factory):
    """Session for the code under test, separate from the one that seeds data."""
    async with session_factory() as session:
        yield session


async def fetch(session_factory, model, pk):
    """Read a row through a fresh session so no identity-map state leaks in."""
    async with session_factory() as session:
        return await session.get(model, pk)
