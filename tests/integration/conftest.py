from types import SimpleNamespace

import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.utils.jwt import generate_jwt
from src.app.use_cases.onboarding import OnboardingSettings
from src.depends import (
    get_employee_records,
    get_identity_provisioner,
    get_notification_dispatcher,
    get_onboarding_settings,
    get_unit_of_work,
)
from tests.fixtures.fakes import (
    FakeEmployeeRecords,
    FakeIdentityProvisioner,
    FakeNotificationDispatcher,
)
from tests.fixtures.json_loader import OnboardingPayloads


@pytest_asyncio.fixture
def test_data():
    return OnboardingPayloads()


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
def collaborators():
    return SimpleNamespace(
        notifications=FakeNotificationDispatcher(),
        identity=FakeIdentityProvisioner(),
        employees=FakeEmployeeRecords(),
    )


@pytest_asyncio.fixture
def auth_headers():
    def _headers(user_id="hr-admin-1", role="HR_Admin"):
        return {"Authorization": f"Bearer {generate_jwt(user_id, role)}"}

    return _headers


@pytest_asyncio.fixture
async def client(db_session, collaborators):
    from httpx import ASGITransport
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_onboarding_settings] = lambda: OnboardingSettings(
        frontend_base_url="https://hr.example.com", upstream_timeout=1.0
    )
    app.dependency_overrides[get_notification_dispatcher] = lambda: collaborators.notifications
    app.dependency_overrides[get_identity_provisioner] = lambda: collaborators.identity
    app.dependency_overrides[get_employee_records] = lambda: collaborators.employees

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
