import pytest
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.onboarding import OnboardingSettings
from tests.fixtures.fakes import (
    FakeEmployeeRecords,
    FakeIdentityProvisioner,
    FakeNotificationDispatcher,
    FakeUnitOfWork,
    InvitationStore,
)


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def store():
    return InvitationStore()


@pytest.fixture
def uow(store):
    return FakeUnitOfWork(store)


@pytest.fixture
def notifications():
    return FakeNotificationDispatcher()


@pytest.fixture
def identity():
    return FakeIdentityProvisioner()


@pytest.fixture
def employees():
    return FakeEmployeeRecords()


@pytest.fixture
def settings():
    return OnboardingSettings(
        frontend_base_url="https://hr.example.com",
        allowed_frontend_origins=("https://portal.example.com",),
        upstream_timeout=1.0,
    )
