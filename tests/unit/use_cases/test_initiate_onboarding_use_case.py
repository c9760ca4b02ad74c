"""
Unit tests for InitiateOnboardingUseCase

Drives the use case against the in-memory store and a fake dispatcher.
"""

import asyncio
from datetime import date, timedelta

import pytest

from src.app.services.upstream import UpstreamUnavailable
from src.app.use_cases.onboarding import (
    InitiateOnboardingCommand,
    InitiateOnboardingUseCase,
    OnboardingSettings,
)
from src.app.use_cases.onboarding.initiate_onboarding_use_case import DISPATCH_FAILED_WARNING
from src.domain.base import utcnow
from src.domain.entities import EmployeeRole, InvitationStatus
from tests.fixtures.fakes import FakeNotificationDispatcher, build_invitation
from tests.fixtures.json_loader import OnboardingPayloads


def _command(key="initiate_permanent", **overrides):
    return InitiateOnboardingCommand(**OnboardingPayloads.payload(key, **overrides))


@pytest.mark.asyncio
async def test_hr_admin_initiates_permanent_hire(uow, store, notifications, settings):
    """Test HR_Admin initiating a permanent hire with derived HR dates"""
    use_case = InitiateOnboardingUseCase(uow, notifications, settings)

    result = await use_case.execute("hr-admin-1", "HR_Admin", _command())

    assert result.is_ok()
    response = result.value
    assert response.email == "jane.doe@example.com"
    assert response.role == "employee"
    assert response.status == "invitation_sent"
    assert response.warnings == []
    assert response.invitation_link == (
        f"https://hr.example.com/employee-signup?token={response.invitation_token}"
    )

    # Stored with normalized values and derived dates
    row = store.get(response.invitation_token)
    assert row["status"] == InvitationStatus.invitation_sent
    assert row["salary_currency"] == "USD"
    assert row["active_email"] == "jane.doe@example.com"
    assert row["initiated_by"] == "hr-admin-1"
    assert row["probation_end_date"] == date(2027, 2, 2)
    assert row["performance_review_date"] == date(2027, 11, 2)
    assert row["invitation_sent_at"] is not None
    assert row["expires_at"] - row["initiated_at"] == timedelta(days=7)

    # Invitation email carries the claim link
    assert len(notifications.invitations) == 1
    sent = notifications.invitations[0]
    assert sent["email"] == "jane.doe@example.com"
    assert sent["invitation_link"] == response.invitation_link


@pytest.mark.asyncio
async def test_contract_hire_has_no_probation(uow, store, notifications, settings):
    """Test that a contract hire carries contract dates and no probation"""
    # Arrange
    use_case = InitiateOnboardingUseCase(uow, notifications, settings)

    # Act
    result = await use_case.execute("hr-1", "HR_Manager", _command("initiate_contract"))

    # Assert
    assert result.is_ok()
    row = store.get(result.value.invitation_token)
    assert row["role"] == EmployeeRole.manager
    assert row["contract_end_date"] == date(2027, 5, 1)
    assert row["probation_end_date"] is None


@pytest.mark.asyncio
async def test_legacy_admin_role_can_initiate(uow, notifications, settings):
    """Test that the legacy admin role acts as HR_Admin"""
    # Arrange
    use_case = InitiateOnboardingUseCase(uow, notifications, settings)

    # Act
    result = await use_case.execute("hr-1", "admin", _command(role="HR_Manager"))

    # Assert
    assert result.is_ok()
    assert result.value.role == "HR_Manager"


@pytest.mark.asyncio
async def test_hr_manager_cannot_onboard_hr_manager(uow, store, notifications, settings):
    """Test that HR_Manager cannot assign the HR_Manager role"""
    # Arrange
    use_case = InitiateOnboardingUseCase(uow, notifications, settings)

    # Act
    result = await use_case.execute("hr-2", "HR_Manager", _command(role="HR_Manager"))

    # Assert
    assert result.is_err()
    assert result.error.code == "PERMISSION_DENIED"
    assert store.rows == {}
    assert notifications.invitations == []


@pytest.mark.parametrize("role", ["manager", "employee", "owner"])
@pytest.mark.asyncio
async def test_non_hr_caller_is_denied(role, uow, notifications, settings):
    """Test that a non-HR caller cannot initiate onboarding"""
    # Arrange
    use_case = InitiateOnboardingUseCase(uow, notifications, settings)

    # Act
    result = await use_case.execute("user-1", role, _command())

    # Assert
    assert result.is_err()
    assert result.error.code == "PERMISSION_DENIED"


@pytest.mark.asyncio
async def test_all_violations_reported_together(uow, store, notifications, settings):
    """Test that every invalid field is reported in one VALIDATION_ERROR"""
    # Arrange
    use_case = InitiateOnboardingUseCase(uow, notifications, settings)

    # Act
    result = await use_case.execute("hr-1", "HR_Admin", _command("initiate_invalid"))

    # Assert
    assert result.is_err()
    assert result.error.code == "VALIDATION_ERROR"
    fields = {d["field"] for d in result.error.details}
    assert fields == {
        "email",
        "role",
        "job_title",
        "salary",
        "salary_currency",
        "contract_start_date",
        "contract_end_date",
        "probation_months",
    }
    assert store.rows == {}


@pytest.mark.asyncio
async def test_live_invitation_for_email_conflicts(uow, store, notifications, settings):
    """Test that a live invitation for the same email blocks a new one"""
    # Arrange
    store.add(build_invitation(email="jane.doe@example.com"))
    use_case = InitiateOnboardingUseCase(uow, notifications, settings)

    # Act
    result = await use_case.execute("hr-1", "HR_Admin", _command())

    # Assert
    assert result.is_err()
    assert result.error.code == "INVITATION_ALREADY_EXISTS"
    assert len(store.rows) == 1


@pytest.mark.asyncio
async def test_terminal_invitation_does_not_block_new_one(uow, store, notifications, settings):
    """Test that a finished invitation does not block re-inviting the email"""
    # Arrange
    store.add(
        build_invitation(email="jane.doe@example.com", status=InvitationStatus.cancelled)
    )
    use_case = InitiateOnboardingUseCase(uow, notifications, settings)

    # Act
    result = await use_case.execute("hr-1", "HR_Admin", _command())

    # Assert
    assert result.is_ok()
    assert len(store.rows) == 2


@pytest.mark.asyncio
async def test_expired_predecessor_is_closed_as_failed(uow, store, notifications, settings):
    """Test that an expired predecessor is closed as failed before re-inviting"""
    # Arrange
    past = utcnow() - timedelta(days=10)
    stale = store.add(
        build_invitation(
            email="jane.doe@example.com",
            initiated_at=past,
            expires_at=past + timedelta(days=7),
        )
    )
    use_case = InitiateOnboardingUseCase(uow, notifications, settings)

    # Act
    result = await use_case.execute("hr-1", "HR_Admin", _command())

    # Assert
    assert result.is_ok()
    old_row = store.get(stale.token)
    assert old_row["status"] == InvitationStatus.failed
    assert old_row["failure_reason"] == "expired"
    assert old_row["active_email"] is None
    new_row = store.get(result.value.invitation_token)
    assert new_row["active_email"] == "jane.doe@example.com"


@pytest.mark.asyncio
async def test_dispatch_failure_keeps_invitation_initiated(uow, store, settings):
    """Test that a failed invitation email leaves the invitation initiated with a warning"""
    # Arrange
    notifications = FakeNotificationDispatcher(
        fail_with=UpstreamUnavailable("notification", "HTTP 503")
    )
    use_case = InitiateOnboardingUseCase(uow, notifications, settings)

    # Act
    result = await use_case.execute("hr-1", "HR_Admin", _command())

    # Assert
    assert result.is_ok()
    assert result.value.status == "initiated"
    assert result.value.warnings == [DISPATCH_FAILED_WARNING]
    row = store.get(result.value.invitation_token)
    assert row["status"] == InvitationStatus.initiated
    assert row["invitation_sent_at"] is None


class SlowDispatcher(FakeNotificationDispatcher):
    async def send_invitation(self, *args, **kwargs):
        await asyncio.sleep(5)


@pytest.mark.asyncio
async def test_dispatch_timeout_is_not_assumed_success(uow):
    """Test that a timed out invitation email is not treated as sent"""
    # Arrange
    settings = OnboardingSettings(upstream_timeout=0.01)
    use_case = InitiateOnboardingUseCase(uow, SlowDispatcher(), settings)

    # Act
    result = await use_case.execute("hr-1", "HR_Admin", _command())

    # Assert
    assert result.is_ok()
    assert result.value.status == "initiated"
    assert result.value.warnings == [DISPATCH_FAILED_WARNING]


@pytest.mark.asyncio
async def test_allowed_frontend_origin_used_for_link(uow, notifications, settings):
    """Test that an allowed frontend origin is used for the claim link"""
    # Arrange
    use_case = InitiateOnboardingUseCase(uow, notifications, settings)

    # Act
    allowed = await use_case.execute(
        "hr-1", "HR_Admin", _command(frontend_origin="https://portal.example.com")
    )
    other = await use_case.execute(
        "hr-1",
        "HR_Admin",
        _command(email="someone@example.com", frontend_origin="https://evil.example.net"),
    )

    # Assert
    assert allowed.value.invitation_link.startswith("https://portal.example.com/employee-signup?")
    assert other.value.invitation_link.startswith("https://hr.example.com/employee-signup?")


@pytest.mark.asyncio
async def test_default_currency_applied(uow, store, notifications, settings):
    """Test that the configured default salary currency is applied"""
    # Arrange
    use_case = InitiateOnboardingUseCase(uow, notifications, settings)

    # Act
    result = await use_case.execute("hr-1", "HR_Admin", _command(salary_currency=None))

    # Assert
    assert store.get(result.value.invitation_token)["salary_currency"] == "USD"
