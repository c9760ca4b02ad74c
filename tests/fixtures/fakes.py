"""
In-memory stand-ins for the store and the collaborator services.

The fake repository keeps plain dict snapshots so that every unit of work
sees its own Invitation instances, like separate database sessions do.
"""

import asyncio
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from src.app.repositories.invitation_repository import (
    DuplicateActiveInvitationError,
    IInvitationRepository,
)
from src.app.services.employee_records import EmployeeProfile, EmployeeRecord, IEmployeeRecords
from src.app.services.identity_provisioner import (
    IIdentityProvisioner,
    NewAccount,
    ProvisionedAccount,
)
from src.app.services.notification_dispatcher import INotificationDispatcher
from src.app.services.unit_of_work import UnitOfWork
from src.domain import invitation_token
from src.domain.base import utcnow
from src.domain.entities import EmployeeRole, EmploymentType, Invitation, InvitationStatus
from src.domain.entities.invitation import TERMINAL_STATUSES


class InvitationStore:
    """Rows shared by every FakeUnitOfWork built on it"""

    def __init__(self):
        self.rows: Dict[Any, Dict[str, Any]] = {}

    def add(self, invitation: Invitation) -> Invitation:
        self.rows[invitation.id] = invitation.model_dump()
        return invitation

    def get(self, token: str) -> Optional[Dict[str, Any]]:
        for row in self.rows.values():
            if row["token"] == token:
                return row
        return None


class FakeInvitationRepository(IInvitationRepository):
    def __init__(self, store: InvitationStore):
        self.store = store

    async def get_by_token(self, token: str) -> Optional[Invitation]:
        row = self.store.get(token)
        return Invitation(**row) if row else None

    async def get_open_by_email(self, email: str) -> Optional[Invitation]:
        for row in self.store.rows.values():
            if row["active_email"] == email:
                return Invitation(**row)
        return None

    async def create(self, invitation: Invitation) -> Invitation:
        if await self.get_open_by_email(invitation.active_email) is not None:
            raise DuplicateActiveInvitationError(invitation.email)
        self.store.add(invitation)
        return invitation

    async def compare_and_set(self, invitation: Invitation, changes: Dict[str, Any]) -> bool:
        # Yield like a real database round trip would
        await asyncio.sleep(0)
        row = self.store.rows[invitation.id]
        if row["version"] != invitation.version or row["status"] != invitation.status:
            return False
        row.update(changes)
        row["version"] += 1
        await self.reload(invitation)
        return True

    async def reload(self, invitation: Invitation) -> Invitation:
        for key, value in self.store.rows[invitation.id].items():
            setattr(invitation, key, value)
        return invitation

    async def search(
        self,
        status: Optional[InvitationStatus] = None,
        initiated_by: Optional[str] = None,
        initiated_from: Optional[datetime] = None,
        initiated_to: Optional[datetime] = None,
        offset: int = 0,
        limit: int = 50,
    ) -> Tuple[List[Invitation], int]:
        rows = [
            row
            for row in self._matching(initiated_by, initiated_from, initiated_to)
            if status is None or row["status"] == status
        ]
        rows.sort(key=lambda row: row["initiated_at"], reverse=True)
        return [Invitation(**row) for row in rows[offset : offset + limit]], len(rows)

    async def count_by_status(
        self,
        initiated_by: Optional[str] = None,
        initiated_from: Optional[datetime] = None,
        initiated_to: Optional[datetime] = None,
    ) -> Dict[InvitationStatus, int]:
        counts: Dict[InvitationStatus, int] = {}
        for row in self._matching(initiated_by, initiated_from, initiated_to):
            counts[row["status"]] = counts.get(row["status"], 0) + 1
        return counts

    def _matching(self, initiated_by, initiated_from, initiated_to):
        for row in self.store.rows.values():
            if initiated_by is not None and row["initiated_by"] != initiated_by:
                continue
            if initiated_from is not None and row["initiated_at"] < initiated_from:
                continue
            if initiated_to is not None and row["initiated_at"] > initiated_to:
                continue
            yield row


class FakeUnitOfWork(UnitOfWork):
    def __init__(self, store: Optional[InvitationStore] = None):
        self.store = store or InvitationStore()
        self.invitations = FakeInvitationRepository(self.store)
        self.commits = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return False

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        pass


class FakeNotificationDispatcher(INotificationDispatcher):
    def __init__(self, fail_with: Optional[Exception] = None):
        self.fail_with = fail_with
        self.invitations: List[Dict[str, Any]] = []
        self.welcomes: List[Dict[str, Any]] = []

    async def send_invitation(self, email, role, job_title, invitation_link, expires_at):
        await asyncio.sleep(0)
        if self.fail_with is not None:
            raise self.fail_with
        self.invitations.append(
            {
                "email": email,
                "role": role,
                "job_title": job_title,
                "invitation_link": invitation_link,
                "expires_at": expires_at,
            }
        )

    async def send_welcome(self, email, first_name, last_name, check_email_for_password):
        if self.fail_with is not None:
            raise self.fail_with
        self.welcomes.append(
            {
                "email": email,
                "first_name": first_name,
                "last_name": last_name,
                "check_email_for_password": check_email_for_password,
            }
        )


class FakeIdentityProvisioner(IIdentityProvisioner):
    def __init__(self, fail_with: Optional[Exception] = None, password_setup_required=False):
        self.fail_with = fail_with
        self.password_setup_required = password_setup_required
        self.accounts: List[NewAccount] = []

    async def create_account(self, account: NewAccount) -> ProvisionedAccount:
        if self.fail_with is not None:
            raise self.fail_with
        self.accounts.append(account)
        return ProvisionedAccount(
            subject_id=f"subject-{account.email}",
            password_setup_required=self.password_setup_required,
        )


class FakeEmployeeRecords(IEmployeeRecords):
    def __init__(self, fail_with: Optional[Exception] = None):
        self.fail_with = fail_with
        self.profiles: List[EmployeeProfile] = []

    async def create_employee(self, profile: EmployeeProfile) -> EmployeeRecord:
        if self.fail_with is not None:
            raise self.fail_with
        self.profiles.append(profile)
        return EmployeeRecord(employee_id=f"EMP-{len(self.profiles):04d}")


def build_invitation(**overrides) -> Invitation:
    """Invitation for a permanent hire, initiated by hr-admin-1, valid for 7 days"""
    now = utcnow()
    email = overrides.pop("email", "new.hire@example.com")
    status = overrides.pop("status", InvitationStatus.invitation_sent)
    fields = dict(
        token=invitation_token.issue_token(),
        email=email,
        active_email=None if status in TERMINAL_STATUSES else email,
        role=EmployeeRole.employee,
        job_title="Software Engineer",
        department="Engineering",
        employment_type=EmploymentType.permanent,
        salary=85000.0,
        salary_currency="USD",
        joining_date=date(2026, 11, 2),
        probation_months=3,
        status=status,
        initiated_by="hr-admin-1",
        initiated_at=now,
        expires_at=now + timedelta(days=7),
    )
    fields.update(overrides)
    return Invitation(**fields)
