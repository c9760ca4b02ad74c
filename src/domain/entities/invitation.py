"""
Invitation Entity

One onboarding attempt, from HR initiation to completion.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import EmployeeRole, EmploymentType, InvitationStatus

TERMINAL_STATUSES = frozenset(
    {
        InvitationStatus.completed,
        InvitationStatus.failed,
        InvitationStatus.cancelled,
    }
)


class Invitation(SQLModel, table=True):
    """
    Invitation entity - persisted onboarding saga state.

    Business Rules:
    - Created by HR_Admin / HR_Manager, expires after a configured TTL
    - Token is the only credential the new hire holds before signup
    - At most one non-terminal invitation per email (active_email is unique
      and cleared once the invitation reaches a terminal status)
    - Never deleted; terminal rows are retained
    - version is bumped on every persisted transition (compare-and-set)
    """

    __tablename__ = "onboarding_invitations"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    token: str = Field(unique=True, index=True, max_length=64)
    email: str = Field(max_length=255, nullable=False, index=True)
    active_email: Optional[str] = Field(default=None, unique=True, max_length=255)

    # HR-set terms (immutable through the signup flow)
    role: EmployeeRole = Field(nullable=False)
    job_title: str = Field(max_length=255)
    department: Optional[str] = Field(default=None, max_length=255)
    team: Optional[str] = Field(default=None, max_length=255)
    manager_id: Optional[str] = Field(default=None, max_length=64)
    employment_type: EmploymentType = Field(nullable=False)
    salary: float
    salary_currency: str = Field(max_length=3)
    joining_date: date
    probation_months: Optional[int] = None
    contract_start_date: Optional[date] = None
    contract_end_date: Optional[date] = None
    notes: Optional[str] = None

    # Derived HR dates
    probation_end_date: Optional[date] = None
    performance_review_date: Optional[date] = None
    salary_increment_date: Optional[date] = None

    status: InvitationStatus = Field(default=InvitationStatus.initiated)
    version: int = Field(default=1, nullable=False)

    initiated_by: str = Field(max_length=64)
    initiated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime))
    invitation_sent_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )

    # Identity step linkage
    subject_id: Optional[str] = Field(default=None, max_length=255)
    password_setup_required: bool = Field(default=False)
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=32)
    identity_created_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )

    # Profile step linkage
    employee_id: Optional[str] = Field(default=None, max_length=255)
    profile_created_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )
    welcome_email_sent: bool = Field(default=False)
    completed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Terminal bookkeeping
    cancelled_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    cancelled_by: Optional[str] = Field(default=None, max_length=64)
    cancellation_reason: Optional[str] = None
    failed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    failure_reason: Optional[str] = None

    __table_args__ = (
        Index("idx_onboarding_status", "status"),
        Index("idx_onboarding_initiated_at", "initiated_at"),
        Index("idx_onboarding_initiated_by", "initiated_by"),
    )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) > self.expires_at

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
