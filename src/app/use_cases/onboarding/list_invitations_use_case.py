"""
List Invitations Use Case

Administrative listing of onboarding invitations.
"""

from datetime import datetime
from typing import Optional

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import EmployeeRole, Invitation, InvitationStatus
from src.domain.onboarding_rules import PENDING_STATUSES, is_hr_role, normalize_role

from .common import permission_denied
from .dtos import OnboardingInvitationSummary, OnboardingListResponse


class ListInvitationsUseCase:
    """
    Use case for listing onboarding invitations.

    Business Rules:
    - HR roles only
    - HR_Manager sees only invitations they initiated
    - Newest first, offset/limit pagination
    - pending counts every non-terminal invitation, expired or not
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        actor_id: str,
        actor_role: str,
        status: Optional[InvitationStatus] = None,
        initiated_from: Optional[datetime] = None,
        initiated_to: Optional[datetime] = None,
        offset: int = 0,
        limit: int = 50,
    ) -> Result[OnboardingListResponse]:
        """
        Execute list invitations use case.

        Args:
            actor_id: Subject id of the HR user
            actor_role: Role claim of the HR user
            status: Only invitations in this status
            initiated_from: Only invitations initiated at or after this time
            initiated_to: Only invitations initiated at or before this time
            offset: Number of invitations to skip
            limit: Page size

        Returns:
            Result with OnboardingListResponse DTO, or Error
        """
        if not is_hr_role(actor_role):
            return Return.err(
                permission_denied(
                    "Only HR Admin and HR Manager can view onboarding invitations"
                )
            )

        initiated_by = None
        if normalize_role(actor_role) != EmployeeRole.HR_Admin:
            initiated_by = actor_id

        async with self.uow:
            invitations, total = await self.uow.invitations.search(
                status=status,
                initiated_by=initiated_by,
                initiated_from=initiated_from,
                initiated_to=initiated_to,
                offset=offset,
                limit=limit,
            )
            counts = await self.uow.invitations.count_by_status(
                initiated_by=initiated_by,
                initiated_from=initiated_from,
                initiated_to=initiated_to,
            )

            now = utcnow()
            return Return.ok(
                OnboardingListResponse(
                    total=total,
                    pending=sum(counts.get(s, 0) for s in PENDING_STATUSES),
                    completed=counts.get(InvitationStatus.completed, 0),
                    offset=offset,
                    limit=limit,
                    invitations=[self._summary(inv, now) for inv in invitations],
                )
            )

    @staticmethod
    def _summary(invitation: Invitation, now: datetime) -> OnboardingInvitationSummary:
        remaining = invitation.expires_at - now
        return OnboardingInvitationSummary(
            invitation_token=invitation.token,
            email=invitation.email,
            role=invitation.role.value,
            job_title=invitation.job_title,
            salary=invitation.salary,
            salary_currency=invitation.salary_currency,
            employment_type=invitation.employment_type.value,
            status=invitation.status.value,
            initiated_by=invitation.initiated_by,
            initiated_at=invitation.initiated_at.isoformat(),
            expires_at=invitation.expires_at.isoformat(),
            is_expired=invitation.is_expired(now),
            days_until_expiry=max(0, remaining.days),
            subject_id=invitation.subject_id,
            employee_id=invitation.employee_id,
        )
