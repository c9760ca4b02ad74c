"""
Get Onboarding Status Use Case

Progress view of a single invitation for HR.
"""

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.onboarding_rules import current_step, is_hr_role

from .common import is_visible_to, iso, load_invitation, not_found, permission_denied
from .dtos import OnboardingStatusResponse


class GetOnboardingStatusUseCase:
    """
    Use case for viewing onboarding progress.

    Business Rules:
    - HR roles only
    - HR_Manager sees only invitations they initiated
    - can_proceed is true while the invitation is live and not terminal
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, actor_id: str, actor_role: str, token: str
    ) -> Result[OnboardingStatusResponse]:
        if not is_hr_role(actor_role):
            return Return.err(
                permission_denied("Only HR Admin and HR Manager can view onboarding status")
            )

        async with self.uow:
            invitation = await load_invitation(self.uow, token)
            if invitation is None or not is_visible_to(invitation, actor_id, actor_role):
                return Return.err(not_found())

            is_expired = invitation.is_expired(utcnow())

            return Return.ok(
                OnboardingStatusResponse(
                    invitation_token=invitation.token,
                    email=invitation.email,
                    role=invitation.role.value,
                    job_title=invitation.job_title,
                    employment_type=invitation.employment_type.value,
                    joining_date=invitation.joining_date.isoformat(),
                    status=invitation.status.value,
                    initiated_by=invitation.initiated_by,
                    initiated_at=invitation.initiated_at.isoformat(),
                    expires_at=invitation.expires_at.isoformat(),
                    is_expired=is_expired,
                    invitation_sent_at=iso(invitation.invitation_sent_at),
                    identity_created_at=iso(invitation.identity_created_at),
                    profile_created_at=iso(invitation.profile_created_at),
                    completed_at=iso(invitation.completed_at),
                    cancelled_at=iso(invitation.cancelled_at),
                    cancellation_reason=invitation.cancellation_reason,
                    failure_reason=invitation.failure_reason,
                    current_step=current_step(invitation.status),
                    can_proceed=not is_expired and not invitation.is_terminal,
                )
            )
