"""
Preview Invitation Use Case

Read-only view of an invitation for the new hire who followed the claim link.
"""

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow

from .common import iso, load_invitation, not_found
from .dtos import OnboardingPreviewResponse


class PreviewInvitationUseCase:
    """
    Use case for previewing an invitation.

    Business Rules:
    - No authentication; the token is the credential
    - Never mutates state
    - Unknown and malformed tokens are indistinguishable (INVITATION_NOT_FOUND);
      everything else is conveyed through is_valid / is_expired only
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, token: str) -> Result[OnboardingPreviewResponse]:
        async with self.uow:
            invitation = await load_invitation(self.uow, token)
            if invitation is None:
                return Return.err(not_found())

            is_expired = invitation.is_expired(utcnow())

            return Return.ok(
                OnboardingPreviewResponse(
                    email=invitation.email,
                    role=invitation.role.value,
                    job_title=invitation.job_title,
                    department=invitation.department,
                    team=invitation.team,
                    salary=invitation.salary,
                    salary_currency=invitation.salary_currency,
                    employment_type=invitation.employment_type.value,
                    probation_months=invitation.probation_months,
                    contract_start_date=iso(invitation.contract_start_date),
                    contract_end_date=iso(invitation.contract_end_date),
                    joining_date=invitation.joining_date.isoformat(),
                    expires_at=invitation.expires_at.isoformat(),
                    is_valid=not is_expired and not invitation.is_terminal,
                    is_expired=is_expired,
                )
            )
