"""
Cancel Onboarding Use Case

Handles HR withdrawing an invitation before the profile step.
"""

import logging
from typing import Optional

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain import invitation_token
from src.domain.base import utcnow
from src.domain.entities import InvitationStatus
from src.domain.onboarding_rules import CANCELLABLE_STATUSES, build_transition, is_hr_role

from .common import (
    expired,
    invalid_state,
    is_visible_to,
    load_invitation,
    not_found,
    permission_denied,
)
from .dtos import CancelOnboardingResponse

logger = logging.getLogger(__name__)


class CancelOnboardingUseCase:
    """
    Use case for cancelling onboarding.

    Business Rules:
    - HR roles only; HR_Manager may only cancel invitations they initiated
    - Allowed from initiated, invitation_sent and identity_created
    - Accounts already created upstream are left in place
    - The email is free for a new invitation afterwards
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        actor_id: str,
        actor_role: str,
        token: str,
        reason: Optional[str] = None,
    ) -> Result[CancelOnboardingResponse]:
        if not is_hr_role(actor_role):
            return Return.err(
                permission_denied("Only HR Admin and HR Manager can cancel onboarding")
            )

        async with self.uow:
            invitation = await load_invitation(self.uow, token)
            if invitation is None or not is_visible_to(invitation, actor_id, actor_role):
                return Return.err(not_found())

            now = utcnow()
            if invitation.is_expired(now):
                return Return.err(expired())

            if invitation.status not in CANCELLABLE_STATUSES:
                return Return.err(invalid_state(invitation.status, "cancel onboarding"))

            cancelled = await self.uow.invitations.compare_and_set(
                invitation,
                build_transition(
                    invitation,
                    InvitationStatus.cancelled,
                    cancelled_at=now,
                    cancelled_by=actor_id,
                    cancellation_reason=reason,
                ),
            )
            if not cancelled:
                invitation = await self.uow.invitations.reload(invitation)
                return Return.err(invalid_state(invitation.status, "cancel onboarding"))

            await self.uow.commit()
            logger.info(
                f"Onboarding for {invitation.email} cancelled by {actor_id} "
                f"(token {invitation_token.mask(token)})"
            )

            return Return.ok(
                CancelOnboardingResponse(
                    message="Onboarding cancelled successfully",
                    email=invitation.email,
                    status=invitation.status.value,
                )
            )
