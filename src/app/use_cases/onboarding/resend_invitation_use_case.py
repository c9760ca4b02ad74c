"""
Resend Invitation Use Case

Re-dispatches the invitation email for an invitation that has not been
claimed yet.
"""

import logging

from libs.result import Result, Return
from src.app.services.notification_dispatcher import INotificationDispatcher
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.upstream import UpstreamError, call_upstream
from src.domain import invitation_token
from src.domain.base import utcnow
from src.domain.entities import Invitation, InvitationStatus
from src.domain.onboarding_rules import RESENDABLE_STATUSES, build_transition, is_hr_role

from .common import (
    OnboardingSettings,
    expired,
    invalid_state,
    is_visible_to,
    load_invitation,
    not_found,
    permission_denied,
    upstream_unavailable,
)
from .dtos import ResendInvitationResponse

logger = logging.getLogger(__name__)


class ResendInvitationUseCase:
    """
    Use case for resending an invitation email.

    Business Rules:
    - HR roles only; HR_Manager may only resend invitations they initiated
    - Only initiated / invitation_sent invitations can be resent
    - The token never changes
    - A confirmed dispatch advances initiated -> invitation_sent
    - Expiry is pushed out only when resend_extends_expiry is enabled
    - Concurrent resends are safe: losing the compare-and-set to another
      resend is still a success
    """

    def __init__(
        self,
        uow: UnitOfWork,
        notifications: INotificationDispatcher,
        settings: OnboardingSettings = OnboardingSettings(),
    ):
        self.uow = uow
        self.notifications = notifications
        self.settings = settings

    async def execute(
        self, actor_id: str, actor_role: str, token: str
    ) -> Result[ResendInvitationResponse]:
        """
        Execute resend invitation use case.

        Args:
            actor_id: Subject id of the HR user
            actor_role: Role claim of the HR user
            token: Invitation token

        Returns:
            Result with ResendInvitationResponse DTO, or Error
        """
        if not is_hr_role(actor_role):
            return Return.err(
                permission_denied("Only HR Admin and HR Manager can resend invitations")
            )

        async with self.uow:
            invitation = await load_invitation(self.uow, token)
            if invitation is None or not is_visible_to(invitation, actor_id, actor_role):
                return Return.err(not_found())

            now = utcnow()
            if invitation.is_expired(now):
                return Return.err(expired())

            if invitation.status not in RESENDABLE_STATUSES:
                return Return.err(invalid_state(invitation.status, "resend the invitation"))

            invitation_link = self.settings.claim_link(invitation.token)
            try:
                await call_upstream(
                    "notification",
                    self.notifications.send_invitation(
                        email=invitation.email,
                        role=invitation.role.value,
                        job_title=invitation.job_title,
                        invitation_link=invitation_link,
                        expires_at=invitation.expires_at.isoformat(),
                    ),
                    self.settings.upstream_timeout,
                )
            except UpstreamError as exc:
                logger.warning(
                    f"Resend for token {invitation_token.mask(token)} not confirmed: {exc}"
                )
                return Return.err(upstream_unavailable("notification"))

            changes = {}
            if invitation.status == InvitationStatus.initiated:
                changes = build_transition(
                    invitation, InvitationStatus.invitation_sent, invitation_sent_at=now
                )
            if self.settings.resend_extends_expiry:
                changes["expires_at"] = now + self.settings.invitation_ttl

            if changes:
                updated = await self.uow.invitations.compare_and_set(invitation, changes)
                if updated:
                    await self.uow.commit()
                else:
                    # Another request moved the invitation first
                    invitation = await self.uow.invitations.reload(invitation)
                    if invitation.status not in RESENDABLE_STATUSES:
                        return Return.err(
                            invalid_state(invitation.status, "resend the invitation")
                        )

            logger.info(
                f"Invitation resent to {invitation.email} by {actor_id} "
                f"(token {invitation_token.mask(token)})"
            )
            return Return.ok(self._response(invitation))

    @staticmethod
    def _response(invitation: Invitation) -> ResendInvitationResponse:
        return ResendInvitationResponse(
            message="Invitation resent successfully",
            email=invitation.email,
            status=invitation.status.value,
            expires_at=invitation.expires_at.isoformat(),
        )
