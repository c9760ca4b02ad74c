"""
Complete Account Step Use Case

Signup step 1: the new hire creates a login-capable account through the
identity provisioning service.
"""

import logging

from libs.result import Result, Return
from src.app.services.identity_provisioner import IIdentityProvisioner, NewAccount
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.upstream import UpstreamRejected, UpstreamUnavailable, call_upstream
from src.domain import invitation_token
from src.domain.base import utcnow
from src.domain.entities import Invitation, InvitationStatus
from src.domain.onboarding_rules import STEP1_STATUSES, build_transition, validate_account

from .common import (
    OnboardingSettings,
    expired,
    invalid_state,
    load_invitation,
    not_found,
    upstream_rejected,
    upstream_unavailable,
    validation_failed,
)
from .dtos import SignupStep1Command, SignupStep1Response

logger = logging.getLogger(__name__)


class CompleteAccountStepUseCase:
    """
    Use case for signup step 1.

    Business Rules:
    - Token is the only credential; no authentication
    - Allowed from initiated / invitation_sent only
    - Replays after success return the stored subject id without calling
      the identity service again
    - Identity service failures leave the invitation where it was
    """

    def __init__(
        self,
        uow: UnitOfWork,
        identity: IIdentityProvisioner,
        settings: OnboardingSettings = OnboardingSettings(),
    ):
        self.uow = uow
        self.identity = identity
        self.settings = settings

    async def execute(self, command: SignupStep1Command) -> Result[SignupStep1Response]:
        """
        Execute signup step 1.

        Args:
            command: Token plus account details and password

        Returns:
            Result with SignupStep1Response DTO, or Error
        """
        masked = invitation_token.mask(command.invitation_token)

        async with self.uow:
            invitation = await load_invitation(self.uow, command.invitation_token)
            if invitation is None:
                return Return.err(not_found())

            if invitation.is_expired(utcnow()):
                return Return.err(expired())

            if invitation.status == InvitationStatus.identity_created:
                logger.info(f"Signup step 1 replayed for token {masked}")
                return Return.ok(self._response(invitation))

            if invitation.status not in STEP1_STATUSES:
                return Return.err(invalid_state(invitation.status, "create the account"))

            violations = validate_account(
                first_name=command.first_name,
                last_name=command.last_name,
                phone=command.phone,
                password=command.password,
            )
            if violations:
                return Return.err(validation_failed(violations))

            first_name = command.first_name.strip()
            last_name = command.last_name.strip()
            phone = command.phone.strip()

            try:
                account = await call_upstream(
                    "identity",
                    self.identity.create_account(
                        NewAccount(
                            email=invitation.email,
                            password=command.password,
                            first_name=first_name,
                            last_name=last_name,
                            phone=phone,
                            role=invitation.role.value,
                        )
                    ),
                    self.settings.upstream_timeout,
                )
            except UpstreamUnavailable as exc:
                logger.warning(f"Signup step 1 for token {masked} not confirmed: {exc}")
                return Return.err(upstream_unavailable("identity"))
            except UpstreamRejected as exc:
                logger.warning(f"Signup step 1 for token {masked} rejected: {exc}")
                return Return.err(upstream_rejected("identity"))

            advanced = await self.uow.invitations.compare_and_set(
                invitation,
                build_transition(
                    invitation,
                    InvitationStatus.identity_created,
                    subject_id=account.subject_id,
                    password_setup_required=account.password_setup_required,
                    first_name=first_name,
                    last_name=last_name,
                    phone=phone,
                    identity_created_at=utcnow(),
                ),
            )
            if not advanced:
                # A concurrent submission won; report its outcome
                invitation = await self.uow.invitations.reload(invitation)
                if invitation.status == InvitationStatus.identity_created:
                    return Return.ok(self._response(invitation))
                return Return.err(invalid_state(invitation.status, "create the account"))

            await self.uow.commit()
            logger.info(
                f"Identity {account.subject_id} linked to invitation {invitation.id}"
            )

            return Return.ok(self._response(invitation))

    @staticmethod
    def _response(invitation: Invitation) -> SignupStep1Response:
        return SignupStep1Response(
            message="User account created successfully",
            email=invitation.email,
            subject_id=invitation.subject_id,
            next_step="complete_employee_profile",
        )
