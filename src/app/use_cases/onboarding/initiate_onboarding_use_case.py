"""
Initiate Onboarding Use Case

Handles HR inviting a new hire: role table check, terms validation,
one-live-invitation-per-email enforcement and invitation dispatch.
"""

import logging

from libs.result import Result, Return
from src.app.repositories.invitation_repository import DuplicateActiveInvitationError
from src.app.services.notification_dispatcher import INotificationDispatcher
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.upstream import UpstreamError, call_upstream
from src.domain import invitation_token
from src.domain.base import utcnow
from src.domain.entities import EmploymentType, Invitation, InvitationStatus
from src.domain.onboarding_rules import (
    assignable_roles,
    build_transition,
    calculate_hr_dates,
    normalize_role,
    validate_terms,
)

from .common import (
    OnboardingSettings,
    already_exists,
    permission_denied,
    validation_failed,
)
from .dtos import InitiateOnboardingCommand, InitiateOnboardingResponse

logger = logging.getLogger(__name__)

DISPATCH_FAILED_WARNING = "Invitation email could not be sent; use resend to retry"


class InitiateOnboardingUseCase:
    """
    Use case for initiating employee onboarding.

    Business Rules:
    - HR_Admin may assign HR_Manager, manager, employee
    - HR_Manager may assign manager, employee
    - Every invalid field is reported in a single VALIDATION_ERROR
    - At most one non-terminal invitation per email; an expired predecessor
      is closed as failed before the new invitation is created
    - Email dispatch failure does not roll back the invitation; it stays
      initiated so that resend can retry
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
        self, actor_id: str, actor_role: str, command: InitiateOnboardingCommand
    ) -> Result[InitiateOnboardingResponse]:
        """
        Execute initiate onboarding use case.

        Args:
            actor_id: Subject id of the HR user
            actor_role: Role claim of the HR user
            command: HR-set terms for the new hire

        Returns:
            Result with InitiateOnboardingResponse DTO, or Error
        """
        allowed_roles = assignable_roles(actor_role)
        if not allowed_roles:
            logger.warning(f"User {actor_id} ({actor_role}) cannot initiate onboarding")
            return Return.err(
                permission_denied("Only HR Admin and HR Manager can initiate onboarding")
            )

        target_role = normalize_role(command.role)
        if target_role is not None and target_role not in allowed_roles:
            logger.warning(
                f"User {actor_id} ({actor_role}) cannot assign role {target_role.value}"
            )
            return Return.err(
                permission_denied(f"{actor_role} cannot onboard a {target_role.value}")
            )

        email = command.email.strip().lower()
        currency = (command.salary_currency or self.settings.default_salary_currency).upper()

        violations = validate_terms(
            email=email,
            role=command.role,
            job_title=command.job_title,
            salary=command.salary,
            salary_currency=currency,
            employment_type=command.employment_type,
            joining_date=command.joining_date,
            probation_months=command.probation_months,
            contract_start_date=command.contract_start_date,
            contract_end_date=command.contract_end_date,
        )
        if violations:
            return Return.err(validation_failed(violations))

        employment_type = EmploymentType(command.employment_type)

        async with self.uow:
            now = utcnow()

            existing = await self.uow.invitations.get_open_by_email(email)
            if existing is not None:
                if not existing.is_expired(now):
                    return Return.err(already_exists())

                # Release the email held by a stale, never-finished invitation
                closed = await self.uow.invitations.compare_and_set(
                    existing,
                    build_transition(
                        existing,
                        InvitationStatus.failed,
                        failed_at=now,
                        failure_reason="expired",
                    ),
                )
                if not closed:
                    return Return.err(already_exists())
                logger.info(
                    f"Closed expired invitation {existing.id} before re-inviting {email}"
                )

            invitation = Invitation(
                token=invitation_token.issue_token(),
                email=email,
                active_email=email,
                role=target_role,
                job_title=command.job_title.strip(),
                department=command.department,
                team=command.team,
                manager_id=command.manager_id,
                employment_type=employment_type,
                salary=command.salary,
                salary_currency=currency,
                joining_date=command.joining_date,
                probation_months=command.probation_months,
                contract_start_date=command.contract_start_date,
                contract_end_date=command.contract_end_date,
                notes=command.notes,
                status=InvitationStatus.initiated,
                initiated_by=actor_id,
                initiated_at=now,
                expires_at=now + self.settings.invitation_ttl,
                **calculate_hr_dates(
                    command.joining_date, employment_type, command.probation_months
                ),
            )

            try:
                await self.uow.invitations.create(invitation)
            except DuplicateActiveInvitationError:
                return Return.err(already_exists())

            await self.uow.commit()
            logger.info(
                f"Onboarding initiated by {actor_id} for {email} "
                f"(token {invitation_token.mask(invitation.token)})"
            )

            invitation_link = self.settings.claim_link(
                invitation.token, command.frontend_origin
            )

            warnings = []
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
                logger.warning(f"Invitation email for {email} not sent: {exc}")
                warnings.append(DISPATCH_FAILED_WARNING)
            else:
                sent = await self.uow.invitations.compare_and_set(
                    invitation,
                    build_transition(
                        invitation,
                        InvitationStatus.invitation_sent,
                        invitation_sent_at=utcnow(),
                    ),
                )
                if sent:
                    await self.uow.commit()

            return Return.ok(
                InitiateOnboardingResponse(
                    message="Onboarding initiated successfully",
                    invitation_token=invitation.token,
                    invitation_link=invitation_link,
                    email=invitation.email,
                    role=invitation.role.value,
                    job_title=invitation.job_title,
                    status=invitation.status.value,
                    expires_at=invitation.expires_at.isoformat(),
                    warnings=warnings,
                )
            )
