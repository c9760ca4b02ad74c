"""
Complete Profile Step Use Case

Signup step 2: creates the employee record for the identity linked in
step 1, then finalizes onboarding.
"""

import logging

from libs.result import Result, Return
from src.app.services.employee_records import EmployeeProfile, IEmployeeRecords
from src.app.services.notification_dispatcher import INotificationDispatcher
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.upstream import (
    UpstreamError,
    UpstreamRejected,
    UpstreamUnavailable,
    call_upstream,
)
from src.domain import invitation_token
from src.domain.base import utcnow
from src.domain.entities import Invitation, InvitationStatus
from src.domain.onboarding_rules import build_transition

from .common import (
    OnboardingSettings,
    expired,
    invalid_state,
    load_invitation,
    not_found,
    upstream_rejected,
    upstream_unavailable,
)
from .dtos import SignupStep2Command, SignupStep2Response

logger = logging.getLogger(__name__)

STEP2_STATUSES = frozenset(
    {InvitationStatus.identity_created, InvitationStatus.profile_created}
)


class CompleteProfileStepUseCase:
    """
    Use case for signup step 2.

    Business Rules:
    - Only after step 1 confirmed (identity_created); profile_created
      resumes finalization without creating a second employee record
    - Role, salary and job data come from the invitation, never the new hire
    - All personal fields are optional
    - Replays after completion return the prior result
    - Transient employee service failures leave the invitation where it
      was; a permanent rejection fails the onboarding
    - The welcome email is best effort and does not block completion
    """

    def __init__(
        self,
        uow: UnitOfWork,
        employees: IEmployeeRecords,
        notifications: INotificationDispatcher,
        settings: OnboardingSettings = OnboardingSettings(),
    ):
        self.uow = uow
        self.employees = employees
        self.notifications = notifications
        self.settings = settings

    async def execute(self, command: SignupStep2Command) -> Result[SignupStep2Response]:
        """
        Execute signup step 2.

        Args:
            command: Token plus optional personal, address, emergency
                     contact and banking details

        Returns:
            Result with SignupStep2Response DTO, or Error
        """
        masked = invitation_token.mask(command.invitation_token)

        async with self.uow:
            invitation = await load_invitation(self.uow, command.invitation_token)
            if invitation is None:
                return Return.err(not_found())

            if invitation.is_expired(utcnow()):
                return Return.err(expired())

            if invitation.status == InvitationStatus.completed:
                logger.info(f"Signup step 2 replayed for token {masked}")
                return Return.ok(self._response(invitation))

            if invitation.status not in STEP2_STATUSES:
                return Return.err(
                    invalid_state(invitation.status, "complete the employee profile")
                )

            if invitation.status == InvitationStatus.identity_created:
                try:
                    record = await call_upstream(
                        "employee",
                        self.employees.create_employee(self._profile(invitation, command)),
                        self.settings.upstream_timeout,
                    )
                except UpstreamUnavailable as exc:
                    logger.warning(f"Signup step 2 for token {masked} not confirmed: {exc}")
                    return Return.err(upstream_unavailable("employee"))
                except UpstreamRejected as exc:
                    logger.error(f"Signup step 2 for token {masked} rejected: {exc}")
                    failed = await self.uow.invitations.compare_and_set(
                        invitation,
                        build_transition(
                            invitation,
                            InvitationStatus.failed,
                            failed_at=utcnow(),
                            failure_reason=str(exc)[:500],
                        ),
                    )
                    if failed:
                        await self.uow.commit()
                    return Return.err(upstream_rejected("employee"))

                advanced = await self.uow.invitations.compare_and_set(
                    invitation,
                    build_transition(
                        invitation,
                        InvitationStatus.profile_created,
                        employee_id=record.employee_id,
                        profile_created_at=utcnow(),
                    ),
                )
                if not advanced:
                    invitation = await self.uow.invitations.reload(invitation)
                    if invitation.status == InvitationStatus.completed:
                        return Return.ok(self._response(invitation))
                    if invitation.status != InvitationStatus.profile_created:
                        return Return.err(
                            invalid_state(invitation.status, "complete the employee profile")
                        )
                else:
                    await self.uow.commit()
                    logger.info(
                        f"Employee {record.employee_id} linked to invitation {invitation.id}"
                    )

            return await self._finalize(invitation)

    async def _finalize(self, invitation: Invitation) -> Result[SignupStep2Response]:
        """profile_created -> completed, sending the welcome email on the way"""
        welcome_email_sent = True
        try:
            await call_upstream(
                "notification",
                self.notifications.send_welcome(
                    email=invitation.email,
                    first_name=invitation.first_name,
                    last_name=invitation.last_name,
                    check_email_for_password=invitation.password_setup_required,
                ),
                self.settings.upstream_timeout,
            )
        except UpstreamError as exc:
            logger.warning(f"Welcome email for {invitation.email} not sent: {exc}")
            welcome_email_sent = False

        completed = await self.uow.invitations.compare_and_set(
            invitation,
            build_transition(
                invitation,
                InvitationStatus.completed,
                welcome_email_sent=welcome_email_sent,
                completed_at=utcnow(),
            ),
        )
        if not completed:
            invitation = await self.uow.invitations.reload(invitation)
            if invitation.status != InvitationStatus.completed:
                return Return.err(invalid_state(invitation.status, "finalize onboarding"))
            return Return.ok(self._response(invitation))

        await self.uow.commit()
        logger.info(f"Onboarding completed for {invitation.email}")

        return Return.ok(self._response(invitation))

    @staticmethod
    def _profile(invitation: Invitation, command: SignupStep2Command) -> EmployeeProfile:
        personal = command.model_dump(exclude={"invitation_token"})
        return EmployeeProfile(
            subject_id=invitation.subject_id,
            email=invitation.email,
            first_name=invitation.first_name,
            last_name=invitation.last_name,
            phone=invitation.phone,
            role=invitation.role.value,
            job_title=invitation.job_title,
            department=invitation.department,
            team=invitation.team,
            manager_id=invitation.manager_id,
            salary=invitation.salary,
            salary_currency=invitation.salary_currency,
            employment_type=invitation.employment_type.value,
            joining_date=invitation.joining_date,
            probation_months=invitation.probation_months,
            probation_end_date=invitation.probation_end_date,
            contract_start_date=invitation.contract_start_date,
            contract_end_date=invitation.contract_end_date,
            performance_review_date=invitation.performance_review_date,
            salary_increment_date=invitation.salary_increment_date,
            **personal,
        )

    @staticmethod
    def _response(invitation: Invitation) -> SignupStep2Response:
        return SignupStep2Response(
            message="Onboarding completed successfully",
            subject_id=invitation.subject_id,
            employee_id=invitation.employee_id,
            email=invitation.email,
            role=invitation.role.value,
            job_title=invitation.job_title,
            employment_type=invitation.employment_type.value,
            joining_date=invitation.joining_date.isoformat(),
            check_email_for_password=invitation.password_setup_required,
        )
