from datetime import UTC, date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from libs.result import Error
from src.api.error import ClientError, ServerError
from src.app.services.employee_records import IEmployeeRecords
from src.app.services.identity_provisioner import IIdentityProvisioner
from src.app.services.notification_dispatcher import INotificationDispatcher
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.onboarding import (
    CancelOnboardingResponse,
    CancelOnboardingUseCase,
    CompleteAccountStepUseCase,
    CompleteProfileStepUseCase,
    GetOnboardingStatusUseCase,
    InitiateOnboardingCommand,
    InitiateOnboardingResponse,
    InitiateOnboardingUseCase,
    ListInvitationsUseCase,
    OnboardingListResponse,
    OnboardingPreviewResponse,
    OnboardingSettings,
    OnboardingStatusResponse,
    PreviewInvitationUseCase,
    ResendInvitationResponse,
    ResendInvitationUseCase,
    SignupStep1Command,
    SignupStep1Response,
    SignupStep2Command,
    SignupStep2Response,
)
from src.depends import (
    get_current_user,
    get_employee_records,
    get_identity_provisioner,
    get_notification_dispatcher,
    get_onboarding_settings,
    get_unit_of_work,
)
from src.domain.entities import Gender, InvitationStatus

router = APIRouter(prefix="/onboarding", tags=["Onboarding"])

ERROR_STATUS = {
    "PERMISSION_DENIED": status.HTTP_403_FORBIDDEN,
    "VALIDATION_ERROR": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "INVITATION_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVITATION_EXPIRED": status.HTTP_410_GONE,
    "INVALID_STATE": status.HTTP_409_CONFLICT,
    "INVITATION_ALREADY_EXISTS": status.HTTP_409_CONFLICT,
    "UPSTREAM_UNAVAILABLE": status.HTTP_503_SERVICE_UNAVAILABLE,
    "UPSTREAM_REJECTED": status.HTTP_502_BAD_GATEWAY,
}


def raise_for_error(error: Error):
    """Translate a use case error into the HTTP error for its code"""
    status_code = ERROR_STATUS.get(error.code)
    if status_code is None:
        raise ServerError(error)
    raise ClientError(error, status_code=status_code)


# ============================================================================
# Request payloads
# ============================================================================


class InitiateOnboardingRequest(BaseModel):
    """
    Initiate onboarding HTTP request payload

    Only the shape is checked here. Field rules that depend on each other
    (contract dates, probation, role table) are reported together by the
    use case.
    """

    email: str = Field(..., description="New hire's email address")
    role: str = Field(..., description="HR_Manager, manager or employee")
    job_title: str = Field(..., description="Job title")
    salary: float = Field(..., description="Gross salary")
    salary_currency: Optional[str] = Field(None, description="ISO 4217 code")
    employment_type: str = Field(..., description="permanent or contract")
    probation_months: Optional[int] = Field(None, description="Permanent hires only")
    contract_start_date: Optional[date] = None
    contract_end_date: Optional[date] = None
    department: Optional[str] = None
    team: Optional[str] = None
    manager_id: Optional[str] = None
    joining_date: Optional[date] = None
    notes: Optional[str] = None
    frontend_origin: Optional[str] = Field(
        None, description="Origin to build the claim link on, if it is a known frontend"
    )


class SignupStep1Request(BaseModel):
    invitation_token: str
    first_name: str
    last_name: str
    phone: str
    password: str


class SignupStep2Request(BaseModel):
    invitation_token: str
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    nationality: Optional[str] = None
    address_line_1: Optional[str] = None
    address_line_2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    emergency_contact_relationship: Optional[str] = None
    bank_name: Optional[str] = None
    bank_account_number: Optional[str] = None
    bank_routing_number: Optional[str] = None


class CancelOnboardingRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


# ============================================================================
# HR endpoints
# ============================================================================


@router.post(
    "/initiate",
    status_code=status.HTTP_201_CREATED,
    response_model=InitiateOnboardingResponse,
)
async def initiate_onboarding(
    request: InitiateOnboardingRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifications: INotificationDispatcher = Depends(get_notification_dispatcher),
    settings: OnboardingSettings = Depends(get_onboarding_settings),
):
    """
    Initiate Onboarding

    HR invites a new hire and fixes their job terms. The invitation email is
    sent right away; if that fails the invitation is kept and the response
    carries a warning.

    Raises:
        - 401 Unauthorized: Missing or invalid JWT
        - 403 Forbidden: PERMISSION_DENIED (non-HR caller or role not assignable)
        - 409 Conflict: INVITATION_ALREADY_EXISTS
        - 422 Unprocessable Entity: VALIDATION_ERROR
    """
    use_case = InitiateOnboardingUseCase(uow, notifications, settings)
    result = await use_case.execute(
        current_user["user_id"],
        current_user.get("role"),
        InitiateOnboardingCommand(**request.model_dump()),
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get(
    "/status/{token}",
    status_code=status.HTTP_200_OK,
    response_model=OnboardingStatusResponse,
)
async def get_onboarding_status(
    token: str,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Onboarding Status

    Raises:
        - 401 Unauthorized: Missing or invalid JWT
        - 403 Forbidden: PERMISSION_DENIED
        - 404 Not Found: INVITATION_NOT_FOUND
    """
    use_case = GetOnboardingStatusUseCase(uow)
    result = await use_case.execute(current_user["user_id"], current_user.get("role"), token)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get(
    "/invitations",
    status_code=status.HTTP_200_OK,
    response_model=OnboardingListResponse,
)
async def list_invitations(
    status_filter: Optional[InvitationStatus] = Query(None, alias="status"),
    initiated_from: Optional[datetime] = Query(None),
    initiated_to: Optional[datetime] = Query(None),
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    List Invitations

    Newest first. HR_Manager callers only see invitations they initiated.

    Raises:
        - 401 Unauthorized: Missing or invalid JWT
        - 403 Forbidden: PERMISSION_DENIED
        - 422 Unprocessable Entity: VALIDATION_ERROR (bad filter or paging)
    """
    use_case = ListInvitationsUseCase(uow)
    result = await use_case.execute(
        current_user["user_id"],
        current_user.get("role"),
        status=status_filter,
        initiated_from=_naive_utc(initiated_from),
        initiated_to=_naive_utc(initiated_to),
        offset=offset,
        limit=limit,
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/resend-invitation/{token}",
    status_code=status.HTTP_200_OK,
    response_model=ResendInvitationResponse,
)
async def resend_invitation(
    token: str,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifications: INotificationDispatcher = Depends(get_notification_dispatcher),
    settings: OnboardingSettings = Depends(get_onboarding_settings),
):
    """
    Resend Invitation

    Sends the invitation email again with the same token.

    Raises:
        - 401 Unauthorized: Missing or invalid JWT
        - 403 Forbidden: PERMISSION_DENIED
        - 404 Not Found: INVITATION_NOT_FOUND
        - 409 Conflict: INVALID_STATE (already claimed or terminal)
        - 410 Gone: INVITATION_EXPIRED
        - 503 Service Unavailable: UPSTREAM_UNAVAILABLE (email not sent)
    """
    use_case = ResendInvitationUseCase(uow, notifications, settings)
    result = await use_case.execute(current_user["user_id"], current_user.get("role"), token)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/cancel/{token}",
    status_code=status.HTTP_200_OK,
    response_model=CancelOnboardingResponse,
)
async def cancel_onboarding(
    token: str,
    request: Optional[CancelOnboardingRequest] = None,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Cancel Onboarding

    Raises:
        - 401 Unauthorized: Missing or invalid JWT
        - 403 Forbidden: PERMISSION_DENIED
        - 404 Not Found: INVITATION_NOT_FOUND
        - 409 Conflict: INVALID_STATE
        - 410 Gone: INVITATION_EXPIRED
    """
    use_case = CancelOnboardingUseCase(uow)
    result = await use_case.execute(
        current_user["user_id"],
        current_user.get("role"),
        token,
        reason=request.reason if request else None,
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


# ============================================================================
# New hire endpoints (the invitation token is the credential)
# ============================================================================


@router.get(
    "/preview/{token}",
    status_code=status.HTTP_200_OK,
    response_model=OnboardingPreviewResponse,
)
async def preview_invitation(
    token: str,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Preview Invitation

    Raises:
        - 404 Not Found: INVITATION_NOT_FOUND
    """
    use_case = PreviewInvitationUseCase(uow)
    result = await use_case.execute(token)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/signup/step1",
    status_code=status.HTTP_200_OK,
    response_model=SignupStep1Response,
)
async def signup_step1(
    request: SignupStep1Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    identity: IIdentityProvisioner = Depends(get_identity_provisioner),
    settings: OnboardingSettings = Depends(get_onboarding_settings),
):
    """
    Signup Step 1 - create the login account

    Safe to retry: a repeated submission after success returns the same
    subject id.

    Raises:
        - 404 Not Found: INVITATION_NOT_FOUND
        - 409 Conflict: INVALID_STATE
        - 410 Gone: INVITATION_EXPIRED
        - 422 Unprocessable Entity: VALIDATION_ERROR (incl. password policy)
        - 502 Bad Gateway: UPSTREAM_REJECTED
        - 503 Service Unavailable: UPSTREAM_UNAVAILABLE
    """
    use_case = CompleteAccountStepUseCase(uow, identity, settings)
    result = await use_case.execute(SignupStep1Command(**request.model_dump()))

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/signup/step2",
    status_code=status.HTTP_200_OK,
    response_model=SignupStep2Response,
)
async def signup_step2(
    request: SignupStep2Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    employees: IEmployeeRecords = Depends(get_employee_records),
    notifications: INotificationDispatcher = Depends(get_notification_dispatcher),
    settings: OnboardingSettings = Depends(get_onboarding_settings),
):
    """
    Signup Step 2 - create the employee profile and finish onboarding

    Raises:
        - 404 Not Found: INVITATION_NOT_FOUND
        - 409 Conflict: INVALID_STATE (step 1 not done, or terminal)
        - 410 Gone: INVITATION_EXPIRED
        - 502 Bad Gateway: UPSTREAM_REJECTED (onboarding failed)
        - 503 Service Unavailable: UPSTREAM_UNAVAILABLE
    """
    use_case = CompleteProfileStepUseCase(uow, employees, notifications, settings)
    result = await use_case.execute(SignupStep2Command(**request.model_dump(mode="json")))

    if result.is_err():
        raise_for_error(result.error)

    return result.value


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive UTC"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)
