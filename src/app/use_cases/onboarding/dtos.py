"""
Onboarding Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the onboarding domain.
Provides type safety and clear contracts between layers.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field


# ============================================================================
# Command DTOs
# ============================================================================


class InitiateOnboardingCommand(BaseModel):
    """
    Initiate onboarding command - HR-set terms for a new hire

    Created by API layer after request shape validation passes.
    Business validation (conditional fields, role table) is the use case's job.
    """

    email: str
    role: str
    job_title: str
    salary: float
    salary_currency: Optional[str] = None
    employment_type: str
    probation_months: Optional[int] = None
    contract_start_date: Optional[date] = None
    contract_end_date: Optional[date] = None
    department: Optional[str] = None
    team: Optional[str] = None
    manager_id: Optional[str] = None
    joining_date: Optional[date] = None
    notes: Optional[str] = None
    frontend_origin: Optional[str] = None


class SignupStep1Command(BaseModel):
    """Account details submitted by the new hire"""

    invitation_token: str
    first_name: str
    last_name: str
    phone: str
    password: str


class SignupStep2Command(BaseModel):
    """Optional personal details submitted by the new hire"""

    invitation_token: str
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
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


# ============================================================================
# Response DTOs
# ============================================================================


class InitiateOnboardingResponse(BaseModel):
    """Response for initiate onboarding use case"""

    message: str
    invitation_token: str
    invitation_link: str
    email: str
    role: str
    job_title: str
    status: str
    expires_at: str
    warnings: List[str] = Field(default_factory=list)


class OnboardingPreviewResponse(BaseModel):
    """Invitation fields safe for an unauthenticated viewer"""

    email: str
    role: str
    job_title: str
    department: Optional[str]
    team: Optional[str]
    salary: float
    salary_currency: str
    employment_type: str
    probation_months: Optional[int]
    contract_start_date: Optional[str]
    contract_end_date: Optional[str]
    joining_date: str
    expires_at: str
    is_valid: bool
    is_expired: bool


class SignupStep1Response(BaseModel):
    """Response for signup step 1 (account creation)"""

    message: str
    email: str
    subject_id: str
    next_step: str


class SignupStep2Response(BaseModel):
    """Response for signup step 2 (employee profile)"""

    message: str
    subject_id: str
    employee_id: str
    email: str
    role: str
    job_title: str
    employment_type: str
    joining_date: str
    check_email_for_password: bool


class OnboardingStatusResponse(BaseModel):
    """Progress view of one invitation"""

    invitation_token: str
    email: str
    role: str
    job_title: str
    employment_type: str
    joining_date: str
    status: str
    initiated_by: str
    initiated_at: str
    expires_at: str
    is_expired: bool
    invitation_sent_at: Optional[str]
    identity_created_at: Optional[str]
    profile_created_at: Optional[str]
    completed_at: Optional[str]
    cancelled_at: Optional[str]
    cancellation_reason: Optional[str]
    failure_reason: Optional[str]
    current_step: str
    can_proceed: bool


class OnboardingInvitationSummary(BaseModel):
    """One row of the invitation listing"""

    invitation_token: str
    email: str
    role: str
    job_title: str
    salary: float
    salary_currency: str
    employment_type: str
    status: str
    initiated_by: str
    initiated_at: str
    expires_at: str
    is_expired: bool
    days_until_expiry: int
    subject_id: Optional[str]
    employee_id: Optional[str]


class OnboardingListResponse(BaseModel):
    """Response for list invitations use case"""

    total: int
    pending: int
    completed: int
    offset: int
    limit: int
    invitations: List[OnboardingInvitationSummary]


class ResendInvitationResponse(BaseModel):
    """Response for resend invitation use case"""

    message: str
    email: str
    status: str
    expires_at: str


class CancelOnboardingResponse(BaseModel):
    """Response for cancel onboarding use case"""

    message: str
    email: str
    status: str
