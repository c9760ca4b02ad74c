"""
Onboarding Use Cases

HR invitation, two-step new hire signup, and invitation administration.
"""

from .cancel_onboarding_use_case import CancelOnboardingUseCase
from .common import OnboardingSettings
from .complete_account_step_use_case import CompleteAccountStepUseCase
from .complete_profile_step_use_case import CompleteProfileStepUseCase
from .dtos import (
    CancelOnboardingResponse,
    InitiateOnboardingCommand,
    InitiateOnboardingResponse,
    OnboardingInvitationSummary,
    OnboardingListResponse,
    OnboardingPreviewResponse,
    OnboardingStatusResponse,
    ResendInvitationResponse,
    SignupStep1Command,
    SignupStep1Response,
    SignupStep2Command,
    SignupStep2Response,
)
from .get_onboarding_status_use_case import GetOnboardingStatusUseCase
from .initiate_onboarding_use_case import InitiateOnboardingUseCase
from .list_invitations_use_case import ListInvitationsUseCase
from .preview_invitation_use_case import PreviewInvitationUseCase
from .resend_invitation_use_case import ResendInvitationUseCase

__all__ = [
    "OnboardingSettings",
    "InitiateOnboardingUseCase",
    "PreviewInvitationUseCase",
    "CompleteAccountStepUseCase",
    "CompleteProfileStepUseCase",
    "GetOnboardingStatusUseCase",
    "ListInvitationsUseCase",
    "ResendInvitationUseCase",
    "CancelOnboardingUseCase",
    "InitiateOnboardingCommand",
    "SignupStep1Command",
    "SignupStep2Command",
    "InitiateOnboardingResponse",
    "OnboardingPreviewResponse",
    "SignupStep1Response",
    "SignupStep2Response",
    "OnboardingStatusResponse",
    "OnboardingInvitationSummary",
    "OnboardingListResponse",
    "ResendInvitationResponse",
    "CancelOnboardingResponse",
]
