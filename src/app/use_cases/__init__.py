"""
Use Cases

Organized into domain folders:
- onboarding/: HR invitations, new hire signup, invitation administration

Import from subdirectories for better organization.
"""

from .onboarding import (
    CancelOnboardingUseCase,
    CompleteAccountStepUseCase,
    CompleteProfileStepUseCase,
    GetOnboardingStatusUseCase,
    InitiateOnboardingUseCase,
    ListInvitationsUseCase,
    PreviewInvitationUseCase,
    ResendInvitationUseCase,
)

__all__ = [
    "InitiateOnboardingUseCase",
    "PreviewInvitationUseCase",
    "CompleteAccountStepUseCase",
    "CompleteProfileStepUseCase",
    "GetOnboardingStatusUseCase",
    "ListInvitationsUseCase",
    "ResendInvitationUseCase",
    "CancelOnboardingUseCase",
]
