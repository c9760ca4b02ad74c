"""
Helpers shared by the onboarding use cases: settings, error constructors,
token lookup and HR_Manager scoping.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from libs.result import Error
from src.app.services.unit_of_work import UnitOfWork
from src.domain import invitation_token
from src.domain.entities import EmployeeRole, Invitation, InvitationStatus
from src.domain.onboarding_rules import normalize_role


@dataclass(frozen=True)
class OnboardingSettings:
    """Tunable onboarding policy, built from ApplicationConfig by the API layer"""

    invitation_ttl: timedelta = timedelta(days=7)
    resend_extends_expiry: bool = False
    frontend_base_url: str = "http://localhost:3000"
    signup_path: str = "/employee-signup"
    allowed_frontend_origins: Tuple[str, ...] = ()
    default_salary_currency: str = "USD"
    upstream_timeout: float = 10.0

    def claim_link(self, token: str, frontend_origin: Optional[str] = None) -> str:
        base_url = self.frontend_base_url
        # Only origins we serve may appear in an emailed link
        if frontend_origin and frontend_origin.rstrip("/") in self.allowed_frontend_origins:
            base_url = frontend_origin
        return invitation_token.build_claim_link(base_url, self.signup_path, token)


# ============================================================================
# Errors
# ============================================================================


def permission_denied(message: str) -> Error:
    return Error("PERMISSION_DENIED", message)


def validation_failed(violations: List[Dict[str, str]]) -> Error:
    return Error(
        "VALIDATION_ERROR",
        f"{len(violations)} field(s) failed validation",
        details=violations,
    )


def not_found() -> Error:
    return Error("INVITATION_NOT_FOUND", "Invitation not found")


def expired() -> Error:
    return Error("INVITATION_EXPIRED", "This invitation has expired")


def invalid_state(status: InvitationStatus, action: str) -> Error:
    return Error(
        "INVALID_STATE",
        f"Cannot {action} while onboarding is {status.value}",
    )


def already_exists() -> Error:
    return Error(
        "INVITATION_ALREADY_EXISTS",
        "A pending onboarding invitation already exists for this email",
    )


def upstream_unavailable(service: str) -> Error:
    return Error(
        "UPSTREAM_UNAVAILABLE",
        f"The {service} service is unavailable. Please try again later.",
    )


def upstream_rejected(service: str) -> Error:
    return Error("UPSTREAM_REJECTED", f"The {service} service rejected the request")


# ============================================================================
# Lookup and scoping
# ============================================================================


async def load_invitation(uow: UnitOfWork, token: Optional[str]) -> Optional[Invitation]:
    """Fetch an invitation by token; malformed tokens are treated as unknown"""
    if not invitation_token.is_well_formed(token):
        return None
    return await uow.invitations.get_by_token(token)


def is_visible_to(invitation: Invitation, actor_id: str, actor_role: str) -> bool:
    """HR_Admin sees every invitation, HR_Manager only the ones they initiated"""
    if normalize_role(actor_role) == EmployeeRole.HR_Admin:
        return True
    return invitation.initiated_by == actor_id


def iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None
