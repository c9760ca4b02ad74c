"""
Onboarding Rules

Pure, data-driven rules shared by the onboarding use cases:
role assignment table, state machine graph, field validation,
password policy and derived HR dates.
"""

import re
from datetime import date
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from dateutil.relativedelta import relativedelta

from src.domain.entities import EmployeeRole, EmploymentType, Invitation, InvitationStatus
from src.domain.entities.invitation import TERMINAL_STATUSES

# ============================================================================
# Role assignment
# ============================================================================

ROLE_ASSIGNMENT_TABLE: Mapping[EmployeeRole, FrozenSet[EmployeeRole]] = MappingProxyType(
    {
        EmployeeRole.HR_Admin: frozenset(
            {EmployeeRole.HR_Manager, EmployeeRole.manager, EmployeeRole.employee}
        ),
        EmployeeRole.HR_Manager: frozenset(
            {EmployeeRole.manager, EmployeeRole.employee}
        ),
    }
)

HR_ROLES: FrozenSet[EmployeeRole] = frozenset(ROLE_ASSIGNMENT_TABLE)

# Legacy role names still present in issued access tokens
_ROLE_ALIASES = MappingProxyType(
    {
        "admin": EmployeeRole.HR_Admin,
        "Manager": EmployeeRole.manager,
        "Employee": EmployeeRole.employee,
    }
)


def normalize_role(role: Optional[str]) -> Optional[EmployeeRole]:
    """Map a raw role string onto EmployeeRole, or None if unknown"""
    if role is None:
        return None
    if role in _ROLE_ALIASES:
        return _ROLE_ALIASES[role]
    try:
        return EmployeeRole(role)
    except ValueError:
        return None


def is_hr_role(role: Optional[str]) -> bool:
    return normalize_role(role) in HR_ROLES


def assignable_roles(initiator_role: Optional[str]) -> FrozenSet[EmployeeRole]:
    """Roles the initiator may assign; empty for non-HR roles"""
    return ROLE_ASSIGNMENT_TABLE.get(normalize_role(initiator_role), frozenset())


# ============================================================================
# State machine
# ============================================================================

ALLOWED_TRANSITIONS: Mapping[InvitationStatus, FrozenSet[InvitationStatus]] = MappingProxyType(
    {
        InvitationStatus.initiated: frozenset(
            {
                InvitationStatus.invitation_sent,
                InvitationStatus.identity_created,
                InvitationStatus.cancelled,
                InvitationStatus.failed,
            }
        ),
        InvitationStatus.invitation_sent: frozenset(
            {
                InvitationStatus.identity_created,
                InvitationStatus.cancelled,
                InvitationStatus.failed,
            }
        ),
        InvitationStatus.identity_created: frozenset(
            {
                InvitationStatus.profile_created,
                InvitationStatus.cancelled,
                InvitationStatus.failed,
            }
        ),
        InvitationStatus.profile_created: frozenset(
            {InvitationStatus.completed, InvitationStatus.failed}
        ),
        InvitationStatus.completed: frozenset(),
        InvitationStatus.failed: frozenset(),
        InvitationStatus.cancelled: frozenset(),
    }
)

STEP1_STATUSES = frozenset({InvitationStatus.initiated, InvitationStatus.invitation_sent})
RESENDABLE_STATUSES = STEP1_STATUSES
CANCELLABLE_STATUSES = frozenset(
    status
    for status, targets in ALLOWED_TRANSITIONS.items()
    if InvitationStatus.cancelled in targets
)
PENDING_STATUSES = frozenset(InvitationStatus) - TERMINAL_STATUSES

_CURRENT_STEP = MappingProxyType(
    {
        InvitationStatus.initiated: "send_invitation",
        InvitationStatus.invitation_sent: "create_account",
        InvitationStatus.identity_created: "complete_employee_profile",
        InvitationStatus.profile_created: "finalize",
        InvitationStatus.completed: "done",
        InvitationStatus.failed: "failed",
        InvitationStatus.cancelled: "cancelled",
    }
)


class IllegalTransition(ValueError):
    """Raised when code attempts a transition outside the state graph"""


def can_transition(current: InvitationStatus, target: InvitationStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def build_transition(
    invitation: Invitation, target: InvitationStatus, **fields: Any
) -> Dict[str, Any]:
    """
    Column changes for moving an invitation to target.

    Terminal targets release the email for a future invitation.

    Raises:
        IllegalTransition: target is not reachable from the current status
    """
    if not can_transition(invitation.status, target):
        raise IllegalTransition(
            f"{invitation.status.value} -> {target.value} is not a valid transition"
        )
    changes: Dict[str, Any] = {"status": target, **fields}
    if target in TERMINAL_STATUSES:
        changes["active_email"] = None
    return changes


def current_step(status: InvitationStatus) -> str:
    return _CURRENT_STEP[status]


# ============================================================================
# Validation
# ============================================================================

MAX_PROBATION_MONTHS = 24

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")
_PHONE_PATTERN = re.compile(r"^\+?[0-9][0-9 ()-]{6,19}$")
_SPECIAL_CHARACTERS = set("!@#$%^&*()_+-=[]{}|;:,.<>?/~`'\"\\")

MIN_PASSWORD_LENGTH = 8


def violation(field: str, message: str) -> Dict[str, str]:
    return {"field": field, "message": message}


def validate_terms(
    *,
    email: Optional[str],
    role: Optional[str],
    job_title: Optional[str],
    salary: Optional[float],
    salary_currency: Optional[str],
    employment_type: Optional[str],
    joining_date: Optional[date],
    probation_months: Optional[int] = None,
    contract_start_date: Optional[date] = None,
    contract_end_date: Optional[date] = None,
) -> List[Dict[str, str]]:
    """
    Validate HR-set onboarding terms.

    Returns every violation found, never just the first one.
    """
    violations: List[Dict[str, str]] = []

    if not email or not _EMAIL_PATTERN.match(email):
        violations.append(violation("email", "A valid email address is required"))

    if normalize_role(role) is None:
        violations.append(
            violation(
                "role",
                f"Invalid role. Must be one of: {', '.join(r.value for r in EmployeeRole)}",
            )
        )

    if not job_title or not job_title.strip():
        violations.append(violation("job_title", "Job title is required"))

    if salary is None or salary <= 0:
        violations.append(violation("salary", "Salary must be greater than zero"))

    if salary_currency is not None and not _CURRENCY_PATTERN.match(salary_currency):
        violations.append(
            violation("salary_currency", "Currency must be a 3-letter ISO code")
        )

    if joining_date is None:
        violations.append(violation("joining_date", "Joining date is required"))

    try:
        kind = EmploymentType(employment_type)
    except ValueError:
        violations.append(
            violation("employment_type", "Employment type must be permanent or contract")
        )
        return violations

    if kind == EmploymentType.contract:
        if contract_start_date is None:
            violations.append(
                violation(
                    "contract_start_date",
                    "Contract start date is required for contract employees",
                )
            )
        if contract_end_date is None:
            violations.append(
                violation(
                    "contract_end_date",
                    "Contract end date is required for contract employees",
                )
            )
        if (
            contract_start_date is not None
            and contract_end_date is not None
            and contract_end_date <= contract_start_date
        ):
            violations.append(
                violation("contract_end_date", "Contract end date must be after start date")
            )
        if probation_months is not None:
            violations.append(
                violation(
                    "probation_months",
                    "Probation applies to permanent employees only",
                )
            )
    else:
        if contract_start_date is not None:
            violations.append(
                violation(
                    "contract_start_date",
                    "Contract dates apply to contract employees only",
                )
            )
        if contract_end_date is not None:
            violations.append(
                violation(
                    "contract_end_date",
                    "Contract dates apply to contract employees only",
                )
            )
        if probation_months is not None and not 0 <= probation_months <= MAX_PROBATION_MONTHS:
            violations.append(
                violation(
                    "probation_months",
                    f"Probation must be between 0 and {MAX_PROBATION_MONTHS} months",
                )
            )

    return violations


def password_violations(password: Optional[str]) -> List[Dict[str, str]]:
    """Password policy: length, upper, lower, digit, special character"""
    password = password or ""
    violations = []
    if len(password) < MIN_PASSWORD_LENGTH:
        violations.append(
            violation(
                "password",
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
            )
        )
    if not any(c.isupper() for c in password):
        violations.append(
            violation("password", "Password must contain at least one uppercase letter")
        )
    if not any(c.islower() for c in password):
        violations.append(
            violation("password", "Password must contain at least one lowercase letter")
        )
    if not any(c.isdigit() for c in password):
        violations.append(violation("password", "Password must contain at least one number"))
    if not any(c in _SPECIAL_CHARACTERS for c in password):
        violations.append(
            violation("password", "Password must contain at least one special character")
        )
    return violations


def validate_account(
    *,
    first_name: Optional[str],
    last_name: Optional[str],
    phone: Optional[str],
    password: Optional[str],
) -> List[Dict[str, str]]:
    """Validate the account details submitted at signup step 1"""
    violations = []
    if not first_name or not first_name.strip():
        violations.append(violation("first_name", "First name is required"))
    if not last_name or not last_name.strip():
        violations.append(violation("last_name", "Last name is required"))
    if not phone or not _PHONE_PATTERN.match(phone.strip()):
        violations.append(violation("phone", "A valid phone number is required"))
    violations.extend(password_violations(password))
    return violations


# ============================================================================
# Derived dates
# ============================================================================


def calculate_hr_dates(
    joining_date: date,
    employment_type: EmploymentType,
    probation_months: Optional[int] = None,
) -> Dict[str, Optional[date]]:
    """
    Dates derived from the joining date.

    - probation_end_date: permanent hires with a probation period
    - performance_review_date / salary_increment_date: first anniversary
    """
    anniversary = joining_date + relativedelta(years=1)
    probation_end_date = None
    if employment_type == EmploymentType.permanent and probation_months:
        probation_end_date = joining_date + relativedelta(months=probation_months)
    return {
        "probation_end_date": probation_end_date,
        "performance_review_date": anniversary,
        "salary_increment_date": anniversary,
    }
