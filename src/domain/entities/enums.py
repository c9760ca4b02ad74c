"""
Onboarding Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class EmployeeRole(str, Enum):
    """Role carried by an HR actor or assigned to a new hire"""

    HR_Admin = "HR_Admin"
    HR_Manager = "HR_Manager"
    manager = "manager"
    employee = "employee"


class EmploymentType(str, Enum):
    """Employment contract type"""

    permanent = "permanent"
    contract = "contract"


class InvitationStatus(str, Enum):
    """Onboarding invitation lifecycle status"""

    initiated = "initiated"
    invitation_sent = "invitation_sent"
    identity_created = "identity_created"
    profile_created = "profile_created"
    completed = "completed"
    failed = "failed"
    cancelled = "cancelled"


class Gender(str, Enum):
    """Self-declared gender collected at signup step 2"""

    male = "male"
    female = "female"
    other = "other"
