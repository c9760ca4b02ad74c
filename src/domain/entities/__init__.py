"""
Onboarding Service Domain Entities

All domain entities organized by model.
"""

# Export all enums
from .enums import (
    EmployeeRole,
    EmploymentType,
    Gender,
    InvitationStatus,
)

# Export all entities
from .invitation import Invitation

__all__ = [
    # Enums
    "EmployeeRole",
    "EmploymentType",
    "Gender",
    "InvitationStatus",
    # Entities
    "Invitation",
]
