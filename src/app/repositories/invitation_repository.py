from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from src.domain.entities import Invitation, InvitationStatus


class DuplicateActiveInvitationError(Exception):
    """Another non-terminal invitation already holds this email"""


class IInvitationRepository(ABC):
    """Invitation repository interface - application layer"""

    @abstractmethod
    async def get_by_token(self, token: str) -> Optional[Invitation]:
        """Get invitation by token"""
        pass

    @abstractmethod
    async def get_open_by_email(self, email: str) -> Optional[Invitation]:
        """Get the non-terminal invitation for an email, if any"""
        pass

    @abstractmethod
    async def create(self, invitation: Invitation) -> Invitation:
        """
        Create a new invitation

        Raises:
            DuplicateActiveInvitationError: email already has a non-terminal invitation
        """
        pass

    @abstractmethod
    async def compare_and_set(self, invitation: Invitation, changes: Dict[str, Any]) -> bool:
        """
        Apply changes only if the stored row still has the invitation's
        version and status. Bumps the version and refreshes the instance.

        Returns:
            True if the row was updated, False if it was modified concurrently
        """
        pass

    @abstractmethod
    async def reload(self, invitation: Invitation) -> Invitation:
        """Re-read the stored state of an invitation"""
        pass

    @abstractmethod
    async def search(
        self,
        status: Optional[InvitationStatus] = None,
        initiated_by: Optional[str] = None,
        initiated_from: Optional[datetime] = None,
        initiated_to: Optional[datetime] = None,
        offset: int = 0,
        limit: int = 50,
    ) -> Tuple[List[Invitation], int]:
        """
        Get a page of invitations, newest first.

        Returns:
            Tuple of (page, total number of matching invitations)
        """
        pass

    @abstractmethod
    async def count_by_status(
        self,
        initiated_by: Optional[str] = None,
        initiated_from: Optional[datetime] = None,
        initiated_to: Optional[datetime] = None,
    ) -> Dict[InvitationStatus, int]:
        """Count invitations per status"""
        pass
