from abc import ABC, abstractmethod
from typing import Optional


class INotificationDispatcher(ABC):
    """Notification dispatch collaborator - application layer"""

    @abstractmethod
    async def send_invitation(
        self,
        email: str,
        role: str,
        job_title: str,
        invitation_link: str,
        expires_at: str,
    ) -> None:
        """
        Send the invitation email with the claim link.

        Returns only once the notification service confirmed the dispatch.

        Raises:
            UpstreamUnavailable / UpstreamRejected: dispatch not confirmed
        """
        pass

    @abstractmethod
    async def send_welcome(
        self,
        email: str,
        first_name: Optional[str],
        last_name: Optional[str],
        check_email_for_password: bool,
    ) -> None:
        """Send the welcome email once onboarding completes"""
        pass
