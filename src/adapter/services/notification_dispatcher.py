from typing import Optional

from src.app.services.notification_dispatcher import INotificationDispatcher

from .http_client import ServiceClient


class HttpNotificationDispatcher(ServiceClient, INotificationDispatcher):
    """Email dispatch over the notification service REST API"""

    service = "notification"

    async def send_invitation(
        self,
        email: str,
        role: str,
        job_title: str,
        invitation_link: str,
        expires_at: str,
    ) -> None:
        await self.request(
            "POST",
            "/api/v1/notifications/onboarding-invitation",
            json={
                "email": email,
                "role": role,
                "job_title": job_title,
                "invitation_link": invitation_link,
                "expires_at": expires_at,
            },
        )

    async def send_welcome(
        self,
        email: str,
        first_name: Optional[str],
        last_name: Optional[str],
        check_email_for_password: bool,
    ) -> None:
        await self.request(
            "POST",
            "/api/v1/notifications/welcome",
            json={
                "email": email,
                "first_name": first_name,
                "last_name": last_name,
                "check_email_for_password": check_email_for_password,
            },
        )
