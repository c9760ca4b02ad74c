from src.app.services.identity_provisioner import (
    IIdentityProvisioner,
    NewAccount,
    ProvisionedAccount,
)
from src.app.services.upstream import UpstreamUnavailable

from .http_client import ServiceClient, read_json


class HttpIdentityProvisioner(ServiceClient, IIdentityProvisioner):
    """Identity provisioning over the identity service REST API"""

    service = "identity"

    async def create_account(self, account: NewAccount) -> ProvisionedAccount:
        response = await self.request(
            "POST", "/api/v1/accounts", json=account.model_dump(), accept=(409,)
        )
        if response.status_code == 409:
            # The submitted password was not applied to the existing account
            existing = await self._find_by_email(account.email)
            return existing.model_copy(update={"password_setup_required": True})
        return self._account(read_json(self.service, response))

    async def _find_by_email(self, email: str) -> ProvisionedAccount:
        response = await self.request("GET", "/api/v1/accounts", params={"email": email})
        return self._account(read_json(self.service, response))

    def _account(self, body: dict) -> ProvisionedAccount:
        subject_id = body.get("subject_id") or body.get("id")
        if not subject_id:
            raise UpstreamUnavailable(self.service, "response carries no subject id")
        return ProvisionedAccount(
            subject_id=str(subject_id),
            password_setup_required=bool(body.get("password_setup_required", False)),
        )
