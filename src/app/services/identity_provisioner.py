from abc import ABC, abstractmethod

from pydantic import BaseModel


class NewAccount(BaseModel):
    """Credentials and contact details for a login-capable account"""

    email: str
    password: str
    first_name: str
    last_name: str
    phone: str
    role: str


class ProvisionedAccount(BaseModel):
    """Account created (or found) by the identity service"""

    subject_id: str
    password_setup_required: bool = False


class IIdentityProvisioner(ABC):
    """Identity provisioning collaborator - application layer"""

    @abstractmethod
    async def create_account(self, account: NewAccount) -> ProvisionedAccount:
        """
        Create a login-capable account and return its stable subject id.

        Raises:
            UpstreamUnavailable: transient failure, safe to retry
            UpstreamRejected: the identity service refused the account
        """
        pass
