"""
Remote Environment Gateway interface.

Every read and write against the hosting platform goes through this class so
the orchestration logic never depends on a particular CLI or SDK.
"""

from abc import ABC, abstractmethod
from typing import List, Mapping, Optional, Sequence


class RemoteEnvironmentGateway(ABC):
    """Abstract access to the hosting platform's control plane"""

    @abstractmethod
    async def is_authenticated(self) -> bool:
        """Whether a usable session already exists"""

    @abstractmethod
    async def login(self) -> None:
        """
        Run an interactive login.

        Raises:
            AuthError: if no session could be established
        """

    @abstractmethod
    async def list_resource_groups(self) -> List[str]:
        """Names of resource groups visible to the session"""

    @abstractmethod
    async def list_apps(self) -> List[str]:
        """Names of web apps visible to the session"""

    @abstractmethod
    async def list_environments(self, app_name: str, resource_group: str) -> List[str]:
        """
        Names of deployment slots of an app.

        Callers treat "production" as present whether or not it is returned.

        Raises:
            GatewayError: if the listing fails
        """

    @abstractmethod
    async def create_slot(self, app_name: str, resource_group: str, slot: str) -> None:
        """
        Create a deployment slot.

        Raises:
            ProvisioningFailed: if the platform rejects the call
        """

    @abstractmethod
    async def write_settings(self, app_name: str, resource_group: str,
                             slot: Optional[str], entries: Mapping[str, str]) -> None:
        """
        Apply app settings, one non-transactional call.

        Raises:
            WriteFailed: if the platform rejects the call
        """

    @abstractmethod
    async def mark_slot_settings(self, app_name: str, resource_group: str,
                                 slot: Optional[str], keys: Sequence[str]) -> None:
        """
        Mark existing settings as sticky to the slot.

        Raises:
            WriteFailed: if the platform rejects the call
        """
