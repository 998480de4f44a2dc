import logging
from typing import Optional

from azure.core.credentials import TokenCredential
from azure.core.exceptions import ClientAuthenticationError, HttpResponseError
from azure.mgmt.resource import ResourceManagementClient
from pydantic import BaseModel

from ..exceptions import AuthenticationFailure, ProvisioningFailure

logger = logging.getLogger(__name__)


class ResourceGroupInfo(BaseModel):
    """A resource group as returned by the management plane."""

    id: str
    name: str
    location: str
    provisioning_state: Optional[str] = None


class ResourceGroupEnsurer:
    """Creates the sample's resource group, or leaves an existing one in place."""

    def __init__(self, credential: TokenCredential, subscription_id: str):
        if not subscription_id:
            raise ValueError("subscription_id required or set AZURE_SUBSCRIPTION_ID")
        self._client = ResourceManagementClient(credential, subscription_id)

    def __enter__(self) -> "ResourceGroupEnsurer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def ensure(self, name: str, location: str) -> ResourceGroupInfo:
        """Create or update resource group `name` in `location`.

        Safe to repeat: calling again with the same arguments is a no-op update.
        """
        logger.info(f"Creating sample resource group {name} in {location}")
        try:
            group = self._client.resource_groups.create_or_update(name, {"location": location})
        except ClientAuthenticationError as e:
            raise AuthenticationFailure(f"Management plane rejected the service principal: {e}") from e
        except HttpResponseError as e:
            raise ProvisioningFailure(f"Failed to create resource group '{name}': {e}") from e

        state = group.properties.provisioning_state if group.properties else None
        return ResourceGroupInfo(id=group.id, name=group.name, location=group.location, provisioning_state=state)
