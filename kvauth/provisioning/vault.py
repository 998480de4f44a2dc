import logging
from typing import List, Optional

from azure.core.credentials import TokenCredential
from azure.core.exceptions import ClientAuthenticationError, HttpResponseError, ResourceNotFoundError
from azure.mgmt.keyvault import KeyVaultManagementClient
from azure.mgmt.keyvault.models import (
    AccessPolicyEntry,
    Permissions,
    Sku,
    VaultCheckNameAvailabilityParameters,
    VaultCreateOrUpdateParameters,
    VaultProperties,
)
from pydantic import BaseModel

from ..exceptions import AuthenticationFailure, MissingCredential, ProvisioningFailure
from ..utils.settings import AzureSettings

logger = logging.getLogger(__name__)

ALL_SECRET_PERMISSIONS = ["all"]


class AccessPolicy(BaseModel):
    """Grants one principal a set of secret permissions."""

    tenant_id: str
    object_id: str
    secret_permissions: List[str] = ALL_SECRET_PERMISSIONS


class VaultDescriptor(BaseModel):
    """Everything needed to create a vault, built before the API call."""

    name: str
    location: str
    tenant_id: str
    sku: str = "standard"
    access_policies: List[AccessPolicy]

    def to_parameters(self) -> VaultCreateOrUpdateParameters:
        return VaultCreateOrUpdateParameters(
            location=self.location,
            properties=VaultProperties(
                tenant_id=self.tenant_id,
                sku=Sku(family="A", name=self.sku),
                access_policies=[
                    AccessPolicyEntry(
                        tenant_id=policy.tenant_id,
                        object_id=policy.object_id,
                        permissions=Permissions(secrets=list(policy.secret_permissions)),
                    )
                    for policy in self.access_policies
                ],
            ),
        )


class VaultResource(BaseModel):
    """A provisioned vault."""

    id: str
    name: str
    location: str
    vault_uri: str
    provisioning_state: Optional[str] = None


def build_vault_descriptor(settings: AzureSettings, vault_name: str) -> VaultDescriptor:
    """Describe a standard vault whose only access policy gives the sample's
    service principal every secret permission."""
    tenant_id = str(settings.tenant_uuid())
    if not settings.client_oid:
        raise MissingCredential("Missing service principal settings: AZURE_CLIENT_OID")

    return VaultDescriptor(
        name=vault_name,
        location=settings.location,
        tenant_id=tenant_id,
        access_policies=[AccessPolicy(tenant_id=tenant_id, object_id=settings.client_oid)],
    )


class VaultProvisioner:
    """Creates Key Vault instances through the management plane."""

    def __init__(self, credential: TokenCredential, subscription_id: str):
        if not subscription_id:
            raise ValueError("subscription_id required or set AZURE_SUBSCRIPTION_ID")
        self._client = KeyVaultManagementClient(credential, subscription_id)

    def __enter__(self) -> "VaultProvisioner":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def check_name_available(self, resource_group: str, vault_name: str) -> None:
        """Raise ProvisioningFailure if `vault_name` is taken by a vault outside `resource_group`.

        Azure also reports a vault we already own as unavailable, so an
        unavailable name is only a failure when the vault is not ours.
        """
        try:
            result = self._client.vaults.check_name_availability(
                VaultCheckNameAvailabilityParameters(name=vault_name)
            )
        except ClientAuthenticationError as e:
            raise AuthenticationFailure(f"Management plane rejected the service principal: {e}") from e
        except HttpResponseError as e:
            raise ProvisioningFailure(f"Failed to check vault name '{vault_name}': {e}") from e

        if result.name_available:
            return

        if self.exists(resource_group, vault_name):
            logger.info(f"Vault {vault_name} already exists in {resource_group}, updating it")
            return

        reason = result.message or result.reason or "name is not available"
        raise ProvisioningFailure(f"Vault name '{vault_name}' is not available: {reason}")

    def exists(self, resource_group: str, vault_name: str) -> bool:
        """True if `vault_name` is a vault in `resource_group` of this subscription."""
        try:
            self._client.vaults.get(resource_group, vault_name)
        except ResourceNotFoundError:
            return False
        except ClientAuthenticationError as e:
            raise AuthenticationFailure(f"Management plane rejected the service principal: {e}") from e
        except HttpResponseError as e:
            raise ProvisioningFailure(f"Failed to look up vault '{vault_name}': {e}") from e
        return True

    def create_or_update(self, resource_group: str, vault_name: str, descriptor: VaultDescriptor) -> VaultResource:
        """Create or update the vault and wait for the long-running operation to finish.

        Repeating the call for the same vault updates it; calling again with
        a different name creates a second vault.
        """
        self.check_name_available(resource_group, vault_name)

        logger.info(f"Creating sample Key Vault - {vault_name}")
        try:
            poller = self._client.vaults.begin_create_or_update(
                resource_group, vault_name, descriptor.to_parameters()
            )
            vault = poller.result()
        except ClientAuthenticationError as e:
            raise AuthenticationFailure(f"Management plane rejected the service principal: {e}") from e
        except HttpResponseError as e:
            raise ProvisioningFailure(f"Failed to create vault '{vault_name}': {e}") from e

        props = vault.properties
        if props is None or not props.vault_uri:
            raise ProvisioningFailure(f"Vault '{vault_name}' was created but has no URI")

        logger.info(f"Vault URI: {props.vault_uri}")
        return VaultResource(
            id=vault.id,
            name=vault.name,
            location=vault.location,
            vault_uri=props.vault_uri,
            provisioning_state=props.provisioning_state,
        )
