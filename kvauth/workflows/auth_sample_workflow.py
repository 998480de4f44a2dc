import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..auth.data_plane import create_data_plane_credential
from ..auth.management import create_management_credential
from ..provisioning.readiness import wait_until_ready
from ..provisioning.resource_group import ResourceGroupEnsurer, ResourceGroupInfo
from ..provisioning.vault import VaultProvisioner, VaultResource, build_vault_descriptor
from ..utils.keyvault import KeyVaultSecrets, Secret, SecretInfo
from ..utils.names import generate_vault_name
from ..utils.settings import AzureSettings, SampleOptions

logger = logging.getLogger(__name__)


# === Result of a sample run ===
@dataclass
class SampleResult:
    """What the sample created and read back."""

    resource_group: ResourceGroupInfo
    vault: VaultResource
    secret: Secret
    listed: List[SecretInfo] = field(default_factory=list)


# === Workflow ===
class KeyVaultAuthSample:
    """Provision a vault, authenticate to it and round-trip a secret.

    Steps run strictly in order; each one needs the previous step's output
    (the vault URI, then a token). Nothing created is rolled back when a
    later step fails.
    """

    def __init__(self, settings: AzureSettings, options: Optional[SampleOptions] = None):
        self.settings = settings
        self.options = options or SampleOptions()

    def provision(self, vault_name: str) -> tuple[ResourceGroupInfo, VaultResource]:
        """Ensure the resource group and create the vault."""
        subscription_id = self.settings.subscription_id

        with create_management_credential(self.settings) as credential:
            with ResourceGroupEnsurer(credential, subscription_id) as ensurer:
                group = ensurer.ensure(self.settings.resource_group, self.settings.location)

            descriptor = build_vault_descriptor(self.settings, vault_name)
            with VaultProvisioner(credential, subscription_id) as provisioner:
                vault = provisioner.create_or_update(group.name, vault_name, descriptor)

        return group, vault

    def access_secret(self, vault_uri: str) -> tuple[Secret, List[SecretInfo]]:
        """Authenticate to the vault, set and get the sample secret."""
        options = self.options
        credential = create_data_plane_credential(self.settings, options.auth_mode)

        with KeyVaultSecrets(vault_uri, credential) as secrets:
            wait_until_ready(
                secrets.ping,
                timeout=options.propagation_timeout,
                initial_delay=options.propagation_initial_delay,
                max_delay=options.propagation_max_delay,
            )

            secret = secrets.round_trip(options.secret_name, options.secret_value)
            logger.info(f'Retrieved "{secret.name}", value="{secret.value}"')

            listed: List[SecretInfo] = []
            if options.list_secrets:
                listed = list(secrets.list_secrets())
                for info in listed:
                    logger.info(f"  - {info.name}")

        return secret, listed

    def run(self) -> SampleResult:
        vault_name = self.options.vault_name or generate_vault_name()

        group, vault = self.provision(vault_name)
        secret, listed = self.access_secret(vault.vault_uri)

        return SampleResult(resource_group=group, vault=vault, secret=secret, listed=listed)
