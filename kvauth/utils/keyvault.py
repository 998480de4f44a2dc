"""Azure Key Vault utility for the secret round trip."""
import logging
from typing import Iterator, Optional

from azure.core.credentials import TokenCredential
from azure.core.exceptions import ClientAuthenticationError, HttpResponseError, ResourceNotFoundError
from azure.keyvault.secrets import SecretClient
from pydantic import BaseModel

from ..exceptions import AuthenticationFailure, KeyVaultSampleError, SecretDisabled, SecretNotFound

logger = logging.getLogger(__name__)


class SecretInfo(BaseModel):
    """Secret metadata, without the value."""

    name: str
    version: Optional[str] = None
    enabled: bool = True
    managed: bool = False


class Secret(SecretInfo):
    """A secret value together with its metadata."""

    value: Optional[str] = None


def _info_from_properties(props) -> SecretInfo:
    return SecretInfo(
        name=props.name,
        version=props.version,
        enabled=bool(props.enabled) if props.enabled is not None else True,
        managed=bool(props.managed),
    )


def _is_disabled_error(e: HttpResponseError) -> bool:
    # Key Vault answers 403 "Operation get is not allowed on a disabled secret."
    return e.status_code == 403 and "disabled" in str(e.message or e).lower()


class KeyVaultSecrets:
    """Key Vault SecretClient wrapper.

    Authentication is whatever TokenCredential the caller hands in: the
    client-credentials callback or DefaultAzureCredential.
    """

    def __init__(self, vault_url: str, credential: TokenCredential):
        """Initialize Key Vault client.

        Args:
            vault_url: Vault URI returned by provisioning, e.g. https://myvault.vault.azure.net/
            credential: Token provider used for every data-plane request
        """
        if not vault_url:
            raise ValueError("vault_url required")

        self.vault_url = vault_url
        self._client = SecretClient(vault_url=vault_url, credential=credential)

    def __enter__(self) -> "KeyVaultSecrets":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def set_secret(self, name: str, value: str) -> SecretInfo:
        """Write a new version of a secret.

        Args:
            name: Secret name
            value: Secret value

        Returns:
            Metadata of the version just written
        """
        try:
            secret = self._client.set_secret(name, value)
        except ClientAuthenticationError as e:
            raise AuthenticationFailure(f"Key Vault rejected the token while setting '{name}': {e}") from e
        except HttpResponseError as e:
            raise KeyVaultSampleError(f"Failed to set secret '{name}': {e}") from e

        logger.info(f"Set secret '{name}' (version {secret.properties.version})")
        return _info_from_properties(secret.properties)

    def get_secret(self, name: str) -> Secret:
        """Get the latest version of a secret.

        Args:
            name: Secret name

        Returns:
            The secret value and metadata

        Raises:
            SecretNotFound: the vault has no secret with that name
            SecretDisabled: the secret exists but is disabled
        """
        try:
            secret = self._client.get_secret(name)
        except ClientAuthenticationError as e:
            raise AuthenticationFailure(f"Key Vault rejected the token while getting '{name}': {e}") from e
        except ResourceNotFoundError as e:
            raise SecretNotFound(f"Secret not found: {name}") from e
        except HttpResponseError as e:
            if _is_disabled_error(e):
                raise SecretDisabled(f"Secret is disabled: {name}") from e
            raise KeyVaultSampleError(f"Failed to get secret '{name}': {e}") from e

        info = _info_from_properties(secret.properties)
        return Secret(value=secret.value, **info.model_dump())

    def list_secrets(self) -> Iterator[SecretInfo]:
        """Lazily list secret metadata.

        Managed secrets (backing certificates) and disabled secrets are
        skipped: fetching a disabled secret's value always fails.
        """
        try:
            for props in self._client.list_properties_of_secrets():
                if props.managed:
                    logger.debug(f"Skipping managed secret '{props.name}'")
                    continue
                if props.enabled is False:
                    logger.debug(f"Skipping disabled secret '{props.name}'")
                    continue
                yield _info_from_properties(props)
        except ClientAuthenticationError as e:
            raise AuthenticationFailure(f"Key Vault rejected the token while listing secrets: {e}") from e
        except HttpResponseError as e:
            raise KeyVaultSampleError(f"Failed to list secrets: {e}") from e

    def round_trip(self, name: str, value: str) -> Secret:
        """Set a secret and read it back."""
        self.set_secret(name, value)
        return self.get_secret(name)

    def ping(self) -> None:
        """Issue the cheapest data-plane call: the first page of secret properties.

        Raises the SDK's own exceptions so the readiness wait can tell
        transient failures apart.
        """
        next(iter(self._client.list_properties_of_secrets(max_page_size=1)), None)
