"""Data-plane authentication for Key Vault.

Two ways of producing a bearer token for the vault, both exposed as an
azure-core TokenCredential so SecretClient accepts either:

- CallbackTokenCredential: an explicit (authority, resource, scope) -> token
  callback, by default a client-credentials exchange through MSAL.
- DefaultAzureCredential: ambient identity resolution (environment, managed
  identity, Azure CLI, ...).
"""
import logging
import time
from typing import Callable, Literal, Optional

import msal
from azure.core.credentials import AccessToken, TokenCredential
from azure.identity import AzureAuthorityHosts, DefaultAzureCredential

from ..exceptions import TokenAcquisitionFailure
from ..utils.settings import AzureSettings

logger = logging.getLogger(__name__)

# (authority, resource, scope) -> access token
TokenCallback = Callable[[str, str, str], Optional[str]]

AuthMode = Literal["callback", "ambient"]

DEFAULT_SCOPE_SUFFIX = "/.default"


def resource_from_scope(scope: str) -> str:
    """Turn `https://vault.azure.net/.default` into `https://vault.azure.net`."""
    if scope.endswith(DEFAULT_SCOPE_SUFFIX):
        return scope[: -len(DEFAULT_SCOPE_SUFFIX)]
    return scope


class CallbackTokenCredential:
    """TokenCredential that delegates every token request to a callback."""

    def __init__(
        self,
        callback: TokenCallback,
        tenant_id: str,
        authority_host: str = AzureAuthorityHosts.AZURE_PUBLIC_CLOUD,
        token_lifetime: int = 600,
    ):
        """
        Args:
            callback: Called with (authority, resource, scope); returns an access token
            tenant_id: Tenant used when the request does not name one
            authority_host: Entra ID host, e.g. login.microsoftonline.com
            token_lifetime: Seconds the returned token is treated as valid
        """
        self._callback = callback
        self._tenant_id = tenant_id
        self._authority_host = authority_host
        self._token_lifetime = token_lifetime

    def authority_for(self, tenant_id: Optional[str] = None) -> str:
        host = self._authority_host
        if not host.startswith("https://"):
            host = f"https://{host}"
        return f"{host.rstrip('/')}/{tenant_id or self._tenant_id}"

    def get_token(
        self,
        *scopes: str,
        claims: Optional[str] = None,
        tenant_id: Optional[str] = None,
        **kwargs,
    ) -> AccessToken:
        if not scopes:
            raise ValueError("at least one scope is required")

        scope = scopes[0]
        authority = self.authority_for(tenant_id)
        resource = resource_from_scope(scope)

        token = self._callback(authority, resource, scope)
        if not token:
            raise TokenAcquisitionFailure("Failed to retrieve access token for Key Vault")

        return AccessToken(token, int(time.time()) + self._token_lifetime)

    def close(self) -> None:
        pass


def client_credentials_callback(client_id: str, client_secret: str) -> TokenCallback:
    """Build a callback that exchanges client credentials for a token.

    A new confidential client is created for each call, so no tokens are
    kept between requests.
    """

    def acquire(authority: str, resource: str, scope: str) -> str:
        try:
            app = msal.ConfidentialClientApplication(
                client_id,
                client_credential=client_secret,
                authority=authority,
            )
            result = app.acquire_token_for_client(scopes=[f"{resource}{DEFAULT_SCOPE_SUFFIX}"])
        except Exception as e:
            raise TokenAcquisitionFailure(f"Failed to retrieve access token for Key Vault: {e}") from e

        if not result or "access_token" not in result:
            detail = (result or {}).get("error_description") or (result or {}).get("error") or "no result"
            raise TokenAcquisitionFailure(f"Failed to retrieve access token for Key Vault: {detail}")

        logger.debug(f"Acquired token for {resource} from {authority}")
        return result["access_token"]

    return acquire


def create_data_plane_credential(settings: AzureSettings, mode: AuthMode = "callback") -> TokenCredential:
    """Return the credential the secret client authenticates with.

    Args:
        settings: Service principal settings
        mode: "callback" for the explicit client-credentials exchange,
            "ambient" for DefaultAzureCredential
    """
    if mode == "callback":
        settings.require_identity()
        logger.info("Authenticating to Key Vault using a token callback.")
        return CallbackTokenCredential(
            client_credentials_callback(settings.client_id, settings.client_secret),
            tenant_id=settings.tenant_id,
        )
    elif mode == "ambient":
        logger.info("Authenticating to Key Vault using DefaultAzureCredential.")
        return DefaultAzureCredential()
    else:
        raise ValueError(f"Unsupported auth mode: {mode}")
