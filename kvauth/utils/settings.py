import uuid
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from ..exceptions import MalformedIdentifier, MissingCredential

IDENTITY_FIELDS = ("client_id", "client_secret", "tenant_id")


class AzureSettings(BaseSettings):
    """Service principal identity and target topology.

    Read from AZURE_* environment variables or a .env file. Identity fields
    may be missing at load time; they are checked where they are used.
    """

    model_config = SettingsConfigDict(env_prefix="AZURE_", env_file=".env", extra="ignore", frozen=True)

    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    tenant_id: Optional[str] = None
    subscription_id: Optional[str] = None
    client_oid: Optional[str] = None
    resource_group: str = "azure-sample-group"
    location: str = "westus"

    def require_identity(self) -> None:
        """Raise MissingCredential if client id, client secret or tenant id is unset."""
        missing = [name for name in IDENTITY_FIELDS if not getattr(self, name)]
        if missing:
            env_names = ", ".join(f"AZURE_{name.upper()}" for name in missing)
            raise MissingCredential(f"Missing service principal settings: {env_names}")

    def tenant_uuid(self) -> uuid.UUID:
        """Return the tenant id parsed as a GUID."""
        if not self.tenant_id:
            raise MissingCredential("Missing service principal settings: AZURE_TENANT_ID")
        try:
            return uuid.UUID(self.tenant_id)
        except ValueError as e:
            raise MalformedIdentifier(f"Tenant id '{self.tenant_id}' is not a valid GUID") from e


class SampleOptions(BaseSettings):
    """Run-time options for the sample itself."""

    model_config = SettingsConfigDict(env_prefix="SAMPLE_", env_file=".env", extra="ignore", frozen=True)

    auth_mode: Literal["callback", "ambient"] = "callback"
    vault_name: Optional[str] = None  # random when unset
    secret_name: str = "test-secret"
    secret_value: str = "test-secret-value-using-adal"
    list_secrets: bool = False

    # Readiness wait after vault creation. A timeout of 0 means a single fixed sleep.
    propagation_timeout: float = 120.0
    propagation_initial_delay: float = 5.0
    propagation_max_delay: float = 20.0
