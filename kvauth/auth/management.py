import logging

from azure.identity import AzureAuthorityHosts, ClientSecretCredential

from ..exceptions import MalformedIdentifier
from ..utils.settings import AzureSettings

logger = logging.getLogger(__name__)

MANAGEMENT_AUTHORITY = AzureAuthorityHosts.AZURE_PUBLIC_CLOUD


def create_management_credential(settings: AzureSettings) -> ClientSecretCredential:
    """Create the service principal credential used for the management plane.

    Construction is local; the first token request happens on the first
    management call, which is where bad client or tenant ids surface.
    """
    settings.require_identity()

    logger.debug(f"Using service principal {settings.client_id} in tenant {settings.tenant_id}")
    try:
        return ClientSecretCredential(
            tenant_id=settings.tenant_id,
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            authority=MANAGEMENT_AUTHORITY,
        )
    except ValueError as e:
        # azure-identity rejects tenant ids containing invalid characters up front
        raise MalformedIdentifier(f"Invalid service principal identifiers: {e}") from e
