from .management import create_management_credential
from .data_plane import (
    CallbackTokenCredential,
    client_credentials_callback,
    create_data_plane_credential,
)

__all__ = [
    "create_management_credential",
    "CallbackTokenCredential",
    "client_credentials_callback",
    "create_data_plane_credential",
]
