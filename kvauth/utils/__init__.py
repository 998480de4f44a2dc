from .settings import AzureSettings, SampleOptions
from .config_loader import load_settings_file
from .keyvault import KeyVaultSecrets, Secret, SecretInfo
from .names import generate_vault_name

__all__ = [
    "AzureSettings",
    "SampleOptions",
    "load_settings_file",
    "KeyVaultSecrets",
    "Secret",
    "SecretInfo",
    "generate_vault_name",
]
