"""Key Vault authentication sample - provision a vault and round-trip a secret."""

from .workflows.auth_sample_workflow import KeyVaultAuthSample, SampleResult

__all__ = [
    "KeyVaultAuthSample",
    "SampleResult",
]
