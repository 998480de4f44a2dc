"""Exceptions raised by the Key Vault authentication sample."""


class KeyVaultSampleError(Exception):
    """Base exception for every failure the sample reports."""
    pass


class MissingCredential(KeyVaultSampleError):
    """Raised when identity settings (client id, secret, tenant) are absent."""
    pass


class MalformedIdentifier(KeyVaultSampleError):
    """Raised when an identifier such as the tenant id is not a valid GUID."""
    pass


class AuthenticationFailure(KeyVaultSampleError):
    """Raised when Azure rejects the presented credential or token."""
    pass


class ProvisioningFailure(KeyVaultSampleError):
    """Raised when a management-plane operation does not succeed."""
    pass


class TokenAcquisitionFailure(KeyVaultSampleError):
    """Raised when a bearer token could not be obtained for Key Vault."""
    pass


class SecretError(KeyVaultSampleError):
    """Base exception for data-plane secret errors."""
    pass


class SecretNotFound(SecretError):
    """Raised when a requested secret does not exist."""
    pass


class SecretDisabled(SecretError):
    """Raised when a requested secret exists but is disabled."""
    pass
