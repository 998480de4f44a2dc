"""Random resource names."""
import secrets
import string

VAULT_NAME_MIN_LENGTH = 3
VAULT_NAME_MAX_LENGTH = 24

_ALPHABET = string.ascii_lowercase + string.digits


def generate_vault_name(prefix: str = "vault", length: int = 20) -> str:
    """Return a random Key Vault name such as `vault3kq9x0c2mz7d1fa8`.

    Vault names are global, 3-24 characters, alphanumeric and must start
    with a letter.
    """
    if not prefix or not prefix[0].isalpha():
        raise ValueError("prefix must start with a letter")
    if not VAULT_NAME_MIN_LENGTH <= length <= VAULT_NAME_MAX_LENGTH:
        raise ValueError(f"length must be between {VAULT_NAME_MIN_LENGTH} and {VAULT_NAME_MAX_LENGTH}")
    if len(prefix) >= length:
        raise ValueError("prefix leaves no room for a random suffix")

    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(length - len(prefix)))
    return f"{prefix.lower()}{suffix}"
