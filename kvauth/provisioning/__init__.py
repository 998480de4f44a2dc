from .resource_group import ResourceGroupEnsurer, ResourceGroupInfo
from .vault import (
    AccessPolicy,
    VaultDescriptor,
    VaultProvisioner,
    VaultResource,
    build_vault_descriptor,
)
from .readiness import wait_until_ready

__all__ = [
    "ResourceGroupEnsurer",
    "ResourceGroupInfo",
    "AccessPolicy",
    "VaultDescriptor",
    "VaultProvisioner",
    "VaultResource",
    "build_vault_descriptor",
    "wait_until_ready",
]
