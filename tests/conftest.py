"""Test fixtures: in-memory stand-ins for the Azure SDK clients."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Dict, List, Optional

import pytest
from azure.core.exceptions import ClientAuthenticationError, HttpResponseError, ResourceNotFoundError

from kvauth.utils.settings import AzureSettings

TENANT_ID = "72f988bf-86f1-41af-91ab-2d7cd011db47"
SUBSCRIPTION_ID = "00000000-1111-2222-3333-444444444444"
CLIENT_OID = "9b1f1c3e-0000-4c1d-8e3a-5f6a7b8c9d0e"
VAULT_SCOPE = "https://vault.azure.net/.default"
VAULT_TOKEN = "token-for:https://vault.azure.net"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Keep the developer's AZURE_*/SAMPLE_* variables and .env out of tests."""
    for name in list(os.environ):
        if name.startswith("AZURE_") or name.startswith("SAMPLE_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def azure_settings() -> AzureSettings:
    return AzureSettings(
        client_id="sample-client-id",
        client_secret="sample-client-secret",
        tenant_id=TENANT_ID,
        subscription_id=SUBSCRIPTION_ID,
        client_oid=CLIENT_OID,
    )


# === Data plane ===


@dataclass
class StoredSecret:
    value: str
    version: int
    enabled: bool = True
    managed: bool = False


class FakeSecretClient:
    """Minimal SecretClient backed by a dict.

    When `require_token` is set, every call first asks the credential for a
    Key Vault token and rejects anything but VAULT_TOKEN, like the service
    rejects tokens issued for another resource.
    """

    def __init__(self, vault_url: str, credential=None, require_token: bool = False):
        self.vault_url = vault_url
        self.credential = credential
        self.require_token = require_token
        self.store: Dict[str, StoredSecret] = {}
        self.closed = False
        self.calls: List[str] = []

    def _authorize(self):
        if not self.require_token:
            return
        token = self.credential.get_token(VAULT_SCOPE)
        if token.token != VAULT_TOKEN:
            raise ClientAuthenticationError(message="AKV10022: Invalid audience.")

    def _properties(self, name: str, stored: StoredSecret):
        return SimpleNamespace(
            name=name,
            version=str(stored.version),
            enabled=stored.enabled,
            managed=stored.managed,
        )

    def set_secret(self, name: str, value: str):
        self.calls.append(f"set:{name}")
        self._authorize()
        previous = self.store.get(name)
        stored = StoredSecret(value=value, version=(previous.version + 1) if previous else 1)
        self.store[name] = stored
        return SimpleNamespace(name=name, value=value, properties=self._properties(name, stored))

    def get_secret(self, name: str):
        self.calls.append(f"get:{name}")
        self._authorize()
        stored = self.store.get(name)
        if stored is None:
            raise ResourceNotFoundError(message=f"A secret with (name/id) {name} was not found in this key vault.")
        if not stored.enabled:
            error = HttpResponseError(message="Operation get is not allowed on a disabled secret.")
            error.status_code = 403
            raise error
        return SimpleNamespace(name=name, value=stored.value, properties=self._properties(name, stored))

    def list_properties_of_secrets(self, max_page_size: Optional[int] = None):
        self.calls.append("list")
        self._authorize()
        items = [self._properties(name, stored) for name, stored in self.store.items()]
        return iter(items[:max_page_size] if max_page_size else items)

    def add(self, name: str, value: str, enabled: bool = True, managed: bool = False):
        self.store[name] = StoredSecret(value=value, version=1, enabled=enabled, managed=managed)

    def close(self):
        self.closed = True


@pytest.fixture
def fake_secret_client(monkeypatch: pytest.MonkeyPatch) -> FakeSecretClient:
    """Patch SecretClient so every KeyVaultSecrets shares one in-memory vault."""
    client = FakeSecretClient("https://unset.vault.azure.net/")

    def factory(vault_url, credential):
        client.vault_url = vault_url
        client.credential = credential
        return client

    monkeypatch.setattr("kvauth.utils.keyvault.SecretClient", factory)
    return client


# === Management plane ===


class FakeResourceGroups:
    def __init__(self, subscription_id: str):
        self.subscription_id = subscription_id
        self.groups: Dict[str, SimpleNamespace] = {}
        self.calls = 0
        self.clients: List[FakeManagementClient] = []

    def create_or_update(self, name: str, parameters):
        self.calls += 1
        group = SimpleNamespace(
            id=f"/subscriptions/{self.subscription_id}/resourceGroups/{name}",
            name=name,
            location=parameters["location"],
            properties=SimpleNamespace(provisioning_state="Succeeded"),
        )
        self.groups[name] = group
        return group


@dataclass
class FakeVaults:
    """Vaults of one subscription.

    `taken_names` are held by someone else; like Azure, our own vaults are
    reported unavailable too and only `get` tells them apart.
    """

    taken_names: set = field(default_factory=set)
    created: Dict[str, object] = field(default_factory=dict)
    groups: Dict[str, str] = field(default_factory=dict)
    create_error: Optional[Exception] = None
    vault_uri_template: Optional[str] = "https://{name}.vault.azure.net/"
    clients: list = field(default_factory=list)

    def check_name_availability(self, parameters):
        available = parameters.name not in self.taken_names and parameters.name not in self.created
        return SimpleNamespace(
            name_available=available,
            reason=None if available else "AlreadyExists",
            message=None if available else f"The vault name '{parameters.name}' is already in use.",
        )

    def _vault(self, resource_group_name: str, vault_name: str, location: str):
        uri = self.vault_uri_template.format(name=vault_name) if self.vault_uri_template else None
        return SimpleNamespace(
            id=f"/subscriptions/{SUBSCRIPTION_ID}/resourceGroups/{resource_group_name}"
            f"/providers/Microsoft.KeyVault/vaults/{vault_name}",
            name=vault_name,
            location=location,
            properties=SimpleNamespace(vault_uri=uri, provisioning_state="Succeeded"),
        )

    def get(self, resource_group_name: str, vault_name: str):
        if self.groups.get(vault_name) != resource_group_name:
            raise ResourceNotFoundError(message=f"The Resource '{vault_name}' was not found.")
        return self._vault(resource_group_name, vault_name, self.created[vault_name].location)

    def begin_create_or_update(self, resource_group_name: str, vault_name: str, parameters):
        if self.create_error is not None:
            raise self.create_error
        self.created[vault_name] = parameters
        self.groups[vault_name] = resource_group_name
        vault = self._vault(resource_group_name, vault_name, parameters.location)
        return SimpleNamespace(result=lambda: vault)


class FakeManagementClient(SimpleNamespace):
    """Exposes one operations group and records close()."""

    closed = False

    def close(self):
        self.closed = True


@pytest.fixture
def fake_resource_groups(monkeypatch: pytest.MonkeyPatch) -> FakeResourceGroups:
    groups = FakeResourceGroups(SUBSCRIPTION_ID)

    def factory(credential, subscription_id):
        client = FakeManagementClient(resource_groups=groups)
        groups.clients.append(client)
        return client

    monkeypatch.setattr("kvauth.provisioning.resource_group.ResourceManagementClient", factory)
    return groups


@pytest.fixture
def fake_vaults(monkeypatch: pytest.MonkeyPatch) -> FakeVaults:
    vaults = FakeVaults()

    def factory(credential, subscription_id):
        client = FakeManagementClient(vaults=vaults)
        vaults.clients.append(client)
        return client

    monkeypatch.setattr("kvauth.provisioning.vault.KeyVaultManagementClient", factory)
    return vaults
