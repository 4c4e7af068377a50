"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from msgkit import compile_schema, parse_schema


class ContractError(Exception):
    """Domain error used by the fixture contracts."""

    @classmethod
    def from_std_error(cls, error: Exception) -> "ContractError":
        return cls(f"std: {error}")


REGISTRY_DOCUMENT = {
    "interfaces": [
        {
            "name": "Ownable",
            "error": "ContractError",
            "operations": [
                {"name": "transfer_owner", "category": "exec", "params": ["new_owner: String"]},
                {"name": "owner", "category": "query", "returns": "String"},
            ],
        },
        {
            "name": "Pausable",
            "error": "ContractError",
            "operations": [
                {"name": "pause", "category": "exec"},
                {"name": "unpause", "category": "exec"},
                {"name": "is_paused", "category": "query", "returns": "bool"},
            ],
        },
    ],
    "contracts": [
        {
            "name": "Registry",
            "error": "ContractError",
            "messages": ["Ownable", "Pausable"],
            "operations": [
                {"name": "instantiate", "category": "init", "params": ["admin: String"]},
                {
                    "name": "register",
                    "category": "exec",
                    "params": ["name: String", "address: Addr"],
                },
                {
                    "name": "lookup",
                    "category": "query",
                    "params": ["name: String"],
                    "returns": "Optional[Addr]",
                },
                {"name": "force_pause", "category": "privileged"},
                {"name": "migrate", "category": "migrate", "params": ["version: u32"]},
                {"name": "on_reply", "category": "reply", "params": ["id: u64"]},
            ],
        }
    ],
}


class RegistryContract:
    """Implementation of the Registry fixture contract over ctx.storage."""

    Error = ContractError

    def instantiate(self, ctx, admin):
        ctx.storage["owner"] = admin
        ctx.storage["paused"] = False
        ctx.storage["names"] = {}
        return "instantiated"

    def _only_owner(self, ctx):
        if ctx.info.sender != ctx.storage["owner"]:
            raise ContractError(f"unauthorized: {ctx.info.sender}")

    def transfer_owner(self, ctx, new_owner):
        self._only_owner(ctx)
        ctx.storage["owner"] = new_owner
        return new_owner

    def owner(self, ctx):
        return ctx.storage["owner"]

    def pause(self, ctx):
        self._only_owner(ctx)
        ctx.storage["paused"] = True

    def unpause(self, ctx):
        self._only_owner(ctx)
        ctx.storage["paused"] = False

    def is_paused(self, ctx):
        return ctx.storage["paused"]

    def register(self, ctx, name, address):
        if ctx.storage["paused"]:
            raise ContractError("registry is paused")
        ctx.storage["names"][name] = address
        return name

    def lookup(self, ctx, name):
        return ctx.storage["names"].get(name)

    def force_pause(self, ctx):
        ctx.storage["paused"] = True
        return "paused"

    def migrate(self, ctx, version):
        ctx.storage["version"] = version
        return version

    def on_reply(self, ctx, id):
        ctx.storage["last_reply"] = id
        return id


@pytest.fixture
def registry_document():
    """Fresh copy of the Registry declaration document."""
    import copy

    return copy.deepcopy(REGISTRY_DOCUMENT)


@pytest.fixture
def registry_schema(registry_document):
    return parse_schema(registry_document)


@pytest.fixture
def compiled_registry(registry_schema):
    """Compiled Registry contract."""
    return compile_schema(registry_schema).contracts["Registry"]


@pytest.fixture
def registry_contract():
    return RegistryContract()


@pytest.fixture
def contract_error_cls():
    return ContractError
