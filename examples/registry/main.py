"""Registry example: compile schema.toml and run the contract in-process.

Usage:
    python main.py              # Walk through a short registry session
    python main.py --messages   # Print the wire format of each step
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from msgkit import StdError, compile_schema
from msgkit.testing import App, CodeId

SCHEMA = Path(__file__).with_name("schema.toml")


class ContractError(Exception):
    @classmethod
    def from_std_error(cls, error: Exception) -> ContractError:
        return cls(f"std: {error}")


class Registry:
    """Name registry guarded by an owner and a pause switch."""

    Error = ContractError

    def instantiate(self, ctx, admin):
        ctx.storage.update(owner=admin, paused=False, names={})

    def _only_owner(self, ctx):
        if ctx.info.sender != ctx.storage["owner"]:
            raise ContractError(f"unauthorized: {ctx.info.sender}")

    # Ownable

    def transfer_owner(self, ctx, new_owner):
        self._only_owner(ctx)
        ctx.storage["owner"] = new_owner

    def owner(self, ctx):
        return ctx.storage["owner"]

    # Pausable

    def pause(self, ctx):
        self._only_owner(ctx)
        ctx.storage["paused"] = True

    def unpause(self, ctx):
        self._only_owner(ctx)
        ctx.storage["paused"] = False

    def is_paused(self, ctx):
        return ctx.storage["paused"]

    # Registry

    def register(self, ctx, name, address):
        if ctx.storage["paused"]:
            raise ContractError("registry is paused")
        ctx.storage["names"][name] = address

    def lookup(self, ctx, name):
        return ctx.storage["names"].get(name)

    def migrate(self, ctx, version):
        ctx.storage["version"] = version


def run(show_messages: bool = False) -> None:
    compiled = compile_schema(SCHEMA).contracts["Registry"]
    app = App()
    code = CodeId.store(app, compiled, Registry)

    registry = code.instantiate("owner").with_admin("owner").call("owner")
    steps = [
        ("owner", registry.register("dao", "addr-dao")),
        ("owner", registry.transfer_owner("alice")),
        ("owner", registry.pause()),
        ("alice", registry.pause()),
        ("alice", registry.register("late", "addr-late")),
    ]
    for sender, pending in steps:
        if show_messages:
            print(f"{sender} -> {pending.message.to_json().decode()}")
        try:
            pending.call(sender)
        except (ContractError, StdError) as e:
            print(f"  rejected: {e}")

    print(f"owner: {registry.owner()}, paused: {registry.is_paused()}")
    print(f"dao -> {registry.lookup('dao')}, late -> {registry.lookup('late')}")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="msgkit registry example")
    parser.add_argument("--messages", action="store_true", help="Print wire messages")
    args = parser.parse_args(argv)
    run(show_messages=args.messages)
    return 0


if __name__ == "__main__":
    sys.exit(main())
