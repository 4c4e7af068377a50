"""Decorator front-end: declare interfaces and a contract as Python classes.

Run with: python examples/club.py
"""

from pydantic import BaseModel

from msgkit import Category, assemble_schema, compile_schema, contract, interface, msg


class ClubError(Exception):
    pass


class Member(BaseModel):
    name: str
    weight: int = 1


@interface(error=ClubError)
class Members:
    @msg("exec")
    def join(self, ctx, member: Member) -> None:
        """Add a member to the club."""
        raise NotImplementedError

    @msg("query", resp=list[Member])
    def members(self, ctx, limit: int):
        raise NotImplementedError


@contract(error=ClubError, messages=[Members])
class Club(Members):
    @msg("init")
    def instantiate(self, ctx, name: str) -> None:
        ctx.storage["name"] = name
        ctx.storage["members"] = []

    def join(self, ctx, member: Member) -> None:
        ctx.storage["members"].append(member)

    def members(self, ctx, limit: int):
        return ctx.storage["members"][:limit]


if __name__ == "__main__":
    compiled = compile_schema(assemble_schema(Club)).contracts["Club"]
    entry = compiled.entrypoint(Category.EXEC)

    message = entry["Members"].Join(member=Member(name="ann"))
    print(entry.to_json(message).decode())
    print(entry.decode(b'{"join": {"member": {"name": "bob", "weight": 2}}}'))
