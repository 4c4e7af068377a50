"""In-process test harness: an App host and generated contract proxies."""

from msgkit.testing.app import (
    App,
    Coin,
    Env,
    ExecCtx,
    InstantiateCtx,
    MessageInfo,
    MigrateCtx,
    PrivilegedCtx,
    QueryCtx,
    ReplyCtx,
)
from msgkit.testing.proxy import (
    CodeId,
    ContractProxy,
    ExecProxy,
    InstantiateProxy,
    MigrateProxy,
    build_message,
    generate_proxy,
)

__all__ = [
    # App
    "App",
    "Coin",
    "Env",
    "MessageInfo",
    # Contexts
    "InstantiateCtx",
    "ExecCtx",
    "QueryCtx",
    "MigrateCtx",
    "PrivilegedCtx",
    "ReplyCtx",
    # Proxies
    "CodeId",
    "ContractProxy",
    "ExecProxy",
    "InstantiateProxy",
    "MigrateProxy",
    "generate_proxy",
    "build_message",
]
