from __future__ import annotations

import copy
import os
from typing import Any

# Options for every profile
_BASE: dict[str, Any] = {
    "pool_pre_ping": True,
    "pool_reset_on_return": "rollback",
    "pool_recycle": 180,  # 3min
    "echo": False,
}

# asyncpg connection arguments, only applied to postgresql urls
_POSTGRES_CONNECT_ARGS: dict[str, Any] = {
    "command_timeout": 60,
    "server_settings": {
        "application_name": os.getenv("APP_NAME", "world-cities"),
        "statement_timeout": "60000",  # 1min
        "idle_in_transaction_session_timeout": "300000",  # 5min
    },
}

PROFILES: dict[str, dict[str, Any]] = {
    "dev": {"pool_size": 5, "max_overflow": 10, "pool_timeout": 30, "pool_recycle": 600, "echo": True},
    "prod": {"pool_size": 10, "max_overflow": 20, "pool_timeout": 45},
    "large": {"pool_size": 20, "max_overflow": 30, "pool_timeout": 30},
    "micro": {"pool_size": 2, "max_overflow": 3, "pool_timeout": 30},
    "test": {"poolclass": "StaticPool", "echo": False},
}

_POOL_ONLY_ARGS = (
    "pool_size",
    "max_overflow",
    "pool_timeout",
    "pool_recycle",
    "pool_pre_ping",
    "pool_reset_on_return",
)


def _sanitize_for_unpooled(opts: dict[str, Any]) -> dict[str, Any]:
    poolclass = opts.get("poolclass")
    poolclass_name = poolclass if isinstance(poolclass, str) else getattr(poolclass, "__name__", "")
    if poolclass_name in {"NullPool", "StaticPool"}:
        for key in _POOL_ONLY_ARGS:
            opts.pop(key, None)
    return opts


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def build_engine_options(
    profile: str | None,
    overrides: dict[str, Any] | None = None,
    app_name: str | None = None,
    dialect: str = "postgresql",
) -> dict[str, Any]:
    """Build engine options from a named profile with optional deep-merge overrides.

    Supported profiles:
    - "dev": local development, small pool and echo on
    - "prod": standard production pool
    - "large": high traffic deployments
    - "micro": scripts and one-off jobs
    - "test": StaticPool, no echo

    Unknown or empty profiles get the base options only.
    """
    opts = copy.deepcopy(_BASE)
    if dialect == "postgresql":
        opts["connect_args"] = copy.deepcopy(_POSTGRES_CONNECT_ARGS)
        if app_name:
            opts["connect_args"]["server_settings"]["application_name"] = app_name

    if profile in PROFILES:
        opts = _deep_merge(opts, PROFILES[profile])
    if overrides:
        opts = _deep_merge(opts, overrides)

    return _sanitize_for_unpooled(opts)
