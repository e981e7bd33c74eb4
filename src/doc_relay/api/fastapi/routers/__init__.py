from __future__ import annotations

import importlib
import logging
import pkgutil
from typing import Mapping, Optional

from fastapi import FastAPI

from doc_relay.app.core.env import Env, get_env

logger = logging.getLogger(__name__)

ALL_ENVS = "all"


def _as_env(value: Env | str) -> Env:
    return value if isinstance(value, Env) else Env(value)


def _excluded_segments(exclude: Optional[Mapping[Env | str, set[str]]], env: Env) -> set[str]:
    segments: set[str] = set()
    for key, names in (exclude or {}).items():
        if key == ALL_ENVS or _as_env(key) is env:
            segments |= set(names)
    return segments


def register_all_routers(
        app: FastAPI,
        *,
        base_package: Optional[str] = None,
        prefix: str = "",
        exclude: Optional[Mapping[Env | str, set[str]]] = None,
        env: Optional[Env | str] = None,
) -> list[str]:
    """
    Include the module-level ``router`` of every module under ``base_package``.

    A module may set ``ROUTER_PREFIX``, ``ROUTER_TAG`` and
    ``INCLUDE_ROUTER_IN_SCHEMA`` to shape its include. Modules whose name
    starts with ``_`` are never included; ``exclude`` maps an env (or
    ``"all"``) to dotted-path segments skipped in that env, e.g.
    ``{Env.PROD: {"debug"}}``.

    An import error in a router module propagates: a broken module fails
    startup instead of silently dropping its routes.

    Returns:
        Dotted names of the modules whose routers were included.
    """
    base_package = base_package or __name__
    try:
        package = importlib.import_module(base_package)
    except ImportError as exc:
        raise RuntimeError(f"Could not import base_package '{base_package}': {exc}") from exc
    if not hasattr(package, "__path__"):
        raise RuntimeError(f"base_package '{base_package}' is not a package")

    active_env = get_env() if env is None else _as_env(env)
    skip = _excluded_segments(exclude, active_env)

    included: list[str] = []
    for info in pkgutil.walk_packages(package.__path__, prefix=f"{base_package}."):
        parts = info.name.split(".")
        if parts[-1].startswith("_") or skip.intersection(parts):
            logger.debug("Router module skipped: %s", info.name)
            continue
        module = importlib.import_module(info.name)
        router = getattr(module, "router", None)
        if router is None:
            continue

        router_prefix = getattr(module, "ROUTER_PREFIX", "")
        kwargs: dict = {
            "prefix": prefix.rstrip("/") + router_prefix,
            "include_in_schema": getattr(module, "INCLUDE_ROUTER_IN_SCHEMA", True),
        }
        tag = getattr(module, "ROUTER_TAG", None)
        if tag:
            kwargs["tags"] = [tag]
        app.include_router(router, **kwargs)
        included.append(info.name)
        logger.debug("Router included: %s (prefix=%r, tag=%s)", info.name, kwargs["prefix"], tag)
    return included
