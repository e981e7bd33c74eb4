from __future__ import annotations

import os
import warnings
from enum import StrEnum
from functools import cache
from typing import Any, NamedTuple

ENV_VARS = ("APP_ENV", "NODE_ENV")


class Env(StrEnum):
    LOCAL = "local"
    DEV = "dev"
    TEST = "test"
    PROD = "prod"


# Aliases seen in hosting dashboards -> canonical
SYNONYMS: dict[str, Env] = {
    "development": Env.DEV,
    "staging": Env.DEV,
    "testing": Env.TEST,
    "ci": Env.TEST,
    "production": Env.PROD,
}


def normalize_env(raw: str | None) -> Env | None:
    key = (raw or "").strip().lower()
    if not key:
        return None
    if key in Env._value2member_map_:
        return Env(key)
    return SYNONYMS.get(key)


@cache
def get_env() -> Env:
    """
    Deployment environment, resolved once per process.

    The first of APP_ENV, NODE_ENV that is set wins; with neither set the
    environment is ``local``. A value that is set but not recognised also
    means ``local`` and emits a RuntimeWarning.
    """
    raw = next((os.environ[v] for v in ENV_VARS if os.environ.get(v)), None)
    resolved = normalize_env(raw)
    if resolved is not None:
        return resolved
    if raw:
        warnings.warn(
            f"Unrecognized environment '{raw}', defaulting to 'local'.",
            RuntimeWarning,
            stacklevel=2,
        )
    return Env.LOCAL


class EnvFlags(NamedTuple):
    env: Env
    is_local: bool
    is_dev: bool
    is_test: bool
    is_prod: bool

    @classmethod
    def of(cls, env: Env) -> "EnvFlags":
        return cls(env, *(env is e for e in (Env.LOCAL, Env.DEV, Env.TEST, Env.PROD)))


def get_env_flags(env: Env | None = None) -> EnvFlags:
    return EnvFlags.of(env or get_env())


CURRENT_ENVIRONMENT: Env = get_env()
FLAGS: EnvFlags = get_env_flags(CURRENT_ENVIRONMENT)
IS_LOCAL, IS_DEV, IS_TEST, IS_PROD = FLAGS[1:]


def pick(*, prod: Any, nonprod: Any, dev: Any = None, test: Any = None, local: Any = None) -> Any:
    """
    Per-environment value; ``nonprod`` covers any non-prod env left unset.

    Example:
        resolve_mode = pick(prod="redirect", nonprod="json")
    """
    env = get_env()
    if env is Env.PROD:
        return prod
    override = {Env.DEV: dev, Env.TEST: test, Env.LOCAL: local}[env]
    return nonprod if override is None else override
