from .core.env import (
    CURRENT_ENVIRONMENT,
    IS_DEV,
    IS_LOCAL,
    IS_PROD,
    IS_TEST,
    Env,
    get_env,
    pick,
)

__all__ = [
    "CURRENT_ENVIRONMENT",
    "IS_DEV",
    "IS_LOCAL",
    "IS_PROD",
    "IS_TEST",
    "Env",
    "get_env",
    "pick",
]
