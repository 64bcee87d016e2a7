from __future__ import annotations

import os
import warnings
from enum import StrEnum
from functools import cache


class Env(StrEnum):
    LOCAL = "local"
    DEV = "dev"
    TEST = "test"
    PROD = "prod"


# Common aliases -> canonical
SYNONYMS: dict[str, Env] = {
    "development": Env.DEV,
    "staging": Env.TEST,
    "testing": Env.TEST,
    "ci": Env.TEST,
    "production": Env.PROD,
}


def normalize_env(raw: str | None) -> Env | None:
    if not raw:
        return None
    val = raw.strip().lower()
    if val in (e.value for e in Env):
        return Env(val)
    return SYNONYMS.get(val)


@cache
def get_env() -> Env:
    """
    Resolve the running environment from ``APP_ENV``.

    Missing values mean ``local``. Unknown values also fall back to ``local``
    with a one-time warning.
    """
    raw = os.getenv("APP_ENV")
    env = normalize_env(raw)
    if env is None:
        if raw:
            warnings.warn(
                f"Unrecognized environment '{raw}', defaulting to 'local'.",
                RuntimeWarning,
                stacklevel=2,
            )
        env = Env.LOCAL
    return env


def pick(*, prod, nonprod, dev=None, test=None, local=None, env: Env | None = None):
    """
    Choose a value based on the active environment.

    Example:
        log_format = pick(prod="json", nonprod="plain")
    """
    e = env or get_env()
    if e is Env.PROD:
        return prod
    if e is Env.DEV and dev is not None:
        return dev
    if e is Env.TEST and test is not None:
        return test
    if e is Env.LOCAL and local is not None:
        return local
    return nonprod
