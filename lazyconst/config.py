# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
LazyConst Configuration

Example:
    config = ElementsConfig(enable_lazy=False)
    pool = DisposablePool(config)     # every constant is materialized

    config = ElementsConfig.from_env()
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigurationError

_TRUE = ("1", "true", "on", "yes")
_FALSE = ("0", "false", "off", "no")


@dataclass(frozen=True)
class ElementsConfig:
    """
    Configuration for building tensor constants.

    Attributes:
        enable_lazy: Whether the pool starts active. When False every
            builder result is an eager, fully materialized constant.
        check_bounds: Validate at creation that each view stays inside
            its buffer.
        verbosity: Logger verbosity (0-4) applied when a pool is created,
            or None to leave the logger alone.
    """

    enable_lazy: bool = True
    check_bounds: bool = True
    verbosity: Optional[int] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ElementsConfig":
        """
        Read LAZYCONST_ENABLE_LAZY, LAZYCONST_CHECK_BOUNDS and
        LAZYCONST_VERBOSITY, falling back to defaults when unset.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            enable_lazy=_parse_bool(env, "LAZYCONST_ENABLE_LAZY", defaults.enable_lazy),
            check_bounds=_parse_bool(env, "LAZYCONST_CHECK_BOUNDS", defaults.check_bounds),
            verbosity=_parse_verbosity(env, "LAZYCONST_VERBOSITY"),
        )


def _parse_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigurationError(
        f"{key} must be a boolean", config_key=key, config_value=raw
    )


def _parse_verbosity(env: Mapping[str, str], key: str) -> Optional[int]:
    raw = env.get(key)
    if raw is None:
        return None
    try:
        level = int(raw)
    except ValueError:
        raise ConfigurationError(
            f"{key} must be an integer between 0 and 4",
            config_key=key,
            config_value=raw,
        ) from None
    if not 0 <= level <= 4:
        raise ConfigurationError(
            f"{key} must be an integer between 0 and 4",
            config_key=key,
            config_value=raw,
        )
    return level
