"""Switches for alternative fairness policies.

Every flag is registered in ``FLAGS`` with a one-line description; asking for
an unregistered name raises ``ValueError`` so a typo cannot silently fall back
to the default policy.  Deployments turn flags on with ``SQUARESPOOL_FEATURES``
(comma-separated, case-insensitive) and tests pin them with ``override``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from contextlib import contextmanager
from types import MappingProxyType
from typing import Final

logger = logging.getLogger(__name__)

_ENV_VAR: Final = "SQUARESPOOL_FEATURES"

AXIS_DIRECT_CONSTRUCTION: Final = "axis.direct_construction"
STRICT_LEGACY_KEYS: Final = "payouts.strict_legacy_keys"

FLAGS: Mapping[str, str] = MappingProxyType(
    {
        AXIS_DIRECT_CONSTRUCTION: "Insert 0 into a shuffled 1-9 instead of swapping it out of the first slot",
        STRICT_LEGACY_KEYS: "Reject unknown q1..q4/final checkpoint keys instead of mapping them to final",
    }
)

# Innermost layer first wins.
_LAYERS: list[dict[str, bool]] = []


def _registered(flag: str) -> str:
    key = flag.strip().lower()
    if key not in FLAGS:
        raise ValueError(f"unknown feature flag '{flag}'")
    return key


def _parse_env(raw: str | None) -> set[str]:
    if not raw:
        return set()
    return {entry.strip().lower() for entry in raw.split(",") if entry.strip()}


def _env_flags() -> set[str]:
    names = _parse_env(os.getenv(_ENV_VAR))
    unknown = names - FLAGS.keys()
    if unknown:
        logger.warning("Ignoring unknown feature flags", extra={"flags": sorted(unknown)})
    return names & FLAGS.keys()


def is_enabled(flag: str) -> bool:
    key = _registered(flag)
    for layer in reversed(_LAYERS):
        if key in layer:
            return layer[key]
    return key in _env_flags()


def enabled_flags() -> frozenset[str]:
    return frozenset(name for name in FLAGS if is_enabled(name))


@contextmanager
def override(*, enable: Iterable[str] = (), disable: Iterable[str] = ()):
    """Pin flags for the duration of the block.

    Naming a flag in both ``enable`` and ``disable`` is an error.
    """

    layer = {_registered(flag): True for flag in enable}
    for flag in disable:
        key = _registered(flag)
        if layer.get(key):
            raise ValueError(f"feature flag '{flag}' both enabled and disabled")
        layer[key] = False
    _LAYERS.append(layer)
    try:
        yield
    finally:
        _LAYERS.pop()


def set_env_flags(flags: Iterable[str]) -> None:
    os.environ[_ENV_VAR] = ",".join(sorted({_registered(flag) for flag in flags}))
