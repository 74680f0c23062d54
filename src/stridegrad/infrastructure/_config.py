"""
Environment-driven runtime configuration.

Recognised environment variables
--------------------------------
STRIDEGRAD_LOG_LEVEL
    Logging level name for the ``stridegrad`` logger (default ``WARNING``).
STRIDEGRAD_DEFAULT_DEVICE
    Device string used by tensor factories when ``device=None``
    (default ``"cpu"``).
STRIDEGRAD_SEED
    Optional integer seed for the generator used by ``uniform`` factories.

The values are read lazily so tests can patch the environment before first
use; `set_seed` reseeds the generator programmatically.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

import numpy as np

from ..domain.device._device import Device

LOG_LEVEL_ENV = "STRIDEGRAD_LOG_LEVEL"
DEFAULT_DEVICE_ENV = "STRIDEGRAD_DEFAULT_DEVICE"
SEED_ENV = "STRIDEGRAD_SEED"

_rng: Optional[np.random.Generator] = None


def log_level() -> int:
    """
    Resolve the configured logging level.

    Unknown level names fall back to ``logging.WARNING``.
    """
    level_name = os.getenv(LOG_LEVEL_ENV, "WARNING").upper()
    level = getattr(logging, level_name, logging.WARNING)
    return level if isinstance(level, int) else logging.WARNING


def default_device() -> Device:
    """
    Return the device used when a factory is called without one.

    Raises
    ------
    ValueError
        If the environment variable holds an invalid device string.
    """
    return Device(os.getenv(DEFAULT_DEVICE_ENV, "cpu"))


def _seed_from_env() -> Optional[int]:
    raw = os.getenv(SEED_ENV)
    if raw is None or raw.strip() == "":
        return None
    return int(raw)


def default_rng() -> np.random.Generator:
    """
    Return the shared random generator, creating it on first use.
    """
    global _rng
    if _rng is None:
        _rng = np.random.default_rng(_seed_from_env())
    return _rng


def set_seed(seed: Optional[int]) -> None:
    """
    Replace the shared random generator with one seeded by `seed`.

    Parameters
    ----------
    seed : Optional[int]
        Seed for ``np.random.default_rng``. ``None`` draws fresh entropy.
    """
    global _rng
    _rng = np.random.default_rng(seed)
