"""
Allocator configuration.

Capacity limits default to the values in ``powerbudget.core.constants`` and
can be overridden from a mapping, the environment, or a YAML/JSON file.
"""

from dataclasses import dataclass, asdict
from numbers import Real
from typing import Any, Dict, Mapping, Optional
import json
import logging
import os

import yaml

from powerbudget.core.constants import DEVICE_MAX, ENV_PREFIX, MAX_CAPACITY, SAFE_CAPACITY
from powerbudget.utils.errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AllocatorConfig:
    """
    Capacity limits for a power allocator.

    ``max_capacity`` is informational; ``safe_capacity`` is the ceiling the
    allocator enforces and ``device_max`` caps every single device.
    """

    max_capacity: float = MAX_CAPACITY
    safe_capacity: float = SAFE_CAPACITY
    device_max: float = DEVICE_MAX

    def __post_init__(self):
        for name in ("max_capacity", "safe_capacity", "device_max"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Real):
                raise ConfigError(f"{name} must be a number (got {value!r})")
            if value <= 0:
                raise ConfigError(f"{name} must be positive (got {value})")
        if self.safe_capacity > self.max_capacity:
            raise ConfigError(
                f"safe_capacity ({self.safe_capacity}) exceeds max_capacity ({self.max_capacity})"
            )
        if self.device_max > self.safe_capacity:
            raise ConfigError(
                f"device_max ({self.device_max}) exceeds safe_capacity ({self.safe_capacity})"
            )

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "AllocatorConfig":
        """Build a config from a mapping. Unknown keys are rejected."""
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ConfigError(f"config must be a mapping (got {data!r})")
        data = dict(data)
        known = {"max_capacity", "safe_capacity", "device_max"}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(sorted(map(str, unknown)))}")
        return cls(**data)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AllocatorConfig":
        """Create config from ``POWER_*`` environment variables."""
        environ = os.environ if environ is None else environ
        values = {}
        for name in ("max_capacity", "safe_capacity", "device_max"):
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is None:
                continue
            try:
                values[name] = float(raw)
            except ValueError:
                raise ConfigError(f"{ENV_PREFIX}{name.upper()} is not a number: {raw!r}") from None
        return cls(**values)

    @classmethod
    def from_file(cls, filepath: str) -> "AllocatorConfig":
        """Load config from a ``.yaml``/``.yml`` or ``.json`` file.

        The file may either hold the capacity keys directly or nest them
        under a ``config`` key.
        """
        data = load_mapping(filepath)
        if "config" in data:
            data = data["config"] or {}
        config = cls.from_dict(data)
        logger.info(f"Loaded allocator config from {filepath}: {config.to_dict()}")
        return config

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def load_mapping(filepath: str) -> Dict[str, Any]:
    """Read a YAML or JSON file whose top level is a mapping."""
    _, ext = os.path.splitext(filepath)

    if ext not in [".yaml", ".yml", ".json"]:
        raise ConfigError(f"Unsupported file format: {ext}")

    with open(filepath, "r", encoding="utf-8") as f:
        try:
            data = json.load(f) if ext == ".json" else yaml.safe_load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not parse {filepath}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{filepath} must contain a mapping at the top level")
    return data
