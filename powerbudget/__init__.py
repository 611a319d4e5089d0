"""Shared power budget allocation across connected devices."""

from powerbudget.core.config import AllocatorConfig
from powerbudget.systems.power.allocator import PowerAllocator
from powerbudget.systems.power.device import Device
from powerbudget.systems.power.synchronized import SynchronizedAllocator
from powerbudget.utils.errors import (
    ConfigError,
    DuplicateDeviceError,
    PowerBudgetError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    "AllocatorConfig",
    "ConfigError",
    "Device",
    "DuplicateDeviceError",
    "PowerAllocator",
    "PowerBudgetError",
    "SynchronizedAllocator",
    "ValidationError",
]
