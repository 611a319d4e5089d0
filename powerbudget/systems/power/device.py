# powerbudget/systems/power/device.py
"""Device records held by the power allocator."""
from dataclasses import dataclass
from typing import Dict, Union

Number = Union[int, float]


@dataclass
class Device:
    """A connected device and its current share of the power budget.

    ``max_allowed`` is the last amount successfully granted to the device,
    either at admission, by an accepted update, or by redistribution. A
    rejected update falls back to it.
    """
    device_id: str
    timestamp: Number
    current_usage: Number = 0
    max_allowed: Number = 0

    def grant(self, amount):
        """Set the usage to ``amount`` and record it as the granted level."""
        self.current_usage = amount
        self.max_allowed = amount

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization"""
        return {
            "device_id": self.device_id,
            "timestamp": self.timestamp,
            "current_usage": self.current_usage,
            "max_allowed": self.max_allowed,
        }
