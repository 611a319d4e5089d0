# powerbudget/systems/power/allocator.py
"""FIFO power allocator for a shared, bounded power budget.

Devices are admitted with whatever capacity is left (up to the per-device
cap), may change their consumption, and disconnect at will. After every
mutation a single rebalancing pass hands unused capacity to the earliest
connected devices first.

The total consumption is never tracked incrementally: it is recomputed from
the device records whenever it is needed, so it cannot drift from the true
sum of device usages.
"""
import logging
import math
from numbers import Real

from powerbudget.core.config import AllocatorConfig
from powerbudget.systems.power.device import Device
from powerbudget.utils.errors import (
    DuplicateDeviceError,
    PowerBudgetError,
    ValidationError,
    error_dict,
    exception_dict,
    success_dict,
)

logger = logging.getLogger(__name__)

EVENT_SOURCE = "power_allocator"


def _require_number(name, value):
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValidationError(f"{name} must be a number (got {value!r})")
    if not math.isfinite(value):
        raise ValidationError(f"{name} must be finite (got {value})")
    return value


def _require_device_id(device_id):
    if not isinstance(device_id, str) or not device_id:
        raise ValidationError(f"device_id must be a non-empty string (got {device_id!r})")
    return device_id


def _coerce_number(params, key):
    """Read a numeric command parameter, accepting numeric strings."""
    value = params.get(key)
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            raise ValidationError(f"{key} must be a number (got {value!r})") from None
    return _require_number(key, value)


class PowerAllocator:
    """Allocates a shared power budget across connected devices.

    Not thread-safe; wrap it in ``SynchronizedAllocator`` when several
    threads share one instance.
    """

    def __init__(self, config=None, event_bus=None):
        self.config = config or AllocatorConfig()
        self.event_bus = event_bus
        # device_id -> Device, in admission order
        self.devices = {}
        self._last_timestamp = None

    def __len__(self):
        return len(self.devices)

    def __contains__(self, device_id):
        return device_id in self.devices

    # ----- Derived state -----
    @property
    def total_consumption(self):
        return math.fsum(device.current_usage for device in self.devices.values())

    @property
    def remaining_capacity(self):
        return max(0, self.config.safe_capacity - self.total_consumption)

    def get_device(self, device_id):
        return self.devices.get(device_id)

    def next_timestamp(self):
        """Logical arrival time for a device added without an explicit one."""
        if self._last_timestamp is None:
            return 0
        return self._last_timestamp + 1

    @property
    def _tolerance(self):
        # leftover capacity below this is treated as exhausted
        return self.config.safe_capacity * 1e-9

    def _fit(self, amount, exclude=None):
        """Largest value up to ``amount`` that keeps the exact total within the safe capacity.

        Usage of ``exclude`` is left out of the total, so the result is the
        level that device can be set to.
        """
        safe = self.config.safe_capacity
        others = [d.current_usage for d in self.devices.values() if d is not exclude]
        value = min(amount, safe - math.fsum(others))
        excess = math.fsum(others + [value, -safe])
        if excess > 0:
            value -= excess
            while value > 0 and math.fsum(others + [value]) > safe:
                value = math.nextafter(value, 0)
        return max(value, 0)

    def _ordered_devices(self):
        # sorted() is stable, so ties keep admission order
        return sorted(self.devices.values(), key=lambda device: device.timestamp)

    def _publish(self, event_type, data):
        if self.event_bus:
            self.event_bus.publish(event_type, data, source=EVENT_SOURCE)

    # ----- Operations -----
    def add_device(self, device_id, timestamp):
        """Connect a device and give it what is left of the budget.

        Args:
            device_id (str): Unique identifier of the device
            timestamp (int | float): Logical connection time, used for FIFO ordering

        Returns:
            The power allocated to the device on admission (possibly 0).

        Raises:
            DuplicateDeviceError: if ``device_id`` is already connected
            ValidationError: on an empty id or non-numeric timestamp
        """
        _require_device_id(device_id)
        _require_number("timestamp", timestamp)
        if device_id in self.devices:
            raise DuplicateDeviceError(device_id)

        allocation = self._fit(self.config.device_max)

        device = Device(device_id, timestamp)
        device.grant(allocation)
        self.devices[device_id] = device
        if self._last_timestamp is None or timestamp > self._last_timestamp:
            self._last_timestamp = timestamp

        logger.info(f"Device {device_id} connected at t={timestamp} with {allocation} allocated")
        self._publish("device_added", device.to_dict())
        if allocation <= 0:
            logger.warning(f"Power budget exhausted: {device_id} admitted with no allocation")
            self._publish("power_exhausted", {"device_id": device_id})

        self.redistribute_power()
        return allocation

    def remove_device(self, device_id):
        """Disconnect a device. Unknown ids are ignored."""
        device = self.devices.pop(device_id, None)
        if device is None:
            logger.debug(f"remove_device: {device_id} is not connected")
            return None

        logger.info(f"Device {device_id} disconnected, freeing {device.current_usage}")
        self._publish("device_removed", device.to_dict())
        self.redistribute_power()
        return None

    def update_device(self, device_id, requested):
        """Change a device's consumption.

        Requests above the per-device cap are trimmed to it. A request that
        would push the total past the safe capacity is rejected and the
        device falls back to its last granted level.

        Returns:
            The consumption applied by the update, or ``None`` if the
            device is not connected. Redistribution afterwards may raise
            the device's usage further.
        """
        applied, _accepted = self._apply_update(device_id, requested)
        return applied

    def _apply_update(self, device_id, requested):
        device = self.devices.get(device_id)
        if device is None:
            logger.debug(f"update_device: {device_id} is not connected")
            return None, False

        _require_number("consumption", requested)
        if requested < 0:
            raise ValidationError(f"consumption must not be negative (got {requested})")
        if requested > self.config.device_max:
            logger.info(f"Device {device_id} requested {requested}, capped at {self.config.device_max}")
            requested = self.config.device_max

        others = [d.current_usage for d in self.devices.values() if d is not device]
        projected = math.fsum(others + [requested])
        if projected <= self.config.safe_capacity + self._tolerance:
            previous = device.current_usage
            if projected > self.config.safe_capacity:
                # within rounding of the ceiling; trim to what exactly fits
                requested = self._fit(requested, exclude=device)
            device.grant(requested)
            accepted = True
            logger.debug(f"Device {device_id} usage {previous} -> {requested}")
            self._publish("device_updated", {**device.to_dict(), "previous_usage": previous})
        else:
            device.current_usage = device.max_allowed
            accepted = False
            logger.info(
                f"Rejected update for {device_id}: {requested} would reach {projected} "
                f"> {self.config.safe_capacity}; holding at {device.max_allowed}"
            )
            self._publish("device_update_rejected", {
                "device_id": device_id,
                "requested": requested,
                "applied": device.max_allowed,
            })

        applied = device.current_usage
        self.redistribute_power()
        return applied, accepted

    def redistribute_power(self):
        """Hand unused capacity to under-cap devices, earliest connected first.

        Single forward pass over the devices ordered by timestamp. A device
        is topped up to the per-device cap or until the capacity runs out.

        Returns:
            list of (device_id, granted) tuples for the devices that gained power.
        """
        remaining = self.remaining_capacity
        cap = self.config.device_max
        grants = []

        for device in self._ordered_devices():
            if remaining <= self._tolerance:
                break
            if device.current_usage < cap:
                if cap - device.current_usage < remaining - self._tolerance:
                    level = cap
                else:
                    # last grant of the pass, sized so the exact total stays within capacity
                    level = self._fit(cap, exclude=device)
                additional = level - device.current_usage
                if additional <= 0:
                    continue
                device.grant(level)
                remaining = remaining - additional if level == cap else self.remaining_capacity
                grants.append((device.device_id, additional))
                logger.debug(f"Granted {additional} to {device.device_id} (now {device.current_usage})")

        if grants:
            self._publish("power_redistributed", {
                "grants": [{"device_id": did, "granted": amount} for did, amount in grants],
                "remaining": self.remaining_capacity,
            })
        return grants

    def snapshot(self):
        """Read-only copies of all device records ordered by timestamp."""
        return [device.to_dict() for device in self._ordered_devices()]

    def check_invariants(self):
        """Return a list of violated allocator invariants (empty when sound)."""
        violations = []
        total = self.total_consumption
        if total > self.config.safe_capacity:
            violations.append(f"total consumption {total} exceeds safe capacity {self.config.safe_capacity}")
        for device_id, device in self.devices.items():
            if device_id != device.device_id:
                violations.append(f"device stored under {device_id} reports id {device.device_id}")
            if device.current_usage < 0:
                violations.append(f"{device_id} has negative usage {device.current_usage}")
            if device.current_usage > self.config.device_max:
                violations.append(f"{device_id} usage {device.current_usage} exceeds device max {self.config.device_max}")
        return violations

    def get_state(self):
        return {
            "max_capacity": self.config.max_capacity,
            "safe_capacity": self.config.safe_capacity,
            "device_max": self.config.device_max,
            "total_consumption": self.total_consumption,
            "remaining_capacity": self.remaining_capacity,
            "devices": self.snapshot(),
        }

    # ----- Command Helpers -----
    def command(self, action, params=None):
        """Handle commands for the allocator.

        Returns an ``ok``/``error`` dictionary; allocator errors are reported
        in the result instead of being raised.
        """
        params = params or {}
        try:
            if action in ("status", "get_state"):
                return success_dict("status", **self.get_state())
            elif action == "add_device":
                device_id = params.get("device_id")
                timestamp = params.get("timestamp")
                timestamp = self.next_timestamp() if timestamp is None else _coerce_number(params, "timestamp")
                allocated = self.add_device(device_id, timestamp)
                return success_dict("device_added", device_id=device_id, allocated=allocated,
                                    total_consumption=self.total_consumption)
            elif action == "remove_device":
                device_id = _require_device_id(params.get("device_id"))
                if device_id not in self.devices:
                    return success_dict("device_not_found", device_id=device_id)
                self.remove_device(device_id)
                return success_dict("device_removed", device_id=device_id,
                                    total_consumption=self.total_consumption)
            elif action == "update_device":
                device_id = _require_device_id(params.get("device_id"))
                if device_id not in self.devices:
                    return success_dict("device_not_found", device_id=device_id, applied=None)
                requested = _coerce_number(params, "consumption")
                applied, accepted = self._apply_update(device_id, requested)
                status = "device_updated" if accepted else "device_update_rejected"
                return success_dict(status, device_id=device_id, requested=requested, applied=applied,
                                    current_usage=self.devices[device_id].current_usage,
                                    total_consumption=self.total_consumption)
            elif action == "redistribute":
                grants = self.redistribute_power()
                return success_dict("power_redistributed",
                                    grants=[{"device_id": did, "granted": amount} for did, amount in grants],
                                    total_consumption=self.total_consumption)
            elif action == "snapshot":
                return success_dict("snapshot", devices=self.snapshot())
        except PowerBudgetError as exc:
            logger.debug(f"Command {action} failed: {exc}")
            return exception_dict(exc)
        return error_dict("UNKNOWN_COMMAND", f"Command '{action}' not supported by the allocator")
