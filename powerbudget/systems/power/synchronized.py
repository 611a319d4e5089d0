"""Thread-safe facade over a PowerAllocator."""
import threading

from powerbudget.systems.power.allocator import PowerAllocator


class SynchronizedAllocator:
    """Serializes every allocator operation behind a single lock.

    Each public call holds the lock for the whole operation, including the
    rebalancing pass, so other threads never observe a half-applied change.
    """

    def __init__(self, allocator=None, config=None, event_bus=None):
        self.allocator = allocator or PowerAllocator(config=config, event_bus=event_bus)
        self.lock = threading.Lock()

    def __len__(self):
        with self.lock:
            return len(self.allocator)

    def __contains__(self, device_id):
        with self.lock:
            return device_id in self.allocator

    @property
    def total_consumption(self):
        with self.lock:
            return self.allocator.total_consumption

    @property
    def remaining_capacity(self):
        with self.lock:
            return self.allocator.remaining_capacity

    def add_device(self, device_id, timestamp):
        with self.lock:
            return self.allocator.add_device(device_id, timestamp)

    def remove_device(self, device_id):
        with self.lock:
            return self.allocator.remove_device(device_id)

    def update_device(self, device_id, requested):
        with self.lock:
            return self.allocator.update_device(device_id, requested)

    def redistribute_power(self):
        with self.lock:
            return self.allocator.redistribute_power()

    def snapshot(self):
        with self.lock:
            return self.allocator.snapshot()

    def check_invariants(self):
        with self.lock:
            return self.allocator.check_invariants()

    def get_state(self):
        with self.lock:
            return self.allocator.get_state()

    def command(self, action, params=None):
        with self.lock:
            return self.allocator.command(action, params)
