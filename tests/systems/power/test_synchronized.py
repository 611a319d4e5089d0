# tests/systems/power/test_synchronized.py

import threading

import pytest

from powerbudget.core.config import AllocatorConfig
from powerbudget.systems.power.allocator import PowerAllocator
from powerbudget.systems.power.synchronized import SynchronizedAllocator
from powerbudget.utils.errors import DuplicateDeviceError


def test_delegates_operations():
    shared = SynchronizedAllocator(config=AllocatorConfig(max_capacity=100, safe_capacity=92, device_max=40))

    assert shared.add_device("A", 0) == 40
    assert shared.add_device("B", 1) == 40
    assert shared.update_device("B", 10) == 10
    assert "B" in shared
    assert len(shared) == 2
    assert shared.total_consumption == 80
    assert shared.remaining_capacity == 12
    shared.remove_device("B")
    assert shared.snapshot()[0]["device_id"] == "A"
    assert shared.redistribute_power() == []
    assert shared.check_invariants() == []
    assert shared.get_state()["total_consumption"] == 40
    assert shared.command("snapshot")["ok"] is True


def test_wraps_existing_allocator():
    inner = PowerAllocator()
    shared = SynchronizedAllocator(inner)
    shared.add_device("A", 0)
    assert inner.get_device("A").current_usage == 40
    with pytest.raises(DuplicateDeviceError):
        shared.add_device("A", 1)


def test_concurrent_mutations_keep_invariants():
    shared = SynchronizedAllocator(config=AllocatorConfig(max_capacity=100, safe_capacity=92, device_max=40))
    errors = []

    def worker(worker_id):
        try:
            for i in range(50):
                device_id = f"w{worker_id}-{i % 5}"
                if device_id in shared:
                    shared.update_device(device_id, (i * 7) % 45)
                    if i % 3 == 0:
                        shared.remove_device(device_id)
                else:
                    try:
                        shared.add_device(device_id, worker_id * 1000 + i)
                    except DuplicateDeviceError:
                        pass
                violations = shared.check_invariants()
                if violations:
                    errors.extend(violations)
        except Exception as exc:  # surfaced through the assertion below
            errors.append(repr(exc))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert shared.total_consumption <= 92
