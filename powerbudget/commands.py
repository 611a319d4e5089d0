"""Shared command builders for allocator operations.

Keeps the CLI, scenario files and direct callers aligned on the same
command names and payload shapes.
"""


def add_device_command(device_id, timestamp=None):
    payload = {"device_id": device_id}
    if timestamp is not None:
        payload["timestamp"] = timestamp
    return "add_device", payload


def remove_device_command(device_id):
    return "remove_device", {"device_id": device_id}


def update_device_command(device_id, consumption):
    return "update_device", {"device_id": device_id, "consumption": consumption}


def redistribute_command():
    return "redistribute", {}


def snapshot_command():
    return "snapshot", {}


def status_command():
    return "status", {}


COMMANDS = {
    "add_device": add_device_command,
    "remove_device": remove_device_command,
    "update_device": update_device_command,
    "redistribute": redistribute_command,
    "snapshot": snapshot_command,
    "status": status_command,
}
