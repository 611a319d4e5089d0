"""Replays a loaded scenario against a fresh allocator."""

import logging

from powerbudget.systems.power.allocator import PowerAllocator

logger = logging.getLogger(__name__)


def run_scenario(scenario, event_bus=None, stop_on_error=False):
    """Execute every step of ``scenario`` and collect the results.

    Args:
        scenario (dict): Output of ``ScenarioLoader.load``/``from_dict``
        event_bus (EventBus, optional): Bus the allocator publishes to
        stop_on_error (bool): Abort at the first failed step

    Returns:
        dict: ``ok`` flag, per-step results and the final allocator state
    """
    allocator = PowerAllocator(config=scenario["config"], event_bus=event_bus)
    results = []
    ok = True

    for index, (action, params) in enumerate(scenario["steps"]):
        result = allocator.command(action, params)
        results.append({"step": index, "action": action, **result})
        if not result.get("ok"):
            ok = False
            logger.warning(f"Step {index} ({action}) failed: {result.get('message')}")
            if stop_on_error:
                break

    violations = allocator.check_invariants()
    if violations:
        ok = False
        for violation in violations:
            logger.error(f"Invariant violated after scenario '{scenario['name']}': {violation}")

    return {
        "name": scenario["name"],
        "ok": ok,
        "results": results,
        "state": allocator.get_state(),
    }
