# powerbudget/scenarios/loader.py
"""Scenario loader for scripted allocator sessions."""

import logging
from typing import Any, Dict, List, Tuple

from powerbudget.commands import COMMANDS
from powerbudget.core.config import AllocatorConfig, load_mapping
from powerbudget.utils.errors import ValidationError

logger = logging.getLogger(__name__)

# Three devices fill the budget, A backs off, B disconnects.
FIFO_DEMO = {
    "name": "FIFO demo",
    "description": "Admission, reduction and removal with FIFO rebalancing",
    "config": {"max_capacity": 100, "safe_capacity": 92, "device_max": 40},
    "steps": [
        {"action": "add_device", "device_id": "A", "timestamp": 0},
        {"action": "add_device", "device_id": "B", "timestamp": 1},
        {"action": "add_device", "device_id": "C", "timestamp": 2},
        {"action": "update_device", "device_id": "A", "consumption": 20},
        {"action": "remove_device", "device_id": "B"},
    ],
}


class ScenarioLoader:
    """Loads scenarios from YAML or JSON files."""

    @staticmethod
    def load(filepath: str) -> Dict:
        """Load a scenario from file.

        Args:
            filepath: Path to scenario file (.yaml, .yml or .json)

        Returns:
            dict: Scenario with name, description, config and steps
        """
        data = load_mapping(filepath)
        scenario = ScenarioLoader.from_dict(data)
        logger.info(f"Loaded scenario: {scenario['name']} ({len(scenario['steps'])} steps)")
        return scenario

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Dict:
        if not isinstance(data, dict):
            raise ValidationError("scenario must be a mapping")
        return {
            "name": data.get("name", "Untitled Scenario"),
            "description": data.get("description", ""),
            "config": AllocatorConfig.from_dict(data.get("config")),
            "steps": ScenarioLoader._parse_steps(data.get("steps") or []),
        }

    @staticmethod
    def _parse_steps(steps_data: List[Any]) -> List[Tuple[str, Dict]]:
        """Turn step mappings into ``(action, params)`` pairs.

        Each step names its ``action``; every other key is passed through
        as a command parameter.
        """
        if not isinstance(steps_data, list):
            raise ValidationError("steps must be a list")

        steps = []
        for index, step in enumerate(steps_data):
            if not isinstance(step, dict) or "action" not in step:
                raise ValidationError(f"Step {index} must be a mapping with an 'action' key")
            params = dict(step)
            action = params.pop("action")
            if not isinstance(action, str) or action not in COMMANDS:
                raise ValidationError(
                    f"Step {index}: unknown action '{action}' "
                    f"(expected one of {', '.join(sorted(COMMANDS))})"
                )
            steps.append((action, params))
        return steps
