"""Scenario loading and replay."""

from powerbudget.scenarios.loader import FIFO_DEMO, ScenarioLoader
from powerbudget.scenarios.runner import run_scenario

__all__ = ["FIFO_DEMO", "ScenarioLoader", "run_scenario"]
