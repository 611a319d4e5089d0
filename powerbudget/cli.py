"""Command-line front end for the power allocator."""
import argparse
import json
import logging
import sys

from powerbudget.core.config import AllocatorConfig
from powerbudget.scenarios.loader import FIFO_DEMO, ScenarioLoader
from powerbudget.scenarios.runner import run_scenario
from powerbudget.systems.power.allocator import PowerAllocator
from powerbudget.utils.errors import PowerBudgetError, format_error
from powerbudget.utils.logger import setup_logging

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(prog="powerbudget", description="Shared power budget allocator")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file")
    parser.add_argument("--log-level", default="WARNING", type=str.upper,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Logging level (default: WARNING)")
    sub = parser.add_subparsers(dest="action", required=True)

    sub.add_parser("demo", help="Replay the built-in FIFO demo")

    run = sub.add_parser("run", help="Replay a scenario file")
    run.add_argument("scenario", help="Scenario file (.yaml, .yml or .json)")
    run.add_argument("--stop-on-error", action="store_true", help="Abort at the first failed step")

    status = sub.add_parser("status", help="Show the configured, empty allocator")
    status.add_argument("--config", default=None, help="Config file; POWER_* env vars otherwise")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        setup_logging(args.log_file, args.log_level)
        logger.debug(f"powerbudget {args.action}")

        if args.action == "demo":
            report = run_scenario(ScenarioLoader.from_dict(FIFO_DEMO))
        elif args.action == "run":
            scenario = ScenarioLoader.load(args.scenario)
            report = run_scenario(scenario, stop_on_error=args.stop_on_error)
        else:
            config = AllocatorConfig.from_file(args.config) if args.config else AllocatorConfig.from_env()
            report = {"ok": True, "state": PowerAllocator(config).get_state()}
    except PowerBudgetError as exc:
        print(format_error(exc.error_type, str(exc)), file=sys.stderr)
        return 2
    except OSError as exc:
        print(format_error("IO_ERROR", str(exc)), file=sys.stderr)
        return 2

    print(json.dumps(report, indent=2))
    return 0 if report["ok"] else 1


if __name__ == "__main__":
    sys.exit(main())
