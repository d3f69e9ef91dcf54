"""Remote benchmarks CLI - Command line interface."""

import argparse
import asyncio
import logging
import sys
from typing import Optional

import yaml
from pydantic import ValidationError

from common.models.scenario import ScenarioFlags
from common.utils import load_yaml, format_duration
from orchestrator.config import ConfigurationError, Settings
from orchestrator.core.sweep import generate_sweep
from orchestrator.remote.ssh_client import RemoteCommandError, SSHConnectionError
from orchestrator.scenarios.grpc_streaming import GrpcStreamingScenarioDriver
from orchestrator.storage.run_store import RunStore

logger = logging.getLogger("cli")


def load_settings(args) -> Settings:
    """Build settings from environment, optional YAML file and CLI overrides."""
    overrides = load_yaml(args.config) if args.config else {}
    if args.continue_on_failure:
        overrides["failure_policy"] = "continue"
    return Settings(**overrides)


def configure_logging(settings: Settings, verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format=settings.log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )


def scenario_flags(args, settings: Settings) -> ScenarioFlags:
    onload_command = args.onload if args.onload is not None else settings.onload
    return ScenarioFlags(
        tls=not args.no_tls,
        onload=not args.no_onload,
        onload_command=onload_command,
        context=args.context or "",
    )


def cmd_grpc_streaming(args, settings: Settings) -> int:
    """Run the streaming gRPC benchmark matrix."""
    driver = GrpcStreamingScenarioDriver(
        settings,
        scenario_flags(args, settings),
        run_store=RunStore(settings.run_store_path),
    )
    report = asyncio.run(driver.run())

    for r in report.reports:
        print(f"{r.scenario:<35} {r.succeeded} succeeded, {r.failed} failed")
    print(f"Results: {report.archive_path}")
    return 1 if report.failed_runs else 0


def cmd_plan(args, settings: Settings) -> int:
    """Print the scenarios and runs without contacting any host."""
    driver = GrpcStreamingScenarioDriver(settings, scenario_flags(args, settings))
    configurations = generate_sweep(settings.sweep_axes)

    print("Scenarios:")
    for scenario in driver.scenarios():
        print(f"  - {scenario.name} (output prefix: {scenario.output_prefix})")

    print(f"\n{'#':<5} {'Rate':<10} {'Length':<8} {'Burst':<7} {'Run':<5}")
    print("-" * 40)
    for i, c in enumerate(configurations, 1):
        print(f"{i:<5} {c.message_rate:<10} {c.message_length:<8} {c.burst_size:<7} {c.run_index:<5}")
    return 0


def cmd_history(args, settings: Settings) -> int:
    """List recorded sweeps, or the runs of one sweep."""
    store = RunStore(settings.run_store_path)

    if args.sweep:
        sweep = asyncio.run(store.get_sweep(args.sweep))
        if sweep is None:
            print(f"Sweep not found: {args.sweep}")
            return 1
        print(f"Sweep {sweep['id']} ({sweep['test_type']}): {sweep['status']}")
        if sweep.get("error_message"):
            print(f"Error: {sweep['error_message']}")
        if sweep.get("archive_path"):
            print(f"Archive: {sweep['archive_path']}")
        print()

        runs = asyncio.run(store.get_runs(args.sweep))
        if not runs:
            print(f"No runs recorded for sweep {args.sweep}")
            return 0
        print(f"{'Scenario':<30} {'Rate':<10} {'Length':<8} {'Burst':<7} {'Run':<5} {'Status':<10} {'Duration':<10}")
        print("-" * 85)
        for r in runs:
            duration = format_duration(int(r.get('duration_seconds') or 0))
            print(
                f"{r['scenario']:<30} {r['message_rate']:<10} {r['message_length']:<8} "
                f"{r['burst_size']:<7} {r['run_index']:<5} {r['status']:<10} {duration:<10}"
            )
        return 0

    sweeps = asyncio.run(store.list_sweeps(args.limit))
    if not sweeps:
        print("No sweeps recorded")
        return 0
    print(f"{'ID':<36} {'Type':<6} {'Context':<15} {'Status':<10} {'Archive'}")
    print("-" * 90)
    for s in sweeps:
        print(
            f"{s['id']:<36} {s['test_type']:<6} {s.get('context') or '-':<15} "
            f"{s['status']:<10} {s.get('archive_path') or '-'}"
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Remote client/server benchmark runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-c", "--config", help="YAML file with settings overrides")
    parser.add_argument(
        "--continue-on-failure",
        action="store_true",
        help="Record failed runs and carry on instead of aborting the sweep",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    scenario_options = argparse.ArgumentParser(add_help=False)
    scenario_options.add_argument("--context", default="", help="Label added to result file names")
    scenario_options.add_argument("--no-tls", action="store_true", help="Skip the TLS scenario")
    scenario_options.add_argument("--no-onload", action="store_true", help="Do not wrap processes with onload")
    scenario_options.add_argument("--onload", metavar="COMMAND", help="Offload wrapper command")

    # grpc-streaming
    grpc_parser = subparsers.add_parser(
        "grpc-streaming", parents=[scenario_options], help="Run the streaming gRPC benchmarks"
    )
    grpc_parser.set_defaults(func=cmd_grpc_streaming)

    # plan
    plan_parser = subparsers.add_parser(
        "plan", parents=[scenario_options], help="Show scenarios and runs without executing them"
    )
    plan_parser.set_defaults(func=cmd_plan)

    # history
    history_parser = subparsers.add_parser("history", help="List recorded sweeps")
    history_parser.add_argument("-l", "--limit", type=int, default=20, help="Limit results")
    history_parser.add_argument("-s", "--sweep", help="Show the runs of one sweep")
    history_parser.set_defaults(func=cmd_history)

    return parser


def main(argv: Optional[list[str]] = None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        settings = load_settings(args)
    except (ValidationError, OSError, yaml.YAMLError) as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings, args.verbose)

    try:
        code = args.func(args, settings)
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)
    except SSHConnectionError as e:
        logger.error(str(e))
        sys.exit(e.exit_code)
    except RemoteCommandError as e:
        logger.error(str(e))
        sys.exit(e.exit_code or 1)
    except KeyboardInterrupt:
        logger.error("Interrupted; benchmark processes may still be running on the remote hosts")
        sys.exit(130)

    sys.exit(code)


if __name__ == "__main__":
    main()
