"""Command-line interface modules for optimiser runs.

This package contains core execution logic, making scripts/ optional and deletable.
"""

import argparse
import json
import sys

from pbropt.cli.run_optimise import run_optimise, load_user_config_dict

__all__ = ['run_optimise', 'load_user_config_dict', 'build_parser', 'main']


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Reconcile photobioreactor sensor and lab data for the growth optimiser")
    parser.add_argument("sensor", help="Sensor table CSV")
    parser.add_argument("lab", help="Lab table CSV")
    parser.add_argument("--reactor-type", required=True, choices=["agroscope", "zhaw"],
                        help="Reactor variant")
    parser.add_argument("--config", help="Path to user config file")
    parser.add_argument("--endpoint", help="Override optimiser URL")
    parser.add_argument("--timezone", help="Override local timezone (IANA name)")
    parser.add_argument("--solver-config",
                        help="JSON object with config/bounds/horizon/impact pass-through")
    parser.add_argument("--output", help="Write payload or response here instead of stdout")
    parser.add_argument("--sep", default=",", help="CSV field separator (default: ,)")
    parser.add_argument("--log-file", help="Also log to this file")
    parser.add_argument("--submit", action="store_true", help="POST the payload to the optimiser")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    solver_config = None
    if args.solver_config:
        try:
            solver_config = json.loads(args.solver_config)
        except ValueError as e:
            print(f"Invalid --solver-config JSON: {e}", file=sys.stderr)
            return 1
        if not isinstance(solver_config, dict):
            print("--solver-config must be a JSON object", file=sys.stderr)
            return 1

    return run_optimise(
        args.sensor,
        args.lab,
        args.reactor_type,
        user_config_path=args.config,
        cli_args={
            "endpoint": args.endpoint,
            "timezone": args.timezone,
            "log_file": args.log_file,
        },
        solver_config=solver_config,
        output_path=args.output,
        submit=args.submit,
        verbose=args.verbose,
        sep=args.sep,
    )
