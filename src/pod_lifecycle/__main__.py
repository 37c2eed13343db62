"""
Entry point for running pod_lifecycle as a module.

Usage:
    python -m pod_lifecycle [command] [options]

Commands:
    run APP     Run a LifecycleManager given as module:attr
    check       Print the resolved settings

Options:
    --config PATH   Config document (YAML) handed to hooks
    --port PORT     Probe server port
"""

from __future__ import annotations

import argparse
import asyncio
import sys


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="pod-lifecycle",
        description="Pod lifecycle orchestrator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "command",
        choices=["run", "check"],
        help="Command to execute",
    )
    parser.add_argument(
        "app",
        nargs="?",
        default=None,
        help="App to run, as module:attr (required for 'run')",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Config document path (overrides CONFIG_PATH)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Probe server port (overrides PROBE_SERVER_PORT)",
    )

    args = parser.parse_args()

    # Import here to avoid slow startup for --help
    from pod_lifecycle.app.run import run_app, run_check

    try:
        if args.command == "run":
            if not args.app:
                parser.error("run requires an app (module:attr)")
            return asyncio.run(run_app(args.app, config_path=args.config, port=args.port))
        elif args.command == "check":
            return run_check()
        else:
            parser.print_help()
            return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130
    except (ImportError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
