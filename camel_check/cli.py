"""
Command line entry point for camel checks.
"""

import argparse
import logging
import sys

from camel_check import config
from camel_check.errors import CamelCheckError
from camel_check.runner import CommandRunner, print_summary
from camel_check.utils.connector import Endpoint, EndpointDirectory


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Scripted checks for the camel JSON-RPC interface")
    parser.add_argument(
        "configs",
        nargs="*",
        default=[str(config.FIXTURES_DIR)],
        help="Scenario files or directories (default: bundled scenarios)",
    )
    parser.add_argument(
        "--host",
        default=config.CAMEL_HOST,
        help=f"Server host (default: {config.CAMEL_HOST})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=config.CAMEL_PORT,
        help=f"Plain HTTP port (default: {config.CAMEL_PORT})",
    )
    parser.add_argument(
        "--tls-port",
        type=int,
        default=config.CAMEL_TLS_PORT,
        help=f"TLS HTTP port (default: {config.CAMEL_TLS_PORT})",
    )
    parser.add_argument(
        "--mode",
        choices=["tcp", "tls", "both"],
        default="tcp",
        help="Connection modes to check (default: tcp)",
    )
    parser.add_argument(
        "--no-wait",
        action="store_true",
        help="Don't wait for the server to answer before running",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the camel checker."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    directory = EndpointDirectory(
        [
            Endpoint(args.host, args.port, secure=False),
            Endpoint(args.host, args.tls_port, secure=True),
        ]
    )
    modes = {"tcp": [False], "tls": [True], "both": [False, True]}[args.mode]

    results = []
    try:
        for secure in modes:
            runner = CommandRunner(secure=secure, directory=directory, verbose=args.verbose)
            if not args.no_wait and not runner.wait_for_server():
                print(f"Failed to connect to server at {runner.base_url}")
                return 1
            results.extend(runner.run_configs(args.configs))
    except KeyboardInterrupt:
        print("\nCheck run interrupted!")
        return 1
    except CamelCheckError as e:
        print(f"Check run failed: {e}")
        return 1

    return print_summary(results)


if __name__ == "__main__":
    sys.exit(main())
