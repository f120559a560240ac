#!/usr/bin/env python3
"""
Test runner script for the camel checker.

Wraps pytest so unit tests, integration tests against the local fake camel
server, or a single test module can be run with one flag.
"""

import argparse
from pathlib import Path
import subprocess
import sys

BASE_DIR = Path(__file__).parent
TEST_DIRS = [
    BASE_DIR / "tests" / "unit",
    BASE_DIR / "tests" / "unit" / "utils",
    BASE_DIR / "tests" / "integration",
]


def find_module(name):
    """Locate a test module by name in the known test directories."""
    filename = name if name.endswith(".py") else f"{name}.py"
    for test_dir in TEST_DIRS:
        candidate = test_dir / filename
        if candidate.exists():
            return candidate
    return None


def build_command(args):
    """Build the pytest command line, or None if the module doesn't exist."""
    cmd = [sys.executable, "-m", "pytest"]

    if args.verbose:
        cmd.append("-v")

    if args.no_capture:
        cmd.append("-s")

    if args.coverage:
        cmd.extend(["--cov=camel_check", "--cov-report=html", "--cov-report=term"])

    if args.module:
        module_path = find_module(args.module)
        if module_path is None:
            searched = ", ".join(str(d.relative_to(BASE_DIR)) for d in TEST_DIRS)
            print(f"Error: Module {args.module} not found in {searched}")
            return None
        cmd.append(str(module_path))
    elif args.unit:
        cmd.append(str(BASE_DIR / "tests" / "unit"))
    elif args.integration:
        cmd.extend([str(BASE_DIR / "tests" / "integration"), "-m", "integration"])
    else:
        cmd.append(str(BASE_DIR / "tests"))

    return cmd


def main():
    parser = argparse.ArgumentParser(description="Run camel checker tests")
    parser.add_argument("--unit", action="store_true", help="Run unit tests only")
    parser.add_argument(
        "--integration", action="store_true", help="Run fake server integration tests only"
    )
    parser.add_argument("--coverage", action="store_true", help="Run with coverage reporting")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument(
        "--module", "-m", type=str, help="Run a single test module (e.g., test_http_scanner)"
    )
    parser.add_argument(
        "--no-capture",
        action="store_true",
        help="Do not capture stdout/stderr (useful for debugging)",
    )

    args = parser.parse_args()

    cmd = build_command(args)
    if cmd is None:
        return 1

    print(f"Command: {' '.join(cmd)}")
    result = subprocess.run(cmd, cwd=BASE_DIR)

    if result.returncode == 0:
        print("\nAll tests passed!")
    else:
        print("\nSome tests failed!")
    return result.returncode


if __name__ == "__main__":
    sys.exit(main())
