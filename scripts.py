#!/usr/bin/env python3
"""
Development scripts for the space-base project.

Usage: python scripts.py <test|lint|typecheck|demos|check>
"""

import subprocess
import sys
from collections.abc import Callable
from pathlib import Path

PACKAGE_DIR = "src/space/base/"


def run_command(cmd: list[str], description: str) -> bool:
    """Run a command through uv and report whether it succeeded."""
    print(f"\n🔄 {description}: {' '.join(cmd)}")
    try:
        subprocess.run(["uv", "run", *cmd], check=True)
    except subprocess.CalledProcessError as e:
        print(f"❌ {description} failed with exit code {e.returncode}")
        return False
    except FileNotFoundError:
        print("❌ Command not found: uv")
        return False
    print(f"✅ {description} passed")
    return True


def run_all(commands: list[tuple[list[str], str]]) -> int:
    results = [run_command(cmd, description) for cmd, description in commands]
    return 0 if all(results) else 1


def run_tests() -> int:
    return run_all([(["pytest", "-v"], "Tests")])


def run_lint() -> int:
    return run_all(
        [
            (["ruff", "check", "."], "Ruff linting"),
            (["ruff", "format", "--check", "."], "Ruff formatting"),
        ]
    )


def run_typecheck() -> int:
    return run_all(
        [
            (["mypy", PACKAGE_DIR], "MyPy type checking"),
            (["pyright", PACKAGE_DIR], "Pyright type checking"),
        ]
    )


def run_demos() -> int:
    """Run every demo script; files starting with an underscore are skipped."""
    demos = sorted(path for path in Path("demo").glob("*.py") if not path.name.startswith("_"))
    if not demos:
        print("⚠️  No demo files found in demo directory")
        return 0
    return run_all([(["python", str(demo)], f"Demo: {demo.name}") for demo in demos])


COMMANDS: dict[str, Callable[[], int]] = {
    "test": run_tests,
    "lint": run_lint,
    "typecheck": run_typecheck,
    "demos": run_demos,
}


def check_all() -> int:
    """Run every check and print a summary."""
    results = {name: func() == 0 for name, func in COMMANDS.items()}

    print(f"\n{'=' * 20} SUMMARY {'=' * 20}")
    for name, passed in results.items():
        print(f"{name:<15} {'✅ PASS' if passed else '❌ FAIL'}")
    return 0 if all(results.values()) else 1


if __name__ == "__main__":
    available = [*COMMANDS, "check"]
    if len(sys.argv) != 2 or sys.argv[1] not in available:
        print(f"Available commands: {', '.join(available)}")
        print("Usage: python scripts.py <command>")
        sys.exit(1)

    command = sys.argv[1]
    sys.exit(check_all() if command == "check" else COMMANDS[command]())
