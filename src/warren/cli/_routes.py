"""``warren routes``: list what a functions directory registers.

Loads the directory onto a fresh router and prints the registration
table in order: KIND, METHOD, PATTERN, FILE.
"""

import argparse
import sys
from pathlib import Path

import anyio

from warren.config import FunctionsConfig
from warren.errors import ConfigurationError
from warren.functions.discovery import discover_modules
from warren.functions.loader import load_functions
from warren.functions.types import Registration
from warren.routing.router import Router


async def _load(functions_dir: str, base_dir: str) -> tuple[Registration, ...]:
    config = FunctionsConfig(modules=discover_modules(functions_dir), base_dir=base_dir)
    return await load_functions(Router(), config)


def format_table(registrations: tuple[Registration, ...]) -> list[str]:
    """Render registrations as aligned text rows, header first."""
    header = ("KIND", "METHOD", "PATTERN", "FILE")
    rows = [
        (reg.kind, reg.method, reg.pattern, reg.filepath or "-") for reg in registrations
    ]
    widths = [max(len(row[i]) for row in (header, *rows)) for i in range(3)]
    fmt = f"{{:<{widths[0]}}}  {{:<{widths[1]}}}  {{:<{widths[2]}}}  {{}}"
    lines = [fmt.format(*header)]
    lines.extend(fmt.format(*row) for row in rows)
    return lines


def run_routes(args: argparse.Namespace) -> None:
    """Print the registration table for ``args.functions_dir``."""
    functions_dir = Path(args.functions_dir).as_posix()
    base_dir = Path(args.base_dir).as_posix() if args.base_dir else functions_dir
    try:
        registrations = anyio.run(_load, functions_dir, base_dir)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    for line in format_table(registrations):
        print(line.rstrip())
