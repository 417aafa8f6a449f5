"""Warren CLI: inspect and serve a functions directory.

Entry point registered as ``warren`` in ``pyproject.toml``::

    [project.scripts]
    warren = "warren.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``warren`` command."""
    parser = argparse.ArgumentParser(
        prog="warren",
        description="Warren: file-based request handlers for Python.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- warren routes ----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List what a functions directory registers")
    routes_parser.add_argument("functions_dir", help="Path to the functions directory")
    routes_parser.add_argument(
        "--base-dir",
        default=None,
        help="Prefix stripped from file paths (defaults to functions_dir)",
    )

    # -- warren run -------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Serve a functions directory")
    run_parser.add_argument("functions_dir", help="Path to the functions directory")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--debug",
        action="store_true",
        help="Per-request debug logging and tracebacks in 500 responses",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from warren.cli._routes import run_routes

        run_routes(args)
    elif args.command == "run":
        from warren.cli._run import run_server

        run_server(args)
