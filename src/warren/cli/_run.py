"""``warren run``: serve a functions directory with pounce."""

import argparse
import logging
import sys

from warren.app import App
from warren.config import AppConfig
from warren.errors import ConfigurationError


def run_server(args: argparse.Namespace) -> None:
    """Build an App for ``args.functions_dir`` and serve it.

    Errors in the functions directory surface at lifespan startup, before
    the server accepts connections.
    """
    defaults = AppConfig()
    config = AppConfig(
        host=args.host or defaults.host,
        port=args.port or defaults.port,
        debug=args.debug,
        functions_dir=args.functions_dir,
        log_level="debug" if args.debug else defaults.log_level,
    )
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = App(config)
    try:
        app.run()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
