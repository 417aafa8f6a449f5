"""Serve a warren App with pounce.

pounce is an optional dependency (``pip install warren[server]``); it is
imported only when a server is actually started.
"""

from warren.errors import ConfigurationError


def run_server(
    app: object,
    host: str,
    port: int,
    *,
    reload: bool = False,
    reload_dirs: tuple[str, ...] = (),
) -> None:
    """Start a single-worker pounce server with the live App object.

    Args:
        app: ASGI callable (warren App instance).
        host: Bind host address.
        port: Bind port number.
        reload: Restart on file changes.
        reload_dirs: Extra directories to watch alongside cwd, typically
            the functions directory.
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError as exc:
        msg = "Serving requires pounce. Install it with: pip install 'warren[server]'"
        raise ConfigurationError(msg) from exc

    config = ServerConfig(
        host=host,
        port=port,
        workers=1,
        reload=reload,
        reload_dirs=reload_dirs,
    )
    server = Server(config, app)
    server.run()
