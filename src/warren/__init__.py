"""Warren: file-based request handlers for Python.

A directory of Python files becomes a routed ASGI application. Each file
is a route, bracket segments are parameters, and ``_middleware.py`` files
wrap their subtree::

    functions/
      _middleware.py
      api/
        [id].py

    from warren import App, AppConfig

    app = App(AppConfig(functions_dir="functions"))
    app.run()

Serving needs pounce (``pip install warren[server]``); any other ASGI
server works with ``app`` directly.
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ChainProtocolError",
    "ConfigurationError",
    "FunctionContext",
    "FunctionsConfig",
    "HTTPError",
    "Headers",
    "NotFound",
    "Request",
    "Response",
    "Router",
    "WarrenError",
    "load_functions",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import warren`` fast while providing a clean top-level API.
    """
    if name == "App":
        from warren.app import App

        return App

    if name in ("AppConfig", "FunctionsConfig"):
        import warren.config

        return getattr(warren.config, name)

    if name == "Request":
        from warren.http.request import Request

        return Request

    if name == "Response":
        from warren.http.response import Response

        return Response

    if name == "Headers":
        from warren.http.headers import Headers

        return Headers

    if name == "Router":
        from warren.routing.router import Router

        return Router

    if name == "FunctionContext":
        from warren.functions.context import FunctionContext

        return FunctionContext

    if name == "load_functions":
        from warren.functions.loader import load_functions

        return load_functions

    if name in (
        "ChainProtocolError",
        "ConfigurationError",
        "HTTPError",
        "NotFound",
        "WarrenError",
    ):
        import warren.errors

        return getattr(warren.errors, name)

    msg = f"module 'warren' has no attribute {name!r}"
    raise AttributeError(msg)
