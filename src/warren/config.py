"""Configuration.

Frozen dataclasses — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_TRACE_HEADER = "X-Trace-Id"


@dataclass(frozen=True, slots=True)
class FunctionsConfig:
    """Input to :func:`warren.functions.load_functions`.

    ``modules`` maps a file path to a lazily-resolvable module, usually
    the output of :func:`warren.functions.discover_modules`::

        config = FunctionsConfig(
            modules=discover_modules("functions"),
            base_dir="functions",
        )

    ``debug`` only turns on per-request trace logging; request
    semantics never depend on it.
    """

    modules: Mapping[str, Any] | None
    base_dir: str = "functions"
    debug: bool = False
    trace_header: str = DEFAULT_TRACE_HEADER


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(functions_dir="api", debug=True, port=3000)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Functions directory
    functions_dir: str | Path = "functions"
    trace_header: str = DEFAULT_TRACE_HEADER

    # Bindings exposed to handlers as ``context.env``
    env: Mapping[str, Any] = field(default_factory=dict)

    # Logging
    log_level: str = "info"
