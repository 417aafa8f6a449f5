"""Filesystem discovery for a functions directory.

Walks the directory tree and maps every function file to a lazy loader.
Nothing is imported until the loader is called::

    functions/
      _middleware.py        # middleware for everything
      index.py              # /
      api/
        _middleware.py      # middleware for /api/*
        hello.py            # /api/hello
        [id].py             # /api/:id
      docs/
        [[...path]].py      # /docs, /docs/:path{.+}

Files and directories starting with ``.`` or ``_`` are skipped, except
``_middleware.py``.
"""

import functools
import importlib.util
import re
from pathlib import Path
from types import ModuleType

from warren.errors import ConfigurationError

MIDDLEWARE_FILE = "_middleware.py"

_UNSAFE_NAME_RE = re.compile(r"\W")


def _is_hidden(name: str) -> bool:
    return name.startswith((".", "_"))


def _module_name(relative: Path) -> str:
    stem = _UNSAFE_NAME_RE.sub("_", relative.with_suffix("").as_posix())
    return f"_warren_function_{stem}"


def _route_order(path: Path) -> tuple[tuple[bool, str], ...]:
    # Literal segments first: api/hello.py must match before api/[id].py
    return tuple((part.startswith("["), part) for part in path.parts)


def load_module_file(path: str | Path, module_name: str | None = None) -> ModuleType:
    """Import a function file by path without touching ``sys.modules``."""
    path = Path(path)
    spec = importlib.util.spec_from_file_location(module_name or path.stem, path)
    if spec is None or spec.loader is None:
        msg = f"Cannot load function file: {path}"
        raise ConfigurationError(msg)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def discover_modules(functions_dir: str | Path) -> dict[str, functools.partial[ModuleType]]:
    """Map every function file under *functions_dir* to a lazy loader.

    Keys are POSIX paths starting with *functions_dir* as given, so the
    same string works as ``FunctionsConfig.base_dir``. Keys are sorted
    with literal path segments ahead of bracketed ones.

    Raises ``ConfigurationError`` if the directory doesn't exist.
    """
    root = Path(functions_dir)
    if not root.is_dir():
        msg = f"Functions directory not found: {root}"
        raise ConfigurationError(msg)

    modules: dict[str, functools.partial[ModuleType]] = {}
    for path in sorted(root.rglob("*.py"), key=_route_order):
        relative = path.relative_to(root)
        if any(_is_hidden(part) for part in relative.parts[:-1]):
            continue
        if path.name != MIDDLEWARE_FILE and _is_hidden(path.name):
            continue
        key = (root / relative).as_posix()
        modules[key] = functools.partial(load_module_file, path, _module_name(relative))
    return modules
