"""File path to route pattern compilation.

A function file's position under the functions directory is its URL.
Path segments use a bracket syntax for dynamic parts::

    name            literal segment
    [name]          required parameter                 /:name
    [...name]       required rest capture (list)       /:name{.+}
    [[name]]        optional parameter                 (none) | /:name
    [[...name]]     optional rest capture (list)       (none) | /:name{.+}
    index           as the last segment: the directory itself
    _middleware     as the last segment: middleware for the whole subtree

Optional segments fan out, so a path compiles to the deduplicated
Cartesian product of its segments' choices. Anything in brackets that
doesn't match these forms is kept as literal text.

Every compiled route ending in a plain ``:name`` is also registered with
a rest-capturing tail (``:name{.+}``), so ``blog/[slug]`` answers
``/blog/a`` and ``/blog/a/b`` alike. On that widened route ``name`` is
list-valued.
"""

import re
from itertools import product

from warren.functions.types import CompiledPath, CompiledRoute

REST_SUFFIX = "{.+}"

ALL_METHODS = "ALL"

# Export name for the every-verb handler; verb handlers add ``_<verb>``
EXPORT_PREFIX = "on_request"

EXPORT_METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"})

_NAME = r"[A-Za-z0-9_]+"
_OPTIONAL_REST_RE = re.compile(rf"^\[\[\.\.\.({_NAME})\]\]$")
_OPTIONAL_RE = re.compile(rf"^\[\[({_NAME})\]\]$")
_REST_RE = re.compile(rf"^\[\.\.\.({_NAME})\]$")
_PARAM_RE = re.compile(rf"^\[({_NAME})\]$")

_TRAILING_PARAM_RE = re.compile(rf"/:{_NAME}$")
_REST_PARAM_RE = re.compile(rf":({_NAME})\{{\.\+\}}")

_SOURCE_EXTENSIONS = (".py",)


def _strip_base(filepath: str, base_dir: str) -> str:
    path = str(filepath).replace("\\", "/")
    base = str(base_dir).replace("\\", "/").rstrip("/")
    if base and path.startswith(base + "/"):
        path = path[len(base) + 1 :]
    for ext in _SOURCE_EXTENSIONS:
        if path.endswith(ext):
            path = path[: -len(ext)]
            break
    return path


def _expand(segment: str) -> list[tuple[str, ...]]:
    """The choices one path segment contributes."""
    if m := _OPTIONAL_REST_RE.match(segment):
        return [(), (f":{m.group(1)}{REST_SUFFIX}",)]
    if m := _OPTIONAL_RE.match(segment):
        return [(), (f":{m.group(1)}",)]
    if m := _REST_RE.match(segment):
        return [(f":{m.group(1)}{REST_SUFFIX}",)]
    if m := _PARAM_RE.match(segment):
        return [(f":{m.group(1)}",)]
    return [(segment,)]


def filepath_to_routes(filepath: str, base_dir: str = "functions") -> CompiledPath:
    """Compile a function file path into its router patterns.

    Args:
        filepath: Path of the function file, with or without *base_dir*
            in front and with or without a ``.py`` extension.
        base_dir: Functions directory prefix to strip.

    Returns:
        The compiled routes (never empty) and whether the file is
        subtree middleware.

    Example::

        >>> filepath_to_routes("functions/docs/[[section]].py").paths
        ('/docs', '/docs/:section', '/docs/:section{.+}')
    """
    segments = [s for s in _strip_base(filepath, base_dir).split("/") if s]

    is_middleware = False
    if segments:
        last = segments.pop()
        if last == "_middleware":
            is_middleware = True
        elif last != "index":
            segments.append(last)

    combos = product(*(_expand(segment) for segment in segments))
    base_paths = list(
        dict.fromkeys("/" + "/".join(seg for choice in combo for seg in choice) for combo in combos)
    )

    widened = dict.fromkeys(base_paths)
    for path in base_paths:
        if _TRAILING_PARAM_RE.search(path):
            widened[path + REST_SUFFIX] = None

    routes = tuple(
        CompiledRoute(path=path, array_params=frozenset(_REST_PARAM_RE.findall(path)))
        for path in widened
    )

    return CompiledPath(routes=routes, is_middleware=is_middleware)


def method_for_export(name: str) -> str | None:
    """Map an export name to the method it handles.

    ``on_request`` handles every method (``"ALL"``); ``on_request_get``,
    ``on_request_post`` and friends handle one. Any other name, including
    an ``on_request_`` suffix that isn't a known verb, maps to ``None``.
    """
    if not name.startswith(EXPORT_PREFIX):
        return None
    suffix = name[len(EXPORT_PREFIX) :]
    if suffix == "":
        return ALL_METHODS
    if not suffix.startswith("_"):
        return None
    method = suffix[1:].upper()
    return method if method in EXPORT_METHODS else None
