"""Route pattern parsing and matching.

Pattern syntax::

    /users                 static
    /users/:id             named parameter, one segment
    /files/:path{.+}       named parameter with a custom regex
    /api/*                 subtree: /api itself and everything below it
    /*                     every path

A ``*`` is only special as the final segment.
"""

import re
from dataclasses import dataclass

from warren.errors import ConfigurationError

_PARAM_RE = re.compile(r"^:(\w+)(?:\{(.+)\})?$")

_DEFAULT_PARAM_REGEX = r"[^/]+"


@dataclass(frozen=True, slots=True)
class PathPattern:
    """A compiled route pattern.

    ``depth`` counts the pattern's segments, wildcard included.
    """

    source: str
    regex: re.Pattern[str]
    param_names: tuple[str, ...]
    wildcard: bool
    depth: int

    def match(self, path: str) -> dict[str, str] | None:
        """Return the captured parameters, or ``None`` if *path* doesn't match."""
        m = self.regex.match(normalize_path(path))
        if m is None:
            return None
        return {name: value for name, value in m.groupdict().items() if value is not None}


def normalize_path(path: str) -> str:
    """Collapse a request path to ``/a/b`` form (no trailing slash)."""
    parts = [p for p in path.split("/") if p]
    return "/" + "/".join(parts)


def compile_pattern(pattern: str) -> PathPattern:
    """Compile a pattern string into a :class:`PathPattern`.

    Raises ``ConfigurationError`` for duplicate parameter names or an
    invalid custom regex.
    """
    segments = [s for s in pattern.strip().split("/") if s]
    wildcard = bool(segments) and segments[-1] == "*"
    if wildcard:
        segments = segments[:-1]

    body: list[str] = []
    names: list[str] = []
    for segment in segments:
        param = _PARAM_RE.match(segment)
        if param is None:
            body.append("/" + re.escape(segment))
            continue
        name, custom = param.group(1), param.group(2)
        if name in names:
            msg = f"Duplicate parameter {name!r} in route pattern {pattern!r}"
            raise ConfigurationError(msg)
        names.append(name)
        body.append(f"/(?P<{name}>{custom or _DEFAULT_PARAM_REGEX})")

    if wildcard:
        source = "^" + "".join(body) + "(?:/.*)?$"
    else:
        source = "^" + ("".join(body) or "/") + "$"

    try:
        regex = re.compile(source)
    except re.error as exc:
        msg = f"Invalid route pattern {pattern!r}: {exc}"
        raise ConfigurationError(msg) from exc

    return PathPattern(
        source=pattern,
        regex=regex,
        param_names=tuple(names),
        wildcard=wildcard,
        depth=len(segments) + (1 if wildcard else 0),
    )
