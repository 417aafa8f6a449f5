"""Mutable, case-insensitive HTTP headers.

Implements ``MutableMapping[str, str]``. Names keep the casing they were
first set with; lookups ignore case. ``__setitem__`` replaces every value
for a name, ``append`` adds another one (e.g. multiple ``Set-Cookie``).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from typing import TypeAlias

HeadersInit: TypeAlias = Mapping[str, str] | Iterable[tuple[str, str]] | None


class Headers(MutableMapping[str, str]):
    """Case-insensitive header collection.

    Constructed from a mapping, an iterable of pairs, or another
    ``Headers``. Construction always copies, so two collections never
    alias each other::

        original = Headers({"Vary": "Accept"})
        copy = Headers(original)
        copy["Vary"] = "Origin"
        assert original["vary"] == "Accept"
    """

    __slots__ = ("_items",)

    def __init__(self, init: HeadersInit = None) -> None:
        self._items: list[tuple[str, str]] = []
        if init is None:
            return
        if isinstance(init, Headers):
            self._items = list(init._items)
            return
        pairs = init.items() if isinstance(init, Mapping) else init
        for name, value in pairs:
            self._items.append((str(name), str(value)))

    def __getitem__(self, key: str) -> str:
        key_lower = key.lower()
        for name, value in self._items:
            if name.lower() == key_lower:
                return value
        raise KeyError(key)

    def __setitem__(self, key: str, value: str) -> None:
        key_lower = key.lower()
        for i, (name, _) in enumerate(self._items):
            if name.lower() == key_lower:
                self._items[i] = (name, str(value))
                self._items[i + 1 :] = [
                    pair for pair in self._items[i + 1 :] if pair[0].lower() != key_lower
                ]
                return
        self._items.append((key, str(value)))

    def __delitem__(self, key: str) -> None:
        key_lower = key.lower()
        kept = [pair for pair in self._items if pair[0].lower() != key_lower]
        if len(kept) == len(self._items):
            raise KeyError(key)
        self._items = kept

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        key_lower = key.lower()
        return any(name.lower() == key_lower for name, _ in self._items)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._items:
            key = name.lower()
            if key not in seen:
                seen.add(key)
                yield name

    def __len__(self) -> int:
        return len({name.lower() for name, _ in self._items})

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Headers):
            return sorted(other.lowered()) == sorted(self.lowered())
        return super().__eq__(other)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {v!r}" for k, v in self._items)
        return f"Headers({{{items}}})"

    def set(self, key: str, value: str) -> None:
        """Replace every value of *key* with *value*."""
        self[key] = value

    def append(self, key: str, value: str) -> None:
        """Add a value for *key*, keeping existing ones."""
        self._items.append((key, str(value)))

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key* (e.g. multiple ``Set-Cookie``)."""
        key_lower = key.lower()
        return [value for name, value in self._items if name.lower() == key_lower]

    def copy(self) -> Headers:
        return Headers(self._items)

    def lowered(self) -> list[tuple[str, str]]:
        """All pairs with lower-cased names, in insertion order."""
        return [(name.lower(), value) for name, value in self._items]

    @property
    def raw(self) -> list[tuple[bytes, bytes]]:
        """Header byte pairs for ASGI."""
        return [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in self._items
        ]

    @classmethod
    def from_raw(cls, raw: Iterable[tuple[bytes, bytes]]) -> Headers:
        return cls((name.decode("latin-1"), value.decode("latin-1")) for name, value in raw)
