"""
Header collections and typed header values.

Header names compare case-insensitively. A ``Headers`` collection holds
one value per name, in first-seen order; repeated names are folded into a
single comma-separated value as HTTP allows.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping

from ..errors import InvalidHeaderError

# RFC 9110 token characters
_NAME_PATTERN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
# Visible ASCII, space, tab and obs-text; no CR, LF or NUL
_VALUE_PATTERN = re.compile(r"^[\t\x20-\x7e\x80-\xff]*$")


def validate_header_name(name: Any) -> str:
    """Return the name unchanged, or raise if it is not a legal header name."""
    if not isinstance(name, str) or not _NAME_PATTERN.fullmatch(name):
        raise InvalidHeaderError(f"Invalid header name: {name!r}")
    return name


def validate_header_value(value: Any) -> str:
    """Return the value unchanged, or raise if it is not a legal header value."""
    if isinstance(value, HeaderValue):
        return value.value
    if not isinstance(value, str) or not _VALUE_PATTERN.fullmatch(value):
        raise InvalidHeaderError(f"Invalid header value: {value!r}")
    return value


@dataclass(frozen=True)
class HeaderValue:
    """A header value checked for legal characters at construction."""
    value: str

    def __post_init__(self) -> None:
        validate_header_value(self.value)

    def __str__(self) -> str:
        return self.value


class Headers:
    """
    Ordered, case-insensitive header collection.

    Example:
        headers = Headers([("Content-Type", "application/json")])
        headers.get("content-type")  # "application/json"
    """

    def __init__(
        self,
        source: Mapping[str, Any] | Iterable[tuple[Any, Any]] | None = None,
        *,
        validate: bool = True,
    ):
        self._items: dict[str, tuple[str, str]] = {}
        if source is None:
            return
        pairs = source.items() if isinstance(source, Mapping) else source
        for pair in pairs:
            try:
                name, value = pair
            except (TypeError, ValueError):
                raise InvalidHeaderError(
                    f"Expected a (name, value) pair, got {pair!r}"
                ) from None
            if validate:
                name, value = validate_header_name(str(name)), validate_header_value(value)
            self._add(str(name), str(value))

    @classmethod
    def coerce(cls, value: Any) -> Headers:
        """Build a Headers from a Headers, a mapping or an iterable of pairs."""
        if isinstance(value, Headers):
            return value
        if isinstance(value, (str, bytes)):
            raise InvalidHeaderError(f"Cannot build headers from {type(value).__name__}")
        return cls(value)

    def _add(self, name: str, value: str) -> None:
        key = name.lower()
        if key in self._items:
            first_name, existing = self._items[key]
            self._items[key] = (first_name, f"{existing}, {value}")
        else:
            self._items[key] = (name, value)

    def updated(self, other: Headers) -> Headers:
        """A new collection where values from ``other`` replace same-named ones."""
        merged = Headers()
        merged._items = dict(self._items)
        for name, value in other:
            merged._items[name.lower()] = (name, value)
        return merged

    def get(self, name: str) -> str | None:
        """Return the value for ``name`` or None when absent."""
        item = self._items.get(name.lower())
        return item[1] if item else None

    def contains_all(self, other: Headers) -> bool:
        """True if every (name, value) pair of ``other`` is present here."""
        return all(self.get(name) == value for name, value in other)

    def contains_none(self, other: Headers) -> bool:
        """True if no (name, value) pair of ``other`` is present here."""
        return not any(self.get(name) == value for name, value in other)

    def to_list(self) -> list[list[str]]:
        """JSON-friendly list of [name, value] pairs with lower-cased names."""
        return [[key, value] for key, (_, value) in self._items.items()]

    def _normalized(self) -> set[tuple[str, str]]:
        return {(key, value) for key, (_, value) in self._items.items()}

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._items

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Headers):
            return NotImplemented
        return self._normalized() == other._normalized()

    def __hash__(self) -> int:
        return hash(frozenset(self._normalized()))

    def __repr__(self) -> str:
        return f"Headers({list(self)!r})"
