"""Ordered shape matchers for loosely-typed eAPI payloads.

The same query can come back in several structures depending on firmware.
Each matcher inspects a payload and returns a tagged :class:`ShapeMatch` or
``None``; :func:`probe` tries them in priority order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Sequence

INTERFACE_KEY_PREFIXES = ("ethernet", "management", "loopback")


@dataclass(frozen=True)
class ShapeMatch:
    """A recognised payload shape and the data extracted for it."""

    shape: str
    data: Any


Matcher = Callable[[Any], ShapeMatch | None]


def is_container(value: Any) -> bool:
    return isinstance(value, (dict, list))


def wrapped(key: str) -> Matcher:
    """Match ``{key: <dict or list>}``."""

    def match(payload: Any) -> ShapeMatch | None:
        if isinstance(payload, dict) and is_container(payload.get(key)):
            return ShapeMatch(shape=f"wrapped:{key}", data=payload[key])
        return None

    return match


def nested(*path: str) -> Matcher:
    """Match a container found by walking ``path`` through nested dicts."""

    def match(payload: Any) -> ShapeMatch | None:
        node = payload
        for key in path:
            if not isinstance(node, dict) or key not in node:
                return None
            node = node[key]
        if is_container(node):
            return ShapeMatch(shape="nested:" + ".".join(path), data=node)
        return None

    return match


def looks_like_interface(name: Any, prefixes: Iterable[str] = INTERFACE_KEY_PREFIXES) -> bool:
    return isinstance(name, str) and name.lower().startswith(tuple(p.lower() for p in prefixes))


def keyed_by_interface(prefixes: Sequence[str] = INTERFACE_KEY_PREFIXES, any_key: bool = False) -> Matcher:
    """Match a dict whose keys are interface names.

    Only the first key is inspected unless ``any_key`` is set.
    """

    def match(payload: Any) -> ShapeMatch | None:
        if not isinstance(payload, dict) or not payload:
            return None
        keys = list(payload) if any_key else [next(iter(payload))]
        if any(looks_like_interface(k, prefixes) for k in keys):
            return ShapeMatch(shape="keyed-by-interface", data=payload)
        return None

    return match


def list_of_dicts() -> Matcher:
    def match(payload: Any) -> ShapeMatch | None:
        if isinstance(payload, list) and payload and all(isinstance(item, dict) for item in payload):
            return ShapeMatch(shape="list", data=payload)
        return None

    return match


def passthrough() -> Matcher:
    """Last resort: hand back any dict unchanged."""

    def match(payload: Any) -> ShapeMatch | None:
        if isinstance(payload, dict):
            return ShapeMatch(shape="passthrough", data=payload)
        return None

    return match


def probe(payload: Any, matchers: Sequence[Matcher]) -> ShapeMatch | None:
    """Return the first match, or ``None`` if no matcher recognises the payload."""
    for matcher in matchers:
        found = matcher(payload)
        if found is not None:
            return found
    return None
