"""Exception types raised while parsing configuration and resolving anchors."""

from __future__ import annotations

from typing import Any


class KeycaseError(Exception):
    """Base exception for keycase errors.

    Carries two pieces of context that are filled in as the exception
    propagates outward:

    - ``path``: the chain of document keys and indices from the root of the
      configuration tree to the offending field (parse time).
    - ``chain``: the anchor names whose resolution was in progress when the
      error occurred (resolution time), outermost first.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.path: list[Any] = []
        self.chain: list[str] = []

    def within(self, key: Any) -> KeycaseError:
        """Record that the error happened inside document field ``key``."""
        self.path.insert(0, key)
        return self

    def via(self, anchor: str) -> KeycaseError:
        """Record that the error happened while resolving ``anchor``."""
        if not self.chain or self.chain[0] != anchor:
            self.chain.insert(0, anchor)
        return self

    def __str__(self) -> str:
        text = self.message
        if self.path:
            text += " (at " + "/".join(str(p) for p in self.path) + ")"
        if self.chain:
            text += " (via " + " -> ".join(self.chain) + ")"
        return text


class ParseError(KeycaseError):
    """A document field is malformed."""
    pass


class InvalidKey(ParseError):
    """A mapping contains a field that is not part of its schema."""

    def __init__(self, key: Any) -> None:
        super().__init__(f"Invalid key: {key!r}")
        self.key = key


class MissingField(ParseError):
    """A mapping lacks a required field."""

    def __init__(self, key: Any) -> None:
        super().__init__(f"Missing required field: {key!r}")
        self.key = key


class AnchorError(KeycaseError):
    """Base class for errors in the anchor graph."""
    pass


class UnknownAnchor(AnchorError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown anchor: {name!r}")
        self.name = name


class DuplicateAnchor(AnchorError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Anchor name already in use: {name!r}")
        self.name = name


class CyclicAnchor(AnchorError):
    """A secondary anchor depends on itself, directly or transitively."""

    def __init__(self, name: str, cycle: list[str]) -> None:
        super().__init__(
            f"Anchor {name!r} depends on itself: " + " -> ".join([*cycle, name])
        )
        self.name = name
        self.cycle = list(cycle)


class UnknownCluster(AnchorError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown key cluster: {name!r}")
        self.name = name


class UnknownTweak(AnchorError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tweak: {name!r}")
        self.name = name


class InvalidCorner(KeycaseError):
    """A corner name is unrecognised or not defined for an anchor kind."""
    pass


class InvalidSegment(KeycaseError):
    """A wall segment is outside [0, 4], reversed, or not a single point."""
    pass


class OutOfBoundsCoordinate(KeycaseError):
    """A key-matrix coordinate lies outside its cluster."""

    def __init__(self, cluster: str, coordinate: Any, reason: str) -> None:
        super().__init__(
            f"Coordinate {coordinate!r} out of bounds in cluster {cluster!r}: {reason}"
        )
        self.cluster = cluster
        self.coordinate = coordinate


# Errors that one misconfigured feature can raise without invalidating the
# rest of the model.
RESOLUTION_ERRORS = (AnchorError, InvalidCorner, InvalidSegment, OutOfBoundsCoordinate)
