"""Parsers and validators for configuration documents.

Parsers are plain callables that take a weakly typed candidate (as produced
by a YAML or JSON loader) and return a typed value or raise. Combinators
build parsers for sequences and mappings out of smaller parsers, and prefix
the document path onto any error raised beneath them, so that an error
raised deep in a tree names the full path from the document root.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence, TypeVar

from ..errors import (
    DuplicateAnchor,
    InvalidCorner,
    InvalidKey,
    InvalidSegment,
    KeycaseError,
    MissingField,
    ParseError,
)
from ..layout.anchors import RESERVED_ANCHORS
from ..layout.compass import FULL, Corner, Direction
from ..layout.matrix import EXTREMES, FlexCoord
from ..layout.tweaks import GROUND, TweakGroup, TweakLeaf, TweakNode

T = TypeVar("T")
Parser = Callable[[Any], T]

REQUIRED = object()


@dataclass(frozen=True)
class Field:
    """A field of a ``map_like`` schema: its parser and optional default."""

    parser: Parser
    default: Any = REQUIRED


def parse_within(key: Any, parser: Parser, candidate: Any) -> Any:
    """Apply ``parser``, recording ``key`` in the path of any error."""
    try:
        return parser(candidate)
    except KeycaseError as exc:
        exc.within(key)
        raise


def _is_sequence(candidate: Any) -> bool:
    return isinstance(candidate, Sequence) and not isinstance(candidate, (str, bytes))


###########
# Scalars #
###########


def integer(candidate: Any) -> int:
    if isinstance(candidate, bool):
        raise ParseError(f"Expected an integer, got {candidate!r}")
    if isinstance(candidate, int):
        return candidate
    if isinstance(candidate, float) and candidate.is_integer():
        return int(candidate)
    raise ParseError(f"Expected an integer, got {candidate!r}")


def number(candidate: Any) -> float:
    if isinstance(candidate, bool) or not isinstance(candidate, (int, float)):
        raise ParseError(f"Expected a number, got {candidate!r}")
    return float(candidate)


def boolean(candidate: Any) -> bool:
    if not isinstance(candidate, bool):
        raise ParseError(f"Expected true or false, got {candidate!r}")
    return candidate


def string(candidate: Any) -> str:
    if not isinstance(candidate, str):
        raise ParseError(f"Expected a string, got {candidate!r}")
    return candidate


def keyword(candidate: Any) -> str:
    """A non-empty name."""
    if not string(candidate):
        raise ParseError(f"Expected a name, got {candidate!r}")
    return candidate


def alias(candidate: Any) -> str:
    """A name for a new anchor. Built-in anchor names are reserved."""
    name = keyword(candidate)
    if name in RESERVED_ANCHORS:
        raise DuplicateAnchor(name)
    return name


def one_of(*options: str) -> Parser[str]:
    def parse(candidate: Any) -> str:
        if candidate not in options:
            raise ParseError(f"Expected one of {', '.join(options)}; got {candidate!r}")
        return candidate
    return parse


def corner_from_string(candidate: Any) -> Corner:
    """A corner by name, such as ``"SSE"``."""
    if isinstance(candidate, str):
        try:
            return Corner(candidate.upper())
        except ValueError:
            pass
    raise InvalidCorner(f"Unrecognised corner: {candidate!r}")


def direction_from_string(candidate: Any) -> Direction:
    if isinstance(candidate, str):
        try:
            return Direction(candidate.upper())
        except ValueError:
            pass
    raise ParseError(f"Expected a cardinal direction (N, E, S, W), got {candidate!r}")


def segment(candidate: Any) -> int:
    """A single wall segment, 0 through 4."""
    if candidate == FULL:
        raise InvalidSegment("A full wall extent was given where a single segment is required")
    if isinstance(candidate, bool) or not isinstance(candidate, int):
        raise InvalidSegment(f"Expected a wall segment, got {candidate!r}")
    if not 0 <= candidate <= GROUND:
        raise InvalidSegment(f"Wall segment {candidate} not in [0, {GROUND}]")
    return candidate


def parse_wall_extent(candidate: Any) -> int | str:
    """A wall segment, or ``"full"`` for the entire wall."""
    if candidate == FULL:
        return FULL
    return segment(candidate)


def integer_or_key(candidate: Any) -> int | str:
    """Normalise a map key that may have lost its integer type.

    Some document formats (JSON, for one) cannot express integer map keys,
    so ``"1"`` and ``1`` both become ``1``. Other strings are kept as names,
    without any leading colon.
    """
    if isinstance(candidate, bool):
        raise ParseError(f"Expected an integer or a name, got {candidate!r}")
    if isinstance(candidate, int):
        return candidate
    if isinstance(candidate, str):
        text = candidate.lstrip(":")
        try:
            return int(text)
        except ValueError:
            return keyword(text)
    raise ParseError(f"Expected an integer or a name, got {candidate!r}")


def flexcoord(candidate: Any) -> FlexCoord:
    """A matrix index: an integer, ``"first"`` or ``"last"``."""
    value = integer_or_key(candidate)
    if isinstance(value, str) and value not in EXTREMES:
        raise ParseError(f"Expected an index, 'first' or 'last'; got {candidate!r}")
    return value


###############
# Combinators #
###############


def tuple_of(item_parser: Parser[T]) -> Parser[tuple[T, ...]]:
    """A parser for sequences, applying ``item_parser`` to each element in order."""
    def parse(candidate: Any) -> tuple[T, ...]:
        if not _is_sequence(candidate):
            raise ParseError(f"Expected a list, got {candidate!r}")
        return tuple(
            parse_within(index, item_parser, item) for index, item in enumerate(candidate)
        )
    return parse


def vector(min_length: int = 2, max_length: int = 3) -> Parser[tuple[float, ...]]:
    numbers = tuple_of(number)

    def parse(candidate: Any) -> tuple[float, ...]:
        values = numbers(candidate)
        if not min_length <= len(values) <= max_length:
            raise ParseError(
                f"Expected {min_length} to {max_length} numbers, got {len(values)}"
            )
        return values
    return parse


def map_of(key_parser: Parser, value_parser: Parser) -> Parser[dict]:
    """A parser of mappings where only the general type of key is known.

    Keys that collide after parsing (such as ``1`` and ``"1"``) are rejected.
    """
    def parse(candidate: Any) -> dict:
        if not isinstance(candidate, Mapping):
            raise ParseError(f"Expected a mapping, got {candidate!r}")
        result = {}
        for raw_key, raw_value in candidate.items():
            key = parse_within(raw_key, key_parser, raw_key)
            if key in result:
                raise ParseError(f"Duplicate key: {key!r}").within(raw_key)
            result[key] = parse_within(raw_key, value_parser, raw_value)
        return result
    return parse


def map_like(
    fields: Mapping[str, Field | Parser], into: Callable[..., T] | None = None
) -> Parser:
    """A parser of mappings where the exact keys are known.

    Args:
        fields: Field name to ``Field``; a bare parser is a required field
        into: Optional constructor, called with the parsed fields as keyword
            arguments (hyphens become underscores)

    Raises:
        InvalidKey: For a key not in ``fields``
        MissingField: For an absent field without a default
    """
    schema = {
        name: entry if isinstance(entry, Field) else Field(entry)
        for name, entry in fields.items()
    }

    def parse(candidate: Any) -> Any:
        if candidate is None:
            candidate = {}
        if not isinstance(candidate, Mapping):
            raise ParseError(f"Expected a mapping, got {candidate!r}")
        for key in candidate:
            if key not in schema:
                raise InvalidKey(key).within(key)
        values = {}
        for name, entry in schema.items():
            if name in candidate:
                values[name] = parse_within(name, entry.parser, candidate[name])
            elif entry.default is REQUIRED:
                raise MissingField(name)
            else:
                values[name] = entry.default
        if into is None:
            return values
        return into(**{name.replace("-", "_"): value for name, value in values.items()})
    return parse


##########
# Tweaks #
##########


def chunk_size(candidate: Any) -> int:
    size = integer(candidate)
    if size < 2:
        raise ParseError(f"Chunk size must be at least 2, got {size}")
    return size


def case_tweak_position(*fields: Any) -> TweakLeaf:
    """Parse a leaf: ``[alias]``, ``[alias, corner]``, ``[alias, corner, segment]``
    or ``[alias, corner, first segment, last segment]``."""
    if not 1 <= len(fields) <= 4:
        raise ParseError(f"A tweak position has 1 to 4 fields, got {len(fields)}")
    anchor = parse_within(0, keyword, fields[0])
    if len(fields) == 1:
        return TweakLeaf(anchor, None, 0, 0, explicit_segments=False)
    # A null corner stands for the anchor's own point.
    corner = None if fields[1] is None else parse_within(1, corner_from_string, fields[1])
    if len(fields) == 2:
        return TweakLeaf(anchor, corner, 0, 0, explicit_segments=False)
    first = parse_within(2, segment, fields[2])
    last = first if len(fields) == 3 else parse_within(3, segment, fields[3])
    if first > last:
        raise InvalidSegment(f"Segment range {first}..{last} is reversed").within(3)
    return TweakLeaf(anchor, corner, first, last)


def _children(parsed: TweakNode | tuple[TweakNode, ...]) -> tuple[TweakNode, ...]:
    return parsed if isinstance(parsed, tuple) else (parsed,)


def _hull_around(candidate: Any) -> tuple[TweakNode, ...]:
    children = _children(case_tweaks(candidate))
    if not children:
        raise ParseError("hull-around must not be empty")
    return children


def _tweak_group(**fields: Any) -> TweakGroup:
    return TweakGroup(children=fields.pop("hull_around"), **fields)


tweak_group = map_like(
    {
        "hull-around": _hull_around,
        "chunk-size": Field(chunk_size, None),
        "at-ground": Field(boolean, False),
        "above-ground": Field(boolean, True),
        "highlight": Field(boolean, False),
    },
    into=_tweak_group,
)


def tweak_node(candidate: Any) -> TweakNode:
    """A single leaf or group."""
    if isinstance(candidate, Mapping):
        return tweak_group(candidate)
    if _is_sequence(candidate) and candidate and isinstance(candidate[0], str):
        return case_tweak_position(*candidate)
    raise ParseError(f"Expected a tweak position or a group, got {candidate!r}")


def case_tweaks(candidate: Any) -> TweakNode | tuple[TweakNode, ...]:
    """Parse a tweak by the shape of the document.

    A list starting with a string is one leaf, a mapping is a group (whose
    ``hull-around`` is parsed by this same function), and any other list is
    a list of leaves and groups.
    """
    if isinstance(candidate, Mapping):
        return tweak_group(candidate)
    if _is_sequence(candidate):
        if candidate and isinstance(candidate[0], str):
            return case_tweak_position(*candidate)
        return tuple_of(tweak_node)(candidate)
    raise ParseError(f"Expected a tweak, got {candidate!r}")


case_tweak_map = map_of(keyword, lambda candidate: _children(case_tweaks(candidate)))
