"""Naming patterns for per-layer output files.

A pattern is a short sequence of literal separators and placeholders. It is
built once from the layer naming options, may be narrowed before use, and is
then rendered once per layer by a pure function.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import PurePath
from typing import Optional, Tuple, Union

from .exceptions import AmbiguousPatternError, InvalidPatternError

SEPARATOR = "-"


class PlaceholderKind(str, Enum):
    BASENAME = "basename"
    LAYER_INDEX = "index"
    LAYER_ID = "id"


@dataclass(frozen=True, slots=True)
class Literal:
    text: str


@dataclass(frozen=True, slots=True)
class Placeholder:
    kind: PlaceholderKind


Segment = Union[Literal, Placeholder]

_LAYER_KINDS = (PlaceholderKind.LAYER_INDEX, PlaceholderKind.LAYER_ID)


def format_index(index: int) -> str:
    """Zero-pad a layer index to at least two digits."""
    return f"{index:02d}"


def input_stem(input_path: str) -> str:
    """Return the file name of *input_path* without directory and last extension."""
    return PurePath(input_path).stem


@dataclass(frozen=True)
class NamingPattern:
    """Immutable output file name template for layer mode.

    Attributes:
        segments: Literal and placeholder segments in output order
        basename: Value substituted for the base name placeholder
        expected_layers: Number of layers the pattern will name, ``None`` if unknown
    """

    segments: Tuple[Segment, ...]
    basename: str = ""
    expected_layers: Optional[int] = field(default=None, compare=False)

    def has(self, kind: PlaceholderKind) -> bool:
        return any(isinstance(seg, Placeholder) and seg.kind is kind for seg in self.segments)

    @property
    def template(self) -> str:
        """Printable form of the pattern, e.g. ``${basename}-${index}``."""
        parts = []
        for seg in self.segments:
            if isinstance(seg, Literal):
                parts.append(seg.text)
            else:
                parts.append("${" + seg.kind.value + "}")
        return "".join(parts)

    def render(self, entry) -> str:
        """Return the output file name (no directory, no extension) for a layer entry."""
        parts = []
        for seg in self.segments:
            if isinstance(seg, Literal):
                parts.append(seg.text)
            elif seg.kind is PlaceholderKind.BASENAME:
                parts.append(self.basename)
            elif seg.kind is PlaceholderKind.LAYER_INDEX:
                parts.append(format_index(entry.index))
            else:
                parts.append(entry.id)
        return "".join(parts)

    def remove(self, *, basename: bool = False, index: bool = False, layer_id: bool = False) -> "NamingPattern":
        """Return a copy without the selected placeholders, validated with :meth:`test`."""
        dropped = set()
        if basename:
            dropped.add(PlaceholderKind.BASENAME)
        if index:
            dropped.add(PlaceholderKind.LAYER_INDEX)
        if layer_id:
            dropped.add(PlaceholderKind.LAYER_ID)

        kept = [
            seg for seg in self.segments
            if not (isinstance(seg, Placeholder) and seg.kind in dropped)
        ]
        pattern = replace(self, segments=_normalise(kept))
        pattern.test()
        return pattern

    def with_basename(self, basename: Optional[str]) -> "NamingPattern":
        """Return a copy using *basename* for the base name placeholder; blank is ignored."""
        if basename is None or not basename.strip():
            return self
        pattern = replace(self, basename=basename)
        pattern.test()
        return pattern

    def test(self) -> None:
        """Fail with :class:`InvalidPatternError` if the pattern cannot name layers uniquely."""
        produces_text = any(
            isinstance(seg, Placeholder) and (seg.kind is not PlaceholderKind.BASENAME or self.basename)
            for seg in self.segments
        )
        if not produces_text:
            raise InvalidPatternError(
                f"output file name pattern <{self.template}> is empty", flag="layer-index"
            )
        several = self.expected_layers is None or self.expected_layers > 1
        if several and not any(self.has(kind) for kind in _LAYER_KINDS):
            raise InvalidPatternError(
                f"output file name pattern <{self.template}> has neither layer index nor layer id, "
                "layers would overwrite each other",
                flag="layer-index",
            )


def _normalise(segments) -> Tuple[Segment, ...]:
    result = []
    for seg in segments:
        if isinstance(seg, Literal) and seg.text == SEPARATOR:
            if not result or result[-1] == Literal(SEPARATOR):
                continue
        result.append(seg)
    while result and result[-1] == Literal(SEPARATOR):
        result.pop()
    return tuple(result)


def build_pattern(
    input_path: str,
    *,
    use_index: bool,
    use_id: bool,
    no_basename: bool = False,
    basename: Optional[str] = None,
    layer_count: Optional[int] = None,
) -> NamingPattern:
    """Build the layer naming pattern from the naming options.

    The base name comes first unless suppressed: *basename* if given, otherwise
    the stem of *input_path*. The layer index and then the layer id follow,
    separated by ``-``.

    Raises:
        AmbiguousPatternError: neither index nor id requested while more than
            one layer (or an unknown number of layers) will be written
    """
    if not use_index and not use_id and (layer_count is None or layer_count > 1):
        raise AmbiguousPatternError(
            "processing layers but neither <layer-id> nor <layer-index> options requested, "
            "ambiguous output file names",
            flag="layer-index",
        )

    segments: list = []
    name = ""
    if not no_basename:
        name = basename if basename and basename.strip() else input_stem(input_path)
        segments.append(Placeholder(PlaceholderKind.BASENAME))

    for requested, kind in ((use_index, PlaceholderKind.LAYER_INDEX), (use_id, PlaceholderKind.LAYER_ID)):
        if requested:
            if segments:
                segments.append(Literal(SEPARATOR))
            segments.append(Placeholder(kind))

    pattern = NamingPattern(tuple(segments), basename=name, expected_layers=layer_count)
    pattern.test()
    return pattern


__all__ = [
    "SEPARATOR",
    "PlaceholderKind",
    "Literal",
    "Placeholder",
    "NamingPattern",
    "build_pattern",
    "format_index",
    "input_stem",
]
