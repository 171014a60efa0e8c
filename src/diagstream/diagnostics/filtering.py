# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Severity and file-pattern predicates applied while pulling diagnostics."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from fnmatch import translate
from typing import Final

from ..core.models import Diagnostic
from ..core.severity import SeverityFilter, parse_severity_filter
from ..errors import InvalidFilterError

FILE_PATTERN_FIELD: Final[str] = "file_pattern"
MAX_PATTERN_LENGTH: Final[int] = 200
MAX_WILDCARDS: Final[int] = 10
MAX_CONSECUTIVE_WILDCARDS: Final[int] = 3
MAX_PATH_LENGTH: Final[int] = 1000
MAX_RECURSIVE_SEGMENTS: Final[int] = 5
PATH_SEPARATOR: Final[str] = "/"
RECURSIVE_WILDCARD: Final[str] = "**"
_BRACKET_OPEN: Final[str] = "["
_BRACKET_CLOSE: Final[str] = "]"
_BRACKET_NEGATE: Final[str] = "!"


@dataclass(frozen=True, slots=True)
class FilterSpec:
    """Caller selection applied to every diagnostic before prioritisation."""

    severity_filter: SeverityFilter = SeverityFilter.ALL
    file_pattern: str | None = None

    @classmethod
    def from_raw(cls, severity_filter: str | None = None, file_pattern: str | None = None) -> FilterSpec:
        """Build a filter spec from loosely typed request values.

        Args:
            severity_filter: Severity token such as ``"error"``; ``None`` selects all.
            file_pattern: Optional glob restricting diagnostic file paths.

        Returns:
            FilterSpec: Parsed filter specification. The glob is validated by
            :func:`compile_filter`.
        """

        return cls(severity_filter=parse_severity_filter(severity_filter), file_pattern=file_pattern)


@dataclass(frozen=True, slots=True)
class FilePattern:
    """Compiled glob matched against diagnostic file paths.

    Patterns without ``/`` match the whole path and ``*`` crosses directory
    separators. Patterns containing ``/`` match segment by segment, where a
    ``**`` segment spans zero or more directories.
    """

    pattern: str
    _whole: re.Pattern[str] | None = field(default=None, repr=False)
    _segments: tuple[re.Pattern[str] | None, ...] = field(default=(), repr=False)

    @classmethod
    def compile(cls, pattern: str) -> FilePattern:
        """Validate and compile ``pattern``.

        Args:
            pattern: Glob pattern supplied by the caller.

        Returns:
            FilePattern: Compiled matcher.

        Raises:
            InvalidFilterError: If the pattern is empty, too long, too complex or malformed.
        """

        if not _validate_pattern(pattern):
            return cls(pattern=pattern, _whole=re.compile(translate(pattern)))
        segments = tuple(
            None if segment == RECURSIVE_WILDCARD else re.compile(translate(segment))
            for segment in pattern.split(PATH_SEPARATOR)
        )
        return cls(pattern=pattern, _segments=segments)

    def matches(self, path: str) -> bool:
        """Return ``True`` when ``path`` satisfies the pattern.

        Args:
            path: Diagnostic file path using ``/`` separators.

        Returns:
            bool: ``True`` when the path matches. Paths longer than
            ``MAX_PATH_LENGTH`` never match.
        """

        if len(path) > MAX_PATH_LENGTH:
            return False
        if self._whole is not None:
            return self._whole.match(path) is not None
        return _match_segments(self._segments, path.split(PATH_SEPARATOR))


def _match_segments(segments: tuple[re.Pattern[str] | None, ...], parts: list[str]) -> bool:
    """Match path ``parts`` against compiled pattern ``segments``.

    Tracks the set of path prefixes reachable after each pattern segment, so
    the cost stays linear in the number of segments times path depth.
    """

    reachable = {0}
    for segment in segments:
        if segment is None:
            reachable = set(range(min(reachable), len(parts) + 1))
        else:
            reachable = {index + 1 for index in reachable if index < len(parts) and segment.match(parts[index])}
        if not reachable:
            return False
    return len(parts) in reachable


def _validate_pattern(pattern: str) -> bool:
    """Raise :class:`InvalidFilterError` when ``pattern`` cannot be compiled safely.

    Returns:
        bool: ``True`` when the pattern must be matched segment by segment,
        that is when a ``/`` appears outside every character class.
    """

    if not pattern:
        raise InvalidFilterError(FILE_PATTERN_FIELD, "pattern cannot be empty")
    if len(pattern) > MAX_PATTERN_LENGTH:
        raise InvalidFilterError(FILE_PATTERN_FIELD, f"pattern too long (max {MAX_PATTERN_LENGTH} chars)")
    if pattern.count("*") > MAX_WILDCARDS:
        raise InvalidFilterError(FILE_PATTERN_FIELD, f"too many wildcards (max {MAX_WILDCARDS})")
    longest_run = max(len(run) for run in re.findall(r"\*+", pattern)) if "*" in pattern else 0
    if longest_run > MAX_CONSECUTIVE_WILDCARDS:
        raise InvalidFilterError(
            FILE_PATTERN_FIELD,
            f"too many consecutive wildcards (max {MAX_CONSECUTIVE_WILDCARDS})",
        )
    classes = _class_spans(pattern)
    segmented = any(
        char == PATH_SEPARATOR and not any(start < offset < end for start, end in classes)
        for offset, char in enumerate(pattern)
    )
    if not segmented:
        return False
    segments = pattern.split(PATH_SEPARATOR)
    if sum(1 for segment in segments if segment == RECURSIVE_WILDCARD) > MAX_RECURSIVE_SEGMENTS:
        raise InvalidFilterError(FILE_PATTERN_FIELD, f"too many '**' segments (max {MAX_RECURSIVE_SEGMENTS})")
    for segment in segments:
        _class_spans(segment)
    return True


def _class_spans(text: str) -> list[tuple[int, int]]:
    """Return the ``(open, close)`` offsets of every character class in ``text``.

    Follows :mod:`fnmatch` rules: a ``]`` directly after ``[`` or ``[!`` is a
    literal member of the class rather than its terminator.

    Raises:
        InvalidFilterError: If a class is never closed.
    """

    spans: list[tuple[int, int]] = []
    index = 0
    while index < len(text):
        if text[index] != _BRACKET_OPEN:
            index += 1
            continue
        cursor = index + 1
        if cursor < len(text) and text[cursor] == _BRACKET_NEGATE:
            cursor += 1
        if cursor < len(text) and text[cursor] == _BRACKET_CLOSE:
            cursor += 1
        close = text.find(_BRACKET_CLOSE, cursor)
        if close == -1:
            raise InvalidFilterError(FILE_PATTERN_FIELD, f"unterminated character class at offset {index}")
        spans.append((index, close))
        index = close + 1
    return spans


@dataclass(frozen=True, slots=True)
class DiagnosticPredicate:
    """Pure admit/reject decision combining severity and file predicates."""

    spec: FilterSpec
    file_pattern: FilePattern | None = None

    def __call__(self, diagnostic: Diagnostic) -> bool:
        if not self.spec.severity_filter.admits(diagnostic.severity):
            return False
        if self.file_pattern is None:
            return True
        return self.file_pattern.matches(diagnostic.file)


def compile_filter(spec: FilterSpec) -> DiagnosticPredicate:
    """Validate ``spec`` once and return the predicate applied per item.

    Args:
        spec: Filter specification supplied by the caller.

    Returns:
        DiagnosticPredicate: Predicate admitting diagnostics that satisfy ``spec``.

    Raises:
        InvalidFilterError: If the file pattern is malformed.
    """

    pattern = FilePattern.compile(spec.file_pattern) if spec.file_pattern is not None else None
    return DiagnosticPredicate(spec=spec, file_pattern=pattern)


def filter_stream(
    predicate: DiagnosticPredicate,
    diagnostics: Iterable[Diagnostic],
) -> Iterator[Diagnostic]:
    """Lazily yield diagnostics admitted by ``predicate``.

    Args:
        predicate: Compiled filter predicate.
        diagnostics: Upstream diagnostic iterable.

    Yields:
        Diagnostic: Admitted diagnostics in arrival order.
    """

    for diagnostic in diagnostics:
        if predicate(diagnostic):
            yield diagnostic


__all__ = [
    "DiagnosticPredicate",
    "FilePattern",
    "FilterSpec",
    "compile_filter",
    "filter_stream",
]
