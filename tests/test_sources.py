# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the snapshot and JSON Lines diagnostic sources."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from diagstream.core.models import BuildProgress, BuildState
from diagstream.core.severity import Severity
from diagstream.errors import SourceUnavailableError
from diagstream.sources import JsonLinesSource, SnapshotSource


def _write_lines(path: Path, entries: list[object]) -> Path:
    path.write_text("\n".join(json.dumps(entry) for entry in entries) + "\n", encoding="utf-8")
    return path


def test_snapshot_source_is_re_enumerable() -> None:
    progress = BuildProgress(state=BuildState.SUCCESS)
    source = SnapshotSource.of([], progress)

    assert list(source.diagnostics()) == list(source.diagnostics()) == []
    assert source.progress() == progress


def test_jsonl_source_parses_and_coerces(tmp_path: Path) -> None:
    path = _write_lines(
        tmp_path / "diags.jsonl",
        [
            {"severity": "Error", "file": "src/a.ml", "line": 3, "column": 2, "message": "Unbound value x"},
            {"severity": "alert", "file": "src/b.ml", "message": "odd"},
        ],
    )

    diagnostics = list(JsonLinesSource(path).diagnostics())

    assert [diag.severity for diag in diagnostics] == [Severity.ERROR, Severity.UNKNOWN]
    assert diagnostics[1].line == 0


def test_jsonl_source_skips_blank_lines(tmp_path: Path) -> None:
    path = tmp_path / "diags.jsonl"
    path.write_text('\n{"severity": "warning", "file": "a.ml", "message": "m"}\n\n', encoding="utf-8")

    assert len(list(JsonLinesSource(path).diagnostics())) == 1


def test_jsonl_source_reports_malformed_line(tmp_path: Path) -> None:
    path = tmp_path / "diags.jsonl"
    path.write_text('{"severity": "error", "file": "a.ml", "message": "ok"}\n{not json}\n', encoding="utf-8")
    stream = JsonLinesSource(path).diagnostics()

    assert next(stream).file == "a.ml"
    with pytest.raises(SourceUnavailableError, match=":2:"):
        next(stream)


def test_jsonl_source_reports_invalid_fields(tmp_path: Path) -> None:
    path = _write_lines(tmp_path / "diags.jsonl", [{"severity": "error", "file": "a.ml", "line": -4, "message": "x"}])

    with pytest.raises(SourceUnavailableError, match="malformed diagnostic"):
        list(JsonLinesSource(path).diagnostics())


def test_jsonl_source_missing_file(tmp_path: Path) -> None:
    with pytest.raises(SourceUnavailableError, match="cannot open"):
        list(JsonLinesSource(tmp_path / "absent.jsonl").diagnostics())


def test_jsonl_source_reads_lazily(tmp_path: Path) -> None:
    path = tmp_path / "diags.jsonl"
    path.write_text('{"severity": "error", "file": "a.ml", "message": "ok"}\ngarbage\n', encoding="utf-8")

    first = next(JsonLinesSource(path).diagnostics())

    assert first.message == "ok"
