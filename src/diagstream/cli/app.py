# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application serving budgeted diagnostic pages from a JSON Lines file."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from ..config import PipelineSettings, load_settings
from ..core.models import BuildProgress, Response
from ..diagnostics.pipeline import DiagnosticPipeline
from ..diagnostics.tokens import estimate_response_tokens
from ..errors import DiagstreamError
from ..interfaces.diagnostics import PageRequest
from ..logging import configure_logging, fail, info, ok, warn
from ..sources.jsonl import JsonLinesSource
from .typer_ext import create_typer

LOGGER = logging.getLogger(__name__)
ERROR_EXIT_CODE = 2

app = create_typer(
    name="diagstream",
    help="Serve build diagnostics as budgeted, paginated JSON pages.",
    no_args_is_help=True,
)

SourceArg = Annotated[Path, typer.Argument(help="JSON Lines file with one diagnostic per line.")]
MaxDiagnosticsOpt = Annotated[int | None, typer.Option("--max-diagnostics", help="Maximum diagnostics per page.")]
SeverityOpt = Annotated[str | None, typer.Option("--severity", help="Severity filter: all, error or warning.")]
FilePatternOpt = Annotated[str | None, typer.Option("--file-pattern", help="Glob restricting diagnostic files.")]
TokenLimitOpt = Annotated[int | None, typer.Option("--token-limit", help="Token budget per page.")]
ProgressOpt = Annotated[str | None, typer.Option("--progress", help="Build progress snapshot as JSON.")]
RootOpt = Annotated[Path, typer.Option("--root", help="Project root holding configuration files.")]
TimeoutOpt = Annotated[float | None, typer.Option("--timeout", help="Seconds allowed for pulling diagnostics.")]
VerboseOpt = Annotated[bool, typer.Option("--verbose", "-v", help="Log pipeline details to stderr.")]
EmojiOpt = Annotated[bool, typer.Option("--emoji/--no-emoji", help="Decorate status messages with emoji.")]


@dataclass(frozen=True, slots=True)
class PageCLIOptions:
    """Structured options shared by the ``page`` and ``drain`` commands."""

    source: Path
    max_diagnostics: int | None
    severity: str | None
    file_pattern: str | None
    token_limit: int | None
    progress: str | None
    root: Path
    timeout: float | None

    def request(self, cursor: str | None = None) -> PageRequest:
        """Return the page request for ``cursor``."""

        return PageRequest(
            max_diagnostics=self.max_diagnostics,
            cursor=cursor,
            severity_filter=self.severity,
            file_pattern=self.file_pattern,
            token_limit=self.token_limit,
        )

    def build_progress(self) -> BuildProgress | None:
        """Parse the ``--progress`` snapshot.

        Returns:
            BuildProgress | None: Parsed snapshot, ``None`` when not supplied.

        Raises:
            typer.BadParameter: If the snapshot is not valid progress JSON.
        """

        if self.progress is None:
            return None
        try:
            return BuildProgress.model_validate_json(self.progress)
        except ValidationError as exc:
            raise typer.BadParameter(f"invalid build progress: {exc}", param_hint="--progress") from exc

    def deadline(self) -> float | None:
        """Return the monotonic deadline implied by ``--timeout``."""

        return None if self.timeout is None else time.monotonic() + self.timeout


def _serve(
    pipeline: DiagnosticPipeline,
    source: JsonLinesSource,
    options: PageCLIOptions,
    cursor: str | None,
) -> Response:
    response = pipeline.run(options.request(cursor), source, deadline=options.deadline())
    LOGGER.debug("envelope_tokens=%d token_count=%d", estimate_response_tokens(response), response.token_count)
    typer.echo(response.model_dump_json())
    return response


def _prepare(options: PageCLIOptions, *, verbose: bool) -> tuple[DiagnosticPipeline, JsonLinesSource]:
    configure_logging(verbose=verbose)
    settings: PipelineSettings = load_settings(options.root)
    source = JsonLinesSource(options.source, build_progress=options.build_progress())
    return DiagnosticPipeline(settings=settings), source


@app.command("page")
def page_command(
    source: SourceArg,
    max_diagnostics: MaxDiagnosticsOpt = None,
    cursor: Annotated[str | None, typer.Option("--cursor", help="Cursor returned by the previous page.")] = None,
    severity: SeverityOpt = None,
    file_pattern: FilePatternOpt = None,
    token_limit: TokenLimitOpt = None,
    progress: ProgressOpt = None,
    root: RootOpt = Path("."),
    timeout: TimeoutOpt = None,
    verbose: VerboseOpt = False,
    use_emoji: EmojiOpt = True,
) -> None:
    """Print one budgeted page of diagnostics as JSON.

    Raises:
        typer.Exit: Raised with status 2 when the request or source is invalid.
    """

    options = PageCLIOptions(
        source=source,
        max_diagnostics=max_diagnostics,
        severity=severity,
        file_pattern=file_pattern,
        token_limit=token_limit,
        progress=progress,
        root=root,
        timeout=timeout,
    )
    try:
        pipeline, diagnostics_source = _prepare(options, verbose=verbose)
        response = _serve(pipeline, diagnostics_source, options, cursor)
    except DiagstreamError as exc:
        fail(str(exc), use_emoji=use_emoji)
        raise typer.Exit(code=ERROR_EXIT_CODE) from exc
    if response.next_cursor is not None:
        info(f"more diagnostics remain; resume with --cursor {response.next_cursor}", use_emoji=use_emoji)


@app.command("drain")
def drain_command(
    source: SourceArg,
    max_diagnostics: MaxDiagnosticsOpt = None,
    severity: SeverityOpt = None,
    file_pattern: FilePatternOpt = None,
    token_limit: TokenLimitOpt = None,
    progress: ProgressOpt = None,
    root: RootOpt = Path("."),
    timeout: TimeoutOpt = None,
    verbose: VerboseOpt = False,
    use_emoji: EmojiOpt = True,
) -> None:
    """Follow cursors until the diagnostics are exhausted, one JSON page per line.

    Raises:
        typer.Exit: Raised with status 2 when the request or source is invalid.
    """

    options = PageCLIOptions(
        source=source,
        max_diagnostics=max_diagnostics,
        severity=severity,
        file_pattern=file_pattern,
        token_limit=token_limit,
        progress=progress,
        root=root,
        timeout=timeout,
    )
    pages = 0
    returned = 0
    try:
        pipeline, diagnostics_source = _prepare(options, verbose=verbose)
        cursor: str | None = None
        while True:
            response = _serve(pipeline, diagnostics_source, options, cursor)
            pages += 1
            returned += response.summary.returned_diagnostics
            if response.next_cursor is None:
                break
            cursor = response.next_cursor
    except DiagstreamError as exc:
        fail(str(exc), use_emoji=use_emoji)
        raise typer.Exit(code=ERROR_EXIT_CODE) from exc
    if response.truncated:
        warn("stopped early: the next diagnostic does not fit in the token limit", use_emoji=use_emoji)
    ok(f"served {returned} diagnostic(s) across {pages} page(s)", use_emoji=use_emoji)


__all__ = ["app"]
