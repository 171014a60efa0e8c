# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing console helpers with optional colour and emoji support.

Everything here writes to stderr so that stdout carries nothing but response
JSON.
"""

from __future__ import annotations

import logging
import sys
from functools import lru_cache
from typing import Final, Literal

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

_LOG_FORMAT: Final[str] = "%(name)s: %(message)s"


def detect_tty() -> bool:
    """Return ``True`` when stderr appears to be backed by a terminal.

    Returns:
        bool: ``True`` when ``sys.stderr`` reports TTY support.
    """

    try:
        return sys.stderr.isatty()
    except (AttributeError, ValueError):
        return False


@lru_cache(maxsize=8)
def get_console(*, color: bool, emoji: bool) -> Console:
    """Return a stderr console configured for ``color`` and ``emoji``.

    Args:
        color: ``True`` when ANSI colour output should be enabled.
        emoji: ``True`` when Rich should render emoji glyphs.

    Returns:
        Console: Cached console matching the preferences.
    """

    color_system: Literal["auto"] | None = "auto" if color else None
    return Console(stderr=True, color_system=color_system, no_color=not color, emoji=emoji, soft_wrap=True)


def emoji(symbol: str, enable: bool) -> str:
    """Return ``symbol`` when emoji output is enabled, otherwise blank."""

    return symbol if enable else ""


def _print_line(msg: str, *, style: str, use_emoji: bool, use_color: bool | None) -> None:
    color_enabled = detect_tty() if use_color is None else use_color
    console = get_console(color=color_enabled, emoji=use_emoji)
    text = Text(msg)
    if color_enabled:
        text.stylize(style)
    console.print(text)


def info(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an informational message.

    Args:
        msg: Message text to display.
        use_emoji: Flag indicating whether emoji output is desired.
        use_color: Optional explicit colour flag overriding TTY detection.
    """

    _print_line(f"{emoji('ℹ️ ', use_emoji)}{msg}", style="cyan", use_emoji=use_emoji, use_color=use_color)


def ok(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit a success message."""

    _print_line(f"{emoji('✅ ', use_emoji)}{msg}", style="green", use_emoji=use_emoji, use_color=use_color)


def warn(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit a warning message."""

    _print_line(f"{emoji('⚠️ ', use_emoji)}{msg}", style="yellow", use_emoji=use_emoji, use_color=use_color)


def fail(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an error message.

    Args:
        msg: Message text to display.
        use_emoji: Flag indicating whether emoji output is desired.
        use_color: Optional explicit colour flag overriding TTY detection.
    """

    _print_line(f"{emoji('❌ ', use_emoji)}{msg}", style="red", use_emoji=use_emoji, use_color=use_color)


def configure_logging(*, verbose: bool, use_color: bool | None = None) -> None:
    """Route library log records through a Rich handler on stderr.

    Args:
        verbose: ``True`` to include debug records.
        use_color: Optional explicit colour flag overriding TTY detection.
    """

    color_enabled = detect_tty() if use_color is None else use_color
    handler = RichHandler(
        console=get_console(color=color_enabled, emoji=False),
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger = logging.getLogger("diagstream")
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


__all__ = ["configure_logging", "detect_tty", "emoji", "fail", "get_console", "info", "ok", "warn"]
