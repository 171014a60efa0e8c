# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Typer application factory emitting sorted option listings."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import typer
from click import Context, HelpFormatter, Parameter
from typer.core import TyperCommand, TyperGroup

CommandCallback = TypeVar("CommandCallback", bound=Callable[..., Any])


def _sort_key(param: Parameter) -> str:
    """Return the long option name of ``param`` without dashes, lowercased."""

    names = [*getattr(param, "opts", ()), *getattr(param, "secondary_opts", ())]
    long_names = [name for name in names if name.startswith("--")]
    candidate = long_names[0] if long_names else (names[0] if names else param.name or "")
    return candidate.lstrip("-").lower()


class SortedTyperCommand(TyperCommand):
    """Typer command listing arguments first, then options alphabetically."""

    def format_options(self, ctx: Context, formatter: HelpFormatter) -> None:
        arguments: list[tuple[str, str]] = []
        options: list[tuple[str, tuple[str, str]]] = []
        for param in self.get_params(ctx):
            record = param.get_help_record(ctx)
            if record is None:
                continue
            if param.param_type_name == "argument":
                arguments.append(record)
            else:
                options.append((_sort_key(param), record))
        if arguments:
            with formatter.section("Arguments"):
                formatter.write_dl(arguments)
        if options:
            with formatter.section("Options"):
                formatter.write_dl([record for _, record in sorted(options, key=lambda item: item[0])])


class SortedTyperGroup(TyperGroup):
    """Typer group that defaults to :class:`SortedTyperCommand`."""

    command_class = SortedTyperCommand


class SortedTyper(typer.Typer):
    """Typer application registering commands with sorted help output."""

    def __init__(self, *args: Any, cls: type[TyperGroup] | None = None, **kwargs: Any) -> None:
        super().__init__(*args, cls=cls or SortedTyperGroup, **kwargs)

    def command(
        self,
        name: str | None = None,
        *,
        cls: type[TyperCommand] | None = None,
        **kwargs: Any,
    ) -> Callable[[CommandCallback], CommandCallback]:
        return super().command(name, cls=cls or SortedTyperCommand, **kwargs)


def create_typer(**kwargs: Any) -> SortedTyper:
    """Return a :class:`SortedTyper` configured with ``kwargs``.

    Args:
        **kwargs: Arguments forwarded to :class:`typer.Typer`.

    Returns:
        SortedTyper: Configured Typer application.
    """

    return SortedTyper(**kwargs)


__all__ = ["SortedTyper", "SortedTyperCommand", "SortedTyperGroup", "create_typer"]
