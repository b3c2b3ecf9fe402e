"""Shared CLI context, rendering, and error helpers."""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
import json
import logging
from typing import Any

import click
import typer
from typer.core import TyperGroup

from option_inquiry.config import AppConfig, load_config
from option_inquiry.exceptions import ErrorCode, QuoteError

HELP_CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 110,
}

__all__ = [
    "CLIState",
    "build_typer",
    "configure_logging",
    "get_state",
    "handle_error",
    "load_config",
    "print_output",
]


@dataclass
class CLIState:
    config: AppConfig


class SuggestionGroup(TyperGroup):
    """Click command group that appends close-match suggestions for unknown commands."""

    def resolve_command(
        self,
        ctx: click.Context,
        args: list[str],
    ) -> tuple[str | None, click.Command | None, list[str]]:
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as exc:
            if args:
                attempted = args[0]
                matches = get_close_matches(attempted, list(self.list_commands(ctx)), n=3, cutoff=0.45)
                if matches:
                    exc.message = f"{exc.message}\n\nDid you mean: {', '.join(matches)}"
            raise


def build_typer(help_text: str) -> typer.Typer:
    return typer.Typer(
        help=help_text,
        cls=SuggestionGroup,
        no_args_is_help=True,
        rich_markup_mode="markdown",
        context_settings=HELP_CONTEXT_SETTINGS,
    )


def get_state(ctx: typer.Context) -> CLIState:
    value = ctx.obj
    if not isinstance(value, CLIState):
        raise RuntimeError("CLI context not initialized")
    return value


def configure_logging(cfg: AppConfig) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if cfg.logging.log_file is not None:
        cfg.logging.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(cfg.logging.log_file, encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, cfg.logging.level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        handlers=handlers,
    )


def print_output(data: Any, *, state: CLIState) -> None:
    out = state.config.output
    separators = None if out.indent is not None else (",", ":")
    print(json.dumps(data, default=str, indent=out.indent, ensure_ascii=out.ensure_ascii, separators=separators))


def handle_error(exc: QuoteError, *, state: CLIState | None = None) -> None:
    suggestion = exc.suggestion or _default_suggestion(exc.code)
    error_payload = exc.to_error_payload()
    if suggestion and "suggestion" not in error_payload:
        error_payload["suggestion"] = suggestion
    ensure_ascii = state.config.output.ensure_ascii if state is not None else False
    print(json.dumps({"ok": False, "error": error_payload}, default=str, ensure_ascii=ensure_ascii, separators=(",", ":")))
    raise typer.Exit(code=exc.exit_code)


def _default_suggestion(code: ErrorCode) -> str | None:
    suggestions = {
        ErrorCode.INVALID_ARGS: "Run `option-inquiry --help` or `<command> --help` for valid usage.",
        ErrorCode.NOT_FOUND: "Check the workbook sheets with `option-inquiry sheets <file>`.",
        ErrorCode.UNSUPPORTED_PRODUCT: "Only vanilla options can be quoted.",
    }
    return suggestions.get(code)
