"""Root Typer app and command registration."""

from __future__ import annotations

import typer

from option_inquiry_cli import inquiry
from option_inquiry_cli._common import CLIState, build_typer, configure_logging, load_config

app = build_typer(
    """Option inquiry command-line interface.

    Examples:
      option-inquiry quote 600519 --workbook quotes.json --tenor 1M
      option-inquiry quote 600000 --side put --structure custom --strike 12.5
      option-inquiry sheets quotes.json
    """
)

app.add_typer(inquiry.app)


@app.callback()
def root(ctx: typer.Context) -> None:
    cfg = load_config()
    configure_logging(cfg)
    ctx.obj = CLIState(config=cfg)


def run() -> None:
    app()
