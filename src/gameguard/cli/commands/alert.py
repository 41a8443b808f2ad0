# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""CLI commands for alert sink testing."""

from __future__ import annotations

import asyncio

import typer

app = typer.Typer(
    name="alert",
    help="Manage and test the alert sink",
    no_args_is_help=True,
)


@app.command()
def test() -> None:
    """Send a test alert through the configured sink."""
    ok = asyncio.run(_async_test())
    if not ok:
        raise typer.Exit(1)


async def _async_test() -> bool:
    from rich.console import Console

    from gameguard.alerting.factory import build_dispatcher
    from gameguard.core.config import get_settings

    console = Console()
    dispatcher = build_dispatcher(get_settings())

    if dispatcher.sink is None:
        console.print("[yellow]No alert sink configured; the alert is logged only.[/yellow]")
        console.print("Set GAMEGUARD_SLACK_WEBHOOK_URL or GAMEGUARD_ALERT_WEBHOOK_URL.")

    ok = await dispatcher.alert_info(
        "Test Alert", "gameguard alert sink test", {"source": "cli"}
    )
    if ok:
        console.print(f"[green]Alert delivered[/green] via {dispatcher.sink.name if dispatcher.sink else 'log'}")
    else:
        console.print("[red]Alert delivery failed[/red]")
    return ok
