# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""CLI commands for detection profiles."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

app = typer.Typer(
    name="profile",
    help="Inspect and validate detection profiles",
    no_args_is_help=True,
)


@app.command()
def validate(
    path: Annotated[Path, typer.Argument(help="YAML detection profile to validate")],
) -> None:
    """Load a detection profile and print what it overrides."""
    from rich.console import Console
    from rich.table import Table

    from gameguard.core.exceptions import ConfigurationError
    from gameguard.detectors.profile import load_detection_profile

    console = Console()
    try:
        profile = load_detection_profile(path)
    except ConfigurationError as exc:
        console.print(f"[red]Invalid profile:[/red] {exc}")
        raise typer.Exit(1) from exc

    if profile.patterns is not None:
        table = Table(title="Suspicious Sequences")
        table.add_column("Name", style="cyan")
        table.add_column("Events")
        table.add_column("Window (s)", justify="right")
        table.add_column("Score", justify="right")
        for seq in profile.patterns:
            table.add_row(seq.name, " > ".join(seq.events), f"{seq.window_seconds:g}", f"{seq.score:g}")
        console.print(table)

    if profile.anomaly_thresholds is not None:
        table = Table(title="Anomaly Thresholds")
        table.add_column("Event Type", style="cyan")
        table.add_column("Threshold", justify="right")
        for event_type, threshold in profile.anomaly_thresholds.items():
            table.add_row(event_type, str(threshold))
        console.print(table)

    console.print(f"[green]Profile OK:[/green] {path}")
