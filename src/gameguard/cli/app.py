# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Typer CLI application root."""

from __future__ import annotations

import asyncio
import random
from typing import Annotated

import typer

from gameguard.cli.commands import alert as alert_cmd
from gameguard.cli.commands import profile as profile_cmd

app = typer.Typer(
    name="gameguard",
    help="Tiered real-time anti-cheat event pipeline",
    no_args_is_help=True,
)

app.add_typer(profile_cmd.app, name="profile", help="Inspect and validate detection profiles")
app.add_typer(alert_cmd.app, name="alert", help="Manage and test the alert sink")

# Endpoint -> event type emitted after an allowed request
_TRAFFIC: tuple[tuple[str, str], ...] = (
    ("/api/loot/roll", "LOOT_ROLL"),
    ("/api/combat/attack", "COMBAT_ACTION"),
    ("/api/forge/attempt", "FORGE_ATTEMPT"),
    ("/api/save", "SAVE"),
)

_MAX_DRAIN_ROUNDS = 50


@app.command()
def simulate(
    actors: Annotated[
        int, typer.Option("--actors", "-a", min=1, help="Number of well-behaved actors")
    ] = 5,
    events: Annotated[
        int, typer.Option("--events", "-n", min=0, help="Requests spread over those actors")
    ] = 200,
    burst_actor: Annotated[
        str | None,
        typer.Option("--burst-actor", help="Actor id that fires a loot-roll burst"),
    ] = "cheater",
    seed: Annotated[int, typer.Option("--seed", help="Random seed")] = 7,
    log_level: Annotated[str, typer.Option("--log-level", help="Log level")] = "WARNING",
) -> None:
    """Run synthetic traffic through the pipeline and print the resulting stats."""
    asyncio.run(_async_simulate(actors, events, burst_actor, seed, log_level))


async def _async_simulate(
    actors: int,
    events: int,
    burst_actor: str | None,
    seed: int,
    log_level: str,
) -> None:
    from rich.console import Console
    from rich.table import Table

    from gameguard.core.config import get_settings
    from gameguard.core.constants import Severity
    from gameguard.core.logging import setup_logging
    from gameguard.models.events import RequestContext
    from gameguard.system import SecuritySystem

    console = Console()
    settings = get_settings().model_copy(
        update={
            "bus_drain_interval": 0.05,
            "pattern_analysis_cooldown": 0.0,
            "anomaly_sample_rate": 1.0,
            "log_level": log_level,
        }
    )
    setup_logging(settings.log_level, settings.log_format)

    rng = random.Random(seed)
    system = SecuritySystem(settings, rng=random.Random(seed))
    await system.start()

    actor_ids = [f"player-{i}" for i in range(actors)]
    for actor_id in actor_ids:
        system.register_session(f"sess-{actor_id}", actor_id)

    allowed = denied = 0

    def fire(actor_id: str, endpoint: str, event_type: str) -> None:
        nonlocal allowed, denied
        ctx = RequestContext(actor_id=actor_id, endpoint=endpoint, ip="127.0.0.1")
        result = system.check_request(ctx)
        if result.allowed:
            allowed += 1
            system.emit_event(actor_id, event_type, Severity.LOW, endpoint=endpoint)
        else:
            denied += 1

    try:
        for _ in range(events):
            endpoint, event_type = rng.choice(_TRAFFIC)
            fire(rng.choice(actor_ids), endpoint, event_type)

        if burst_actor:
            for _ in range(40):
                fire(burst_actor, "/api/loot/roll", "LOOT_ROLL")
            for _ in range(settings.violation_threshold + 1):
                system.record_violation(burst_actor)
            fire(burst_actor, "/api/loot/roll", "LOOT_ROLL")

        # Detector alerts are re-emitted onto the bus and can keep it busy
        for _ in range(_MAX_DRAIN_ROUNDS):
            if not system.bus.queue_depth and not system.bus.processing:
                break
            if not await system.bus.drain():
                await asyncio.sleep(0.01)
        await system.compactor.run_compaction()
    finally:
        await system.stop()

    stats = system.get_system_stats()

    table = Table(title="Simulation Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Requests allowed", str(allowed))
    table.add_row("Requests denied", str(denied))
    table.add_row("Sessions", str(stats.sessions))
    table.add_row("Pattern actors", str(stats.pattern_actors))
    table.add_row("Anomaly actors", str(stats.anomaly_actors))
    table.add_row("Dropped events", str(stats.dropped_events))
    table.add_row("Rate limit buckets", str(stats.rate_limit_buckets))
    table.add_row("Active bans", str(stats.active_bans))
    table.add_row("Tracked violations", str(stats.tracked_violations))
    table.add_row("Alerts sent", str(stats.alerting.get("sent", 0)))
    table.add_row("Alerts throttled", str(stats.alerting.get("throttled", 0)))
    console.print(table)

    if burst_actor:
        console.print(
            f"{burst_actor}: pattern score "
            f"{system.pattern_detector.suspicion_score(burst_actor):.1f}, "
            f"anomaly score {system.anomaly_analyzer.anomaly_score(burst_actor):.1f}, "
            f"banned={system.bans.is_banned(burst_actor)}"
        )


@app.command()
def version() -> None:
    """Show version information."""
    from gameguard import __version__

    typer.echo(f"gameguard v{__version__}")
