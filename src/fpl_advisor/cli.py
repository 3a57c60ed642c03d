"""
FPL Advisor Command Line Interface.

Built with Typer for a modern, type-safe CLI experience.
"""

import logging

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .api import DataUnavailableError, FPLPrivateTeamError, SyncFPLClient
from .config import get_settings
from .data.models import Snapshot
from .optimizer import (
    InfeasibleDraftError,
    Lineup,
    Mode,
    NoManagerError,
    SquadAdvisor,
    create_advisor,
    squad_violations,
)
from .predictions import fixture_badge, gameweek_fixture_counts

app = typer.Typer(
    name="fpl-advisor",
    help="Fantasy Premier League Advisor - transfers, lineups and chips for your squad",
    add_completion=True,
    rich_markup_mode="rich",
)

console = Console()
logger = logging.getLogger(__name__)

POSITION_NAMES = {1: "GK", 2: "DEF", 3: "MID", 4: "FWD"}


@app.callback()
def main_callback(
    log_level: str = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
) -> None:
    """
    FPL Advisor - squad optimization for Fantasy Premier League.

    Every command reads live data from the public FPL API.
    """
    settings = get_settings()
    logging.basicConfig(
        level=(log_level or settings.app.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def load_advisor(
    manager_id: int | None,
    mode: Mode,
    auto: bool,
    require_manager: bool = True,
) -> SquadAdvisor:
    """Fetch a snapshot and build an advisor, exiting with a message on failure."""
    settings = get_settings()
    if not manager_id and settings.has_manager():
        manager_id = settings.fpl.manager_id

    if require_manager and not manager_id:
        console.print(
            "[yellow]No manager ID. Pass --manager-id or set FPL__MANAGER_ID in .env[/yellow]"
        )
        raise typer.Exit(1)

    client = SyncFPLClient(timeout=settings.fpl.timeout, max_retries=settings.fpl.max_retries)
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task("Fetching FPL data...", total=None)
            snapshot: Snapshot = client.fetch_snapshot(manager_id or None)
    except FPLPrivateTeamError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        console.print("[yellow]Make the team public or use another manager ID[/yellow]")
        raise typer.Exit(1)
    except DataUnavailableError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)

    if require_manager and snapshot.manager is None:
        console.print("[red]Error: could not load the manager's squad[/red]")
        raise typer.Exit(1)

    if snapshot.manager is not None:
        for problem in squad_violations(snapshot.manager, snapshot.players_by_id()):
            console.print(f"[yellow]Warning: {problem}[/yellow]")

    return create_advisor(
        snapshot,
        settings=settings.engine,
        chip_settings=settings.chips,
        mode=mode,
        auto=auto,
    )


def print_lineup(lineup: Lineup, advisor: SquadAdvisor, title: str) -> None:
    counts = gameweek_fixture_counts(advisor.snapshot.fixtures, advisor.gameweek)

    table = Table(title=f"{title} ({lineup.label})")
    table.add_column("Pos", style="cyan")
    table.add_column("Player", style="white")
    table.add_column("Proj", style="green", justify="right")
    table.add_column("", style="yellow")

    for c in lineup.starters:
        role = " (C)" if c.player_id == lineup.captain_id else ""
        role = " (VC)" if c.player_id == lineup.vice_captain_id else role
        table.add_row(
            POSITION_NAMES[c.position],
            f"{c.name}{role}",
            f"{c.score:.2f}",
            fixture_badge(c.team_id, counts),
        )
    table.add_section()
    for c in lineup.bench:
        table.add_row(
            f"[dim]{POSITION_NAMES[c.position]}[/dim]",
            f"[dim]{c.name}[/dim]",
            f"[dim]{c.score:.2f}[/dim]",
            fixture_badge(c.team_id, counts),
        )

    console.print(table)
    console.print(
        f"XI total: [green]{lineup.total:.2f}[/green]  Bench: {lineup.bench_total:.2f}"
    )


@app.command()
def transfers(
    manager_id: int = typer.Option(None, "--manager-id", "-m", help="FPL manager ID"),
    mode: Mode = typer.Option(Mode.DEFAULT, "--mode", help="Engine preset"),
    auto: bool = typer.Option(False, "--auto/--no-auto", help="Tune settings to your squad"),
    explain: bool = typer.Option(False, "--explain", "-e", help="Explain each move"),
) -> None:
    """
    Suggest transfer plans for the next gameweek.

    Shows plans A (hold) to D (three moves) and the recommended one.
    """
    advisor = load_advisor(manager_id, mode, auto)
    advice = advisor.advise_transfers()

    console.print(
        Panel(
            f"[bold blue]Transfer Plans - GW{advisor.gameweek}[/bold blue]\n"
            f"Bank {advice.bank:.1f}m | Free transfers {advice.free_transfers}",
            style="blue",
        )
    )

    table = Table(title="Plans")
    table.add_column("Plan", style="cyan")
    table.add_column("Moves", style="white")
    table.add_column("Raw", justify="right")
    table.add_column("Hit", justify="right", style="red")
    table.add_column("Net", justify="right", style="green")

    for key, plan in advice.plans.items():
        moves = "\n".join(f"{m.out_name} -> {m.in_name}" for m in plan.moves) or "-"
        marker = " *" if key == advice.recommended else ""
        table.add_row(
            f"{key}{marker}",
            moves,
            f"{plan.raw_delta:+.2f}",
            f"-{plan.hit_cost}" if plan.hit_cost else "0",
            f"{plan.net:+.2f}",
        )
    console.print(table)

    plan = advice.recommended_plan
    if plan.is_empty:
        console.print("\n[yellow]No attractive upgrade; hold your transfer.[/yellow]")
        for note in plan.notes:
            console.print(f"  [dim]{note}[/dim]")
    else:
        console.print(f"\n[green]Recommended: plan {plan.key}[/green]")
        for note in plan.notes:
            console.print(f"  [dim]{note}[/dim]")
        if explain:
            for line in advisor.explain(plan.key):
                if line:
                    console.print(f"  {line}")


@app.command()
def lineup(
    manager_id: int = typer.Option(None, "--manager-id", "-m", help="FPL manager ID"),
    plan: str = typer.Option("A", "--plan", "-p", help="Transfer plan to apply first (A-D)"),
    mode: Mode = typer.Option(Mode.DEFAULT, "--mode", help="Engine preset"),
    auto: bool = typer.Option(False, "--auto/--no-auto", help="Tune settings to your squad"),
) -> None:
    """
    Pick the best XI, bench and captain for the next gameweek.
    """
    if plan.upper() not in ("A", "B", "C", "D"):
        console.print("[red]Plan must be one of A, B, C, D[/red]")
        raise typer.Exit(1)

    advisor = load_advisor(manager_id, mode, auto)
    best = advisor.best_lineup(plan_key=plan)
    if best is None:
        console.print("[red]Your squad cannot fill a legal formation[/red]")
        raise typer.Exit(1)

    print_lineup(best, advisor, f"GW{advisor.gameweek} lineup after plan {plan.upper()}")


@app.command()
def draft(
    manager_id: int = typer.Option(None, "--manager-id", "-m", help="FPL manager ID"),
    budget: float = typer.Option(None, "--budget", "-b", help="Override the derived budget"),
    mode: Mode = typer.Option(Mode.DEFAULT, "--mode", help="Engine preset"),
) -> None:
    """
    Draft a full 15-player squad from scratch under your budget.
    """
    advisor = load_advisor(manager_id, mode, auto=False, require_manager=budget is None)

    try:
        result = advisor.draft(budget).require_complete()
    except InfeasibleDraftError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    console.print(
        Panel(
            f"[bold blue]Drafted Squad[/bold blue]\n"
            f"Spend {result.spend:.1f}m of {result.budget:.1f}m | EV {result.total_ev:.2f}",
            style="blue",
        )
    )
    best = advisor.drafted_lineup(result)
    if best is not None:
        print_lineup(best, advisor, f"GW{advisor.gameweek} drafted XI")


@app.command()
def chips(
    manager_id: int = typer.Option(None, "--manager-id", "-m", help="FPL manager ID"),
    mode: Mode = typer.Option(Mode.DEFAULT, "--mode", help="Engine preset"),
    auto: bool = typer.Option(False, "--auto/--no-auto", help="Tune thresholds to the gameweek"),
) -> None:
    """
    Chip advice for the next gameweek.

    Triple Captain, Bench Boost and Free Hit values, Bench Boost alongside
    each transfer plan, and a Wildcard call.
    """
    advisor = load_advisor(manager_id, mode, auto)

    try:
        rec = advisor.chip_advice()
    except NoManagerError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(Panel(f"[bold]Chip Advice - GW{advisor.gameweek}[/bold]", style="green"))

    if rec is not None:
        table = Table(title="Chip Values")
        table.add_column("Chip", style="cyan")
        table.add_column("Value", justify="right", style="green")
        table.add_column("Threshold", justify="right")
        table.add_column("Available")
        table.add_column("Notes", style="dim")
        for v in rec.chip_values:
            table.add_row(
                v.label,
                f"{v.estimated_value:.2f}",
                f"{v.threshold:.1f}",
                "yes" if v.available else "no",
                " ".join(v.reasoning),
            )
        console.print(table)
        console.print(f"[bold]{rec.reasoning}[/bold]")

    bb = advisor.bench_boost_check()
    if bb.available:
        if bb.best is not None:
            console.print(
                f"\nBench Boost with plan {bb.best.plan_key}: bench EV {bb.best.bench_ev:.1f}"
            )
        else:
            console.print("\nBench Boost: no plan gives a strong enough bench yet")

    wc = advisor.wildcard_advice()
    console.print(f"\n[bold]{wc.recommendation.value}[/bold]")
    for reason in wc.reasons:
        console.print(f"  [dim]{reason}[/dim]")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]FPL Advisor[/bold] v{__version__}")
    console.print("Transfer, lineup and chip advice for Fantasy Premier League")


if __name__ == "__main__":
    app()
