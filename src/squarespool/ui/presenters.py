from __future__ import annotations

from collections.abc import Mapping, Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..core.models import AxisSet
from ..core.secure_roll import BetSettlement
from ..core.sports import SportSchedule


class RichPresenter:
    def __init__(self, *, no_color: bool = False, console: Console | None = None):
        if console is not None:
            self.console = console
        elif no_color:
            self.console = Console(force_terminal=False, color_system=None)
        else:
            self.console = Console(force_terminal=True, color_system="auto")

    def show_axis_set(self, axis_set: AxisSet, labels: Mapping[str, str] | None = None) -> None:
        table = Table(title="Grid digits", box=box.SIMPLE_HEAVY)
        table.add_column("Checkpoint", style="bold cyan")
        table.add_column("Rows")
        table.add_column("Cols")
        for key in axis_set.keys():
            pair = axis_set[key]
            label = (labels or {}).get(key, key.upper())
            table.add_row(label, " ".join(map(str, pair.rows)), " ".join(map(str, pair.cols)))
        self.console.print(table)
        self.console.print(f"[dim]Generated {axis_set.generated_at.isoformat()}[/]")

    def show_payouts(self, pot: float, schedule: SportSchedule, payouts: Mapping[str, int]) -> None:
        table = Table(title=f"{schedule.category.value.title()} payouts", box=box.SIMPLE_HEAVY)
        table.add_column("Checkpoint", style="bold cyan")
        table.add_column("Share", justify="right")
        table.add_column("Payout", justify="right", style="green")
        for period in schedule.periods:
            table.add_row(schedule.label(period), f"{schedule.fraction(period):.0%}", f"{payouts[period]:,}")
        self.console.print(table)
        remainder = pot - sum(payouts.values())
        if remainder:
            self.console.print(f"[yellow]Unallocated remainder:[/] {remainder:,.2f}")

    def show_roll(self, animals: Sequence[str], settlement: BetSettlement | None = None) -> None:
        body = "  ".join(animal.upper() for animal in animals)
        if settlement is not None:
            body += (
                f"\n\nReturned: {settlement.stake_returned:,}  Won: {settlement.winnings:,}"
                f"  Lost: {settlement.stake_lost:,}\n[bold]Payout: {settlement.payout:,}[/]"
            )
        self.console.print(Panel(body, title="Bau Cua", border_style="magenta", expand=False))
