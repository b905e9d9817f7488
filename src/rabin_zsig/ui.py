from contextlib import contextmanager
from typing import Iterator, Optional

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from rabin_zsig.algorithm.verify import BenchmarkResult, ProgressFn
from rabin_zsig.snapshot import ScenarioResult
from rabin_zsig.utils import to_hex

COLORS = {
    "group": "cyan",
    "element": "green",
    "signature": "bright_red",
    "timing": "yellow",
}


def get_console() -> Console:
    return Console(stderr=True)


def render(result: ScenarioResult, benchmark: Optional[BenchmarkResult] = None) -> Table:
    """Summary table of a run: hex for numbers, decimal for flags and timing."""
    table = Table(title="Rabin signature run", show_lines=False)
    table.add_column("Value", justify="right", no_wrap=True)
    table.add_column("Bits", justify="right")
    table.add_column("Hex / Decimal", overflow="fold")

    group = result.group
    for name, value in (("p", group.p), ("q", group.q), ("n", group.n), ("u", group.u), ("v", group.v)):
        table.add_row(name, str(abs(value).bit_length()), f"[{COLORS['group']}]{to_hex(value)}[/{COLORS['group']}]")

    table.add_row("e", str(result.element.bit_length()), f"[{COLORS['element']}]{to_hex(result.element)}[/{COLORS['element']}]")
    table.add_row("residue state", "", str(result.residue_state))
    table.add_row("tweaks", "", f"2:{int(result.tweak.mul_2)} -:{int(result.tweak.negate)}")
    table.add_row("tweaked e", str(result.tweaked_element.bit_length()), f"[{COLORS['element']}]{to_hex(result.tweaked_element)}[/{COLORS['element']}]")
    table.add_row("root", "", str(result.root_index))
    table.add_row("sig", str(result.signature.bit_length()), f"[{COLORS['signature']}]{to_hex(result.signature)}[/{COLORS['signature']}]")
    table.add_row("zsig", str(result.zsig.bit_length()), f"[{COLORS['signature']}]{to_hex(result.zsig)}[/{COLORS['signature']}]")

    if benchmark is not None:
        table.add_row("verifications", "", str(benchmark.iterations))
        table.add_row("verify time (s)", "", f"[{COLORS['timing']}]{benchmark.elapsed_seconds:f}[/{COLORS['timing']}]")
        table.add_row("per verification (µs)", "", f"[{COLORS['timing']}]{benchmark.per_verification_us:.3f}[/{COLORS['timing']}]")

    return table


@contextmanager
def benchmark_progress(console: Console, iterations: int, enabled: bool = True) -> Iterator[Optional[ProgressFn]]:
    """Yield a progress callback bound to a rich progress bar, or None when disabled."""
    if not enabled:
        yield None
        return

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(bar_width=30),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
    with progress:
        task = progress.add_task("Verifying", total=iterations)
        yield lambda done: progress.update(task, completed=done)
