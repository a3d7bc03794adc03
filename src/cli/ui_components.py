"""CLI UI components (Rich).

Why separate components:
- Keeps command logic apart from visual details.
- Spinner and summary rendering stay testable on their own.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.status import Status
from rich.table import Table

from core.services.population_pipeline import PipelineHooks, PipelineResult


class StepSpinner:
    """Shows one spinner per pipeline step: `<step>...` then `<step> OK`.

    Remembers the step in progress so errors can name it.
    """

    def __init__(self, console: Console, *, silent: bool = False) -> None:
        self._console = console
        self._silent = silent
        self._status: Status | None = None
        self.description: str | None = None

    def start(self, _step: str, description: str) -> None:
        self.description = description
        if self._silent:
            return
        self._stop()
        self._status = self._console.status(f"{description}...")
        self._status.start()

    def succeed(self, _step: str, description: str) -> None:
        self._stop()
        if not self._silent:
            self._console.print(f"[green]✔[/green] {escape(description)} OK")

    def fail(self, message: str) -> None:
        self._stop()
        step = escape(self.description or "Bootstrapping")
        self._console.print(f"[red]✖ ERROR {step}:[/red] {escape(message)}")

    def hooks(self) -> PipelineHooks:
        return PipelineHooks(step_start=self.start, step_end=self.succeed)

    def _stop(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None


def build_summary_table(result: PipelineResult) -> Table:
    """Table summarizing a population run."""

    table = Table(title="Population summary")
    table.add_column("Collection", style="cyan", no_wrap=True)
    table.add_column("Collection ID", style="white")
    table.add_column("Items", style="green", justify="right")
    table.add_column("Schemas fetched", style="magenta", justify="right")
    table.add_column("Output", style="white")
    shape = "mapping" if isinstance(result.output, dict) else "list"
    table.add_row(
        result.collection.name,
        result.collection.id,
        str(result.item_count),
        str(result.schema_fetches),
        shape,
    )
    return table
