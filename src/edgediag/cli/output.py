"""Rich console output for diagnose runs"""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from ..core.diagnostics.models import CheckResult
from ..core.diagnostics.report import Reporter


class ConsoleReporter(Reporter):
    """Prints diagnose progress with status marks and a final banner."""

    def __init__(self, console: Console = None):
        self.console = console or Console(highlight=False)

    def step(self, result: CheckResult) -> None:
        self.line(result.passed, result.message)

    def line(self, ok: bool, text: str) -> None:
        super().line(ok, text)
        icon = "[green]✓[/green]" if ok else "[red]✗[/red]"
        self.console.print(f"  {icon} {escape(text)}")

    def error(self, message: str) -> None:
        super().error(message)
        self.console.print(f"[bold red]Error:[/bold red] {escape(message)}")

    def banner(self, use: str, passed: bool) -> None:
        super().banner(use, passed)
        if passed:
            self.console.print(Panel(f"[bold green]diagnose {use} succeeded[/bold green]",
                                     expand=False, border_style="green"))
        else:
            self.console.print(Panel(f"[bold red]diagnose {use} failed[/bold red]",
                                     expand=False, border_style="red"))
