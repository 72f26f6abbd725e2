import logging
from datetime import datetime
from typing import Optional

from rich.console import Console, RenderableType
from rich.rule import Rule
from rich.text import Text

from cHealth.config import Config
from cHealth.formatter import RichFormatter
from cHealth.models import ContainerDescriptor, ResourceUsage, RunSummary


class ReportPrinter:
    """
    Writes the health report. Rendering problems are logged and dropped so they can never change the outcome of a run.
    """

    def __init__(self, config: Config, console: Console = None, error_console: Console = None):
        self.config = config
        self.console = console or Console(highlight=False)
        self.error_console = error_console or Console(stderr=True, highlight=False)
        self.formatter = RichFormatter(config)

    def _print(self, renderable: RenderableType = "", console: Console = None) -> None:
        try:
            (console or self.console).print(renderable)
        except Exception as e:
            logging.warning(f"ReportPrinter - Failed to render report output ({e})")

    def print_header(self, timestamp: Optional[datetime] = None) -> None:
        timestamp = timestamp or datetime.now()
        self._print()
        self._print(Text("🐳 Docker Container Health Report", style="bold"))
        self._print(Text(f"   {timestamp:%Y-%m-%d %H:%M:%S}", style="dim"))

    def print_container(self, descriptor: ContainerDescriptor, usage: Optional[ResourceUsage] = None) -> None:
        try:
            block = self.formatter.get_container_block(descriptor, usage)
        except Exception as e:
            logging.warning(f"ReportPrinter - Failed to format {descriptor.name} ({e})")
            return
        self._print(block)

    def print_not_found(self, container_key: str, reason: str = '') -> None:
        message = Text.assemble(("✖", "red"), "  Container ", (container_key, "bold"), " not found.")
        if reason:
            message.append(f" ({reason})", style="dim")
        self._print(message)

    def print_lookup_failed(self, container_key: str, reason: str = '') -> None:
        message = Text.assemble(("✖", "red"), "  Container ", (container_key, "bold"), " could not be inspected.")
        if reason:
            message.append(f" ({reason})", style="dim")
        self._print(message)

    def print_info(self, message: str) -> None:
        self._print(Text.assemble(("ℹ", "cyan"), f"  {message}"))

    def print_error(self, message: str) -> None:
        self._print(Text.assemble(("Error:", "red"), f" {message}"), console=self.error_console)

    def print_summary(self, summary: RunSummary) -> None:
        self._print()
        self._print(Rule(style="dim"))
        self._print(Text.assemble(("  Summary:", "bold"), f" {summary.total} container(s) checked"))
        if summary.healthy:
            self._print(Text.assemble(("✔", "green"), f"  {summary.healthy} healthy"))
        if summary.warnings:
            self._print(Text.assemble(("⚠", "yellow"),
                                      f"  {summary.warnings} unhealthy (running but failing health checks)"))
        if summary.problems:
            self._print(Text.assemble(("✖", "red"), f"  {summary.problems} not running"))
        self._print()
