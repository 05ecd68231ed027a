# Console and logging helpers shared by the routing, engine and API layers of Switchboard.
# Date: 2026-10-17
# Version: 0.1.0

import logging
from typing import Iterable

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

LOGGER_NAME = "Switchboard"

_THEME = Theme({
    "logging.level.success": "bold green",
    "agent": "bold magenta",
    "tool.ok": "green",
    "tool.failed": "red",
})


class ConsoleManager:
    """
    Process-wide console for Switchboard.

    Log records go through a named stdlib logger rendered by Rich on stderr, so
    the NDJSON stream on stdout (when served) is never interleaved with logs.
    """
    def __init__(self, name: str = LOGGER_NAME):
        self._console = Console(theme=_THEME, stderr=True)
        self._logger = logging.getLogger(name)
        if not self._logger.handlers:
            handler = RichHandler(
                console=self._console,
                rich_tracebacks=True,
                tracebacks_show_locals=False,
                keywords=["INFO", "SUCCESS", "WARNING", "ERROR", "DEBUG"],
                show_path=False,
            )
            handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
            self._logger.addHandler(handler)
            self._logger.setLevel(logging.INFO)
            self._logger.propagate = False

    def set_level(self, level: str):
        self._logger.setLevel(level.upper())

    def debug(self, message: str):
        self._logger.debug(message)

    def info(self, message: str):
        self._logger.info(message)

    def success(self, message: str):
        self._logger.log(SUCCESS_LEVEL_NUM, message)

    def warning(self, message: str):
        self._logger.warning(message)

    def error(self, message: str):
        self._logger.error(message)

    def exception(self, message: str):
        self._logger.exception(message)

    def rule(self, title: str, style: str = "cyan"):
        if self._logger.isEnabledFor(logging.INFO):
            self._console.rule(f"[bold {style}]{title}[/bold {style}]", style=style)

    def routed(self, agent_name: str, source: str):
        """Logs which agent took the turn and whether routing was manual or automatic."""
        self._logger.info(f"Routed to [agent]{agent_name}[/agent] ({source}).", extra={"markup": True})

    def tool_results(self, rows: Iterable[tuple]):
        """
        Prints one table row per executed call.

        Args:
            rows: (call_id, tool_name, ok, summary) tuples in call order.
        """
        if not self._logger.isEnabledFor(logging.DEBUG):
            return
        table = Table(title="Tool results", show_lines=False)
        table.add_column("Call")
        table.add_column("Tool")
        table.add_column("Status")
        table.add_column("Summary", overflow="fold")
        for call_id, tool_name, ok, summary in rows:
            status = "[tool.ok]ok[/tool.ok]" if ok else "[tool.failed]failed[/tool.failed]"
            table.add_row(call_id, tool_name, status, summary[:120])
        self._console.print(table)

    def display_error_panel(self, title: str, error_message: str):
        panel = Panel(error_message, title=f"[bold red]{title}[/bold red]", border_style="red")
        self._console.print(panel)


console = ConsoleManager()
