"""Line-per-request logging for running without the dashboard."""

from rich.console import Console
from rich.text import Text

from ui.log_utils import format_headers, write_cli_log


class ConsoleLogger:
    """Print one console line per exchange and mirror it to the CLI log."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def log_request(
        self,
        operation: str,
        status: int,
        target: str,
        *,
        byte_count: int | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        suffix = f" (bytes={byte_count})" if byte_count is not None else ""
        style = "green" if 200 <= status < 300 else "yellow"
        self._print(operation, status, f"{target}{suffix}", style)
        write_cli_log(
            operation.upper(),
            f"{status} {target}",
            bytes=byte_count,
            headers=format_headers(headers),
        )

    def log_rejected(
        self,
        operation: str,
        status: int,
        message: str,
        *,
        target: str | None = None,
    ) -> None:
        line = f"{message} {target}" if target else message
        self._print(operation, status, line, "yellow")
        write_cli_log("REJECT", message, operation=operation, status=status, target=target)

    def log_error(
        self,
        operation: str,
        status: int,
        message: str,
        *,
        detail: str | None = None,
    ) -> None:
        self._print(operation, status, message, "red")
        write_cli_log("ERROR", message[:200], operation=operation, status=status)
        if detail:
            self.console.print(Text(detail.rstrip(), style="dim"))
            write_cli_log("TRACE", detail.rstrip().replace("\n", " | "))

    def _print(self, operation: str, status: int, message: str, style: str) -> None:
        line = Text(f"[{operation}] ")
        line.append(str(status), style=style)
        line.append(f" {message}")
        self.console.print(line)
