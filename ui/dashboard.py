"""Real-time CLI dashboard for relay monitoring."""

from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import format_headers, write_cli_log

console = Console()


class ExchangeInfo:
    """Info about a single relayed exchange."""

    def __init__(
        self,
        operation: str,
        status: int,
        target: str,
        byte_count: int | None,
        timestamp: datetime,
    ):
        self.operation = operation
        self.status = status
        self.target = target[:80] + "..." if len(target) > 80 else target
        self.byte_count = byte_count
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing recent fetches and uploads."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._exchanges: list[ExchangeInfo] = []
        self._max_exchanges = 10
        self._request_count = {"fetch": 0, "upload": 0, "rejected": 0, "error": 0}
        self._errors: list[str] = []
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_request(
        self,
        operation: str,
        status: int,
        target: str,
        *,
        byte_count: int | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Log a completed upstream exchange."""
        with self._lock:
            self._request_count[operation] = self._request_count.get(operation, 0) + 1
            info = ExchangeInfo(operation, status, target, byte_count, datetime.now())
            self._exchanges.insert(0, info)
            self._exchanges = self._exchanges[: self._max_exchanges]

            write_cli_log(
                operation.upper(),
                f"{status} {target}",
                bytes=byte_count,
                headers=format_headers(headers),
            )
            self._refresh()

    def log_rejected(
        self,
        operation: str,
        status: int,
        message: str,
        *,
        target: str | None = None,
    ) -> None:
        """Log a request refused before any outbound call."""
        with self._lock:
            self._request_count["rejected"] += 1
            write_cli_log("REJECT", message, operation=operation, status=status, target=target)
            self._refresh()

    def log_error(
        self,
        operation: str,
        status: int,
        message: str,
        *,
        detail: str | None = None,
    ) -> None:
        """Log a relay failure."""
        with self._lock:
            self._request_count["error"] += 1
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{operation} {status}: {truncated}")
            self._errors = self._errors[:3]
            write_cli_log("ERROR", message[:200], operation=operation, status=status)
            if detail:
                write_cli_log("TRACE", detail.rstrip().replace("\n", " | "))
            self._refresh()

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["header"].update(self._build_header())
        layout["body"].update(self._build_exchanges_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("APS Relay", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Fetch: {self._request_count['fetch']}", style="blue")
        stats.append("  |  ")
        stats.append(f"Upload: {self._request_count['upload']}", style="magenta")
        stats.append("  |  ")
        stats.append(f"Rejected: {self._request_count['rejected']}", style="yellow")
        stats.append("  |  ")
        stats.append(f"Errors: {self._request_count['error']}", style="red")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.server.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_exchanges_panel(self) -> Panel:
        """Build the recent exchanges table."""
        if self._exchanges:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Op", width=6)
            table.add_column("Status", width=6)
            table.add_column("Bytes", width=10)
            table.add_column("Target", ratio=1)

            for ex in self._exchanges:
                status_style = "green" if 200 <= ex.status < 300 else "red"
                table.add_row(
                    ex.timestamp.strftime("%H:%M:%S"),
                    ex.operation,
                    Text(str(ex.status), style=status_style),
                    "" if ex.byte_count is None else str(ex.byte_count),
                    Text(ex.target),
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[blue]Recent exchanges[/blue]", border_style="blue")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            base = f"http://{self.config.server.host}:{self.config.server.port}"
            content = Text(
                f"POST {base}/fetch?url=...  (downloads)\n"
                f"POST {base}/upload?url=... (uploads)",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
