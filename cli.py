"""CLI entry point for aps-relay."""

import sys
from datetime import datetime

from rich.console import Console

from app import create_app
from core.config import CONFIG_FILE, Config, load_config
from ui.console_logger import ConsoleLogger
from ui.dashboard import Dashboard
from ui.log_utils import clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    config = load_config()
    plain = False

    # Handle CLI arguments
    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg == "--config":
            _print_config(config)
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

        if arg == "--plain":
            plain = True
        else:
            console.print(f"[red][ERROR][/red] Unknown argument: {arg}")
            _print_help()
            sys.exit(2)

    clear_logs()
    dashboard = None
    if plain:
        logger = ConsoleLogger(console)
        _print_banner(config)
    else:
        dashboard = Dashboard(config)
        logger = dashboard

    import uvicorn

    app = create_app(config, logger)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level="warning",
        timeout_keep_alive=config.server.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    if dashboard:
        dashboard.start()
    start_time = datetime.now()
    write_cli_log("STARTUP", "Relay started", host=config.server.host, port=config.server.port)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Relay stopped", duration=str(duration))
        if dashboard:
            dashboard.stop()


def _print_banner(config: Config):
    """Print listening address and endpoints."""
    base = f"http://{config.server.host}:{config.server.port}"
    console.print(f"[green]aps-relay running on {base}[/green]")
    console.print("   POST /fetch?url=...  (downloads)")
    console.print("   POST /upload?url=... (uploads)")


def _print_config(config: Config):
    """Print config location and effective policy."""
    console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
    console.print(f"[bold]Listen:[/bold] {config.server.host}:{config.server.port}")
    console.print(f"[bold]Allowed hosts:[/bold] {', '.join(config.relay.allowed_host_suffixes)}")
    console.print(f"[bold]Forwarded headers:[/bold] {', '.join(config.relay.forwarded_headers)}")
    console.print(f"[bold]Timeout:[/bold] {config.relay.timeout_seconds}s")


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]APS Relay[/bold cyan]

Forwards browser downloads and uploads to Autodesk Platform Services and its
storage redirect targets, bypassing CORS.

[bold]Usage:[/bold]
    aps-relay              Start with live dashboard
    aps-relay --plain      Start with one log line per request
    aps-relay --config     Show config location and policy
    aps-relay --help       Show this help

[bold]Endpoints:[/bold]
    POST /fetch?url=<target>     GET the target, stream the body back
    POST /upload?url=<target>    PUT the request body to the target
    Forwarded headers go in X-Extra-Headers as a JSON object.
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
