"""
matter2mqtt-pair CLI - Start the pairing server.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from .config import Config, resolve_config
from .network import get_local_ipv4, render_qr

console = Console()
logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Set up logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler()]
    )


def print_banner(config: Config, url: str, invert: bool = True) -> None:
    """
    Configuration summary followed by a scannable QR code of the URL.

    ``invert`` draws the light modules, which reads as dark-on-light on the
    usual light-on-dark terminal.
    """
    console.print("\n[bold blue]matter2mqtt pairing tool[/bold blue]\n")

    table = Table(show_header=False, box=None)
    table.add_column("Key", style="dim")
    table.add_column("Value")

    table.add_row("Devices file", config.devices_path)
    table.add_row("Storage path", config.storage_path)
    table.add_row("chip-tool", config.chip_tool_path)
    table.add_row("Port", str(config.port))
    table.add_row("TLS", "[green]enabled[/green]" if config.tls_enabled else "disabled")

    console.print(table)

    console.print("\nScan to open:\n")
    # QR goes to stdout untouched; rich markup would mangle the blocks
    click.echo(render_qr(url, invert=invert))
    console.print(f"\nOr point your browser to [cyan]{url}[/cyan]")
    if not config.tls_enabled:
        console.print("[yellow]Note: Camera requires HTTPS on iOS (use --tls)[/yellow]")
    console.print()


@click.command()
@click.option('--devices', help='Path to devices.yaml [env: DEVICES_YAML]')
@click.option('--port', type=int, help='HTTP server port [env: PORT]')
@click.option('--storage', help='chip-tool storage directory [env: STORAGE_PATH]')
@click.option('--chip-tool', 'chip_tool', help='Path to chip-tool binary [env: CHIP_TOOL_PATH]')
@click.option('--tls', is_flag=True, help='Enable HTTPS [env: TLS_ENABLED]')
@click.option('--cert', help='TLS certificate file [env: TLS_CERT]')
@click.option('--key', help='TLS key file [env: TLS_KEY]')
@click.option('--host', help='Address to bind to [env: HOST]')
@click.option('--light-terminal', is_flag=True, help='Draw the QR code for a dark-on-light terminal')
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose output')
def main(
    devices: Optional[str],
    port: Optional[int],
    storage: Optional[str],
    chip_tool: Optional[str],
    tls: bool,
    cert: Optional[str],
    key: Optional[str],
    host: Optional[str],
    light_terminal: bool,
    verbose: bool,
):
    """Pair Matter devices from your phone and register them for matter2mqtt."""
    setup_logging(verbose)

    config = resolve_config(
        devices=devices,
        port=port,
        storage=storage,
        chip_tool=chip_tool,
        tls=tls,
        cert=cert,
        key=key,
        host=host,
    )
    logger.debug(f"Configuration: {config.to_dict()}")

    if config.tls_enabled:
        missing = [p for p in (config.cert_file, config.key_file) if not Path(p).is_file()]
        if missing:
            console.print(f"[red]TLS is enabled but these files are missing: {', '.join(missing)}[/red]")
            sys.exit(1)

    url = config.url_for(get_local_ipv4())
    print_banner(config, url, invert=not light_terminal)

    from .api.server import run_server

    run_server(config, log_level="debug" if verbose else "info")


if __name__ == "__main__":
    main()
