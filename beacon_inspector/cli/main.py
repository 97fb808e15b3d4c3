#!/usr/bin/env python3
"""Main CLI entry point for Beacon Inspector using Typer.

Decodes individual beacon URLs, scans files of captured request URLs, and
reports which provider handles a URL.
"""

import logging
import sys
from enum import IntEnum
from pathlib import Path
from typing import Annotated, List, Optional, Tuple

import typer

from .. import __version__
from ..errors import ConfigurationError, UrlParseError
from ..providers import DecoderConfig, ParsedBeacon, get_default_registry, load_config
from .output import BeaconFormatter


logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    """CLI exit codes."""
    SUCCESS = 0
    NO_MATCH = 1
    INVALID_INPUT = 2


# Create the main Typer app
app = typer.Typer(
    name="beacon-inspector",
    help="Beacon Inspector - decode analytics and marketing tag beacons",
    add_completion=False
)


@app.callback()
def main():
    """
    Beacon Inspector - decode analytics and marketing tag beacons.

    Identifies the vendor behind a tracking request and labels each of its
    parameters.
    """
    pass


def _setup_logging(level: str) -> None:
    """Configure logging for CLI runs."""
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s"
    )
    logging.getLogger("beacon_inspector").setLevel(level)


def _load_configuration(config_file: Optional[Path], output_format: Optional[str],
                        verbose: bool) -> DecoderConfig:
    """Load configuration and set up logging, exiting on invalid config."""
    try:
        config = load_config(
            config_file,
            output_format=output_format,
            log_level="DEBUG" if verbose else None
        )
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=ExitCode.INVALID_INPUT)

    _setup_logging(config.log_level)
    return config


def _read_lines(source: str) -> List[str]:
    """Read input lines from a file path, or stdin for ``-``."""
    if source == "-":
        return sys.stdin.read().splitlines()

    path = Path(source)
    if not path.is_file():
        typer.echo(f"Input file not found: {source}", err=True)
        raise typer.Exit(code=ExitCode.INVALID_INPUT)

    return path.read_text(encoding="utf-8").splitlines()


def _parse_scan_line(line: str) -> Optional[Tuple[str, str]]:
    """Split a scan line into URL and optional POST body.

    Lines hold a URL optionally followed by whitespace and a form-encoded
    body. Blank lines and ``#`` comments yield None.
    """
    line = line.strip()
    if not line or line.startswith("#"):
        return None

    parts = line.split(None, 1)
    url = parts[0]
    post_data = parts[1].strip() if len(parts) > 1 else ""
    return url, post_data


@app.command(name="version")
def show_version():
    """Show version information."""
    typer.echo(f"Beacon Inspector v{__version__}")


@app.command()
def decode(
    url: Annotated[
        str,
        typer.Argument(help="Beacon URL to decode")
    ],

    post_data: Annotated[
        Optional[str],
        typer.Option("--post-data", "-d", help="Form-encoded POST body sent with the beacon")
    ] = None,

    output_format: Annotated[
        Optional[str],
        typer.Option("--format", "-f", help="Output format (json, yaml, text)")
    ] = None,

    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to configuration file")
    ] = None,

    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
):
    """Decode a single beacon URL."""
    config = _load_configuration(config_file, output_format, verbose)
    registry = get_default_registry()

    try:
        beacon = registry.decode(url, post_data or "")
    except UrlParseError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=ExitCode.INVALID_INPUT)

    typer.echo(BeaconFormatter(config.output_format).format(beacon))


@app.command()
def scan(
    source: Annotated[
        str,
        typer.Argument(help="File with one request URL per line (- for stdin)")
    ],

    providers: Annotated[
        Optional[List[str]],
        typer.Option("--provider", "-p", help="Only decode beacons from these provider keys")
    ] = None,

    output_format: Annotated[
        Optional[str],
        typer.Option("--format", "-f", help="Output format (json, yaml, text)")
    ] = None,

    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to configuration file")
    ] = None,

    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
):
    """Decode every beacon found in a list of request URLs."""
    config = _load_configuration(config_file, output_format, verbose)
    registry = get_default_registry()

    keys = providers or config.enabled_providers
    pattern = registry.build_pattern(keys)

    beacons: List[ParsedBeacon] = []
    for line_number, line in enumerate(_read_lines(source), start=1):
        parsed = _parse_scan_line(line)
        if parsed is None:
            continue

        url, post_data = parsed
        if not pattern.search(url):
            continue

        try:
            beacons.append(registry.decode(url, post_data))
        except UrlParseError as e:
            logger.warning("Skipping line %d: %s", line_number, e)

    if not beacons:
        typer.echo("No beacons found", err=True)
        raise typer.Exit(code=ExitCode.NO_MATCH)

    typer.echo(BeaconFormatter(config.output_format).format_many(beacons))


@app.command()
def match(
    url: Annotated[
        str,
        typer.Argument(help="Request URL to check")
    ],
):
    """Show which provider would decode a URL."""
    registry = get_default_registry()
    provider = registry.find_provider_for_url(url)

    if provider is registry.unknown_provider:
        typer.echo("No provider matches this URL", err=True)
        raise typer.Exit(code=ExitCode.NO_MATCH)

    descriptor = provider.descriptor
    typer.echo(f"{descriptor.key}\t{descriptor.name}\t{descriptor.type.label}")


@app.command(name="providers")
def list_providers():
    """List the registered providers in dispatch order."""
    registry = get_default_registry()

    for provider in registry:
        descriptor = provider.descriptor
        typer.echo(f"{descriptor.key:<20} {descriptor.name:<24} {descriptor.type.label}")


if __name__ == "__main__":
    app()
