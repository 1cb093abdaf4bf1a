"""
Command-line interface for check_syncthing.

Provides the health, folders, and last-seen plugin commands.
"""

import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

import click

from check_syncthing import __version__
from check_syncthing.client.rest import SyncthingClient
from check_syncthing.core.config import Config, ConfigError, load_config, validate_url
from check_syncthing.core.durations import parse_duration
from check_syncthing.health.checks import CheckFlow, HealthCheck
from check_syncthing.health.folders import FolderStatusCheck
from check_syncthing.health.last_seen import FreshnessCheck
from check_syncthing.health.status import Severity

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class DurationType(click.ParamType):
    """Click parameter accepting durations like "5m" or "90s"."""

    name = "duration"

    def convert(self, value, param, ctx) -> float:
        if isinstance(value, (int, float)):
            return float(value)
        try:
            return parse_duration(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


DURATION = DurationType()


def _exit_unknown(message: str) -> None:
    """Report an internal or configuration problem and exit UNKNOWN."""
    click.echo(f"{Severity.UNKNOWN.name}: {message}")
    sys.exit(Severity.UNKNOWN.exit_code)


def _setup_logging(config: Config, verbose: bool) -> None:
    if verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, config.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


@click.group()
@click.version_option(version=__version__, prog_name="check_syncthing")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging on stderr")
@click.option(
    "-c", "--config", "config_path", type=click.Path(exists=True, path_type=Path),
    help="Path to config file"
)
@click.option("-u", "--url", help="Server URL (or SYNCTHING_URL)")
@click.option("-k", "--key", "api_key", help="Syncthing REST API key (or SYNCTHING_API_KEY)")
@click.option(
    "-x", "--exclude", "exclude", multiple=True,
    help="Short ID of a device to exclude (repeatable)"
)
@click.pass_context
def main(
    ctx: click.Context,
    verbose: bool,
    config_path: Optional[Path],
    url: Optional[str],
    api_key: Optional[str],
    exclude: tuple[str, ...],
) -> None:
    """Monitoring plugin for syncthing daemon.

    Monitors a syncthing daemon by using its REST API. Requires server URL and
    API key using flags or environment variables SYNCTHING_URL and
    SYNCTHING_API_KEY. Environment variables can be configured inside a .env
    file in the current directory.
    """
    ctx.ensure_object(dict)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        _exit_unknown(str(e))

    if url:
        config.api.url = url
    if api_key:
        config.api.api_key = api_key
    if exclude:
        config.checks.exclude_devices = list(exclude)

    _setup_logging(config, verbose)
    ctx.obj["config"] = config


def _run_check(ctx: click.Context, check_class: type[CheckFlow], **overrides) -> None:
    """Build client and check from config, run it, print output and exit."""
    config: Config = ctx.obj["config"]

    try:
        url = validate_url(config.api.url)
    except ConfigError as e:
        _exit_unknown(str(e))

    client = SyncthingClient(url, config.api.api_key, config.api.timeout)
    settings = replace(config.check_settings(), **overrides)
    check = check_class(client, settings)

    try:
        check.run()
    except Exception as e:
        logger.debug(f"{check_class.__name__} failed", exc_info=True)
        _exit_unknown(f"{check_class.__name__}: {e}")

    click.echo(check.output())
    sys.exit(check.severity.exit_code)


@main.command("health")
@click.pass_context
def health_cmd(ctx: click.Context) -> None:
    """Check health of syncthing server.

    Checks the server handles REST API requests, has no system errors and no
    folders with errors. In case of errors, outputs the last system error and
    the last error of every folder with errors.
    """
    _run_check(ctx, HealthCheck)


@main.command("folders")
@click.pass_context
def folders_cmd(ctx: click.Context) -> None:
    """Check status of syncthing folders.

    Checks for any folder error and completion status of all devices.
    """
    _run_check(ctx, FolderStatusCheck)


@main.command("last-seen")
@click.option("-w", "--warn", type=DURATION, help="Warning threshold (default: 5m)")
@click.option("-c", "--crit", type=DURATION, help="Critical threshold (default: 15m)")
@click.pass_context
def last_seen_cmd(
    ctx: click.Context,
    warn: Optional[float],
    crit: Optional[float],
) -> None:
    """Check last seen time of syncthing devices.

    Looks up the device with the oldest last seen time and outputs warning or
    critical status if it's out of the given thresholds.
    """
    overrides = {}
    if warn is not None:
        overrides["warn_last_seen"] = warn
    if crit is not None:
        overrides["crit_last_seen"] = crit
    _run_check(ctx, FreshnessCheck, **overrides)


if __name__ == "__main__":
    main()
