"""Command line entry point."""

from typing import Optional

import click

from foretell import __version__
from foretell.app import main_flow
from foretell.config.settings import reload_settings
from foretell.core.logging import setup_logging
from foretell.sync.runner import JoinOutcome


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--no-sync",
    is_flag=True,
    help="Do not refresh the card cache in the background.",
)
@click.option(
    "--sync-only",
    is_flag=True,
    help="Refresh the card cache and exit without opening the picker.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Console log level (default: FORETELL_LOG_LEVEL or INFO).",
)
@click.version_option(__version__, prog_name="foretell")
def main(no_sync: bool, sync_only: bool, log_level: Optional[str]) -> None:
    """Pick a Magic card by name and look at it.

    The list of names comes from a local cache that is brought up to date
    with Scryfall in the background while the picker is open.
    """
    if no_sync and sync_only:
        raise click.UsageError("--no-sync and --sync-only are mutually exclusive")

    config = reload_settings()
    setup_logging(config, level=log_level.upper() if log_level else None)

    outcome = main_flow(config, sync=not no_sync, sync_only=sync_only)
    if outcome is JoinOutcome.CRASHED:
        click.echo("background update crashed, see the log for details", err=True)


if __name__ == "__main__":
    main()
