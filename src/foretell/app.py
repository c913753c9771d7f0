"""Top-level flow: start the background sync, pick, search, download, view.

Sync problems never stop the foreground: they are reported and the picker
runs on whatever card list is on disk (possibly none).
"""

import tempfile
from pathlib import Path
from typing import Optional

from foretell.config.settings import ForetellSettings
from foretell.core.logging import get_logger
from foretell.errors import CacheError, ForetellError
from foretell.foreground.images import collect_image_uris, download_images
from foretell.foreground.picker import pick_card, picker_args
from foretell.foreground.viewer import launch_viewer
from foretell.notify import Notifier
from foretell.scryfall.client import ScryfallClient
from foretell.sync.coordinator import SyncCoordinator
from foretell.sync.runner import BackgroundRunner, JoinOutcome
from foretell.sync.stores import CardListStore

logger = get_logger(__name__)


def ensure_cache_dir(config: ForetellSettings) -> None:
    try:
        config.cache_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise CacheError(f"creating cache dir {config.cache_dir}: {exc}") from exc


def load_card_names(
    config: ForetellSettings,
    runner: Optional[BackgroundRunner],
    notifier: Notifier,
) -> list[str]:
    """Kick off the background sync and return the names cached so far."""
    try:
        ensure_cache_dir(config)
        if runner is not None:
            runner.start(config.lock_path)
        return CardListStore(config.cards_path).unique_names()
    except (ForetellError, OSError) as exc:
        notifier.error(exc)
        return []


def run_app(
    config: ForetellSettings,
    client: ScryfallClient,
    notifier: Notifier,
    runner: Optional[BackgroundRunner] = None,
) -> None:
    """Pick a card and show its images.

    The images are downloaded to a temporary directory that is removed once
    the viewer exits.

    Raises:
        ForetellError: Picker, search, download or viewer failure
    """
    names = load_card_names(config, runner, notifier)
    logger.debug("{} card names available", len(names))

    query = pick_card(
        names, picker_args(config.picker_command, config.picker_prompt, config.picker_lines)
    )
    if not query:
        return

    uris = collect_image_uris(client, query, notifier)
    with tempfile.TemporaryDirectory(prefix="foretell-") as workdir:
        try:
            files = download_images(client, uris, notifier, directory=Path(workdir))
        except OSError as exc:
            raise ForetellError(f"saving images: {exc}") from exc
        launch_viewer(files, config.viewers, config.viewer_geometry)


def main_flow(
    config: ForetellSettings, sync: bool = True, sync_only: bool = False
) -> JoinOutcome:
    """Run foretell once and wait for the background pass before returning."""
    notifier = Notifier.from_settings(config)
    client = ScryfallClient.from_settings(config)
    runner = None
    if sync or sync_only:
        coordinator = SyncCoordinator.from_settings(config, client, notifier)
        runner = BackgroundRunner(coordinator.run, notifier)

    try:
        if sync_only:
            ensure_cache_dir(config)
            runner.start(config.lock_path)
        else:
            run_app(config, client, notifier, runner)
    except ForetellError as exc:
        notifier.error(exc)
    finally:
        outcome = runner.join() if runner is not None else JoinOutcome.NOT_STARTED
    return outcome
