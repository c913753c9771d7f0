"""Resolve a query to card images and download them."""

import tempfile
from pathlib import Path
from typing import Iterable, Optional, Protocol

from foretell.core.logging import get_logger
from foretell.errors import CardsNotFound, ForetellError
from foretell.notify import Notifier, ProgressNotifier
from foretell.scryfall.models import CardEntry

logger = get_logger(__name__)


class CardSearch(Protocol):
    def search_cards(self, query: str) -> Iterable[CardEntry]: ...


class ImageDownloader(Protocol):
    def download(self, url: str, sink) -> int: ...


def collect_image_uris(client: CardSearch, query: str, notifier: Notifier) -> list[str]:
    """Large image URIs of every card matching ``query``.

    Cards without any image are reported and skipped.

    Raises:
        ForetellError: Nothing matched, or no matching card had an image
    """
    uris: list[str] = []
    try:
        for card in client.search_cards(query):
            card_uris = card.large_image_uris()
            if not card_uris:
                notifier.error(f"failed to get any uris for card {card.name}")
            uris.extend(card_uris)
    except CardsNotFound as exc:
        raise ForetellError(f"no cards found for {query!r}") from exc

    if not uris:
        raise ForetellError("no cards found")
    return uris


def download_images(
    client: ImageDownloader,
    uris: list[str],
    notifier: Notifier,
    directory: Optional[Path] = None,
) -> list[Path]:
    """Download each URI to its own temporary file, reporting progress.

    The files are left on disk for the viewer and belong to the caller, who
    should pass a ``directory`` it cleans up. If any download fails, the
    files written so far, the partial one included, are removed.
    """
    progress = ProgressNotifier(notifier, len(uris))
    files: list[Path] = []
    try:
        for uri in uris:
            with tempfile.NamedTemporaryFile(
                prefix="foretell-", suffix=".jpg", dir=directory, delete=False
            ) as sink:
                files.append(Path(sink.name))
                size = client.download(uri, sink)
            logger.debug("Downloaded {} ({} bytes)", uri, size)
            progress.progress()
    except BaseException:
        for path in files:
            path.unlink(missing_ok=True)
        raise
    return files
