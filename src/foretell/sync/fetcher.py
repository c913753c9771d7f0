"""Download the card names of one set into the card list."""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Protocol

from foretell.core.logging import get_logger
from foretell.errors import CardsNotFound
from foretell.notify import Notifier, Urgency
from foretell.scryfall.models import CardEntry, SetRecord
from foretell.sync.stores import CardListStore

logger = get_logger(__name__)

EXCLUDED_TYPE_LINES = frozenset({"Basic", "Token"})

# A joke card whose name breaks most pickers
LONGEST_CARD_NAME = (
    "Our Market Research Shows That Players Like Really Long Card Names So We "
    "Made this Card to Have the Absolute Longest Card Name Ever Elemental"
)


class SetCardSource(Protocol):
    def iter_set_cards(self, set_code: str) -> Iterable[CardEntry]: ...


@dataclass(frozen=True)
class FetchOutcome:
    """What fetching one set produced.

    ``populated`` is False when the set is listed but has no cards yet; the
    set must then be retried on a later pass. A populated set may still add
    zero names.
    """

    populated: bool
    count: int = 0


def is_collectible(card: CardEntry) -> bool:
    """Exact type-line match: "Basic Land — Forest" is not excluded."""
    return card.type_line not in EXCLUDED_TYPE_LINES and card.name != LONGEST_CARD_NAME


def collectible_names(cards: Iterable[CardEntry]) -> Iterator[str]:
    return (card.name for card in cards if is_collectible(card))


class CardFetcher:
    """Streams one set's cards into a :class:`CardListStore`."""

    def __init__(
        self,
        source: SetCardSource,
        card_list: CardListStore,
        notifier: Optional[Notifier] = None,
    ):
        self.source = source
        self.card_list = card_list
        self.notifier = notifier

    def fetch(self, record: SetRecord) -> FetchOutcome:
        """Append the collectible names of ``record`` to the card list.

        Raises:
            ForetellError: Any failure other than "no cards yet"
        """
        with self.card_list.writer() as writer:
            try:
                for name in collectible_names(self.source.iter_set_cards(record.code)):
                    writer.append(name)
            except CardsNotFound as exc:
                logger.info(
                    "No cards published yet for {} ({}): {}", record.name, record.code, exc
                )
                return FetchOutcome(populated=False)
            count = writer.count

        if count and self.notifier is not None:
            self.notifier.notify(
                f"Set {record.name} ({record.code}) added!",
                f"{count} new cards added!",
                Urgency.LOW,
            )
        logger.info("Set {} ({}): {} cards added", record.name, record.code, count)
        return FetchOutcome(populated=True, count=count)
