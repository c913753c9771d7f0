"""Which sets are worth caching."""

from datetime import date, timedelta
from typing import Iterable, Iterator

from foretell.scryfall.models import SetRecord, SetType

EXCLUDED_SET_TYPES = frozenset(
    {
        SetType.MEMORABILIA,
        SetType.TOKEN,
        SetType.ALCHEMY,
        SetType.TREASURE_CHEST,
        SetType.PROMO,
    }
)


def release_threshold(today: date, grace_days: int = 7) -> date:
    """Latest release date still considered released.

    Sets releasing within ``grace_days`` of ``today`` are synced early: their
    cards are usually published on Scryfall ahead of the release date.
    """
    return today + timedelta(days=grace_days)


def is_eligible(record: SetRecord, threshold: date) -> bool:
    """True for paper, non-promotional sets released on or before ``threshold``."""
    if record.set_type in EXCLUDED_SET_TYPES:
        return False
    if record.digital:
        return False
    return record.released_at is not None and record.released_at <= threshold


def eligible_sets(records: Iterable[SetRecord], threshold: date) -> Iterator[SetRecord]:
    return (record for record in records if is_eligible(record, threshold))
