"""Background synchronization of the card-name cache."""

from .coordinator import SyncCoordinator, SyncReport
from .fetcher import CardFetcher, FetchOutcome
from .filters import is_eligible, release_threshold
from .lock import LockAttempt, LockGuard, LockStatus, UpdateLock
from .runner import BackgroundRunner, JoinOutcome
from .stores import CardListStore, SetStore

__all__ = [
    "BackgroundRunner",
    "CardFetcher",
    "CardListStore",
    "FetchOutcome",
    "JoinOutcome",
    "LockAttempt",
    "LockGuard",
    "LockStatus",
    "SetStore",
    "SyncCoordinator",
    "SyncReport",
    "UpdateLock",
    "is_eligible",
    "release_threshold",
]
