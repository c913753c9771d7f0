"""One sync pass: find the sets missing from the cache and download them.

The pass is a pipeline over the streamed set listing::

    iter_sets() -> eligible_sets() -> diff against SetStore -> CardFetcher

Missing sets are fetched on a bounded thread pool. Their outcomes are merged
only once every fetch has finished, and the set list is rewritten at most
once, at the very end, and only if some new set was actually synced.
"""

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Iterable, Optional, Protocol

from foretell.core.logging import get_logger
from foretell.errors import CatalogError, ForetellError
from foretell.notify import Notifier
from foretell.scryfall.models import CardEntry, SetRecord
from foretell.sync.fetcher import CardFetcher, FetchOutcome
from foretell.sync.filters import eligible_sets, release_threshold
from foretell.sync.stores import CardListStore, SetStore

logger = get_logger(__name__)


class SetCatalog(Protocol):
    def iter_sets(self) -> Iterable[SetRecord]: ...

    def iter_set_cards(self, set_code: str) -> Iterable[CardEntry]: ...


@dataclass
class SyncReport:
    """Summary of a finished pass."""

    kept_codes: list[str] = field(default_factory=list)
    fetched: list[str] = field(default_factory=list)
    not_populated: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    cards_added: int = 0
    store_rewritten: bool = False

    @property
    def updated(self) -> bool:
        return bool(self.fetched)


class SyncCoordinator:
    """Brings the card list up to date with the remote catalog.

    Args:
        catalog: Source of sets and set cards (a ScryfallClient)
        set_store: Codes of the sets already synced
        card_list: Where new card names are appended
        notifier: Receives per-set errors and "set added" messages
        max_workers: Sets fetched concurrently
        grace_days: See :func:`release_threshold`
    """

    def __init__(
        self,
        catalog: SetCatalog,
        set_store: SetStore,
        card_list: CardListStore,
        notifier: Notifier,
        max_workers: int = 4,
        grace_days: int = 7,
    ):
        self.catalog = catalog
        self.set_store = set_store
        self.card_list = card_list
        self.notifier = notifier
        self.max_workers = max_workers
        self.grace_days = grace_days
        self.fetcher = CardFetcher(catalog, card_list, notifier)

    @classmethod
    def from_settings(cls, config, catalog: SetCatalog, notifier: Notifier) -> "SyncCoordinator":
        return cls(
            catalog,
            SetStore(config.sets_path),
            CardListStore(config.cards_path),
            notifier,
            max_workers=config.max_workers,
            grace_days=config.release_grace_days,
        )

    def run(self, today: Optional[date] = None) -> SyncReport:
        """Run one pass.

        Per-set failures are reported through the notifier and do not stop
        the pass.

        Raises:
            CatalogError: The set listing failed; the set list is left untouched
            CacheError: The set list could not be read or rewritten
        """
        if today is None:
            today = datetime.now(timezone.utc).date()
        threshold = release_threshold(today, self.grace_days)
        stored = self.set_store.read()
        logger.info(
            "Checking for missing sets ({} stored, released by {})", len(stored), threshold
        )

        report = SyncReport()
        pending: dict[Future, SetRecord] = {}
        submitted: set[str] = set()
        catalog_error: Optional[CatalogError] = None

        with ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="foretell-fetch"
        ) as executor:
            try:
                for record in eligible_sets(self.catalog.iter_sets(), threshold):
                    if SetStore.contains(stored, record.code):
                        report.kept_codes.append(record.code)
                        continue
                    if record.code in submitted:
                        continue
                    submitted.add(record.code)
                    logger.info(
                        "Updating card list for {} ({}) :: {}",
                        record.name,
                        record.code,
                        record.set_type.value,
                    )
                    pending[executor.submit(self.fetcher.fetch, record)] = record
            except ForetellError as exc:
                catalog_error = CatalogError(f"listing sets: {exc}")
                catalog_error.__cause__ = exc

            for future in as_completed(pending):
                record = pending[future]
                try:
                    outcome = future.result()
                except Exception as exc:
                    report.failed.append(record.code)
                    error = ForetellError(
                        f"updating card list for set {record.name} ({record.code}): {exc}"
                    )
                    error.__cause__ = exc
                    logger.opt(exception=exc).error("{}", error)
                    self.notifier.error(error)
                    continue
                self._merge(report, record, outcome)

        if catalog_error is not None:
            raise catalog_error

        if report.updated:
            report.kept_codes.sort()
            self.set_store.write(report.kept_codes)
            report.store_rewritten = True

        logger.info(
            "Sync pass done: {} new sets, {} cards added, {} not ready, {} failed",
            len(report.fetched),
            report.cards_added,
            len(report.not_populated),
            len(report.failed),
        )
        return report

    @staticmethod
    def _merge(report: SyncReport, record: SetRecord, outcome: FetchOutcome) -> None:
        if not outcome.populated:
            report.not_populated.append(record.code)
            return
        report.fetched.append(record.code)
        report.kept_codes.append(record.code)
        report.cards_added += outcome.count
