"""Run the sync pass in the background of the foreground flow.

The runner is owned by whoever drives the application and holds at most one
in-flight pass. :meth:`BackgroundRunner.join` must be called before exit: it
waits for the pass and reports a crashed worker, which is distinct from the
errors the pass reports by itself.
"""

import threading
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from foretell.core.logging import get_logger, log_operation
from foretell.errors import ForetellError
from foretell.notify import Notifier
from foretell.sync.coordinator import SyncReport
from foretell.sync.lock import LockGuard, LockStatus, UpdateLock

logger = get_logger(__name__)

CRASH_MESSAGE = "background update crashed"


class JoinOutcome(Enum):
    NOT_STARTED = "not_started"
    FINISHED = "finished"
    CRASHED = "crashed"


class PassHandle:
    """The one background pass of this process."""

    def __init__(self):
        self.thread: Optional[threading.Thread] = None
        self.report: Optional[SyncReport] = None
        self.crash: Optional[BaseException] = None


class BackgroundRunner:
    """Starts one sync pass under the update lock and joins it at shutdown.

    Args:
        run_pass: Callable running one pass (``SyncCoordinator.run``)
        notifier: Receives pass errors and crashes
    """

    def __init__(self, run_pass: Callable[[], SyncReport], notifier: Notifier):
        self.run_pass = run_pass
        self.notifier = notifier
        self._handle: Optional[PassHandle] = None

    def start(self, lock_path: Path) -> bool:
        """Start a pass unless another process holds the lock.

        Returns True when a pass was started.

        Lock errors are reported and the pass is skipped; the foreground
        carries on either way.
        """
        if self._handle is not None:
            raise RuntimeError("a background update is already running")

        attempt = UpdateLock.try_acquire(lock_path)
        if attempt.status is LockStatus.ERROR:
            self.notifier.error(attempt.error)
            return False
        if attempt.status is LockStatus.ALREADY_HELD:
            logger.info("Another process is updating the cache, skipping sync")
            return False

        handle = PassHandle()
        handle.thread = threading.Thread(
            target=self._work,
            args=(handle, attempt.guard),
            name="foretell-sync",
            daemon=False,
        )
        try:
            handle.thread.start()
        except RuntimeError:
            attempt.guard.release()
            raise
        self._handle = handle
        return True

    def _work(self, handle: PassHandle, guard: LockGuard) -> None:
        with guard:
            try:
                with log_operation("Sync pass", lock=guard.path):
                    handle.report = self.run_pass()
            except ForetellError as exc:
                self.notifier.error(exc)
            except BaseException as exc:
                handle.crash = exc
                logger.opt(exception=exc).critical("Background update crashed")

    def join(self) -> JoinOutcome:
        """Wait for the pass started by :meth:`start`, if any.

        Consumes the handle: a second call returns ``NOT_STARTED``.
        """
        handle, self._handle = self._handle, None
        if handle is None:
            return JoinOutcome.NOT_STARTED

        handle.thread.join()
        if handle.crash is not None:
            self.notifier.error(f"{CRASH_MESSAGE}: {handle.crash!r}")
            return JoinOutcome.CRASHED
        if handle.report is not None:
            logger.debug(
                "Background task ended: {} sets fetched, {} cards added",
                len(handle.report.fetched),
                handle.report.cards_added,
            )
        return JoinOutcome.FINISHED
