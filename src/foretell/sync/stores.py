"""On-disk state of the card-name cache.

``sets`` holds the sorted codes of fully synced sets and is only ever
rewritten whole. ``cards`` is an append-only list of card names, one per
line, duplicates included; readers de-duplicate.
"""

import bisect
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from foretell.core.logging import get_logger
from foretell.errors import CacheError

logger = get_logger(__name__)


class SetStore:
    """Sorted list of set codes already synced."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def read(self) -> list[str]:
        """Return the stored codes, sorted. A missing file reads as empty."""
        try:
            with open(self.path, encoding="utf-8") as handle:
                codes = [line.strip() for line in handle if line.strip()]
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise CacheError(f"reading set list at {self.path}: {exc}") from exc
        return sorted(set(codes))

    def write(self, codes: Iterable[str]) -> None:
        """Replace the stored codes atomically."""
        ordered = sorted(set(codes))
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".part"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                for code in ordered:
                    handle.write(code + "\n")
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except OSError as exc:
            raise CacheError(f"writing set list at {self.path}: {exc}") from exc
        finally:
            if os.path.exists(tmp_name):
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
        logger.debug("Stored {} set codes in {}", len(ordered), self.path)

    @staticmethod
    def contains(codes: Sequence[str], code: str) -> bool:
        """Binary search ``code`` in sorted ``codes``."""
        index = bisect.bisect_left(codes, code)
        return index < len(codes) and codes[index] == code


class CardListWriter:
    """Appends card names to the card list, one complete line per write."""

    def __init__(self, handle, lock: threading.Lock):
        self._handle = handle
        self._lock = lock
        self.count = 0

    def append(self, name: str) -> None:
        line = name.replace("\n", " ") + "\n"
        with self._lock:
            self._handle.write(line)
            self._handle.flush()
        self.count += 1


class CardListStore:
    """Append-only list of card names read by the picker."""

    def __init__(self, path: Path):
        self.path = Path(path)
        # Sync workers share one store; lines must not interleave
        self._lock = threading.Lock()

    @contextmanager
    def writer(self) -> Iterator[CardListWriter]:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            handle = open(self.path, "a", encoding="utf-8")
        except OSError as exc:
            raise CacheError(f"opening card list at {self.path}: {exc}") from exc
        with handle:
            yield CardListWriter(handle, self._lock)

    def read_lines(self) -> Iterator[str]:
        """Yield every stored name, duplicates included."""
        try:
            handle = open(self.path, encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return
        with handle:
            for line in handle:
                name = line.rstrip("\n")
                if name:
                    yield name

    def unique_names(self) -> list[str]:
        """Stored names without duplicates, in first-seen order."""
        return list(dict.fromkeys(self.read_lines()))
