"""Shared fixtures: an in-memory catalog, a scripted HTTP session and a
notifier that records instead of notifying."""

import threading
from datetime import date

import pytest
from loguru import logger

from foretell.config.settings import ForetellSettings
from foretell.errors import CardsNotFound
from foretell.notify import Notifier, Urgency
from foretell.scryfall.models import CardEntry, SetRecord, SetType


def make_set(code, name=None, set_type=SetType.EXPANSION, digital=False, released_at=date(2020, 1, 1)):
    return SetRecord(
        code=code,
        name=name or f"Set {code.upper()}",
        set_type=set_type,
        digital=digital,
        released_at=released_at,
    )


def make_card(name, type_line="Creature — Elf"):
    return CardEntry(name=name, type_line=type_line)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, headers=None, url="", body=b""):
        self.status_code = status_code
        self._payload = payload
        self.headers = headers or {}
        self.url = url
        self._body = body

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload

    def iter_content(self, chunk_size):
        for start in range(0, len(self._body), chunk_size):
            yield self._body[start : start + chunk_size]

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class ScriptedSession:
    """Returns the queued responses (or raises queued exceptions) in order."""

    def __init__(self, *responses):
        self.headers = {}
        self.responses = list(responses)
        self.calls = []

    def get(self, url, params=None, timeout=None, stream=False):
        self.calls.append((url, params))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        response.url = response.url or url
        return response


class FakeCatalog:
    """Stands in for ScryfallClient in sync tests."""

    def __init__(self, sets, cards=None, not_found=(), failing=None, listing_error=None):
        self.sets = list(sets)
        self.cards = cards or {}
        self.not_found = set(not_found)
        self.failing = failing or {}
        self.listing_error = listing_error
        self.queried = []
        self._lock = threading.Lock()

    def iter_sets(self):
        yield from self.sets
        if self.listing_error is not None:
            raise self.listing_error

    def iter_set_cards(self, set_code):
        with self._lock:
            self.queried.append(set_code)
        if set_code in self.not_found:
            raise CardsNotFound(404, "not_found", f"no cards for set:{set_code}")
        if set_code in self.failing:
            raise self.failing[set_code]
        yield from self.cards.get(set_code, [])


class RecordingNotifier(Notifier):
    """Keeps every notification in ``sent`` and never shells out."""

    def __init__(self):
        super().__init__(enabled=False)
        self.sent = []
        self._lock = threading.Lock()

    def notify(self, summary, body, urgency=Urgency.LOW, replace_id=None):
        with self._lock:
            self.sent.append((summary, body, urgency))
        return None

    @property
    def errors(self):
        return [body for _, body, urgency in self.sent if urgency is Urgency.CRITICAL]


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def config(tmp_path):
    return ForetellSettings(
        cache_dir=tmp_path / "foretell",
        log_to_file=False,
        notifications_enabled=False,
        max_workers=4,
    )


@pytest.fixture(autouse=True)
def _reset_loguru():
    yield
    logger.remove()
