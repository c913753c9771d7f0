"""Unit tests for sync/fetcher.py"""

import pytest

from conftest import FakeCatalog, make_card, make_set
from foretell.errors import NetworkError
from foretell.notify import Urgency
from foretell.sync.fetcher import LONGEST_CARD_NAME, CardFetcher, FetchOutcome, is_collectible
from foretell.sync.stores import CardListStore


@pytest.fixture
def card_list(tmp_path):
    return CardListStore(tmp_path / "cards")


class TestIsCollectible:
    def test_regular_card(self):
        assert is_collectible(make_card("Llanowar Elves"))

    @pytest.mark.parametrize("type_line", ["Basic", "Token"])
    def test_exact_basic_and_token_are_dropped(self, type_line):
        assert not is_collectible(make_card("Forest", type_line))

    @pytest.mark.parametrize("type_line", ["Basic Land — Forest", "Basic Snow Land — Island", "Token Creature — Elf", "basic"])
    def test_type_line_match_is_exact(self, type_line):
        assert is_collectible(make_card("Forest", type_line))

    def test_missing_type_line_is_kept(self):
        assert is_collectible(make_card("Mystery", None))

    def test_longest_name_is_dropped(self):
        assert not is_collectible(make_card(LONGEST_CARD_NAME))


class TestCardFetcher:
    def test_appends_collectible_names(self, card_list, notifier):
        catalog = FakeCatalog(
            [],
            cards={
                "abc": [
                    make_card("Alpha"),
                    make_card("Plains", "Basic"),
                    make_card("Beta"),
                    make_card("Elf Warrior", "Token"),
                ]
            },
        )
        outcome = CardFetcher(catalog, card_list, notifier).fetch(make_set("abc", "Test Set"))

        assert outcome == FetchOutcome(populated=True, count=2)
        assert list(card_list.read_lines()) == ["Alpha", "Beta"]

    def test_success_notifies_low_urgency(self, card_list, notifier):
        catalog = FakeCatalog([], cards={"abc": [make_card("Alpha")]})
        CardFetcher(catalog, card_list, notifier).fetch(make_set("abc", "Test Set"))

        assert notifier.sent == [("Set Test Set (abc) added!", "1 new cards added!", Urgency.LOW)]

    def test_zero_cards_is_populated_without_notification(self, card_list, notifier):
        catalog = FakeCatalog([], cards={"abc": [make_card("Plains", "Basic")]})
        outcome = CardFetcher(catalog, card_list, notifier).fetch(make_set("abc"))

        assert outcome == FetchOutcome(populated=True, count=0)
        assert notifier.sent == []

    def test_not_found_means_not_populated(self, card_list, notifier):
        catalog = FakeCatalog([], not_found={"abc"})
        outcome = CardFetcher(catalog, card_list, notifier).fetch(make_set("abc"))

        assert outcome == FetchOutcome(populated=False)
        assert list(card_list.read_lines()) == []
        assert notifier.sent == []

    def test_other_errors_propagate(self, card_list, notifier):
        catalog = FakeCatalog([], failing={"abc": NetworkError("connection reset")})

        with pytest.raises(NetworkError):
            CardFetcher(catalog, card_list, notifier).fetch(make_set("abc"))
