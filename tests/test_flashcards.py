# tests/test_flashcards.py
import pytest

from studysphere.flashcards import (
    DeckBrowser, add_card, add_deck, delete_card, delete_deck, get_deck, rename_deck, update_card,
)
from studysphere.models import ActionRejected
from studysphere.store import PersistentStore


def test_add_deck_goes_first(store, tmp_db):
    deck = add_deck(store, "  Algebra  ")
    assert deck.name == "Algebra"
    assert store.state.flashcards.decks[0] is deck
    assert PersistentStore(tmp_db).state.flashcards.decks[0].name == "Algebra"


def test_add_deck_blank_name_rejected(store):
    before = len(store.state.flashcards.decks)
    with pytest.raises(ActionRejected):
        add_deck(store, "  ")
    assert len(store.state.flashcards.decks) == before


def test_rename_deck(store):
    deck = store.state.flashcards.decks[0]
    rename_deck(store, deck.id, "Cells")
    assert get_deck(store, deck.id).name == "Cells"


def test_get_missing_deck_rejected(store):
    with pytest.raises(ActionRejected, match="Deck not found"):
        get_deck(store, "nope")


def test_delete_deck(store, tmp_db):
    deck = store.state.flashcards.decks[0]
    assert delete_deck(store, deck.id) == 1
    assert delete_deck(store, deck.id) == 0
    assert PersistentStore(tmp_db).state.find_deck(deck.id) is None


def test_add_card_appends(store):
    deck = store.state.flashcards.decks[0]
    card = add_card(store, deck.id, "Ribosome job?", "Protein synthesis")
    assert deck.cards[-1] is card


def test_add_card_requires_both_sides(store):
    deck = store.state.flashcards.decks[0]
    with pytest.raises(ActionRejected):
        add_card(store, deck.id, "Front only", "")
    assert len(deck.cards) == 3


def test_update_card(store, tmp_db):
    deck = store.state.flashcards.decks[0]
    card = deck.cards[0]
    update_card(store, deck.id, card.id, "New front", "New back")
    saved = PersistentStore(tmp_db).state.find_deck(deck.id).cards[0]
    assert (saved.front, saved.back) == ("New front", "New back")


def test_update_missing_card_rejected(store):
    deck = store.state.flashcards.decks[0]
    with pytest.raises(ActionRejected, match="Card not found"):
        update_card(store, deck.id, "nope", "a", "b")


def test_delete_card(store):
    deck = store.state.flashcards.decks[0]
    card_id = deck.cards[1].id
    delete_card(store, deck.id, card_id)
    assert [c.id for c in get_deck(store, deck.id).cards if c.id == card_id] == []


# --- Browsing ---


def test_browser_starts_on_first_deck(store):
    browser = DeckBrowser(store)
    assert browser.deck is store.state.flashcards.decks[0]
    assert browser.current_card() is browser.deck.cards[0]


def test_browser_move_is_clamped(store):
    browser = DeckBrowser(store)
    assert browser.move(-1) == 0
    assert browser.move(1) == 1
    assert browser.move(10) == 2


def test_browser_select_resets_index(store):
    browser = DeckBrowser(store)
    browser.move(2)
    second = store.state.flashcards.decks[1]
    browser.select(second.id)
    assert browser.index == 0
    assert browser.current_card() is second.cards[0]


def test_browser_clamps_after_card_delete(store):
    browser = DeckBrowser(store)
    browser.move(2)
    deck = browser.deck
    delete_card(store, deck.id, deck.cards[2].id)
    assert browser.current_card() is deck.cards[1]


def test_browser_falls_back_when_deck_deleted(store):
    browser = DeckBrowser(store)
    first, second = store.state.flashcards.decks
    delete_deck(store, first.id)
    assert browser.deck.id == second.id


def test_browser_with_no_decks(store):
    for deck in list(store.state.flashcards.decks):
        delete_deck(store, deck.id)
    browser = DeckBrowser(store)
    assert browser.deck is None
    assert browser.current_card() is None
    assert browser.move(1) == 0
