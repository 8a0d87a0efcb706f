"""Deck and card management plus the flip-through browse cursor."""
from typing import Optional

from studysphere.models import ActionRejected, Card, Deck, require_text
from studysphere.seed import uid
from studysphere.store import PersistentStore


def get_deck(store: PersistentStore, deck_id: str) -> Deck:
    deck = store.state.find_deck(deck_id)
    if deck is None:
        raise ActionRejected("Deck not found")
    return deck


def add_deck(store: PersistentStore, name: str) -> Deck:
    deck = Deck(id=uid(), name=require_text(name, "Deck name"))
    with store.mutate() as state:
        state.flashcards.decks.insert(0, deck)
    return deck


def rename_deck(store: PersistentStore, deck_id: str, name: str) -> Deck:
    name = require_text(name, "Deck name")
    deck = get_deck(store, deck_id)
    with store.mutate():
        deck.name = name
    return deck


def delete_deck(store: PersistentStore, deck_id: str) -> int:
    """Remove a deck; returns how many decks were removed."""
    with store.mutate() as state:
        before = len(state.flashcards.decks)
        state.flashcards.decks = [d for d in state.flashcards.decks if d.id != deck_id]
        return before - len(state.flashcards.decks)


def add_card(store: PersistentStore, deck_id: str, front: str, back: str) -> Card:
    card = Card(id=uid(), front=require_text(front, "Front"), back=require_text(back, "Back"))
    deck = get_deck(store, deck_id)
    with store.mutate():
        deck.cards.append(card)
    return card


def update_card(store: PersistentStore, deck_id: str, card_id: str, front: str, back: str) -> Card:
    front, back = require_text(front, "Front"), require_text(back, "Back")
    deck = get_deck(store, deck_id)
    card = next((c for c in deck.cards if c.id == card_id), None)
    if card is None:
        raise ActionRejected("Card not found")
    with store.mutate():
        card.front = front
        card.back = back
    return card


def delete_card(store: PersistentStore, deck_id: str, card_id: str) -> None:
    deck = get_deck(store, deck_id)
    with store.mutate():
        deck.cards = [c for c in deck.cards if c.id != card_id]


class DeckBrowser:
    """Which deck is open and which card is showing, clamped to the deck."""

    def __init__(self, store: PersistentStore):
        self.store = store
        decks = store.state.flashcards.decks
        self.active_deck_id: Optional[str] = decks[0].id if decks else None
        self.index = 0

    @property
    def deck(self) -> Optional[Deck]:
        deck = self.store.state.find_deck(self.active_deck_id)
        if deck is None:
            # deck was deleted; fall back to the first one
            decks = self.store.state.flashcards.decks
            self.active_deck_id = decks[0].id if decks else None
            self.index = 0
            deck = decks[0] if decks else None
        return deck

    def select(self, deck_id: str) -> Deck:
        deck = get_deck(self.store, deck_id)
        self.active_deck_id = deck.id
        self.index = 0
        return deck

    def move(self, step: int) -> int:
        deck = self.deck
        if deck is None or not deck.cards:
            self.index = 0
        else:
            self.index = max(0, min(len(deck.cards) - 1, self.index + step))
        return self.index

    def current_card(self) -> Optional[Card]:
        deck = self.deck
        if deck is None or not deck.cards:
            return None
        self.move(0)
        return deck.cards[self.index]
