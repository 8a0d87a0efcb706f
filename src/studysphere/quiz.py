"""Self-rated quiz sessions over a flashcard deck."""
import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from studysphere.models import ActionRejected, Card, Deck
from studysphere.store import PersistentStore

logger = logging.getLogger(__name__)


class QuizState(str, Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"
    COMPLETE = "complete"


def percent(correct: int, total: int) -> int:
    """Integer percentage, halves rounded up."""
    return (correct * 200 + total) // (2 * total)


@dataclass
class QuizSession:
    deck_id: str
    order: list[int] = field(default_factory=list)  # permutation of card indices
    index: int = 0
    correct: int = 0

    @property
    def total(self) -> int:
        return len(self.order)

    @property
    def complete(self) -> bool:
        return self.index >= self.total


@dataclass(frozen=True)
class QuizSnapshot:
    state: QuizState
    deck_id: Optional[str] = None
    index: int = 0
    total: int = 0
    correct: int = 0
    card: Optional[Card] = None


class QuizEngine:
    """Walks a shuffled pass over one deck and keeps the running score.

    The session lives in memory only. The deck itself is read from the
    store on every access and is never reordered.
    """

    def __init__(self, store: PersistentStore, rng: Optional[random.Random] = None):
        self.store = store
        self._rng = rng or random.Random()
        self.session: Optional[QuizSession] = None
        self.active_deck_id: Optional[str] = None
        self._listeners: list[Callable[[], None]] = []

    @property
    def state(self) -> QuizState:
        self.sync()
        if self.session is None:
            return QuizState.INACTIVE
        return QuizState.COMPLETE if self.session.complete else QuizState.ACTIVE

    def subscribe(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def _changed(self) -> None:
        for callback in list(self._listeners):
            callback()

    def _deck(self, deck_id: Optional[str]) -> Optional[Deck]:
        return self.store.state.find_deck(deck_id)

    def _shuffled(self, count: int) -> list[int]:
        order = list(range(count))
        self._rng.shuffle(order)
        return order

    def sync(self) -> None:
        """Drop the session if its deck was deleted or its cards changed."""
        if self.active_deck_id is not None and self._deck(self.active_deck_id) is None:
            self.active_deck_id = None
        if self.session is None:
            return
        deck = self._deck(self.session.deck_id)
        if deck is None or len(deck.cards) != self.session.total:
            logger.debug("Discarding quiz for deck %s", self.session.deck_id)
            self.session = None

    def select_deck(self, deck_id: Optional[str]) -> None:
        if deck_id != self.active_deck_id:
            self.session = None
        self.active_deck_id = deck_id
        self._changed()

    def start(self, deck_id: Optional[str] = None) -> QuizSession:
        deck = self._deck(deck_id or self.active_deck_id)
        if deck is None:
            raise ActionRejected("No deck selected")
        if not deck.cards:
            raise ActionRejected("Deck is empty")
        self.active_deck_id = deck.id
        self.session = QuizSession(deck_id=deck.id, order=self._shuffled(len(deck.cards)))
        self._changed()
        return self.session

    def toggle(self, deck_id: Optional[str] = None) -> Optional[QuizSession]:
        """Enter quiz mode, or leave it when a session is already open."""
        if self.state != QuizState.INACTIVE:
            self.exit()
            return None
        return self.start(deck_id)

    def answer(self, got_it: bool) -> QuizState:
        if self.state != QuizState.ACTIVE:
            raise ActionRejected("Quiz is not active")
        if got_it:
            self.session.correct += 1
        self.session.index += 1
        self._changed()
        return self.state

    def restart(self) -> QuizSession:
        if self.state != QuizState.COMPLETE:
            raise ActionRejected("Quiz is not complete")
        deck = self._deck(self.session.deck_id)
        self.session = QuizSession(deck_id=deck.id, order=self._shuffled(len(deck.cards)))
        self._changed()
        return self.session

    def exit(self) -> None:
        self.session = None
        self._changed()

    def score(self) -> int:
        if self.state != QuizState.COMPLETE:
            raise ActionRejected("Quiz is not complete")
        return percent(self.session.correct, self.session.total)

    def current_card(self) -> Optional[Card]:
        if self.state != QuizState.ACTIVE:
            return None
        deck = self._deck(self.session.deck_id)
        return deck.cards[self.session.order[self.session.index]]

    def progress(self) -> tuple[int, int]:
        """(correct, answered) so far."""
        if self.session is None:
            return 0, 0
        return self.session.correct, self.session.index

    def snapshot(self) -> QuizSnapshot:
        state = self.state
        if self.session is None:
            return QuizSnapshot(state=state, deck_id=self.active_deck_id)
        return QuizSnapshot(
            state=state,
            deck_id=self.session.deck_id,
            index=self.session.index,
            total=self.session.total,
            correct=self.session.correct,
            card=self.current_card(),
        )
