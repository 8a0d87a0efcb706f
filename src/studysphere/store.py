"""Persistent state store: load-with-migration, mutate-then-save, observers."""
import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import date
from typing import Callable, Iterator

from studysphere.db import (
    DEFAULT_DB_PATH, STORAGE_KEY, init_db, read_state_blob, set_aside, write_state_blob,
)
from studysphere.models import (
    AppState, Assignment, Flashcards, Goal, Habit, Note, PomodoroState, Section, Task, Theme,
    Timetable,
)
from studysphere.seed import default_state

logger = logging.getLogger(__name__)


def _valid_flashcards(value) -> bool:
    return isinstance(value, dict) and isinstance(value.get("decks"), list)


def _valid_timetable(value) -> bool:
    return isinstance(value, dict) and isinstance(value.get("slots"), dict)


def _valid_pomodoro(value) -> bool:
    return isinstance(value, dict) and value.get("secondsLeft") is not None


# Sub-objects whose shape is checked before a saved copy replaces the default.
STRUCTURAL_CHECKS = {
    "flashcards": _valid_flashcards,
    "timetable": _valid_timetable,
    "pomodoro": _valid_pomodoro,
}

def _records(cls) -> Callable[[list], list]:
    def build(items: list) -> list:
        if not isinstance(items, list):
            raise TypeError(f"expected a list, got {type(items).__name__}")
        return [cls.from_dict(item) for item in items]
    return build


# How each top-level field is read; a field that fails falls back on its own.
SECTION_BUILDERS = {
    "theme": Theme,
    "activeSection": Section,
    "tasks": _records(Task),
    "notes": _records(Note),
    "assignments": _records(Assignment),
    "flashcards": Flashcards.from_dict,
    "timetable": Timetable.from_dict,
    "pomodoro": PomodoroState.from_dict,
    "goals": _records(Goal),
    "habits": _records(Habit),
}


def merge_with_defaults(parsed: dict, base: dict) -> dict:
    """Shallow-merge a saved document over the defaults.

    Every top-level field present in `parsed` wins, except the
    structurally checked ones, which fall back to the default when their
    saved value doesn't have the minimum expected shape.
    """
    merged = {**base, **parsed}
    for key, check in STRUCTURAL_CHECKS.items():
        if not check(parsed.get(key)):
            if key in parsed:
                logger.info("Saved %r has an unexpected shape; using defaults", key)
            merged[key] = base[key]
    return merged


def coerce_sections(merged: dict, base: dict) -> dict:
    """Swap in the default for any field whose records can't be read.

    A section can pass its shape check and still hold a bad record (an
    unknown timer mode, a deck without an id); only that field is reset.
    """
    for key, build in SECTION_BUILDERS.items():
        try:
            build(merged[key])
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning("Saved %r could not be read (%s); using defaults", key, e)
            merged[key] = base[key]
    return merged


def parse_state(raw: str | None, today: date | None = None) -> AppState:
    """Turn a saved document into an AppState. Never raises."""
    base = default_state(today)
    if not raw:
        return base
    try:
        parsed = json.loads(raw)
        if not isinstance(parsed, dict):
            raise ValueError("saved state is not a JSON object")
        defaults = base.to_dict()
        merged = coerce_sections(merge_with_defaults(parsed, defaults), defaults)
        return AppState.from_dict(merged)
    except (ValueError, TypeError, KeyError, AttributeError) as e:
        logger.warning("Discarding unreadable saved state: %s", e)
        return default_state(today)


def serialize_state(state: AppState) -> str:
    return json.dumps(state.to_dict(), ensure_ascii=False)


class PersistentStore:
    """Owns the canonical AppState and keeps it in sync with storage.

    Every mutation goes through `save()` (directly or via `mutate()`),
    which writes the whole document and then notifies observers.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH, key: str = STORAGE_KEY):
        self.db_path = db_path
        self.key = key
        self._observers: list[Callable[[], None]] = []
        try:
            init_db(db_path)
        except sqlite3.DatabaseError as e:
            aside = set_aside(db_path)
            logger.warning("Storage file is unreadable (%s); moved it to %s", e, aside)
            init_db(db_path)
        self.state = self.load()

    def load(self) -> AppState:
        try:
            raw = read_state_blob(self.db_path, self.key)
        except sqlite3.DatabaseError as e:
            logger.warning("Could not read saved state: %s", e)
            raw = None
        return parse_state(raw)

    def reload(self) -> AppState:
        self.state = self.load()
        return self.state

    def save(self, state: AppState | None = None) -> None:
        if state is not None:
            self.state = state
        write_state_blob(self.db_path, serialize_state(self.state), self.key)
        self._notify()

    @contextmanager
    def mutate(self) -> Iterator[AppState]:
        """Yield the live state and save it once the block exits cleanly."""
        yield self.state
        self.save()

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._observers):
            callback()

    def reset(self) -> AppState:
        """Replace everything with a freshly seeded state."""
        self.save(default_state())
        return self.state

    def toggle_theme(self) -> Theme:
        with self.mutate() as state:
            state.theme = Theme.LIGHT if state.theme == Theme.DARK else Theme.DARK
        return self.state.theme

    def set_active_section(self, section: Section | str) -> None:
        with self.mutate() as state:
            state.active_section = Section(section)
