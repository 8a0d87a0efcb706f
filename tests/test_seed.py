from datetime import date

from studysphere.models import AppState, Section, Theme, TimerMode
from studysphere.seed import add_days_iso, default_state, uid


def test_add_days_iso():
    assert add_days_iso(0, date(2026, 3, 30)) == "2026-03-30"
    assert add_days_iso(3, date(2026, 3, 30)) == "2026-04-02"


def test_uid_is_unique():
    assert len({uid() for _ in range(100)}) == 100


def test_default_state_is_complete():
    state = default_state()
    assert isinstance(state, AppState)
    assert state.theme == Theme.LIGHT
    assert state.active_section == Section.TASKS
    assert len(state.tasks) == 3
    assert len(state.notes) == 2
    assert len(state.assignments) == 3
    assert len(state.flashcards.decks) == 2
    assert all(len(d.cards) == 3 for d in state.flashcards.decks)
    assert len(state.timetable.slots) == 3
    assert len(state.timetable.palette) == 5
    assert state.goals == []
    assert state.habits == []


def test_default_pomodoro():
    p = default_state().pomodoro
    assert p.mode == TimerMode.FOCUS
    assert p.seconds_left == 25 * 60
    assert p.is_running is False


def test_due_dates_relative_to_today():
    today = date(2026, 10, 19)
    state = default_state(today)
    assert sorted(t.due for t in state.tasks) == ["2026-10-19", "2026-10-20", "2026-10-21"]
    assert max(a.due for a in state.assignments) == "2026-10-25"


def test_seeded_ids_unique():
    state = default_state()
    ids = [t.id for t in state.tasks] + [d.id for d in state.flashcards.decks]
    ids += [c.id for d in state.flashcards.decks for c in d.cards]
    assert len(ids) == len(set(ids))
