"""Goals with progress tracking and daily habits with streaks."""
from datetime import date, timedelta

from studysphere.models import ActionRejected, Goal, Habit, require_text
from studysphere.seed import now_ms, uid
from studysphere.store import PersistentStore


def _goal(store: PersistentStore, goal_id: str) -> Goal:
    goal = next((g for g in store.state.goals if g.id == goal_id), None)
    if goal is None:
        raise ActionRejected("Goal not found")
    return goal


def _habit(store: PersistentStore, habit_id: str) -> Habit:
    habit = next((h for h in store.state.habits if h.id == habit_id), None)
    if habit is None:
        raise ActionRejected("Habit not found")
    return habit


def add_goal(store: PersistentStore, title: str, details: str = "", meta: str = "") -> Goal:
    goal = Goal(
        id=uid(),
        title=require_text(title, "Title"),
        details=(details or "").strip(),
        meta=(meta or "").strip(),
        created_at=now_ms(),
    )
    with store.mutate() as state:
        state.goals.insert(0, goal)
    return goal


def set_progress(store: PersistentStore, goal_id: str, progress) -> Goal:
    """Set progress (0-100); a goal is done exactly when it reaches 100."""
    try:
        value = int(progress)
    except (TypeError, ValueError):
        value = 0
    goal = _goal(store, goal_id)
    with store.mutate():
        goal.progress = max(0, min(100, value))
        goal.done = goal.progress >= 100
    return goal


def set_goal_done(store: PersistentStore, goal_id: str, done: bool) -> Goal:
    """Marking done fills progress; unmarking leaves progress as it was."""
    goal = _goal(store, goal_id)
    with store.mutate():
        goal.done = bool(done)
        if goal.done:
            goal.progress = 100
    return goal


def toggle_goal(store: PersistentStore, goal_id: str) -> Goal:
    return set_goal_done(store, goal_id, not _goal(store, goal_id).done)


def delete_goal(store: PersistentStore, goal_id: str) -> None:
    with store.mutate() as state:
        state.goals = [g for g in state.goals if g.id != goal_id]


def add_habit(store: PersistentStore, title: str, details: str = "", meta: str = "") -> Habit:
    habit = Habit(
        id=uid(),
        title=require_text(title, "Title"),
        details=(details or "").strip(),
        meta=(meta or "").strip() or "daily",
        created_at=now_ms(),
    )
    with store.mutate() as state:
        state.habits.insert(0, habit)
    return habit


def toggle_habit_day(store: PersistentStore, habit_id: str, day: date | None = None) -> bool:
    key = (day or date.today()).isoformat()
    habit = _habit(store, habit_id)
    with store.mutate():
        habit.days[key] = not habit.days.get(key, False)
    return habit.days[key]


def delete_habit(store: PersistentStore, habit_id: str) -> None:
    with store.mutate() as state:
        state.habits = [h for h in state.habits if h.id != habit_id]


def habit_streak(habit: Habit, today: date | None = None) -> int:
    """Consecutive completed days counting back from today."""
    day = today or date.today()
    streak = 0
    while habit.days.get(day.isoformat()):
        streak += 1
        day -= timedelta(days=1)
    return streak


def best_streak(habits: list[Habit], today: date | None = None) -> int:
    if not habits:
        return 0
    return max(habit_streak(h, today) for h in habits)
