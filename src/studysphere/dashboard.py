"""Badge counts and progress insights."""
from datetime import date

from studysphere.goals import best_streak
from studysphere.models import AppState


def get_badges(state: AppState) -> dict:
    return {
        "tasks": sum(1 for t in state.tasks if not t.done),
        "notes": len(state.notes),
        "assignments": sum(1 for a in state.assignments if not a.done),
        "decks": len(state.flashcards.decks),
        "goals": sum(1 for g in state.goals if not g.done),
        "habits": len(state.habits),
    }


def get_progress_color(pct: float) -> str:
    if pct >= 80:
        return "green"
    elif pct >= 50:
        return "yellow"
    elif pct >= 25:
        return "dark_orange"
    return "red"


def get_due_soon(state: AppState, days: int = 3, today: date | None = None) -> list[dict]:
    """Open tasks and assignments due within `days` (overdue included), nearest first."""
    today = today or date.today()
    items = [("task", t.title, t.due) for t in state.tasks if not t.done and t.due]
    items += [("assignment", a.title, a.due) for a in state.assignments if not a.done and a.due]
    results = []
    for kind, title, due in items:
        try:
            days_left = (date.fromisoformat(due) - today).days
        except ValueError:
            continue
        if days_left <= days:
            results.append({"kind": kind, "title": title, "due": due, "days_left": days_left})
    return sorted(results, key=lambda r: r["days_left"])


def get_insights(state: AppState, today: date | None = None) -> dict:
    today = today or date.today()
    goals = state.goals
    total_goals = len(goals)
    done_goals = sum(1 for g in goals if g.done)
    avg_progress = sum(g.progress for g in goals) / total_goals if total_goals else 0.0
    key = today.isoformat()
    return {
        "goals_total": total_goals,
        "goals_done": done_goals,
        "goal_completion": round(done_goals / total_goals * 100, 1) if total_goals else None,
        "avg_progress": round(avg_progress, 1),
        "habits_total": len(state.habits),
        "habits_today": sum(1 for h in state.habits if h.days.get(key)),
        "best_streak": best_streak(state.habits, today),
        "focus_sessions": state.pomodoro.focus_count,
    }
