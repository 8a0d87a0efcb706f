# tests/test_integration.py
"""End-to-end test of the core workflow."""
import random

from studysphere.dashboard import get_badges, get_insights
from studysphere.flashcards import add_card, add_deck, delete_card
from studysphere.goals import add_goal, add_habit, set_progress, toggle_habit_day
from studysphere.importer import import_deck
from studysphere.models import TimerMode
from studysphere.planner import add_task, toggle_task
from studysphere.quiz import QuizEngine, QuizState
from studysphere.store import PersistentStore
from studysphere.timer import IntervalScheduler, TimerEngine


def test_full_study_day(tmp_db, tmp_path, clock):
    """Plan, study, quiz and run focus sessions, then reopen the app."""
    store = PersistentStore(tmp_db)
    scheduler = IntervalScheduler(clock=clock.seconds)
    timer = TimerEngine(store, scheduler, clock=clock)
    quiz = QuizEngine(store, rng=random.Random(42))

    # Planning
    task = add_task(store, "Revise photosynthesis", "Study", "2026-05-01", "High")
    toggle_task(store, task.id)
    goal = add_goal(store, "Finish biology unit")
    set_progress(store, goal.id, 60)
    habit = add_habit(store, "Read 20 minutes")
    toggle_habit_day(store, habit.id)

    # Build and import decks
    deck = add_deck(store, "Organelles")
    for front, back in [("Ribosome", "Makes proteins"), ("Golgi", "Packages proteins")]:
        add_card(store, deck.id, front, back)
    source = tmp_path / "verbs.txt"
    source.write_text("Faire :: To do\nVenir :: To come\nPrendre :: To take\n", encoding="utf-8")
    imported = import_deck(store, str(source))
    assert imported["cards"] == 3

    # Quiz the imported deck: 2 of 3
    quiz.start(imported["deck_id"])
    for got_it in (True, False, True):
        quiz.answer(got_it)
    assert quiz.score() == 67

    # Editing a deck mid-quiz drops the session
    delete_card(store, deck.id, deck.cards[0].id)
    quiz.start(deck.id)
    delete_card(store, deck.id, store.state.find_deck(deck.id).cards[0].id)
    assert quiz.state == QuizState.INACTIVE

    # Two focus sessions with a break between, driven by the scheduler
    completed = []
    timer.on_complete(completed.append)
    timer.apply_durations(10, 3, 5)
    for _ in range(3):
        timer.toggle_run()
        while timer.pomodoro.is_running:
            clock.advance(400)
            scheduler.run_pending()
    assert completed == [TimerMode.FOCUS, TimerMode.SHORT, TimerMode.FOCUS]
    assert timer.pomodoro.mode == TimerMode.SHORT
    assert timer.pomodoro.focus_count == 2
    assert scheduler.active_count == 0

    # Reopen
    reopened = PersistentStore(tmp_db).state
    assert reopened == store.state
    badges = get_badges(reopened)
    assert badges["decks"] == 4
    assert badges["goals"] == 1
    insights = get_insights(reopened)
    assert insights["avg_progress"] == 60.0
    assert insights["habits_today"] == 1
    assert insights["best_streak"] == 1
    assert insights["focus_sessions"] == 2
