"""Interactive CLI application."""
import logging
import os
import sys
import time
from pathlib import Path

from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from studysphere.dashboard import get_badges, get_due_soon, get_insights, get_progress_color
from studysphere.db import DEFAULT_DB_PATH, StorageError
from studysphere.flashcards import DeckBrowser, add_card, add_deck, delete_deck
from studysphere.goals import (
    add_goal, add_habit, habit_streak, set_progress, toggle_goal, toggle_habit_day,
)
from studysphere.importer import import_deck
from studysphere.models import ActionRejected, AssignmentStatus, Priority, TASK_CATEGORIES, TimerMode
from studysphere.planner import (
    add_assignment, add_note, add_task, clear_completed_tasks, sort_stored_tasks,
    toggle_assignment, toggle_task,
)
from studysphere.quiz import QuizEngine, QuizState
from studysphere.store import PersistentStore
from studysphere.timer import IntervalScheduler, TimerEngine, format_clock
from studysphere.timetable import DAYS, TIMES, add_subject, assign_subject, grid, remove_slot

console = Console()
logger = logging.getLogger("studysphere")

EXIT_WORDS = ("q", "menu")


class SessionExitRequested(Exception):
    """User asked to leave the current session and return to the menu."""


def session_prompt(prompt: str, **kwargs) -> str:
    """Prompt.ask that raises SessionExitRequested on 'q' or 'menu'."""
    if kwargs.get("choices"):
        kwargs["choices"] = [*kwargs["choices"], *EXIT_WORDS]
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str] | None = None) -> int:
    return int(session_prompt(prompt, choices=choices))


def log_level(name: str | None) -> int:
    """Level number for a name like "debug"; unknown names mean WARNING."""
    level = logging.getLevelName((name or "").strip().upper())
    return level if isinstance(level, int) else logging.WARNING


def setup_logging() -> None:
    level = log_level(os.environ.get("STUDYSPHERE_LOG_LEVEL"))
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def show_welcome():
    console.print(Panel(
        "[bold]StudySphere[/bold]\n[dim]Tasks, decks, focus timer[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("tasks", "To-do list"),
        ("notes", "Study notes"),
        ("assignments", "Deadlines"),
        ("timetable", "Weekly schedule"),
        ("decks", "Flashcard decks"),
        ("quiz", "Quiz yourself on a deck"),
        ("timer", "Pomodoro timer"),
        ("goals", "Goals and progress"),
        ("habits", "Daily habits"),
        ("dashboard", "Badges and insights"),
        ("import", "Import a deck from a file"),
        ("theme", "Toggle light/dark"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def pick(items: list, label) -> object:
    """Number a list and let the user choose one entry."""
    for i, item in enumerate(items, 1):
        console.print(f"  [cyan]{i}[/cyan]) {label(item)}")
    choice = session_int_prompt("Select", choices=[str(i) for i in range(1, len(items) + 1)])
    return items[choice - 1]


def cmd_tasks(store: PersistentStore):
    store.set_active_section("tasks")
    table = Table(title="Tasks")
    table.add_column("", width=2)
    table.add_column("Title")
    table.add_column("Category")
    table.add_column("Due")
    table.add_column("Priority")
    for t in store.state.tasks:
        table.add_row("[green]✓[/green]" if t.done else "", t.title, t.category, t.due or "-",
                      t.priority.value)
    console.print(table)
    action = session_prompt("Action", choices=["add", "toggle", "sort", "clear", "back"], default="back")
    if action == "add":
        title = session_prompt("Title")
        category = session_prompt("Category", choices=list(TASK_CATEGORIES), default="Study")
        due = session_prompt("Due (YYYY-MM-DD)", default="") or None
        priority = session_prompt("Priority", choices=[p.value for p in Priority], default="Medium")
        add_task(store, title, category, due, priority)
        console.print("[green]Task added.[/green]")
    elif action == "toggle" and store.state.tasks:
        task = pick(store.state.tasks, lambda t: t.title)
        done = toggle_task(store, task.id)
        console.print("[green]Task completed.[/green]" if done else "[yellow]Task reopened.[/yellow]")
    elif action == "sort":
        sort_stored_tasks(store)
        console.print("[green]Tasks sorted by due date.[/green]")
    elif action == "clear":
        removed = clear_completed_tasks(store)
        console.print(f"[green]Removed {removed} completed task(s).[/green]")


def cmd_notes(store: PersistentStore):
    store.set_active_section("notes")
    for n in store.state.notes:
        console.print(Panel(n.body, title=n.title, border_style="cyan"))
    if Confirm.ask("Add a note?", default=False):
        add_note(store, session_prompt("Title"), session_prompt("Content"))
        console.print("[green]Note added.[/green]")


def cmd_assignments(store: PersistentStore):
    store.set_active_section("assignments")
    table = Table(title="Assignments")
    table.add_column("Title")
    table.add_column("Subject")
    table.add_column("Due")
    table.add_column("Status")
    for a in store.state.assignments:
        color = "green" if a.done else "cyan"
        table.add_row(a.title, a.subject, a.due or "-", f"[{color}]{a.status.value}[/{color}]")
    console.print(table)
    action = session_prompt("Action", choices=["add", "toggle", "back"], default="back")
    if action == "add":
        status = session_prompt("Status", choices=[s.value for s in AssignmentStatus], default="Not Started")
        add_assignment(store, session_prompt("Title"), session_prompt("Subject"),
                       session_prompt("Due (YYYY-MM-DD)", default="") or None, status)
        console.print("[green]Assignment added.[/green]")
    elif action == "toggle" and store.state.assignments:
        assignment = pick(store.state.assignments, lambda a: a.title)
        toggle_assignment(store, assignment.id)


def cmd_timetable(store: PersistentStore):
    store.set_active_section("timetable")
    table = Table(title="Timetable")
    table.add_column("Time")
    for day in DAYS:
        table.add_column(day)
    for time_label, row in zip(TIMES, grid(store)):
        table.add_row(time_label, *[f"[{s.color}]{s.title}[/]" if s else "" for s in row])
    console.print(table)
    action = session_prompt("Action", choices=["assign", "remove", "subject", "back"], default="back")
    if action == "assign":
        subject = pick(store.state.timetable.palette, lambda s: s.title)
        day = session_prompt("Day", choices=list(DAYS))
        slot_time = session_prompt("Time", choices=list(TIMES))
        assign_subject(store, subject.id, day, slot_time)
        console.print(f"[green]{subject.title} added to {day} at {slot_time}.[/green]")
    elif action == "remove":
        remove_slot(store, session_prompt("Day", choices=list(DAYS)), session_prompt("Time", choices=list(TIMES)))
    elif action == "subject":
        add_subject(store, session_prompt("Subject name"), session_prompt("Color", default="#4f46e5"))


def cmd_decks(store: PersistentStore, browser: DeckBrowser):
    store.set_active_section("flashcards")
    decks = store.state.flashcards.decks
    for d in decks:
        marker = " ←" if d.id == browser.active_deck_id else ""
        console.print(f"  [cyan]{d.name}[/cyan] ({len(d.cards)} cards){marker}")
    action = session_prompt("Action", choices=["open", "new", "card", "delete", "back"], default="back")
    if action == "open" and decks:
        browser.select(pick(decks, lambda d: d.name).id)
        run_browse_session(browser)
    elif action == "new":
        deck = add_deck(store, session_prompt("Deck name"))
        browser.select(deck.id)
        console.print("[green]Deck created.[/green]")
    elif action == "card" and browser.deck:
        add_card(store, browser.deck.id, session_prompt("Front"), session_prompt("Back"))
        console.print("[green]Card added.[/green]")
    elif action == "delete" and decks:
        deck = pick(decks, lambda d: d.name)
        if Confirm.ask(f"Delete '{deck.name}'?", default=False):
            delete_deck(store, deck.id)


def run_browse_session(browser: DeckBrowser) -> None:
    while True:
        card = browser.current_card()
        if card is None:
            console.print("[yellow]No cards in this deck.[/yellow]")
            return
        total = len(browser.deck.cards)
        console.print(Panel(card.front, title=f"Card {browser.index + 1}/{total}", border_style="cyan"))
        session_prompt("[dim]Press Enter to flip[/dim]", default="")
        console.print(Panel(card.back, border_style="green"))
        step = session_prompt("prev / next", choices=["p", "n"], default="n")
        if step == "n" and browser.index == total - 1:
            return
        browser.move(1 if step == "n" else -1)


def run_quiz_session(quiz: QuizEngine, deck_id: str | None) -> int:
    quiz.start(deck_id)
    return play_quiz(quiz)


def play_quiz(quiz: QuizEngine) -> int:
    """Answer every card of the open session; returns the score."""
    console.print(f"\n[bold]Quiz:[/bold] {quiz.session.total} cards\n")
    try:
        while quiz.state == QuizState.ACTIVE:
            snap = quiz.snapshot()
            console.print(Panel(snap.card.front, title=f"Quiz {snap.index + 1}/{snap.total}", border_style="cyan"))
            session_prompt("[dim]Answer in your head, then press Enter[/dim]", default="")
            console.print(Panel(snap.card.back, border_style="green"))
            got_it = session_prompt("Got it?", choices=["y", "n"]) == "y"
            quiz.answer(got_it)
            correct, answered = quiz.progress()
            console.print(f"[dim]Current score: {correct}/{answered}[/dim]\n")
    except SessionExitRequested:
        quiz.exit()
        raise
    score = quiz.score()
    correct, total = quiz.progress()
    console.print(f"[bold]Score: {correct}/{total} ({score}%)[/bold]\n")
    return score


def cmd_quiz(store: PersistentStore, quiz: QuizEngine, browser: DeckBrowser):
    decks = store.state.flashcards.decks
    if not decks:
        console.print("[yellow]Create a deck first.[/yellow]")
        return
    deck = pick(decks, lambda d: f"{d.name} ({len(d.cards)} cards)")
    browser.select(deck.id)
    quiz.select_deck(deck.id)
    run_quiz_session(quiz, deck.id)
    while Confirm.ask("Restart quiz?", default=False):
        quiz.restart()
        play_quiz(quiz)
    quiz.exit()


def timer_panel(timer: TimerEngine) -> Panel:
    snap = timer.snapshot()
    state = "running" if snap.is_running else "paused"
    return Panel(
        f"[bold]{snap.clock}[/bold]  [dim]{snap.mode.value} · {state}[/dim]",
        title="Pomodoro", border_style="magenta" if snap.mode == TimerMode.FOCUS else "green",
    )


def watch_timer(timer: TimerEngine, scheduler: IntervalScheduler) -> None:
    """Drive the tick loop on screen until the session ends or Ctrl+C."""
    if not timer.pomodoro.is_running:
        timer.toggle_run()
    try:
        with Live(timer_panel(timer), console=console, refresh_per_second=4) as live:
            while timer.pomodoro.is_running:
                scheduler.run_pending()
                live.update(timer_panel(timer))
                time.sleep(0.1)
    except KeyboardInterrupt:
        timer.toggle_run()
        console.print("[dim]Paused.[/dim]")


def cmd_timer(store: PersistentStore, timer: TimerEngine, scheduler: IntervalScheduler):
    store.set_active_section("studyroom")
    while True:
        console.print(timer_panel(timer))
        action = session_prompt(
            "Action", choices=["watch", "toggle", "reset", "mode", "skip", "durations", "back"],
            default="watch",
        )
        if action == "back":
            return
        elif action == "watch":
            watch_timer(timer, scheduler)
        elif action == "toggle":
            timer.toggle_run()
        elif action == "reset":
            timer.reset()
        elif action == "mode":
            timer.set_mode(session_prompt("Mode", choices=[m.value for m in TimerMode]))
        elif action == "skip":
            next_mode = timer.skip()
            console.print(f"[dim]Skipped to {next_mode.value}.[/dim]")
        elif action == "durations":
            current = timer.durations()
            custom = timer.apply_durations(
                session_prompt("Focus minutes (10-90)", default=str(current[TimerMode.FOCUS])),
                session_prompt("Short break minutes (3-30)", default=str(current[TimerMode.SHORT])),
                session_prompt("Long break minutes (5-60)", default=str(current[TimerMode.LONG])),
            )
            console.print(f"[green]Saved {custom.focus}/{custom.short}/{custom.long} minutes.[/green]")


def cmd_goals(store: PersistentStore):
    table = Table(title="Goals")
    table.add_column("Goal")
    table.add_column("Progress", justify="right")
    table.add_column("Status")
    for g in store.state.goals:
        color = get_progress_color(g.progress)
        table.add_row(g.title, f"[{color}]{g.progress}%[/{color}]", "Done" if g.done else "")
    console.print(table)
    action = session_prompt("Action", choices=["add", "progress", "toggle", "back"], default="back")
    if action == "add":
        add_goal(store, session_prompt("Title"), session_prompt("Details", default=""),
                 session_prompt("Tag", default=""))
    elif action == "progress" and store.state.goals:
        goal = pick(store.state.goals, lambda g: g.title)
        set_progress(store, goal.id, session_prompt("Progress (0-100)", default=str(goal.progress)))
    elif action == "toggle" and store.state.goals:
        toggle_goal(store, pick(store.state.goals, lambda g: g.title).id)


def cmd_habits(store: PersistentStore):
    table = Table(title="Habits")
    table.add_column("Habit")
    table.add_column("Cadence")
    table.add_column("Streak", justify="right")
    for h in store.state.habits:
        table.add_row(h.title, h.meta, str(habit_streak(h)))
    console.print(table)
    action = session_prompt("Action", choices=["add", "check", "back"], default="back")
    if action == "add":
        add_habit(store, session_prompt("Title"), session_prompt("Details", default=""),
                  session_prompt("Cadence", default="daily"))
    elif action == "check" and store.state.habits:
        habit = pick(store.state.habits, lambda h: h.title)
        done = toggle_habit_day(store, habit.id)
        console.print("[green]Checked in for today.[/green]" if done else "[yellow]Check-in removed.[/yellow]")


def cmd_dashboard(store: PersistentStore):
    badges = get_badges(store.state)
    insights = get_insights(store.state)
    console.print(Panel(
        "  ".join(f"{k.title()}: [bold]{v}[/bold]" for k, v in badges.items()),
        title="Overview", border_style="blue",
    ))
    completion = insights["goal_completion"]
    console.print(
        f"\n  Goals: [bold]{insights['goals_done']}/{insights['goals_total']}[/bold]"
        + (f" ({completion}%)" if completion is not None else "")
        + f"  |  Avg progress: [bold]{insights['avg_progress']}%[/bold]"
        + f"  |  Habits today: [bold]{insights['habits_today']}/{insights['habits_total']}[/bold]"
        + f"  |  Best streak: [bold]{insights['best_streak']}[/bold]"
        + f"  |  Focus sessions: [bold]{insights['focus_sessions']}[/bold]"
    )
    due = get_due_soon(store.state)
    if due:
        table = Table(title="Due Soon")
        table.add_column("Kind")
        table.add_column("Title")
        table.add_column("Due")
        for item in due:
            color = "red" if item["days_left"] < 0 else "yellow"
            table.add_row(item["kind"], item["title"], f"[{color}]{item['due']}[/{color}]")
        console.print(table)


def cmd_import(store: PersistentStore):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    result = import_deck(store, file_path)
    skipped = f", {result['skipped']} skipped" if result["skipped"] else ""
    console.print(f"[green]Imported {result['name']} ({result['cards']} cards{skipped})[/green]")


def main():
    setup_logging()
    db_path = DEFAULT_DB_PATH
    store = PersistentStore(db_path)
    scheduler = IntervalScheduler()
    timer = TimerEngine(store, scheduler)
    quiz = QuizEngine(store)
    browser = DeckBrowser(store)
    timer.on_complete(lambda mode: console.print(
        f"\n[bold green]Time![/bold green] {mode.value} session complete. Switching mode."
    ))

    show_welcome()
    console.print(f"[dim]Timer: {format_clock(timer.pomodoro.seconds_left)}[/dim]")

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default=store.state.active_section.value).strip().lower()
        try:
            if choice == "tasks":
                cmd_tasks(store)
            elif choice == "notes":
                cmd_notes(store)
            elif choice == "assignments":
                cmd_assignments(store)
            elif choice == "timetable":
                cmd_timetable(store)
            elif choice in ("decks", "flashcards"):
                cmd_decks(store, browser)
            elif choice == "quiz":
                cmd_quiz(store, quiz, browser)
            elif choice in ("timer", "studyroom"):
                cmd_timer(store, timer, scheduler)
            elif choice == "goals":
                cmd_goals(store)
            elif choice == "habits":
                cmd_habits(store)
            elif choice == "dashboard":
                cmd_dashboard(store)
            elif choice == "import":
                cmd_import(store)
            elif choice == "theme":
                theme = store.toggle_theme()
                console.print(f"[dim]{theme.value.title()} mode enabled.[/dim]")
            elif choice in ("quit", "exit", "q"):
                timer.close()
                console.print("[dim]Keep it up![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except SessionExitRequested:
            console.print("[dim]Back to menu.[/dim]")
        except ActionRejected as e:
            console.print(f"[yellow]{e}[/yellow]")
        except StorageError as e:
            console.print(f"[bold red]{e}[/bold red]")
            sys.exit(1)
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.exception("Command %r failed", choice)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
