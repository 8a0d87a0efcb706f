"""Build the first-run state with example tasks, notes, decks and a timetable."""
import time
import uuid
from datetime import date, timedelta

from studysphere.models import (
    AppState, Assignment, AssignmentStatus, Card, Deck, Flashcards, Note,
    PomodoroState, Priority, Slot, Subject, Task, Timetable,
)


def uid() -> str:
    return uuid.uuid4().hex[:16]


def now_ms() -> int:
    return int(time.time() * 1000)


def add_days_iso(days: int, today: date | None = None) -> str:
    """Return today's date shifted by `days` as YYYY-MM-DD."""
    return ((today or date.today()) + timedelta(days=days)).isoformat()


def seed_tasks(today: date | None = None) -> list[Task]:
    return [
        Task(uid(), "Read Chapter 3 (Biology)", "School", add_days_iso(1, today), Priority.MEDIUM, False),
        Task(uid(), "Solve 15 calculus problems", "Homework", add_days_iso(2, today), Priority.HIGH, False),
        Task(uid(), "Prepare flashcards for French vocab", "Study", add_days_iso(0, today), Priority.LOW, True),
    ]


def seed_notes(stamp: int) -> list[Note]:
    return [
        Note(uid(), "History: Causes of WWI",
             "Alliance system, militarism, imperialism, nationalism. Trigger: assassination in Sarajevo.",
             stamp),
        Note(uid(), "Chemistry: pH shortcuts",
             "pH = -log[H+]. Each pH unit is 10x change in acidity.",
             stamp - 1000 * 60 * 60 * 8),
    ]


def seed_assignments(today: date | None = None) -> list[Assignment]:
    return [
        Assignment(uid(), "English Essay Draft", "English", add_days_iso(3, today),
                   AssignmentStatus.IN_PROGRESS, False),
        Assignment(uid(), "Physics Lab Report", "Physics", add_days_iso(6, today),
                   AssignmentStatus.NOT_STARTED, False),
        Assignment(uid(), "Math Quiz Revision", "Math", add_days_iso(1, today),
                   AssignmentStatus.DONE, True),
    ]


def seed_flashcards() -> Flashcards:
    biology = Deck(uid(), "Biology - Cell Basics", [
        Card(uid(), "What is the powerhouse of the cell?", "Mitochondria"),
        Card(uid(), "Cell membrane function?", "Controls what enters and leaves the cell"),
        Card(uid(), "Where is DNA stored (eukaryotes)?", "Nucleus"),
    ])
    french = Deck(uid(), "French - Common Verbs", [
        Card(uid(), "Être", "To be"),
        Card(uid(), "Avoir", "To have"),
        Card(uid(), "Aller", "To go"),
    ])
    return Flashcards(decks=[biology, french])


def seed_timetable() -> Timetable:
    return Timetable(
        slots={
            "Mon_10:00": Slot("Math", "#4f46e5"),
            "Wed_12:00": Slot("Biology", "#10b981"),
            "Fri_08:00": Slot("French", "#f59e0b"),
        },
        palette=[
            Subject(uid(), "Math", "#4f46e5"),
            Subject(uid(), "Biology", "#10b981"),
            Subject(uid(), "Physics", "#0ea5e9"),
            Subject(uid(), "History", "#ef4444"),
            Subject(uid(), "French", "#f59e0b"),
        ],
    )


def default_state(today: date | None = None) -> AppState:
    """Construct a structurally complete state seeded relative to `today`."""
    return AppState(
        tasks=seed_tasks(today),
        notes=seed_notes(now_ms()),
        assignments=seed_assignments(today),
        flashcards=seed_flashcards(),
        timetable=seed_timetable(),
        pomodoro=PomodoroState(),
    )
