"""Data classes for the planner domain model.

Every record converts to and from the camelCase JSON document that is
persisted under a single storage key.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ActionRejected(ValueError):
    """A user action was refused; nothing was changed."""


def require_text(value, field_name: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ActionRejected(f"{field_name} is required")
    return text


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class Section(str, Enum):
    TASKS = "tasks"
    NOTES = "notes"
    TIMETABLE = "timetable"
    ASSIGNMENTS = "assignments"
    FLASHCARDS = "flashcards"
    STUDYROOM = "studyroom"


class TimerMode(str, Enum):
    FOCUS = "focus"
    SHORT = "short"
    LONG = "long"


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class AssignmentStatus(str, Enum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


TASK_CATEGORIES = ("Study", "School", "Homework", "Personal")


def _opt_int(value) -> Optional[int]:
    return None if value is None else int(value)


@dataclass
class Card:
    id: str
    front: str
    back: str

    def to_dict(self) -> dict:
        return {"id": self.id, "front": self.front, "back": self.back}

    @classmethod
    def from_dict(cls, d: dict) -> "Card":
        return cls(id=str(d["id"]), front=str(d["front"]), back=str(d["back"]))


@dataclass
class Deck:
    id: str
    name: str
    cards: list[Card] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "cards": [c.to_dict() for c in self.cards]}

    @classmethod
    def from_dict(cls, d: dict) -> "Deck":
        return cls(
            id=str(d["id"]),
            name=str(d["name"]),
            cards=[Card.from_dict(c) for c in d.get("cards", [])],
        )


@dataclass
class Flashcards:
    decks: list[Deck] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"decks": [d.to_dict() for d in self.decks]}

    @classmethod
    def from_dict(cls, d: dict) -> "Flashcards":
        return cls(decks=[Deck.from_dict(x) for x in d["decks"]])


@dataclass
class Slot:
    title: str
    color: str

    def to_dict(self) -> dict:
        return {"title": self.title, "color": self.color}

    @classmethod
    def from_dict(cls, d: dict) -> "Slot":
        return cls(title=str(d["title"]), color=str(d["color"]))


@dataclass
class Subject:
    id: str
    title: str
    color: str

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title, "color": self.color}

    @classmethod
    def from_dict(cls, d: dict) -> "Subject":
        return cls(id=str(d["id"]), title=str(d["title"]), color=str(d["color"]))


@dataclass
class Timetable:
    # slots are keyed "<Day>_<HH:MM>", e.g. "Mon_10:00"
    slots: dict[str, Slot] = field(default_factory=dict)
    palette: list[Subject] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "slots": {k: s.to_dict() for k, s in self.slots.items()},
            "palette": [s.to_dict() for s in self.palette],
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Timetable":
        return cls(
            slots={str(k): Slot.from_dict(v) for k, v in d["slots"].items()},
            palette=[Subject.from_dict(s) for s in d.get("palette", [])],
        )


@dataclass
class Durations:
    """Custom pomodoro lengths in minutes (clamped when read)."""
    focus: int = 25
    short: int = 5
    long: int = 15

    def to_dict(self) -> dict:
        return {"focus": self.focus, "short": self.short, "long": self.long}

    @classmethod
    def from_dict(cls, d: dict) -> "Durations":
        return cls(
            focus=int(d.get("focus") or 0),
            short=int(d.get("short") or 0),
            long=int(d.get("long") or 0),
        )


@dataclass
class PomodoroState:
    mode: TimerMode = TimerMode.FOCUS
    is_running: bool = False
    seconds_left: int = 25 * 60
    last_tick_at: Optional[int] = None  # epoch milliseconds
    custom: Optional[Durations] = None
    focus_count: int = 0

    def to_dict(self) -> dict:
        d = {
            "mode": self.mode.value,
            "isRunning": self.is_running,
            "secondsLeft": self.seconds_left,
            "lastTickAt": self.last_tick_at,
            "focusCount": self.focus_count,
        }
        if self.custom is not None:
            d["custom"] = self.custom.to_dict()
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "PomodoroState":
        custom = d.get("custom")
        return cls(
            mode=TimerMode(d.get("mode", "focus")),
            is_running=bool(d.get("isRunning", False)),
            seconds_left=max(0, int(d["secondsLeft"])),
            last_tick_at=_opt_int(d.get("lastTickAt")),
            custom=Durations.from_dict(custom) if custom else None,
            focus_count=int(d.get("focusCount") or 0),
        )


@dataclass
class Task:
    id: str
    title: str
    category: str = "Study"
    due: Optional[str] = None  # YYYY-MM-DD
    priority: Priority = Priority.MEDIUM
    done: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id, "title": self.title, "category": self.category,
            "due": self.due, "priority": self.priority.value, "done": self.done,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Task":
        return cls(
            id=str(d["id"]),
            title=str(d["title"]),
            category=str(d.get("category", "Study")),
            due=d.get("due") or None,
            priority=Priority(d.get("priority", "Medium")),
            done=bool(d.get("done", False)),
        )


@dataclass
class Note:
    id: str
    title: str
    body: str
    updated_at: int = 0  # epoch milliseconds

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title, "body": self.body, "updatedAt": self.updated_at}

    @classmethod
    def from_dict(cls, d: dict) -> "Note":
        return cls(
            id=str(d["id"]),
            title=str(d["title"]),
            body=str(d.get("body", "")),
            updated_at=int(d.get("updatedAt") or 0),
        )


@dataclass
class Assignment:
    id: str
    title: str
    subject: str
    due: Optional[str] = None
    status: AssignmentStatus = AssignmentStatus.NOT_STARTED
    done: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id, "title": self.title, "subject": self.subject,
            "due": self.due, "status": self.status.value, "done": self.done,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Assignment":
        return cls(
            id=str(d["id"]),
            title=str(d["title"]),
            subject=str(d.get("subject", "")),
            due=d.get("due") or None,
            status=AssignmentStatus(d.get("status", "Not Started")),
            done=bool(d.get("done", False)),
        )


@dataclass
class Goal:
    id: str
    title: str
    details: str = ""
    meta: str = ""
    progress: int = 0  # 0-100
    done: bool = False
    created_at: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id, "title": self.title, "details": self.details, "meta": self.meta,
            "progress": self.progress, "done": self.done, "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Goal":
        return cls(
            id=str(d["id"]),
            title=str(d["title"]),
            details=str(d.get("details", "")),
            meta=str(d.get("meta", "")),
            progress=int(d.get("progress") or 0),
            done=bool(d.get("done", False)),
            created_at=int(d.get("createdAt") or 0),
        )


@dataclass
class Habit:
    id: str
    title: str
    details: str = ""
    meta: str = "daily"
    days: dict[str, bool] = field(default_factory=dict)  # YYYY-MM-DD -> completed
    created_at: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id, "title": self.title, "details": self.details, "meta": self.meta,
            "days": dict(self.days), "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Habit":
        return cls(
            id=str(d["id"]),
            title=str(d["title"]),
            details=str(d.get("details", "")),
            meta=str(d.get("meta", "daily")),
            days={str(k): bool(v) for k, v in (d.get("days") or {}).items()},
            created_at=int(d.get("createdAt") or 0),
        )


@dataclass
class AppState:
    theme: Theme = Theme.LIGHT
    active_section: Section = Section.TASKS
    tasks: list[Task] = field(default_factory=list)
    notes: list[Note] = field(default_factory=list)
    assignments: list[Assignment] = field(default_factory=list)
    flashcards: Flashcards = field(default_factory=Flashcards)
    timetable: Timetable = field(default_factory=Timetable)
    pomodoro: PomodoroState = field(default_factory=PomodoroState)
    goals: list[Goal] = field(default_factory=list)
    habits: list[Habit] = field(default_factory=list)
    # unknown top-level fields from newer documents, written back untouched
    extra: dict = field(default_factory=dict)

    FIELDS = (
        "theme", "activeSection", "tasks", "notes", "assignments",
        "flashcards", "timetable", "pomodoro", "goals", "habits",
    )

    def to_dict(self) -> dict:
        d = dict(self.extra)
        d.update({
            "theme": self.theme.value,
            "activeSection": self.active_section.value,
            "tasks": [t.to_dict() for t in self.tasks],
            "notes": [n.to_dict() for n in self.notes],
            "assignments": [a.to_dict() for a in self.assignments],
            "flashcards": self.flashcards.to_dict(),
            "timetable": self.timetable.to_dict(),
            "pomodoro": self.pomodoro.to_dict(),
            "goals": [g.to_dict() for g in self.goals],
            "habits": [h.to_dict() for h in self.habits],
        })
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "AppState":
        return cls(
            theme=Theme(d["theme"]),
            active_section=Section(d["activeSection"]),
            tasks=[Task.from_dict(t) for t in d["tasks"]],
            notes=[Note.from_dict(n) for n in d["notes"]],
            assignments=[Assignment.from_dict(a) for a in d["assignments"]],
            flashcards=Flashcards.from_dict(d["flashcards"]),
            timetable=Timetable.from_dict(d["timetable"]),
            pomodoro=PomodoroState.from_dict(d["pomodoro"]),
            goals=[Goal.from_dict(g) for g in d["goals"]],
            habits=[Habit.from_dict(h) for h in d["habits"]],
            extra={k: v for k, v in d.items() if k not in cls.FIELDS},
        )

    def find_deck(self, deck_id: Optional[str]) -> Optional[Deck]:
        return next((d for d in self.flashcards.decks if d.id == deck_id), None)
