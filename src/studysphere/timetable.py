"""Weekly timetable: a palette of subjects placed into day/time slots."""
from studysphere.models import ActionRejected, Slot, Subject, require_text
from studysphere.seed import uid
from studysphere.store import PersistentStore

DAYS = ("Mon", "Tue", "Wed", "Thu", "Fri")
TIMES = ("08:00", "10:00", "12:00", "14:00", "16:00")
DEFAULT_COLOR = "#4f46e5"


def slot_key(day: str, time: str) -> str:
    if day not in DAYS or time not in TIMES:
        raise ActionRejected(f"No timetable slot for {day} {time}")
    return f"{day}_{time}"


def grid(store: PersistentStore) -> list[list[Slot | None]]:
    """Rows by time, columns by day."""
    slots = store.state.timetable.slots
    return [[slots.get(f"{day}_{time}") for day in DAYS] for time in TIMES]


def add_subject(store: PersistentStore, title: str, color: str | None = None) -> Subject:
    subject = Subject(id=uid(), title=require_text(title, "Subject name"), color=color or DEFAULT_COLOR)
    with store.mutate() as state:
        state.timetable.palette.insert(0, subject)
    return subject


def assign_subject(store: PersistentStore, subject_id: str, day: str, time: str) -> Slot:
    key = slot_key(day, time)
    subject = next((s for s in store.state.timetable.palette if s.id == subject_id), None)
    if subject is None:
        raise ActionRejected("Subject not found")
    slot = Slot(title=subject.title, color=subject.color)
    with store.mutate() as state:
        state.timetable.slots[key] = slot
    return slot


def remove_slot(store: PersistentStore, day: str, time: str) -> None:
    key = slot_key(day, time)
    with store.mutate() as state:
        state.timetable.slots.pop(key, None)
