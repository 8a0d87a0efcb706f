"""Tasks, notes and assignments."""
from studysphere.models import (
    ActionRejected, Assignment, AssignmentStatus, Note, Priority, TASK_CATEGORIES,
    Task, require_text,
)
from studysphere.seed import add_days_iso, now_ms, uid
from studysphere.store import PersistentStore


def _find(items: list, item_id: str, what: str):
    item = next((i for i in items if i.id == item_id), None)
    if item is None:
        raise ActionRejected(f"{what} not found")
    return item


def _category(value: str) -> str:
    if value not in TASK_CATEGORIES:
        raise ActionRejected(f"Unknown category: {value}")
    return value


# --- Tasks ---


def add_task(store: PersistentStore, title: str, category: str = "Study",
             due: str | None = None, priority: Priority | str = Priority.MEDIUM) -> Task:
    task = Task(
        id=uid(),
        title=require_text(title, "Title"),
        category=_category(category),
        due=due if due is not None else add_days_iso(0),
        priority=Priority(priority),
    )
    with store.mutate() as state:
        state.tasks.insert(0, task)
    return task


def update_task(store: PersistentStore, task_id: str, title: str, category: str,
                due: str | None, priority: Priority | str) -> Task:
    title, category, priority = require_text(title, "Title"), _category(category), Priority(priority)
    task = _find(store.state.tasks, task_id, "Task")
    with store.mutate():
        task.title = title
        task.category = category
        task.due = due or None
        task.priority = priority
    return task


def toggle_task(store: PersistentStore, task_id: str) -> bool:
    task = _find(store.state.tasks, task_id, "Task")
    with store.mutate():
        task.done = not task.done
    return task.done


def delete_task(store: PersistentStore, task_id: str) -> int:
    with store.mutate() as state:
        before = len(state.tasks)
        state.tasks = [t for t in state.tasks if t.id != task_id]
        return before - len(state.tasks)


def clear_completed_tasks(store: PersistentStore) -> int:
    with store.mutate() as state:
        before = len(state.tasks)
        state.tasks = [t for t in state.tasks if not t.done]
        return before - len(state.tasks)


def sort_tasks_by_due(tasks: list[Task]) -> list[Task]:
    """Nearest due date first; tasks without a date go last."""
    return sorted(tasks, key=lambda t: (t.due is None, t.due or ""))


def sort_stored_tasks(store: PersistentStore) -> list[Task]:
    with store.mutate() as state:
        state.tasks = sort_tasks_by_due(state.tasks)
    return store.state.tasks


# --- Notes ---


def add_note(store: PersistentStore, title: str, body: str) -> Note:
    note = Note(id=uid(), title=require_text(title, "Title"), body=require_text(body, "Content"),
                updated_at=now_ms())
    with store.mutate() as state:
        state.notes.insert(0, note)
    return note


def update_note(store: PersistentStore, note_id: str, title: str, body: str) -> Note:
    title, body = require_text(title, "Title"), require_text(body, "Content")
    note = _find(store.state.notes, note_id, "Note")
    with store.mutate():
        note.title = title
        note.body = body
        note.updated_at = now_ms()
    return note


def delete_note(store: PersistentStore, note_id: str) -> None:
    with store.mutate() as state:
        state.notes = [n for n in state.notes if n.id != note_id]


# --- Assignments ---


def add_assignment(store: PersistentStore, title: str, subject: str, due: str | None = None,
                   status: AssignmentStatus | str = AssignmentStatus.NOT_STARTED) -> Assignment:
    status = AssignmentStatus(status)
    assignment = Assignment(
        id=uid(),
        title=require_text(title, "Title"),
        subject=require_text(subject, "Subject"),
        due=due if due is not None else add_days_iso(3),
        status=status,
        done=status == AssignmentStatus.DONE,
    )
    with store.mutate() as state:
        state.assignments.insert(0, assignment)
    return assignment


def update_assignment(store: PersistentStore, assignment_id: str, title: str, subject: str,
                      due: str | None, status: AssignmentStatus | str) -> Assignment:
    title, subject = require_text(title, "Title"), require_text(subject, "Subject")
    status = AssignmentStatus(status)
    assignment = _find(store.state.assignments, assignment_id, "Assignment")
    with store.mutate():
        assignment.title = title
        assignment.subject = subject
        assignment.due = due or None
        assignment.status = status
        if status == AssignmentStatus.DONE:
            assignment.done = True
    return assignment


def toggle_assignment(store: PersistentStore, assignment_id: str) -> bool:
    assignment = _find(store.state.assignments, assignment_id, "Assignment")
    with store.mutate():
        assignment.done = not assignment.done
        if assignment.done:
            assignment.status = AssignmentStatus.DONE
    return assignment.done


def delete_assignment(store: PersistentStore, assignment_id: str) -> None:
    with store.mutate() as state:
        state.assignments = [a for a in state.assignments if a.id != assignment_id]
