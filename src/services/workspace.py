"""Workspace - task, project and habit collections and their audit-log propagation.

Every mutation replaces the affected models wholesale. The acting entity's
entries are written first, then the related project's entries. A mutation
that names a missing task or project is logged and skipped.
"""

from datetime import date, datetime
from typing import Any, Callable, Iterable, Optional, Union

from ulid import ULID

from src.models.activity import NoteEntry, ReminderEntry, StatusChangeEntry
from src.models.category import Category
from src.models.enums import LinkAction, Status
from src.models.habit import Habit
from src.models.project import Project
from src.models.task import Task
from src.services import activity_log
from src.services import habit_status
from src.utils.engine_config import EngineConfig
from src.utils.errors import (
    ActivityNotFoundError,
    EntityNotFoundError,
    HabitNotFoundError,
    ProjectNotFoundError,
    TaskNotFoundError,
)
from src.utils.logging import get_structured_logger, sanitize_title, timed
from src.utils.time import local_now, to_local_naive

logger = get_structured_logger(__name__)

_UNSET: Any = object()

EDITABLE_PROJECT_FIELDS = frozenset({"name", "description", "color", "icon"})


def generate_id() -> str:
    """Generate a text-based entity ID (ULID format)."""
    return str(ULID())


class Workspace:
    """In-memory task, project, category and habit collections of one session."""

    def __init__(
        self,
        tasks: Iterable[Task] = (),
        projects: Iterable[Project] = (),
        categories: Iterable[Category] = (),
        habits: Iterable[Habit] = (),
        actor: str = EngineConfig.DEFAULT_ACTOR,
        clock: Callable[[], datetime] = local_now,
    ):
        self.tasks: dict[str, Task] = {task.task_id: task for task in tasks}
        self.projects: dict[str, Project] = {project.project_id: project for project in projects}
        self.categories: dict[str, Category] = {c.category_id: c for c in categories}
        self.habits: dict[str, Habit] = {habit.habit_id: habit for habit in habits}
        self.actor = actor
        self.clock = clock

    # -- lookups -----------------------------------------------------------

    def get_task(self, task_id: str) -> Task:
        try:
            return self.tasks[task_id]
        except KeyError:
            raise TaskNotFoundError(task_id)

    def get_project(self, project_id: str) -> Project:
        try:
            return self.projects[project_id]
        except KeyError:
            raise ProjectNotFoundError(project_id)

    def get_habit(self, habit_id: str) -> Habit:
        try:
            return self.habits[habit_id]
        except KeyError:
            raise HabitNotFoundError(habit_id)

    def project_tasks(self, project_id: str) -> list[Task]:
        return [task for task in self.tasks.values() if task.project_id == project_id]

    def _project_name(self, project_id: Optional[str]) -> str:
        if project_id is None:
            return activity_log.NO_PROJECT
        project = self.projects.get(project_id)
        return project.name if project else activity_log.NO_PROJECT

    def _append_to_project(self, project_id: str, *entries) -> None:
        project = self.projects.get(project_id)
        if project is None:
            logger.warning(
                "Related project missing, activity not propagated",
                project_id=project_id,
                entries=len(entries)
            )
            return
        self.projects[project_id] = project.model_copy(
            update={"activity": activity_log.append(project.activity, *entries)}
        )

    # -- tasks -------------------------------------------------------------

    def create_task(
        self,
        title: str,
        *,
        status: Status = Status.PENDING,
        due_date: Optional[datetime] = None,
        project_id: Optional[str] = None,
        category_id: Optional[str] = None,
        task_id: Optional[str] = None,
    ) -> Task:
        """Add a task with a creation entry; link it to its project if any."""
        now = self.clock()
        task = Task(
            task_id=task_id or generate_id(),
            title=title,
            status=status,
            due_date=due_date,
            project_id=project_id,
            category_id=category_id,
            created_at=now,
            activity=[activity_log.creation(self.actor, now, note="Task created.")],
        )
        self.tasks[task.task_id] = task
        if project_id is not None:
            self._append_to_project(
                project_id,
                activity_log.project_link(self.actor, now, LinkAction.ADDED, task.title),
            )
        logger.info(
            "Task created",
            task_id=task.task_id,
            project_id=project_id,
            title=sanitize_title(title)
        )
        return task

    def update_task(
        self,
        task_id: str,
        *,
        title: Optional[str] = _UNSET,
        status: Optional[Status] = _UNSET,
        project_id: Optional[str] = _UNSET,
        due_date: Optional[datetime] = _UNSET,
        category_id: Optional[str] = _UNSET,
    ) -> Optional[Task]:
        """
        Apply field changes to a task and log them.

        Title, status and project changes are logged on the task. A project
        change logs removed/added on the old/new project; a status change is
        mirrored onto the task's project only when the same update leaves
        project membership alone. Due date and category changes are silent.
        A ``project_id`` naming a missing project is ignored.
        """
        task = self.tasks.get(task_id)
        if task is None:
            logger.warning("Update skipped, task not found", task_id=task_id)
            return None

        now = self.clock()
        updates: dict[str, Any] = {}
        entries = []

        if title is not _UNSET and title is not None:
            trimmed = title.strip()
            if trimmed and trimmed != task.title:
                updates["title"] = trimmed
                entries.append(activity_log.property_change(
                    self.actor, now, activity_log.TITLE_PROPERTY, task.title, trimmed
                ))

        status_changed = False
        if status is not _UNSET and status is not None:
            status = Status(status)
            if status is not task.status:
                status_changed = True
                updates["status"] = status
                entries.append(activity_log.status_change(self.actor, now, task.status, status))

        if project_id is not _UNSET and project_id is not None and project_id not in self.projects:
            logger.warning("Project change skipped, project not found", task_id=task_id, project_id=project_id)
            project_id = _UNSET

        project_changed = project_id is not _UNSET and project_id != task.project_id
        if project_changed:
            updates["project_id"] = project_id
            entries.append(activity_log.property_change(
                self.actor,
                now,
                activity_log.PROJECT_PROPERTY,
                self._project_name(task.project_id),
                self._project_name(project_id),
            ))

        if due_date is not _UNSET:
            due_date = to_local_naive(due_date) if due_date is not None else None
            if due_date != task.due_date:
                updates["due_date"] = due_date

        if category_id is not _UNSET and category_id != task.category_id:
            updates["category_id"] = category_id

        if not updates:
            return task

        updates["activity"] = activity_log.append(task.activity, *entries)
        updated = task.model_copy(update=updates)
        self.tasks[task_id] = updated

        if project_changed:
            if task.project_id is not None:
                self._append_to_project(
                    task.project_id,
                    activity_log.project_link(self.actor, now, LinkAction.REMOVED, task.title),
                )
            if project_id is not None:
                self._append_to_project(
                    project_id,
                    activity_log.project_link(self.actor, now, LinkAction.ADDED, task.title),
                )
        elif status_changed and task.project_id is not None:
            self._append_to_project(
                task.project_id,
                activity_log.status_change(self.actor, now, task.status, status, task_title=task.title),
            )

        logger.info(
            "Task updated",
            task_id=task_id,
            fields=sorted(k for k in updates if k != "activity"),
            entries_logged=len(entries)
        )
        return updated

    def change_status(self, task_id: str, new_status: Status) -> Optional[Task]:
        return self.update_task(task_id, status=new_status)

    def toggle_complete(self, task_id: str) -> Optional[Task]:
        task = self.tasks.get(task_id)
        if task is None:
            logger.warning("Toggle skipped, task not found", task_id=task_id)
            return None
        return self.change_status(task_id, Status.PENDING if task.is_done else Status.DONE)

    def rename_task(self, task_id: str, title: str) -> Optional[Task]:
        return self.update_task(task_id, title=title)

    def link_project(self, task_id: str, project_id: str) -> Optional[Task]:
        if project_id not in self.projects:
            logger.warning("Link skipped, project not found", task_id=task_id, project_id=project_id)
            return None
        return self.update_task(task_id, project_id=project_id)

    def unlink_project(self, task_id: str) -> Optional[Task]:
        return self.update_task(task_id, project_id=None)

    @timed("bulk_change_status")
    def bulk_change_status(self, task_ids: Iterable[str], new_status: Status) -> list[Task]:
        """
        Move several tasks to ``new_status`` in one step.

        Each changed task gets its own entry. Each affected project gets one
        aggregated entry per previous status instead of one per task.
        Returns the tasks that changed.
        """
        new_status = Status(new_status)
        wanted = set(task_ids)
        missing = wanted - self.tasks.keys()
        if missing:
            logger.warning("Bulk status change skipping unknown tasks", missing=len(missing))

        before = [
            task for task in self.tasks.values()
            if task.task_id in wanted and task.status is not new_status
        ]
        now = self.clock()
        changed = []
        for task in before:
            updated = task.model_copy(update={
                "status": new_status,
                "activity": activity_log.append(
                    task.activity,
                    activity_log.status_change(self.actor, now, task.status, new_status),
                ),
            })
            self.tasks[task.task_id] = updated
            changed.append(updated)

        aggregated = activity_log.aggregate_bulk_status_changes(before, new_status, self.actor, now)
        for project_id, entries in aggregated.items():
            self._append_to_project(project_id, *entries)

        logger.info(
            "Bulk status change applied",
            to_status=new_status.value,
            requested=len(wanted),
            changed=len(changed),
            projects=len(aggregated)
        )
        return changed

    def delete_task(self, task_id: str) -> Optional[Task]:
        """Remove a task; its project records the removal."""
        task = self.tasks.pop(task_id, None)
        if task is None:
            logger.warning("Delete skipped, task not found", task_id=task_id)
            return None
        if task.project_id is not None:
            self._append_to_project(
                task.project_id,
                activity_log.project_link(self.actor, self.clock(), LinkAction.REMOVED, task.title),
            )
        logger.info("Task deleted", task_id=task_id, project_id=task.project_id)
        return task

    @timed("bulk_delete")
    def bulk_delete(self, task_ids: Iterable[str]) -> list[Task]:
        wanted = set(task_ids)
        targets = [task_id for task_id in self.tasks if task_id in wanted]
        return [self.delete_task(task_id) for task_id in targets]

    # -- projects ----------------------------------------------------------

    def create_project(
        self,
        name: str,
        *,
        description: Optional[str] = None,
        color: Optional[str] = None,
        icon: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> Project:
        now = self.clock()
        project = Project(
            project_id=project_id or generate_id(),
            name=name,
            description=description,
            color=color,
            icon=icon,
            activity=[activity_log.creation(self.actor, now, note="Project created.")],
        )
        self.projects[project.project_id] = project
        logger.info("Project created", project_id=project.project_id)
        return project

    def edit_project(self, project_id: str, **changes: Any) -> Optional[Project]:
        """Change display fields. Nothing is logged for project edits."""
        unknown = set(changes) - EDITABLE_PROJECT_FIELDS
        if unknown:
            raise TypeError(f"Not editable project fields: {', '.join(sorted(unknown))}")
        project = self.projects.get(project_id)
        if project is None:
            logger.warning("Edit skipped, project not found", project_id=project_id)
            return None
        updated = project.model_copy(update=changes)
        self.projects[project_id] = updated
        return updated

    def delete_project(self, project_id: str) -> Optional[Project]:
        """Remove a project; its tasks are kept and silently unlinked."""
        project = self.projects.pop(project_id, None)
        if project is None:
            logger.warning("Delete skipped, project not found", project_id=project_id)
            return None
        unlinked = 0
        for task in self.project_tasks(project_id):
            self.tasks[task.task_id] = task.model_copy(update={"project_id": None})
            unlinked += 1
        logger.info("Project deleted", project_id=project_id, tasks_unlinked=unlinked)
        return project

    # -- notes, reminders, entry deletion -----------------------------------

    def _find_entity(self, entity_id: str) -> Union[Task, Project]:
        if entity_id in self.tasks:
            return self.tasks[entity_id]
        if entity_id in self.projects:
            return self.projects[entity_id]
        raise EntityNotFoundError("Task or project", entity_id)

    def _store_entity(self, entity: Union[Task, Project]) -> None:
        if isinstance(entity, Task):
            self.tasks[entity.task_id] = entity
        else:
            self.projects[entity.project_id] = entity

    def _append_to_entity(self, entity_id: str, entry) -> bool:
        try:
            entity = self._find_entity(entity_id)
        except EntityNotFoundError as e:
            logger.warning("Activity not recorded", entity_id=entity_id, entry_type=entry.type, error=str(e))
            return False
        self._store_entity(entity.model_copy(
            update={"activity": activity_log.append(entity.activity, entry)}
        ))
        return True

    def add_note(
        self,
        entity_id: str,
        body: str,
        *,
        ai_generated: bool = False,
        user: Optional[str] = None,
    ) -> Optional[NoteEntry]:
        """Append a rich-text note to a task or project. Blank notes are ignored."""
        if activity_log.is_blank_rich_text(body):
            return None
        entry = activity_log.note(user or self.actor, self.clock(), body, ai_generated)
        return entry if self._append_to_entity(entity_id, entry) else None

    def add_reminder(
        self,
        entity_id: str,
        notify_at: datetime,
        message: Optional[str] = None,
        *,
        user: Optional[str] = None,
    ) -> Optional[ReminderEntry]:
        entry = activity_log.reminder(user or self.actor, self.clock(), notify_at, message)
        if not self._append_to_entity(entity_id, entry):
            return None
        logger.info(
            "Reminder scheduled",
            entity_id=entity_id,
            activity_id=entry.activity_id,
            notify_at=entry.notify_at.isoformat()
        )
        return entry

    def delete_activity(self, entity_id: str, activity_id: str) -> bool:
        """Drop one whole entry from a task or project log."""
        try:
            entity = self._find_entity(entity_id)
            if not any(entry.activity_id == activity_id for entry in entity.activity):
                raise ActivityNotFoundError(f"Activity {activity_id} not in log of {entity_id}")
        except (EntityNotFoundError, ActivityNotFoundError) as e:
            logger.warning("Activity delete skipped", entity_id=entity_id, error=str(e))
            return False
        self._store_entity(entity.model_copy(
            update={"activity": activity_log.without(entity.activity, activity_id)}
        ))
        return True

    def reminders(self) -> list[tuple[Task, ReminderEntry]]:
        """All task reminders, soonest first, regardless of task status."""
        pairs = [
            (task, entry)
            for task in self.tasks.values()
            for entry in task.activity
            if entry.type == "reminder"
        ]
        pairs.sort(key=lambda pair: pair[1].notify_at)
        return pairs

    def status_history(self, project_id: str) -> list[StatusChangeEntry]:
        """Status entries on a project's log, aggregated ones included."""
        project = self.get_project(project_id)
        return [entry for entry in project.activity if entry.type == "status_change"]

    # -- habits ------------------------------------------------------------

    def today(self) -> date:
        return self.clock().date()

    def add_habit(self, habit: Habit) -> Habit:
        self.habits[habit.habit_id] = habit
        return habit

    def habits_with_status(self, day: Optional[date] = None) -> list[tuple[Habit, bool]]:
        return habit_status.habits_with_status(self.habits.values(), self.tasks.values(), day or self.today())

    def is_habit_completed(self, habit_id: str, day: Optional[date] = None) -> bool:
        day = day or self.today()
        habit = self.get_habit(habit_id)
        completed_today = habit_status.any_task_completed_on(self.tasks.values(), day)
        return habit_status.is_habit_completed(habit, day, completed_today)

    def toggle_habit(self, habit_id: str, day: Optional[date] = None) -> Optional[Habit]:
        day = day or self.today()
        try:
            completed = self.is_habit_completed(habit_id, day)
        except HabitNotFoundError as e:
            logger.warning("Habit toggle skipped", habit_id=habit_id, error=str(e))
            return None
        updated = habit_status.toggle(self.habits[habit_id], day, completed)
        self.habits[habit_id] = updated
        return updated

    def mark_habit_complete(self, habit_id: str, day: Optional[date] = None) -> Optional[Habit]:
        habit = self.habits.get(habit_id)
        if habit is None:
            logger.warning("Habit completion skipped, habit not found", habit_id=habit_id)
            return None
        updated = habit_status.mark_complete(habit, day or self.today())
        self.habits[habit_id] = updated
        return updated

    def mark_all_habits_complete(self, day: Optional[date] = None) -> list[Habit]:
        day = day or self.today()
        changed = []
        for habit, completed in self.habits_with_status(day):
            if not completed:
                changed.append(self.mark_habit_complete(habit.habit_id, day))
        return changed
