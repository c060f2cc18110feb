"""Lifecycle rules that derive project status and progress from tasks.

The module-level functions are pure and work on anything exposing the
``status``/``due_date`` attributes of :class:`~project_tracker.models.Task`.
:class:`LifecycleEngine` applies them to stored projects through a
:class:`~project_tracker.repository.TrackerRepository`.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional, Sequence, Union

from loguru import logger

from project_tracker.errors import DateOutOfRangeError, NotFound
from project_tracker.models import Project, ProjectStatus, TaskStatus

if TYPE_CHECKING:
    from project_tracker.repository import TrackerRepository

DateLike = Union[date, datetime]
Clock = Callable[[], datetime]


def as_date(value: DateLike) -> date:
    """Drop the time-of-day part; two instants on the same day compare equal."""
    if isinstance(value, datetime):
        return value.date()
    return value


def validate_task_due_date(start_date: DateLike, end_date: DateLike, due_date: DateLike) -> None:
    start, end, due = as_date(start_date), as_date(end_date), as_date(due_date)
    if due < start or due > end:
        raise DateOutOfRangeError(due, start, end)


def _all_completed(tasks: Sequence) -> bool:
    return bool(tasks) and all(task.status == TaskStatus.COMPLETED for task in tasks)


def derive_project_status(
    start_date: DateLike,
    end_date: DateLike,
    tasks: Iterable,
    now: DateLike,
) -> ProjectStatus:
    """Compute a project's status from scratch.

    Completion wins over dates; otherwise the project is ongoing while today
    lies inside its range and planned before or after it. A project past its
    end date with open tasks therefore reads as planned again.
    """
    tasks = list(tasks)
    if _all_completed(tasks):
        return ProjectStatus.COMPLETED
    if as_date(start_date) <= as_date(now) <= as_date(end_date):
        return ProjectStatus.ONGOING
    return ProjectStatus.PLANNED


def derive_project_progress(tasks: Iterable, current: int = 0) -> int:
    """Percentage of completed tasks, rounded half up.

    With no tasks there is nothing to measure, so ``current`` is returned as is.
    """
    tasks = list(tasks)
    total = len(tasks)
    if total == 0:
        return current
    completed = sum(1 for task in tasks if task.status == TaskStatus.COMPLETED)
    return (200 * completed + total) // (2 * total)


def can_mark_project_complete(tasks: Iterable) -> bool:
    return _all_completed(list(tasks))


class LifecycleEngine:
    """Applies the lifecycle rules to stored projects."""

    def __init__(self, repository: "TrackerRepository", clock: Optional[Clock] = None):
        self.repository = repository
        self.clock = clock or datetime.now

    def validate_due_date(self, project: Project, due_date: DateLike) -> None:
        validate_task_due_date(project.start_date, project.end_date, due_date)

    def recompute(self, project_id: int) -> Project:
        """Read the project and its tasks, derive, and write back what changed.

        Must run inside the caller's transaction so the read and the write
        form one unit.
        """
        project = self.repository.get_project(project_id)
        if project is None:
            raise NotFound("Project", project_id)

        tasks = self.repository.list_tasks_for_project(project_id)
        status = derive_project_status(project.start_date, project.end_date, tasks, self.clock())
        progress = derive_project_progress(tasks, project.progress)

        if status != project.status:
            logger.debug("Project {} status {} -> {}", project_id, project.status, status)
            self.repository.update_project_status(project_id, status)
        if progress != project.progress:
            logger.debug("Project {} progress {} -> {}", project_id, project.progress, progress)
            self.repository.update_project_progress(project_id, progress)
        return project

    def recompute_all(self) -> List[Project]:
        projects = []
        for project in self.repository.list_projects():
            with self.repository.transaction():
                projects.append(self.recompute(project.id))
        return projects
