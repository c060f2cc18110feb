"""Use cases of the tracker: validate, write, then recompute the owning project."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional

from loguru import logger
from sqlalchemy.orm import Session

from project_tracker.errors import DateOutOfRangeError, NotFound, ValidationError
from project_tracker.lifecycle import (
    Clock,
    LifecycleEngine,
    as_date,
    can_mark_project_complete,
    validate_task_due_date,
)
from project_tracker.models import Project, ProjectStatus, Task, TaskStatus
from project_tracker.repository import SqlAlchemyTrackerRepository, TrackerRepository
from project_tracker.schemas import DashboardStats, ProjectCreate, ProjectUpdate, TaskCreate, TaskUpdate


@dataclass
class DueTask:
    task: Task
    project: Project
    days_overdue: int


def _clean_title(title: Optional[str]) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("Title is required")
    return cleaned


def _check_date_range(start_date: date, end_date: date) -> None:
    if end_date < start_date:
        raise ValidationError("End date must be on or after start date")


def _check_team(team: int) -> None:
    if team < 1:
        raise ValidationError("Team size must be a positive number")


class TrackerService:
    def __init__(self, repository: TrackerRepository, clock: Optional[Clock] = None):
        self.repository = repository
        self.clock = clock or datetime.now
        self.engine = LifecycleEngine(repository, self.clock)

    @classmethod
    def for_session(cls, db: Session, clock: Optional[Clock] = None) -> "TrackerService":
        return cls(SqlAlchemyTrackerRepository(db), clock=clock)

    def today(self) -> date:
        return as_date(self.clock())

    # Projects

    def _require_project(self, project_id: int) -> Project:
        project = self.repository.get_project(project_id)
        if project is None:
            raise NotFound("Project", project_id)
        return project

    def create_project(self, data: ProjectCreate) -> Project:
        title = _clean_title(data.title)
        _check_date_range(data.start_date, data.end_date)
        _check_team(data.team)

        with self.repository.transaction():
            project = self.repository.create_project(
                title=title,
                description=data.description or "",
                team=data.team,
                start_date=data.start_date,
                end_date=data.end_date,
            )
            self.engine.recompute(project.id)
        logger.info("Created project {} '{}'", project.id, title)
        return project

    def get_project(self, project_id: int) -> Project:
        with self.repository.transaction():
            return self.engine.recompute(project_id)

    def list_projects(self) -> List[Project]:
        return self.engine.recompute_all()

    def update_project(self, project_id: int, data: ProjectUpdate) -> Project:
        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field == "description"
        }
        if "title" in changes:
            changes["title"] = _clean_title(changes["title"])
        if "description" in changes:
            changes["description"] = changes["description"] or ""
        if "team" in changes:
            _check_team(changes["team"])

        with self.repository.transaction():
            project = self._require_project(project_id)
            start_date = changes.get("start_date", project.start_date)
            end_date = changes.get("end_date", project.end_date)
            _check_date_range(start_date, end_date)

            if "start_date" in changes or "end_date" in changes:
                for task in self.repository.list_tasks_for_project(project_id):
                    try:
                        validate_task_due_date(start_date, end_date, task.due_date)
                    except DateOutOfRangeError as exc:
                        raise DateOutOfRangeError(
                            task.due_date,
                            start_date,
                            end_date,
                            detail=f"Task '{task.title}' is due {task.due_date.isoformat()}, "
                            f"outside the new project range",
                        ) from exc

            self.repository.update_project(project_id, **changes)
            project = self.engine.recompute(project_id)
        logger.info("Updated project {} ({})", project_id, ", ".join(sorted(changes)) or "no changes")
        return project

    def delete_project(self, project_id: int) -> None:
        with self.repository.transaction():
            self.repository.delete_project(project_id)
        logger.info("Deleted project {}", project_id)

    def mark_project_complete(self, project_id: int) -> Project:
        with self.repository.transaction():
            project = self._require_project(project_id)
            tasks = self.repository.list_tasks_for_project(project_id)
            if not can_mark_project_complete(tasks):
                raise ValidationError("All tasks must be completed before the project can be completed")
            if project.status != ProjectStatus.COMPLETED:
                self.repository.update_project_status(project_id, ProjectStatus.COMPLETED)
            project = self.engine.recompute(project_id)
        logger.info("Marked project {} complete", project_id)
        return project

    # Tasks

    def _require_task(self, task_id: int) -> Task:
        task = self.repository.get_task(task_id)
        if task is None:
            raise NotFound("Task", task_id)
        return task

    def list_tasks(self, project_id: int) -> List[Task]:
        self._require_project(project_id)
        return self.repository.list_tasks_for_project(project_id)

    def get_task(self, task_id: int) -> Task:
        return self._require_task(task_id)

    def create_task(self, data: TaskCreate) -> Task:
        title = _clean_title(data.title)

        with self.repository.transaction():
            project = self._require_project(data.project_id)
            self.engine.validate_due_date(project, data.due_date)
            task = self.repository.create_task(
                project_id=project.id,
                title=title,
                description=data.description,
                due_date=data.due_date,
            )
            self.engine.recompute(project.id)
        logger.info("Created task {} in project {}", task.id, project.id)
        return task

    def update_task(self, task_id: int, data: TaskUpdate) -> Task:
        changes = data.model_dump(exclude_unset=True)
        for field in ("title", "status", "due_date"):
            if field in changes and changes[field] is None:
                del changes[field]
        if "title" in changes:
            changes["title"] = _clean_title(changes["title"])

        with self.repository.transaction():
            task = self._require_task(task_id)
            project = self._require_project(task.project_id)
            self.engine.validate_due_date(project, changes.get("due_date", task.due_date))
            task = self.repository.update_task(task_id, **changes)
            self.engine.recompute(project.id)
        logger.info("Updated task {} ({})", task_id, ", ".join(sorted(changes)) or "no changes")
        return task

    def set_task_status(self, task_id: int, status: TaskStatus) -> Task:
        with self.repository.transaction():
            task = self._require_task(task_id)
            self.repository.update_task_status(task_id, status)
            self.engine.recompute(task.project_id)
        logger.info("Task {} is now {}", task_id, TaskStatus(status).value)
        return task

    def toggle_task_status(self, task_id: int) -> Task:
        task = self._require_task(task_id)
        if task.status == TaskStatus.COMPLETED:
            return self.set_task_status(task_id, TaskStatus.PENDING)
        return self.set_task_status(task_id, TaskStatus.COMPLETED)

    def delete_task(self, task_id: int) -> None:
        with self.repository.transaction():
            task = self._require_task(task_id)
            project_id = task.project_id
            self.repository.delete_task(task_id)
            self.engine.recompute(project_id)
        logger.info("Deleted task {} from project {}", task_id, project_id)

    def list_due_tasks(self, today: Optional[date] = None) -> List[DueTask]:
        """Pending tasks due today or earlier, oldest due date first."""
        today = as_date(today) if today is not None else self.today()
        return [
            DueTask(task=task, project=project, days_overdue=max(0, (today - task.due_date).days))
            for task, project in self.repository.list_due_tasks(today)
        ]

    # Dashboard

    def dashboard(self) -> DashboardStats:
        projects = self.list_projects()
        counts = {status: 0 for status in ProjectStatus}
        for project in projects:
            counts[ProjectStatus(project.status)] += 1

        average = sum(project.progress for project in projects) / len(projects) if projects else 0.0
        return DashboardStats(
            total_projects=len(projects),
            planned=counts[ProjectStatus.PLANNED],
            ongoing=counts[ProjectStatus.ONGOING],
            completed=counts[ProjectStatus.COMPLETED],
            average_progress=round(average, 1),
            active_projects=counts[ProjectStatus.ONGOING],
            unfinished_projects=sum(1 for project in projects if project.progress < 100),
        )
