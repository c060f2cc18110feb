"""Persistence collaborator used by the lifecycle engine and the service layer."""
from __future__ import annotations

import functools
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date
from typing import Any, Iterator, List, Optional, Tuple

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from project_tracker.errors import NotFound, PersistenceError, ValidationError
from project_tracker.models import Project, ProjectStatus, Task, TaskStatus

PROJECT_FIELDS = {"title", "description", "team", "start_date", "end_date"}
TASK_FIELDS = {"title", "description", "status", "due_date"}


class TrackerRepository(ABC):
    @abstractmethod
    def get_project(self, project_id: int) -> Optional[Project]:
        raise NotImplementedError

    @abstractmethod
    def list_projects(self) -> List[Project]:
        raise NotImplementedError

    @abstractmethod
    def list_tasks_for_project(self, project_id: int) -> List[Task]:
        raise NotImplementedError

    @abstractmethod
    def get_task(self, task_id: int) -> Optional[Task]:
        raise NotImplementedError

    @abstractmethod
    def create_project(self, **fields: Any) -> Project:
        raise NotImplementedError

    @abstractmethod
    def create_task(self, **fields: Any) -> Task:
        raise NotImplementedError

    @abstractmethod
    def update_project(self, project_id: int, **fields: Any) -> Project:
        raise NotImplementedError

    @abstractmethod
    def update_project_status(self, project_id: int, status: ProjectStatus) -> None:
        raise NotImplementedError

    @abstractmethod
    def update_project_progress(self, project_id: int, progress: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def update_task_status(self, task_id: int, status: TaskStatus) -> None:
        raise NotImplementedError

    @abstractmethod
    def update_task(self, task_id: int, **fields: Any) -> Task:
        raise NotImplementedError

    @abstractmethod
    def delete_project(self, project_id: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete_task(self, task_id: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_due_tasks(self, on_or_before: date) -> List[Tuple[Task, Project]]:
        raise NotImplementedError

    @abstractmethod
    def transaction(self):
        """Context manager: commit on success, roll back on error."""
        raise NotImplementedError


def _translate_errors(func):
    """Re-raise SQLAlchemy failures as PersistenceError after a rollback."""

    @functools.wraps(func)
    def wrapper(self: "SqlAlchemyTrackerRepository", *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except SQLAlchemyError as exc:
            logger.exception("Persistence failure in {}", func.__name__)
            self.db.rollback()
            raise PersistenceError(f"Database error during {func.__name__}") from exc

    return wrapper


class SqlAlchemyTrackerRepository(TrackerRepository):
    """ORM-backed repository bound to one session."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as exc:
            logger.exception("Transaction failed, rolling back")
            self.db.rollback()
            raise PersistenceError("Database transaction failed") from exc
        except Exception:
            self.db.rollback()
            raise

    @_translate_errors
    def get_project(self, project_id: int) -> Optional[Project]:
        return self.db.get(Project, project_id)

    @_translate_errors
    def list_projects(self) -> List[Project]:
        return (
            self.db.query(Project)
            .order_by(Project.created_at.desc(), Project.id.desc())
            .all()
        )

    @_translate_errors
    def list_tasks_for_project(self, project_id: int) -> List[Task]:
        return (
            self.db.query(Task)
            .filter(Task.project_id == project_id)
            .order_by(Task.due_date.asc(), Task.id.asc())
            .all()
        )

    @_translate_errors
    def get_task(self, task_id: int) -> Optional[Task]:
        return self.db.get(Task, task_id)

    @_translate_errors
    def create_project(self, **fields: Any) -> Project:
        project = Project(
            **{key: value for key, value in fields.items() if key in PROJECT_FIELDS},
            status=ProjectStatus.PLANNED,
            progress=0,
        )
        self.db.add(project)
        self.db.flush()
        return project

    @_translate_errors
    def create_task(self, **fields: Any) -> Task:
        task = Task(
            project_id=fields["project_id"],
            title=fields["title"],
            description=fields.get("description"),
            status=fields.get("status") or TaskStatus.PENDING,
            due_date=fields["due_date"],
        )
        self.db.add(task)
        self.db.flush()
        return task

    def _require_project(self, project_id: int) -> Project:
        project = self.db.get(Project, project_id)
        if project is None:
            raise NotFound("Project", project_id)
        return project

    def _require_task(self, task_id: int) -> Task:
        task = self.db.get(Task, task_id)
        if task is None:
            raise NotFound("Task", task_id)
        return task

    @_translate_errors
    def update_project(self, project_id: int, **fields: Any) -> Project:
        project = self._require_project(project_id)
        for field, value in fields.items():
            if field not in PROJECT_FIELDS:
                raise ValidationError(f"Project field '{field}' cannot be updated")
            setattr(project, field, value)
        self.db.flush()
        return project

    @_translate_errors
    def update_project_status(self, project_id: int, status: ProjectStatus) -> None:
        self._require_project(project_id).status = ProjectStatus(status)
        self.db.flush()

    @_translate_errors
    def update_project_progress(self, project_id: int, progress: int) -> None:
        self._require_project(project_id).progress = progress
        self.db.flush()

    @_translate_errors
    def update_task_status(self, task_id: int, status: TaskStatus) -> None:
        self._require_task(task_id).status = TaskStatus(status)
        self.db.flush()

    @_translate_errors
    def update_task(self, task_id: int, **fields: Any) -> Task:
        task = self._require_task(task_id)
        if "project_id" in fields and fields["project_id"] != task.project_id:
            raise ValidationError("A task cannot be moved to another project")
        for field, value in fields.items():
            if field == "project_id":
                continue
            if field not in TASK_FIELDS:
                raise ValidationError(f"Task field '{field}' cannot be updated")
            setattr(task, field, value)
        self.db.flush()
        return task

    @_translate_errors
    def delete_project(self, project_id: int) -> None:
        self.db.delete(self._require_project(project_id))
        self.db.flush()

    @_translate_errors
    def delete_task(self, task_id: int) -> None:
        task = self._require_task(task_id)
        project = task.project
        if project is not None and task in project.tasks:
            project.tasks.remove(task)
        self.db.delete(task)
        self.db.flush()

    @_translate_errors
    def list_due_tasks(self, on_or_before: date) -> List[Tuple[Task, Project]]:
        rows = (
            self.db.query(Task, Project)
            .join(Project, Task.project_id == Project.id)
            .filter(Task.due_date <= on_or_before, Task.status != TaskStatus.COMPLETED)
            .order_by(Task.due_date.asc(), Task.id.asc())
            .all()
        )
        return [(task, project) for task, project in rows]
