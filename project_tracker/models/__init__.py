"""Project Tracker Database Models"""
from project_tracker.models.project import Project, ProjectStatus
from project_tracker.models.task import Task, TaskStatus

__all__ = [
    "Project",
    "ProjectStatus",
    "Task",
    "TaskStatus",
]
