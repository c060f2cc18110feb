"""
Pydantic schemas for request/response validation
"""
from project_tracker.schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate
from project_tracker.schemas.task import DueTaskResponse, TaskCreate, TaskResponse, TaskUpdate
from project_tracker.schemas.dashboard import DashboardStats

__all__ = [
    "ProjectCreate",
    "ProjectResponse",
    "ProjectUpdate",
    "TaskCreate",
    "TaskResponse",
    "TaskUpdate",
    "DueTaskResponse",
    "DashboardStats",
]
