"""Schemas for tasks"""
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from project_tracker.models import ProjectStatus, TaskStatus


class TaskCreate(BaseModel):
    project_id: int
    title: str = Field(..., max_length=255)
    description: Optional[str] = None
    due_date: date


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[date] = None


class TaskResponse(BaseModel):
    id: int
    project_id: int
    title: str
    description: Optional[str]
    status: TaskStatus
    due_date: date
    created_at: datetime

    class Config:
        from_attributes = True


class DueTaskResponse(TaskResponse):
    """A pending task due today or earlier, with its project context."""

    project_title: str
    project_status: ProjectStatus
    days_overdue: int
