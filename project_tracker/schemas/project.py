"""Schemas for projects"""
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from project_tracker.models import ProjectStatus


class ProjectCreate(BaseModel):
    title: str = Field(..., max_length=255)
    description: str = ""
    team: int = 1
    start_date: date
    end_date: date


class ProjectUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    team: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ProjectResponse(BaseModel):
    id: int
    title: str
    description: str
    status: ProjectStatus
    progress: int
    team: int
    start_date: date
    end_date: date
    created_at: datetime

    class Config:
        from_attributes = True
