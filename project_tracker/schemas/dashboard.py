"""Schemas for the dashboard summary"""
from pydantic import BaseModel


class DashboardStats(BaseModel):
    total_projects: int
    planned: int
    ongoing: int
    completed: int
    average_progress: float
    active_projects: int
    unfinished_projects: int
