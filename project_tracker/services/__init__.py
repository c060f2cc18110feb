"""Service layer"""
from project_tracker.services.tracker import DueTask, TrackerService

__all__ = ["DueTask", "TrackerService"]
