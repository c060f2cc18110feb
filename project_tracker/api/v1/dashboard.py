"""Dashboard endpoint"""
from fastapi import APIRouter, Depends

from project_tracker.dependencies import get_tracker_service
from project_tracker.schemas import DashboardStats
from project_tracker.services import TrackerService

router = APIRouter()


@router.get("", response_model=DashboardStats)
def get_dashboard(service: TrackerService = Depends(get_tracker_service)):
    """Project counts by status and average progress."""
    return service.dashboard()
