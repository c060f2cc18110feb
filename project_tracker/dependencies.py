"""FastAPI dependencies"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from project_tracker.database import get_db
from project_tracker.services import TrackerService


def get_tracker_service(request: Request, db: Session = Depends(get_db)) -> TrackerService:
    """Build a service bound to the request's session and the app clock."""
    clock = getattr(request.app.state, "clock", None)
    return TrackerService.for_session(db, clock=clock)
