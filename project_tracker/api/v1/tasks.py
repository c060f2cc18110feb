"""Task endpoints"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from project_tracker.dependencies import get_tracker_service
from project_tracker.schemas import DueTaskResponse, TaskCreate, TaskResponse, TaskUpdate
from project_tracker.services import DueTask, TrackerService

router = APIRouter()


def _serialize_due_task(item: DueTask) -> DueTaskResponse:
    task = item.task
    return DueTaskResponse(
        id=task.id,
        project_id=task.project_id,
        title=task.title,
        description=task.description,
        status=task.status,
        due_date=task.due_date,
        created_at=task.created_at,
        project_title=item.project.title,
        project_status=item.project.status,
        days_overdue=item.days_overdue,
    )


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(task_data: TaskCreate, service: TrackerService = Depends(get_tracker_service)):
    """Create a task; its due date must fall inside the project's range."""
    return service.create_task(task_data)


@router.get("/due", response_model=List[DueTaskResponse])
def list_due_tasks(
    on: Optional[date] = Query(None, description="Reference day, defaults to today"),
    service: TrackerService = Depends(get_tracker_service),
):
    """Pending tasks due on or before the reference day."""
    return [_serialize_due_task(item) for item in service.list_due_tasks(on)]


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(task_id: int, service: TrackerService = Depends(get_tracker_service)):
    return service.get_task(task_id)


@router.patch("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    update_data: TaskUpdate,
    service: TrackerService = Depends(get_tracker_service),
):
    return service.update_task(task_id, update_data)


@router.post("/{task_id}/toggle", response_model=TaskResponse)
def toggle_task(task_id: int, service: TrackerService = Depends(get_tracker_service)):
    """Flip a task between pending and completed."""
    return service.toggle_task_status(task_id)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: int, service: TrackerService = Depends(get_tracker_service)):
    service.delete_task(task_id)
