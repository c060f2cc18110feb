"""Project endpoints"""
from typing import List

from fastapi import APIRouter, Depends, status

from project_tracker.dependencies import get_tracker_service
from project_tracker.schemas import ProjectCreate, ProjectResponse, ProjectUpdate, TaskResponse
from project_tracker.services import TrackerService

router = APIRouter()


@router.get("", response_model=List[ProjectResponse])
def list_projects(service: TrackerService = Depends(get_tracker_service)):
    """List projects, newest first, with status and progress recomputed."""
    return service.list_projects()


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project(project_data: ProjectCreate, service: TrackerService = Depends(get_tracker_service)):
    return service.create_project(project_data)


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(project_id: int, service: TrackerService = Depends(get_tracker_service)):
    return service.get_project(project_id)


@router.patch("/{project_id}", response_model=ProjectResponse)
def update_project(
    project_id: int,
    update_data: ProjectUpdate,
    service: TrackerService = Depends(get_tracker_service),
):
    """Edit title, description, team size or date range."""
    return service.update_project(project_id, update_data)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(project_id: int, service: TrackerService = Depends(get_tracker_service)):
    """Delete a project together with its tasks."""
    service.delete_project(project_id)


@router.post("/{project_id}/complete", response_model=ProjectResponse)
def complete_project(project_id: int, service: TrackerService = Depends(get_tracker_service)):
    return service.mark_project_complete(project_id)


@router.get("/{project_id}/tasks", response_model=List[TaskResponse])
def list_project_tasks(project_id: int, service: TrackerService = Depends(get_tracker_service)):
    return service.list_tasks(project_id)
