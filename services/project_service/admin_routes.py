from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session
from database import get_db
from schemas import (
    ProjectResponse, ProjectListResponse, BidListResponse,
    StatusOverride, SuccessResponse, ProjectStatusResponse,
)
from crud import (
    get_project, get_bids_by_project, list_pending_projects,
    approve_project, reject_project, override_project_status, admin_delete_project,
)
from models import ProjectStatus
from auth import require_admin
from events import publish_event
import notifier

# Every route here is admin-only
router = APIRouter(prefix="/api/ProjectsAdmin", tags=["projects-admin"], dependencies=[Depends(require_admin)])


@router.get("/pending", response_model=ProjectListResponse)
def get_pending_projects(db: Session = Depends(get_db)):
    return {"success": True, "items": list_pending_projects(db)}


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project_admin(project_id: int, db: Session = Depends(get_db)):
    project = get_project(db, project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


@router.get("/{project_id}/bids", response_model=BidListResponse)
def get_project_bids_admin(project_id: int, db: Session = Depends(get_db)):
    return {"success": True, "items": get_bids_by_project(db, project_id)}


@router.post("/{project_id}/approve", response_model=SuccessResponse)
def approve_project_admin(
    project_id: int,
    background_tasks: BackgroundTasks,
    state: str = ProjectStatus.PUBLISHED.value,
    db: Session = Depends(get_db),
):
    # An empty ?state= means the default target
    project = approve_project(db, project_id, state or ProjectStatus.PUBLISHED.value)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")

    background_tasks.add_task(
        notifier.notify_project_approved, project.customer_id, project.id, project.title, project.status.value
    )
    background_tasks.add_task(
        publish_event, "project.approved", {"project_id": project.id, "status": project.status.value}
    )
    return {"success": True, "message": f"Project approved ({project.status.value})"}


@router.post("/{project_id}/reject", response_model=SuccessResponse)
def reject_project_admin(project_id: int, background_tasks: BackgroundTasks, db: Session = Depends(get_db)):
    project = reject_project(db, project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")

    background_tasks.add_task(notifier.notify_project_rejected, project.customer_id, project.id, project.title)
    background_tasks.add_task(publish_event, "project.rejected", {"project_id": project.id})
    return {"success": True, "message": "Project rejected"}


@router.post("/{project_id}/status", response_model=ProjectStatusResponse)
def override_status_admin(project_id: int, payload: StatusOverride, db: Session = Depends(get_db)):
    project = override_project_status(db, project_id, payload.status)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return {"success": True, "message": "Status updated", "project": project}


@router.delete("/{project_id}", response_model=SuccessResponse)
def delete_project_admin(project_id: int, background_tasks: BackgroundTasks, db: Session = Depends(get_db)):
    deleted = admin_delete_project(db, project_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")

    background_tasks.add_task(
        notifier.notify_project_deleted, deleted["customer_id"], deleted["id"], deleted["title"]
    )
    background_tasks.add_task(publish_event, "project.deleted", {"project_id": deleted["id"]})
    return {"success": True, "message": "Project deleted"}
