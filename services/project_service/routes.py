from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from database import get_db
from schemas import (
    ProjectCreate, ProjectUpdate, ProjectResponse,
    BidCreate, BidResponse, SuccessResponse,
)
from crud import (
    create_project, get_project, update_project, delete_project,
    list_open_projects, get_projects_by_customer,
    create_bid, get_bids_by_project, get_bids_by_merchant,
    select_bid, accept_bid, reject_bid,
)
from auth import resolve_account, require_roles, require_admin, is_admin
from events import publish_event

router = APIRouter(prefix="/api/Projects", tags=["projects"])

customer_or_admin = require_roles("customer", "admin")
merchant_or_admin = require_roles("merchant", "admin")


@router.get("/open", response_model=List[ProjectResponse])
def list_open_projects_endpoint(db: Session = Depends(get_db)):
    return list_open_projects(db)


@router.get("/customer/my-projects", response_model=List[ProjectResponse])
def list_my_projects(db: Session = Depends(get_db), account=Depends(customer_or_admin)):
    return get_projects_by_customer(db, account["id"])


@router.get("/bids/merchant/my-bids", response_model=List[BidResponse])
def list_my_bids(db: Session = Depends(get_db), account=Depends(merchant_or_admin)):
    return get_bids_by_merchant(db, account["id"])


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project_endpoint(
    project: ProjectCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    account=Depends(customer_or_admin),
):
    project_obj = create_project(
        db,
        account["id"],
        title=project.title,
        description=project.description,
        category_id=project.category_id,
    )
    background_tasks.add_task(
        publish_event, "project.created", {"project_id": project_obj.id, "customer_id": account["id"]}
    )
    return project_obj


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project_endpoint(project_id: int, db: Session = Depends(get_db), account=Depends(resolve_account)):
    project = get_project(db, project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


@router.put("/{project_id}", response_model=ProjectResponse)
def update_project_endpoint(
    project_id: int,
    project_update: ProjectUpdate,
    db: Session = Depends(get_db),
    account=Depends(customer_or_admin),
):
    update_data = project_update.dict(exclude_unset=True)
    project = update_project(db, project_id, account["id"], **update_data)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


@router.delete("/{project_id}", response_model=SuccessResponse)
def delete_project_endpoint(
    project_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    account=Depends(customer_or_admin),
):
    if not delete_project(db, project_id, account["id"]):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    background_tasks.add_task(publish_event, "project.deleted", {"project_id": project_id, "customer_id": account["id"]})
    return {"success": True, "message": "Project deleted"}


@router.get("/{project_id}/bids", response_model=List[BidResponse])
def get_project_bids(project_id: int, db: Session = Depends(get_db), account=Depends(resolve_account)):
    return get_bids_by_project(db, project_id)


@router.post("/{project_id}/bids", response_model=BidResponse, status_code=status.HTTP_201_CREATED)
def create_bid_endpoint(
    project_id: int,
    bid: BidCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    account=Depends(merchant_or_admin),
):
    # NotFoundError / ProjectNotOpenForBidding are rendered by the app's handlers
    bid_obj = create_bid(db, project_id, account["id"], price=bid.price, days=bid.days, message=bid.message)
    background_tasks.add_task(publish_event, "bid.created", {
        "bid_id": bid_obj.id,
        "project_id": project_id,
        "merchant_id": account["id"],
        "customer_id": bid_obj.project.customer_id,
    })
    return bid_obj


@router.post("/{project_id}/bids/{bid_id}/select", response_model=SuccessResponse)
def select_bid_endpoint(
    project_id: int,
    bid_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    account=Depends(resolve_account),
):
    project = get_project(db, project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")

    # Only the owner or an admin may award a project
    if not is_admin(account) and account["id"] != project.customer_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the project owner can select a bid")

    winner = select_bid(db, project, bid_id)
    losers = sorted({b.merchant_id for b in get_bids_by_project(db, project_id) if b.id != winner.id})
    background_tasks.add_task(publish_event, "bid.selected", {
        "project_id": project_id,
        "bid_id": winner.id,
        "merchant_id": winner.merchant_id,
        "customer_id": project.customer_id,
        "rejected_merchant_ids": [m for m in losers if m != winner.merchant_id],
    })
    return {"success": True, "message": "Bid selected"}


@router.post("/bids/{bid_id}/accept", response_model=SuccessResponse)
def accept_bid_endpoint(bid_id: int, db: Session = Depends(get_db), account=Depends(require_admin)):
    if not accept_bid(db, bid_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bid not found")
    return {"success": True, "message": "Bid accepted"}


@router.post("/bids/{bid_id}/reject", response_model=SuccessResponse)
def reject_bid_endpoint(bid_id: int, db: Session = Depends(get_db), account=Depends(require_admin)):
    if not reject_bid(db, bid_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bid not found")
    return {"success": True, "message": "Bid rejected"}
