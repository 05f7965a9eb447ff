from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from database import get_db
from schemas import NotificationCreate, NotificationResponse, SuccessResponse
from crud import create_notification, get_notifications, mark_notification_read, mark_all_read
from auth import resolve_account, is_admin

router = APIRouter(prefix="/api/Notifications", tags=["notifications"])


@router.get("/mine", response_model=List[NotificationResponse])
def get_my_notifications(
    unread_only: bool = False,
    limit: int = 100,
    db: Session = Depends(get_db),
    account: dict = Depends(resolve_account)
):
    return get_notifications(db, account["id"], min(limit, 100), unread_only)


@router.post("", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
def create_notification_endpoint(
    payload: NotificationCreate,
    db: Session = Depends(get_db),
    account: dict = Depends(resolve_account)
):
    # Defaults to the caller when no recipient is given
    if payload.user_id and payload.user_id != account["id"] and not is_admin(account):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin privileges required")
    return create_notification(
        db,
        user_id=payload.user_id or account["id"],
        type=payload.type,
        title=payload.title,
        message=payload.message,
        data=payload.data,
        role=payload.role or account.get("role"),
    )


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_read(
    notification_id: int,
    db: Session = Depends(get_db),
    account: dict = Depends(resolve_account)
):
    notification = mark_notification_read(db, notification_id, account["id"])
    if not notification:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return notification


@router.post("/mark-all-read", response_model=SuccessResponse)
def mark_all_as_read(
    db: Session = Depends(get_db),
    account: dict = Depends(resolve_account)
):
    mark_all_read(db, account["id"])
    return {"success": True, "message": "All notifications marked as read"}
