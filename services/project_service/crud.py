from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from loguru import logger
from models import (
    Project,
    Bid,
    Notification,
    ProjectStatus,
    BidStatus,
    OPEN_STATUSES,
    APPROVAL_TARGETS,
    APPROVABLE_STATUSES,
    REJECTABLE_STATUSES,
    SELECTABLE_STATUSES,
)
from errors import NotFoundError, ValidationError, ProjectNotOpenForBidding, InvalidProjectTransition
from typing import Optional
import os

OPEN_PROJECTS_LIMIT = int(os.getenv("OPEN_PROJECTS_LIMIT", "200"))

UPDATABLE_PROJECT_FIELDS = ("title", "description", "category_id")


def _coerce_project_status(status_value) -> ProjectStatus:
    if isinstance(status_value, ProjectStatus):
        return status_value
    try:
        return ProjectStatus(status_value)
    except ValueError:
        raise ValidationError(f"Unknown project status: {status_value}")


# ------- Project store -------
def create_project(
    db: Session,
    customer_id: int,
    title: Optional[str] = None,
    description: Optional[str] = None,
    category_id: Optional[str] = None,
):
    project = Project(
        customer_id=customer_id,
        title=title,
        description=description,
        category_id=category_id,
        status=ProjectStatus.DRAFT,
        views=0,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.bind(project_id=project.id, customer_id=customer_id).info("Project created as Draft")
    return project


def get_project(db: Session, project_id: int):
    return db.query(Project).filter(Project.id == project_id).first()


def list_open_projects(db: Session, limit: int = OPEN_PROJECTS_LIMIT):
    return (
        db.query(Project)
        .filter(Project.status.in_(OPEN_STATUSES))
        .order_by(Project.created_at.desc(), Project.id.desc())
        .limit(limit)
        .all()
    )


def get_projects_by_customer(db: Session, customer_id: int):
    return (
        db.query(Project)
        .filter(Project.customer_id == customer_id)
        .order_by(Project.created_at.desc(), Project.id.desc())
        .all()
    )


def _get_owned_project(db: Session, project_id: int, owner_id: int):
    # A project owned by someone else is indistinguishable from a missing one
    return db.query(Project).filter(
        Project.id == project_id,
        Project.customer_id == owner_id,
    ).first()


def update_project(db: Session, project_id: int, owner_id: int, **patch):
    project = _get_owned_project(db, project_id, owner_id)
    if not project:
        return None

    for key, value in patch.items():
        if key in UPDATABLE_PROJECT_FIELDS:
            setattr(project, key, value)

    db.commit()
    db.refresh(project)
    return project


def delete_project(db: Session, project_id: int, owner_id: int) -> bool:
    project = _get_owned_project(db, project_id, owner_id)
    if not project:
        return False

    db.delete(project)
    db.commit()
    logger.bind(project_id=project_id, customer_id=owner_id).info("Project deleted by owner")
    return True


# ------- Bid store -------
def get_bid(db: Session, bid_id: int):
    return db.query(Bid).filter(Bid.id == bid_id).first()


def get_bids_by_project(db: Session, project_id: int):
    return (
        db.query(Bid)
        .filter(Bid.project_id == project_id)
        .order_by(Bid.created_at.desc(), Bid.id.desc())
        .all()
    )


def get_bids_by_merchant(db: Session, merchant_id: int):
    return (
        db.query(Bid)
        .filter(Bid.merchant_id == merchant_id)
        .order_by(Bid.created_at.desc(), Bid.id.desc())
        .all()
    )


def create_bid(db: Session, project_id: int, merchant_id: int, price: float, days: int, message: Optional[str] = None):
    project = get_project(db, project_id)
    if not project:
        raise NotFoundError("Project not found")

    # Bidding window: only Published/InBidding projects take bids
    if project.status not in OPEN_STATUSES:
        raise ProjectNotOpenForBidding(project.id, project.status.value)

    bid = Bid(
        project_id=project_id,
        merchant_id=merchant_id,
        price=price,
        days=days,
        message=message,
        status=BidStatus.PENDING,
    )
    db.add(bid)
    db.commit()
    db.refresh(bid)
    logger.bind(project_id=project_id, bid_id=bid.id, merchant_id=merchant_id).info("Bid submitted")
    return bid


# ------- Moderation gate -------
def list_pending_projects(db: Session):
    return (
        db.query(Project)
        .filter(Project.status == ProjectStatus.DRAFT)
        .order_by(Project.created_at.desc(), Project.id.desc())
        .all()
    )


def approve_project(db: Session, project_id: int, target_state=ProjectStatus.PUBLISHED):
    """Publish a project for bidding.

    Only Published and InBidding are accepted as approval targets; anything
    else raises ValidationError before the project is looked up. Only Draft
    projects can be approved, otherwise InvalidProjectTransition.
    """
    target = _coerce_project_status(target_state)
    if target not in APPROVAL_TARGETS:
        raise ValidationError(
            f"Invalid approval state '{target.value}', expected one of: "
            + ", ".join(s.value for s in APPROVAL_TARGETS)
        )

    project = get_project(db, project_id)
    if not project:
        return None
    if project.status not in APPROVABLE_STATUSES:
        raise InvalidProjectTransition(project.id, project.status.value, "approve")

    previous = project.status
    project.status = target
    db.commit()
    db.refresh(project)
    logger.bind(project_id=project.id, status=target.value).info(f"Project approved (was {previous.value})")
    return project


def reject_project(db: Session, project_id: int):
    project = get_project(db, project_id)
    if not project:
        return None
    # Cancelled stays rejectable so repeated rejects succeed
    if project.status not in REJECTABLE_STATUSES:
        raise InvalidProjectTransition(project.id, project.status.value, "reject")

    project.status = ProjectStatus.CANCELLED
    db.commit()
    db.refresh(project)
    logger.bind(project_id=project.id, status=project.status.value).info("Project rejected")
    return project


def override_project_status(db: Session, project_id: int, new_status):
    status_value = _coerce_project_status(new_status)
    project = get_project(db, project_id)
    if not project:
        return None

    previous = project.status
    project.status = status_value
    db.commit()
    db.refresh(project)
    logger.bind(project_id=project.id, status=status_value.value).warning(
        f"Project status overridden by admin (was {previous.value})"
    )
    return project


def admin_delete_project(db: Session, project_id: int):
    """Hard-delete a project together with its bids.

    Returns a snapshot of the deleted project (id, customer_id, title) since
    the instance itself is unusable after commit, or None if it did not exist.
    """
    project = get_project(db, project_id)
    if not project:
        return None

    snapshot = {"id": project.id, "customer_id": project.customer_id, "title": project.title}
    try:
        bids_removed = db.query(Bid).filter(Bid.project_id == project_id).delete(synchronize_session=False)
        db.delete(project)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.bind(project_id=project_id, bids_removed=bids_removed).info("Project deleted by admin")
    return snapshot


# ------- Selection resolver -------
def select_bid(db: Session, project: Project, bid_id: int):
    """Award ``project`` to one of its bids.

    Every bid of the project is swept to rejected first, then the winner is
    flipped to accepted and the project becomes Awarded. All three writes
    share one transaction. Only open or already awarded projects can be
    awarded, otherwise InvalidProjectTransition.
    """
    if project.status not in SELECTABLE_STATUSES:
        raise InvalidProjectTransition(project.id, project.status.value, "select a bid on")

    bid = db.query(Bid).filter(Bid.id == bid_id, Bid.project_id == project.id).first()
    if not bid:
        raise NotFoundError("Bid not found for this project")

    try:
        db.query(Bid).filter(Bid.project_id == project.id).update(
            {Bid.status: BidStatus.REJECTED}, synchronize_session=False
        )
        db.query(Bid).filter(Bid.id == bid.id).update(
            {Bid.status: BidStatus.ACCEPTED}, synchronize_session=False
        )
        project.status = ProjectStatus.AWARDED
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(project)
    db.refresh(bid)
    logger.bind(project_id=project.id, bid_id=bid.id, merchant_id=bid.merchant_id).info("Bid selected, project awarded")
    return bid


def _set_bid_status(db: Session, bid_id: int, status: BidStatus):
    bid = get_bid(db, bid_id)
    if not bid:
        return None

    bid.status = status
    db.commit()
    db.refresh(bid)
    logger.bind(project_id=bid.project_id, bid_id=bid.id, status=status.value).info("Bid status changed")
    return bid


def accept_bid(db: Session, bid_id: int):
    return _set_bid_status(db, bid_id, BidStatus.ACCEPTED)


def reject_bid(db: Session, bid_id: int):
    return _set_bid_status(db, bid_id, BidStatus.REJECTED)


# ------- Notifications -------
def create_notification(
    db: Session,
    user_id: int,
    type: str,
    title: Optional[str] = None,
    message: Optional[str] = None,
    data: dict = None,
    role: Optional[str] = None,
):
    notification = Notification(
        user_id=user_id,
        role=role,
        type=type,
        title=title,
        message=message,
        data=data or {},
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


def get_notifications(db: Session, user_id: int, limit: int = 100, unread_only: bool = False):
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read == False)  # noqa: E712
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()


def mark_notification_read(db: Session, notification_id: int, user_id: int):
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user_id
    ).first()
    if notification:
        notification.is_read = True
        db.commit()
        db.refresh(notification)
    return notification


def mark_all_read(db: Session, user_id: int):
    db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read == False  # noqa: E712
    ).update({"is_read": True}, synchronize_session=False)
    db.commit()
