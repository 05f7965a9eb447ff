"""Best-effort notification emitter.

Routes hand ``emit`` to FastAPI's BackgroundTasks after the state transition
it describes has been committed. Emission uses its own session so a failure
here can never roll back or fail the request that scheduled it.
"""

from typing import Optional

from loguru import logger

from crud import create_notification
from database import SessionLocal


def emit(
    user_id: int,
    role: Optional[str],
    type: str,
    title: Optional[str],
    message: Optional[str],
    data: Optional[dict] = None,
):
    db = SessionLocal()
    try:
        notification = create_notification(
            db,
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            data=data,
            role=role,
        )
        logger.bind(user_id=user_id, notification_type=type).debug("Notification emitted")
        return notification
    except Exception as exc:
        db.rollback()
        logger.bind(user_id=user_id, notification_type=type).warning(f"Notification emission failed: {exc}")
        return None
    finally:
        db.close()


def project_label(title: Optional[str], project_id: int) -> str:
    return f'"{title}"' if title else f"#{project_id}"


def notify_project_approved(customer_id: int, project_id: int, title: Optional[str], status: str):
    return emit(
        customer_id,
        "customer",
        "project.approved",
        "Project approved",
        f"Your project {project_label(title, project_id)} was approved and is now {status}.",
        {"project_id": project_id, "status": status},
    )


def notify_project_rejected(customer_id: int, project_id: int, title: Optional[str]):
    return emit(
        customer_id,
        "customer",
        "project.rejected",
        "Project rejected",
        f"Your project {project_label(title, project_id)} was rejected by an administrator.",
        {"project_id": project_id, "status": "Cancelled"},
    )


def notify_project_deleted(customer_id: int, project_id: int, title: Optional[str]):
    return emit(
        customer_id,
        "customer",
        "project.deleted",
        "Project removed",
        f"Your project {project_label(title, project_id)} was removed by an administrator.",
        {"project_id": project_id},
    )
