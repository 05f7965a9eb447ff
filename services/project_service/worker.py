import json

import pika
from loguru import logger

from crud import create_notification, get_project
from database import SessionLocal
from events import RABBITMQ_URL, EVENTS_QUEUE
from log import configure_logger
from notifier import project_label


def get_project_title(db, project_id) -> str:
    project = get_project(db, project_id) if project_id else None
    return project_label(project.title if project else None, project_id)


def handle_bid_created(db, data: dict):
    customer_id = data.get("customer_id")
    if not customer_id:
        return
    project_id = data.get("project_id")
    create_notification(
        db,
        user_id=customer_id,
        role="customer",
        type="bid.received",
        title="New bid received",
        message=f"A merchant placed a bid on your project {get_project_title(db, project_id)}",
        data=data,
    )


def handle_bid_selected(db, data: dict):
    project_id = data.get("project_id")
    title = get_project_title(db, project_id)

    merchant_id = data.get("merchant_id")
    if merchant_id:
        create_notification(
            db,
            user_id=merchant_id,
            role="merchant",
            type="bid.accepted",
            title="Your bid was selected",
            message=f"Your bid on project {title} was selected. The project is now awarded to you.",
            data=data,
        )

    for rejected_id in data.get("rejected_merchant_ids") or []:
        create_notification(
            db,
            user_id=rejected_id,
            role="merchant",
            type="bid.rejected",
            title="Project awarded to another merchant",
            message=f"Project {title} was awarded to another bid.",
            data={"project_id": project_id},
        )


EVENT_HANDLERS = {
    "bid.created": handle_bid_created,
    "bid.selected": handle_bid_selected,
}


def process_notification(ch, method, properties, body):
    try:
        event = json.loads(body)
        event_type = event.get("type")
        data = event.get("data") or {}

        handler = EVENT_HANDLERS.get(event_type)
        if handler:
            db = SessionLocal()
            try:
                handler(db, data)
            finally:
                db.close()
        else:
            logger.bind(event_type=event_type).debug("No notification for event")

        ch.basic_ack(delivery_tag=method.delivery_tag)
    except Exception as exc:
        logger.warning(f"Error processing notification event: {exc}")
        ch.basic_nack(delivery_tag=method.delivery_tag, requeue=False)


def start_worker():
    configure_logger()
    if not RABBITMQ_URL:
        raise RuntimeError("RABBITMQ_URL must be set to run the notification worker")
    params = pika.URLParameters(RABBITMQ_URL)
    connection = pika.BlockingConnection(params)
    channel = connection.channel()
    channel.queue_declare(queue=EVENTS_QUEUE, durable=True)
    channel.basic_consume(queue=EVENTS_QUEUE, on_message_callback=process_notification)
    logger.info("Notification worker started. Waiting for events...")
    channel.start_consuming()


if __name__ == "__main__":
    start_worker()
