import json
import os

import pika
from loguru import logger

# Publishing is skipped entirely when no broker is configured
RABBITMQ_URL = os.getenv("RABBITMQ_URL")
EVENTS_QUEUE = os.getenv("EVENTS_QUEUE", "events")


def publish_event(event_type: str, data: dict):
    """Publish an event to RabbitMQ. Best-effort: failures are logged, never raised."""
    if not RABBITMQ_URL:
        logger.bind(event_type=event_type).debug("No broker configured, event not published")
        return False
    try:
        params = pika.URLParameters(RABBITMQ_URL)
        connection = pika.BlockingConnection(params)
        try:
            channel = connection.channel()
            channel.queue_declare(queue=EVENTS_QUEUE, durable=True)
            channel.basic_publish(
                exchange='',
                routing_key=EVENTS_QUEUE,
                body=json.dumps({"type": event_type, "data": data}),
                properties=pika.BasicProperties(delivery_mode=2)
            )
        finally:
            connection.close()
    except Exception as exc:
        logger.bind(event_type=event_type).warning(f"Failed to publish event: {exc}")
        return False
    return True
