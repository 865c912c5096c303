"""Notification publishing over a RabbitMQ queue."""

import base64
import threading
from typing import Protocol

from kombu import Connection, Queue

from src.core.config import settings
from src.core.errors import QueueError
from src.core.logging import get_logger
from src.core.schemas import AnalysisResult, NotificationSummary
from src.processing import build_notification_summary

logger = get_logger(__name__)


class MessageSender(Protocol):
    def send(self, message: str) -> None: ...


def encode_notification(summary: NotificationSummary) -> str:
    """Serialize a summary to camelCase JSON and base64-encode it."""
    body = summary.model_dump_json(by_alias=True).encode("utf-8")
    return base64.b64encode(body).decode("ascii")


def decode_notification(message: str) -> NotificationSummary:
    return NotificationSummary.model_validate_json(base64.b64decode(message))


class QueueNotificationSender:
    """Publish text messages to a durable queue through one long-lived connection."""

    def __init__(self, broker_url: str, queue_name: str, max_retries: int = 3) -> None:
        self.retry_policy = {
            "max_retries": max_retries,
            "interval_start": 0,
            "interval_step": 1,
            "interval_max": 5,
        }
        # bounds the reconnect loop, kombu retries forever by default
        self.connection = Connection(
            broker_url,
            connect_timeout=5,
            transport_options=dict(self.retry_policy),
        )
        self.queue = Queue(queue_name, routing_key=queue_name, durable=True)
        # py-amqp channels are not thread-safe and routes publish from worker threads
        self._lock = threading.Lock()

    def send(self, message: str) -> None:
        try:
            with self._lock:
                producer = self.connection.Producer()
                producer.publish(
                    message,
                    exchange="",
                    routing_key=self.queue.name,
                    declare=[self.queue],
                    content_type="text/plain",
                    content_encoding="utf-8",
                    retry=True,
                    retry_policy=self.retry_policy,
                )
        except Exception as exc:
            logger.exception("notification.publish.failed", queue=self.queue.name, exc_info=exc)
            raise QueueError(f"Failed to publish notification: {exc}") from exc

        logger.info("notification.published", queue=self.queue.name, size_bytes=len(message))

    def close(self) -> None:
        self.connection.release()


def build_notification_sender() -> QueueNotificationSender:
    return QueueNotificationSender(
        broker_url=settings.broker_url,
        queue_name=settings.notification_queue,
        max_retries=settings.notification_max_retries,
    )


def send_analysis_notification(
    sender: MessageSender,
    file_name: str,
    result: AnalysisResult,
) -> NotificationSummary:
    """Summarize a result, encode it and hand it to the sender."""
    summary = build_notification_summary(result, file_name=file_name)
    sender.send(encode_notification(summary))
    return summary
