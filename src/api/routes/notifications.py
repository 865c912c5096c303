"""Notification API route for publishing summaries of existing results."""

import asyncio

from fastapi import APIRouter
from pydantic import ValidationError

from src.api.dependencies import T_MessageSender
from src.core.errors import InvalidRequestError
from src.core.logging import get_logger
from src.core.schemas import NotificationPublic, NotificationRequest
from src.processing import load_result
from src.services.notifications import send_analysis_notification

router = APIRouter(prefix="/notification", tags=["notification"])
logger = get_logger(__name__)


@router.post("", response_model=NotificationPublic)
async def send_notification(
    sender: T_MessageSender,
    body: NotificationRequest,
) -> NotificationPublic:
    """Summarize a posted analysis result and publish it to the queue."""
    try:
        result = load_result(body.results)
    except ValidationError as exc:
        raise InvalidRequestError(
            detail=exc.errors(include_url=False, include_context=False, include_input=False)
        ) from exc

    summary = await asyncio.to_thread(send_analysis_notification, sender, body.file_name, result)
    logger.info(
        "notification.sent",
        file_name=body.file_name,
        total_anomalies=summary.anomaly_counts.total,
    )
    return NotificationPublic(
        success=True,
        message="Notification sent successfully",
        notification=summary,
    )
