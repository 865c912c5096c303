"""Analysis service orchestrating storage, the processing pipeline and notifications."""

import json

from src.core.errors import AppError, QueueError
from src.core.logging import get_logger
from src.core.schemas import AnalysisFailed, AnalysisFound, AnalysisSucceeded
from src.processing import InvalidDatasetFormatError, analyze
from src.services.notifications import MessageSender, send_analysis_notification
from src.services.storage import ObjectStore

RESULT_PREFIX = "analysis-result-"
logger = get_logger(__name__)


def result_key(file_name: str) -> str:
    return f"{RESULT_PREFIX}{file_name}"


def analyze_file(
    store: ObjectStore,
    sender: MessageSender,
    file_name: str,
) -> AnalysisSucceeded | AnalysisFailed:
    """Analyze a stored CSV file, persist the result and publish a summary.

    Storage and parse failures return a failure envelope. A notification
    failure happens after the result is stored, so it only downgrades the
    success envelope with a warning.
    """
    try:
        payload = store.fetch(file_name)
        result = analyze(payload)
        store.store(result_key(file_name), result.model_dump(mode="json"))
    except (AppError, InvalidDatasetFormatError) as exc:
        logger.warning("analysis.file.failed", file_name=file_name, error=str(exc))
        return AnalysisFailed(message=f"Error analyzing file: {exc}")

    logger.info(
        "analysis.file.stored",
        file_name=file_name,
        result_key=result_key(file_name),
        total_records=result.total_records,
        total_anomalies=result.anomalies.total,
    )

    try:
        send_analysis_notification(sender, file_name, result)
    except QueueError as exc:
        return AnalysisSucceeded(
            file_name=result_key(file_name),
            results=result,
            notification_sent=False,
            warning=f"Analysis stored but notification failed: {exc}",
        )

    return AnalysisSucceeded(
        file_name=result_key(file_name),
        results=result,
        notification_sent=True,
    )


def get_analysis_result(store: ObjectStore, file_name: str) -> AnalysisFound | AnalysisFailed:
    """Read back a stored analysis result without raising for missing ones."""
    key = result_key(file_name)
    try:
        if not store.exists(key):
            return AnalysisFailed(message=f"No analysis results found for file: {file_name}")
        return AnalysisFound(file_name=key, results=json.loads(store.fetch(key)))
    except (AppError, ValueError) as exc:
        logger.warning("analysis.result.lookup_failed", file_name=file_name, error=str(exc))
        return AnalysisFailed(message=f"Error retrieving analysis results: {exc}")
