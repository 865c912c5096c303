"""Analysis API routes for running analyses and reading stored results."""

import asyncio

from fastapi import APIRouter

from src.api.dependencies import T_MessageSender, T_ObjectStore
from src.core.errors import NotFoundError
from src.core.logging import bind_context, get_logger, unbind_context
from src.core.schemas import AnalysisFailed, AnalysisFound, AnalysisSucceeded
from src.services import analysis as analysis_service

router = APIRouter(prefix="/analysis", tags=["analysis"])
logger = get_logger(__name__)


@router.post("/{file_name}", response_model=AnalysisSucceeded)
async def analyze_file(
    store: T_ObjectStore,
    sender: T_MessageSender,
    file_name: str,
) -> AnalysisSucceeded:
    """Analyze a stored file; any failure is reported as 404 with its message."""
    bind_context(file_name=file_name)
    try:
        logger.info("analysis.requested")
        outcome = await asyncio.to_thread(analysis_service.analyze_file, store, sender, file_name)
        if isinstance(outcome, AnalysisFailed):
            raise NotFoundError(outcome.message)

        logger.info(
            "analysis.completed",
            total_records=outcome.results.total_records,
            notification_sent=outcome.notification_sent,
        )
        return outcome
    finally:
        unbind_context("file_name")


@router.get("/{file_name}", response_model=AnalysisFound | AnalysisFailed)
async def get_analysis_result(
    store: T_ObjectStore,
    file_name: str,
) -> AnalysisFound | AnalysisFailed:
    """Return stored results, or a failure envelope when none exist."""
    return await asyncio.to_thread(analysis_service.get_analysis_result, store, file_name)
