"""
Health check endpoint with connection and cache status
"""

from fastapi import APIRouter, Depends, Query
from api.dependencies import get_fetcher, get_runner
from ingestion.extractors.http_fetcher import CSVFetcher
from ingestion.runner import ContactIngestionRunner
from schemas.api import HealthResponse
from schemas.contact import ConnectionStatus
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])

_STATUS_HEALTH = {
    ConnectionStatus.CONNECTED: "healthy",
    ConnectionStatus.CONNECTING: "healthy",
    ConnectionStatus.OFFLINE: "degraded",
    ConnectionStatus.ERROR: "degraded",
    ConnectionStatus.NO_DATA: "unhealthy",
}


@router.get("/health", response_model=HealthResponse)
async def health_check(
    check: bool = Query(False, description="Also send one HEAD request to the CSV source"),
    runner: ContactIngestionRunner = Depends(get_runner),
    fetcher: CSVFetcher = Depends(get_fetcher)
):
    """
    Health check endpoint.

    Returns:
    - Connection status derived from the stage that last served data
    - Memory snapshot freshness and size
    - Durable cache sidecar, if any
    - Whether the source answers right now, when `check` is set
    """
    status = runner.connection_status
    snapshot = runner.snapshot_cache.snapshot
    cache_info = runner.cache_store.info() if runner.cache_store else None
    source_reachable = None
    if check and not runner.use_local_csv:
        source_reachable = await fetcher.check_connection()
        logger.info(f"Source reachability check: {source_reachable}")

    # Nothing has been served yet in remote mode
    overall = _STATUS_HEALTH[status] if runner.last_stage is not None else "healthy"

    return HealthResponse(
        status=overall,
        connection_status=status,
        last_stage=runner.last_stage,
        snapshot_fresh=runner.snapshot_cache.is_fresh(),
        snapshot_age_seconds=round(snapshot.age(runner.snapshot_cache.clock()), 3) if snapshot else None,
        snapshot_size=len(snapshot.contacts) if snapshot else 0,
        local_mode=runner.use_local_csv,
        cache=cache_info,
        source_reachable=source_reachable
    )
