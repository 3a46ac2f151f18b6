"""
Contact retrieval, refresh and export endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse
from api.dependencies import get_exporter, get_runner
from ingestion.exporters.csv_exporter import ContactExporter, export_filename
from ingestion.runner import ContactIngestionRunner
from ingestion.transformers.contact_filter import filter_contacts
from schemas.api import CacheClearResponse, ContactListResponse
from typing import Literal, Optional
import time
import uuid
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Contacts"])

FilterOption = Literal["all", "company", "location"]


def _build_response(
    runner: ContactIngestionRunner,
    contacts,
    search: Optional[str],
    filter_by: str
) -> ContactListResponse:
    filtered = filter_contacts(contacts, search=search, filter_by=filter_by)
    return ContactListResponse(
        items=filtered,
        total=len(filtered),
        connection_status=runner.connection_status,
        stage=runner.last_stage,
        filters_applied={k: v for k, v in {
            "search": search,
            "filter_by": filter_by,
        }.items() if v}
    )


@router.get("/contacts", response_model=ContactListResponse)
async def list_contacts(
    request: Request,
    search: Optional[str] = Query(None, description="Search name, email, company, phone, city, country"),
    filter_by: FilterOption = Query("all", description="all, company or location"),
    refresh: bool = Query(False, description="Bypass the in-memory cache"),
    runner: ContactIngestionRunner = Depends(get_runner)
):
    """
    Retrieve normalized contacts.

    Never fails: when the feed is unreachable the list comes from the
    durable cache or sample data, and `connection_status` says so.
    """
    start_time = time.time()
    request_id = getattr(request.state, "request_id", f"req_{uuid.uuid4().hex[:12]}")

    logger.info(
        f"[{request_id}] GET /contacts - refresh={refresh}, "
        f"filters: filter_by={filter_by}, search={search}"
    )

    contacts = await runner.get_contacts(force_refresh=refresh)
    response = _build_response(runner, contacts, search, filter_by)
    request.state.connection_status = runner.connection_status.value

    api_latency_ms = (time.time() - start_time) * 1000
    logger.info(
        f"[{request_id}] Returned {response.total} of {len(contacts)} contacts "
        f"({api_latency_ms:.2f}ms, status={runner.connection_status.value})"
    )
    return response


@router.post("/contacts/refresh", response_model=ContactListResponse)
async def refresh_contacts(runner: ContactIngestionRunner = Depends(get_runner)):
    """Force a fresh acquisition"""
    contacts = await runner.get_contacts(force_refresh=True)
    return _build_response(runner, contacts, None, "all")


@router.get("/contacts/export", response_class=PlainTextResponse)
async def export_contacts(
    search: Optional[str] = Query(None),
    filter_by: FilterOption = Query("all"),
    runner: ContactIngestionRunner = Depends(get_runner),
    exporter: ContactExporter = Depends(get_exporter)
):
    """Download the filtered list as CSV"""
    contacts = await runner.get_contacts()
    filtered = filter_contacts(contacts, search=search, filter_by=filter_by)
    filename = export_filename(filter_by)

    logger.info(f"Exporting {len(filtered)} contacts as {filename}")

    return PlainTextResponse(
        exporter.to_csv(filtered),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.get("/contacts/cache", response_class=PlainTextResponse)
async def download_cached_csv(runner: ContactIngestionRunner = Depends(get_runner)):
    """Raw CSV as last cached on disk, for debugging the feed"""
    cached = runner.cache_store.read_cached() if runner.cache_store else None
    if cached is None:
        raise HTTPException(status_code=404, detail="Cache file not found")

    return PlainTextResponse(
        cached,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="contacts_cache.csv"'}
    )


@router.delete("/cache", response_model=CacheClearResponse)
async def clear_cache(runner: ContactIngestionRunner = Depends(get_runner)):
    """Drop the in-memory snapshot and the durable CSV cache"""
    runner.clear_cache()
    if runner.cache_store is not None:
        runner.cache_store.invalidate()
    return CacheClearResponse(message="Cache cleared")
