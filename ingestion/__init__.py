"""
Ingestion pipeline for the third-party contacts CSV feed.

This package turns an unreliable remote CSV into a stable list of
normalized contacts:

Modules:
    base: Abstract base class for acquisition strategies
    runner: Orchestrator walking the fallback ladder
    scheduler: APScheduler integration for auto-refresh

Subpackages:
    extractors: HTTP fetcher, acquisition strategies, bundled sample data
    parsers: Structured (pandas) and line-level CSV parsers
    transformers: Header alias table, normalization, filtering
    cache: Durable CSV cache and in-memory snapshot
    exporters: CSV export and share hand-off

Architecture:
    get_contacts runs through these stages:

    1. Memory snapshot - served directly while fresh
    2. Acquire - primary fetch, local cache, alternate headers, proxy
       relay, bundled sample data; first success wins
    3. Parse - strict, relaxed, then manual parsing
    4. Normalize - alias resolution, phone formatting, invalid rows dropped

    Every stage failure is logged and the next stage is tried.

Usage:
    from ingestion.runner import ContactIngestionRunner

Example:
    runner = ContactIngestionRunner()
    contacts = await runner.get_contacts()

    print(f"Loaded {len(contacts)} contacts ({runner.connection_status.value})")

Error Handling:
    Components raise the exceptions in core.exceptions; only the runner
    catches them.
"""

__all__ = [
    "AcquisitionStrategy",
    "ContactIngestionRunner",
    "ContactRefreshScheduler",
    "CSVFetcher",
    "StructuredCSVParser",
    "ContactNormalizer",
    "LocalCacheStore",
    "ContactSnapshotCache",
    "ContactExporter",
]
