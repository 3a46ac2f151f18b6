"""
Pydantic schemas for data validation and serialization.

Schemas:
    contact: Canonical contact model, acquisition stages, connection status
    cache: Durable cache sidecar
    export: Export outcome
    api: HTTP response models

Usage:
    from schemas.contact import Contact, ConnectionStatus
    from schemas.api import ContactListResponse, HealthResponse

Example:
    contact = Contact(id="John_Doe_john@x.com", name="John Doe", email="john@x.com")

    # The source row is kept for diagnostics but never serialized
    assert "original" not in contact.model_dump()
"""

__all__ = [
    "Contact",
    "RawRecord",
    "AcquisitionStage",
    "ConnectionStatus",
    "CacheEntry",
    "ExportResult",
    "ContactListResponse",
    "HealthResponse",
]
