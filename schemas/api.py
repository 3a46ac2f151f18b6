"""
Pydantic schemas for API request/response models
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime, timezone
from schemas.cache import CacheEntry
from schemas.contact import AcquisitionStage, ConnectionStatus, Contact


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Contact Schemas
# ============================================================================

class ContactListResponse(BaseModel):
    """Contacts plus the signal the display layer uses to explain degradation"""
    items: List[Contact]
    total: int
    connection_status: ConnectionStatus
    stage: Optional[AcquisitionStage] = None
    filters_applied: dict = Field(default_factory=dict)

    class Config:
        use_enum_values = True
        json_schema_extra = {
            "example": {
                "items": [
                    {
                        "id": "John_Doe_john.doe@email.com",
                        "name": "John Doe",
                        "email": "john.doe@email.com",
                        "phone": "(555) 012-3456",
                        "company": "Tech Corp",
                        "address": "",
                        "city": "New York",
                        "state": "",
                        "country": "USA",
                        "zip": "",
                        "balance": ""
                    }
                ],
                "total": 1,
                "connection_status": "connected",
                "stage": "primary",
                "filters_applied": {"filter_by": "all"}
            }
        }


class CacheClearResponse(BaseModel):
    message: str
    timestamp: datetime = Field(default_factory=_utcnow)


# ============================================================================
# Health Check Schemas
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response model"""
    status: str = Field(..., description="Overall status: healthy, degraded, unhealthy")
    timestamp: datetime = Field(default_factory=_utcnow)
    connection_status: ConnectionStatus
    last_stage: Optional[AcquisitionStage] = None
    snapshot_fresh: bool = False
    snapshot_age_seconds: Optional[float] = None
    source_reachable: Optional[bool] = Field(None, description="Set only when a reachability check was requested")
    snapshot_size: int = 0
    local_mode: bool = False
    cache: Optional[CacheEntry] = None

    class Config:
        use_enum_values = True
