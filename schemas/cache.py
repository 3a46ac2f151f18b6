"""
Schema for the durable cache sidecar
"""

from pydantic import BaseModel, Field


class CacheEntry(BaseModel):
    """
    Sidecar written next to the cached CSV payload.

    Serialized as `{"timestamp": <epoch ms>, "size": "<bytes>", "url": "..."}`.
    """
    timestamp: int = Field(..., ge=0, description="Download time, epoch milliseconds")
    size: str = Field("0", description="Declared payload size in bytes")
    url: str = Field("", description="Source URL the payload was downloaded from")

    def age_ms(self, now_ms: int) -> int:
        return now_ms - self.timestamp
