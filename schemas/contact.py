"""
Pydantic schemas for the canonical contact shape
"""

from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field

# One CSV row keyed by its (normalized) header name
RawRecord = Dict[str, str]

UNKNOWN_CONTACT_NAME = "Unknown Contact"


class AcquisitionStage(str, Enum):
    """Rungs of the fallback ladder, plus the two cache shortcuts"""
    MEMORY = "memory"
    PRIMARY = "primary"
    LOCAL_CACHE = "local_cache"
    ALTERNATE = "alternate"
    PROXY = "proxy"
    SAMPLE = "sample"
    RESCUE = "rescue"


class ConnectionStatus(str, Enum):
    """Connection signal the display layer shows next to the list"""
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"
    OFFLINE = "offline"
    NO_DATA = "no-data"


class Contact(BaseModel):
    """
    Canonical contact record.

    Every field is a plain string; empty string means "not present".
    `original` keeps the source row for diagnostics and is excluded
    from serialization.
    """

    id: str
    name: str = UNKNOWN_CONTACT_NAME
    email: str = ""
    phone: str = ""
    company: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    zip: str = ""
    balance: str = ""

    original: RawRecord = Field(
        default_factory=dict,
        alias="_original",
        exclude=True,
        repr=False,
    )

    @property
    def is_meaningful(self) -> bool:
        """True when at least one identifying field carries data"""
        return bool(
            self.name != UNKNOWN_CONTACT_NAME
            or self.email
            or self.phone
            or self.company
        )

    def canonical_fields(self) -> Dict[str, Any]:
        """Canonical data only, without the diagnostic source row"""
        return self.model_dump()

    class Config:
        populate_by_name = True
