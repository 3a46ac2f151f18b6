"""
Schema for export outcomes
"""

from typing import Optional
from pydantic import BaseModel


class ExportResult(BaseModel):
    """Outcome of an export hand-off; failures are reported, not raised"""
    success: bool
    message: str
    path: Optional[str] = None
