"""
Export contacts back to CSV and hand the file to a share facility
"""

import shutil
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional

import pandas as pd

from core.config import settings
from core.exceptions import ExportError
from schemas.contact import Contact
from schemas.export import ExportResult
import logging

logger = logging.getLogger(__name__)

EXPORT_COLUMNS: List[str] = [
    "name", "company", "email", "phone", "address",
    "city", "state", "country", "zip", "balance",
]


class ShareService(ABC):
    """Platform share/export facility the exporter hands files to"""

    @abstractmethod
    def is_available(self) -> bool:
        pass

    @abstractmethod
    def share(self, path: Path, mime_type: str, dialog_title: str):
        """Hand `path` to the user. Raise ExportError on failure."""
        pass


class DirectoryShareService(ShareService):
    """Copies exports into an outbox directory picked up by something else"""

    def __init__(self, outbox_dir: str):
        self.outbox_dir = Path(outbox_dir)

    def is_available(self) -> bool:
        return True

    def share(self, path: Path, mime_type: str, dialog_title: str):
        try:
            self.outbox_dir.mkdir(parents=True, exist_ok=True)
            target = self.outbox_dir / path.name
            if target.resolve() != path.resolve():
                shutil.copyfile(path, target)
        except OSError as e:
            raise ExportError(
                "Could not copy export to outbox",
                context={"path": str(path), "outbox": str(self.outbox_dir)},
                original_exception=e
            )
        logger.info(f"{dialog_title}: shared {path.name} ({mime_type})")


def export_filename(filter_by: str, on: Optional[date] = None) -> str:
    """`contacts_<filter>_<YYYY-MM-DD>.csv`"""
    on = on or date.today()
    return f"contacts_{filter_by}_{on.isoformat()}.csv"


class ContactExporter:
    """
    Render contacts to CSV with a fixed column set.

    Only canonical fields are written; ids and the diagnostic source row
    are left out.
    """

    def __init__(
        self,
        share_service: Optional[ShareService] = None,
        export_dir: Optional[str] = None
    ):
        self.export_dir = Path(export_dir or settings.EXPORT_DIR)
        self.share_service = share_service

    def to_csv(self, contacts: Iterable[Contact]) -> str:
        rows = [
            {column: getattr(contact, column) for column in EXPORT_COLUMNS}
            for contact in contacts
        ]
        df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
        return df.to_csv(index=False, lineterminator="\n")

    def export_contacts(
        self,
        contacts: List[Contact],
        filename: str = "contacts_export.csv"
    ) -> ExportResult:
        """Write the CSV and share it; failures come back as an unsuccessful result"""
        try:
            csv_text = self.to_csv(contacts)
            path = self.export_dir / filename
            try:
                self.export_dir.mkdir(parents=True, exist_ok=True)
                path.write_text(csv_text, encoding="utf-8")
            except OSError as e:
                raise ExportError(
                    "Could not write export file",
                    context={"path": str(path)},
                    original_exception=e
                )

            if self.share_service is None or not self.share_service.is_available():
                raise ExportError(
                    "Sharing is not available on this device",
                    context={"path": str(path)}
                )

            self.share_service.share(path, mime_type="text/csv", dialog_title="Export Contacts")

        except ExportError as e:
            logger.error(f"Export error: {e}")
            return ExportResult(success=False, message=e.message)

        logger.info(f"Exported {len(contacts)} contacts to {path}")
        return ExportResult(
            success=True,
            message="Contacts exported successfully!",
            path=str(path)
        )

    def export_filtered_contacts(
        self,
        contacts: List[Contact],
        filter_by: str = "all",
        on: Optional[date] = None
    ) -> ExportResult:
        return self.export_contacts(contacts, export_filename(filter_by, on))
