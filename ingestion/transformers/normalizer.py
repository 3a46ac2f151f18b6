"""
Transform raw CSV rows into the canonical contact schema
"""

import re
from typing import Any, Iterable, List

from ingestion.transformers.field_aliases import FIELD_ALIASES, first_non_empty
from schemas.contact import Contact, RawRecord, UNKNOWN_CONTACT_NAME
import logging

logger = logging.getLogger(__name__)

_NON_DIGIT = re.compile(r"\D")
_WHITESPACE = re.compile(r"\s")


def format_phone(phone: Any) -> str:
    """
    Format a phone number for display.

    Exactly ten digits (after dropping everything else) become
    `(XXX) XXX-XXXX`; anything else is returned unchanged.
    """
    if phone is None or phone == "":
        return ""
    text = str(phone)
    digits = _NON_DIGIT.sub("", text)
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    return text


class ContactNormalizer:
    """
    Normalize raw rows from the feed into `Contact` models.

    Handles:
    - Header alias resolution (see field_aliases.FIELD_ALIASES)
    - Phone display formatting
    - Deterministic ids for rows without one

    Never raises: a row with nothing recognizable becomes a mostly-empty
    contact, which callers drop via `Contact.is_meaningful`.
    """

    def normalize(self, raw_record: RawRecord) -> Contact:
        """Normalize a single raw record"""
        name = first_non_empty(raw_record, FIELD_ALIASES["name"], UNKNOWN_CONTACT_NAME)
        email = first_non_empty(raw_record, FIELD_ALIASES["email"])

        contact_id = first_non_empty(raw_record, FIELD_ALIASES["id"])
        if not contact_id:
            contact_id = _WHITESPACE.sub("_", f"{name}_{email}")

        return Contact(
            id=contact_id,
            name=name,
            email=email,
            phone=format_phone(first_non_empty(raw_record, FIELD_ALIASES["phone"])),
            company=first_non_empty(raw_record, FIELD_ALIASES["company"]),
            address=first_non_empty(raw_record, FIELD_ALIASES["address"]),
            city=first_non_empty(raw_record, FIELD_ALIASES["city"]),
            state=first_non_empty(raw_record, FIELD_ALIASES["state"]),
            country=first_non_empty(raw_record, FIELD_ALIASES["country"]),
            zip=first_non_empty(raw_record, FIELD_ALIASES["zip"]),
            balance=first_non_empty(raw_record, FIELD_ALIASES["balance"]),
            original=dict(raw_record),
        )

    def normalize_all(self, raw_records: Iterable[RawRecord]) -> List[Contact]:
        """Normalize a batch and drop contacts without identifying data"""
        contacts = []
        dropped = 0

        for raw in raw_records:
            contact = self.normalize(raw)
            if contact.is_meaningful:
                contacts.append(contact)
            else:
                dropped += 1

        if dropped:
            logger.info(f"Dropped {dropped} rows without identifying fields")

        return contacts
