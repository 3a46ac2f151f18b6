"""
Declarative alias table for the contact feed.

The feed is maintained by hand on the other side, so column names drift
between exports ("Company_name", "Company name", "company", ...). Each
canonical field lists the header spellings it accepts, highest priority
first. Lookups are case-sensitive.
"""

import re
from typing import Dict, Mapping, Optional, Sequence, Tuple

FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "id": ("id",),
    "name": ("Name", "name", "Company_name", "Company name", "company"),
    "company": ("Company_name", "Company name", "company", "organisation", "Company"),
    "email": ("Email", "email", "Email_Address"),
    "phone": ("Phone", "phone", "mobile", "telephone"),
    "address": ("Street_Address", "Street Address", "address", "Address"),
    "city": ("City", "city"),
    "state": ("State", "state", "province"),
    "country": ("Country", "country"),
    "zip": ("Zip", "zip", "postal_code"),
    "balance": ("Open_balance", "Open balance", "balance"),
}

# A row must carry at least one of these to be worth keeping
IDENTIFYING_FIELDS: Tuple[str, ...] = ("name", "email", "phone", "company")

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_header(header: str) -> str:
    """Trim a header and collapse internal whitespace runs to underscores"""
    return _WHITESPACE_RUN.sub("_", str(header).lstrip("\ufeff").strip())


def _has_value(value: Optional[str]) -> bool:
    return value is not None and str(value).strip() != ""


def first_non_empty(
    record: Mapping[str, str],
    aliases: Sequence[str],
    default: str = ""
) -> str:
    """Return the value of the first alias present with non-blank content"""
    for alias in aliases:
        value = record.get(alias)
        if _has_value(value):
            return str(value)
    return default


def resolve_field(record: Mapping[str, str], field: str, default: str = "") -> str:
    return first_non_empty(record, FIELD_ALIASES[field], default)


def has_identifying_field(record: Mapping[str, str]) -> bool:
    """True if any identifying field resolves under any of its aliases"""
    return any(resolve_field(record, field) for field in IDENTIFYING_FIELDS)


def populated_field_count(record: Mapping[str, str]) -> int:
    return sum(1 for value in record.values() if _has_value(value))
