"""
Search and category filtering over normalized contacts
"""

from typing import List, Optional
from schemas.contact import Contact

FILTER_OPTIONS = ("all", "company", "location")


def matches_search(contact: Contact, query: str) -> bool:
    """Case-insensitive match on text fields; phone is matched as typed"""
    query = query.lower()
    return (
        query in contact.name.lower()
        or query in contact.email.lower()
        or query in contact.company.lower()
        or query in contact.phone
        or query in contact.city.lower()
        or query in contact.country.lower()
    )


def filter_contacts(
    contacts: List[Contact],
    search: Optional[str] = None,
    filter_by: str = "all"
) -> List[Contact]:
    """
    Apply the search box and the category filter.

    Args:
        contacts: Normalized contacts
        search: Free-text query; blank means no search
        filter_by: "all", "company" (has a company) or
            "location" (has a city or a country)
    """
    if filter_by not in FILTER_OPTIONS:
        raise ValueError(f"filter_by must be one of: {', '.join(FILTER_OPTIONS)}")

    filtered = contacts

    if search and search.strip():
        query = search.strip()
        filtered = [c for c in filtered if matches_search(c, query)]

    if filter_by == "company":
        filtered = [c for c in filtered if c.company]
    elif filter_by == "location":
        filtered = [c for c in filtered if c.city or c.country]

    return filtered
