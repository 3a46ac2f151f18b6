"""
Line-level CSV parser used as the last resort when pandas cannot make
sense of the feed.

Quote handling is simple: a double quote toggles the
"inside quotes" state and is never part of the value, and commas only
split outside quotes. Records cannot span lines, so an unclosed quote
runs to the end of its line and never fails the line.
"""

from typing import List

from core.exceptions import ParseError
from ingestion.transformers.field_aliases import has_identifying_field, normalize_header
from schemas.contact import RawRecord
import logging

logger = logging.getLogger(__name__)


def split_line(line: str) -> List[str]:
    """
    Split one CSV line on commas that are not inside quotes.

    Never raises: an unclosed quote keeps the rest of the line in the
    last value.
    """
    values = []
    current = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            values.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    values.append("".join(current).strip())
    return values


def parse_manual(raw_text: str) -> List[RawRecord]:
    """
    Parse CSV text line by line.

    The first line is the header. Values are zipped against the headers
    by position: extras are dropped and missing trailing values become
    empty strings. Rows without any identifying field are skipped.

    Raises:
        ParseError: if the text has fewer than two lines
    """
    logger.info("Using manual CSV parsing")

    lines = raw_text.split("\n")
    if len(lines) < 2:
        raise ParseError(
            "CSV has insufficient lines",
            context={"lines": len(lines)}
        )

    headers = [normalize_header(h) for h in split_line(lines[0].strip())]

    logger.debug(f"Headers found: {headers}")

    records: List[RawRecord] = []

    for line in lines[1:]:
        line = line.strip()
        if not line:
            continue

        values = split_line(line)

        record = {
            header: values[index] if index < len(values) else ""
            for index, header in enumerate(headers)
        }

        if has_identifying_field(record):
            records.append(record)

    logger.info(f"Manual parsing completed: {len(records)} records")
    return records
