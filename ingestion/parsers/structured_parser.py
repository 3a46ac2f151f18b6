"""
Structured CSV parsing with pandas under a fixed sequence of profiles.

Strategies, in priority order:
1. Strict   - any tokenizer error fails the whole strategy
2. Relaxed  - bad rows are logged and skipped; if the tokenizer cannot
              recover (e.g. an unterminated quote), rows are parsed one
              at a time so a single broken line only loses itself
3. Manual   - the line-level parser in line_parser.py

The first strategy that yields at least one valid record wins.
"""

import io
import warnings
from typing import Callable, List, Optional, Tuple

import pandas as pd
from pandas.errors import EmptyDataError, ParserError, ParserWarning

from core.exceptions import ParseError
from ingestion.parsers.line_parser import parse_manual
from ingestion.transformers.field_aliases import (
    has_identifying_field,
    normalize_header,
    populated_field_count,
)
from schemas.contact import RawRecord
import logging

logger = logging.getLogger(__name__)

_TOKENIZER_ERRORS = (ParserError, EmptyDataError)


def is_valid_record(record: RawRecord) -> bool:
    """A row counts when it has more than one populated field and an identifying one"""
    return populated_field_count(record) > 1 and has_identifying_field(record)


class StructuredCSVParser:
    """
    Parse raw CSV text into raw records.

    Every value is kept as a string (no type inference, no NA
    conversion), so zip codes and balances come through untouched.
    """

    def __init__(self, delimiter: str = ",", quotechar: str = '"'):
        self.delimiter = delimiter
        self.quotechar = quotechar
        self.strategies: List[Tuple[str, Callable[[str], List[RawRecord]]]] = [
            ("strict", self.parse_strict),
            ("relaxed", self.parse_relaxed),
            ("manual", parse_manual),
        ]

    def parse(self, raw_text: str) -> List[RawRecord]:
        """
        Run the strategies in order and return the first non-empty valid result.

        Raises:
            ParseError: if every strategy fails
        """
        last_error: Optional[Exception] = None

        for name, strategy in self.strategies:
            logger.info(f"Trying parsing strategy: {name}")
            try:
                records = strategy(raw_text)
            except (ParseError,) + _TOKENIZER_ERRORS as e:
                logger.warning(f"Strategy {name} failed: {e}")
                last_error = e
                continue

            valid = [r for r in records if is_valid_record(r)]
            logger.info(
                f"Strategy {name} produced {len(records)} rows, "
                f"{len(valid)} valid"
            )

            if valid:
                return valid

            logger.warning(f"Strategy {name} failed: no valid records found after parsing")

        raise ParseError(
            "All parsing strategies failed",
            context={
                "strategies": [name for name, _ in self.strategies],
                "length": len(raw_text or ""),
            },
            original_exception=last_error
        )

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def parse_strict(self, raw_text: str) -> List[RawRecord]:
        """Header row required; any malformed row fails the whole parse."""
        df = self._read_frame(raw_text, on_bad_lines="error")
        records = self._to_records(df)
        # Greedy empty-line skipping: whitespace-only rows go too
        return [r for r in records if populated_field_count(r) > 0]

    def parse_relaxed(self, raw_text: str) -> List[RawRecord]:
        """Same tokenization, but malformed rows are logged and skipped."""
        try:
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always", ParserWarning)
                df = self._read_frame(raw_text, on_bad_lines="warn")
            for warning in caught:
                logger.warning(f"Parse warning (ignored): {warning.message}")
            return self._to_records(df)
        except ParserError as e:
            logger.warning(f"Relaxed parse could not recover, isolating rows: {e}")
            return self._parse_row_by_row(raw_text)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _read_frame(self, raw_text: str, on_bad_lines: str) -> pd.DataFrame:
        df = pd.read_csv(
            io.StringIO(raw_text),
            sep=self.delimiter,
            quotechar=self.quotechar,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            index_col=False,
            on_bad_lines=on_bad_lines,
        )
        df.columns = [normalize_header(c) for c in df.columns]
        self._reject_spanning_values(df)
        return df

    @staticmethod
    def _reject_spanning_values(df: pd.DataFrame):
        """
        Records never span lines. A value containing a line break means an
        unterminated quote was paired with a quote on a later row, swallowing
        the rows in between.
        """
        for position, column in enumerate(df.columns):
            spanning = df.iloc[:, position].astype(str).str.contains(r"[\r\n]", regex=True)
            if spanning.any():
                row = int(spanning.to_numpy().argmax()) + 2
                raise ParserError(
                    f"Value in column {column} spans several lines near row {row} "
                    f"(unterminated quote?)"
                )

    @staticmethod
    def _to_records(df: pd.DataFrame) -> List[RawRecord]:
        # Short rows come back as NaN even with keep_default_na=False
        df = df.fillna("")
        return [
            {str(k): str(v) for k, v in row.items()}
            for row in df.to_dict(orient="records")
        ]

    def _parse_row_by_row(self, raw_text: str) -> List[RawRecord]:
        lines = [line for line in raw_text.splitlines() if line.strip()]
        if len(lines) < 2:
            return []

        header_line = lines[0]
        records: List[RawRecord] = []

        for line_number, line in enumerate(lines[1:], start=2):
            try:
                with warnings.catch_warnings():
                    warnings.simplefilter("ignore", ParserWarning)
                    df = self._read_frame(f"{header_line}\n{line}\n", on_bad_lines="skip")
            except _TOKENIZER_ERRORS as e:
                logger.warning(f"Skipping malformed line {line_number}: {e}")
                continue
            records.extend(self._to_records(df))

        return records
