"""
Metadata CSV ingestion and value coercion.

Reads the metadata table with Polars (every column as text), identifies the
accession and paper identifier columns and coerces each descriptor value
once at load time:

    ""  / "NA"        -> None   (missing marker, never a coerced zero)
    "12", "-3.5e2"    -> 12, -350.0
    "GT3a", "0x1F"    -> unchanged trimmed string

Records produced here are immutable; the classifier, colour aggregation and
view helpers all read the same coerced values.
"""

from __future__ import annotations

import io
import logging
import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

import polars as pl

from phylodash.core.exceptions import EmptyCsvError, MalformedCsvError, MissingColumnError
from phylodash.models.config import ColumnConfig
from phylodash.models.descriptors import DescriptorValue, Record

logger = logging.getLogger(__name__)

# Plain decimal or scientific literal. Rejects inf/nan, hex and "1_000",
# which float() would otherwise accept.
_NUMBER_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")

DEFAULT_MISSING_TOKENS: tuple[str, ...] = ("NA",)


def is_missing(value: object, missing_tokens: Iterable[str] = DEFAULT_MISSING_TOKENS) -> bool:
    """True for None, blank strings and missing tokens (case-insensitive)."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    text = str(value).strip()
    if not text:
        return True
    return text.upper() in {token.upper() for token in missing_tokens}


def parse_number(value: object) -> int | float | None:
    """
    Parse a value as a finite number.

    Numbers pass through when finite. Strings must be a plain decimal or
    scientific literal after trimming; integral literals become ``int``.

    Returns:
        The parsed number, or None when the value is not numeric.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not _NUMBER_RE.match(text):
        return None
    if _INTEGER_RE.match(text):
        return int(text)
    number = float(text)
    return number if math.isfinite(number) else None


def coerce_value(
    raw: str | None,
    missing_tokens: Iterable[str] = DEFAULT_MISSING_TOKENS,
) -> DescriptorValue:
    """Coerce a raw CSV cell into a number, a trimmed string or None."""
    if is_missing(raw, missing_tokens):
        return None
    text = str(raw).strip()
    number = parse_number(text)
    return text if number is None else number


def coerce_row(
    raw_row: Mapping[str, str | None],
    reserved_keys: Iterable[str],
    *,
    accession_key: str = "accession",
    paper_id_key: str | None = "pmid",
    missing_tokens: Iterable[str] = DEFAULT_MISSING_TOKENS,
) -> Record:
    """
    Build a Record from one raw CSV row.

    Every column outside ``reserved_keys`` becomes a descriptor. Identifier
    columns are kept as trimmed strings and are never coerced to numbers,
    so a pmid like "0123" keeps its leading zero.

    Args:
        raw_row: Column name to raw cell text.
        reserved_keys: Identifier column names excluded from descriptors.
        accession_key: Column holding the leaf accession.
        paper_id_key: Column holding the paper identifier, None if absent.
        missing_tokens: Case-insensitive tokens treated as missing.

    Returns:
        Immutable Record.
    """
    reserved = set(reserved_keys)
    tokens = tuple(missing_tokens)
    descriptors = {
        key: coerce_value(value, tokens)
        for key, value in raw_row.items()
        if key not in reserved
    }
    return Record(
        accession=_identifier(raw_row.get(accession_key)),
        paper_id=_identifier(raw_row.get(paper_id_key)) if paper_id_key else None,
        descriptors=descriptors,
    )


def _identifier(value: str | None) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class RecordTable:
    """Coerced metadata table.

    Attributes:
        records: One Record per CSV data row, in file order.
        descriptors: Descriptor column names in header order.
        accession_column: Name of the accession column (None if absent).
        paper_id_column: Name of the paper identifier column found (None if absent).
    """

    records: tuple[Record, ...]
    descriptors: tuple[str, ...]
    accession_column: str | None
    paper_id_column: str | None

    def __len__(self) -> int:
        return len(self.records)


def read_csv_rows(csv_text: str) -> pl.DataFrame:
    """
    Read CSV text into a DataFrame with every column as text.

    Raises:
        EmptyCsvError: If the text is blank or has a header but no rows.
        MalformedCsvError: If Polars cannot parse the text.
    """
    if not csv_text or not csv_text.strip():
        raise EmptyCsvError()

    try:
        df = pl.read_csv(
            io.BytesIO(csv_text.encode("utf-8")),
            infer_schema_length=0,
        )
    except pl.exceptions.NoDataError as e:
        raise EmptyCsvError() from e
    except (pl.exceptions.PolarsError, UnicodeError) as e:
        raise MalformedCsvError(str(e).splitlines()[0] if str(e) else type(e).__name__) from e

    if df.height == 0:
        raise EmptyCsvError()
    return df


def load_records(csv_text: str, columns: ColumnConfig | None = None, *,
                 missing_tokens: Iterable[str] = DEFAULT_MISSING_TOKENS) -> RecordTable:
    """
    Load and coerce the metadata CSV.

    Args:
        csv_text: Raw CSV text with a header row.
        columns: Identifier column settings (defaults: accession, pmid/paperId).
        missing_tokens: Case-insensitive tokens treated as missing.

    Returns:
        RecordTable with coerced records and descriptor names.

    Raises:
        EmptyCsvError: If there are no data rows.
        MalformedCsvError: If the CSV cannot be parsed.
        MissingColumnError: If identifier columns are absent and columns.strict is set.
    """
    columns = columns or ColumnConfig()
    df = read_csv_rows(csv_text)
    header = list(df.columns)

    accession_column = columns.accession if columns.accession in header else None
    paper_id_column = next(
        (alias for alias in columns.paper_id_aliases if alias in header), None
    )

    missing = []
    if accession_column is None:
        missing.append(columns.accession)
    if paper_id_column is None:
        missing.append("/".join(columns.paper_id_aliases))
    if missing:
        if columns.strict:
            raise MissingColumnError(missing, header)
        logger.warning(
            "CSV lacks identifier column(s) %s; values will be empty", ", ".join(missing)
        )

    reserved = columns.reserved
    descriptors = tuple(name for name in header if name not in reserved)
    if not descriptors:
        logger.warning("CSV has no descriptor columns besides the identifiers")

    tokens = tuple(missing_tokens)
    records = tuple(
        coerce_row(
            row,
            reserved,
            accession_key=columns.accession,
            paper_id_key=paper_id_column,
            missing_tokens=tokens,
        )
        for row in df.iter_rows(named=True)
    )

    logger.debug(
        "Loaded %d records with %d descriptors", len(records), len(descriptors)
    )
    return RecordTable(
        records=records,
        descriptors=descriptors,
        accession_column=accession_column,
        paper_id_column=paper_id_column,
    )
