"""
Structural parsing of experiment-tracking tables.

This layer only splits fields and maps the header: it never interprets the
step or value text. Numeric coercion, and dropping rows that fail it, is the
index builder's job (see :mod:`runcompare.index.builder`).

Input looks like::

    experiment_id,metric_name,step,value
    E1,loss,0,1.0
    E1,loss,1,0.5

Column order is taken from the header, extra columns are ignored, and blank
lines anywhere in the input are skipped.
"""

import csv
import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Union

from runcompare import logger
from runcompare.config.models import IngestConfig
from runcompare.exceptions import ParseError

RECORD_FIELDS = ("experiment_id", "metric_name", "step", "value")


@dataclass(frozen=True)
class Record:
    """
    One raw observation as read from the table.

    Every field is the cell text, or ``None`` when the row ended before that
    column. ``line_number`` is the 1-based input line the row ended on and
    does not take part in equality.
    """

    experiment_id: Optional[str]
    metric_name: Optional[str]
    step: Optional[str]
    value: Optional[str]
    line_number: int = field(default=0, compare=False)


def _is_blank(row: Sequence[str]) -> bool:
    return all(not cell.strip() for cell in row)


def _map_header(header: Sequence[str], config: IngestConfig) -> Dict[str, int]:
    """
    Resolve the position of each required field in the header row.

    Raises:
        ParseError: If a required column is missing (PARSE_002) or appears
            more than once (PARSE_003)
    """
    names = [cell.strip() for cell in header]
    wanted = config.columns.as_dict()

    positions: Dict[str, int] = {}
    missing: List[str] = []
    duplicated: List[str] = []
    for field_name, column in wanted.items():
        hits = [i for i, name in enumerate(names) if name == column]
        if not hits:
            missing.append(column)
        elif len(hits) > 1:
            duplicated.append(column)
        else:
            positions[field_name] = hits[0]

    if missing:
        raise ParseError(
            f"Header is missing required column(s): {', '.join(missing)}",
            error_code="PARSE_002",
            context={"missing_columns": missing, "header": names},
        )
    if duplicated:
        raise ParseError(
            f"Header names required column(s) more than once: {', '.join(duplicated)}",
            error_code="PARSE_003",
            context={"duplicated_columns": duplicated, "header": names},
        )
    return positions


def iter_records(text: str, config: Optional[IngestConfig] = None) -> Iterator[Record]:
    """
    Lazily parse tabular text into records.

    The header is validated before the first record is yielded, so a
    structural failure surfaces on the first ``next()`` call.

    Args:
        text: Complete table including the header row
        config: Parsing settings (defaults to :class:`IngestConfig`)

    Yields:
        Record: one per non-blank data row, in input order

    Raises:
        ParseError: If the header cannot be established
    """
    config = config or IngestConfig()
    reader = csv.reader(io.StringIO(text), delimiter=config.delimiter)

    positions = None
    while True:
        try:
            row = next(reader)
        except StopIteration:
            break
        except csv.Error as e:
            if positions is None:
                raise ParseError(
                    f"Header row is not valid delimited text: {e}",
                    error_code="PARSE_001",
                ) from e
            logger.debug(f"Dropping unreadable row ending on line {reader.line_num}: {e}")
            continue

        if _is_blank(row):
            continue
        if positions is None:
            positions = _map_header(row, config)
            logger.debug(f"Header mapped: {positions}")
            continue

        cells = {
            field_name: (row[index] if index < len(row) else None)
            for field_name, index in positions.items()
        }
        yield Record(line_number=reader.line_num, **cells)

    if positions is None:
        raise ParseError("Input has no header row", error_code="PARSE_001")


def parse_records(text: str, config: Optional[IngestConfig] = None) -> List[Record]:
    """
    Parse tabular text into a list of records in input row order.

    Args:
        text: Complete table including the header row
        config: Parsing settings (defaults to :class:`IngestConfig`)

    Returns:
        List of records; rows with short cell counts are kept with ``None``
        fields

    Raises:
        ParseError: If the header cannot be established

    Example:
        >>> records = parse_records("experiment_id,metric_name,step,value\\nE1,loss,0,1.0\\n")
        >>> records[0].metric_name
        'loss'
    """
    records = list(iter_records(text, config))
    logger.info(f"Parsed {len(records)} record(s)")
    return records


def read_records(file_path: Union[str, Path], config: Optional[IngestConfig] = None) -> List[Record]:
    """
    Read and parse a tabular file.

    Args:
        file_path: Path to the CSV file
        config: Parsing settings; ``config.encoding`` is used to decode

    Returns:
        Parsed records

    Raises:
        ParseError: If the file cannot be read (PARSE_004) or its header is invalid
    """
    config = config or IngestConfig()
    file_path = Path(file_path)
    logger.debug(f"Reading records from file: {file_path}")

    try:
        with open(file_path, 'r', encoding=config.encoding, newline='') as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(
            f"Cannot read input file {file_path}: {e}",
            error_code="PARSE_004",
            context={"file_path": file_path},
        ) from e

    try:
        return parse_records(text, config)
    except ParseError as e:
        raise e.with_context({"file_path": str(file_path)})


__all__ = ["Record", "RECORD_FIELDS", "iter_records", "parse_records", "read_records"]
