from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence, Tuple

DATE_FORMAT = "%Y-%m-%d 00:00:00"

# Optional sign and ASCII digits only; no underscores or other Unicode digits.
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")

# Positional layout of a source row.
FIELDS = (
    "violation_id",
    "inspection_id",
    "violation_category",
    "violation_date",
    "violation_date_closed",
    "violation_type",
)


@dataclass(frozen=True)
class Record:
    violation_id: int
    inspection_id: int
    category: str
    entered_at: datetime
    closed_at: Optional[datetime]
    violation_type: str

    @property
    def is_closed(self) -> bool:
        return self.closed_at is not None


@dataclass(frozen=True)
class FieldError:
    field: str
    value: str
    reason: str

    def as_dict(self) -> dict:
        return {"field": self.field, "value": self.value, "reason": self.reason}


@dataclass(frozen=True)
class ParsedRow:
    """Outcome of parsing one row: a record, or the fields that failed."""

    record: Optional[Record] = None
    errors: Tuple[FieldError, ...] = ()

    @property
    def ok(self) -> bool:
        return self.record is not None


def _parse_int(field: str, raw: str, errors: list[FieldError]) -> Optional[int]:
    text = raw.strip()
    if not INTEGER_PATTERN.fullmatch(text):
        errors.append(FieldError(field, raw, "not an integer"))
        return None
    return int(text)


def _parse_date(field: str, raw: str, date_format: str, errors: list[FieldError]) -> Optional[datetime]:
    if raw == "":
        errors.append(FieldError(field, raw, "missing required date"))
        return None
    try:
        return datetime.strptime(raw, date_format)
    except ValueError:
        errors.append(FieldError(field, raw, f"does not match {date_format!r}"))
        return None


def parse_row(values: Sequence[str], date_format: str = DATE_FORMAT) -> ParsedRow:
    if len(values) < len(FIELDS):
        return ParsedRow(
            errors=(FieldError("row", ",".join(values), f"expected {len(FIELDS)} fields, got {len(values)}"),)
        )

    errors: list[FieldError] = []
    violation_id = _parse_int(FIELDS[0], values[0], errors)
    inspection_id = _parse_int(FIELDS[1], values[1], errors)
    entered_at = _parse_date(FIELDS[3], values[3], date_format, errors)

    closed_at = None
    if values[4] != "":
        closed_at = _parse_date(FIELDS[4], values[4], date_format, errors)

    if errors:
        return ParsedRow(errors=tuple(errors))

    return ParsedRow(
        record=Record(
            violation_id=violation_id,
            inspection_id=inspection_id,
            category=values[2],
            entered_at=entered_at,
            closed_at=closed_at,
            violation_type=values[5],
        )
    )
