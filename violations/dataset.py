"""Build a category dataset from a local CSV copy of the violation records.

Row shape is strict: the header fixes the field count and every data row
must match it exactly, fewer or more fields both fail the run. Rows that have
the right shape but unparseable values are handled by the bad-row policy.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

from .accumulator import Dataset
from .errors import ConfigError, DatasetError
from .records import DATE_FORMAT, FieldError, parse_row

logger = logging.getLogger(__name__)

BAD_ROW_POLICIES = ("skip", "abort")


@dataclass(frozen=True)
class SkippedRow:
    line: int
    values: Tuple[str, ...]
    errors: Tuple[FieldError, ...]

    def as_dict(self) -> dict:
        return {"line": self.line, "errors": [err.as_dict() for err in self.errors]}


@dataclass
class BuildResult:
    dataset: Dataset
    header: List[str] = field(default_factory=list)
    row_count: int = 0
    skipped: List[SkippedRow] = field(default_factory=list)


def _describe(errors: Tuple[FieldError, ...]) -> str:
    return "; ".join(f"{err.field}={err.value!r} ({err.reason})" for err in errors)


def check_policy(on_bad_row: str) -> str:
    if on_bad_row not in BAD_ROW_POLICIES:
        raise ConfigError(f"Unknown bad-row policy {on_bad_row!r}; expected one of {', '.join(BAD_ROW_POLICIES)}")
    return on_bad_row


def build_dataset(path: Path, on_bad_row: str = "skip", date_format: str = DATE_FORMAT) -> BuildResult:
    check_policy(on_bad_row)
    path = Path(path)
    result = BuildResult(dataset=Dataset())

    try:
        with path.open("r", encoding="utf-8", newline="") as fh:
            reader = csv.reader(fh, skipinitialspace=True, strict=True)
            for values in reader:
                if not values:
                    continue
                # skipinitialspace only drops spaces, not tabs.
                values = [value.lstrip() for value in values]
                if not result.header:
                    result.header = list(values)
                    continue

                line = reader.line_num
                if len(values) != len(result.header):
                    raise DatasetError(
                        f"{path}:{line}: expected {len(result.header)} fields as in header, got {len(values)}"
                    )

                result.row_count += 1
                parsed = parse_row(values, date_format)
                if parsed.ok:
                    result.dataset.ingest(parsed.record)
                    continue

                if on_bad_row == "abort":
                    raise DatasetError(f"{path}:{line}: unparseable row: {_describe(parsed.errors)}")
                logger.warning("Skipping %s:%d: %s", path, line, _describe(parsed.errors))
                result.skipped.append(SkippedRow(line=line, values=tuple(values), errors=parsed.errors))
    except csv.Error as exc:
        raise DatasetError(f"{path}: malformed CSV: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise DatasetError(f"{path}: not valid UTF-8: {exc}") from exc
    except OSError as exc:
        raise DatasetError(f"Unable to read {path}: {exc}") from exc

    logger.info(
        "Built dataset from %s: %d rows, %d categories, %d skipped",
        path,
        result.row_count,
        len(result.dataset),
        len(result.skipped),
    )
    return result
