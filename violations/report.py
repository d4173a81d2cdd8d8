from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from .accumulator import Dataset
from .dataset import BuildResult
from .fetch import FetchResult

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

SUMMARY_COLUMNS = [
    "category",
    "earliest_violation_id",
    "earliest_entered_at",
    "latest_violation_id",
    "latest_entered_at",
    "total",
]

INTEGER_COLUMNS = {"earliest_violation_id", "latest_violation_id", "total"}


def _stamp(value: datetime) -> str:
    return value.strftime(TIMESTAMP_FORMAT)


def format_summary(dataset: Dataset) -> List[str]:
    lines: List[str] = []
    for bucket in dataset.buckets():
        earliest = bucket.earliest()
        latest = bucket.latest()
        lines.extend(
            [
                f"category: {bucket.name}",
                f"earliest: violation_id: {earliest.violation_id} time_stamp {_stamp(earliest.entered_at)}",
                f"latest: violation_id: {latest.violation_id} time_stamp {_stamp(latest.entered_at)}",
                f"total: {bucket.count()}",
            ]
        )
    return lines


def summary_frame(dataset: Dataset) -> pd.DataFrame:
    rows = []
    for bucket in dataset.buckets():
        earliest = bucket.earliest()
        latest = bucket.latest()
        rows.append(
            {
                "category": bucket.name,
                "earliest_violation_id": earliest.violation_id,
                "earliest_entered_at": _stamp(earliest.entered_at),
                "latest_violation_id": latest.violation_id,
                "latest_entered_at": _stamp(latest.entered_at),
                "total": bucket.count(),
            }
        )
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def build_manifest(fetch: FetchResult, build: BuildResult, frame: pd.DataFrame) -> Dict[str, Any]:
    # numpy integers from the frame are not JSON serializable.
    categories = [
        {key: int(value) if key in INTEGER_COLUMNS else value for key, value in row.items()}
        for row in frame.to_dict(orient="records")
    ]
    return {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "source": {
            "url": fetch.url,
            "retrieved_at": fetch.retrieved_at,
            "http_status": fetch.http_status,
            "content_type": fetch.content_type,
        },
        "manifest": {
            "raw_files": [
                {
                    "path": str(fetch.path),
                    "sha256": fetch.sha256,
                    "size_bytes": fetch.size_bytes,
                }
            ],
            "row_count": int(build.row_count),
            "record_count": int(build.dataset.total()),
            "skipped_row_count": len(build.skipped),
            "columns": list(build.header),
        },
        "skipped_rows": [row.as_dict() for row in build.skipped],
        "categories": categories,
    }


def write_manifest(manifest: Dict[str, Any], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(manifest, ensure_ascii=False, indent=2), encoding="utf-8")
