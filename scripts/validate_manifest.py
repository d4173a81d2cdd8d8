#!/usr/bin/env python
from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Dict, List

from violations.fetch import file_digest

REQUIRED_FIELDS = ["generated_at", "source", "manifest", "skipped_rows", "categories"]


def _load_manifest(path: Path, errors: List[str]) -> Dict:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        errors.append(f"Manifest is missing: {path}")
        return {}
    except (OSError, ValueError) as exc:
        errors.append(f"Manifest is unreadable: {path} ({exc})")
        return {}
    if not isinstance(payload, dict) or not payload:
        errors.append(f"Manifest is empty or not an object: {path}")
        return {}
    return payload


def _validate_raw_files(manifest: Dict, errors: List[str]) -> None:
    raw_files = manifest.get("manifest", {}).get("raw_files", [])
    if not raw_files:
        errors.append("Manifest has no raw_files")
        return
    for item in raw_files:
        path = Path(str(item.get("path", "")))
        if not path.exists():
            errors.append(f"Raw file missing: {path}")
            continue
        sha = item.get("sha256")
        if not sha:
            errors.append(f"Raw file has no sha256: {path}")
        elif sha != file_digest(path):
            errors.append(f"Raw file sha mismatch: {path}")


def _validate_counts(manifest: Dict, errors: List[str], warnings: List[str]) -> None:
    details = manifest.get("manifest", {})
    categories = manifest.get("categories", [])
    if not categories:
        warnings.append("Manifest lists no categories")

    record_count = details.get("record_count")
    if record_count is None:
        errors.append("Manifest missing manifest.record_count")
        return

    total = sum(int(item.get("total", 0)) for item in categories)
    if total != record_count:
        errors.append(f"Category totals sum to {total}, manifest.record_count is {record_count}")

    skipped = len(manifest.get("skipped_rows", []))
    if details.get("row_count") is not None and details["row_count"] != record_count + skipped:
        errors.append(
            f"row_count {details['row_count']} != record_count {record_count} + skipped rows {skipped}"
        )
    if skipped:
        warnings.append(f"{skipped} source rows were skipped as unparseable")


def run(manifest_path: str, fail_on_warning: bool = False) -> int:
    errors: List[str] = []
    warnings: List[str] = []

    manifest = _load_manifest(Path(manifest_path), errors)
    if not manifest:
        return print_result(errors, warnings, fail_on_warning)

    for field in REQUIRED_FIELDS:
        if field not in manifest:
            errors.append(f"Manifest missing required field: {field}")

    if not manifest.get("source", {}).get("url"):
        errors.append("Manifest missing source.url")

    _validate_raw_files(manifest, errors)
    _validate_counts(manifest, errors, warnings)
    return print_result(errors, warnings, fail_on_warning)


def print_result(errors: List[str], warnings: List[str], fail_on_warning: bool = False) -> int:
    if errors:
        print("Manifest validation failed with errors:")
        for item in errors:
            print(f"- ERROR: {item}")
    else:
        print("Manifest validation errors: none")

    if warnings:
        print("Manifest validation warnings:")
        for item in warnings:
            print(f"- WARNING: {item}")

    if errors or (fail_on_warning and warnings):
        return 1
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Validate a violation summary run manifest")
    parser.add_argument("--manifest", default="data/manifests/run.json")
    parser.add_argument("--fail-on-warning", action="store_true", default=False)
    args = parser.parse_args()

    raise SystemExit(run(args.manifest, args.fail_on_warning))


if __name__ == "__main__":
    main()
