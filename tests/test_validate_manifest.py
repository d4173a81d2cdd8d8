"""Tests for the run manifest validation script."""

from __future__ import annotations

import json
from pathlib import Path

from scripts.validate_manifest import run
from violations import summarize
from violations.config import Settings

URL = "http://example.test/fellowship-2015/Violations-2012.csv"


def _write_run(serve, body: bytes, tmp_path: Path) -> Path:
    serve(body=body)
    manifest_path = tmp_path / "run.json"
    summarize.run_summary(Settings(source_url=URL, download_dir=tmp_path / "raw"), manifest_out=manifest_path)
    return manifest_path


def _rewrite(path: Path, mutate) -> None:
    payload = json.loads(path.read_text(encoding="utf-8"))
    mutate(payload)
    path.write_text(json.dumps(payload), encoding="utf-8")


def test_valid_manifest_passes(serve, sample_body: bytes, tmp_path: Path, capsys) -> None:
    manifest_path = _write_run(serve, sample_body, tmp_path)

    assert run(str(manifest_path)) == 0
    assert "errors: none" in capsys.readouterr().out


def test_tampered_raw_file_fails(serve, sample_body: bytes, tmp_path: Path, capsys) -> None:
    manifest_path = _write_run(serve, sample_body, tmp_path)
    (tmp_path / "raw" / "Violations-2012.csv").write_bytes(sample_body + b"9,9,Z,2012-01-01 00:00:00,,T\n")

    assert run(str(manifest_path)) == 1
    assert "sha mismatch" in capsys.readouterr().out


def test_inconsistent_totals_fail(serve, sample_body: bytes, tmp_path: Path, capsys) -> None:
    manifest_path = _write_run(serve, sample_body, tmp_path)
    _rewrite(manifest_path, lambda payload: payload["categories"][0].update(total=99))

    assert run(str(manifest_path)) == 1
    assert "Category totals" in capsys.readouterr().out


def test_missing_manifest_fails(tmp_path: Path) -> None:
    assert run(str(tmp_path / "absent.json")) == 1


def test_skipped_rows_warn(serve, csv_header: str, tmp_path: Path, capsys) -> None:
    body = f"{csv_header}\n1,10,A,2012-01-01 00:00:00,,T\nx,20,A,2012-01-02 00:00:00,,T\n".encode("utf-8")
    manifest_path = _write_run(serve, body, tmp_path)

    assert run(str(manifest_path)) == 0
    assert run(str(manifest_path), fail_on_warning=True) == 1
    assert "were skipped" in capsys.readouterr().out


def test_unparseable_manifest_fails(tmp_path: Path, capsys) -> None:
    path = tmp_path / "run.json"
    path.write_text("{not json", encoding="utf-8")

    assert run(str(path)) == 1
    assert "unreadable" in capsys.readouterr().out
