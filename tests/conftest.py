"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest
import requests

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

HEADER = "violation_id,inspection_id,violation_category,violation_date,violation_date_closed,violation_type"

SAMPLE_ROWS = [
    "204851,261019,Garbage and Refuse,2012-01-03 00:00:00,2012-02-02 00:00:00,Refuse Accumulation",
    "207703,264875,Garbage and Refuse,2012-03-05 00:00:00,,Refuse Accumulation",
    '205900,262417,"Unsanitary Conditions, General",2012-02-14 00:00:00,2012-04-10 00:00:00,Unsanitary conditions',
    "204852,261019, Garbage and Refuse, 2012-01-01 00:00:00, ,Refuse Accumulation",
    "208102,265330,Animals and Pests,2012-06-21 00:00:00,,Rodents",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("VIOLATIONS_SOURCE_URL", raising=False)
    monkeypatch.delenv("VIOLATIONS_DOWNLOAD_DIR", raising=False)


@pytest.fixture
def write_csv(tmp_path):
    def _write(*lines: str, name: str = "violations.csv") -> Path:
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def csv_header() -> str:
    return HEADER


@pytest.fixture
def sample_csv(write_csv) -> Path:
    return write_csv(HEADER, *SAMPLE_ROWS)


@pytest.fixture
def sample_body() -> bytes:
    return ("\n".join([HEADER, *SAMPLE_ROWS]) + "\n").encode("utf-8")


class FakeResponse:
    def __init__(
        self,
        body: bytes = b"",
        status_code: int = 200,
        headers: dict | None = None,
        stream_error: Exception | None = None,
    ) -> None:
        self.body = body
        self.stream_error = stream_error
        self.status_code = status_code
        self.headers = headers if headers is not None else {"Content-Type": "text/csv"}
        self.closed = False

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def iter_content(self, chunk_size: int = 1):
        for start in range(0, len(self.body), chunk_size):
            yield self.body[start : start + chunk_size]
            if self.stream_error is not None:
                raise self.stream_error

    def close(self) -> None:
        self.closed = True


@dataclass
class Served:
    response: FakeResponse
    calls: list = field(default_factory=list)


@pytest.fixture
def serve(monkeypatch):
    """Replace requests.get with a canned response or error."""

    def _serve(
        body: bytes = b"",
        status_code: int = 200,
        headers: dict | None = None,
        error: Exception | None = None,
        stream_error: Exception | None = None,
    ) -> Served:
        served = Served(response=FakeResponse(body, status_code, headers, stream_error))

        def fake_get(url, **kwargs):
            served.calls.append((url, kwargs))
            if error is not None:
                raise error
            return served.response

        monkeypatch.setattr("violations.fetch.requests.get", fake_get)
        return served

    return _serve
