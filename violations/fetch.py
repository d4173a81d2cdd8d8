from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import unquote, urlparse

import requests

from .errors import TransferError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "violations-summary/0.1 (+csv-fetch)",
}

FALLBACK_FILENAME = "download.csv"
CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class FetchResult:
    url: str
    path: Path
    http_status: int
    content_type: str | None
    size_bytes: int
    sha256: str
    retrieved_at: str


def file_digest(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as fh:
        for block in iter(lambda: fh.read(CHUNK_SIZE), b""):
            digest.update(block)
    return digest.hexdigest()


def derive_filename(url: str) -> str:
    path = unquote(urlparse(url).path)
    name = path.rsplit("/", 1)[-1].strip()
    if not name or name in {".", ".."}:
        return FALLBACK_FILENAME
    return name


def fetch_to_file(url: str, download_dir: Path, timeout: float | None = 60.0) -> FetchResult:
    """Download ``url`` into ``download_dir``, replacing any previous copy.

    The body is streamed into a ``.part`` file next to the target and only
    moved over it once complete, so a failed transfer keeps the previous copy.
    """
    target = Path(download_dir) / derive_filename(url)
    partial = target.with_name(f"{target.name}.part")
    retrieved_at = datetime.now(timezone.utc).isoformat()

    try:
        response = requests.get(url, headers=DEFAULT_HEADERS, timeout=timeout, stream=True)
    except requests.RequestException as exc:
        raise TransferError(f"Unable to reach {url}: {exc}") from exc

    try:
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise TransferError(f"Fetching {url} returned HTTP {response.status_code}") from exc

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with partial.open("wb") as handle:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        handle.write(chunk)
            size_bytes = partial.stat().st_size
            sha256 = file_digest(partial)
            partial.replace(target)
        except requests.RequestException as exc:
            raise TransferError(f"Transfer from {url} was interrupted: {exc}") from exc
        except OSError as exc:
            raise TransferError(f"Unable to write local copy {target}: {exc}") from exc
    finally:
        response.close()
        if partial.exists():
            partial.unlink()

    result = FetchResult(
        url=url,
        path=target,
        http_status=response.status_code,
        content_type=response.headers.get("Content-Type"),
        size_bytes=size_bytes,
        sha256=sha256,
        retrieved_at=retrieved_at,
    )
    logger.info("Fetched %s to %s (%d bytes)", url, target, result.size_bytes)
    return result
