from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from violations import RunResult
from violations.config import Settings, load_settings
from violations.dataset import BAD_ROW_POLICIES, build_dataset
from violations.errors import ConfigError, DatasetError, TransferError
from violations.fetch import fetch_to_file
from violations.report import build_manifest, format_summary, summary_frame, write_manifest

logger = logging.getLogger("violations.summarize")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def run_summary(
    settings: Settings,
    manifest_out: Optional[Path] = None,
    table_out: Optional[Path] = None,
) -> RunResult:
    fetched = fetch_to_file(settings.source_url, settings.download_dir, timeout=settings.timeout)
    build = build_dataset(fetched.path, on_bad_row=settings.on_bad_row, date_format=settings.date_format)

    frame = summary_frame(build.dataset)
    manifest = build_manifest(fetched, build, frame)

    if table_out is not None:
        table_out.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(table_out, index=False)
    if manifest_out is not None:
        write_manifest(manifest, manifest_out)

    return RunResult(lines=format_summary(build.dataset), table=frame, manifest=manifest)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Summarize inspection violations per category")
    parser.add_argument("--config", help="YAML settings file")
    parser.add_argument("--url", help="source CSV url (overrides config)")
    parser.add_argument("--download-dir", help="directory for the local copy of the source file")
    parser.add_argument("--on-bad-row", choices=BAD_ROW_POLICIES, help="what to do with unparseable rows")
    parser.add_argument("--timeout", type=float, help="network timeout in seconds")
    parser.add_argument("--manifest-out", type=Path, help="write a JSON run manifest here")
    parser.add_argument("--table-out", type=Path, help="write the summary table as CSV here")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default="INFO")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = _parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT, stream=sys.stderr)

    try:
        settings = load_settings(args.config).with_overrides(
            source_url=args.url,
            download_dir=args.download_dir,
            on_bad_row=args.on_bad_row,
            timeout=args.timeout,
        )
        result = run_summary(settings, args.manifest_out, args.table_out)
    except TransferError as exc:
        logger.critical("was unable to download file: %s", exc)
        raise SystemExit(1)
    except DatasetError as exc:
        logger.critical("unable to generate the data set: %s", exc)
        raise SystemExit(1)
    except ConfigError as exc:
        logger.critical("invalid configuration: %s", exc)
        raise SystemExit(1)
    except OSError as exc:
        logger.critical("unable to write run outputs: %s", exc)
        raise SystemExit(1)

    print("violation summary by category")
    for line in result.lines:
        print(line)


if __name__ == "__main__":
    main()
