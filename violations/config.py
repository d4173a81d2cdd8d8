from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict

import yaml

from .dataset import check_policy
from .errors import ConfigError
from .records import DATE_FORMAT

DEFAULT_SOURCE_URL = "http://forever.codeforamerica.org/fellowship-2015-tech-interview/Violations-2012.csv"

ENV_SOURCE_URL = "VIOLATIONS_SOURCE_URL"
ENV_DOWNLOAD_DIR = "VIOLATIONS_DOWNLOAD_DIR"


@dataclass(frozen=True)
class Settings:
    source_url: str = DEFAULT_SOURCE_URL
    download_dir: Path = Path("data/raw")
    timeout: float = 60.0
    on_bad_row: str = "skip"
    date_format: str = DATE_FORMAT

    def with_overrides(self, **overrides: Any) -> "Settings":
        values = {key: value for key, value in overrides.items() if value is not None}
        return _validated(replace(self, **values))


def _require_text(name: str, value: Any, types: tuple = (str,)) -> None:
    if not isinstance(value, types) or not str(value).strip():
        raise ConfigError(f"{name} must be a non-empty string, got {value!r}")


def _validated(settings: Settings) -> Settings:
    _require_text("source_url", settings.source_url)
    _require_text("download_dir", settings.download_dir, (str, Path))
    _require_text("date_format", settings.date_format)

    if isinstance(settings.timeout, bool):
        raise ConfigError(f"timeout must be a number of seconds, got {settings.timeout!r}")
    try:
        timeout = float(settings.timeout)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"timeout must be a number of seconds, got {settings.timeout!r}") from exc
    if timeout <= 0:
        raise ConfigError(f"timeout must be positive, got {timeout}")
    check_policy(settings.on_bad_row)
    return replace(settings, download_dir=Path(settings.download_dir), timeout=timeout)


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as fh:
            payload = yaml.safe_load(fh) or {}
    except OSError as exc:
        raise ConfigError(f"Unable to read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file {path} is not valid YAML: {exc}") from exc

    if not isinstance(payload, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level")

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(payload) - known)
    if unknown:
        raise ConfigError(f"Unknown keys in {path}: {', '.join(unknown)}")
    return payload


def load_settings(path: str | Path | None = None) -> Settings:
    """Resolve settings from defaults, an optional YAML file and the environment.

    Environment variables win over the file; command-line options are applied
    afterwards by the caller through ``Settings.with_overrides``.
    """
    payload: Dict[str, Any] = {}
    if path is not None:
        payload = _read_yaml(Path(path))

    env_url = os.getenv(ENV_SOURCE_URL)
    if env_url:
        payload["source_url"] = env_url
    env_dir = os.getenv(ENV_DOWNLOAD_DIR)
    if env_dir:
        payload["download_dir"] = env_dir

    return _validated(Settings(**payload))
