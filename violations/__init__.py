"""Fetch inspection violation records and summarize them per category."""

from dataclasses import dataclass
from typing import Any, Dict, List

import pandas as pd


@dataclass(frozen=True)
class RunResult:
    lines: List[str]
    table: pd.DataFrame
    manifest: Dict[str, Any]
