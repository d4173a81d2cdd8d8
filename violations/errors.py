"""Exception hierarchy for the violation summary.

Fetch and dataset failures are fatal to a run and are surfaced to the
entry point, which logs them and exits non-zero.
"""

from __future__ import annotations


class ViolationsError(Exception):
    """Base exception for all violation summary failures."""


class TransferError(ViolationsError):
    """Raised when the source file cannot be fetched or stored locally."""


class DatasetError(ViolationsError):
    """Raised when the local source file cannot be read into a dataset."""


class EmptyCategoryError(ViolationsError):
    """Raised when earliest/latest is requested from an empty bucket."""


class ConfigError(ViolationsError):
    """Raised for invalid runtime configuration."""
