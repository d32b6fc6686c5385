from __future__ import annotations


class BlackboxError(Exception):
    """Base class for recoverable wizard failures."""


class ConnectivityError(BlackboxError):
    """Reachability request failed or timed out. Always retried."""


class UpdateFailure(BlackboxError):
    """System upgrade exited non-zero or left its sentinel file behind."""


class ApplyFailure(BlackboxError):
    """Apply script exited non-zero or did not consume its package list."""


class SourceFileMissing(BlackboxError):
    """A software group definition file could not be opened."""
