"""Errors raised by the analysis pipeline and the storage layer."""


class TelemetryError(Exception):
    """Base class for every error this app raises on purpose."""


class CSVParseError(TelemetryError):
    """The uploaded payload could not be read as CSV at all."""


class EmptyDatasetError(TelemetryError):
    """Analysis was requested for a batch without a single valid row."""


class StorageQuotaExceeded(TelemetryError):
    """The key-value store refused a write because the user is out of space."""


class ArchivedDatasetMissing(TelemetryError):
    """A history entry points at a record batch that is no longer stored."""


class InsightError(TelemetryError):
    """The insight collaborator could not produce a result."""


class SummaryNotFound(TelemetryError):
    """No summary with the requested id in the session or the history."""
