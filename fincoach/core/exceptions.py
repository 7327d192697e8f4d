"""Exception hierarchy for FinCoach.

The engine itself never raises for degenerate data; these cover the
configuration and storage boundaries.
"""


class FinCoachError(Exception):
    """Base class for all FinCoach errors."""


class ConfigError(FinCoachError):
    """Settings file exists but cannot be parsed or validated."""


class SnapshotNotFoundError(FinCoachError):
    """No snapshot file at the requested location."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Snapshot file not found: {path}")


class InvalidSnapshotError(FinCoachError):
    """Stored snapshot is corrupt or fails model validation."""


class RecordNotFoundError(FinCoachError):
    """A transaction, budget or goal id is not present in the snapshot."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")
