"""Persistence for finance snapshots."""

from fincoach.storage.repository import (
    FinanceRepository,
    InMemoryRepository,
    JsonFileRepository,
    SnapshotRepository,
)

__all__ = [
    "FinanceRepository",
    "InMemoryRepository",
    "JsonFileRepository",
    "SnapshotRepository",
]
