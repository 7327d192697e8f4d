"""Snapshot repositories.

The engine never touches storage. Whatever calls it gets a repository,
loads a full FinanceSnapshot, and passes the lists in.
"""

import logging
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from fincoach.core.exceptions import InvalidSnapshotError, RecordNotFoundError
from fincoach.core.models import Budget, FinanceSnapshot, Goal, Transaction

logger = logging.getLogger(__name__)


class FinanceRepository(Protocol):
    """Storage interface for transactions, budgets, goals and dismissals."""

    def load_snapshot(self) -> FinanceSnapshot: ...

    def save_snapshot(self, snapshot: FinanceSnapshot) -> None: ...

    def add_transaction(self, transaction: Transaction) -> Transaction: ...

    def update_transaction(self, transaction_id: str, **changes: object) -> Transaction: ...

    def delete_transaction(self, transaction_id: str) -> None: ...

    def add_budget(self, budget: Budget) -> Budget: ...

    def add_goal(self, goal: Goal) -> Goal: ...

    def dismiss_insight(self, insight_id: str) -> None: ...

    def dismissed_insights(self) -> set[str]: ...


class SnapshotRepository:
    """Record-level operations on top of load/save of a whole snapshot.

    Subclasses provide ``load_snapshot`` and ``save_snapshot``.
    """

    def load_snapshot(self) -> FinanceSnapshot:
        raise NotImplementedError

    def save_snapshot(self, snapshot: FinanceSnapshot) -> None:
        raise NotImplementedError

    def add_transaction(self, transaction: Transaction) -> Transaction:
        snapshot = self.load_snapshot()
        snapshot.transactions.append(transaction)
        self.save_snapshot(snapshot)
        return transaction

    def update_transaction(self, transaction_id: str, **changes: object) -> Transaction:
        """Apply a correction edit to a transaction.

        The edited record is re-validated before it replaces the old one.

        Raises:
            RecordNotFoundError: If no transaction has this id.
            InvalidSnapshotError: If the edit produces an invalid transaction.
        """
        snapshot = self.load_snapshot()
        for index, tx in enumerate(snapshot.transactions):
            if tx.id == transaction_id:
                try:
                    updated = Transaction.model_validate({**tx.model_dump(), **changes, "id": tx.id})
                except ValidationError as e:
                    raise InvalidSnapshotError(f"Invalid transaction update: {e}") from e
                snapshot.transactions[index] = updated
                self.save_snapshot(snapshot)
                return updated
        raise RecordNotFoundError("Transaction", transaction_id)

    def delete_transaction(self, transaction_id: str) -> None:
        snapshot = self.load_snapshot()
        remaining = [tx for tx in snapshot.transactions if tx.id != transaction_id]
        if len(remaining) == len(snapshot.transactions):
            raise RecordNotFoundError("Transaction", transaction_id)
        snapshot.transactions = remaining
        self.save_snapshot(snapshot)

    def add_budget(self, budget: Budget) -> Budget:
        snapshot = self.load_snapshot()
        snapshot.budgets.append(budget)
        self.save_snapshot(snapshot)
        return budget

    def add_goal(self, goal: Goal) -> Goal:
        snapshot = self.load_snapshot()
        snapshot.goals.append(goal)
        self.save_snapshot(snapshot)
        return goal

    def dismiss_insight(self, insight_id: str) -> None:
        snapshot = self.load_snapshot()
        snapshot.dismissed_insights.add(insight_id)
        self.save_snapshot(snapshot)
        logger.debug("Dismissed insight %s", insight_id)

    def dismissed_insights(self) -> set[str]:
        return set(self.load_snapshot().dismissed_insights)


class InMemoryRepository(SnapshotRepository):
    """Keeps the snapshot in memory. Used by tests and embedding callers."""

    def __init__(self, snapshot: FinanceSnapshot | None = None):
        self._snapshot = snapshot.model_copy(deep=True) if snapshot else FinanceSnapshot()

    def load_snapshot(self) -> FinanceSnapshot:
        return self._snapshot.model_copy(deep=True)

    def save_snapshot(self, snapshot: FinanceSnapshot) -> None:
        self._snapshot = snapshot.model_copy(deep=True)


class JsonFileRepository(SnapshotRepository):
    """Stores the whole snapshot as one JSON document.

    A missing file reads as an empty snapshot; the file is created on the
    first save.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load_snapshot(self) -> FinanceSnapshot:
        """Read the snapshot from disk.

        Raises:
            InvalidSnapshotError: If the file is not a valid snapshot.
        """
        if not self.path.exists():
            logger.debug("No snapshot at %s, starting empty", self.path)
            return FinanceSnapshot()

        try:
            snapshot = FinanceSnapshot.model_validate_json(self.path.read_text(encoding="utf-8"))
        except ValidationError as e:
            raise InvalidSnapshotError(f"Invalid snapshot in {self.path}: {e}") from e

        logger.debug(
            "Loaded %d transactions, %d budgets, %d goals from %s",
            len(snapshot.transactions),
            len(snapshot.budgets),
            len(snapshot.goals),
            self.path,
        )
        return snapshot

    def save_snapshot(self, snapshot: FinanceSnapshot) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")
        logger.debug("Saved snapshot to %s", self.path)
