import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional, Union

from finflow import aggregation
from finflow.codec import export_snapshot, import_snapshot
from finflow.domain import Goal, Transaction, TransactionType
from finflow.errors import FinanceError, LoadError, PersistenceError
from finflow.events import (
    BUDGET_EXCEEDED,
    DATA_IMPORTED,
    GOAL_COMPLETED,
    PERSISTENCE_FAILED,
    RECORD_DELETED,
    RECORD_SAVED,
    EventBus,
)
from finflow.functional import Either, Right
from finflow.persistence import PersistenceGateway
from finflow.store import RecordCollection, RecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MutationResult:
    """What a tracker call did: the store outcome plus the save that followed.

    ``saved`` is None when the store was not changed and nothing was written.
    """
    outcome: Either
    saved: Optional[Either[PersistenceError, None]] = None

    @property
    def ok(self) -> bool:
        return self.outcome.is_right()

    @property
    def value(self):
        return self.outcome.get_or_else(None)

    @property
    def error(self) -> Optional[FinanceError]:
        return self.outcome.get_error() if self.outcome.is_left() else None

    @property
    def save_error(self) -> Optional[PersistenceError]:
        if self.saved is None or self.saved.is_right():
            return None
        return self.saved.get_error()


class FinanceTracker:
    """Facade the view layer talks to.

    Wraps a RecordStore and a PersistenceGateway: every successful mutation
    is followed by a save, and notable changes are published on the bus.
    A failed save is reported, never rolled back.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        bus: Optional[EventBus] = None,
        store: Optional[RecordStore] = None,
    ):
        self.gateway = gateway
        self.bus = bus or EventBus()
        self.store = store or RecordStore()
        self.load_errors: list[LoadError] = []

    @classmethod
    def open(cls, gateway: PersistenceGateway, bus: Optional[EventBus] = None, **kwargs) -> "FinanceTracker":
        tracker = cls(gateway, bus, **kwargs)
        tracker.init()
        return tracker

    def init(self) -> None:
        loaded = self.gateway.load()
        self.store.replace_all(loaded.transactions, loaded.budgets, loaded.goals)
        self.load_errors = list(loaded.errors)

    # persistence

    def save(self) -> Either[PersistenceError, None]:
        saved = self.gateway.save(*self.store.snapshot())
        if saved.is_left():
            self.bus.publish(PERSISTENCE_FAILED, {"error": saved.get_error()})
        return saved

    def _saved(self, outcome: Either, kind: str, updated: bool) -> MutationResult:
        if outcome.is_left():
            return MutationResult(outcome)
        saved = self.save()
        self.bus.publish(RECORD_SAVED, {"kind": kind, "record": outcome.get_or_else(None), "updated": updated})
        return MutationResult(outcome, saved)

    def _create(self, collection: RecordCollection, draft: Mapping[str, Any]) -> MutationResult:
        return self._saved(collection.create(draft), collection.kind, updated=False)

    def _update(self, collection: RecordCollection, record_id: str, draft: Mapping[str, Any]) -> MutationResult:
        return self._saved(collection.update(record_id, draft), collection.kind, updated=True)

    def _delete(self, collection: RecordCollection, record_id: str) -> MutationResult:
        if not collection.delete(record_id):
            return MutationResult(Right(False))
        saved = self.save()
        self.bus.publish(RECORD_DELETED, {"kind": collection.kind, "id": record_id})
        return MutationResult(Right(True), saved)

    # transactions

    def _watch_budget(self, action: Callable[[], MutationResult]) -> MutationResult:
        before = {
            (u.budget.id, y, m): u.over_budget
            for y, m in self._months()
            for u in self._usages(y, m)
        }
        result = action()
        if result.ok:
            t: Transaction = result.value
            if t.type is TransactionType.EXPENSE:
                self._check_budget(t, before)
        return result

    def _months(self) -> set[tuple[int, int]]:
        return {(t.date.year, t.date.month) for t in self.store.transactions.list()}

    def _usages(self, year: int, month: int):
        return aggregation.budget_utilization(
            self.store.budgets.list(), self.store.transactions.list(), year, month
        )

    def _check_budget(self, t: Transaction, before: dict) -> None:
        year, month = t.date.year, t.date.month
        for usage in self._usages(year, month):
            if usage.budget.category != t.category or not usage.over_budget:
                continue
            if before.get((usage.budget.id, year, month)):
                continue
            self.bus.publish(BUDGET_EXCEEDED, {
                "category": usage.budget.category,
                "spent": usage.spent,
                "limit": usage.budget.amount,
                "percentage": usage.percentage,
            })

    def add_transaction(self, draft: Mapping[str, Any]) -> MutationResult:
        return self._watch_budget(lambda: self._create(self.store.transactions, draft))

    def edit_transaction(self, transaction_id: str, draft: Mapping[str, Any]) -> MutationResult:
        return self._watch_budget(lambda: self._update(self.store.transactions, transaction_id, draft))

    def remove_transaction(self, transaction_id: str) -> MutationResult:
        return self._delete(self.store.transactions, transaction_id)

    # budgets

    def add_budget(self, draft: Mapping[str, Any]) -> MutationResult:
        return self._create(self.store.budgets, draft)

    def edit_budget(self, budget_id: str, draft: Mapping[str, Any]) -> MutationResult:
        return self._update(self.store.budgets, budget_id, draft)

    def remove_budget(self, budget_id: str) -> MutationResult:
        return self._delete(self.store.budgets, budget_id)

    # goals

    def _watch_goal(self, goal_id: Optional[str], action: Callable[[], MutationResult]) -> MutationResult:
        was_complete = False
        if goal_id is not None:
            was_complete = (
                self.store.goals.get(goal_id)
                .map(lambda g: aggregation.goal_progress(g).is_complete)
                .get_or_else(False)
            )
        result = action()
        if result.ok:
            goal: Goal = result.value
            if aggregation.goal_progress(goal).is_complete and not was_complete:
                self.bus.publish(GOAL_COMPLETED, {"id": goal.id, "name": goal.name})
        return result

    def add_goal(self, draft: Mapping[str, Any]) -> MutationResult:
        return self._watch_goal(None, lambda: self._create(self.store.goals, draft))

    def edit_goal(self, goal_id: str, draft: Mapping[str, Any]) -> MutationResult:
        return self._watch_goal(goal_id, lambda: self._update(self.store.goals, goal_id, draft))

    def remove_goal(self, goal_id: str) -> MutationResult:
        return self._delete(self.store.goals, goal_id)

    def update_goal_current(self, goal_id: str, new_amount: Any) -> MutationResult:
        return self._watch_goal(
            goal_id,
            lambda: self._saved(self.store.update_goal_current(goal_id, new_amount), "Goal", updated=True),
        )

    # backup / restore

    def export_data(self, now: Optional[datetime] = None) -> dict[str, Any]:
        return export_snapshot(*self.store.snapshot(), now=now)

    def import_data(self, raw: Union[str, bytes, Mapping[str, Any]]) -> MutationResult:
        decoded = import_snapshot(raw)
        if decoded.is_left():
            logger.warning("import rejected: %s", decoded.get_error().message)
            return MutationResult(decoded)
        snapshot = decoded.get_or_else(None)
        self.store.replace_all(snapshot.transactions, snapshot.budgets, snapshot.goals)
        saved = self.save()
        logger.info("imported snapshot version %s", snapshot.version)
        self.bus.publish(DATA_IMPORTED, {"version": snapshot.version})
        return MutationResult(decoded, saved)

    # read side

    def summary(self, today: date) -> aggregation.DashboardSummary:
        return aggregation.dashboard_summary(
            self.store.transactions.list(), self.store.goals.list(), today
        )

    def budget_overview(self, today: date, top_n: Optional[int] = None) -> list[aggregation.BudgetUsage]:
        usages = self._usages(today.year, today.month)
        if top_n is None:
            return usages
        return aggregation.dashboard_budgets(usages, top_n)

    def goal_overview(self) -> list[aggregation.GoalProgress]:
        return [aggregation.goal_progress(g) for g in self.store.goals.list()]


def result_message(result: MutationResult) -> str:
    if result.error is not None:
        return result.error.message
    if result.save_error is not None:
        return result.save_error.message
    return "ok"
