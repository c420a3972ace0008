"""
In-memory record store: the only place transactions, budgets and goals change.

Every collection follows the same contract (create / update / delete / list);
the per-kind rules live in ``finflow.validation``. The store computes nothing
derived; see ``finflow.aggregation`` for that.
"""

import logging
import string
import time
from datetime import datetime
from typing import Any, Callable, Generic, Iterable, Mapping, Optional, Sequence, TypeVar
from uuid import uuid4

from finflow.domain import Budget, Goal, Transaction
from finflow.errors import FinanceError, NotFoundError, ValidationError
from finflow.functional import Either, Left, Maybe, Right, find_first
from finflow.validation import (
    parse_non_negative,
    validate_budget,
    validate_goal,
    validate_transaction,
)

logger = logging.getLogger(__name__)

R = TypeVar("R", Transaction, Budget, Goal)

# (draft, record_id, previous record or None, current records) -> Either
Builder = Callable[[Mapping[str, Any], str, Optional[R], Sequence[R]], Either]

_ALPHABET = string.digits + string.ascii_lowercase


def _base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits))


def generate_id() -> str:
    """Millisecond timestamp plus a random suffix, both base36."""
    return _base36(int(time.time() * 1000)) + _base36(uuid4().int)[:9]


class RecordCollection(Generic[R]):
    def __init__(
        self,
        kind: str,
        builder: Builder,
        id_factory: Callable[[], str] = generate_id,
    ) -> None:
        self.kind = kind
        self._builder = builder
        self._id_factory = id_factory
        self._records: list[R] = []

    def __len__(self) -> int:
        return len(self._records)

    def _new_id(self) -> str:
        taken = {r.id for r in self._records}
        record_id = self._id_factory()
        while record_id in taken:
            record_id = self._id_factory()
        return record_id

    def _index_of(self, record_id: str) -> int:
        for i, record in enumerate(self._records):
            if record.id == record_id:
                return i
        return -1

    def get(self, record_id: str) -> Maybe[R]:
        return find_first(self._records, lambda r: r.id == record_id)

    def list(self) -> list[R]:
        return list(self._records)

    def create(self, draft: Mapping[str, Any]) -> Either[FinanceError, R]:
        result = self._builder(draft, self._new_id(), None, self._records)
        if result.is_right():
            record = result.get_or_else(None)
            self._records.append(record)
            logger.debug("created %s %s", self.kind, record.id)
        return result

    def update(self, record_id: str, draft: Mapping[str, Any]) -> Either[FinanceError, R]:
        index = self._index_of(record_id)
        if index == -1:
            return Left(NotFoundError(self.kind, record_id))
        result = self._builder(draft, record_id, self._records[index], self._records)
        if result.is_right():
            self._records[index] = result.get_or_else(None)
            logger.debug("updated %s %s", self.kind, record_id)
        return result

    def replace(self, record: R) -> Either[NotFoundError, R]:
        """Swap in an already-validated record with the same id, keeping its position."""
        index = self._index_of(record.id)
        if index == -1:
            return Left(NotFoundError(self.kind, record.id))
        self._records[index] = record
        return Right(record)

    def delete(self, record_id: str) -> bool:
        """Remove a record. Unknown ids are ignored and return False."""
        index = self._index_of(record_id)
        if index == -1:
            return False
        del self._records[index]
        logger.debug("deleted %s %s", self.kind, record_id)
        return True

    def reset(self, records: Iterable[R]) -> None:
        self._records = list(records)


class RecordStore:
    """Owner of the three collections.

    ``clock`` stamps ``created_at`` on new transactions; updates keep the
    original stamp.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = generate_id,
    ) -> None:
        self._clock = clock
        self.transactions: RecordCollection[Transaction] = RecordCollection(
            "Transaction", self._build_transaction, id_factory
        )
        self.budgets: RecordCollection[Budget] = RecordCollection(
            "Budget", self._build_budget, id_factory
        )
        self.goals: RecordCollection[Goal] = RecordCollection(
            "Goal", self._build_goal, id_factory
        )

    def _build_transaction(self, draft, record_id, previous, records):
        created_at = previous.created_at if previous is not None else self._clock()
        return validate_transaction(draft, record_id, created_at)

    def _build_budget(self, draft, record_id, previous, records):
        return validate_budget(draft, record_id, records)

    def _build_goal(self, draft, record_id, previous, records):
        return validate_goal(draft, record_id)

    def update_goal_current(self, goal_id: str, new_amount: Any) -> Either[FinanceError, Goal]:
        """Set a goal's saved amount; the amount must be a number >= 0."""
        found = self.goals.get(goal_id)
        if found.is_none():
            return Left(NotFoundError(self.goals.kind, goal_id))
        errors: dict[str, str] = {}
        amount = parse_non_negative(new_amount, errors, "current")
        if errors:
            return Left(ValidationError(errors))
        goal = found.get_or_else(None)
        updated = Goal(
            id=goal.id,
            name=goal.name,
            target=goal.target,
            current=amount,
            deadline=goal.deadline,
        )
        return self.goals.replace(updated)

    def replace_all(
        self,
        transactions: Iterable[Transaction],
        budgets: Iterable[Budget],
        goals: Iterable[Goal],
    ) -> None:
        staged = (list(transactions), list(budgets), list(goals))
        self.transactions.reset(staged[0])
        self.budgets.reset(staged[1])
        self.goals.reset(staged[2])

    def snapshot(self) -> tuple[list[Transaction], list[Budget], list[Goal]]:
        return self.transactions.list(), self.budgets.list(), self.goals.list()
