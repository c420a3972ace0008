"""
Draft validation for transactions, budgets and goals.

A draft is a mapping of raw field values as a form would submit them
(numbers may arrive as strings, dates as ``YYYY-MM-DD``). Each validator
returns ``Right(record)`` or ``Left(error)`` and never touches the store.
"""

import math
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional

from finflow.domain import (
    EXPENSE_CATEGORIES,
    Budget,
    Goal,
    Transaction,
    TransactionType,
    categories_for,
)
from finflow.errors import DuplicateError, ValidationError
from finflow.functional import Either, Left, Right, find_first

_MISSING = "is required"


def _number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_positive(value: Any, errors: dict[str, str], name: str) -> Optional[float]:
    if _blank(value):
        errors[name] = _MISSING
        return None
    number = _number(value)
    if number is None or number <= 0:
        errors[name] = "must be a positive number"
        return None
    return number


def parse_non_negative(value: Any, errors: dict[str, str], name: str) -> Optional[float]:
    number = _number(value)
    if number is None or number < 0:
        errors[name] = "must be a non-negative number"
        return None
    return number


def parse_text(value: Any, errors: dict[str, str], name: str) -> Optional[str]:
    if _blank(value) or not isinstance(value, str):
        errors[name] = _MISSING
        return None
    return value.strip()


def parse_date(value: Any, errors: dict[str, str], name: str) -> Optional[date]:
    if _blank(value):
        errors[name] = _MISSING
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        errors[name] = "must be a date in YYYY-MM-DD format"
        return None


def validate_transaction(
    draft: Mapping[str, Any],
    record_id: str,
    created_at: datetime,
) -> Either[ValidationError, Transaction]:
    errors: dict[str, str] = {}

    amount = parse_positive(draft.get("amount"), errors, "amount")
    description = parse_text(draft.get("description"), errors, "description")
    tx_date = parse_date(draft.get("date"), errors, "date")

    tx_type = None
    raw_type = draft.get("type")
    if _blank(raw_type):
        errors["type"] = _MISSING
    else:
        try:
            tx_type = TransactionType(raw_type)
        except ValueError:
            errors["type"] = "must be 'income' or 'expense'"

    category = draft.get("category")
    if _blank(category):
        errors["category"] = _MISSING
    elif tx_type is not None and category not in categories_for(tx_type):
        errors["category"] = f"is not a valid {tx_type.value} category"

    if errors:
        return Left(ValidationError(errors))

    return Right(Transaction(
        id=record_id,
        amount=amount,
        description=description,
        category=category,
        type=tx_type,
        date=tx_date,
        created_at=created_at,
    ))


def validate_budget(
    draft: Mapping[str, Any],
    record_id: str,
    existing: Iterable[Budget],
) -> Either[ValidationError | DuplicateError, Budget]:
    """Validate a budget draft; ``existing`` is checked for a category clash,
    ignoring the budget whose id is ``record_id``."""
    errors: dict[str, str] = {}

    amount = parse_positive(draft.get("amount"), errors, "amount")
    category = draft.get("category")
    if _blank(category):
        errors["category"] = _MISSING
    elif category not in EXPENSE_CATEGORIES:
        errors["category"] = "is not a valid expense category"

    if errors:
        return Left(ValidationError(errors))

    clash = find_first(existing, lambda b: b.category == category and b.id != record_id)
    if clash.is_some():
        return Left(DuplicateError(category))

    return Right(Budget(id=record_id, category=category, amount=amount))


def validate_goal(draft: Mapping[str, Any], record_id: str) -> Either[ValidationError, Goal]:
    errors: dict[str, str] = {}

    name = parse_text(draft.get("name"), errors, "name")
    target = parse_positive(draft.get("target"), errors, "target")

    current = 0.0
    if not _blank(draft.get("current")):
        current = parse_non_negative(draft.get("current"), errors, "current")

    deadline = None
    if not _blank(draft.get("deadline")):
        deadline = parse_date(draft.get("deadline"), errors, "deadline")

    if errors:
        return Left(ValidationError(errors))

    return Right(Goal(id=record_id, name=name, target=target, current=current, deadline=deadline))


def _recheck(name: str, record, accepted: list) -> Either:
    if name == "transactions":
        return validate_transaction(record.to_dict(), record.id, record.created_at)
    if name == "budgets":
        return validate_budget(record.to_dict(), record.id, accepted)
    return validate_goal(record.to_dict(), record.id)


def verify_records(name: str, records: Iterable) -> None:
    """Apply the draft rules to already-decoded records.

    Used for data that bypassed the store (saved blobs, backup files).
    Raises ValueError naming the first offending record.
    """
    seen: set[str] = set()
    accepted: list = []
    for record in records:
        if not record.id or record.id in seen:
            raise ValueError(f"duplicate or empty id {record.id!r} in {name}")
        seen.add(record.id)
        checked = _recheck(name, record, accepted)
        if checked.is_left():
            raise ValueError(f"{name} record {record.id}: {checked.get_error().message}")
        accepted.append(record)
