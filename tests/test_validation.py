from datetime import date, datetime

import pytest

from finflow.domain import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    Budget,
    Goal,
    Transaction,
    TransactionType,
    categories_for,
)
from finflow.errors import DuplicateError, ValidationError
from finflow.validation import validate_budget, validate_goal, validate_transaction

NOW = datetime(2025, 5, 1, 12, 0)


def test_category_sets_are_disjoint():
    assert not set(INCOME_CATEGORIES) & set(EXPENSE_CATEGORIES)
    assert categories_for("income") == INCOME_CATEGORIES
    assert categories_for(TransactionType.EXPENSE) == EXPENSE_CATEGORIES


def test_categories_for_unknown_type():
    with pytest.raises(ValueError):
        categories_for("transfer")


@pytest.mark.parametrize("amount", [0, -1, "abc", float("nan"), float("inf"), True, None, ""])
def test_transaction_amount_must_be_positive_finite(amount):
    draft = {"amount": amount, "description": "x", "category": "Health", "type": "expense",
             "date": "2025-05-01"}
    result = validate_transaction(draft, "t1", NOW)

    assert "amount" in result.get_error().fields


def test_transaction_accepts_date_objects():
    draft = {"amount": 3, "description": "Coffee", "category": "Other Expenses", "type": "expense",
             "date": datetime(2025, 5, 2, 8, 15)}
    tx = validate_transaction(draft, "t1", NOW).unwrap()

    assert tx.date == date(2025, 5, 2)
    assert tx.created_at == NOW


def test_transaction_bad_date():
    draft = {"amount": 3, "description": "Coffee", "category": "Other Expenses", "type": "expense",
             "date": "02/05/2025"}
    assert "date" in validate_transaction(draft, "t1", NOW).get_error().fields


def test_transaction_income_category_must_match_type():
    draft = {"amount": 3, "description": "Gift", "category": "Family Support", "type": "expense",
             "date": "2025-05-01"}
    error = validate_transaction(draft, "t1", NOW).get_error()

    assert isinstance(error, ValidationError)
    assert error.fields == {"category": "is not a valid expense category"}
    assert error.to_dict()["error"] == "validation_error"


def test_budget_duplicate_ignores_self():
    existing = [Budget("b1", "Health", 30)]

    assert isinstance(validate_budget({"category": "Health", "amount": 5}, "b2", existing).get_error(),
                      DuplicateError)
    assert validate_budget({"category": "Health", "amount": 5}, "b1", existing).is_right()


def test_budget_invalid_fields_reported_before_duplicate():
    existing = [Budget("b1", "Health", 30)]
    error = validate_budget({"category": "Health", "amount": 0}, "b2", existing).get_error()

    assert isinstance(error, ValidationError)


def test_goal_validation():
    goal = validate_goal({"name": "Fund", "target": "1000.5", "current": "20", "deadline": "2026-01-31"},
                         "g1").unwrap()
    assert goal == Goal("g1", "Fund", 1000.5, 20.0, date(2026, 1, 31))

    error = validate_goal({"name": "Fund", "target": 10, "current": -3}, "g1").get_error()
    assert set(error.fields) == {"current"}


def test_record_dict_round_trip_keeps_wire_keys():
    tx = Transaction("t1", 9.99, "Book", "Textbooks", TransactionType.EXPENSE,
                     date(2025, 5, 3), datetime(2025, 5, 3, 9, 0))
    data = tx.to_dict()

    assert set(data) == {"id", "amount", "description", "category", "type", "date", "createdAt"}
    assert Transaction.from_dict(data) == tx
    assert Goal.from_dict({"id": "g", "name": "n", "target": 5}).current == 0
