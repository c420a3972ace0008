from datetime import date, datetime
from itertools import count

from finflow.domain import Transaction, TransactionType
from finflow.errors import DuplicateError, NotFoundError, ValidationError
from finflow.store import RecordStore, generate_id


def make_store():
    ids = count(1)
    return RecordStore(
        clock=lambda: datetime(2025, 3, 1, 9, 30),
        id_factory=lambda: f"id{next(ids)}",
    )


def tx_draft(**overrides):
    draft = {
        "amount": "42.50",
        "description": "  Weekly shop ",
        "category": "Food & Groceries",
        "type": "expense",
        "date": "2025-03-02",
    }
    draft.update(overrides)
    return draft


def test_create_transaction_appends_and_returns_record():
    store = make_store()
    result = store.transactions.create(tx_draft())

    assert result.is_right()
    tx = result.get_or_else(None)
    assert tx == Transaction(
        id="id1",
        amount=42.5,
        description="Weekly shop",
        category="Food & Groceries",
        type=TransactionType.EXPENSE,
        date=date(2025, 3, 2),
        created_at=datetime(2025, 3, 1, 9, 30),
    )
    assert store.transactions.list() == [tx]


def test_create_rejects_invalid_fields_without_mutation():
    store = make_store()
    result = store.transactions.create(tx_draft(amount="-5", description="   ", category="Scholarship"))

    assert result.is_left()
    error = result.get_error()
    assert isinstance(error, ValidationError)
    assert set(error.fields) == {"amount", "description", "category"}
    assert store.transactions.list() == []


def test_create_rejects_missing_fields():
    store = make_store()
    result = store.goals.create({})

    assert isinstance(result.get_error(), ValidationError)
    assert set(result.get_error().fields) == {"name", "target"}


def test_update_replaces_in_place_and_keeps_id():
    store = make_store()
    first = store.transactions.create(tx_draft(description="first")).unwrap()
    store.transactions.create(tx_draft(description="second"))
    store.transactions.create(tx_draft(description="third"))

    result = store.transactions.update(first.id, tx_draft(description="renamed", amount=10))

    assert result.is_right()
    descriptions = [t.description for t in store.transactions.list()]
    assert descriptions == ["renamed", "second", "third"]
    updated = store.transactions.list()[0]
    assert updated.id == first.id
    assert updated.amount == 10
    assert updated.created_at == first.created_at


def test_update_unknown_id_is_not_found():
    store = make_store()
    store.transactions.create(tx_draft())

    result = store.transactions.update("missing", tx_draft())

    assert isinstance(result.get_error(), NotFoundError)
    assert len(store.transactions) == 1


def test_update_with_invalid_draft_leaves_record():
    store = make_store()
    tx = store.transactions.create(tx_draft()).unwrap()

    result = store.transactions.update(tx.id, tx_draft(type="refund"))

    assert isinstance(result.get_error(), ValidationError)
    assert store.transactions.list() == [tx]


def test_delete_missing_id_is_a_no_op():
    store = make_store()
    store.transactions.create(tx_draft())
    store.budgets.create({"category": "Health", "amount": 50})
    store.goals.create({"name": "Laptop", "target": 900})
    before = store.snapshot()

    assert store.transactions.delete("nope") is False
    assert store.budgets.delete("nope") is False
    assert store.goals.delete("nope") is False
    assert store.snapshot() == before


def test_delete_removes_only_that_record():
    store = make_store()
    budget = store.budgets.create({"category": "Food & Groceries", "amount": 200}).unwrap()
    tx = store.transactions.create(tx_draft()).unwrap()

    assert store.budgets.delete(budget.id) is True
    assert store.budgets.list() == []
    assert store.transactions.list() == [tx]


def test_budget_duplicate_category_rejected_on_create():
    store = make_store()
    existing = store.budgets.create({"category": "Food & Groceries", "amount": 200}).unwrap()

    result = store.budgets.create({"category": "Food & Groceries", "amount": 100})

    assert isinstance(result.get_error(), DuplicateError)
    assert store.budgets.list() == [existing]


def test_budget_update_same_category_allowed():
    store = make_store()
    existing = store.budgets.create({"category": "Food & Groceries", "amount": 200}).unwrap()

    result = store.budgets.update(existing.id, {"category": "Food & Groceries", "amount": 250})

    assert result.is_right()
    assert store.budgets.list()[0].amount == 250


def test_budget_update_cannot_move_onto_taken_category():
    store = make_store()
    store.budgets.create({"category": "Food & Groceries", "amount": 200})
    health = store.budgets.create({"category": "Health", "amount": 40}).unwrap()

    result = store.budgets.update(health.id, {"category": "Food & Groceries", "amount": 40})

    assert isinstance(result.get_error(), DuplicateError)
    assert store.budgets.list()[1] == health


def test_budget_requires_expense_category():
    store = make_store()
    result = store.budgets.create({"category": "Freelance", "amount": 10})

    assert "category" in result.get_error().fields


def test_goal_defaults_and_overfunding():
    store = make_store()
    goal = store.goals.create({"name": " Trip ", "target": "500", "current": "", "deadline": ""}).unwrap()

    assert goal.name == "Trip"
    assert goal.current == 0
    assert goal.deadline is None

    rich = store.goals.create({"name": "Bike", "target": 100, "current": 150}).unwrap()
    assert rich.current == 150


def test_update_goal_current():
    store = make_store()
    goal = store.goals.create({"name": "Laptop", "target": 900, "deadline": "2025-12-01"}).unwrap()

    result = store.update_goal_current(goal.id, "300")

    assert result.is_right()
    updated = store.goals.list()[0]
    assert updated.current == 300
    assert updated.deadline == date(2025, 12, 1)
    assert updated.id == goal.id


def test_update_goal_current_rejects_negative_and_unknown():
    store = make_store()
    goal = store.goals.create({"name": "Laptop", "target": 900}).unwrap()

    assert isinstance(store.update_goal_current(goal.id, -1).get_error(), ValidationError)
    assert isinstance(store.update_goal_current(goal.id, "abc").get_error(), ValidationError)
    assert isinstance(store.update_goal_current("missing", 5).get_error(), NotFoundError)
    assert store.goals.list() == [goal]


def test_list_returns_a_copy():
    store = make_store()
    store.transactions.create(tx_draft())

    listed = store.transactions.list()
    listed.clear()

    assert len(store.transactions) == 1


def test_replace_all_substitutes_every_collection():
    store = make_store()
    store.transactions.create(tx_draft())
    other = make_store()
    budget = other.budgets.create({"category": "Health", "amount": 30}).unwrap()

    store.replace_all([], [budget], [])

    assert store.snapshot() == ([], [budget], [])


def test_generated_ids_are_unique():
    ids = {generate_id() for _ in range(500)}
    assert len(ids) == 500


def test_id_factory_collision_is_retried():
    values = iter(["a", "a", "b"])
    store = RecordStore(id_factory=lambda: next(values))
    store.goals.create({"name": "One", "target": 1})
    second = store.goals.create({"name": "Two", "target": 1}).unwrap()

    assert second.id == "b"
