from datetime import date, datetime

from finflow.domain import Transaction, TransactionType
from finflow.filters import (
    by_category,
    by_month,
    by_search,
    by_type,
    filter_transactions,
    iter_transactions,
    recent_transactions,
)


def make_sample():
    def tx(id, desc, category, tx_type, day):
        return Transaction(id, 10, desc, category, TransactionType(tx_type), day, datetime(2025, 1, 1))

    return [
        tx("t1", "Rent March", "Accommodation", "expense", date(2025, 3, 1)),
        tx("t2", "Pizza night", "Entertainment", "expense", date(2025, 3, 14)),
        tx("t3", "Cafe shift", "Part-time Job", "income", date(2025, 2, 28)),
        tx("t4", "Groceries", "Food & Groceries", "expense", date(2025, 3, 7)),
    ]


def test_predicates():
    trans = make_sample()

    assert [t.id for t in filter(by_type("income"), trans)] == ["t3"]
    assert [t.id for t in filter(by_category("Accommodation"), trans)] == ["t1"]
    assert [t.id for t in filter(by_month(2025, 2), trans)] == ["t3"]


def test_search_matches_description_or_category():
    trans = make_sample()

    assert [t.id for t in filter(by_search("PIZZA"), trans)] == ["t2"]
    assert [t.id for t in filter(by_search("food"), trans)] == ["t4"]


def test_iter_transactions_is_lazy_and_combines_predicates():
    it = iter_transactions(make_sample(), by_type("expense"), by_month(2025, 3))

    assert next(it).id == "t1"
    assert [t.id for t in it] == ["t2", "t4"]


def test_filter_transactions_sorts_newest_first():
    assert [t.id for t in filter_transactions(make_sample())] == ["t2", "t4", "t1", "t3"]
    assert [t.id for t in filter_transactions(make_sample(), tx_type="expense", search="r")] == ["t2", "t4", "t1"]
    assert filter_transactions(make_sample(), category="Health") == []


def test_recent_transactions_does_not_reorder_source():
    trans = make_sample()

    recent = recent_transactions(trans, 2)

    assert [t.id for t in recent] == ["t2", "t4"]
    assert [t.id for t in trans] == ["t1", "t2", "t3", "t4"]
