from itertools import islice
from typing import Callable, Iterable, Iterator

from finflow.domain import Transaction, TransactionType

Predicate = Callable[[Transaction], bool]


def by_type(tx_type: TransactionType | str) -> Predicate:
    wanted = TransactionType(tx_type)

    def _filter(t: Transaction) -> bool:
        return t.type is wanted

    return _filter


def by_category(category: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.category == category

    return _filter


def by_search(term: str) -> Predicate:
    needle = term.strip().lower()

    def _filter(t: Transaction) -> bool:
        return needle in t.description.lower() or needle in t.category.lower()

    return _filter


def by_month(year: int, month: int) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.date.year == year and t.date.month == month

    return _filter


def iter_transactions(trans: Iterable[Transaction], *preds: Predicate) -> Iterator[Transaction]:
    for t in trans:
        if all(p(t) for p in preds):
            yield t


def newest_first(trans: Iterable[Transaction]) -> list[Transaction]:
    return sorted(trans, key=lambda t: t.date, reverse=True)


def filter_transactions(
    trans: Iterable[Transaction],
    search: str = "",
    category: str = "",
    tx_type: str = "",
) -> list[Transaction]:
    """Transactions matching every non-empty filter, newest date first."""
    preds: list[Predicate] = []
    if search.strip():
        preds.append(by_search(search))
    if category:
        preds.append(by_category(category))
    if tx_type:
        preds.append(by_type(tx_type))
    return newest_first(iter_transactions(trans, *preds))


def recent_transactions(trans: Iterable[Transaction], limit: int) -> list[Transaction]:
    return list(islice(newest_first(trans), max(0, limit)))
