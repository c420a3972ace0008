"""
Derived views over the record collections.

Every function here is pure: it reads the sequences it is given and returns
new values. Months are 1-indexed (January is 1), as in ``datetime.date``.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from functools import reduce
from typing import Iterable, Sequence

from finflow.domain import Budget, Goal, Transaction, TransactionType


@dataclass(frozen=True)
class MonthlyTotals:
    income: float
    expense: float

    @property
    def net(self) -> float:
        return self.income - self.expense


@dataclass(frozen=True)
class BudgetUsage:
    budget: Budget
    spent: float
    percentage: float
    remaining: float

    @property
    def over_budget(self) -> bool:
        return self.percentage > 100


@dataclass(frozen=True)
class GoalProgress:
    goal: Goal
    percentage: float
    remaining: float
    is_complete: bool


@dataclass(frozen=True)
class CategoryTotal:
    category: str
    amount: float


@dataclass(frozen=True)
class MonthPoint:
    year: int
    month: int
    income: float
    expense: float

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class DashboardSummary:
    balance: float
    month: MonthlyTotals
    savings: float


def in_month(t: Transaction, year: int, month: int) -> bool:
    return t.date.year == year and t.date.month == month


def net_balance(transactions: Iterable[Transaction]) -> float:
    return reduce(
        lambda acc, t: acc + t.amount if t.is_income else acc - t.amount,
        transactions,
        0.0,
    )


def monthly_totals(transactions: Iterable[Transaction], year: int, month: int) -> MonthlyTotals:
    income = 0.0
    expense = 0.0
    for t in transactions:
        if not in_month(t, year, month):
            continue
        if t.is_income:
            income += t.amount
        else:
            expense += t.amount
    return MonthlyTotals(income=income, expense=expense)


def category_spent(
    transactions: Iterable[Transaction], category: str, year: int, month: int
) -> float:
    return sum(
        t.amount
        for t in transactions
        if t.type is TransactionType.EXPENSE
        and t.category == category
        and in_month(t, year, month)
    )


def budget_usage(budget: Budget, transactions: Iterable[Transaction], year: int, month: int) -> BudgetUsage:
    spent = category_spent(transactions, budget.category, year, month)
    return BudgetUsage(
        budget=budget,
        spent=spent,
        percentage=spent * 100 / budget.amount,
        remaining=max(0.0, budget.amount - spent),
    )


def budget_utilization(
    budgets: Iterable[Budget],
    transactions: Sequence[Transaction],
    year: int,
    month: int,
) -> list[BudgetUsage]:
    """Spending against each budget for one calendar month, in budget order.

    Over 100% is a valid result; ``BudgetUsage.over_budget`` flags it.
    """
    return [budget_usage(b, transactions, year, month) for b in budgets]


def dashboard_budgets(usages: Sequence[BudgetUsage], top_n: int) -> list[BudgetUsage]:
    return list(usages[: max(0, top_n)])


def goal_progress(goal: Goal) -> GoalProgress:
    percentage = goal.current * 100 / goal.target
    return GoalProgress(
        goal=goal,
        percentage=percentage,
        remaining=max(0.0, goal.target - goal.current),
        is_complete=percentage >= 100,
    )


def total_savings(goals: Iterable[Goal]) -> float:
    return sum(g.current for g in goals)


def category_ranking(transactions: Iterable[Transaction], top_n: int) -> list[CategoryTotal]:
    """Expense totals per category, largest first.

    Equal totals keep the order in which their categories first appeared.
    """
    totals: dict[str, float] = defaultdict(float)
    for t in transactions:
        if t.type is TransactionType.EXPENSE:
            totals[t.category] += t.amount

    ordered = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [CategoryTotal(category, amount) for category, amount in ordered[: max(0, top_n)]]


def monthly_series(transactions: Iterable[Transaction], last_n_months: int) -> list[MonthPoint]:
    # months without transactions are left out, not zero-filled
    income: dict[tuple[int, int], float] = defaultdict(float)
    expense: dict[tuple[int, int], float] = defaultdict(float)
    keys: set[tuple[int, int]] = set()
    for t in transactions:
        key = (t.date.year, t.date.month)
        keys.add(key)
        if t.is_income:
            income[key] += t.amount
        else:
            expense[key] += t.amount

    if last_n_months <= 0:
        return []
    selected = sorted(keys)[-last_n_months:]
    return [
        MonthPoint(year=y, month=m, income=income[(y, m)], expense=expense[(y, m)])
        for y, m in selected
    ]


def dashboard_summary(
    transactions: Sequence[Transaction],
    goals: Iterable[Goal],
    today: date,
) -> DashboardSummary:
    return DashboardSummary(
        balance=net_balance(transactions),
        month=monthly_totals(transactions, today.year, today.month),
        savings=total_savings(goals),
    )
