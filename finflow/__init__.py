"""FinanceFlow: transactions, monthly budgets and savings goals."""

__version__ = "1.0.0"
