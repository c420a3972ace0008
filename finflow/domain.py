from dataclasses import dataclass, asdict, field
from datetime import date, datetime
from enum import Enum
from typing import Final, Optional


INCOME_CATEGORIES: Final[tuple[str, ...]] = (
    "Part-time Job",
    "Family Support",
    "Student Loan",
    "Freelance",
    "Scholarship",
    "Other Income",
)

EXPENSE_CATEGORIES: Final[tuple[str, ...]] = (
    "Accommodation",
    "Food & Groceries",
    "Textbooks",
    "Transportation",
    "Entertainment",
    "Utilities",
    "Clothing",
    "Health",
    "Other Expenses",
)


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


def categories_for(tx_type: TransactionType | str) -> tuple[str, ...]:
    """Category choices offered for a transaction type."""
    if TransactionType(tx_type) is TransactionType.INCOME:
        return INCOME_CATEGORIES
    return EXPENSE_CATEGORIES


@dataclass(frozen=True)
class Transaction:
    id: str
    amount: float
    description: str
    category: str
    type: TransactionType
    date: date          # calendar day, no time
    created_at: datetime

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.INCOME

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "amount": self.amount,
            "description": self.description,
            "category": self.category,
            "type": self.type.value,
            "date": self.date.isoformat(),
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        # older backups store the creation time under "timestamp"
        created = data.get("createdAt") or data.get("timestamp")
        return cls(
            id=str(data["id"]),
            amount=float(data["amount"]),
            description=str(data["description"]),
            category=str(data["category"]),
            type=TransactionType(data["type"]),
            date=date.fromisoformat(str(data["date"])[:10]),
            created_at=_parse_timestamp(created),
        )


# A monthly spending cap for one expense category
@dataclass(frozen=True)
class Budget:
    id: str
    category: str
    amount: float

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Budget":
        return cls(
            id=str(data["id"]),
            category=str(data["category"]),
            amount=float(data["amount"]),
        )


@dataclass(frozen=True)
class Goal:
    id: str
    name: str
    target: float
    current: float = 0.0
    deadline: Optional[date] = field(default=None)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "target": self.target,
            "current": self.current,
            "deadline": self.deadline.isoformat() if self.deadline else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Goal":
        deadline = data.get("deadline")
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            target=float(data["target"]),
            current=float(data.get("current") or 0),
            deadline=date.fromisoformat(str(deadline)[:10]) if deadline else None,
        )


def _parse_timestamp(value) -> datetime:
    if not value:
        return datetime.now()
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)
