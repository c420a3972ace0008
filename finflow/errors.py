"""
Error taxonomy for the tracker.

The store, the codec and the persistence gateway hand these back inside
``Left`` instead of raising, so the view layer decides how to show them.
They are still exceptions, so a caller that prefers to raise can do so.
"""

from typing import Sequence


class FinanceError(Exception):
    code = "finance_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class ValidationError(FinanceError):
    code = "validation_error"

    def __init__(self, fields: dict[str, str]) -> None:
        self.fields = dict(fields)
        details = ", ".join(f"{name}: {reason}" for name, reason in self.fields.items())
        super().__init__(f"Invalid fields: {details}")

    def to_dict(self) -> dict:
        return {**super().to_dict(), "fields": self.fields}


class NotFoundError(FinanceError):
    code = "not_found"

    def __init__(self, kind: str, record_id: str) -> None:
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} with ID {record_id} does not exist")


class DuplicateError(FinanceError):
    code = "duplicate_budget"

    def __init__(self, category: str) -> None:
        self.category = category
        super().__init__(f"Budget for category {category} already exists")


class LoadError(FinanceError):
    code = "load_error"

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Could not load {key}: {reason}")


class PersistenceError(FinanceError):
    code = "persistence_error"

    def __init__(self, reason: str, keys: Sequence[str] = (), written: Sequence[str] = ()) -> None:
        self.reason = reason
        self.keys = tuple(keys)
        # blobs saved before the failure; stored data may be partly updated
        self.written = tuple(written)
        message = f"Could not save data: {reason}"
        if self.written:
            message += f" (already saved: {', '.join(self.written)})"
        super().__init__(message)


class FormatError(FinanceError):
    code = "format_error"

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid file format: {reason}")
