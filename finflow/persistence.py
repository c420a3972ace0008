"""
Persistence gateway between the record store and a key-value blob store.

Each collection is kept as its own blob (a JSON array of record dicts) under
``<prefix>_transactions``, ``<prefix>_budgets`` and ``<prefix>_goals``, the
way the browser build kept them in localStorage. Loading is per collection:
one corrupt blob empties only that collection. Saving never touches the
in-memory store; a failed write is reported back to the caller.

The three blobs are written one after another, not as a transaction. When
a later write fails the earlier ones stay written, so the stored data can
mix the new state of some collections with the old state of others until
the next successful save. ``PersistenceError.written`` lists the keys that
did go through.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Protocol, Sequence

from finflow.domain import Budget, Goal, Transaction
from finflow.errors import LoadError, PersistenceError
from finflow.functional import Either, Left, Right
from finflow.validation import verify_records

logger = logging.getLogger(__name__)

COLLECTIONS: tuple[str, ...] = ("transactions", "budgets", "goals")


class BlobStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryBlobStore:
    """Dict-backed blob store. ``quota`` (total characters) simulates a full store."""

    def __init__(self, quota: Optional[int] = None) -> None:
        self.blobs: dict[str, str] = {}
        self.quota = quota

    def get(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def set(self, key: str, value: str) -> None:
        if self.quota is not None:
            used = sum(len(v) for k, v in self.blobs.items() if k != key)
            if used + len(value) > self.quota:
                raise OSError(f"quota of {self.quota} exceeded writing {key}")
        self.blobs[key] = value


class FileBlobStore:
    """One ``<key>.json`` file per blob inside ``directory``."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)


@dataclass
class LoadResult:
    transactions: list[Transaction] = field(default_factory=list)
    budgets: list[Budget] = field(default_factory=list)
    goals: list[Goal] = field(default_factory=list)
    errors: list[LoadError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


_DECODERS: dict[str, Callable[[dict], object]] = {
    "transactions": Transaction.from_dict,
    "budgets": Budget.from_dict,
    "goals": Goal.from_dict,
}


def decode_records(name: str, items) -> list:
    """Decode a JSON array of ``name`` records.

    Raises on a malformed entry or on one that breaks the record rules
    (non-positive amounts, blank text, wrong category, duplicate id or
    budget category).
    """
    if not isinstance(items, list):
        raise TypeError(f"expected a list, got {type(items).__name__}")
    decode = _DECODERS[name]
    records = [decode(item) for item in items]
    verify_records(name, records)
    return records


def encode_records(records: Sequence) -> list[dict]:
    return [r.to_dict() for r in records]


class PersistenceGateway:
    def __init__(self, blobs: BlobStore, prefix: str = "financeflow") -> None:
        self.blobs = blobs
        self.prefix = prefix

    def key(self, name: str) -> str:
        return f"{self.prefix}_{name}"

    def load(self) -> LoadResult:
        result = LoadResult()
        for name in COLLECTIONS:
            key = self.key(name)
            try:
                raw = self.blobs.get(key)
                records = [] if raw is None else decode_records(name, json.loads(raw))
            except (OSError, ValueError, TypeError, KeyError, AttributeError) as e:
                error = LoadError(key, str(e))
                logger.warning("%s; starting with no %s", error.message, name)
                result.errors.append(error)
                records = []
            setattr(result, name, records)
        logger.debug(
            "loaded %d transactions, %d budgets, %d goals",
            len(result.transactions), len(result.budgets), len(result.goals),
        )
        return result

    def save(
        self,
        transactions: Sequence[Transaction],
        budgets: Sequence[Budget],
        goals: Sequence[Goal],
    ) -> Either[PersistenceError, None]:
        payloads = {
            "transactions": json.dumps(encode_records(transactions)),
            "budgets": json.dumps(encode_records(budgets)),
            "goals": json.dumps(encode_records(goals)),
        }
        failed: list[str] = []
        written: list[str] = []
        reasons: list[str] = []
        for name, payload in payloads.items():
            key = self.key(name)
            try:
                self.blobs.set(key, payload)
                written.append(key)
            except OSError as e:
                failed.append(key)
                reasons.append(str(e))

        if failed:
            error = PersistenceError("; ".join(reasons), failed, written)
            logger.error(
                "%s (failed: %s; already written: %s)",
                error.message, ", ".join(failed), ", ".join(written) or "none",
            )
            return Left(error)
        return Right(None)
