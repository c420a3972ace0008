"""
Backup snapshot export and import.

A snapshot is ``{transactions, budgets, goals, exportDate, version}``.
Import is all-or-nothing: a snapshot missing a collection key, or holding a
record that cannot be decoded, is rejected as a whole.
"""

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional, Sequence, Union

from finflow.domain import Budget, Goal, Transaction
from finflow.errors import FormatError
from finflow.functional import Either, Left, Right
from finflow.persistence import COLLECTIONS, decode_records, encode_records

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = "1.0"


@dataclass(frozen=True)
class Snapshot:
    transactions: list[Transaction]
    budgets: list[Budget]
    goals: list[Goal]
    version: Optional[str] = None
    export_date: Optional[str] = None


def export_snapshot(
    transactions: Sequence[Transaction],
    budgets: Sequence[Budget],
    goals: Sequence[Goal],
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    now = now or datetime.now()
    return {
        "transactions": encode_records(transactions),
        "budgets": encode_records(budgets),
        "goals": encode_records(goals),
        "exportDate": now.isoformat(),
        "version": SNAPSHOT_VERSION,
    }


def dumps_snapshot(snapshot: Mapping[str, Any]) -> str:
    return json.dumps(snapshot, indent=2)


def backup_filename(today: date) -> str:
    return f"financeflow-backup-{today.isoformat()}.json"


def import_snapshot(raw: Union[str, bytes, Mapping[str, Any]]) -> Either[FormatError, Snapshot]:
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            data = json.loads(raw)
        except (ValueError, UnicodeDecodeError) as e:
            return Left(FormatError(f"not valid JSON ({e})"))
    else:
        data = raw

    if not isinstance(data, Mapping):
        return Left(FormatError("snapshot must be a JSON object"))

    missing = [name for name in COLLECTIONS if name not in data]
    if missing:
        return Left(FormatError(f"missing {', '.join(missing)}"))

    decoded: dict[str, list] = {}
    for name in COLLECTIONS:
        try:
            decoded[name] = decode_records(name, data[name])
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            return Left(FormatError(f"bad {name} entry ({e})"))

    version = data.get("version")
    logger.info(
        "decoded snapshot version %s: %d transactions, %d budgets, %d goals",
        version, len(decoded["transactions"]), len(decoded["budgets"]), len(decoded["goals"]),
    )
    return Right(Snapshot(
        transactions=decoded["transactions"],
        budgets=decoded["budgets"],
        goals=decoded["goals"],
        version=version,
        export_date=data.get("exportDate"),
    ))
