from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

__all__ = [
    'Event', 'EventBus', 'Handler',
    'RECORD_SAVED', 'RECORD_DELETED', 'BUDGET_EXCEEDED', 'GOAL_COMPLETED',
    'PERSISTENCE_FAILED', 'DATA_IMPORTED',
    'notification_for',
]

RECORD_SAVED = "RECORD_SAVED"
RECORD_DELETED = "RECORD_DELETED"
BUDGET_EXCEEDED = "BUDGET_EXCEEDED"
GOAL_COMPLETED = "GOAL_COMPLETED"
PERSISTENCE_FAILED = "PERSISTENCE_FAILED"
DATA_IMPORTED = "DATA_IMPORTED"


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], object]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> List[object]:
        handlers = self._subscribers.get(name)
        if not handlers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in list(handlers)]

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


def notification_for(event: Event) -> tuple[str, str]:
    """Map an event to a (level, message) pair for the view layer."""
    p = event.payload
    if event.name == RECORD_SAVED:
        verb = "updated" if p.get("updated") else "added"
        return "success", f"{p.get('kind', 'Record')} {verb} successfully"
    if event.name == RECORD_DELETED:
        return "success", f"{p.get('kind', 'Record')} deleted successfully"
    if event.name == BUDGET_EXCEEDED:
        return "warning", (
            f"Budget exceeded for {p['category']}: "
            f"{p['spent']:,.2f} of {p['limit']:,.2f} ({p['percentage']:.1f}%)"
        )
    if event.name == GOAL_COMPLETED:
        return "success", f"Goal reached: {p['name']}"
    if event.name == PERSISTENCE_FAILED:
        return "error", "Error saving data"
    if event.name == DATA_IMPORTED:
        return "success", "Data imported successfully"
    return "info", event.name
