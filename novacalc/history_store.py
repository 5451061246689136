# history_store.py
"""""
Bounded calculation history.

The engine only produces (expression, result) pairs; the store wraps them in
CalculationRecord objects and keeps the newest HISTORY_LIMIT of them,
newest first. Older entries are dropped silently.
"""""
import uuid
import logging
from dataclasses import dataclass, field
from datetime import datetime

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50


def new_record_id():
    return uuid.uuid4().hex[:9]


@dataclass(frozen=True)
class CalculationRecord:
    expression: str
    result: str
    id: str = field(default_factory=new_record_id)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self):
        return {
            "id": self.id,
            "expression": self.expression,
            "result": self.result,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, entry):
        return cls(
            expression=str(entry["expression"]),
            result=str(entry["result"]),
            id=str(entry.get("id") or new_record_id()),
            timestamp=datetime.fromisoformat(entry["timestamp"]) if entry.get("timestamp") else datetime.now(),
        )


class HistoryStore:
    def __init__(self, limit=HISTORY_LIMIT):
        if limit < 1:
            raise ValueError(f"History limit must be positive, got {limit}")
        self.limit = limit
        self._records = []

    def add(self, expression, result):
        """Insert a new record in front and evict beyond the limit."""
        record = CalculationRecord(expression, result)
        self._records.insert(0, record)
        del self._records[self.limit:]
        return record

    def records(self):
        return list(self._records)

    def latest(self):
        return self._records[0] if self._records else None

    def clear(self):
        self._records.clear()

    def export(self):
        """Plain list of dicts, newest first, for the host to persist."""
        return [record.to_dict() for record in self._records]

    def restore(self, entries):
        """Replace the history with previously exported entries.

        Malformed entries are skipped with a warning.
        """
        restored = []
        for entry in entries:
            try:
                restored.append(CalculationRecord.from_dict(entry))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning("Skipping malformed history entry %r: %s", entry, e)
        self._records = restored[:self.limit]

    def __len__(self):
        return len(self._records)

    def __iter__(self):
        return iter(self.records())
