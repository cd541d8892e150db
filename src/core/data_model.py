from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

import pyarrow as pa


@dataclass
class EventRow:
    """A device event as stored in the warehouse events table"""
    event_id: str
    device_id: str
    timestamp: datetime
    temperature: Optional[float] = None

    def to_json(self) -> Dict[str, Any]:
        """JSON-compatible row for the streaming insert API"""
        return {
            'event_id': self.event_id,
            'device_id': self.device_id,
            'timestamp': self.timestamp.isoformat(),
            'temperature': self.temperature,
        }

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "EventRow":
        temperature = row.get('temperature')
        return cls(
            event_id=row['event_id'],
            device_id=row['device_id'],
            timestamp=row['timestamp'],
            temperature=None if temperature is None else float(temperature),
        )

    def format_temperature(self) -> str:
        if self.temperature is None:
            return "NULL"
        return f"{self.temperature:.2f}°C"

    def describe(self) -> str:
        ts = self.timestamp
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        # RFC 3339 with second precision
        ts_str = ts.replace(microsecond=0).isoformat().replace('+00:00', 'Z')
        return (f"Event: {self.event_id}, Device: {self.device_id}, "
                f"Time: {ts_str}, Temp: {self.format_temperature()}")


def events_from_arrow(table: pa.Table) -> List[EventRow]:
    """Convert a query result table into EventRows"""
    return [EventRow.from_mapping(row) for row in table.to_pylist()]


@dataclass
class StoredCell:
    """One cell version read back from the wide-column store"""
    family: str
    column: str
    timestamp: datetime
    value: bytes


@dataclass
class StoredRow:
    """A row read back from the wide-column store"""
    key: str
    cells: List[StoredCell] = field(default_factory=list)

    def families(self) -> Dict[str, List[StoredCell]]:
        """Cells grouped by column family, in the order families were first seen"""
        grouped: Dict[str, List[StoredCell]] = {}
        for cell in self.cells:
            grouped.setdefault(cell.family, []).append(cell)
        return grouped
