"""
Data model for tracked cells, change history, snapshots and scenarios.

Design Philosophy: Correct by Construction
- Immutable records (frozen dataclass) for anything captured at a point in time
- Values stored in encoded form only - no references into the host graph
- Dict round-trip (to_dict / from_dict) for everything that gets exported
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import time
from typing import Any, Dict, Hashable, Optional

from statelens.codec import SerializedValue, decode, from_jsonable


class CellKind(Enum):
    """Writability of a cell in the host graph."""
    SETTABLE = "settable"  # leaf state, can be overwritten from outside
    DERIVED = "derived"    # computed from other cells, read-only


@dataclass
class Cell:
    """One tracked reactive unit, as mirrored in the registry.

    The handle is the host graph's own lookup key for the cell. The registry
    never holds the host's cell object itself.
    """
    name: str
    kind: CellKind
    handle: Hashable
    last_serialized_value: SerializedValue = None

    @property
    def is_writable(self) -> bool:
        return self.kind is CellKind.SETTABLE


@dataclass(frozen=True)
class ChangeEvent:
    """Immutable record of one observed value change."""
    cell_name: str
    timestamp: float
    previous_value: SerializedValue
    new_value: SerializedValue

    def to_dict(self) -> Dict[str, Any]:
        """Export to JSON-serializable dict."""
        return {
            'cell_name': self.cell_name,
            'timestamp': self.timestamp,
            'previous_value': decode(self.previous_value),
            'new_value': decode(self.new_value),
        }

    def __str__(self) -> str:
        return f"ChangeEvent({self.cell_name} @ {_iso(self.timestamp)}: {self.previous_value!r} -> {self.new_value!r})"


@dataclass(frozen=True)
class Snapshot:
    """Immutable copy of every tracked cell's encoded value at a point in time.

    Independent of the registry once created: values are deep-copied in.
    """
    created_at: float
    values: Dict[str, SerializedValue]

    @classmethod
    def create(cls, values: Dict[str, SerializedValue]) -> 'Snapshot':
        """Create a new snapshot stamped with the current time."""
        return cls(created_at=time.time(), values=copy.deepcopy(values))

    def to_dict(self) -> Dict[str, Any]:
        """Export to the snapshot document layout: timestamp + flat state map."""
        return {
            'timestamp': _iso(self.created_at),
            'state': {name: decode(value) for name, value in self.values.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Snapshot':
        """Import from dict (e.g., loaded from JSON)."""
        return cls(
            created_at=datetime.fromisoformat(data['timestamp']).timestamp(),
            values={str(name): from_jsonable(value) for name, value in data['state'].items()},
        )


@dataclass
class Scenario:
    """Named snapshot kept around for repeatable test setup."""
    name: str
    snapshot_text: str
    created_at: float = field(default_factory=time.time)
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Export to JSON-serializable dict."""
        return {
            'name': self.name,
            'description': self.description,
            'created_at': self.created_at,
            'snapshot_text': self.snapshot_text,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Scenario':
        """Import from dict."""
        return cls(
            name=data['name'],
            description=data.get('description'),
            created_at=data['created_at'],
            snapshot_text=data['snapshot_text'],
        )

    def __str__(self) -> str:
        return f"Scenario({self.name}, {_iso(self.created_at)})"


@dataclass(frozen=True)
class Summary:
    """Aggregate view over the registry and history. Computed, never stored."""
    cell_count: int
    kind_distribution: Dict[str, int]
    history_entry_count: int
    last_history_timestamp: Optional[float] = None

    def __str__(self) -> str:
        last = _iso(self.last_history_timestamp) if self.last_history_timestamp is not None else None
        return (
            f"Summary(cells: {self.cell_count}, "
            f"kinds: {len(self.kind_distribution)}, "
            f"history: {self.history_entry_count}, "
            f"lastUpdate: {last})"
        )


def _iso(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).isoformat()
