"""
Read model: aggregate counts over the registry and history.

Computed on every call, never cached, so a summary always reflects the
state at the moment it was asked for.
"""

from typing import Dict

from statelens.codec import value_kind
from statelens.history import HistoryLog
from statelens.models import Summary
from statelens.registry import CellRegistry


def build_summary(registry: CellRegistry, history: HistoryLog) -> Summary:
    """Summarize tracked cells by value kind plus history size and recency."""
    distribution: Dict[str, int] = {}
    for cell in registry.cells():
        kind = value_kind(cell.last_serialized_value)
        distribution[kind] = distribution.get(kind, 0) + 1

    last = history.last()
    return Summary(
        cell_count=len(registry),
        kind_distribution=distribution,
        history_entry_count=len(history),
        last_history_timestamp=last.timestamp if last is not None else None,
    )