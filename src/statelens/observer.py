"""
StateObserver: the single instrumentation point attached to the host graph.

Translates host lifecycle notifications into registry and history updates:

    Added    -> encode value, track new Cell (replacing any same-named entry)
    Updated  -> re-encode, refresh Cell, append one ChangeEvent
    Disposed -> untrack Cell and its handle mapping

Per cell identity the sequence is Added -> Updated* -> Disposed. Disposal is
terminal; a later Added under the same name starts a fresh Cell with no
link to the previous one's history.

The observer never raises back into the host: a failure while handling a
notification is logged and the notification dropped.
"""

import logging
import time
from typing import Any, Callable, Hashable, List, Optional

from statelens.codec import SerializedValue, encode
from statelens.config import DEFAULT_MAX_ENCODE_DEPTH
from statelens.history import HistoryLog
from statelens.host import GraphObserver, HostGraph
from statelens.models import Cell, CellKind, ChangeEvent
from statelens.registry import CellRegistry

logger = logging.getLogger(__name__)


class StateObserver(GraphObserver):
    """Keeps a CellRegistry and HistoryLog in sync with a host graph."""

    def __init__(
        self,
        host: HostGraph,
        registry: CellRegistry,
        history: HistoryLog,
        max_encode_depth: int = DEFAULT_MAX_ENCODE_DEPTH,
    ):
        self._host = host
        self._registry = registry
        self._history = history
        self._max_encode_depth = max_encode_depth

        # Update callbacks - receive (name: str, new_value: SerializedValue)
        self._on_update_callbacks: List[Callable[[str, SerializedValue], None]] = []

    def add_update_callback(self, callback: Callable[[str, SerializedValue], None]) -> None:
        """Subscribe to value updates of tracked cells."""
        if callback not in self._on_update_callbacks:
            self._on_update_callbacks.append(callback)

    def remove_update_callback(self, callback: Callable[[str, SerializedValue], None]) -> None:
        """Unsubscribe from value updates."""
        if callback in self._on_update_callbacks:
            self._on_update_callbacks.remove(callback)

    def _fire_update_callbacks(self, name: str, value: SerializedValue) -> None:
        for callback in self._on_update_callbacks:
            try:
                callback(name, value)
            except Exception as e:
                logger.warning(f"Error in update callback for '{name}': {e}")

    # ========== GraphObserver ==========

    def on_added(self, cell_id: Hashable, label: Optional[str], initial_value: Any) -> None:
        try:
            name = self._resolve_name(cell_id, label)
            cell = Cell(
                name=name,
                kind=self._resolve_kind(cell_id, name),
                handle=cell_id,
                last_serialized_value=self._encode(initial_value),
            )
            self._registry.track(cell)
        except Exception as e:
            logger.error(f"Failed to track added cell {cell_id!r}: {e}")

    def on_updated(self, cell_id: Hashable, previous_value: Any, new_value: Any) -> None:
        try:
            name = self._registry.name_for_handle(cell_id)
            if name is None:
                logger.debug(f"Update ignored for untracked handle {cell_id!r}")
                return

            serialized = self._encode(new_value)
            self._registry.update_value(name, serialized)
            self._history.append(ChangeEvent(
                cell_name=name,
                timestamp=time.time(),
                previous_value=self._encode(previous_value),
                new_value=serialized,
            ))
            logger.debug(f"Updated cell: {name}")
        except Exception as e:
            logger.error(f"Failed to record update for cell {cell_id!r}: {e}")
            return

        self._fire_update_callbacks(name, serialized)

    def on_disposed(self, cell_id: Hashable) -> None:
        try:
            self._registry.untrack_handle(cell_id)
        except Exception as e:
            logger.error(f"Failed to untrack disposed cell {cell_id!r}: {e}")

    # ========== HELPERS ==========

    def _encode(self, value: Any) -> SerializedValue:
        return encode(value, self._max_encode_depth)

    def _resolve_name(self, cell_id: Hashable, label: Optional[str]) -> str:
        """Explicit label if present, else the host's structural type name."""
        if label:
            return label
        try:
            return self._host.type_name(cell_id)
        except Exception as e:
            logger.warning(f"Host could not name cell {cell_id!r}: {e}")
            return f"cell#{cell_id}"

    def _resolve_kind(self, cell_id: Hashable, name: str) -> CellKind:
        # Unknown writability is treated as read-only
        try:
            return self._host.kind_of(cell_id)
        except Exception as e:
            logger.warning(f"Host could not resolve kind of '{name}', treating as derived: {e}")
            return CellKind.DERIVED
