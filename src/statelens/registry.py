"""
Cell registry: live mirror of every cell the host graph currently holds.

Keyed by cell name. A second map from host handle to name lets dispose
notifications (which only carry the handle) find their entry.

Lifecycle ownership:
- StateObserver: tracks on add, refreshes on update, untracks on dispose
- Everyone else: read-only

Thread safety: Not thread-safe (all operations expected on the host
graph's notification thread).
"""

import logging
from typing import Any, Callable, Dict, Hashable, List, Optional

from statelens.codec import AsyncResult, Opaque, SerializedValue, value_kind
from statelens.models import Cell

logger = logging.getLogger(__name__)


class CellRegistry:
    """Mapping of cell name to tracked Cell state."""

    def __init__(self):
        self._cells: Dict[str, Cell] = {}
        self._names_by_handle: Dict[Hashable, str] = {}

        # Lifecycle callbacks - receive (name: str, cell: Cell)
        self._on_register_callbacks: List[Callable[[str, Cell], None]] = []
        self._on_unregister_callbacks: List[Callable[[str, Cell], None]] = []

    def add_register_callback(self, callback: Callable[[str, Cell], None]) -> None:
        """Subscribe to cell registration events."""
        if callback not in self._on_register_callbacks:
            self._on_register_callbacks.append(callback)

    def remove_register_callback(self, callback: Callable[[str, Cell], None]) -> None:
        """Unsubscribe from cell registration events."""
        if callback in self._on_register_callbacks:
            self._on_register_callbacks.remove(callback)

    def add_unregister_callback(self, callback: Callable[[str, Cell], None]) -> None:
        """Subscribe to cell unregistration events."""
        if callback not in self._on_unregister_callbacks:
            self._on_unregister_callbacks.append(callback)

    def remove_unregister_callback(self, callback: Callable[[str, Cell], None]) -> None:
        """Unsubscribe from cell unregistration events."""
        if callback in self._on_unregister_callbacks:
            self._on_unregister_callbacks.remove(callback)

    def _fire_register_callbacks(self, name: str, cell: Cell) -> None:
        for callback in self._on_register_callbacks:
            try:
                callback(name, cell)
            except Exception as e:
                logger.warning(f"Error in register callback: {e}")

    def _fire_unregister_callbacks(self, name: str, cell: Cell) -> None:
        for callback in self._on_unregister_callbacks:
            try:
                callback(name, cell)
            except Exception as e:
                logger.warning(f"Error in unregister callback: {e}")

    # ========== MUTATION (observer only) ==========

    def track(self, cell: Cell) -> None:
        """Add a cell, replacing any existing entry with the same name.

        The replaced entry's kind and value are discarded entirely. A handle
        re-added under a new name gives up the entry it held under the old one.
        """
        previous_name = self._names_by_handle.get(cell.handle)
        if previous_name is not None and previous_name != cell.name:
            previous = self._cells.get(previous_name)
            if previous is not None and previous.handle == cell.handle:
                del self._cells[previous_name]
                logger.debug(f"Renamed cell: {previous_name} -> {cell.name}")
                self._fire_unregister_callbacks(previous_name, previous)

        existing = self._cells.get(cell.name)
        if existing is not None:
            if existing.handle != cell.handle:
                self._names_by_handle.pop(existing.handle, None)
            logger.debug(f"Overwriting tracked cell: {cell.name}")

        self._cells[cell.name] = cell
        self._names_by_handle[cell.handle] = cell.name
        logger.debug(f"Tracked cell: name={cell.name}, kind={cell.kind.value}, handle={cell.handle!r}")
        self._fire_register_callbacks(cell.name, cell)

    def update_value(self, name: str, serialized: SerializedValue) -> None:
        self._cells[name].last_serialized_value = serialized

    def untrack_handle(self, handle: Hashable) -> Optional[Cell]:
        """Remove the cell a handle currently owns.

        Returns:
            The removed Cell, or None if the handle no longer owns an entry
            (never tracked, or its name was since taken by another cell).
        """
        name = self._names_by_handle.pop(handle, None)
        if name is None:
            logger.debug(f"Untrack ignored, unknown handle {handle!r}")
            return None

        cell = self._cells.get(name)
        if cell is None or cell.handle != handle:
            logger.debug(f"Untrack ignored, '{name}' now belongs to another handle")
            return None

        del self._cells[name]
        logger.debug(f"Untracked cell: {name}")
        self._fire_unregister_callbacks(name, cell)
        return cell

    def clear(self) -> None:
        """Drop every cell and handle mapping. Callbacks are not fired."""
        self._cells.clear()
        self._names_by_handle.clear()

    # ========== READS ==========

    def get(self, name: str) -> Optional[Cell]:
        return self._cells.get(name)

    def name_for_handle(self, handle: Hashable) -> Optional[str]:
        return self._names_by_handle.get(handle)

    def get_value(self, name: str) -> SerializedValue:
        """Current encoded value, or None if the name is not tracked."""
        cell = self._cells.get(name)
        return cell.last_serialized_value if cell is not None else None

    def list_names(self) -> List[str]:
        """Tracked names in registration order."""
        return list(self._cells.keys())

    def cells(self) -> List[Cell]:
        return list(self._cells.values())

    def values(self) -> Dict[str, SerializedValue]:
        """Name -> current encoded value for every tracked cell."""
        return {name: cell.last_serialized_value for name, cell in self._cells.items()}

    def find_by_kind(self, tag: str) -> List[str]:
        """Names whose current encoded value has the given kind tag (see codec.KIND_TAGS)."""
        return [name for name, cell in self._cells.items()
                if value_kind(cell.last_serialized_value) == tag]

    def find_containing(self, needle: Any) -> List[str]:
        """Names whose current value contains needle anywhere in its structure.

        Strings match case-insensitively by substring; lists and dicts are
        searched recursively (dict values only); anything else must be equal.
        """
        return [name for name, cell in self._cells.items()
                if contains_value(cell.last_serialized_value, needle)]

    def __contains__(self, name: str) -> bool:
        return name in self._cells

    def __len__(self) -> int:
        return len(self._cells)


def contains_value(value: SerializedValue, needle: Any) -> bool:
    """Deep structural containment test used by find_containing()."""
    if _equals(value, needle):
        return True

    if isinstance(value, dict):
        return any(contains_value(v, needle) for v in value.values())

    if isinstance(value, list):
        return any(contains_value(v, needle) for v in value)

    if isinstance(value, AsyncResult):
        return contains_value(value.value, needle) or contains_value(value.error, needle)

    if isinstance(value, Opaque):
        value = value.description

    if isinstance(value, str) and isinstance(needle, str):
        return needle.lower() in value.lower()

    return False


def _equals(a: Any, b: Any) -> bool:
    # True == 1 in Python; a search for 1 should not match a flag
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    try:
        return bool(a == b)
    except Exception:
        return False
