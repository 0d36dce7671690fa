"""
Minimal in-process reactive graph.

A reference HostGraph for scripts and tests: settable StateCells, derived
ComputedCells with automatic dependency tracking, and an AsyncValue
three-state wrapper. Every add / change / dispose is announced to the
registered GraphObservers.

Example:
    >>> graph = ReactiveGraph()
    >>> counter = graph.state(3, label="counter")
    >>> double = graph.computed(lambda: counter.value * 2, label="derivedDouble")
    >>> counter.value = 5
    >>> double.value
    10

Propagation is eager and synchronous: a write recomputes every dependent
cell before returning. Thread safety: Not thread-safe.
"""

import logging
from typing import Any, Callable, Dict, Hashable, List, Optional, Set

from statelens.host import GraphObserver, HostGraph
from statelens.models import CellKind

logger = logging.getLogger(__name__)

_UNSET = object()


class AsyncValue:
    """Value / error / loading wrapper for results that arrive later."""

    __slots__ = ('_value', '_error', '_has_value', '_has_error', '_is_loading')

    def __init__(self, value: Any = None, error: Any = None, *,
                 has_value: bool = False, has_error: bool = False, is_loading: bool = False):
        self._value = value
        self._error = error
        self._has_value = has_value
        self._has_error = has_error
        self._is_loading = is_loading

    @classmethod
    def data(cls, value: Any) -> 'AsyncValue':
        return cls(value, has_value=True)

    @classmethod
    def loading(cls) -> 'AsyncValue':
        return cls(is_loading=True)

    @classmethod
    def failure(cls, error: Any) -> 'AsyncValue':
        return cls(error=error, has_error=True)

    @property
    def has_value(self) -> bool:
        return self._has_value

    @property
    def has_error(self) -> bool:
        return self._has_error

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def value(self) -> Any:
        return self._value

    @property
    def error(self) -> Any:
        return self._error

    def __eq__(self, other):
        if not isinstance(other, AsyncValue):
            return NotImplemented
        return (self._has_value, self._has_error, self._is_loading, self._value, self._error) == \
            (other._has_value, other._has_error, other._is_loading, other._value, other._error)

    __hash__ = None

    def __repr__(self) -> str:
        if self._is_loading:
            return "AsyncValue.loading()"
        if self._has_error:
            return f"AsyncValue.failure({self._error!r})"
        return f"AsyncValue.data({self._value!r})"


class _Node:
    """Shared bookkeeping for graph cells."""

    def __init__(self, graph: 'ReactiveGraph', cell_id: int, label: Optional[str]):
        self._graph = graph
        self.id = cell_id
        self.label = label
        self._value: Any = _UNSET
        self._dependents: Set[int] = set()
        self.declared_type = type(self).__name__

    @property
    def value(self) -> Any:
        self._graph._track_read(self)
        return self._value

    def __repr__(self) -> str:
        name = self.label or self.declared_type
        return f"{type(self).__name__}({name}#{self.id}={self._value!r})"


class StateCell(_Node):
    """Settable leaf cell."""

    def __init__(self, graph: 'ReactiveGraph', cell_id: int, label: Optional[str],
                 validator: Optional[Callable[[Any], None]] = None):
        super().__init__(graph, cell_id, label)
        self._validator = validator

    @_Node.value.setter
    def value(self, new_value: Any) -> None:
        self._graph.write(self.id, new_value)


class ComputedCell(_Node):
    """Derived cell recomputed whenever a cell it read changes."""

    def __init__(self, graph: 'ReactiveGraph', cell_id: int, label: Optional[str], fn: Callable[[], Any]):
        super().__init__(graph, cell_id, label)
        self._fn = fn
        self._dependencies: Set[int] = set()


class ReactiveGraph(HostGraph):
    """Registry of cells plus the observer stream statelens attaches to."""

    def __init__(self):
        self._cells: Dict[int, _Node] = {}
        self._observers: List[GraphObserver] = []
        self._next_id = 1
        # Dependency capture stack: one set per computed cell being evaluated
        self._tracking: List[Set[int]] = []

    # ========== CELL CREATION AND DISPOSAL ==========

    def state(self, initial: Any, label: Optional[str] = None,
              validator: Optional[Callable[[Any], None]] = None) -> StateCell:
        """Create a settable cell.

        Args:
            initial: Starting value
            label: Optional display name; unlabeled cells are named by type
            validator: Called with each written value; raising rejects the write
        """
        cell = StateCell(self, self._allocate_id(), label, validator)
        cell._value = initial
        cell.declared_type = f"StateCell<{type(initial).__name__}>"
        self._cells[cell.id] = cell
        self._fire('on_added', cell.id, label, initial)
        return cell

    def computed(self, fn: Callable[[], Any], label: Optional[str] = None) -> ComputedCell:
        """Create a derived cell from a zero-argument function of other cells."""
        cell = ComputedCell(self, self._allocate_id(), label, fn)
        cell._value = self._evaluate(cell)
        cell.declared_type = f"ComputedCell<{type(cell._value).__name__}>"
        self._cells[cell.id] = cell
        self._fire('on_added', cell.id, label, cell._value)
        return cell

    def dispose(self, cell: _Node) -> None:
        """Remove a cell. Cells that depended on it keep their last value."""
        if self._cells.pop(cell.id, None) is None:
            logger.debug(f"Dispose ignored, cell #{cell.id} already gone")
            return
        for other in self._cells.values():
            other._dependents.discard(cell.id)
            if isinstance(other, ComputedCell):
                other._dependencies.discard(cell.id)
        self._fire('on_disposed', cell.id)

    def cell(self, cell_id: Hashable) -> _Node:
        """Look up a live cell by id. Raises KeyError once disposed."""
        return self._cells[cell_id]

    def read(self, cell_id: Hashable) -> Any:
        return self._cells[cell_id]._value

    # ========== HostGraph ==========

    def add_observer(self, observer: GraphObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def remove_observer(self, observer: GraphObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def write(self, cell_id: Hashable, value: Any) -> None:
        cell = self._cells.get(cell_id)
        if cell is None:
            raise KeyError(f"No live cell with id {cell_id!r}")
        if not isinstance(cell, StateCell):
            raise TypeError(f"{cell.declared_type} #{cell_id} is derived and cannot be written")
        if cell._validator is not None:
            cell._validator(value)
        self._assign(cell, value)

    def kind_of(self, cell_id: Hashable) -> CellKind:
        cell = self._cells[cell_id]
        return CellKind.SETTABLE if isinstance(cell, StateCell) else CellKind.DERIVED

    def type_name(self, cell_id: Hashable) -> str:
        return self._cells[cell_id].declared_type

    # ========== PROPAGATION ==========

    def _allocate_id(self) -> int:
        cell_id = self._next_id
        self._next_id += 1
        return cell_id

    def _track_read(self, cell: _Node) -> None:
        if self._tracking:
            self._tracking[-1].add(cell.id)

    def _evaluate(self, cell: ComputedCell) -> Any:
        self._tracking.append(set())
        try:
            result = cell._fn()
        finally:
            dependencies = self._tracking.pop()

        for dep_id in cell._dependencies - dependencies:
            dep = self._cells.get(dep_id)
            if dep is not None:
                dep._dependents.discard(cell.id)
        for dep_id in dependencies:
            dep = self._cells.get(dep_id)
            if dep is not None:
                dep._dependents.add(cell.id)
        cell._dependencies = dependencies
        return result

    def _assign(self, cell: _Node, value: Any) -> None:
        previous = cell._value
        if _same(previous, value):
            return
        cell._value = value
        self._fire('on_updated', cell.id, previous, value)
        self._propagate(cell)

    def _propagate(self, source: _Node) -> None:
        # Creation order is a valid topological order: a computed cell can
        # only read cells that existed when it was evaluated.
        pending = sorted(source._dependents)
        while pending:
            cell_id = pending.pop(0)
            cell = self._cells.get(cell_id)
            if not isinstance(cell, ComputedCell):
                continue
            previous = cell._value
            new_value = self._evaluate(cell)
            if _same(previous, new_value):
                continue
            cell._value = new_value
            self._fire('on_updated', cell.id, previous, new_value)
            pending = sorted(set(pending) | cell._dependents)

    def _fire(self, event: str, *args: Any) -> None:
        for observer in list(self._observers):
            try:
                getattr(observer, event)(*args)
            except Exception as e:
                logger.warning(f"Error in {event} observer callback: {e}")


def _same(a: Any, b: Any) -> bool:
    if a is b:
        return True
    try:
        return bool(a == b)
    except Exception:
        return False
