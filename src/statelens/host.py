"""
Interfaces between the inspector and the reactive graph it observes.

The host graph is a black box to statelens. It must:
- deliver lifecycle notifications to registered GraphObservers
- accept writes for a cell id (raising on failure)
- report a cell's writability and a type name for unlabeled cells

Cell ids are opaque hashable keys owned by the host; statelens never
dereferences them itself.
"""

from abc import ABC, abstractmethod
from typing import Any, Hashable, Optional

from statelens.models import CellKind


class GraphObserver(ABC):
    """Receiver of host graph lifecycle notifications."""

    @abstractmethod
    def on_added(self, cell_id: Hashable, label: Optional[str], initial_value: Any) -> None:
        """A cell joined the graph."""

    @abstractmethod
    def on_updated(self, cell_id: Hashable, previous_value: Any, new_value: Any) -> None:
        """A cell's value changed."""

    @abstractmethod
    def on_disposed(self, cell_id: Hashable) -> None:
        """A cell left the graph. No further events follow for this id."""


class HostGraph(ABC):
    """What statelens needs from the reactive graph being inspected."""

    @abstractmethod
    def add_observer(self, observer: GraphObserver) -> None:
        """Start delivering lifecycle notifications to observer."""

    @abstractmethod
    def remove_observer(self, observer: GraphObserver) -> None:
        """Stop delivering lifecycle notifications to observer."""

    @abstractmethod
    def write(self, cell_id: Hashable, value: Any) -> None:
        """Overwrite a settable cell. Raises on any failure."""

    @abstractmethod
    def kind_of(self, cell_id: Hashable) -> CellKind:
        """Writability of the cell."""

    @abstractmethod
    def type_name(self, cell_id: Hashable) -> str:
        """Structural name used when a cell carries no label."""
