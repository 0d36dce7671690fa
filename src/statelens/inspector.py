"""
StateInspector: one live-inspection context bound to one host graph.

Owns the registry, history, observer, editor and snapshot manager, and is
the surface panels, CLIs and tests talk to. Every operation here reports
failure through its return value; nothing raises into the caller.

Lifecycle:
    >>> inspector = StateInspector(graph)
    >>> inspector.register_observer()     # attach (idempotent)
    >>> ...                               # app runs, inspector mirrors it
    >>> inspector.close()                 # detach and wipe

Or as a context manager:
    >>> with StateInspector(graph) as inspector:
    ...     inspector.register_observer()

Thread safety: Not thread-safe. All calls are expected on the thread the
host graph delivers its notifications on.
"""

import logging
from typing import Any, Callable, Iterable, List, Optional

from statelens.codec import SerializedValue
from statelens.config import InspectorConfig, get_default_config
from statelens.editor import LiveEditor, parse_edit_input
from statelens.history import HistoryLog
from statelens.host import HostGraph
from statelens.models import ChangeEvent, Scenario, Snapshot, Summary
from statelens.observer import StateObserver
from statelens.registry import CellRegistry
from statelens.snapshots import SnapshotManager
from statelens.summary import build_summary

logger = logging.getLogger(__name__)


class StateInspector:
    """Live view onto, and write access into, a reactive host graph."""

    def __init__(self, host: HostGraph, config: Optional[InspectorConfig] = None):
        self.config = config if config is not None else get_default_config()
        self.host = host
        self.registry = CellRegistry()
        self.history = HistoryLog(self.config.history_capacity)
        self.observer = StateObserver(host, self.registry, self.history, self.config.max_encode_depth)
        self.editor = LiveEditor(host, self.registry)
        self.snapshots = SnapshotManager(self.registry, self.editor)
        self._attached = False

    # ========== LIFECYCLE ==========

    @property
    def is_attached(self) -> bool:
        return self._attached

    def register_observer(self) -> bool:
        """Attach the observer to the host graph's notification stream.

        Idempotent: repeat calls log and return without attaching twice.

        Returns:
            True if the observer is attached after the call.
        """
        if self._attached:
            logger.info("Observer already registered")
            return True

        if not self.config.should_attach():
            logger.info(
                f"Skipping observer registration (enabled={self.config.enabled}, "
                f"debug_only={self.config.debug_only}, __debug__={__debug__})"
            )
            return False

        self.host.add_observer(self.observer)
        self._attached = True
        logger.info(f"Observer registered on {type(self.host).__name__}")
        return True

    def unregister_observer(self) -> None:
        """Detach from the host. Tracked state is kept."""
        if not self._attached:
            return
        self.host.remove_observer(self.observer)
        self._attached = False
        logger.info("Observer unregistered")

    def close(self) -> None:
        """Detach from the host and wipe all tracked state."""
        self.unregister_observer()
        self.clear_all()
        self.snapshots.clear_scenarios()

    def __enter__(self) -> 'StateInspector':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ========== READS ==========

    def get_value(self, name: str) -> SerializedValue:
        """Current encoded value of a cell, or None if it is not tracked."""
        return self.registry.get_value(name)

    def has_cell(self, name: str) -> bool:
        return name in self.registry

    def list_names(self) -> List[str]:
        return self.registry.list_names()

    def find_by_kind(self, tag: str) -> List[str]:
        return self.registry.find_by_kind(tag)

    def find_containing(self, needle: Any) -> List[str]:
        return self.registry.find_containing(needle)

    def get_history(self, name: Optional[str] = None) -> List[ChangeEvent]:
        """Retained ChangeEvents, oldest first, optionally for one cell only."""
        if name is None:
            return self.history.events()
        return self.history.for_cell(name)

    def get_summary(self) -> Summary:
        return build_summary(self.registry, self.history)

    def watch(self, names: Iterable[str], callback: Callable[[str, SerializedValue], None]) -> Callable[[], None]:
        """Call callback(name, new_value) after each update of the named cells.

        Args:
            names: Cell names to watch
            callback: Receives the cell name and its newly encoded value

        Returns:
            A function that stops the watch when called.
        """
        watched = frozenset(names)

        def _filtered(name: str, value: SerializedValue) -> None:
            if name in watched:
                callback(name, value)

        self.observer.add_update_callback(_filtered)
        return lambda: self.observer.remove_update_callback(_filtered)

    # ========== WRITES ==========

    def request_write(self, name: str, raw_input_text: str) -> bool:
        """Write operator-typed text into a settable cell.

        The text is decoded as a JSON literal when possible ("100" -> 100),
        otherwise written as the literal string.
        """
        return self.editor.request_write(name, parse_edit_input(raw_input_text))

    def set_value(self, name: str, value: Any) -> bool:
        """Write an already-typed value into a settable cell."""
        return self.editor.request_write(name, value)

    # ========== SNAPSHOTS AND SCENARIOS ==========

    def capture(self) -> Snapshot:
        return self.snapshots.capture()

    def export_snapshot(self) -> str:
        return self.snapshots.export_snapshot()

    def import_snapshot(self, text: str) -> bool:
        return self.snapshots.import_snapshot(text)

    def create_scenario(self, name: str, description: Optional[str] = None) -> Scenario:
        return self.snapshots.create_scenario(name, description)

    def apply_scenario(self, scenario: Scenario) -> bool:
        return self.snapshots.apply_scenario(scenario)

    def validate(self) -> List[str]:
        return self.snapshots.validate()

    # ========== RESET ==========

    def clear_all(self) -> None:
        """Irreversibly wipe the registry, handle map and history.

        The observer stays attached; cells added after this are tracked as
        usual, cells that already existed reappear only when re-added.
        """
        self.registry.clear()
        self.history.clear()
        logger.info("Cleared all tracked state")
