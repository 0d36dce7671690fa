"""
Whole-registry snapshot export/import and named scenarios.

Snapshot text layout (the only persisted artifact):

    {"timestamp": "2026-10-17T09:30:00.123456",
     "state": {"counter": 3, "derivedDouble": 6}}

Import is NOT atomic. Entries are written independently in document order
and a failed entry does not roll back the ones before it. A False result
means "some or all requested changes may not have taken effect"; re-query
the registry to learn what actually happened.

Scenarios wrap a snapshot with a name and description. The scenario book
keeps them by name, last write wins.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from statelens.codec import is_lossless, value_kind
from statelens.editor import LiveEditor
from statelens.exceptions import DecodeFailure
from statelens.models import Scenario, Snapshot
from statelens.registry import CellRegistry

logger = logging.getLogger(__name__)


class SnapshotManager:
    """Captures, restores and bookkeeps registry-wide snapshots."""

    def __init__(self, registry: CellRegistry, editor: LiveEditor):
        self._registry = registry
        self._editor = editor
        self._scenarios: Dict[str, Scenario] = {}

    # ========== SNAPSHOTS ==========

    def capture(self) -> Snapshot:
        """Frozen copy of every tracked cell's current encoded value."""
        return Snapshot.create(self._registry.values())

    def export_snapshot(self) -> str:
        """Encode the current registry as snapshot text."""
        return json.dumps(self.capture().to_dict())

    def import_snapshot(self, text: str) -> bool:
        """Write every entry of a snapshot document back into the host.

        Malformed text returns False before any write is attempted.

        Args:
            text: Snapshot text as produced by export_snapshot()

        Returns:
            True only if every entry was written successfully.
        """
        try:
            state = parse_snapshot_document(text)
        except DecodeFailure as e:
            logger.error(f"Snapshot import aborted: {e}")
            return False

        failed: List[str] = []
        for name, value in state.items():
            if not self._editor.request_write(name, value):
                failed.append(name)

        if failed:
            logger.warning(f"Snapshot import: {len(failed)}/{len(state)} entries failed: {failed}")
            return False

        logger.info(f"Snapshot import: applied {len(state)} entries")
        return True

    def validate(self) -> List[str]:
        """Report cells whose current value would not survive export + import.

        Returns:
            One message per cell holding an async result, an opaque value or a
            non-finite float anywhere in its structure. Empty if all are clean.
        """
        issues = []
        for cell in self._registry.cells():
            if not is_lossless(cell.last_serialized_value):
                kind = value_kind(cell.last_serialized_value)
                issues.append(f"Cell '{cell.name}' holds a {kind} value that cannot be restored losslessly")
        return issues

    # ========== SCENARIOS ==========

    def create_scenario(self, name: str, description: Optional[str] = None) -> Scenario:
        """Wrap a fresh snapshot with a name. Does not add it to the book."""
        return Scenario(name=name, description=description, snapshot_text=self.export_snapshot())

    def apply_scenario(self, scenario: Scenario) -> bool:
        """Import the scenario's snapshot. Same non-atomic semantics as import_snapshot()."""
        logger.info(f"Applying scenario '{scenario.name}'")
        return self.import_snapshot(scenario.snapshot_text)

    def save_scenario(self, scenario: Scenario) -> None:
        """Store a scenario by name, replacing any previous one."""
        if scenario.name in self._scenarios:
            logger.debug(f"Replacing scenario '{scenario.name}'")
        self._scenarios[scenario.name] = scenario

    def get_scenario(self, name: str) -> Optional[Scenario]:
        return self._scenarios.get(name)

    def list_scenarios(self) -> List[Scenario]:
        """Stored scenarios, oldest first."""
        return sorted(self._scenarios.values(), key=lambda s: s.created_at)

    def delete_scenario(self, name: str) -> bool:
        """Remove a stored scenario. Returns False if there was none."""
        return self._scenarios.pop(name, None) is not None

    def export_scenarios(self) -> str:
        """Encode the scenario book as JSON text."""
        return json.dumps([scenario.to_dict() for scenario in self.list_scenarios()])

    def import_scenarios(self, text: str) -> int:
        """Load scenarios from export_scenarios() text into the book.

        Returns:
            Number of scenarios stored, or 0 if the text is malformed.
        """
        try:
            entries = json.loads(text)
            if not isinstance(entries, list):
                raise DecodeFailure("Scenario document must be a list")
            scenarios = [Scenario.from_dict(entry) for entry in entries]
        except (DecodeFailure, ValueError, TypeError, KeyError, RecursionError) as e:
            logger.error(f"Scenario import aborted: {e}")
            return 0

        for scenario in scenarios:
            self.save_scenario(scenario)
        logger.info(f"Imported {len(scenarios)} scenario(s)")
        return len(scenarios)

    def clear_scenarios(self) -> None:
        self._scenarios.clear()


def parse_snapshot_document(text: str) -> Dict[str, Any]:
    """Extract the name -> value state map from snapshot text.

    Raises:
        DecodeFailure: If text is not JSON, not an object, or has no state map
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError, RecursionError) as e:
        raise DecodeFailure(f"Malformed snapshot text: {e}") from e

    if not isinstance(data, dict):
        raise DecodeFailure(f"Snapshot must be a JSON object, got {type(data).__name__}")

    state = data.get('state')
    if not isinstance(state, dict):
        raise DecodeFailure("Snapshot has no 'state' mapping")
    return state
