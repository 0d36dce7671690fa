"""
Live editor: forwards external write requests into the host graph.

The editor only checks that a write is allowed and hands it to the host.
It never touches the registry; the host's own Updated notification is
what refreshes the registry and history afterwards.
"""

import json
import logging
from typing import Any

from statelens.exceptions import (
    CellNotFoundError,
    CellNotWritableError,
    HostWriteError,
    StateLensError,
)
from statelens.host import HostGraph
from statelens.registry import CellRegistry

logger = logging.getLogger(__name__)


def parse_edit_input(raw_text: str) -> Any:
    """Turn text typed by an operator into a value.

    JSON literals are decoded ("100" -> 100, "true" -> True, "[1, 2]" ->
    [1, 2], '"100"' -> "100"); anything that is not valid JSON, or is nested too
    deeply to decode, is taken as the literal string.
    """
    try:
        return json.loads(raw_text)
    except (TypeError, ValueError, RecursionError):
        return raw_text


class LiveEditor:
    """Writes values into settable cells of the host graph by name."""

    def __init__(self, host: HostGraph, registry: CellRegistry):
        self._host = host
        self._registry = registry

    def write(self, name: str, value: Any) -> None:
        """Forward a write for the named cell to the host.

        Raises:
            CellNotFoundError: If name is not tracked
            CellNotWritableError: If the cell is derived
            HostWriteError: If the host's write call fails
        """
        cell = self._registry.get(name)
        if cell is None:
            raise CellNotFoundError(name)
        if not cell.is_writable:
            raise CellNotWritableError(name, cell.kind.value)

        try:
            self._host.write(cell.handle, value)
        except Exception as e:
            raise HostWriteError(name, e) from e

        logger.debug(f"Wrote {value!r} to '{name}'")

    def request_write(self, name: str, value: Any) -> bool:
        """Non-raising write(). Returns True if the host accepted the write."""
        try:
            self.write(name, value)
        except StateLensError as e:
            logger.warning(f"Write rejected: {e}")
            return False
        return True
