"""
Live inspection and editing for reactive state graphs.

statelens attaches to a reactive graph's lifecycle notifications and keeps
a live, serializable mirror of every cell, a bounded history of changes,
and a write path back into settable cells.

Key Features:
- Total value codec: any runtime value becomes JSON-safe, never raises
- Cell registry kept in sync with add / update / dispose notifications
- Bounded FIFO change history (100 events by default)
- Live editing of settable cells from operator-typed text
- Snapshot export/import and named scenarios

Quick Start:
    >>> from statelens import ReactiveGraph, StateInspector
    >>>
    >>> graph = ReactiveGraph()
    >>> inspector = StateInspector(graph)
    >>> inspector.register_observer()
    True
    >>>
    >>> counter = graph.state(3, label="counter")
    >>> inspector.request_write("counter", "10")
    True
    >>> counter.value
    10
    >>> inspector.get_summary().history_entry_count
    1

Architecture:
    host graph events -> StateObserver -> CellRegistry (via codec) + HistoryLog
    callers -> StateInspector reads -> LiveEditor -> host graph write
    host graph emits Updated -> registry and history refresh

Modules:
    - codec: SerializedValue encoding, kind tags, JSON text
    - models: Cell, ChangeEvent, Snapshot, Scenario, Summary
    - history: Bounded change log
    - registry: Name -> Cell mirror and search queries
    - observer: Host notification hook
    - editor: Write path into the host
    - snapshots: Snapshot import/export and scenario book
    - summary: Aggregate read model
    - inspector: Context object tying the above to one host graph
    - host: Interfaces a host graph implements
    - graph: Minimal in-process reactive graph
    - config: InspectorConfig and per-thread default
"""

# Codec
from statelens.codec import (
    AsyncResult,
    Opaque,
    SerializedValue,
    KIND_TAGS,
    encode,
    decode,
    dumps,
    loads,
    value_kind,
    is_lossless,
)

# Model
from statelens.models import (
    Cell,
    CellKind,
    ChangeEvent,
    Snapshot,
    Scenario,
    Summary,
)

# Errors
from statelens.exceptions import (
    StateLensError,
    CellNotFoundError,
    CellNotWritableError,
    DecodeFailure,
    HostWriteError,
)

# Configuration
from statelens.config import (
    InspectorConfig,
    set_default_config,
    get_default_config,
    reset_default_config,
)

# Core components
from statelens.history import HistoryLog
from statelens.registry import CellRegistry
from statelens.observer import StateObserver
from statelens.editor import LiveEditor, parse_edit_input
from statelens.snapshots import SnapshotManager
from statelens.summary import build_summary
from statelens.inspector import StateInspector

# Host
from statelens.host import GraphObserver, HostGraph
from statelens.graph import AsyncValue, ComputedCell, ReactiveGraph, StateCell

__all__ = [
    # Codec
    'AsyncResult',
    'Opaque',
    'SerializedValue',
    'KIND_TAGS',
    'encode',
    'decode',
    'dumps',
    'loads',
    'value_kind',
    'is_lossless',
    # Model
    'Cell',
    'CellKind',
    'ChangeEvent',
    'Snapshot',
    'Scenario',
    'Summary',
    # Errors
    'StateLensError',
    'CellNotFoundError',
    'CellNotWritableError',
    'DecodeFailure',
    'HostWriteError',
    # Configuration
    'InspectorConfig',
    'set_default_config',
    'get_default_config',
    'reset_default_config',
    # Core components
    'HistoryLog',
    'CellRegistry',
    'StateObserver',
    'LiveEditor',
    'parse_edit_input',
    'SnapshotManager',
    'build_summary',
    'StateInspector',
    # Host
    'GraphObserver',
    'HostGraph',
    'AsyncValue',
    'ComputedCell',
    'ReactiveGraph',
    'StateCell',
]

__version__ = '1.0.0'
__description__ = 'Live inspection and editing for reactive state graphs'
