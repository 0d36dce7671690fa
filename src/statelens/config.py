"""
Inspector configuration and per-thread default storage.

InspectorConfig is an immutable dataclass handed to each StateInspector.
Callers that construct inspectors in many places (test harnesses, app
bootstrap code) can instead install a default once on the thread that builds them:

    >>> set_default_config(InspectorConfig(history_capacity=500))
    >>> inspector = StateInspector(graph)   # picks up the default

The default lives in thread-local storage, matching the rest of the
inspector's single-thread ownership model: each thread that installs a
default sees its own.
"""

from dataclasses import dataclass
import threading
from typing import Optional

DEFAULT_HISTORY_CAPACITY = 100
DEFAULT_MAX_ENCODE_DEPTH = 64


@dataclass(frozen=True)
class InspectorConfig:
    """Settings for one StateInspector.

    Attributes:
        history_capacity: Max ChangeEvents kept before the oldest is evicted.
        max_encode_depth: Nesting depth at which the codec stops recursing.
        enabled: Master switch; when False the observer is never attached.
        debug_only: Only attach when the interpreter runs with __debug__
                    (i.e. not under ``python -O``).
    """
    history_capacity: int = DEFAULT_HISTORY_CAPACITY
    max_encode_depth: int = DEFAULT_MAX_ENCODE_DEPTH
    enabled: bool = True
    debug_only: bool = True

    def __post_init__(self):
        if self.history_capacity < 1:
            raise ValueError(f"history_capacity must be positive, got {self.history_capacity}")
        if self.max_encode_depth < 1:
            raise ValueError(f"max_encode_depth must be positive, got {self.max_encode_depth}")

    def should_attach(self) -> bool:
        """Whether an inspector using this config may attach to a host graph."""
        if not self.enabled:
            return False
        if self.debug_only and not __debug__:
            return False
        return True


_default_config_context = threading.local()


def set_default_config(config: InspectorConfig) -> None:
    """Install the per-thread default for inspectors constructed without one.

    Only inspectors built on the calling thread see it.

    Args:
        config: The config instance to use as the default
    """
    _default_config_context.value = config


def get_default_config() -> InspectorConfig:
    """Get this thread's installed default, or a fresh InspectorConfig if none."""
    config: Optional[InspectorConfig] = getattr(_default_config_context, 'value', None)
    return config if config is not None else InspectorConfig()


def reset_default_config() -> None:
    """Remove this thread's installed default (mainly for tests)."""
    if hasattr(_default_config_context, 'value'):
        del _default_config_context.value
