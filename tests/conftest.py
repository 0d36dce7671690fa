"""Pytest configuration and shared fixtures."""
import pytest

from statelens import ReactiveGraph, StateInspector
import statelens.config as config_module


@pytest.fixture(autouse=True)
def reset_default_config():
    """Restore the per-thread default config after each test."""
    original = getattr(config_module._default_config_context, 'value', None)

    yield

    if original is None:
        config_module.reset_default_config()
    else:
        config_module.set_default_config(original)


@pytest.fixture
def graph():
    """Provide an empty reactive graph."""
    return ReactiveGraph()


@pytest.fixture
def inspector(graph):
    """Provide an inspector already attached to the graph."""
    inspector = StateInspector(graph)
    assert inspector.register_observer()
    yield inspector
    inspector.close()


@pytest.fixture
def counter_graph(graph, inspector):
    """Graph with a settable counter (3) and a derived double (6)."""
    counter = graph.state(3, label="counter")
    double = graph.computed(lambda: counter.value * 2, label="derivedDouble")
    return counter, double
