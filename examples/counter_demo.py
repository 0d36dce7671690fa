"""
Counter walkthrough for statelens.

Builds a small reactive graph, attaches an inspector, edits a cell the way
an operator would, and round-trips a snapshot.

Run with: python examples/counter_demo.py
"""

import logging

from statelens import AsyncValue, ReactiveGraph, StateInspector

logger = logging.getLogger(__name__)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(name)s %(levelname)s: %(message)s")

    graph = ReactiveGraph()
    with StateInspector(graph) as inspector:
        if not inspector.register_observer():
            logger.warning("Inspector disabled, nothing to show")
            return

        counter = graph.state(42, label="counter")
        graph.computed(lambda: counter.value * 2, label="derivedDouble")
        graph.state(AsyncValue.loading(), label="profile")

        unwatch = inspector.watch(["counter"], lambda name, value: print(f"  watch: {name} -> {value}"))

        counter.value += 1
        inspector.request_write("counter", "100")
        inspector.request_write("derivedDouble", "7")  # rejected, derived

        print(f"Cells: {inspector.list_names()}")
        print(f"Summary: {inspector.get_summary()}")
        for event in inspector.get_history():
            print(f"  {event}")

        saved = inspector.export_snapshot()
        counter.value = 0
        unwatch()
        restored = inspector.import_snapshot(saved)
        print(f"Snapshot import fully applied: {restored}, counter={counter.value}")

        for issue in inspector.validate():
            print(f"  warning: {issue}")


if __name__ == "__main__":
    main()
