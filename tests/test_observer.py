"""Tests for the observer hook and the registry it maintains."""
from statelens import AsyncValue, CellKind, ReactiveGraph, StateInspector
from statelens.codec import AsyncResult, Opaque


class TestLifecycle:
    """Added -> Updated* -> Disposed."""

    def test_added_cell_is_immediately_visible(self, graph, inspector):
        graph.state(1, label="x")
        assert inspector.has_cell("x")
        assert inspector.get_value("x") == 1

    def test_dispose_then_readd_starts_fresh(self, graph, inspector):
        first = graph.state(1, label="x")
        graph.dispose(first)
        assert not inspector.has_cell("x")
        assert inspector.get_value("x") is None

        graph.state(2, label="x")
        assert inspector.get_value("x") == 2
        assert inspector.get_history("x") == []

    def test_updates_append_history_in_order(self, graph, inspector):
        score = graph.state(0, label="score")
        score.value = 10
        score.value = 25

        assert inspector.get_value("score") == 25
        events = inspector.get_history()
        assert [(e.previous_value, e.new_value) for e in events] == [(0, 10), (10, 25)]
        assert inspector.get_summary().history_entry_count == 2

    def test_derived_updates_are_recorded(self, graph, inspector, counter_graph):
        counter, _ = counter_graph
        counter.value = 4
        assert inspector.get_value("derivedDouble") == 8
        assert [e.cell_name for e in inspector.get_history()] == ["counter", "derivedDouble"]

    def test_unlabeled_cell_falls_back_to_type_name(self, graph, inspector):
        graph.state(5)
        assert inspector.list_names() == ["StateCell<int>"]

    def test_kind_is_resolved_from_host(self, graph, inspector, counter_graph):
        assert inspector.registry.get("counter").kind is CellKind.SETTABLE
        assert inspector.registry.get("derivedDouble").kind is CellKind.DERIVED

    def test_readd_with_different_kind_replaces_cell(self, graph, inspector):
        source = graph.state(1, label="src")
        graph.state(1, label="shared")
        graph.computed(lambda: source.value + 1, label="shared")
        cell = inspector.registry.get("shared")
        assert cell.kind is CellKind.DERIVED
        assert cell.last_serialized_value == 2

    def test_stale_dispose_keeps_newer_cell(self, graph, inspector):
        old = graph.state(1, label="dup")
        graph.state(2, label="dup")
        graph.dispose(old)
        assert inspector.get_value("dup") == 2

    def test_handle_readded_under_new_name_drops_old_entry(self, inspector):
        inspector.observer.on_added(999, "old", 1)
        inspector.observer.on_added(999, "new", 2)
        assert inspector.list_names() == ["new"]

        inspector.observer.on_disposed(999)
        assert inspector.list_names() == []

    def test_handle_rename_fires_unregister_for_old_name(self, inspector):
        removed = []
        inspector.registry.add_unregister_callback(lambda name, cell: removed.append(name))
        inspector.observer.on_added(7, "before", 1)
        inspector.observer.on_added(7, "after", 1)
        assert removed == ["before"]

    def test_values_are_encoded(self, graph, inspector):
        graph.state(AsyncValue.data({"a": 1}), label="async")
        graph.state(object(), label="thing")
        assert isinstance(inspector.get_value("async"), AsyncResult)
        assert isinstance(inspector.get_value("thing"), Opaque)

    def test_nothing_tracked_before_registration(self):
        graph = ReactiveGraph()
        graph.state(1, label="early")
        inspector = StateInspector(graph)
        inspector.register_observer()
        assert inspector.list_names() == []


class TestQueries:

    def test_list_names_in_registration_order(self, graph, inspector):
        for name in ("b", "a", "c"):
            graph.state(0, label=name)
        assert inspector.list_names() == ["b", "a", "c"]

    def test_find_containing_is_case_insensitive(self, graph, inspector):
        graph.state("Agent Smith", label="user.name")
        graph.state(42, label="user.age")
        assert inspector.find_containing("smith") == ["user.name"]

    def test_find_containing_searches_nested(self, graph, inspector):
        graph.state({"team": ["Neo", "Trinity"]}, label="crew")
        graph.state([1, [2, 3]], label="numbers")
        assert inspector.find_containing("trin") == ["crew"]
        assert inspector.find_containing(3) == ["numbers"]

    def test_find_containing_does_not_confuse_bool_and_int(self, graph, inspector):
        graph.state(True, label="flag")
        graph.state(1, label="one")
        assert inspector.find_containing(1) == ["one"]

    def test_find_by_kind(self, graph, inspector):
        graph.state(1, label="n")
        graph.state("s", label="text")
        graph.state([1], label="items")
        graph.state(2, label="m")
        assert inspector.find_by_kind("int") == ["n", "m"]
        assert inspector.find_by_kind("list") == ["items"]
        assert inspector.find_by_kind("opaque") == []


class TestCallbacks:

    def test_register_and_unregister_callbacks(self, graph, inspector):
        seen = []
        inspector.registry.add_register_callback(lambda name, cell: seen.append(("add", name)))
        inspector.registry.add_unregister_callback(lambda name, cell: seen.append(("remove", name)))

        cell = graph.state(1, label="x")
        graph.dispose(cell)
        assert seen == [("add", "x"), ("remove", "x")]

    def test_failing_callback_does_not_break_tracking(self, graph, inspector):
        def explode(name, cell):
            raise RuntimeError("callback failure")

        inspector.registry.add_register_callback(explode)
        graph.state(1, label="x")
        assert inspector.get_value("x") == 1

    def test_watch_only_fires_for_watched_names(self, graph, inspector):
        a = graph.state(0, label="a")
        b = graph.state(0, label="b")
        seen = []
        stop = inspector.watch(["a"], lambda name, value: seen.append((name, value)))

        a.value = 1
        b.value = 1
        stop()
        a.value = 2

        assert seen == [("a", 1)]
