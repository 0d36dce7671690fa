"""Tests for the live editor and raw input parsing."""
import pytest

from statelens.editor import parse_edit_input
from statelens.exceptions import CellNotFoundError, CellNotWritableError, HostWriteError

DEEPLY_NESTED = "[" * 100000 + "]" * 100000


class TestParseEditInput:

    @pytest.mark.parametrize("raw,expected", [
        ("100", 100),
        ("-2.5", -2.5),
        ("true", True),
        ("null", None),
        ("[1, 2]", [1, 2]),
        ('{"a": 1}', {"a": 1}),
        ('"100"', "100"),
    ])
    def test_json_literals_are_decoded(self, raw, expected):
        assert parse_edit_input(raw) == expected

    def test_decoded_number_is_int_not_str(self):
        assert type(parse_edit_input("100")) is int

    @pytest.mark.parametrize("raw", ["hello", "Agent Smith", "{broken", ""])
    def test_non_json_falls_back_to_literal_string(self, raw):
        assert parse_edit_input(raw) == raw

    def test_too_deeply_nested_json_falls_back_to_literal_string(self):
        raw = DEEPLY_NESTED
        assert parse_edit_input(raw) is raw


class TestLiveEditor:

    def test_request_write_to_settable_cell(self, graph, inspector):
        score = graph.state(0, label="score")
        assert inspector.request_write("score", "100")
        assert score.value == 100
        assert inspector.get_value("score") == 100

    def test_registry_refreshes_only_through_host_update(self, graph, inspector):
        graph.state(0, label="score")
        inspector.set_value("score", 7)
        event = inspector.get_history()[-1]
        assert (event.cell_name, event.previous_value, event.new_value) == ("score", 0, 7)

    def test_absent_name_returns_false_and_leaves_history_empty(self, graph, inspector):
        assert not inspector.request_write("missing", "1")
        assert inspector.get_history() == []

    def test_derived_cell_is_not_writable(self, graph, inspector, counter_graph):
        assert not inspector.request_write("derivedDouble", "10")
        assert inspector.get_value("derivedDouble") == 6

    def test_host_failure_returns_false(self, graph, inspector):
        def positive(value):
            if value < 0:
                raise ValueError("must be positive")

        graph.state(1, label="size", validator=positive)
        assert not inspector.request_write("size", "-5")
        assert inspector.get_value("size") == 1

    def test_write_raises_taxonomy_errors(self, graph, inspector, counter_graph):
        with pytest.raises(CellNotFoundError):
            inspector.editor.write("missing", 1)
        with pytest.raises(CellNotWritableError):
            inspector.editor.write("derivedDouble", 1)

    def test_host_write_error_keeps_cause(self, graph, inspector):
        def reject(value):
            raise RuntimeError("locked")

        graph.state(1, label="locked", validator=reject)
        with pytest.raises(HostWriteError) as exc_info:
            inspector.editor.write("locked", 2)
        assert isinstance(exc_info.value.cause, RuntimeError)

    def test_write_to_disposed_cell_fails(self, graph, inspector):
        cell = graph.state(1, label="gone")
        graph.dispose(cell)
        assert not inspector.set_value("gone", 2)

    def test_request_write_with_deeply_nested_text_writes_it_literally(self, graph, inspector):
        counter = graph.state(0, label="counter")
        assert inspector.request_write("counter", DEEPLY_NESTED)
        assert counter.value == DEEPLY_NESTED
