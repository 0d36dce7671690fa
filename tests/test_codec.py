"""Tests for the value codec."""
import asyncio
import concurrent.futures
from collections import OrderedDict
from enum import Enum

import pytest

from statelens import AsyncValue
from statelens.codec import (
    AsyncResult,
    Opaque,
    decode,
    dumps,
    encode,
    from_jsonable,
    is_lossless,
    loads,
    value_kind,
)
from statelens.exceptions import DecodeFailure


class Color(Enum):
    RED = "red"


class Unprintable:
    def __str__(self):
        raise RuntimeError("no")


class TestEncodePrimitivesAndCollections:
    """Lossless cases."""

    @pytest.mark.parametrize("value", [None, True, False, 0, -7, 3.5, "", "hello"])
    def test_primitives_pass_through(self, value):
        assert encode(value) == value
        assert type(encode(value)) is type(value)

    def test_nested_collections_round_trip(self):
        value = {"user": {"name": "Agent Smith", "tags": ["a", "b"], "age": 42}, "ok": True}
        assert decode(encode(value)) == value
        assert decode(loads(dumps(encode(value)))) == value

    def test_tuple_becomes_list(self):
        assert encode((1, (2, 3))) == [1, [2, 3]]

    def test_map_keys_coerced_to_str_in_order(self):
        encoded = encode(OrderedDict([(2, "b"), (1, "a")]))
        assert encoded == {"2": "b", "1": "a"}
        assert list(encoded.keys()) == ["2", "1"]

    def test_int_subclass_normalized(self):
        class Score(int):
            pass

        encoded = encode(Score(5))
        assert encoded == 5
        assert type(encoded) is int


class TestEncodeAsync:
    """Three-state wrappers."""

    def test_async_value_with_data(self):
        encoded = encode(AsyncValue.data([1, 2]))
        assert encoded == AsyncResult(has_value=True, has_error=False, is_loading=False, value=[1, 2])

    def test_async_value_loading(self):
        encoded = encode(AsyncValue.loading())
        assert encoded.is_loading
        assert not encoded.has_value
        assert encoded.value is None

    def test_async_value_error_is_stringified(self):
        encoded = encode(AsyncValue.failure(ValueError("boom")))
        assert encoded.has_error
        assert encoded.error == "boom"

    def test_concurrent_future_states(self):
        pending = concurrent.futures.Future()
        assert encode(pending).is_loading

        done = concurrent.futures.Future()
        done.set_result({"x": 1})
        assert encode(done) == AsyncResult(has_value=True, has_error=False, is_loading=False, value={"x": 1})

        failed = concurrent.futures.Future()
        failed.set_exception(RuntimeError("bad"))
        assert encode(failed).error == "bad"

    def test_asyncio_future_cancelled(self):
        loop = asyncio.new_event_loop()
        try:
            future = loop.create_future()
            future.cancel()
            encoded = encode(future)
        finally:
            loop.close()
        assert encoded.has_error
        assert encoded.error == "cancelled"

    def test_async_result_text_round_trip(self):
        encoded = encode(AsyncValue.data({"n": 1}))
        assert loads(dumps(encoded)) == encoded


class TestEncodeOpaque:
    """Fallback and guards."""

    def test_enum_is_opaque(self):
        assert encode(Color.RED) == Opaque("Color.RED")

    def test_custom_object_uses_str(self):
        class Point:
            def __str__(self):
                return "Point(1, 2)"

        assert encode(Point()) == Opaque("Point(1, 2)")

    def test_unprintable_object_does_not_raise(self):
        assert encode(Unprintable()) == Opaque("<unprintable Unprintable>")

    def test_self_referencing_list_hits_depth_guard(self):
        loop = []
        loop.append(loop)
        encoded = encode(loop, max_depth=5)
        depth = 0
        while isinstance(encoded, list):
            encoded = encoded[0]
            depth += 1
        assert isinstance(encoded, Opaque)
        assert depth == 6

    def test_opaque_is_one_way(self):
        encoded = encode({1, 2})
        restored = loads(dumps(encoded))
        assert isinstance(restored, str)
        assert not isinstance(restored, Opaque)


class TestKindsAndLossless:

    @pytest.mark.parametrize("value,kind", [
        (None, 'null'), (True, 'bool'), (1, 'int'), (1.5, 'float'), ("s", 'str'),
        ([1], 'list'), ({"a": 1}, 'dict'), (AsyncValue.loading(), 'async'), (object(), 'opaque'),
    ])
    def test_value_kind(self, value, kind):
        assert value_kind(encode(value)) == kind

    def test_is_lossless(self):
        assert is_lossless(encode({"a": [1, 2.5, "x", None]}))
        assert not is_lossless(encode({"a": [object()]}))
        assert not is_lossless(encode(AsyncValue.data(1)))
        assert not is_lossless(encode(float("nan")))

    def test_from_jsonable_leaves_plain_dicts_alone(self):
        assert from_jsonable({"type": "AsyncValue"}) == {"type": "AsyncValue"}

    def test_loads_rejects_malformed_text(self):
        with pytest.raises(DecodeFailure):
            loads("{not json")

    def test_loads_rejects_too_deeply_nested_text(self):
        with pytest.raises(DecodeFailure):
            loads("[" * 100000 + "]" * 100000)
