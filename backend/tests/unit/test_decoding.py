"""Unit tests for feed payload decoding"""

import json

import pytest

from orderstream.errors import DecodeError
from orderstream.workers.decoding import decode_orders

from conftest import build_order


def dump(value) -> bytes:
    return json.dumps(value).encode("utf-8")


class TestDecodeOrders:
    """Array first, then single object"""

    def test_array_of_orders(self):
        orders = [build_order("uid1"), build_order("uid2")]
        payload = dump([o.model_dump(mode="json") for o in orders])
        decoded = decode_orders(payload)
        assert [o.order_uid for o in decoded] == ["uid1", "uid2"]

    def test_single_object_wrapped_in_list(self):
        payload = build_order("uid1").model_dump_json().encode("utf-8")
        decoded = decode_orders(payload)
        assert len(decoded) == 1
        assert decoded[0].order_uid == "uid1"

    def test_single_object_equals_one_element_array(self):
        order = build_order("uid1")
        single = decode_orders(order.model_dump_json().encode("utf-8"))
        array = decode_orders(dump([order.model_dump(mode="json")]))
        assert single == array

    def test_nested_values_decoded(self):
        decoded = decode_orders(build_order().model_dump_json().encode("utf-8"))[0]
        assert decoded.payment.amount == 1817
        assert decoded.items[0].rid == "ab4219087a764ae0btest"
        assert decoded.date_created.tzinfo is not None

    def test_missing_fields_take_zero_values(self):
        decoded = decode_orders(dump({"order_uid": "only-uid"}))
        assert decoded[0].order_uid == "only-uid"
        assert decoded[0].items == []
        assert decoded[0].payment.amount == 0

    def test_offset_timestamp_normalized_to_utc(self):
        decoded = decode_orders(dump({"order_uid": "x", "date_created": "2021-11-26T09:22:19+03:00"}))
        assert decoded[0].date_created.isoformat() == "2021-11-26T06:22:19+00:00"

    @pytest.mark.parametrize("payload", [
        b"not json",
        b"",
        b"[]",
        b"42",
        b'"a string"',
        b'{"order_uid": 5, "items": "nope"}',
        b'[{"order_uid": "ok"}, 7]',
    ])
    def test_malformed_payloads(self, payload):
        with pytest.raises(DecodeError):
            decode_orders(payload)
