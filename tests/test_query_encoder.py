import json

from external_provider.exchange import ExchangeError, ExchangeErrorKind, encode_query
from external_provider.exchange.query import drop_empty_values


def test_encode_query_produces_utf8_json_object():
    encoded = encode_query({"value": "pizza", "topping": "piña"})

    assert isinstance(encoded, bytes)
    assert json.loads(encoded.decode("utf-8")) == {"value": "pizza", "topping": "piña"}
    assert "piña".encode("utf-8") in encoded


def test_encode_query_drops_empty_values():
    encoded = encode_query({"value": "pizza", "blank": ""})

    assert json.loads(encoded) == {"value": "pizza"}


def test_encode_query_without_query_sends_empty_object():
    assert encode_query(None) == b"{}"
    assert encode_query({"only": ""}) == b"{}"


def test_encode_query_is_deterministic():
    first = encode_query({"b": "2", "a": "1"})
    second = encode_query({"a": "1", "b": "2"})

    assert first == second == b'{"a":"1","b":"2"}'


def test_encode_query_reports_unencodable_mapping():
    outcome = encode_query({"value": "\ud800"})

    assert isinstance(outcome, ExchangeError)
    assert outcome.kind is ExchangeErrorKind.RESULT_MALFORMED
    assert outcome.summary == "Query Handling Failed"


def test_drop_empty_values_keeps_whitespace():
    assert drop_empty_values({"a": " ", "b": ""}) == {"a": " "}
