import json
from datetime import date
from types import SimpleNamespace

from normkit import NormalizedData


def test_plain_round_trip_of_nested_mapping():
    original = {"a": {"b": 1, "c": [1, 2, {"d": None}]}, "e": "x", "f": True}

    data = NormalizedData(original)

    assert data.to_plain() == original
    assert isinstance(data.get("a.c")[2], NormalizedData)


def test_list_shaped_containers_become_lists():
    assert NormalizedData({0: "a", 1: "b"}).to_plain() == ["a", "b"]
    assert NormalizedData({1: "a", 0: "b"}).to_plain() == {1: "a", 0: "b"}
    assert NormalizedData().to_plain() == {}


def test_projection_uses_attribute_objects():
    data = NormalizedData({"user": {"name": "ann", "tags": ["a", "b"]}, "rows": [{"x": 1}], 5: "five"})

    projected = data.to_projection()

    assert isinstance(projected, SimpleNamespace)
    assert projected.user.name == "ann"
    assert projected.user.tags == ["a", "b"]
    assert projected.rows[0].x == 1
    assert getattr(projected, "5") == "five"
    assert data.to_object() == projected


def test_to_json_compact_and_pretty():
    data = NormalizedData({"a": 1, "b": [1, 2], "k": "é"})

    assert data.to_json() == '{"a":1,"b":[1,2],"k":"é"}'
    assert data.to_json(pretty=True) == json.dumps({"a": 1, "b": [1, 2], "k": "é"}, indent=4, ensure_ascii=False)


def test_to_json_encodes_rich_scalars_and_integer_keys():
    assert NormalizedData({"d": date(2024, 1, 2)}).to_json() == '{"d":"2024-01-02"}'
    assert NormalizedData({1: "a", 3: "b"}).to_json() == '{"1":"a","3":"b"}'
    assert NormalizedData({"b": b"hi"}).to_json() == '{"b":{"__bytes_b64__":"aGk="}}'


def test_string_digit_keys_round_trip_unchanged():
    assert NormalizedData({"0": "a", "1": "b"}).to_plain() == {"0": "a", "1": "b"}
    assert NormalizedData({"0": "a"}).to_json() == '{"0":"a"}'
    assert NormalizedData({"2024": "x", "name": "y"}).to_plain() == {"2024": "x", "name": "y"}

    projected = NormalizedData({"0": "a"}).to_projection()
    assert isinstance(projected, SimpleNamespace)
    assert getattr(projected, "0") == "a"
