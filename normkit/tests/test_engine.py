import json
from collections import OrderedDict, namedtuple
from dataclasses import dataclass
from types import SimpleNamespace

import pytest

from normkit import InvalidInputError, NormalizationConfig, NormalizedData, Normalizer, StructureTooDeepError, normalize


def test_scalars_are_classified():
    n = Normalizer()

    assert n.normalize("  x ") == "x"
    assert n.normalize("n/a") is None
    assert n.normalize(None) is None
    assert n.normalize(42) == 42
    assert n.classify(" ") is None


def test_end_to_end_document():
    result = normalize({"item": "  ", "date.upload": "2024-01-01", "nested": {"x": "n/a", "y": "value"}})

    assert isinstance(result, NormalizedData)
    assert result.get("item") is None
    assert result.get("date.upload") == "2024-01-01"
    assert result.get("nested.y") == "value"
    assert result.get("nested.x") is None
    assert isinstance(result.nested, NormalizedData)

    assert json.loads(result.to_json()) == {
        "item": None,
        "date.upload": "2024-01-01",
        "nested": {"x": None, "y": "value"},
    }


def test_key_order_is_preserved():
    result = normalize({"b": " 1 ", "a": "2", "c": "-"})
    assert [k for k, _ in result.items()] == ["b", "a", "c"]
    assert list(result) == ["1", "2", None]


def test_sequences_are_wrapped_with_index_keys():
    result = normalize([" a ", "", {"k": "none"}])

    assert isinstance(result, NormalizedData)
    assert result.get(0) == "a"
    assert result.get("1") is None
    assert result.get("2.k") is None
    assert result.to_plain() == ["a", None, {"k": None}]


def test_object_like_inputs_are_converted():
    @dataclass
    class Profile:
        name: str
        note: str

    class WithToDict:
        def to_dict(self):
            return {"id": " 7 ", "profile": Profile(name=" Ann ", note="N/A")}

    result = normalize(WithToDict())

    assert result.get("id") == "7"
    assert result.get("profile.name") == "Ann"
    assert result.get("profile.note") is None


def test_plain_objects_and_namedtuples():
    Point = namedtuple("Point", "x y")
    obj = SimpleNamespace(point=Point(" 1", "null"), _private="hidden")

    result = normalize(obj)

    assert result.to_plain() == {"point": {"x": "1", "y": None}}


def test_config_is_applied_recursively():
    cfg = NormalizationConfig(na_match_mode="exact", na_values=["missing"])
    result = Normalizer(cfg).normalize({"a": {"b": ["missing", "n/a", "  "]}})

    assert result.to_plain() == {"a": {"b": [None, "n/a", None]}}


def test_normalize_array_returns_unwrapped_top_level():
    n = Normalizer()

    top = n.normalize_array({"a": " x ", "b": {"c": "-"}})
    assert isinstance(top, dict)
    assert top["a"] == "x"
    assert isinstance(top["b"], NormalizedData)
    assert top["b"].c is None

    assert n.normalize_array(["", " y "]) == [None, "y"]


def test_normalize_object_returns_dict():
    out = Normalizer().normalize_object(SimpleNamespace(a=" 1 ", b=""))
    assert out == {"a": "1", "b": None}


def test_normalize_collection_keeps_the_collection_type():
    n = Normalizer()

    od = n.normalize_collection(OrderedDict([("a", " x "), ("b", "n/a")]))
    assert isinstance(od, OrderedDict)
    assert list(od.items()) == [("a", "x"), ("b", None)]

    assert n.normalize_collection((" a ", "")) == ("a", None)
    assert n.normalize_collection([" a "]) == ["a"]

    wrapped = n.normalize_collection(NormalizedData({"k": " v ", "z": "none"}))
    assert isinstance(wrapped, NormalizedData)
    assert wrapped.to_plain() == {"k": "v", "z": None}


def test_normalize_collection_rejects_scalars():
    with pytest.raises(InvalidInputError):
        Normalizer().normalize_collection("text")


def test_unsupported_values_raise_invalid_input():
    with pytest.raises(InvalidInputError):
        normalize(lambda: None)

    with pytest.raises(InvalidInputError):
        Normalizer().normalize_array(3)


def test_cyclic_structures_are_rejected():
    data = {"name": "loop"}
    data["self"] = data

    with pytest.raises(StructureTooDeepError):
        normalize(data)


def test_input_is_not_mutated():
    raw = {"a": "  ", "b": [" x "]}
    normalize(raw)
    assert raw == {"a": "  ", "b": [" x "]}
