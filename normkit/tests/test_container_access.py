from types import SimpleNamespace

import pytest

from normkit import NormalizedData, data_get


def test_exact_key_wins_over_dot_path():
    data = NormalizedData({"date.upload": "2020-01-01", "date": {"upload": "X"}})

    assert data.get("date.upload") == "2020-01-01"
    assert data.get("date\\.upload") == "2020-01-01"
    assert data["date.upload"] == "2020-01-01"


def test_dot_path_descent_and_default():
    data = NormalizedData({"a": {"b": {"c": 123}}})

    assert data.get("a.b.c") == 123
    assert data.get("a.x.c") is None
    assert data.get("a.x.c", "fallback") == "fallback"
    assert data.get("a.b.c.d", 0) == 0
    assert data.a.b.c == 123


def test_escaped_dot_inside_path_segment():
    data = NormalizedData({"files": {"report.pdf": {"size": 10}}})

    assert data.get("files.report\\.pdf.size") == 10
    assert data.get("files.report.pdf.size") is None


def test_exact_key_returns_stored_none():
    data = NormalizedData({"a": None, "a.b": 1})
    assert data.has("a")
    assert data.get("a", "default") is None


def test_path_through_lists():
    data = NormalizedData({"users": [{"name": "ann"}, {"name": "bob"}]})

    assert data.get("users.1.name") == "bob"
    assert data.get("users.5.name", "none") == "none"
    assert isinstance(data.users[0], NormalizedData)


def test_attribute_access_for_missing_and_private_names():
    data = NormalizedData({"present": 1})

    assert data.missing is None
    with pytest.raises(AttributeError):
        data._hidden


def test_integer_and_string_keys_resolve_each_other():
    data = NormalizedData({"1": "one", 2: "two", "items": {"0": {"price": 5}}})

    assert data.get(1) == "one"
    assert data.get("2") == "two"
    assert data.has(2.0)
    assert data.get("items.0.price") == 5
    assert [k for k, _ in data.items()] == ["1", 2, "items"]


def test_exact_key_spelling_is_preferred():
    data = NormalizedData({"0": "text", 0: "number"})

    assert data.get("0") == "text"
    assert data.get(0) == "number"


def test_set_and_unset_use_the_stored_spelling():
    data = NormalizedData({"7": "a"})

    data.set(7, "b")
    data[8] = "c"

    assert data.items() == [("7", "b"), (8, "c")]

    data.unset(7)
    assert data.items() == [(8, "c")]


def test_attribute_access_loses_to_method_names():
    data = NormalizedData({"count": 3, "items": [1, 2], "name": "x"})

    assert callable(data.count)
    assert data.count() == 3
    assert data["count"] == 3
    assert data.get("items") == [1, 2]
    assert data.name == "x"


def test_set_wraps_and_never_creates_paths():
    data = NormalizedData()

    data.set("a.b", {"c": 1})
    data["list"] = [{"x": 1}, 2]

    assert data.all().keys() == {"a.b", "list"}
    assert isinstance(data.get("a.b"), NormalizedData)
    assert data.get("a\\.b.c") == 1
    assert data.get("a.b.c") is None
    assert isinstance(data.get("list")[0], NormalizedData)
    assert data.get("list.1") == 2


def test_unset_and_has():
    data = NormalizedData({"a": 1, "b": {"c": 2}})

    assert "b.c" in data
    assert data.has("a")
    assert not data.has("z")

    data.unset("a")
    del data["missing"]
    del data["b"]

    assert len(data) == 0
    assert data.is_empty()


def test_iteration_yields_values_in_order():
    data = NormalizedData({"x": 1, "y": 2})

    assert list(data) == [1, 2]
    assert data.items() == [("x", 1), ("y", 2)]
    assert len(data) == 2


def test_nested_objects_are_wrapped_at_construction():
    data = NormalizedData({"obj": SimpleNamespace(inner={"v": 5})})

    assert isinstance(data.obj, NormalizedData)
    assert data.get("obj.inner.v") == 5


def test_equality_and_repr():
    data = NormalizedData({"a": [1, 2]})

    assert data == NormalizedData({"a": [1, 2]})
    assert data == {"a": [1, 2]}
    assert data != {"a": [2, 1]}
    assert repr(data) == "NormalizedData({'a': [1, 2]})"


def test_data_get_on_plain_values():
    assert data_get({"a": {"b": 1}}, "a.b") == 1
    assert data_get([{"a": 1}], "0.a") == 1
    assert data_get(SimpleNamespace(a=SimpleNamespace(b=2)), "a.b") == 2
    assert data_get("scalar", "a", "d") == "d"
    assert data_get({"a": 1}, None) == {"a": 1}
