"""NormalizedData: a path-addressable wrapper around normalized data.

Access modes:
- attribute access (``data.user``)
- index access (``data["user"]``)
- dot-path access (``data["user.profile.last"]``)

Key resolution runs in two phases. An exact key always wins, so a literal
key such as ``"date.upload"`` is found before any nesting is considered.
Only when no exact key exists is the key split on unescaped dots and walked
one level per segment. ``"date\\.upload"`` addresses the literal key.

Nested mappings and object-like values are wrapped eagerly, at construction
and on every ``set``. Sequences are kept as lists whose composite elements
are wrapped. Derived operations return new instances; only ``set``,
``unset`` and ``forget`` mutate in place.
"""

from __future__ import annotations

import functools
import inspect
import json
from types import SimpleNamespace
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from normkit.utils.json_safe import to_jsonable

from .comparison import MISSING, loose_compare, loose_equals, operator_for_where, to_number
from .conversion import is_mapping, is_object_like, is_scalar, is_sequence, object_to_mapping
from .exceptions import InvalidInputError, NonNumericValueError, StructureTooDeepError
from .paths import Key, canonical_key, derived_key, is_list_keys, key_candidates, split_path, unescape_segment

MAX_DEPTH = 128


def _check_depth(depth: int) -> None:
    if depth > MAX_DEPTH:
        raise StructureTooDeepError(f"nesting deeper than {MAX_DEPTH} levels (cyclic structure?)")


def _positional_arity(fn: Callable[..., Any]) -> int:
    """Number of positional parameters ``fn`` accepts, -1 when unbounded."""

    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return 1
    count = 0
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return -1
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            count += 1
    return count


def _invoke(fn: Callable[..., Any], *args: Any) -> Any:
    """Call ``fn`` with as many of ``args`` as it accepts (value, key, ...)."""

    arity = _positional_arity(fn)
    if arity < 0:
        return fn(*args)
    return fn(*args[:arity])


def _key_list(keys: Tuple[Any, ...]) -> List[Any]:
    if len(keys) == 1 and (is_sequence(keys[0]) or isinstance(keys[0], NormalizedData)):
        keys = tuple(keys[0])
    return list(keys)


def _items_of(value: Any) -> Dict[Any, Any]:
    """Read the top-level items of a constructor/merge argument."""

    if value is None:
        return {}
    if isinstance(value, NormalizedData):
        return dict(value._items)
    if is_mapping(value):
        return dict(value)
    if is_sequence(value):
        return dict(enumerate(value))
    if is_object_like(value):
        return object_to_mapping(value)
    raise InvalidInputError(f"cannot build NormalizedData from {type(value).__name__}")


def _wrap(value: Any, depth: int = 0) -> Any:
    """Wrap a value for storage.

    Containers are kept; mappings and object-like values become containers;
    sequences become lists of wrapped elements; scalars are stored as-is.
    """

    _check_depth(depth)
    if isinstance(value, NormalizedData) or is_scalar(value):
        return value
    if is_mapping(value):
        return NormalizedData._build(dict(value), depth + 1)
    if is_sequence(value):
        return [_wrap(v, depth + 1) for v in value]
    if is_object_like(value):
        return NormalizedData._build(object_to_mapping(value), depth + 1)
    raise InvalidInputError(f"unsupported value of type {type(value).__name__}")


def _stored_key(items: Any, key: Any) -> Any:
    """The key ``key`` is stored under (exact spelling first), else MISSING."""

    for candidate in key_candidates(key):
        try:
            if candidate in items:
                return candidate
        except TypeError:
            return MISSING
    return MISSING


def _child(node: Any, segment: Any) -> Tuple[bool, Any]:
    """Look up a single key one level down.

    ``"0"`` and ``0`` address the same entry, but an exact match is preferred.
    """

    if isinstance(node, NormalizedData):
        node = node._items
    if is_mapping(node):
        stored = _stored_key(node, segment)
        if stored is MISSING:
            return False, None
        return True, node[stored]
    if isinstance(node, (list, tuple)):
        index = canonical_key(segment)
        if type(index) is int and 0 <= index < len(node):
            return True, node[index]
        return False, None
    if is_object_like(node):
        return _child(object_to_mapping(node), segment)
    return False, None


def _locate(root: Any, key: Any) -> Tuple[bool, Any]:
    """Two-phase resolution: exact key first, then the dot-path walk."""

    found, value = _child(root, key)
    if found:
        return True, value

    segments = split_path(key if isinstance(key, str) else str(canonical_key(key)))
    if len(segments) == 1:
        return _child(root, unescape_segment(segments[0]))

    current = root
    for segment in segments:
        found, current = _child(current, unescape_segment(segment))
        if not found:
            return False, None
    return True, current


def data_get(target: Any, key: Any, default: Any = None) -> Any:
    """Resolve ``key`` (exact key or dot-path) against any element.

    ``key=None`` returns the target itself. Object-like targets are read
    through their mapping conversion. Scalars never resolve.
    """

    if key is None:
        return target
    if isinstance(target, NormalizedData):
        return target.get(key, default)
    if is_mapping(target) or isinstance(target, (list, tuple)):
        found, value = _locate(target, key)
        return value if found else default
    if is_object_like(target):
        found, value = _locate(object_to_mapping(target), key)
        return value if found else default
    return default


def _value_retriever(value: Any) -> Callable[[Any, Any], Any]:
    """Callable -> itself; anything else -> dot-path lookup (None -> identity)."""

    if callable(value):
        return lambda item, key=None: _invoke(value, item, key)
    return lambda item, key=None: data_get(item, value)


def _to_plain(value: Any, depth: int = 0) -> Any:
    _check_depth(depth)
    if isinstance(value, NormalizedData):
        keys = list(value._items)
        if is_list_keys(keys):
            return [_to_plain(v, depth + 1) for v in value._items.values()]
        return {k: _to_plain(v, depth + 1) for k, v in value._items.items()}
    if is_mapping(value):
        return {k: _to_plain(v, depth + 1) for k, v in value.items()}
    if is_sequence(value):
        return [_to_plain(v, depth + 1) for v in value]
    if is_object_like(value):
        return _to_plain(object_to_mapping(value), depth + 1)
    return value


def _to_projection(value: Any, depth: int = 0) -> Any:
    _check_depth(depth)
    if isinstance(value, NormalizedData):
        return _project_items(value._items, depth)
    if is_mapping(value):
        return _project_items(dict(value.items()), depth)
    if is_sequence(value):
        return [_to_projection(v, depth + 1) for v in value]
    if is_object_like(value):
        return _to_projection(object_to_mapping(value), depth + 1)
    return value


def _project_items(items: Dict[Key, Any], depth: int) -> Any:
    if is_list_keys(list(items)):
        return [_to_projection(v, depth + 1) for v in items.values()]
    return SimpleNamespace(**{str(k): _to_projection(v, depth + 1) for k, v in items.items()})


def _numbers(values: List[Any], operation: str) -> List[Any]:
    numbers: List[Any] = []
    for v in values:
        try:
            numbers.append(to_number(v))
        except ValueError:
            raise NonNumericValueError(
                f"{operation}() cannot use non-numeric value of type {type(v).__name__}"
            ) from None
    return numbers


class NormalizedData:
    """Path-addressable container of normalized values.

    Iteration yields values in insertion order; ``items()`` yields
    ``(key, value)`` pairs; ``in`` and ``has`` use the same two-phase
    resolution as ``get``. Missing keys resolve to a default, never raise.

    Attribute access only reaches keys that do not share a name with a
    method: ``data.count`` is the method. Use ``get`` or ``data["count"]``
    for such keys.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Any = None) -> None:
        self._items: Dict[Key, Any] = self._wrap_items(_items_of(items), 0)

    @classmethod
    def _build(cls, items: Dict[Any, Any], depth: int) -> "NormalizedData":
        instance = cls.__new__(cls)
        instance._items = cls._wrap_items(items, depth)
        return instance

    @classmethod
    def _new(cls, items: Dict[Any, Any]) -> "NormalizedData":
        return cls._build(items, 0)

    @staticmethod
    def _wrap_items(items: Dict[Any, Any], depth: int) -> Dict[Key, Any]:
        _check_depth(depth)
        return {k: _wrap(v, depth) for k, v in items.items()}

    # -- access ---------------------------------------------------------

    def get(self, key: Any, default: Any = None) -> Any:
        """Return the value under an exact key or dot-path, else ``default``.

        Returned values are the stored (wrapped) values; nothing is re-wrapped.
        """

        found, value = _locate(self, key)
        return value if found else default

    def has(self, key: Any) -> bool:
        found, _ = _locate(self, key)
        return found

    def set(self, key: Any, value: Any) -> None:
        """Store ``value`` under ``key``. Dot-paths are never created.

        An entry already stored under an equivalent spelling (``"0"`` for
        ``0``) is replaced in place; otherwise the key is stored as given.
        """

        stored = _stored_key(self._items, key)
        self._items[key if stored is MISSING else stored] = _wrap(value)

    def unset(self, key: Any) -> None:
        stored = _stored_key(self._items, key)
        if stored is not MISSING:
            del self._items[stored]

    def all(self) -> Dict[Key, Any]:
        return dict(self._items)

    def items(self) -> List[Tuple[Key, Any]]:
        return list(self._items.items())

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get(name)

    def __getitem__(self, key: Any) -> Any:
        return self.get(key)

    def __setitem__(self, key: Any, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: Any) -> None:
        self.unset(key)

    def __contains__(self, key: Any) -> bool:
        return self.has(key)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, NormalizedData):
            return self.to_plain() == other.to_plain()
        if is_mapping(other) or isinstance(other, list):
            return self.to_plain() == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_plain()!r})"

    # -- transformation -------------------------------------------------

    def map(self, fn: Callable[..., Any]) -> "NormalizedData":
        """Apply ``fn(value, key)`` to each value.

        A result that is itself a NormalizedData is mapped again with ``fn``,
        so nested containers are transformed all the way down.
        """

        result: Dict[Key, Any] = {}
        for key, value in self._items.items():
            mapped = _invoke(fn, value, key)
            if isinstance(mapped, NormalizedData):
                mapped = mapped.map(fn)
            result[key] = mapped
        return self._new(result)

    def flat_map(self, fn: Callable[..., Any]) -> "NormalizedData":
        # One level only: callback results are not mapped again.
        mapped = {key: _invoke(fn, value, key) for key, value in self._items.items()}
        return self._new(mapped).collapse()

    def collapse(self) -> "NormalizedData":
        """Concatenate the list-like values into one list, renumbered."""

        merged: List[Any] = []
        for value in self._items.values():
            if isinstance(value, NormalizedData):
                merged.extend(value._items.values())
            elif isinstance(value, list):
                merged.extend(value)
        return self._new(dict(enumerate(merged)))

    def pluck(self, value: Any, key: Any = None) -> "NormalizedData":
        """Resolve ``value`` (dot-path) in every element.

        Results are numbered 0..n-1, or keyed by the resolved ``key`` path.
        Elements that cannot be resolved contribute ``None``.
        """

        result: Dict[Key, Any] = {}
        for index, item in enumerate(self._items.values()):
            resolved = data_get(item, value)
            if key is None:
                result[index] = resolved
            else:
                result[derived_key(data_get(item, key))] = resolved
        return self._new(result)

    def filter(self, fn: Optional[Callable[..., Any]] = None) -> "NormalizedData":
        if fn is None:
            return self._new({k: v for k, v in self._items.items() if v})
        return self._new({k: v for k, v in self._items.items() if _invoke(fn, v, k)})

    def reject(self, fn: Any = True) -> "NormalizedData":
        """Inverse of ``filter``; a non-callable drops values loosely equal to it."""

        if callable(fn):
            return self._new({k: v for k, v in self._items.items() if not _invoke(fn, v, k)})
        return self._new({k: v for k, v in self._items.items() if not loose_equals(v, fn)})

    def where(self, key: Any, operator: Any = MISSING, value: Any = MISSING) -> "NormalizedData":
        predicate = operator_for_where(data_get, key, operator, value)
        return self.filter(predicate)

    def unique(self, key: Any = None) -> "NormalizedData":
        """Drop repeated values, keeping the first occurrence and its key.

        Without ``key`` values are compared structurally. With a key or
        callable, the resolved values are compared loosely.
        """

        kept: Dict[Key, Any] = {}
        if key is None:
            seen_plain: List[Any] = []
            for k, v in self._items.items():
                plain = (type(v), _to_plain(v))
                if plain in seen_plain:
                    continue
                seen_plain.append(plain)
                kept[k] = v
            return self._new(kept)

        retrieve = _value_retriever(key)
        seen: List[Any] = []
        for k, v in self._items.items():
            ident = retrieve(v, k)
            if any(loose_equals(ident, s) for s in seen):
                continue
            seen.append(ident)
            kept[k] = v
        return self._new(kept)

    def except_(self, *keys: Any) -> "NormalizedData":
        drop = {_stored_key(self._items, k) for k in _key_list(keys)}
        return self._new({k: v for k, v in self._items.items() if k not in drop})

    def only(self, *keys: Any) -> "NormalizedData":
        stored = (_stored_key(self._items, k) for k in _key_list(keys))
        return self._new({k: self._items[k] for k in stored if k is not MISSING})

    def forget(self, *keys: Any) -> "NormalizedData":
        """Remove exact top-level keys in place."""

        for key in _key_list(keys):
            self.unset(key)
        return self

    def group_by(self, key: Any, preserve_keys: bool = False) -> "NormalizedData":
        """Bucket values by their resolved group key.

        A callable may return a list of group keys to place one value in
        several buckets. Booleans become ``0``/``1`` and ``None`` becomes ``""``.
        """

        retrieve = _value_retriever(key)
        groups: Dict[Key, Dict[Key, Any]] = {}
        for k, v in self._items.items():
            group_keys = retrieve(v, k)
            if not isinstance(group_keys, (list, tuple)):
                group_keys = [group_keys]
            for group_key in group_keys:
                bucket = groups.setdefault(derived_key(group_key), {})
                if preserve_keys:
                    bucket[k] = v
                else:
                    bucket[len(bucket)] = v
        return self._new({g: self._new(bucket) for g, bucket in groups.items()})

    def key_by(self, key: Any) -> "NormalizedData":
        retrieve = _value_retriever(key)
        return self._new({derived_key(retrieve(v, k)): v for k, v in self._items.items()})

    def merge(self, other: Any) -> "NormalizedData":
        """Shallow union. String keys from ``other`` overwrite; integer keys append."""

        merged: Dict[Key, Any] = {}
        next_index = 0
        for source in (self._items, _items_of(other)):
            for k, v in source.items():
                if type(k) is int:
                    merged[next_index] = v
                    next_index += 1
                else:
                    merged[k] = v
        return self._new(merged)

    def sort(self, fn: Optional[Callable[[Any, Any], int]] = None) -> "NormalizedData":
        """Stable sort by value, keeping keys. ``fn(a, b)`` is a comparator."""

        compare = fn or loose_compare
        ordered = sorted(
            self._items.items(),
            key=functools.cmp_to_key(lambda a, b: compare(a[1], b[1])),
        )
        return self._new(dict(ordered))

    def sort_by(self, key: Any, descending: bool = False) -> "NormalizedData":
        retrieve = _value_retriever(key)
        decorated = [(k, retrieve(v, k)) for k, v in self._items.items()]
        decorated.sort(key=functools.cmp_to_key(lambda a, b: loose_compare(a[1], b[1])), reverse=descending)
        return self._new({k: self._items[k] for k, _ in decorated})

    def sort_by_desc(self, key: Any) -> "NormalizedData":
        return self.sort_by(key, descending=True)

    def values(self) -> "NormalizedData":
        return self._new(dict(enumerate(self._items.values())))

    def keys(self) -> "NormalizedData":
        return self._new(dict(enumerate(self._items.keys())))

    def chunk(self, size: int, preserve_keys: bool = True) -> "NormalizedData":
        if size <= 0:
            return self._new({})
        entries = list(self._items.items())
        chunks: Dict[Key, Any] = {}
        for index, start in enumerate(range(0, len(entries), size)):
            part = entries[start : start + size]
            if preserve_keys:
                chunks[index] = self._new(dict(part))
            else:
                chunks[index] = self._new(dict(enumerate(v for _, v in part)))
        return self._new(chunks)

    def chunk_by_key(self, key: Any) -> "NormalizedData":
        """Split into runs of consecutive values sharing the same resolved key."""

        retrieve = _value_retriever(key)
        runs: List[Dict[Key, Any]] = []
        previous: Any = MISSING
        for k, v in self._items.items():
            current = retrieve(v, k)
            if previous is MISSING or not loose_equals(current, previous):
                runs.append({})
            runs[-1][k] = v
            previous = current
        return self._new({i: self._new(run) for i, run in enumerate(runs)})

    def tap(self, fn: Callable[..., Any]) -> "NormalizedData":
        _invoke(fn, self)
        return self

    def when(
        self,
        condition: Any,
        fn: Optional[Callable[..., Any]] = None,
        default: Optional[Callable[..., Any]] = None,
    ) -> Any:
        """Return ``fn(self, condition)`` when the condition holds, else ``default(...)`` or self."""

        if callable(condition):
            condition = _invoke(condition, self)
        if condition and fn is not None:
            result = _invoke(fn, self, condition)
            return self if result is None else result
        if not condition and default is not None:
            result = _invoke(default, self, condition)
            return self if result is None else result
        return self

    def unless(
        self,
        condition: Any,
        fn: Optional[Callable[..., Any]] = None,
        default: Optional[Callable[..., Any]] = None,
    ) -> Any:
        if callable(condition):
            condition = _invoke(condition, self)
        return self.when(not condition, fn, default)

    # -- queries --------------------------------------------------------

    def first(self, fn: Optional[Callable[..., Any]] = None, default: Any = None) -> Any:
        for k, v in self._items.items():
            if fn is None or _invoke(fn, v, k):
                return v
        return default

    def last(self, fn: Optional[Callable[..., Any]] = None, default: Any = None) -> Any:
        for k, v in reversed(list(self._items.items())):
            if fn is None or _invoke(fn, v, k):
                return v
        return default

    def first_where(self, key: Any, operator: Any = MISSING, value: Any = MISSING) -> Any:
        predicate = operator_for_where(data_get, key, operator, value)
        return self.first(predicate)

    def each(self, fn: Callable[..., Any]) -> "NormalizedData":
        """Call ``fn(value, key)`` in order; a return of exactly ``False`` stops."""

        for k, v in list(self._items.items()):
            if _invoke(fn, v, k) is False:
                break
        return self

    def every(self, key: Any, operator: Any = MISSING, value: Any = MISSING) -> bool:
        if operator is MISSING and value is MISSING:
            retrieve = _value_retriever(key)
            for k, v in self._items.items():
                if not retrieve(v, k):
                    return False
            return True
        predicate = operator_for_where(data_get, key, operator, value)
        return all(predicate(v) for v in self._items.values())

    def contains(self, key: Any, operator: Any = MISSING, value: Any = MISSING) -> bool:
        if operator is MISSING and value is MISSING:
            if callable(key):
                return any(_invoke(key, v, k) for k, v in self._items.items())
            return any(loose_equals(v, key) for v in self._items.values())
        predicate = operator_for_where(data_get, key, operator, value)
        return any(predicate(v) for v in self._items.values())

    def count(self, key: Any = MISSING, operator: Any = MISSING, value: Any = MISSING) -> int:
        if key is MISSING:
            return len(self._items)
        return len(self.where(key, operator, value))

    def is_empty(self) -> bool:
        return not self._items

    def is_not_empty(self) -> bool:
        return bool(self._items)

    def reduce(self, fn: Callable[..., Any], initial: Any = None) -> Any:
        carry = initial
        for k, v in self._items.items():
            carry = _invoke(fn, carry, v, k)
        return carry

    # -- aggregates -----------------------------------------------------

    def _resolved(self, key: Any) -> List[Any]:
        retrieve = _value_retriever(key)
        return [r for r in (retrieve(v, k) for k, v in self._items.items()) if r is not None]

    def sum(self, key: Any = None) -> Any:
        return sum(_numbers(self._resolved(key), "sum"), 0)

    def avg(self, key: Any = None) -> Any:
        numbers = _numbers(self._resolved(key), "avg")
        if not numbers:
            return None
        return sum(numbers, 0) / len(numbers)

    average = avg

    def min(self, key: Any = None) -> Any:
        values = self._resolved(key)
        if not values:
            return None
        return min(values, key=functools.cmp_to_key(loose_compare))

    def max(self, key: Any = None) -> Any:
        values = self._resolved(key)
        if not values:
            return None
        return max(values, key=functools.cmp_to_key(loose_compare))

    # -- serialization --------------------------------------------------

    def to_plain(self) -> Any:
        """Unwrap recursively into plain dicts and lists.

        Containers keyed exactly ``0..n-1`` become lists.
        """

        return _to_plain(self)

    def to_projection(self) -> Any:
        """Like ``to_plain`` but mapping nodes become ``SimpleNamespace`` objects."""

        return _to_projection(self)

    to_object = to_projection

    def to_json(self, pretty: bool = False) -> str:
        if pretty:
            return json.dumps(self.to_plain(), indent=4, ensure_ascii=False, default=to_jsonable)
        return json.dumps(self.to_plain(), separators=(",", ":"), ensure_ascii=False, default=to_jsonable)
