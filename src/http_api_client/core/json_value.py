"""
Structural JSON value for response payloads.

Response bodies are not bound to a schema: a client may talk to any API.
JsonNode wraps a decoded JSON document as a tagged value
(null/boolean/number/string/array/object) with lookups that return None
instead of raising when a key, index or path is missing.

Example:
    >>> node = JsonNode.parse('{"error": {"title": "Not allowed"}}')
    >>> node.select("error.title").as_str()
    'Not allowed'
    >>> node.select("error.detail") is None
    True
"""

import json
import re
from enum import Enum
from typing import Any, Iterator, List, Optional, Union

from .exceptions import InvalidPayloadError


class JsonKind(str, Enum):
    """Kinds of JSON values."""
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


_PATH_TOKEN = re.compile(r"([^.\[\]]+)|\[(\d+)\]")


def _kind_of(value: Any) -> JsonKind:
    if value is None:
        return JsonKind.NULL
    # bool проверяем раньше int: bool - подкласс int
    if isinstance(value, bool):
        return JsonKind.BOOLEAN
    if isinstance(value, (int, float)):
        return JsonKind.NUMBER
    if isinstance(value, str):
        return JsonKind.STRING
    if isinstance(value, list):
        return JsonKind.ARRAY
    if isinstance(value, dict):
        return JsonKind.OBJECT
    raise TypeError(f"Not a JSON value: {type(value).__name__}")


class JsonNode:
    """
    Read-only view over one decoded JSON value.

    Children are wrapped on access, so building a node is O(1) regardless of
    document size.
    """

    __slots__ = ("_value", "_kind")

    def __init__(self, value: Any):
        self._kind = _kind_of(value)
        self._value = value

    @classmethod
    def parse(cls, text: Union[str, bytes]) -> "JsonNode":
        """
        Decode JSON text.

        Raises:
            InvalidPayloadError: text is not valid JSON
        """
        try:
            return cls(json.loads(text))
        except (ValueError, TypeError) as e:
            raw = text.decode("utf-8", "replace") if isinstance(text, bytes) else str(text)
            raise InvalidPayloadError(f"Invalid JSON payload ({e})", raw_body=raw) from e

    @property
    def kind(self) -> JsonKind:
        return self._kind

    @property
    def is_null(self) -> bool:
        return self._kind is JsonKind.NULL

    @property
    def is_object(self) -> bool:
        return self._kind is JsonKind.OBJECT

    @property
    def is_array(self) -> bool:
        return self._kind is JsonKind.ARRAY

    # ==================== Navigation ====================

    def get(self, key: str) -> Optional["JsonNode"]:
        """Child of an object by key; None for missing keys or non-objects."""
        if self._kind is not JsonKind.OBJECT or key not in self._value:
            return None
        return JsonNode(self._value[key])

    def item(self, index: int) -> Optional["JsonNode"]:
        """Element of an array; None when out of range or not an array."""
        if self._kind is not JsonKind.ARRAY:
            return None
        if -len(self._value) <= index < len(self._value):
            return JsonNode(self._value[index])
        return None

    def select(self, path: str) -> Optional["JsonNode"]:
        """
        Follow a dotted path with optional array indices.

        Args:
            path: e.g. "error.title" or "items[0].id"

        Returns:
            The node at the path, or None if any step is missing.
        """
        node: Optional[JsonNode] = self
        for key, index in _PATH_TOKEN.findall(path):
            if node is None:
                return None
            node = node.get(key) if key else node.item(int(index))
        return node

    def value_str(self, key: str) -> Optional[str]:
        """
        Scalar child of an object as text.

        Strings come back as is, numbers and booleans in their JSON
        spelling; null, containers and missing keys give None.
        """
        child = self.get(key)
        return child.as_str() if child is not None else None

    # ==================== Conversion ====================

    def as_str(self) -> Optional[str]:
        if self._kind is JsonKind.STRING:
            return self._value
        if self._kind in (JsonKind.NUMBER, JsonKind.BOOLEAN):
            return json.dumps(self._value)
        return None

    def as_int(self) -> Optional[int]:
        if self._kind is JsonKind.NUMBER and float(self._value).is_integer():
            return int(self._value)
        return None

    def as_float(self) -> Optional[float]:
        if self._kind is JsonKind.NUMBER:
            return float(self._value)
        return None

    def as_bool(self) -> Optional[bool]:
        if self._kind is JsonKind.BOOLEAN:
            return self._value
        return None

    def keys(self) -> List[str]:
        if self._kind is JsonKind.OBJECT:
            return list(self._value.keys())
        return []

    def to_python(self) -> Any:
        """Underlying decoded value (dict/list/str/number/bool/None)."""
        return self._value

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self._value, indent=indent, ensure_ascii=False)

    # ==================== Protocols ====================

    def __iter__(self) -> Iterator["JsonNode"]:
        # Objects are walked with keys()/get()
        if self._kind is JsonKind.ARRAY:
            return (JsonNode(v) for v in self._value)
        return iter(())

    def __len__(self) -> int:
        if self._kind in (JsonKind.ARRAY, JsonKind.OBJECT):
            return len(self._value)
        return 0

    def __contains__(self, key: object) -> bool:
        return self._kind is JsonKind.OBJECT and key in self._value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, JsonNode):
            return self._kind is other._kind and self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self._kind, self.to_json()))

    def __repr__(self) -> str:
        return f"JsonNode({self.to_json()[:80]})"
