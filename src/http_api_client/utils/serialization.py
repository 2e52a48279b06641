"""
JSON serialization of request bodies.

Converts arbitrary Python objects (dataclasses, pydantic models, enums,
mappings, sequences, plain objects) into JSON text according to
SerializerOptions, and decodes response text into JsonNode.
"""

import dataclasses
import json
import re
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional, Set, Union
from uuid import UUID

from pydantic import BaseModel

from ..core.config import SerializerOptions
from ..core.exceptions import SerializationError
from ..core.json_value import JsonNode

_OMIT = object()
_ACRONYM_HEAD = re.compile(r"^([A-Z]+)(?=[A-Z][a-z]|$|\d)")


def to_camel_case(name: str) -> str:
    """
    Convert a property name to camelCase.

    Examples:
        >>> to_camel_case("user_name")
        'userName'
        >>> to_camel_case("UserName")
        'userName'
        >>> to_camel_case("URLPath")
        'urlPath'
    """
    if not name:
        return name
    if "_" in name.strip("_"):
        head, *rest = [part for part in name.split("_") if part]
        return to_camel_case(head) + "".join(p[:1].upper() + p[1:] for p in rest)
    match = _ACRONYM_HEAD.match(name)
    if match:
        acronym = match.group(1)
        return acronym.lower() + name[len(acronym):]
    return name[:1].lower() + name[1:]


class JsonSerializer:
    """
    Serializer used by ApiClient.send_object().

    Example:
        >>> serializer = JsonSerializer(SerializerOptions(camel_case_properties=True))
        >>> serializer.serialize({"first_name": "Ada", "age": None})
        '{"firstName":"Ada"}'
    """

    def __init__(self, options: Optional[SerializerOptions] = None):
        self.options = options or SerializerOptions()

    def serialize(self, obj: Any) -> str:
        """
        Serialize obj to JSON text.

        Raises:
            SerializationError: obj (or something inside it) can't be encoded
        """
        try:
            value = self._to_jsonable(obj, set())
            if value is _OMIT:
                value = None
            if self.options.indented:
                return json.dumps(value, indent=2, ensure_ascii=False, allow_nan=False)
            return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
        except SerializationError:
            raise
        except RecursionError as e:
            raise SerializationError("Object graph is nested too deeply", type(obj).__name__) from e
        except Exception as e:
            # Decimal("sNaN"), broken __dict__ properties, etc.
            raise SerializationError(f"Cannot serialize value: {e}", type(obj).__name__) from e

    def deserialize(self, text: Union[str, bytes]) -> JsonNode:
        """Decode JSON text into a JsonNode (raises InvalidPayloadError)."""
        return JsonNode.parse(text)

    # ==================== Internals ====================

    def _to_jsonable(self, obj: Any, stack: Set[int]) -> Any:
        if obj is None or isinstance(obj, (bool, str)):
            return obj
        if isinstance(obj, Enum):
            if self.options.serialize_enums_as_strings:
                return obj.name
            return self._to_jsonable(obj.value, stack)
        if isinstance(obj, (int, float)):
            return obj
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, (datetime, date, time)):
            return obj.isoformat()
        if isinstance(obj, UUID):
            return str(obj)

        # Контейнеры: отслеживаем циклические ссылки
        if id(obj) in stack:
            return _OMIT
        stack.add(id(obj))
        try:
            return self._container_to_jsonable(obj, stack)
        finally:
            stack.discard(id(obj))

    def _container_to_jsonable(self, obj: Any, stack: Set[int]) -> Any:
        if isinstance(obj, BaseModel):
            return self._mapping_to_jsonable(
                {name: getattr(obj, name) for name in type(obj).model_fields}, stack
            )
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return self._mapping_to_jsonable(
                {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}, stack
            )
        if isinstance(obj, Mapping):
            return self._mapping_to_jsonable(obj, stack)
        if isinstance(obj, (list, tuple, set, frozenset)):
            items = [self._to_jsonable(item, stack) for item in obj]
            return [item for item in items if item is not _OMIT]
        if hasattr(obj, "__dict__") and not callable(obj):
            public = {k: v for k, v in vars(obj).items() if not k.startswith("_")}
            return self._mapping_to_jsonable(public, stack)

        raise SerializationError("Object is not JSON serializable", type(obj).__name__)

    def _mapping_to_jsonable(self, mapping: Mapping[Any, Any], stack: Set[int]) -> dict:
        result = {}
        for key, value in mapping.items():
            if isinstance(key, Enum):
                key = key.name if self.options.serialize_enums_as_strings else key.value
            if not isinstance(key, str):
                if isinstance(key, (int, float, bool, UUID)):
                    key = str(key)
                else:
                    raise SerializationError(
                        f"Unsupported key {key!r}", type(key).__name__
                    )
            if value is None and not self.options.serialize_null_values:
                continue
            converted = self._to_jsonable(value, stack)
            if converted is _OMIT:
                continue
            if self.options.camel_case_properties:
                key = to_camel_case(key)
            result[key] = converted
        return result
