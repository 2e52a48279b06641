"""Тесты JsonSerializer."""

import json
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from uuid import UUID

import pytest
from pydantic import BaseModel

from http_api_client.core.config import SerializerOptions
from http_api_client.core.exceptions import InvalidPayloadError, SerializationError
from http_api_client.utils.serialization import JsonSerializer, to_camel_case


class Color(Enum):
    RED = 1
    GREEN = 2


@dataclass
class LineItem:
    sku_code: str
    quantity: int = 1


@dataclass
class Invoice:
    invoice_id: int
    items: List[LineItem] = field(default_factory=list)
    color: Color = Color.RED
    memo: Optional[str] = None


class Customer(BaseModel):
    customer_id: int
    display_name: str
    nickname: Optional[str] = None


class Plain:
    def __init__(self):
        self.public_value = 1
        self._private = 2


@dataclass
class TreeNode:
    name: str
    child: Optional["TreeNode"] = None


def build_chain(depth: int) -> TreeNode:
    node = None
    for level in range(depth):
        node = TreeNode(f"level-{level}", node)
    return node


def loads(serializer: JsonSerializer, obj):
    return json.loads(serializer.serialize(obj))


class TestToCamelCase:

    @pytest.mark.parametrize("name,expected", [
        ("user_name", "userName"),
        ("UserName", "userName"),
        ("URLPath", "urlPath"),
        ("id", "id"),
        ("ID", "id"),
        ("http_status_code", "httpStatusCode"),
        ("_private_field", "privateField"),
        ("", ""),
    ])
    def test_conversion(self, name, expected):
        assert to_camel_case(name) == expected


class TestJsonSerializerDefaults:

    def setup_method(self):
        self.serializer = JsonSerializer()

    def test_compact_output(self):
        assert self.serializer.serialize({"a": 1, "b": [1, 2]}) == '{"a":1,"b":[1,2]}'

    def test_nulls_omitted(self):
        assert loads(self.serializer, {"a": 1, "b": None}) == {"a": 1}

    def test_dataclass(self):
        invoice = Invoice(invoice_id=7, items=[LineItem("X-1", 2)])
        assert loads(self.serializer, invoice) == {
            "invoice_id": 7,
            "items": [{"sku_code": "X-1", "quantity": 2}],
            "color": 1,
        }

    def test_pydantic_model(self):
        assert loads(self.serializer, Customer(customer_id=1, display_name="Ada")) == {
            "customer_id": 1,
            "display_name": "Ada",
        }

    def test_plain_object_public_attributes(self):
        assert loads(self.serializer, Plain()) == {"public_value": 1}

    def test_scalars(self):
        value = {
            "when": datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
            "day": date(2024, 1, 15),
            "price": Decimal("9.99"),
            "id": UUID("12345678-1234-5678-1234-567812345678"),
        }
        assert loads(self.serializer, value) == {
            "when": "2024-01-15T10:30:00+00:00",
            "day": "2024-01-15",
            "price": 9.99,
            "id": "12345678-1234-5678-1234-567812345678",
        }

    def test_non_ascii_kept(self):
        assert self.serializer.serialize({"name": "Zoë"}) == '{"name":"Zoë"}'

    def test_non_string_keys(self):
        assert loads(self.serializer, {1: "a", 2.5: "b"}) == {"1": "a", "2.5": "b"}

    def test_cycle_is_dropped(self):
        data = {"name": "root"}
        data["self"] = data
        assert loads(self.serializer, data) == {"name": "root"}

    def test_top_level_none(self):
        assert self.serializer.serialize(None) == "null"


class TestJsonSerializerOptions:

    def test_serialize_null_values(self):
        serializer = JsonSerializer(SerializerOptions(serialize_null_values=True))
        assert loads(serializer, {"a": None}) == {"a": None}

    def test_enums_as_strings(self):
        serializer = JsonSerializer(SerializerOptions(serialize_enums_as_strings=True))
        assert loads(serializer, {"color": Color.GREEN}) == {"color": "GREEN"}

    def test_camel_case_properties(self):
        serializer = JsonSerializer(SerializerOptions(camel_case_properties=True))
        invoice = Invoice(invoice_id=1, items=[LineItem("A")])
        assert loads(serializer, invoice) == {
            "invoiceId": 1,
            "items": [{"skuCode": "A", "quantity": 1}],
            "color": 1,
        }

    def test_indented(self):
        serializer = JsonSerializer(SerializerOptions(indented=True))
        assert serializer.serialize({"a": 1}) == '{\n  "a": 1\n}'


class TestJsonSerializerErrors:

    def test_nan_rejected(self):
        with pytest.raises(SerializationError):
            JsonSerializer().serialize({"value": float("nan")})

    def test_unsupported_object(self):
        with pytest.raises(SerializationError) as exc_info:
            JsonSerializer().serialize(object())
        assert exc_info.value.type_name == "object"

    def test_unsupported_key(self):
        with pytest.raises(SerializationError):
            JsonSerializer().serialize({(1, 2): "tuple key"})

    def test_signaling_nan_decimal(self):
        with pytest.raises(SerializationError) as exc_info:
            JsonSerializer().serialize({"amount": Decimal("sNaN")})
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_too_deeply_nested(self):
        with pytest.raises(SerializationError) as exc_info:
            JsonSerializer().serialize(build_chain(5000))
        assert isinstance(exc_info.value.__cause__, RecursionError)
        assert exc_info.value.type_name == "TreeNode"

    def test_deserialize(self):
        node = JsonSerializer().deserialize('{"a": [1]}')
        assert node.select("a[0]").as_int() == 1

    def test_deserialize_invalid(self):
        with pytest.raises(InvalidPayloadError):
            JsonSerializer().deserialize("nope")
