"""Утилиты: JSON сериализация и маскирование данных для логов."""

from .sanitizer import mask_sensitive_data, is_sensitive_key
from .serialization import JsonSerializer, to_camel_case

__all__ = [
    "JsonSerializer",
    "to_camel_case",
    "mask_sensitive_data",
    "is_sensitive_key",
]
