"""
Маскирование чувствительных данных перед записью в лог.

Используется ApiClientLogger: заголовки Authorization/Cookie, токены,
пароли и ключи не должны попадать в log records.
"""

import re
from typing import Any, Dict

DEFAULT_MASK = "***REDACTED***"

# Точные имена полей (case-insensitive)
SENSITIVE_KEYS = {
    'authorization', 'proxy-authorization', 'cookie', 'set-cookie',
    'password', 'passwd', 'pwd',
    'token', 'access_token', 'refresh_token', 'id_token', 'bearer_token',
    'api_key', 'apikey', 'x-api-key', 'secret', 'client_secret',
    'session', 'sessionid', 'session_id',
}

# Подстроки, которые делают поле чувствительным ("db_password", "x-auth-token")
SENSITIVE_FRAGMENTS = ('password', 'secret', 'token', 'api_key', 'api-key')

SENSITIVE_PATTERNS = [
    (re.compile(r'(Bearer\s+)([A-Za-z0-9\-._~+/]+=*)', re.IGNORECASE), r'\1' + DEFAULT_MASK),
    (re.compile(r'(Basic\s+)([A-Za-z0-9+/]+=*)', re.IGNORECASE), r'\1' + DEFAULT_MASK),
    (re.compile(r'((?:api[_-]?key|token|password)=)([^\s&,;]+)', re.IGNORECASE), r'\1' + DEFAULT_MASK),
    (re.compile(r'(://[^:/@\s]+:)([^@/\s]+)(@)'), r'\1' + DEFAULT_MASK + r'\3'),
]


def is_sensitive_key(key: str) -> bool:
    """Проверяет, является ли имя поля чувствительным."""
    lowered = key.lower()
    return lowered in SENSITIVE_KEYS or any(f in lowered for f in SENSITIVE_FRAGMENTS)


def mask_sensitive_data(data: Any, mask: str = DEFAULT_MASK) -> Any:
    """
    Рекурсивно маскирует чувствительные данные в словарях, списках, строках.

    Returns:
        Копия данных с замаскированными полями. Другие типы - как есть.

    Examples:
        >>> mask_sensitive_data({"Authorization": "Bearer abc", "Accept": "*/*"})
        {'Authorization': '***REDACTED***', 'Accept': '*/*'}

        >>> mask_sensitive_data("https://api.example.com/?api_key=abc&page=1")
        'https://api.example.com/?api_key=***REDACTED***&page=1'
    """
    if isinstance(data, str):
        return _mask_string(data, mask)
    if isinstance(data, dict):
        return _mask_dict(data, mask)
    if isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, mask) for item in data)
    return data


def _mask_dict(data: Dict[Any, Any], mask: str) -> Dict[Any, Any]:
    result = {}
    for key, value in data.items():
        if isinstance(key, str) and is_sensitive_key(key):
            result[key] = mask
        else:
            result[key] = mask_sensitive_data(value, mask)
    return result


def _mask_string(text: str, mask: str) -> str:
    for pattern, replacement in SENSITIVE_PATTERNS:
        if mask != DEFAULT_MASK:
            replacement = replacement.replace(DEFAULT_MASK, mask)
        text = pattern.sub(replacement, text)
    return text
