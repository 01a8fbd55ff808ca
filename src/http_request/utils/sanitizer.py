# src/http_request/utils/sanitizer.py
"""
Маскирование чувствительных данных перед записью в логи.

Запрос логирует заголовки и URL; здесь из них убираются токены,
пароли, куки и API ключи.
"""

import re
from typing import Any, Dict, Mapping, Set


DEFAULT_MASK = "***REDACTED***"

# Чувствительные ключи (case-insensitive, частичное совпадение)
SENSITIVE_KEYS: Set[str] = {
    # Аутентификация
    'authorization', 'proxy-authorization', 'auth',
    # Токены и ключи
    'token', 'api_key', 'api-key', 'apikey', 'secret',
    # Пароли
    'password', 'passwd',
    # Сессии и куки
    'cookie', 'session',
}

# Схемы авторизации внутри строк
_AUTH_SCHEME_PATTERN = re.compile(r'\b(Bearer|Basic|Digest)\s+[^\s,;]+', re.IGNORECASE)

# user:password@host
_USERINFO_PATTERN = re.compile(r'://([^:/@]+):([^@/]+)@')


def _is_sensitive_key(key: str) -> bool:
    key = key.lower()
    return any(sensitive in key for sensitive in SENSITIVE_KEYS)


def mask_headers(headers: Mapping[str, Any], mask: str = DEFAULT_MASK) -> Dict[str, Any]:
    """
    Маскирует чувствительные заголовки HTTP.

    Examples:
        >>> mask_headers({"Authorization": "Bearer abc", "Accept": "application/json"})
        {'Authorization': '***REDACTED***', 'Accept': 'application/json'}
    """
    return {
        key: (mask if _is_sensitive_key(str(key)) else value)
        for key, value in headers.items()
    }


def mask_url(url: str, mask: str = DEFAULT_MASK) -> str:
    """
    Маскирует пароль в userinfo и чувствительные query параметры.

    Examples:
        >>> mask_url("https://api.example.com/items?api_key=s3cr3t&page=1")
        'https://api.example.com/items?api_key=***REDACTED***&page=1'
    """
    url = _USERINFO_PATTERN.sub(rf'://\1:{mask}@', url)

    def _mask_param(match: 're.Match[str]') -> str:
        name = match.group(2)
        if _is_sensitive_key(name):
            return f"{match.group(1)}{name}={mask}"
        return match.group(0)

    return re.sub(r'([?&])([^=&#\s]+)=([^&#\s]*)', _mask_param, url)


def mask_sensitive_data(data: Any, mask: str = DEFAULT_MASK) -> Any:
    """
    Рекурсивно маскирует словари, списки и строки.

    Используется логгером для всех дополнительных полей записи.

    Examples:
        >>> mask_sensitive_data({"headers": {"Cookie": "sid=1"}, "status_code": 200})
        {'headers': {'Cookie': '***REDACTED***'}, 'status_code': 200}
    """
    if isinstance(data, Mapping):
        return {
            key: (mask if _is_sensitive_key(str(key)) else mask_sensitive_data(value, mask))
            for key, value in data.items()
        }

    if isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, mask) for item in data)

    if isinstance(data, str):
        if '://' in data:
            data = mask_url(data, mask)
        return _AUTH_SCHEME_PATTERN.sub(rf'\1 {mask}', data)

    return data


def add_sensitive_keys(*keys: str) -> None:
    """
    Добавляет ключи в глобальный список SENSITIVE_KEYS.

    Examples:
        >>> add_sensitive_keys('x-internal-signature')
    """
    for key in keys:
        SENSITIVE_KEYS.add(key.lower())
