"""
Конфигурация запроса.

RequestOptions - immutable (frozen dataclass), проверяется при создании:
неверные опции выбрасывают ValidationError до любой сетевой активности.
"""

import codecs
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlsplit

from .exceptions import ValidationError
from .logging.config import LoggingConfig
from .parser import DATA_TYPES

HTTP_METHODS = frozenset({
    'GET', 'HEAD', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS', 'TRACE', 'CONNECT'
})

PROTOCOLS = frozenset({'http', 'https'})

DEFAULT_PORTS = {'http': 80, 'https': 443}

# camelCase ключи -> поля dataclass
_OPTION_ALIASES = {
    'contentType': 'content_type',
    'dataType': 'data_type',
    'keepAlive': 'keep_alive',
    'host': 'hostname',
}

def _freeze_headers(headers: Mapping[str, Any]) -> Mapping[str, str]:
    """
    Скопировать заголовки в immutable MappingProxyType.

    Example:
        >>> frozen = _freeze_headers({"Accept": "application/json"})
        >>> frozen["X-New"] = "value"  # Raises TypeError
    """
    return MappingProxyType({str(k): str(v) for k, v in headers.items()})

def _check_headers(headers: Mapping[str, str]) -> None:
    """
    Заголовки должны кодироваться в ASCII (requests и httpx) без CR/LF.

    Raises:
        ValidationError: field='headers'
    """
    for name, value in headers.items():
        for text in (name, value):
            try:
                text.encode('ascii')
            except UnicodeEncodeError:
                raise ValidationError(
                    f"Header {name!r} must be ASCII: {text!r}", field='headers'
                )
            if '\r' in text or '\n' in text:
                raise ValidationError(
                    f"Header {name!r} contains a line break", field='headers'
                )
        if not name:
            raise ValidationError("Header name must not be empty", field='headers')

def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)

@dataclass(frozen=True)
class RequestOptions:
    """
    Опции одного HTTP запроса.

    Адрес задаётся либо полным url, либо hostname/path/port/protocol.
    Если указан url, его компоненты заменяют отдельные поля.

    Args:
        url: Полный URL запроса
        method: HTTP метод (приводится к верхнему регистру)
        hostname: Хост, альтернатива url
        path: Путь (с query string), по умолчанию "/"
        port: Порт, по умолчанию берётся из протокола
        protocol: "http" или "https" (допускается "https:")
        headers: Заголовки запроса
        content_type: Сокращение для заголовка content-type
        data_type: Ожидаемый тип ответа: "json" или "text"
        keep_alive: Интервал TCP keep-alive в мс (0 - выключен)
        encoding: Кодировка для декодирования ответа в текст
        logging: Конфигурация логирования (None = без логирования)

    Examples:
        >>> RequestOptions(url="https://api.example.com/users?page=2")
        >>> RequestOptions.create({"url": "https://api.example.com", "dataType": "json"})
        >>> RequestOptions.create(hostname="localhost", port=8080, path="/health")
    """
    url: Optional[str] = None
    method: str = 'GET'
    hostname: Optional[str] = None
    path: Optional[str] = None
    port: Optional[int] = None
    protocol: Optional[str] = None
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    content_type: Optional[str] = None
    data_type: Optional[str] = None
    keep_alive: int = 0
    encoding: Optional[str] = None
    logging: Optional[LoggingConfig] = None

    def __post_init__(self):
        """Валидация и нормализация."""
        self._validate_types()

        if self.url is not None:
            self._apply_url(self.url)

        # Method
        method = self.method.upper()
        if method not in HTTP_METHODS:
            raise ValidationError(f"Unknown HTTP method: {self.method!r}", field='method')
        object.__setattr__(self, 'method', method)

        # Protocol
        protocol = (self.protocol or 'http').rstrip(':').lower()
        if protocol not in PROTOCOLS:
            raise ValidationError(
                f"Unsupported protocol: {self.protocol!r} (expected http or https)",
                field='protocol'
            )
        object.__setattr__(self, 'protocol', protocol)

        # Destination
        if not self.hostname:
            raise ValidationError(
                "Request destination is required: pass url or hostname",
                field='hostname'
            )
        if not self.path:
            object.__setattr__(self, 'path', '/')
        elif not self.path.startswith('/'):
            object.__setattr__(self, 'path', '/' + self.path)

        if self.port is not None and not 0 < self.port < 65536:
            raise ValidationError(f"Port out of range: {self.port}", field='port')

        # Data type
        if self.data_type is not None:
            data_type = self.data_type.lower()
            if data_type not in DATA_TYPES:
                raise ValidationError(
                    f"Unknown data type: {self.data_type!r}. "
                    f"Available: {', '.join(sorted(DATA_TYPES))}",
                    field='data_type'
                )
            object.__setattr__(self, 'data_type', data_type)

        if self.keep_alive < 0:
            raise ValidationError("keep_alive must be non-negative", field='keep_alive')

        if self.encoding is not None:
            try:
                codecs.lookup(self.encoding)
            except LookupError:
                raise ValidationError(f"Unknown encoding: {self.encoding!r}", field='encoding')

        # Headers: копия + content-type shortcut
        headers = dict(self.headers)
        if self.content_type:
            headers = {k: v for k, v in headers.items() if k.lower() != 'content-type'}
            headers['content-type'] = self.content_type
        frozen = _freeze_headers(headers)
        _check_headers(frozen)
        object.__setattr__(self, 'headers', frozen)

    def _validate_types(self) -> None:
        """Проверка типов всех опций."""
        if self.url is not None and not isinstance(self.url, str):
            raise ValidationError(
                f"url must be a string, got {type(self.url).__name__}", field='url'
            )
        if not isinstance(self.method, str) or not self.method:
            raise ValidationError("method must be a non-empty string", field='method')
        if not isinstance(self.headers, Mapping):
            raise ValidationError(
                f"headers must be a mapping, got {type(self.headers).__name__}",
                field='headers'
            )
        if self.port is not None and not _is_int(self.port):
            raise ValidationError("port must be an integer", field='port')
        if not _is_int(self.keep_alive):
            raise ValidationError("keep_alive must be an integer", field='keep_alive')
        if self.logging is not None and not isinstance(self.logging, LoggingConfig):
            raise ValidationError(
                f"logging must be a LoggingConfig, got {type(self.logging).__name__}",
                field='logging'
            )

        for name in ('hostname', 'path', 'protocol', 'content_type', 'data_type', 'encoding'):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise ValidationError(
                    f"{name} must be a string, got {type(value).__name__}", field=name
                )

    def _apply_url(self, url: str) -> None:
        """Разобрать url на компоненты."""
        parts = urlsplit(url.strip())
        if parts.scheme.lower() not in PROTOCOLS or not parts.hostname:
            raise ValidationError(f"Invalid URL: {url!r}", field='url')
        try:
            port = parts.port
        except ValueError:
            raise ValidationError(f"Invalid port in URL: {url!r}", field='url')

        path = parts.path or '/'
        if parts.query:
            path += '?' + parts.query

        object.__setattr__(self, 'protocol', parts.scheme.lower())
        object.__setattr__(self, 'hostname', parts.hostname)
        object.__setattr__(self, 'port', port)
        object.__setattr__(self, 'path', path)

    # ==================== Производные значения ====================

    @property
    def secure(self) -> bool:
        """HTTPS запрос."""
        return self.protocol == 'https'

    @property
    def effective_port(self) -> int:
        """Явный порт или порт по умолчанию для протокола."""
        return self.port or DEFAULT_PORTS[self.protocol]

    @property
    def target_url(self) -> str:
        """Полный URL, собранный из компонентов."""
        host = self.hostname
        if ':' in host:
            host = f"[{host}]"
        netloc = f"{host}:{self.port}" if self.port else host
        return f"{self.protocol}://{netloc}{self.path}"

    # ==================== Конструкторы ====================

    @classmethod
    def create(
        cls,
        options: Union[str, Mapping[str, Any], 'RequestOptions', None] = None,
        **overrides: Any
    ) -> 'RequestOptions':
        """
        Удобный конструктор: url строка, словарь опций или RequestOptions.

        Принимает camelCase ключи (dataType, keepAlive, contentType)
        и snake_case.

        Args:
            options: URL, словарь опций или готовый RequestOptions
            **overrides: Опции, переопределяющие options

        Returns:
            RequestOptions instance

        Raises:
            ValidationError: Неверные опции

        Examples:
            >>> RequestOptions.create("https://api.example.com/users")
            >>> RequestOptions.create({"url": "https://api.example.com", "method": "post"})
            >>> RequestOptions.create("https://api.example.com", data_type="json")
        """
        if isinstance(options, RequestOptions):
            if not overrides:
                return options
            values: Dict[str, Any] = {f.name: getattr(options, f.name) for f in fields(cls)}
            # Компоненты уже разобраны; url не переприменяем поверх overrides
            values['url'] = None
        elif isinstance(options, str):
            values = {'url': options}
        elif isinstance(options, Mapping):
            values = dict(options)
        elif options is None:
            values = {}
        else:
            raise ValidationError(
                f"options must be a URL string or a mapping, got {type(options).__name__}"
            )

        values.update(overrides)
        return cls(**cls._normalize_keys(values))

    @classmethod
    def _normalize_keys(cls, values: Mapping[str, Any]) -> Dict[str, Any]:
        """Переименовать camelCase ключи и отбросить неизвестные с ошибкой."""
        known = {f.name for f in fields(cls)}
        result: Dict[str, Any] = {}
        for key, value in values.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in known:
                raise ValidationError(f"Unknown option: {key!r}", field=key)
            if value is None and name in ('method', 'headers', 'keep_alive'):
                # None = значение по умолчанию
                continue
            result[name] = value
        return result

    def with_headers(self, headers: Dict[str, str]) -> 'RequestOptions':
        """
        Создать новые опции с дополнительными заголовками.

        Args:
            headers: Заголовки для объединения с существующими

        Returns:
            Новый RequestOptions

        Example:
            >>> new_options = options.with_headers({"X-API-Key": "secret"})
        """
        merged = dict(self.headers)
        merged.update(headers)
        return RequestOptions.create(self, headers=merged)
