"""
Иерархия исключений HTTP Request.

Классификация:
- ValidationError - неверные опции, выбрасывается синхронно при создании
- TransportError - ошибки соединения (через сигнал error транспорта)
- ProtocolError - ответ со статусом >= 400
- DecodeError - тело ответа не соответствует объявленному dataType
- RequestAbortedError - исход, который получает callback после abort()

Все ошибки после submit() сходятся в одном пути failed-completion.
"""

from typing import Optional

import httpx
import requests

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BASE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class RequestError(Exception):
    """Базовое исключение HTTP Request."""

    def __init__(self, message: str, **kwargs):
        self.message = message
        super().__init__(message)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CONSTRUCTION
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ValidationError(RequestError, ValueError):
    """
    Неверные опции запроса.

    Args:
        message: Сообщение об ошибке
        field: Имя опции, не прошедшей проверку
    """

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TRANSPORT
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TransportError(RequestError):
    """Ошибка транспорта (соединение, DNS, сброс)."""

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        full_message = f"{message}"
        if url:
            full_message += f" (url: {url})"
        super().__init__(full_message)

class ConnectionError(TransportError):
    """
    Ошибка подключения.

    Примеры:
    - Connection refused
    - Name resolution failed
    - Network unreachable
    """
    pass

class ProxyError(TransportError):
    """Ошибка прокси."""
    pass

class IncompleteResponseError(TransportError):
    """
    Передача оборвалась после начала ответа.

    Отделена от ProtocolError: сервер не прислал ответ с ошибкой,
    а соединение разорвалось посреди тела.
    """
    pass

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# RESPONSE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ProtocolError(RequestError):
    """
    Ответ со статусом >= 400.

    Сообщение - это тело ответа как текст, либо reason phrase,
    если тело пустое.

    Args:
        status_code: HTTP статус
        message: Тело ответа или reason phrase
        status_message: Reason phrase
    """

    def __init__(self, status_code: int, message: str, status_message: Optional[str] = None):
        self.status_code = status_code
        self.status_message = status_message
        super().__init__(message)

class DecodeError(RequestError):
    """
    Тело ответа не удалось разобрать.

    Примеры:
    - Битый JSON
    - Пустое тело при dataType=json
    """

    def __init__(self, message: str, data_type: Optional[str] = None):
        self.data_type = data_type
        super().__init__(message)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# LIFECYCLE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class RequestAbortedError(RequestError):
    """Запрос был прерван вызовом abort()."""

    def __init__(self, message: str = "Request aborted"):
        super().__init__(message)

class RequestPendingError(RequestError):
    """result() вызван до того, как запрос завершился."""

    def __init__(self, message: str = "Request has not completed yet"):
        super().__init__(message)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# УТИЛИТЫ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def classify_transport_exception(
    exc: BaseException,
    url: Optional[str] = None,
    response_started: bool = False
) -> TransportError:
    """
    Конвертировать исключения requests/httpx в наши исключения.

    Args:
        exc: Исключение из транспорта
        url: URL запроса
        response_started: Ответ уже начал поступать (статус получен)

    Returns:
        TransportError с правильной классификацией

    Examples:
        >>> exc = requests.exceptions.ConnectionError("refused")
        >>> our_exc = classify_transport_exception(exc, "https://example.com")
        >>> assert isinstance(our_exc, ConnectionError)
    """
    if isinstance(exc, TransportError):
        return exc

    detail = str(exc) or type(exc).__name__

    # requests
    if isinstance(exc, requests.exceptions.ProxyError):
        return ProxyError(f"Proxy error: {detail}", url)

    elif isinstance(exc, (requests.exceptions.ChunkedEncodingError,
                          requests.exceptions.ContentDecodingError)):
        return IncompleteResponseError(f"Incomplete response: {detail}", url)

    elif isinstance(exc, requests.exceptions.ConnectionError):
        if response_started:
            return IncompleteResponseError(f"Connection lost: {detail}", url)
        return ConnectionError(f"Connection error: {detail}", url)

    # httpx
    elif isinstance(exc, httpx.ProxyError):
        return ProxyError(f"Proxy error: {detail}", url)

    elif isinstance(exc, (httpx.RemoteProtocolError, httpx.ReadError, httpx.DecodingError)):
        if response_started or isinstance(exc, httpx.DecodingError):
            return IncompleteResponseError(f"Incomplete response: {detail}", url)
        return ConnectionError(f"Connection error: {detail}", url)

    elif isinstance(exc, (httpx.ConnectError, httpx.NetworkError)):
        if response_started:
            return IncompleteResponseError(f"Connection lost: {detail}", url)
        return ConnectionError(f"Connection error: {detail}", url)

    # Сокетные ошибки вне библиотек
    elif isinstance(exc, OSError):
        if response_started:
            return IncompleteResponseError(f"Connection lost: {detail}", url)
        return ConnectionError(f"Connection error: {detail}", url)

    else:
        # Неизвестная ошибка - оборачиваем
        return TransportError(detail, url)
