"""
Errores del bridge de WordPress
Taxonomía de errores y formateo único de fallos para los sobres de resultado
"""

from enum import Enum
from typing import Any, Dict, Optional, Union

import httpx


class ErrorKind(str, Enum):
    """Tipos de error expuestos al llamador"""
    CONFIGURATION = "configuration"
    AUTHENTICATION = "authentication"
    REMOTE_API = "remote_api"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


class WordPressError(Exception):
    """Error base del bridge"""
    kind = ErrorKind.UNKNOWN


class ConfigurationError(WordPressError):
    """Falta la URL del sitio o las credenciales"""
    kind = ErrorKind.CONFIGURATION


class AuthenticationError(WordPressError):
    """La sesión no está autenticada o WordPress rechazó las credenciales"""
    kind = ErrorKind.AUTHENTICATION


class ValidationError(WordPressError):
    """Parámetros inválidos detectados antes de cualquier petición"""
    kind = ErrorKind.VALIDATION


class UnknownError(WordPressError):
    kind = ErrorKind.UNKNOWN


class RemoteAPIError(WordPressError):
    """Respuesta HTTP de error devuelta por WordPress"""
    kind = ErrorKind.REMOTE_API

    def __init__(self, message: str, status: Optional[int] = None,
                 status_text: Optional[str] = None, data: Any = None):
        super().__init__(message)
        self.status = status
        self.status_text = status_text
        self.data = data

    @classmethod
    def from_http_error(cls, error: httpx.HTTPStatusError) -> "RemoteAPIError":
        response = error.response
        try:
            data = response.json()
        except ValueError:
            data = response.text
        return cls(
            str(error),
            status=response.status_code,
            status_text=response.reason_phrase,
            data=data,
        )


class ErrorInfo:
    """Error estructurado que viaja dentro de un Result"""

    def __init__(self, kind: ErrorKind, message: str, status: Optional[int] = None,
                 status_text: Optional[str] = None, data: Any = None):
        self.kind = kind
        self.message = message
        self.status = status
        self.status_text = status_text
        self.data = data

    @property
    def is_remote(self) -> bool:
        return self.kind == ErrorKind.REMOTE_API

    def to_payload(self) -> Union[Dict[str, Any], str]:
        """Forma serializable: dict para fallos HTTP, texto para el resto"""
        if self.is_remote:
            return {
                "status": self.status,
                "statusText": self.status_text,
                "data": self.data,
                "message": self.message,
            }
        return self.message

    def __repr__(self) -> str:
        return f"ErrorInfo(kind={self.kind.value!r}, message={self.message!r}, status={self.status!r})"


def format_error(error: BaseException) -> ErrorInfo:
    """
    Convierte cualquier excepción en un ErrorInfo

    Los errores HTTP de httpx conservan status, texto de estado y cuerpo;
    el resto se reduce a su mensaje.
    """
    if isinstance(error, httpx.HTTPStatusError):
        error = RemoteAPIError.from_http_error(error)

    if isinstance(error, RemoteAPIError):
        return ErrorInfo(
            ErrorKind.REMOTE_API,
            str(error),
            status=error.status,
            status_text=error.status_text,
            data=error.data,
        )

    if isinstance(error, WordPressError):
        return ErrorInfo(error.kind, str(error) or error.__class__.__name__)

    return ErrorInfo(ErrorKind.UNKNOWN, str(error) or "Unknown error")
