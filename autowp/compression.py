"""
Cliente de compresión de imágenes (TinyPNG)
Envía una imagen al API de TinyPNG y descarga la versión optimizada
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import requests

from .errors import ConfigurationError, RemoteAPIError

logger = logging.getLogger(__name__)


@dataclass
class CompressionResult:
    """Imagen comprimida y estadísticas del proceso"""
    data: bytes
    input_size: int
    output_size: int
    mime_type: str

    @property
    def savings_percent(self) -> float:
        if not self.input_size:
            return 0.0
        return round((1 - self.output_size / self.input_size) * 100, 2)


class ImageCompressor:
    """Compresor de imágenes usando TinyPNG"""

    def __init__(self, api_key: Optional[str] = None, timeout: float = 120):
        """Inicializa el compresor con la clave de TINYPNG_API_KEY si no se pasa ninguna"""
        self.api_key = api_key if api_key is not None else os.getenv('TINYPNG_API_KEY')
        self.base_url = "https://api.tinify.com"
        self.timeout = timeout

    def is_available(self) -> bool:
        """Verifica si hay clave de API configurada"""
        return bool(self.api_key)

    def compress(self, image: bytes) -> CompressionResult:
        """
        Comprime una imagen

        Args:
            image: Bytes de la imagen original

        Returns:
            CompressionResult con la imagen optimizada
        """
        if not self.is_available():
            raise ConfigurationError("TINYPNG_API_KEY is not set; image optimization is unavailable")

        auth = ("api", self.api_key)
        logger.info(f"Comprimiendo imagen con TinyPNG ({len(image)} bytes)...")

        response = requests.post(f"{self.base_url}/shrink", data=image, auth=auth, timeout=self.timeout)
        if not response.ok:
            raise _remote_error(response)

        output = response.json().get("output") or {}
        output_url = output.get("url") or response.headers.get("Location")
        if not output_url:
            raise RemoteAPIError("TinyPNG did not return an output URL", status=response.status_code)

        download = requests.get(output_url, auth=auth, timeout=self.timeout)
        if not download.ok:
            raise _remote_error(download)

        result = CompressionResult(
            data=download.content,
            input_size=len(image),
            output_size=len(download.content),
            mime_type=output.get("type") or download.headers.get("Content-Type", "application/octet-stream"),
        )
        logger.info(f"Imagen comprimida: {result.input_size} -> {result.output_size} bytes")
        return result


def _remote_error(response: requests.Response) -> RemoteAPIError:
    try:
        data = response.json()
    except ValueError:
        data = response.text
    message = data.get("message") if isinstance(data, dict) else None
    return RemoteAPIError(
        message or f"TinyPNG request failed (HTTP {response.status_code})",
        status=response.status_code,
        status_text=response.reason,
        data=data,
    )
