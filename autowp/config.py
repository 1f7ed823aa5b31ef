"""
Configuración del servidor AutoWP
Lee las variables de entorno (y el .env si existe) y configura el logging
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Cargar variables de entorno
load_dotenv()

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

DEFAULT_TIMEOUT = 30.0


@dataclass
class Settings:
    """Ajustes del proceso leídos del entorno"""
    wp_url: Optional[str] = None
    wp_user: Optional[str] = None
    wp_app_password: Optional[str] = None
    wp_password: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    tinypng_api_key: Optional[str] = None
    drafts_file: str = "drafts.json"
    log_level: str = "INFO"
    port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        # WP_USERNAME se acepta por compatibilidad con despliegues antiguos
        return cls(
            wp_url=os.getenv('WP_URL'),
            wp_user=os.getenv('WP_USER') or os.getenv('WP_USERNAME'),
            wp_app_password=os.getenv('WP_APP_PASSWORD'),
            wp_password=os.getenv('WP_PASSWORD'),
            timeout=float(os.getenv('WP_TIMEOUT', DEFAULT_TIMEOUT)),
            tinypng_api_key=os.getenv('TINYPNG_API_KEY'),
            drafts_file=os.getenv('AUTOWP_DRAFTS_FILE', 'drafts.json'),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
            port=int(os.getenv('PORT', 8000)),
        )

    @property
    def has_credentials(self) -> bool:
        """True si el entorno basta para autenticar al arrancar"""
        return bool(self.wp_url and self.wp_user and (self.wp_app_password or self.wp_password))


def setup_logging(level: str = "INFO") -> None:
    """Configura el logging hacia stderr (stdout queda para el transporte stdio)"""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT
    )
