"""
Sesión de WordPress
Guarda la URL del sitio y las credenciales, deriva la cabecera Basic Auth
y controla el estado de autenticación mediante las sondas de conexión
"""

import asyncio
import logging
from base64 import b64encode
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

import httpx

from ..config import DEFAULT_TIMEOUT
from ..errors import AuthenticationError, ConfigurationError
from ..models import Result

logger = logging.getLogger(__name__)

CONNECTION_TIMEOUT = 5.0
API_NAMESPACE = "wp/v2"


@dataclass
class SessionConfig:
    """Configuración de la sesión: sitio, identidad y credenciales"""
    site_url: str = ""
    username: str = ""
    password: Optional[str] = None
    app_password: Optional[str] = None
    is_authenticated: bool = False


def build_auth_header(config: SessionConfig) -> str:
    """Genera el valor Basic Auth; la contraseña de aplicación tiene prioridad"""
    secret = config.app_password or config.password
    if not secret:
        raise ConfigurationError("No password or app password provided for WordPress authentication")
    credentials = f"{config.username}:{secret}"
    token = b64encode(credentials.encode()).decode('ascii')
    return f"Basic {token}"


async def probe_site_connection(site_url: str,
                                transport: Optional[httpx.AsyncBaseTransport] = None) -> bool:
    """
    Comprueba que el sitio expone el REST API de WordPress

    Hace un GET sin autenticar a {site_url}/wp-json/ y devuelve True solo si
    el documento de descubrimiento anuncia el namespace wp/v2. Nunca lanza.
    """
    url = f"{site_url.rstrip('/')}/wp-json/"
    try:
        async with httpx.AsyncClient(timeout=CONNECTION_TIMEOUT, transport=transport) as client:
            response = await client.get(url)
        data = response.json()
        namespaces = data.get("namespaces") if isinstance(data, dict) else None
        return API_NAMESPACE in (namespaces or [])
    except Exception as e:
        logger.info(f"Sitio no alcanzable {url}: {e}")
        return False


class Session:
    """
    Sesión explícita contra un sitio WordPress

    La configuración y la sonda de autenticación se serializan con un
    asyncio.Lock; las operaciones leen una copia consistente de la
    configuración antes de lanzar cualquier petición.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self._transport = transport
        self._config = SessionConfig()
        self._lock = asyncio.Lock()

    @property
    def config(self) -> SessionConfig:
        return replace(self._config)

    @property
    def is_authenticated(self) -> bool:
        return self._config.is_authenticated

    async def configure(self, **fields: Any) -> SessionConfig:
        """Mezcla los campos dados en la configuración (no toca is_authenticated)"""
        if "is_authenticated" in fields:
            raise ValueError("is_authenticated is only set by test_authentication()")
        unknown = set(fields) - set(SessionConfig.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown session fields: {', '.join(sorted(unknown))}")

        async with self._lock:
            if fields.get("site_url"):
                fields["site_url"] = fields["site_url"].rstrip('/')
            self._config = replace(self._config, **fields)
            logger.info(f"Sesión configurada para {self._config.site_url or '(sin sitio)'}")
            return replace(self._config)

    def get_auth_header(self) -> str:
        return build_auth_header(self._config)

    def client(self, timeout: Optional[float] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout if timeout is None else timeout,
            transport=self._transport,
            follow_redirects=True,
        )

    async def test_site_connection(self, site_url: str) -> bool:
        return await probe_site_connection(site_url, transport=self._transport)

    async def test_authentication(self) -> Result:
        """
        Verifica las credenciales contra /wp-json/wp/v2/users/me

        El flag de autenticación refleja siempre el resultado de la sonda
        más reciente: True si tuvo éxito, False ante cualquier fallo.
        """
        async with self._lock:
            try:
                if not self._config.site_url:
                    raise ConfigurationError("WordPress site URL not configured")
                auth_header = build_auth_header(self._config)
                url = f"{self._config.site_url}/wp-json/{API_NAMESPACE}/users/me"

                try:
                    async with self.client() as client:
                        response = await client.get(url, headers={'Authorization': auth_header})
                except httpx.HTTPError as e:
                    raise AuthenticationError(f"Could not reach WordPress: {e}") from e

                if response.status_code in (401, 403):
                    raise AuthenticationError(
                        f"WordPress rejected the credentials (HTTP {response.status_code})"
                    )
                if response.is_error:
                    raise AuthenticationError(
                        f"Unexpected response from WordPress (HTTP {response.status_code})"
                    )

                data = response.json()
                if not isinstance(data, dict) or "id" not in data:
                    raise AuthenticationError("Malformed response from /users/me")

                roles = data.get("roles") or ["contributor"]
                user_info = {
                    "id": data["id"],
                    "name": data.get("name") or data.get("slug") or "Unknown",
                    "roles": roles if isinstance(roles, list) else [str(roles)],
                }

                self._config.is_authenticated = True
                logger.info(f"✅ Autenticado en {self._config.site_url} como {user_info['name']}")
                return Result.ok(user_info=user_info)

            except Exception as e:
                self._config.is_authenticated = False
                logger.error(f"❌ Error de autenticación: {e}")
                return Result.fail(e)

    async def ensure_ready(self) -> SessionConfig:
        """Copia de la configuración tras comprobar las precondiciones"""
        async with self._lock:
            if not self._config.site_url:
                raise ConfigurationError("WordPress site URL not configured")
            if not self._config.is_authenticated:
                raise AuthenticationError("Not authenticated")
            return replace(self._config)

    async def request(self, method: str, path: str, *,
                      params: Optional[Dict[str, Any]] = None,
                      json: Optional[Dict[str, Any]] = None,
                      data: Optional[Dict[str, Any]] = None,
                      files: Optional[Dict[str, Any]] = None,
                      namespace: Optional[str] = API_NAMESPACE,
                      timeout: Optional[float] = None) -> httpx.Response:
        """
        Realiza una petición autenticada al REST API de WordPress

        Con namespace=None la ruta es relativa a la raíz del sitio. Lanza
        ConfigurationError/AuthenticationError antes de tocar la red si la
        sesión no está lista, y httpx.HTTPStatusError ante respuestas 4xx/5xx.
        """
        config = await self.ensure_ready()
        headers = {'Authorization': build_auth_header(config), 'Accept': 'application/json'}

        if namespace is None:
            url = f"{config.site_url}{path}"
        else:
            url = f"{config.site_url}/wp-json/{namespace}{path}"

        if params:
            params = {k: v for k, v in params.items() if v is not None}

        logger.debug(f"{method} {url} params={params}")
        async with self.client(timeout) as client:
            response = await client.request(
                method, url, headers=headers, params=params,
                json=json, data=data, files=files,
            )
        response.raise_for_status()
        return response
