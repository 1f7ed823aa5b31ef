#!/usr/bin/env python3
"""
Servidor MCP de AutoWP
Expone las operaciones del REST API de WordPress como herramientas MCP sobre stdio
"""

import asyncio
import logging
import sys
from typing import Any, Dict, List, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .compression import ImageCompressor
from .config import Settings, setup_logging
from .helpers import DraftStore
from .tools import ToolContext, registry
from .wordpress import Session

logger = logging.getLogger(__name__)


class ToolCallError(Exception):
    """Fallo de una herramienta; el SDK lo devuelve con isError=True"""


async def connect_from_settings(session: Session, settings: Settings) -> bool:
    """Configura la sesión desde el entorno y prueba la autenticación"""
    if not settings.has_credentials:
        logger.warning("⚠️ Credenciales no configuradas: usa la herramienta 'authenticate'")
        return False

    await session.configure(
        site_url=settings.wp_url,
        username=settings.wp_user,
        password=settings.wp_password,
        app_password=settings.wp_app_password,
    )
    result = await session.test_authentication()
    if not result.success:
        logger.warning(f"⚠️ No se pudo autenticar al arrancar: {result.error.message}")
    return result.success


class AutoWPServer:
    """Servidor MCP que despacha las herramientas registradas"""

    def __init__(self, settings: Optional[Settings] = None, session: Optional[Session] = None):
        self.settings = settings or Settings.from_env()
        self.session = session or Session(timeout=self.settings.timeout)
        self.context = ToolContext(
            session=self.session,
            drafts=DraftStore(self.settings.drafts_file),
            compressor=ImageCompressor(self.settings.tinypng_api_key),
        )
        self.server = Server("autowp")
        self._setup_handlers()

    def _setup_handlers(self):
        """Configura los handlers del servidor MCP"""

        @self.server.list_tools()
        async def list_tools() -> List[Tool]:
            """Lista todas las herramientas disponibles"""
            return registry.list_tools()

        @self.server.call_tool()
        async def call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
            """Ejecuta una herramienta"""
            return await self.call_tool(name, arguments)

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> List[TextContent]:
        logger.info(f"Ejecutando herramienta: {name}")
        response = await registry.call(self.context, name, arguments)
        if response.is_error:
            logger.warning(f"❌ {name}: {response.texts[0]}")
            raise ToolCallError("\n".join(response.texts))
        return [TextContent(type="text", text=text) for text in response.texts]

    async def run(self):
        """Inicia el servidor MCP"""
        await connect_from_settings(self.session, self.settings)

        # Iniciar servidor STDIO
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options()
            )


async def main():
    """Punto de entrada principal"""
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    server = AutoWPServer(settings)
    await server.run()


def cli():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.critical(f"❌ Error fatal del servidor: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
