#!/usr/bin/env python3
"""
Servidor HTTP (REST API) para las herramientas de AutoWP
Expone las mismas herramientas MCP como endpoints HTTP simples
Útil para integraciones como n8n, Zapier o Make.com
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .compression import ImageCompressor
from .config import Settings, setup_logging
from .helpers import DraftStore
from .server import connect_from_settings
from .tools import ToolContext, registry
from .wordpress import Session

logger = logging.getLogger(__name__)

# Crear aplicación FastAPI
app = FastAPI(
    title="AutoWP HTTP API",
    description="Herramientas de WordPress sobre HTTP",
    version=__version__
)

# Configurar CORS para permitir requests desde n8n
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # En producción, especifica los dominios permitidos
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Contexto global compartido por todas las peticiones
context: Optional[ToolContext] = None


def build_context(settings: Settings) -> ToolContext:
    return ToolContext(
        session=Session(timeout=settings.timeout),
        drafts=DraftStore(settings.drafts_file),
        compressor=ImageCompressor(settings.tinypng_api_key),
    )


# === Eventos de inicio ===

@app.on_event("startup")
async def startup_event():
    """Crea la sesión y se autentica si el entorno trae credenciales"""
    global context

    if context is not None:
        return

    settings = Settings.from_env()
    setup_logging(settings.log_level)
    context = build_context(settings)
    if await connect_from_settings(context.session, settings):
        logger.info(f"✅ Sesión de WordPress lista: {settings.wp_url}")


def _require_context() -> ToolContext:
    if context is None:
        raise HTTPException(status_code=503, detail="Server not initialized")
    return context


# === Endpoints de salud ===

@app.get("/")
async def root():
    """Endpoint raíz - información del servidor"""
    ctx = _require_context()
    return {
        "name": "AutoWP HTTP API",
        "version": __version__,
        "status": "running",
        "wordpress_url": ctx.session.config.site_url or None,
        "tools": len(registry),
    }


@app.get("/health")
async def health_check():
    """Health check para Render y otros servicios"""
    ctx = _require_context()
    return {
        "status": "healthy",
        "wordpress": ctx.session.is_authenticated,
        "image_optimization": ctx.compressor.is_available(),
    }


# === Herramientas ===

@app.get("/tools")
async def list_tools():
    """Nombre, descripción y esquema de parámetros de cada herramienta"""
    return [
        {"name": tool.name, "description": tool.description, "inputSchema": tool.inputSchema}
        for tool in registry.list_tools()
    ]


@app.post("/tools/{name}")
async def call_tool(name: str, arguments: Optional[Dict[str, Any]] = Body(default=None)):
    """
    Ejecuta una herramienta con los argumentos del cuerpo JSON

    Ejemplo desde n8n:
    POST https://tu-app.render.com/tools/create-blog-post
    Body: {"title": "Hola", "content": "<p>Mundo</p>"}
    """
    ctx = _require_context()
    if name not in registry:
        raise HTTPException(status_code=404, detail=f"Unknown tool: {name}")

    response = await registry.call(ctx, name, arguments)
    return response.to_dict()


if __name__ == "__main__":
    import uvicorn

    settings = Settings.from_env()
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
