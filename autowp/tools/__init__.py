"""
Herramientas MCP de AutoWP

Importar los submódulos registra cada herramienta en `registry`.
"""

from . import auth, media, posts, system, taxonomy, users  # noqa: F401
from .base import ToolContext, ToolParams, ToolRegistry, ToolResponse, ToolSpec, registry

__all__ = ["ToolContext", "ToolParams", "ToolRegistry", "ToolResponse", "ToolSpec", "registry"]
