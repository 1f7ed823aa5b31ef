"""
Infraestructura de herramientas MCP
Registro de herramientas, parámetros validados con pydantic y respuestas de texto
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from mcp.types import Tool
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ..compression import ImageCompressor
from ..helpers import DraftStore
from ..models import Result
from ..wordpress import Session

logger = logging.getLogger(__name__)

URL_PATTERN = r"^https?://\S+$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class ToolParams(BaseModel):
    """Parámetros de herramienta: snake_case en Python, camelCase en el esquema"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


@dataclass
class ToolResponse:
    """Uno o más bloques de texto y el indicador de error"""
    texts: List[str]
    is_error: bool = False

    @classmethod
    def text(cls, *texts: str) -> "ToolResponse":
        return cls(list(texts))

    @classmethod
    def error(cls, text: str) -> "ToolResponse":
        return cls([text], is_error=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": [{"type": "text", "text": t} for t in self.texts],
            "isError": self.is_error,
        }


@dataclass
class ToolContext:
    """Dependencias compartidas por los handlers"""
    session: Session
    drafts: DraftStore = field(default_factory=DraftStore)
    compressor: ImageCompressor = field(default_factory=ImageCompressor)


Handler = Callable[[ToolContext, Any], Awaitable[ToolResponse]]


@dataclass
class ToolSpec:
    name: str
    description: str
    params: Type[ToolParams]
    handler: Handler

    def to_tool(self) -> Tool:
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.params.model_json_schema(by_alias=True),
        )


def to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def respond(result: Result, failure: str, summary: Callable[[Result], str]) -> ToolResponse:
    """Convierte un Result en respuesta: resumen legible + sobre JSON, o error"""
    if not result.success:
        payload = result.error.to_payload()
        detail = payload if isinstance(payload, str) else to_json(payload)
        return ToolResponse.error(f"{failure}: {detail}")
    return ToolResponse.text(summary(result), to_json(result.to_dict()))


class ToolRegistry:
    """Registro de herramientas por nombre"""

    def __init__(self):
        self._tools: Dict[str, ToolSpec] = {}

    def tool(self, name: str, description: str, params: Type[ToolParams]) -> Callable[[Handler], Handler]:
        def decorator(handler: Handler) -> Handler:
            if name in self._tools:
                raise ValueError(f"Tool already registered: {name}")
            self._tools[name] = ToolSpec(name, description, params, handler)
            return handler
        return decorator

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def names(self) -> List[str]:
        return list(self._tools)

    def get(self, name: str) -> Optional[ToolSpec]:
        return self._tools.get(name)

    def list_tools(self) -> List[Tool]:
        return [spec.to_tool() for spec in self._tools.values()]

    async def call(self, context: ToolContext, name: str,
                   arguments: Optional[Dict[str, Any]]) -> ToolResponse:
        """Valida los argumentos y ejecuta la herramienta; nunca lanza"""
        spec = self._tools.get(name)
        if spec is None:
            return ToolResponse.error(f"Unknown tool: {name}")

        try:
            params = spec.params.model_validate(arguments or {})
        except PydanticValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
                for err in e.errors()
            )
            return ToolResponse.error(f"Invalid parameters for {name}: {details}")

        try:
            return await spec.handler(context, params)
        except Exception as e:
            logger.exception(f"Error ejecutando la herramienta {name}")
            return ToolResponse.error(f"Error executing {name}: {e}")


registry = ToolRegistry()
