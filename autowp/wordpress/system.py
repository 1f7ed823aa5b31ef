"""
Salud del sitio e información del sistema
Usa los endpoints wp-site-health/v1 y el índice del REST API
"""

import logging
from typing import Any, Dict, List

from ..models import Result, rendered
from .session import Session

logger = logging.getLogger(__name__)

SITE_HEALTH_NAMESPACE = "wp-site-health/v1"

# Pruebas de Site Health expuestas por el núcleo vía REST
SITE_HEALTH_TESTS = (
    "background-updates",
    "loopback-requests",
    "https-status",
    "dotorg-communication",
    "authorization-header",
    "page-cache",
)


def overall_status(tests: List[Dict[str, Any]]) -> str:
    """critical si alguna prueba es crítica, should_improve si alguna es recomendada"""
    statuses = {t.get("status") for t in tests}
    if "critical" in statuses:
        return "critical"
    if "recommended" in statuses:
        return "should_improve"
    return "good"


async def get_site_health(session: Session, include_tests: bool = True,
                          include_info: bool = False) -> Result:
    """
    Ejecuta las pruebas de Site Health del núcleo

    Una prueba que falla por HTTP (p. ej. no disponible en versiones
    antiguas) se registra como 'unavailable' y no cuenta para el estado.
    """
    try:
        await session.ensure_ready()

        tests: List[Dict[str, Any]] = []
        for test in SITE_HEALTH_TESTS:
            try:
                response = await session.request('GET', f'/tests/{test}', namespace=SITE_HEALTH_NAMESPACE)
                data = response.json()
                tests.append({
                    "test": data.get("test", test),
                    "status": data.get("status", "good"),
                    "label": data.get("label", ""),
                    "badge": (data.get("badge") or {}).get("label", ""),
                })
            except Exception as e:
                logger.warning(f"Prueba de salud '{test}' no disponible: {e}")
                tests.append({"test": test, "status": "unavailable", "label": str(e), "badge": ""})

        payload: Dict[str, Any] = {"status": overall_status(tests)}
        if include_tests:
            payload["tests"] = tests
        if include_info:
            response = await session.request('GET', '/directory-sizes', namespace=SITE_HEALTH_NAMESPACE)
            payload["info"] = response.json()

        return Result.ok(**payload)
    except Exception as e:
        logger.error(f"Error obteniendo salud del sitio: {e}")
        return Result.fail(e)


async def get_system_info(session: Session, include_plugins: bool = True,
                          include_themes: bool = True, include_server: bool = True) -> Result:
    """Resumen del sitio: índice REST, plugins, temas y ajustes generales"""
    try:
        index = await session.request('GET', '/wp-json/', namespace=None)
        site = index.json()
        payload: Dict[str, Any] = {
            "site": {
                "name": site.get("name", ""),
                "description": site.get("description", ""),
                "url": site.get("url", ""),
                "home": site.get("home", ""),
                "namespaces": site.get("namespaces", []),
            }
        }

        if include_plugins:
            response = await session.request('GET', '/plugins')
            payload["plugins"] = [
                {
                    "plugin": p.get("plugin", ""),
                    "name": p.get("name", ""),
                    "version": p.get("version", ""),
                    "status": p.get("status", ""),
                }
                for p in response.json()
            ]

        if include_themes:
            response = await session.request('GET', '/themes')
            payload["themes"] = [
                {
                    "stylesheet": t.get("stylesheet", ""),
                    "name": rendered(t.get("name")),
                    "version": t.get("version", ""),
                    "status": t.get("status", ""),
                }
                for t in response.json()
            ]

        if include_server:
            response = await session.request('GET', '/settings')
            settings = response.json()
            payload["settings"] = {
                key: settings.get(key)
                for key in ("title", "url", "email", "timezone", "date_format", "language")
            }
            payload["site"]["gmt_offset"] = site.get("gmt_offset")
            payload["site"]["timezone_string"] = site.get("timezone_string")

        return Result.ok(**payload)
    except Exception as e:
        logger.error(f"Error obteniendo información del sistema: {e}")
        return Result.fail(e)
