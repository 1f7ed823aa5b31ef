"""Operaciones sobre el REST API de WordPress agrupadas por recurso."""

from .session import Session, SessionConfig, build_auth_header, probe_site_connection

__all__ = ["Session", "SessionConfig", "build_auth_header", "probe_site_connection"]
