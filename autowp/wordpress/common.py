"""Utilidades compartidas por las operaciones de recursos"""

from typing import Any, Dict, Iterable, List, Optional

import httpx

MAX_PER_PAGE = 100


def csv_ids(ids: Optional[Iterable[int]]) -> Optional[str]:
    """Lista de IDs en el formato que espera WordPress (1,2,3)"""
    if not ids:
        return None
    return ",".join(str(i) for i in ids)


def unique_ids(*groups: Iterable[int]) -> List[int]:
    """Une varias listas de IDs conservando el orden y sin duplicados"""
    seen: Dict[int, None] = {}
    for group in groups:
        for item in group or []:
            seen.setdefault(item, None)
    return list(seen)


def _header_int(response: httpx.Response, name: str, default: int) -> int:
    try:
        return int(response.headers.get(name) or default)
    except ValueError:
        return default


def page_totals(response: httpx.Response) -> Dict[str, int]:
    """Lee X-WP-TotalPages / X-WP-Total (por defecto 1 y 0, también si vienen vacías o mal formadas)"""
    return {
        "total_pages": _header_int(response, "x-wp-totalpages", 1),
        "total": _header_int(response, "x-wp-total", 0),
    }


def compact(**fields: Any) -> Dict[str, Any]:
    """Descarta los campos no informados (None)"""
    return {k: v for k, v in fields.items() if v is not None}
