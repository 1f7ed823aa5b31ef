"""
Operaciones sobre la biblioteca de medios de WordPress
Subida desde ruta local o URL, listado, búsqueda, metadatos, borrado y optimización
"""

import asyncio
import logging
import mimetypes
import os
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from ..compression import ImageCompressor
from ..errors import ConfigurationError, ValidationError
from ..models import BatchFailure, Media, Result, raw_or_rendered
from .common import MAX_PER_PAGE, compact, page_totals
from .session import Session

logger = logging.getLogger(__name__)

MAX_SEARCH_RESULTS = 50


def is_remote_source(source: str) -> bool:
    return urlparse(source).scheme in ("http", "https")


def _guess_type(filename: str) -> str:
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or "application/octet-stream"


async def _fetch_remote(session: Session, url: str) -> Dict[str, Any]:
    """Descarga un archivo remoto para volver a enviarlo a WordPress"""
    async with session.client() as client:
        response = await client.get(url)
    response.raise_for_status()

    filename = os.path.basename(urlparse(url).path) or "upload"
    content_type = response.headers.get("Content-Type", "").split(";")[0].strip()
    return {
        "filename": filename,
        "content": response.content,
        "content_type": content_type or _guess_type(filename),
    }


async def _create_media(session: Session, filename: str, content: Any, content_type: str,
                        metadata: Dict[str, Any]) -> Media:
    """POST multipart a /media con los metadatos no vacíos en el mismo cuerpo"""
    fields = {k: v for k, v in metadata.items() if v}
    response = await session.request(
        'POST', '/media',
        files={'file': (filename, content, content_type)},
        data=fields or None,
    )
    return Media.from_api(response.json())


async def upload_media(session: Session, source: str, title: Optional[str] = None,
                       caption: Optional[str] = None, alt_text: Optional[str] = None,
                       description: Optional[str] = None) -> Result:
    """Sube un archivo multimedia desde una ruta local o una URL"""
    metadata = {
        'title': title,
        'caption': caption,
        'alt_text': alt_text,
        'description': description,
    }
    try:
        await session.ensure_ready()

        if is_remote_source(source):
            remote = await _fetch_remote(session, source)
            media = await _create_media(session, remote["filename"], remote["content"],
                                        remote["content_type"], metadata)
        else:
            path = Path(source).expanduser()
            if not path.is_file():
                raise ValidationError(f"File not found: {source}")
            with path.open('rb') as fh:
                media = await _create_media(session, path.name, fh, _guess_type(path.name), metadata)

        logger.info(f"Archivo subido: {media.id} ({media.mime_type})")
        return Result.ok(media=media)
    except Exception as e:
        logger.error(f"Error subiendo media desde {source}: {e}")
        return Result.fail(e)


async def list_media(session: Session, page: int = 1, per_page: int = 20, media_type: str = 'any',
                     mime_type: Optional[str] = None, order_by: str = 'date', order: str = 'desc',
                     parent: Optional[int] = None) -> Result:
    """Lista la biblioteca de medios con paginación y filtros"""
    try:
        if per_page > MAX_PER_PAGE:
            raise ValidationError(f"perPage cannot exceed {MAX_PER_PAGE}")

        response = await session.request('GET', '/media', params={
            'page': page,
            'per_page': per_page,
            'media_type': None if media_type == 'any' else media_type,
            'mime_type': mime_type or None,
            'orderby': order_by,
            'order': order,
            'parent': parent,
        })
        items = [Media.from_api(m) for m in response.json()]
        return Result.ok(media=items, **page_totals(response))
    except Exception as e:
        logger.error(f"Error listando media: {e}")
        return Result.fail(e)


async def search_media(session: Session, query: str, media_type: str = 'any',
                       date_after: Optional[str] = None, date_before: Optional[str] = None,
                       limit: int = 20) -> Result:
    """Busca en la biblioteca por palabra clave, tipo o fechas"""
    try:
        if limit > MAX_SEARCH_RESULTS:
            raise ValidationError(f"limit cannot exceed {MAX_SEARCH_RESULTS}")

        response = await session.request('GET', '/media', params={
            'search': query,
            'media_type': None if media_type == 'any' else media_type,
            'after': date_after or None,
            'before': date_before or None,
            'per_page': limit,
        })
        items = [Media.from_api(m) for m in response.json()]
        return Result.ok(media=items, total=len(items))
    except Exception as e:
        logger.error(f"Error buscando media '{query}': {e}")
        return Result.fail(e)


async def get_media_details(session: Session, media_id: int) -> Result:
    try:
        response = await session.request('GET', f'/media/{media_id}')
        return Result.ok(media=Media.from_api(response.json()))
    except Exception as e:
        logger.error(f"Error obteniendo media {media_id}: {e}")
        return Result.fail(e)


async def edit_media_metadata(session: Session, media_id: int, title: Optional[str] = None,
                              caption: Optional[str] = None, alt_text: Optional[str] = None,
                              description: Optional[str] = None) -> Result:
    """Actualiza título, leyenda, texto alternativo y descripción"""
    try:
        changes = compact(title=title, caption=caption, alt_text=alt_text, description=description)
        if not changes:
            raise ValidationError("No metadata fields provided to update")
        response = await session.request('POST', f'/media/{media_id}', json=changes)
        return Result.ok(media=Media.from_api(response.json()), updated_fields=sorted(changes))
    except Exception as e:
        logger.error(f"Error editando media {media_id}: {e}")
        return Result.fail(e)


async def delete_media(session: Session, media_id: int, force: bool = True) -> Result:
    """Elimina un archivo de la biblioteca (los adjuntos no pasan por papelera)"""
    try:
        await session.request('DELETE', f'/media/{media_id}', params={'force': force})
        return Result.ok(deleted=True, media_id=media_id)
    except Exception as e:
        logger.error(f"Error eliminando media {media_id}: {e}")
        return Result.fail(e)


async def bulk_delete_media(session: Session, media_ids: List[int], force: bool = True) -> Result:
    """
    Elimina varios archivos, uno tras otro

    Un fallo no detiene el lote: el resultado separa los IDs borrados de
    los fallidos.
    """
    try:
        if not media_ids:
            raise ValidationError("No media IDs provided for bulk deletion")
        await session.ensure_ready()
    except Exception as e:
        return Result.fail(e)

    deleted: List[int] = []
    failed: List[int] = []
    errors: List[BatchFailure] = []
    for media_id in media_ids:
        try:
            await session.request('DELETE', f'/media/{media_id}', params={'force': force})
            deleted.append(media_id)
        except Exception as e:
            logger.warning(f"Fallo eliminando media {media_id}: {e}")
            failed.append(media_id)
            errors.append(BatchFailure.from_exception(media_id, e))

    logger.info(f"Borrado masivo: {len(deleted)} eliminados, {len(failed)} fallidos")
    return Result.ok(deleted=deleted, failed=failed, errors=errors)


async def set_featured_image(session: Session, post_id: int, media_id: int) -> Result:
    """Asigna una imagen destacada a un post"""
    try:
        response = await session.request('POST', f'/posts/{post_id}', json={'featured_media': media_id})
        data = response.json()
        return Result.ok(post_id=data.get('id', post_id), featured_media=data.get('featured_media', media_id))
    except Exception as e:
        logger.error(f"Error asignando imagen destacada {media_id} al post {post_id}: {e}")
        return Result.fail(e)


async def optimize_media(session: Session, media_id: int, quality: int = 80,
                         replace_original: bool = False,
                         compressor: Optional[ImageCompressor] = None) -> Result:
    """
    Comprime una imagen de la biblioteca con TinyPNG

    La versión optimizada se sube como un adjunto nuevo con los mismos
    metadatos; con replace_original el adjunto original se elimina después.
    Sin TINYPNG_API_KEY la operación falla antes de cualquier petición.
    """
    compressor = compressor or ImageCompressor()
    try:
        if not compressor.is_available():
            raise ConfigurationError("TINYPNG_API_KEY is not set; image optimization is unavailable")

        response = await session.request('GET', f'/media/{media_id}', params={'context': 'edit'})
        original = response.json()
        if original.get('media_type') != 'image':
            raise ValidationError(f"Media {media_id} is not an image")

        source = await _fetch_remote(session, original['source_url'])
        compressed = await asyncio.to_thread(compressor.compress, source["content"])

        media = await _create_media(session, source["filename"], compressed.data, compressed.mime_type, {
            'title': raw_or_rendered(original.get('title')),
            'caption': raw_or_rendered(original.get('caption')),
            'alt_text': original.get('alt_text'),
            'description': raw_or_rendered(original.get('description')),
        })

        if replace_original:
            await session.request('DELETE', f'/media/{media_id}', params={'force': True})

        logger.info(f"Media {media_id} optimizado como {media.id} (-{compressed.savings_percent}%)")
        return Result.ok(
            original_id=media_id,
            media=media,
            original_size=compressed.input_size,
            optimized_size=compressed.output_size,
            savings_percent=compressed.savings_percent,
            quality=quality,
            replaced_original=replace_original,
        )
    except Exception as e:
        logger.error(f"Error optimizando media {media_id}: {e}")
        return Result.fail(e)
