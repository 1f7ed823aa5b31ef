"""
Operaciones sobre posts de WordPress
Crear, leer, actualizar, listar, borrar, programar y clonar posts
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..errors import ValidationError
from ..models import BatchFailure, Post, PostDetail, PostSummary, Result, Revision, raw_or_rendered
from .common import MAX_PER_PAGE, compact, csv_ids, page_totals
from .session import Session

logger = logging.getLogger(__name__)


async def create_post(session: Session, title: str, content: str, status: str = 'draft',
                      excerpt: str = '', categories: Optional[List[int]] = None,
                      tags: Optional[List[int]] = None) -> Result:
    """Crea un nuevo post"""
    try:
        response = await session.request('POST', '/posts', json={
            'title': title,
            'content': content,
            'status': status,
            'excerpt': excerpt,
            'categories': categories or [],
            'tags': tags or [],
        })
        post = Post.from_api(response.json())
        logger.info(f"Post creado: {post.id} ({post.status})")
        return Result.ok(post=post)
    except Exception as e:
        logger.error(f"Error creando post: {e}")
        return Result.fail(e)


async def get_post(session: Session, post_id: int, include_revisions: bool = False) -> Result:
    """Obtiene un post y, opcionalmente, su historial de revisiones"""
    try:
        response = await session.request('GET', f'/posts/{post_id}')
        post = PostDetail.from_api(response.json())

        if include_revisions:
            revisions = await session.request('GET', f'/posts/{post_id}/revisions')
            post.revisions = [Revision.from_api(r) for r in revisions.json()]

        return Result.ok(post=post)
    except Exception as e:
        logger.error(f"Error obteniendo post {post_id}: {e}")
        return Result.fail(e)


async def update_post(session: Session, post_id: int, title: Optional[str] = None,
                      content: Optional[str] = None, status: Optional[str] = None,
                      excerpt: Optional[str] = None, categories: Optional[List[int]] = None,
                      tags: Optional[List[int]] = None) -> Result:
    """Actualiza un post existente; solo se envían los campos informados"""
    try:
        changes = compact(title=title, content=content, status=status,
                          excerpt=excerpt, categories=categories, tags=tags)
        if not changes:
            raise ValidationError("No fields provided to update")

        response = await session.request('POST', f'/posts/{post_id}', json=changes)
        return Result.ok(post=Post.from_api(response.json()), updated_fields=sorted(changes))
    except Exception as e:
        logger.error(f"Error actualizando post {post_id}: {e}")
        return Result.fail(e)


async def list_posts(session: Session, page: int = 1, per_page: int = 10, status: str = 'any',
                     author: Optional[int] = None, categories: Optional[List[int]] = None,
                     tags: Optional[List[int]] = None, search: Optional[str] = None,
                     order_by: str = 'date', order: str = 'desc') -> Result:
    """Lista posts con paginación y filtros"""
    try:
        if per_page > MAX_PER_PAGE:
            raise ValidationError(f"perPage cannot exceed {MAX_PER_PAGE}")

        response = await session.request('GET', '/posts', params={
            'page': page,
            'per_page': per_page,
            'status': status,
            'author': author,
            'categories': csv_ids(categories),
            'tags': csv_ids(tags),
            'search': search or None,
            'orderby': order_by,
            'order': order,
        })
        posts = [PostSummary.from_api(p) for p in response.json()]
        return Result.ok(posts=posts, **page_totals(response))
    except Exception as e:
        logger.error(f"Error listando posts: {e}")
        return Result.fail(e)


async def delete_post(session: Session, post_id: int, force: bool = False) -> Result:
    """Elimina un post (papelera o borrado definitivo con force)"""
    try:
        response = await session.request('DELETE', f'/posts/{post_id}', params={'force': force})
        data = response.json()
        # Con force=true WordPress responde {deleted, previous}
        if force:
            previous = data.get('previous') or {}
            return Result.ok(deleted=bool(data.get('deleted')), post_id=post_id,
                             title=raw_or_rendered(previous.get('title')))
        return Result.ok(deleted=False, trashed=True, post=Post.from_api(data))
    except Exception as e:
        logger.error(f"Error eliminando post {post_id}: {e}")
        return Result.fail(e)


async def trash_post(session: Session, post_id: int) -> Result:
    return await delete_post(session, post_id, force=False)


async def restore_post(session: Session, post_id: int) -> Result:
    """Recupera un post de la papelera (WordPress lo deja como borrador)"""
    try:
        response = await session.request('POST', f'/posts/{post_id}', json={'status': 'draft'})
        return Result.ok(post=Post.from_api(response.json()))
    except Exception as e:
        logger.error(f"Error restaurando post {post_id}: {e}")
        return Result.fail(e)


def parse_publish_date(publish_date: str) -> datetime:
    """Valida una fecha ISO futura para programar un post"""
    try:
        scheduled = datetime.fromisoformat(publish_date.replace('Z', '+00:00'))
    except ValueError:
        raise ValidationError(
            "Invalid date format. Please use ISO format like '2024-12-25T10:00:00'"
        )

    now = datetime.now(timezone.utc) if scheduled.tzinfo else datetime.now()
    if scheduled <= now:
        raise ValidationError("Scheduled date must be in the future")
    return scheduled


async def schedule_post(session: Session, post_id: int, publish_date: str) -> Result:
    """Programa un post para publicarse en el futuro"""
    try:
        scheduled = parse_publish_date(publish_date)
        response = await session.request('POST', f'/posts/{post_id}', json={
            'status': 'future',
            'date': scheduled.isoformat(),
        })
        data = response.json()
        return Result.ok(post=Post.from_api(data), scheduled_for=data.get('date', scheduled.isoformat()))
    except Exception as e:
        logger.error(f"Error programando post {post_id}: {e}")
        return Result.fail(e)


async def clone_post(session: Session, post_id: int, new_title: Optional[str] = None,
                     status: str = 'draft') -> Result:
    """Duplica un post copiando contenido, extracto, categorías y etiquetas"""
    try:
        response = await session.request('GET', f'/posts/{post_id}', params={'context': 'edit'})
        original = response.json()

        title = new_title or f"Copy of {raw_or_rendered(original.get('title'))}"
        created = await session.request('POST', '/posts', json={
            'title': title,
            'content': raw_or_rendered(original.get('content')),
            'excerpt': raw_or_rendered(original.get('excerpt')),
            'status': status,
            'categories': original.get('categories') or [],
            'tags': original.get('tags') or [],
        })
        clone = Post.from_api(created.json())
        logger.info(f"Post {post_id} clonado como {clone.id}")
        return Result.ok(post=clone, source_id=post_id)
    except Exception as e:
        logger.error(f"Error clonando post {post_id}: {e}")
        return Result.fail(e)


async def bulk_update_posts(session: Session, post_ids: List[int], updates: Dict[str, Any]) -> Result:
    """
    Aplica los mismos cambios a varios posts, uno tras otro

    No es transaccional: cada post se actualiza de forma independiente y el
    resultado separa los IDs actualizados de los fallidos.
    """
    try:
        if not post_ids:
            raise ValidationError("No post IDs provided for bulk update")
        changes = compact(**updates)
        if not changes:
            raise ValidationError("No updates provided")
        await session.ensure_ready()
    except Exception as e:
        return Result.fail(e)

    updated: List[int] = []
    failed: List[int] = []
    errors: List[BatchFailure] = []
    for post_id in post_ids:
        try:
            await session.request('POST', f'/posts/{post_id}', json=changes)
            updated.append(post_id)
        except Exception as e:
            logger.warning(f"Fallo actualizando post {post_id}: {e}")
            failed.append(post_id)
            errors.append(BatchFailure.from_exception(post_id, e))

    return Result.ok(updated=updated, failed=failed, errors=errors)
