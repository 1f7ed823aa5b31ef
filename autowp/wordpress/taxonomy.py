"""
Operaciones sobre taxonomías de WordPress
Categorías, etiquetas, fusión de categorías y asignación masiva a posts
"""

import logging
from typing import List, Optional

from ..errors import ValidationError
from ..models import BatchFailure, Category, Result, Tag, Taxonomy
from .common import MAX_PER_PAGE, compact, unique_ids
from .session import Session

logger = logging.getLogger(__name__)


# === Categorías ===

async def get_categories(session: Session) -> Result:
    """Lista todas las categorías"""
    try:
        response = await session.request('GET', '/categories', params={'per_page': MAX_PER_PAGE})
        return Result.ok(categories=[Category.from_api(c) for c in response.json()])
    except Exception as e:
        logger.error(f"Error obteniendo categorías: {e}")
        return Result.fail(e)


async def create_category(session: Session, name: str, description: Optional[str] = None,
                          slug: Optional[str] = None, parent: Optional[int] = None) -> Result:
    """Crea una nueva categoría"""
    try:
        response = await session.request('POST', '/categories', json=compact(
            name=name, description=description or None, slug=slug or None, parent=parent,
        ))
        return Result.ok(category=Category.from_api(response.json()))
    except Exception as e:
        logger.error(f"Error creando categoría '{name}': {e}")
        return Result.fail(e)


async def update_category(session: Session, category_id: int, name: Optional[str] = None,
                          description: Optional[str] = None, slug: Optional[str] = None,
                          parent: Optional[int] = None) -> Result:
    """Actualiza una categoría existente"""
    try:
        changes = compact(name=name, description=description, slug=slug, parent=parent)
        if not changes:
            raise ValidationError("No fields provided to update")
        response = await session.request('POST', f'/categories/{category_id}', json=changes)
        return Result.ok(category=Category.from_api(response.json()))
    except Exception as e:
        logger.error(f"Error actualizando categoría {category_id}: {e}")
        return Result.fail(e)


async def delete_category(session: Session, category_id: int) -> Result:
    """Elimina una categoría (los términos no admiten papelera, se fuerza)"""
    try:
        response = await session.request('DELETE', f'/categories/{category_id}', params={'force': True})
        return Result.ok(deleted=bool(response.json().get('deleted', True)), category_id=category_id)
    except Exception as e:
        logger.error(f"Error eliminando categoría {category_id}: {e}")
        return Result.fail(e)


# === Etiquetas ===

async def get_tags(session: Session) -> Result:
    """Lista todas las etiquetas"""
    try:
        response = await session.request('GET', '/tags', params={'per_page': MAX_PER_PAGE})
        return Result.ok(tags=[Tag.from_api(t) for t in response.json()])
    except Exception as e:
        logger.error(f"Error obteniendo etiquetas: {e}")
        return Result.fail(e)


async def create_tag(session: Session, name: str, description: Optional[str] = None,
                     slug: Optional[str] = None) -> Result:
    """Crea una nueva etiqueta"""
    try:
        response = await session.request('POST', '/tags', json=compact(
            name=name, description=description or None, slug=slug or None,
        ))
        return Result.ok(tag=Tag.from_api(response.json()))
    except Exception as e:
        logger.error(f"Error creando etiqueta '{name}': {e}")
        return Result.fail(e)


async def delete_tag(session: Session, tag_id: int) -> Result:
    try:
        response = await session.request('DELETE', f'/tags/{tag_id}', params={'force': True})
        return Result.ok(deleted=bool(response.json().get('deleted', True)), tag_id=tag_id)
    except Exception as e:
        logger.error(f"Error eliminando etiqueta {tag_id}: {e}")
        return Result.fail(e)


# === Taxonomías registradas ===

async def list_taxonomies(session: Session) -> Result:
    """Lista las taxonomías registradas en el sitio"""
    try:
        response = await session.request('GET', '/taxonomies')
        data = response.json()
        taxonomies = [Taxonomy.from_api(slug, item) for slug, item in data.items()]
        return Result.ok(taxonomies=taxonomies)
    except Exception as e:
        logger.error(f"Error listando taxonomías: {e}")
        return Result.fail(e)


# === Fusión y asignación masiva ===

async def merge_categories(session: Session, source_category_id: int, target_category_id: int,
                           delete_source: bool = True) -> Result:
    """
    Mueve los posts de una categoría a otra y opcionalmente borra la origen

    Se procesan hasta 100 posts de la categoría origen, de uno en uno. No hay
    rollback: si un post falla, los ya migrados se quedan migrados y el
    resultado de error incluye sus IDs en migrated_posts.
    """
    migrated: List[int] = []
    try:
        if source_category_id == target_category_id:
            raise ValidationError("Source and target categories must be different")

        response = await session.request('GET', '/posts', params={
            'categories': source_category_id,
            'per_page': MAX_PER_PAGE,
            'status': 'any',
        })

        for post in response.json():
            categories = [c for c in post.get('categories') or [] if c != source_category_id]
            categories = unique_ids(categories, [target_category_id])
            await session.request('POST', f"/posts/{post['id']}", json={'categories': categories})
            migrated.append(post['id'])

        source_deleted = False
        if delete_source:
            await session.request('DELETE', f'/categories/{source_category_id}', params={'force': True})
            source_deleted = True

        logger.info(f"Categoría {source_category_id} fusionada en {target_category_id}: {len(migrated)} posts")
        return Result.ok(
            merged_posts=len(migrated),
            migrated_posts=migrated,
            source_deleted=source_deleted,
        )
    except Exception as e:
        logger.error(f"Error fusionando categorías {source_category_id} -> {target_category_id}: {e}")
        return Result.fail(e, merged_posts=len(migrated), migrated_posts=migrated)


async def _bulk_assign(session: Session, field: str, post_ids: List[int], term_ids: List[int],
                       replace_existing: bool) -> Result:
    try:
        if not post_ids:
            raise ValidationError("No post IDs provided")
        if not term_ids:
            raise ValidationError(f"No {field} IDs provided")
        await session.ensure_ready()
    except Exception as e:
        return Result.fail(e)

    updated: List[int] = []
    failed: List[int] = []
    errors: List[BatchFailure] = []
    for post_id in post_ids:
        try:
            if replace_existing:
                terms = unique_ids(term_ids)
            else:
                current = await session.request('GET', f'/posts/{post_id}', params={'context': 'edit'})
                terms = unique_ids(current.json().get(field) or [], term_ids)
            await session.request('POST', f'/posts/{post_id}', json={field: terms})
            updated.append(post_id)
        except Exception as e:
            logger.warning(f"Fallo asignando {field} al post {post_id}: {e}")
            failed.append(post_id)
            errors.append(BatchFailure.from_exception(post_id, e))

    return Result.ok(updated=updated, failed=failed, errors=errors)


async def bulk_assign_categories(session: Session, post_ids: List[int], category_ids: List[int],
                                 replace_existing: bool = False) -> Result:
    """Asigna categorías a varios posts (unión o reemplazo)"""
    return await _bulk_assign(session, 'categories', post_ids, category_ids, replace_existing)


async def bulk_assign_tags(session: Session, post_ids: List[int], tag_ids: List[int],
                           replace_existing: bool = False) -> Result:
    """Asigna etiquetas a varios posts (unión o reemplazo)"""
    return await _bulk_assign(session, 'tags', post_ids, tag_ids, replace_existing)
