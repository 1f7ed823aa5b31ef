"""
Operaciones sobre usuarios y roles de WordPress
"""

import logging
import secrets
import string
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..errors import ValidationError
from ..models import Result, User
from .common import MAX_PER_PAGE, compact, page_totals
from .session import Session

logger = logging.getLogger(__name__)

STANDARD_ROLES = ('administrator', 'editor', 'author', 'contributor', 'subscriber')
PASSWORD_LENGTH = 12


def generate_password(length: int = PASSWORD_LENGTH) -> str:
    """Contraseña aleatoria alfanumérica"""
    alphabet = string.ascii_letters + string.digits
    return ''.join(secrets.choice(alphabet) for _ in range(length))


def _parse_date(value: str) -> datetime:
    """Fecha ISO a UTC sin zona; las fechas sin desplazamiento se toman como UTC"""
    parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _registered_between(user: User, after: Optional[datetime], before: Optional[datetime]) -> bool:
    if not user.registered_date:
        return after is None and before is None
    registered = _parse_date(user.registered_date)
    if after and registered <= after:
        return False
    if before and registered >= before:
        return False
    return True


async def list_users(session: Session, page: int = 1, per_page: int = 10, role: Optional[str] = None,
                     search: Optional[str] = None, order_by: str = 'registered_date', order: str = 'desc',
                     registered_after: Optional[str] = None,
                     registered_before: Optional[str] = None) -> Result:
    """
    Lista usuarios con filtros

    El endpoint de usuarios no filtra por fecha de registro, así que
    registered_after/registered_before se aplican sobre la página recibida.
    total sigue siendo el del sitio (X-WP-Total); count es lo devuelto.
    """
    try:
        if per_page > MAX_PER_PAGE:
            raise ValidationError(f"perPage cannot exceed {MAX_PER_PAGE}")
        try:
            after = _parse_date(registered_after) if registered_after else None
            before = _parse_date(registered_before) if registered_before else None
        except ValueError:
            raise ValidationError("Registration dates must be in ISO format")

        response = await session.request('GET', '/users', params={
            'page': page,
            'per_page': per_page,
            'roles': role or None,
            'search': search or None,
            'orderby': order_by,
            'order': order,
            'context': 'edit',
        })
        users = [User.from_api(u) for u in response.json()]
        if after or before:
            users = [u for u in users if _registered_between(u, after, before)]

        return Result.ok(users=users, count=len(users), **page_totals(response))
    except Exception as e:
        logger.error(f"Error listando usuarios: {e}")
        return Result.fail(e)


async def create_user(session: Session, username: str, email: str, password: str,
                      first_name: Optional[str] = None, last_name: Optional[str] = None,
                      display_name: Optional[str] = None, role: str = 'subscriber',
                      bio: Optional[str] = None, website: Optional[str] = None) -> Result:
    """Crea una cuenta de usuario"""
    try:
        response = await session.request('POST', '/users', json=compact(
            username=username,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            name=display_name or username,
            roles=[role],
            description=bio,
            url=website,
        ))
        user = User.from_api(response.json())
        logger.info(f"Usuario creado: {user.id} ({user.username})")
        return Result.ok(user=user)
    except Exception as e:
        logger.error(f"Error creando usuario '{username}': {e}")
        return Result.fail(e)


async def update_user(session: Session, user_id: int, email: Optional[str] = None,
                      first_name: Optional[str] = None, last_name: Optional[str] = None,
                      display_name: Optional[str] = None, bio: Optional[str] = None,
                      website: Optional[str] = None, password: Optional[str] = None) -> Result:
    """Actualiza el perfil de un usuario; solo se envían los campos informados"""
    try:
        changes = compact(
            email=email,
            first_name=first_name,
            last_name=last_name,
            name=display_name,
            description=bio,
            url=website,
            password=password,
        )
        if not changes:
            raise ValidationError("No fields provided to update")

        response = await session.request('POST', f'/users/{user_id}', json=changes)
        return Result.ok(user=User.from_api(response.json()), updated_fields=sorted(changes))
    except Exception as e:
        logger.error(f"Error actualizando usuario {user_id}: {e}")
        return Result.fail(e)


async def disable_user(session: Session, user_id: int, reason: Optional[str] = None) -> Result:
    """Desactiva una cuenta quitándole todos los roles"""
    try:
        response = await session.request('POST', f'/users/{user_id}', json={'roles': []})
        logger.warning(f"Usuario {user_id} desactivado. Motivo: {reason or 'sin especificar'}")
        return Result.ok(user=User.from_api(response.json()), disabled=True, reason=reason)
    except Exception as e:
        logger.error(f"Error desactivando usuario {user_id}: {e}")
        return Result.fail(e)


async def _find_user(session: Session, user_id: Optional[int], email: Optional[str]) -> Dict[str, Any]:
    if user_id is not None:
        response = await session.request('GET', f'/users/{user_id}', params={'context': 'edit'})
        return response.json()

    # Solo se usa la primera coincidencia de la búsqueda
    response = await session.request('GET', '/users', params={'search': email, 'context': 'edit'})
    matches = response.json()
    if not matches:
        raise ValidationError(f"No user found with email {email}")
    return matches[0]


async def reset_user_password(session: Session, user_id: Optional[int] = None,
                              email: Optional[str] = None, send_email: bool = True) -> Result:
    """
    Restablece la contraseña de un usuario

    Con send_email se dispara el correo estándar de WordPress
    (wp-login.php?action=lostpassword). Sin él se genera localmente una
    contraseña de 12 caracteres, se guarda en el usuario y se devuelve en
    la respuesta.
    """
    try:
        if user_id is None and not email:
            raise ValidationError("Either userId or email must be provided")

        user = await _find_user(session, user_id, email)
        target_id = user['id']

        if send_email:
            login = user.get('email') or user.get('username') or email
            await session.request(
                'POST', '/wp-login.php',
                params={'action': 'lostpassword'},
                data={'user_login': login},
                namespace=None,
            )
            logger.info(f"Correo de restablecimiento enviado al usuario {target_id}")
            return Result.ok(user_id=target_id, email_sent=True)

        new_password = generate_password()
        await session.request('POST', f'/users/{target_id}', json={'password': new_password})
        logger.warning(f"Contraseña del usuario {target_id} regenerada y devuelta al llamador")
        return Result.ok(user_id=target_id, email_sent=False, new_password=new_password)
    except Exception as e:
        logger.error(f"Error restableciendo contraseña: {e}")
        return Result.fail(e)


async def set_user_role(session: Session, user_id: int, role: str,
                        remove_other_roles: bool = True) -> Result:
    """
    Cambia el rol de un usuario

    remove_other_roles envía {roles: [role]}; si no, se envía {role: role}.
    """
    if role.lower() not in STANDARD_ROLES:
        logger.warning(f"'{role}' no es un rol estándar de WordPress, se aplica de todos modos")

    try:
        payload = {'roles': [role]} if remove_other_roles else {'role': role}
        response = await session.request('POST', f'/users/{user_id}', json=payload)
        user = User.from_api(response.json())
        return Result.ok(user_id=user.id, roles=user.roles)
    except Exception as e:
        logger.error(f"Error asignando rol '{role}' al usuario {user_id}: {e}")
        return Result.fail(e)


async def list_user_roles(session: Session, include_capabilities: bool = False) -> Result:
    """
    Lista los roles en uso en el sitio

    El REST API no expone los roles directamente: se deducen de los
    usuarios (context=edit) y, si se pide, de sus capacidades.
    """
    try:
        response = await session.request('GET', '/users', params={
            'per_page': MAX_PER_PAGE,
            'context': 'edit',
        })
        roles: Dict[str, Dict[str, Any]] = {}
        for data in response.json():
            user_roles = data.get('roles') or []
            for role in user_roles:
                entry = roles.setdefault(role, {'name': role, 'users': 0})
                entry['users'] += 1
                if include_capabilities and 'capabilities' not in entry and user_roles == [role]:
                    entry['capabilities'] = {
                        cap: granted for cap, granted in (data.get('capabilities') or {}).items()
                        if cap != role
                    }

        role_list: List[Dict[str, Any]] = sorted(roles.values(), key=lambda r: r['name'])
        if include_capabilities:
            for entry in role_list:
                entry.setdefault('capabilities', {})
        return Result.ok(roles=role_list)
    except Exception as e:
        logger.error(f"Error listando roles: {e}")
        return Result.fail(e)
