"""
Modelos del bridge de WordPress
Vistas simplificadas de los recursos del REST API y sobre de resultados
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Union

from .errors import ErrorInfo, format_error


def rendered(value: Any) -> str:
    """Aplana los objetos {rendered: ...} de WordPress a texto plano"""
    if isinstance(value, dict):
        return value.get("rendered") or value.get("raw") or ""
    if value is None:
        return ""
    return str(value)


def raw_or_rendered(value: Any) -> str:
    """Prefiere el valor 'raw' (context=edit) sobre el renderizado"""
    if isinstance(value, dict) and value.get("raw") is not None:
        return value["raw"]
    return rendered(value)


@dataclass
class Result:
    """Sobre {success, payload, error} devuelto por todas las operaciones"""
    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[ErrorInfo] = None

    @classmethod
    def ok(cls, **payload) -> "Result":
        return cls(True, payload)

    @classmethod
    def fail(cls, error: Union[BaseException, ErrorInfo], **payload) -> "Result":
        info = error if isinstance(error, ErrorInfo) else format_error(error)
        return cls(False, payload, info)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        envelope: Dict[str, Any] = {"success": self.success}
        for key, value in self.data.items():
            envelope[key] = _serialize(value)
        if self.error is not None:
            envelope["error"] = self.error.to_payload()
        return envelope


def _serialize(value: Any) -> Any:
    if hasattr(value, "__dataclass_fields__"):
        return asdict(value)
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    return value


# === Posts ===

@dataclass
class Post:
    """Post recién creado o actualizado"""
    id: int
    title: str
    link: str
    status: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Post":
        return cls(
            id=data["id"],
            title=rendered(data.get("title")),
            link=data.get("link", ""),
            status=data.get("status", ""),
        )


@dataclass
class PostSummary:
    id: int
    title: str
    excerpt: str
    status: str
    link: str
    date: str
    modified: str
    categories: List[int]
    tags: List[int]
    author: int

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "PostSummary":
        return cls(
            id=data["id"],
            title=rendered(data.get("title")),
            excerpt=rendered(data.get("excerpt")),
            status=data.get("status", ""),
            link=data.get("link", ""),
            date=data.get("date", ""),
            modified=data.get("modified", ""),
            categories=list(data.get("categories") or []),
            tags=list(data.get("tags") or []),
            author=data.get("author", 0),
        )


@dataclass
class Revision:
    id: int
    author: int
    date: str
    modified: str
    title: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Revision":
        return cls(
            id=data["id"],
            author=data.get("author", 0),
            date=data.get("date", ""),
            modified=data.get("modified", ""),
            title=rendered(data.get("title")),
        )


@dataclass
class PostDetail:
    id: int
    title: str
    content: str
    excerpt: str
    status: str
    link: str
    date: str
    modified: str
    categories: List[int]
    tags: List[int]
    author: int
    featured_media: int = 0
    revisions: Optional[List[Revision]] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "PostDetail":
        return cls(
            id=data["id"],
            title=rendered(data.get("title")),
            content=rendered(data.get("content")),
            excerpt=rendered(data.get("excerpt")),
            status=data.get("status", ""),
            link=data.get("link", ""),
            date=data.get("date", ""),
            modified=data.get("modified", ""),
            categories=list(data.get("categories") or []),
            tags=list(data.get("tags") or []),
            author=data.get("author", 0),
            featured_media=data.get("featured_media") or 0,
        )


# === Taxonomías ===

@dataclass
class Category:
    id: int
    name: str
    slug: str
    count: int
    description: str = ""
    parent: int = 0

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Category":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            slug=data.get("slug", ""),
            count=data.get("count", 0),
            description=data.get("description") or "",
            parent=data.get("parent") or 0,
        )


@dataclass
class Tag:
    id: int
    name: str
    slug: str
    count: int
    description: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Tag":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            slug=data.get("slug", ""),
            count=data.get("count", 0),
            description=data.get("description") or "",
        )


@dataclass
class Taxonomy:
    slug: str
    name: str
    description: str
    hierarchical: bool
    rest_base: str
    types: List[str]

    @classmethod
    def from_api(cls, slug: str, data: Dict[str, Any]) -> "Taxonomy":
        return cls(
            slug=data.get("slug") or slug,
            name=data.get("name", ""),
            description=data.get("description") or "",
            hierarchical=bool(data.get("hierarchical")),
            rest_base=data.get("rest_base") or slug,
            types=list(data.get("types") or []),
        )


# === Usuarios ===

@dataclass
class User:
    id: int
    username: str
    name: str
    first_name: str
    last_name: str
    email: str
    roles: List[str]
    registered_date: str
    capabilities: Optional[Dict[str, bool]] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "User":
        roles = data.get("roles") or []
        if not isinstance(roles, list):
            roles = [str(roles)]
        return cls(
            id=data["id"],
            username=data.get("username") or data.get("slug", ""),
            name=data.get("name", ""),
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            email=data.get("email", ""),
            roles=roles,
            registered_date=data.get("registered_date", ""),
        )


# === Media ===

@dataclass
class Media:
    id: int
    title: str
    caption: str
    alt_text: str
    description: str
    media_type: str
    mime_type: str
    source_url: str
    date: str
    link: str
    slug: str
    width: Optional[int] = None
    height: Optional[int] = None
    filesize: Optional[int] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Media":
        details = data.get("media_details") or {}
        return cls(
            id=data["id"],
            title=rendered(data.get("title")),
            caption=rendered(data.get("caption")),
            alt_text=data.get("alt_text", ""),
            description=rendered(data.get("description")),
            media_type=data.get("media_type", ""),
            mime_type=data.get("mime_type", ""),
            source_url=data.get("source_url", ""),
            date=data.get("date", ""),
            link=data.get("link", ""),
            slug=data.get("slug", ""),
            width=details.get("width"),
            height=details.get("height"),
            filesize=details.get("filesize"),
        )


@dataclass
class BatchFailure:
    """Fallo de un elemento dentro de una operación por lotes"""
    id: int
    error: Union[Dict[str, Any], str]

    @classmethod
    def from_exception(cls, item_id: int, error: BaseException) -> "BatchFailure":
        return cls(id=item_id, error=format_error(error).to_payload())
