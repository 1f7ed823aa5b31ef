"""
Utilidades de contenido y borradores locales
"""

import json
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)

Draft = Dict[str, str]

_TAG_RE = re.compile(r'<[^>]*>?')
_IMG_RE = re.compile(r'<img[^>]+src="([^">]+)"')
_VIDEO_RE = re.compile(r'<video[^>]+src="([^">]+)"')


def format_post_content(content: str) -> str:
    """
    Convierte texto plano en HTML para WordPress

    Cada bloque separado por una línea en blanco se envuelve en <p>. Si el
    contenido ya trae <p>, <h1> o <div> se devuelve tal cual.
    """
    if '<p>' in content or '<h1>' in content or '<div>' in content:
        return content

    paragraphs = (p.strip() for p in content.split('\n\n'))
    return '\n'.join(f'<p>{p}</p>' for p in paragraphs if p)


def truncate_content(content: str, max_length: int = 150) -> str:
    """Quita las etiquetas HTML y recorta el texto con '...'"""
    plain = _TAG_RE.sub('', content)
    if len(plain) <= max_length:
        return plain
    return plain[:max_length].strip() + '...'


def extract_media_links(content: str) -> List[str]:
    """URLs de imágenes y vídeos incrustados en el contenido"""
    return _IMG_RE.findall(content) + _VIDEO_RE.findall(content)


class DraftStore:
    """Borradores guardados en un archivo JSON plano {postId: {title, content}}"""

    def __init__(self, path: Union[str, Path] = "drafts.json"):
        self.path = Path(path)

    def load_all(self) -> Dict[str, Draft]:
        try:
            with self.path.open(encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}

    def load(self, post_id: str) -> Optional[Draft]:
        return self.load_all().get(post_id)

    def save(self, post_id: str, title: str, content: str) -> None:
        drafts = self.load_all()
        drafts[post_id] = {"title": title, "content": content}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(drafts, f, indent=2, ensure_ascii=False)
        logger.info(f"Borrador guardado: {post_id} ({self.path})")
