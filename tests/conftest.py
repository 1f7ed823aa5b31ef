"""
Shared fixtures for the AutoWP test suite.

WordPress is simulated in memory behind httpx.MockTransport, so every test
runs without network access. The fake records each request it receives.
"""

import itertools
import json
import re
from base64 import b64encode
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qs

import httpx
import pytest

from autowp.compression import ImageCompressor
from autowp.helpers import DraftStore
from autowp.tools import ToolContext
from autowp.wordpress import Session

SITE = "https://example.com"
USERNAME = "bot"
APP_PASSWORD = "abcd 1234"
API = "/wp-json/wp/v2"

_FIELD_RE = re.compile(r'name="([^"]+)"(?:; filename="([^"]+)")?\r\n(?:Content-Type: [^\r]+\r\n)?\r\n(.*?)\r\n--',
                       re.S)


def _wrapped(value: str) -> Dict[str, str]:
    return {"rendered": value, "raw": value}


def _error(status: int, code: str, message: str) -> httpx.Response:
    return httpx.Response(status, json={"code": code, "message": message, "data": {"status": status}})


class FakeWordPress:
    """In-memory WordPress site speaking a subset of the REST API."""

    def __init__(self, site: str = SITE, username: str = USERNAME, secret: str = APP_PASSWORD,
                 roles: Optional[List[str]] = None):
        self.site = site
        self.auth = "Basic " + b64encode(f"{username}:{secret}".encode()).decode("ascii")
        self.me = {"id": 1, "name": "Bot", "slug": username, "roles": roles or ["administrator"]}
        self.requests: List[httpx.Request] = []
        self.failures: Dict[Tuple[str, str], int] = {}
        self.remote_files: Dict[str, Tuple[bytes, str]] = {}
        self.lost_password_logins: List[str] = []
        self._ids = itertools.count(100)

        self.posts: Dict[int, Dict[str, Any]] = {}
        self.revisions: Dict[int, List[Dict[str, Any]]] = {}
        self.categories: Dict[int, Dict[str, Any]] = {
            1: {"id": 1, "name": "Uncategorized", "slug": "uncategorized", "count": 0,
                "description": "", "parent": 0},
        }
        self.tags: Dict[int, Dict[str, Any]] = {}
        self.media: Dict[int, Dict[str, Any]] = {}
        self.users: Dict[int, Dict[str, Any]] = {
            1: {"id": 1, "username": username, "slug": username, "name": "Bot", "email": "bot@example.com",
                "first_name": "", "last_name": "", "roles": self.me["roles"],
                "registered_date": "2023-01-10T09:00:00+00:00",
                "capabilities": {"manage_options": True, "edit_posts": True}},
        }
        self.health = {
            "background-updates": "good",
            "loopback-requests": "good",
            "https-status": "recommended",
            "dotorg-communication": "good",
            "authorization-header": "good",
            "page-cache": "good",
        }

    # === Fixture helpers ===

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def api_requests(self) -> List[httpx.Request]:
        """Requests sent to the site itself (discovery and remote files excluded)."""
        return [r for r in self.requests if r.url.path.startswith(API) or r.url.path == "/wp-login.php"]

    def add_post(self, title: str = "Post", status: str = "publish", categories: Optional[List[int]] = None,
                 tags: Optional[List[int]] = None, content: str = "<p>Body</p>") -> Dict[str, Any]:
        post_id = next(self._ids)
        post = {
            "id": post_id,
            "title": _wrapped(title),
            "content": _wrapped(content),
            "excerpt": _wrapped(""),
            "status": status,
            "link": f"{self.site}/?p={post_id}",
            "date": "2024-01-01T10:00:00",
            "modified": "2024-01-01T10:00:00",
            "categories": list(categories or [1]),
            "tags": list(tags or []),
            "author": 1,
            "featured_media": 0,
        }
        self.posts[post_id] = post
        return post

    def add_category(self, name: str) -> Dict[str, Any]:
        term_id = next(self._ids)
        self.categories[term_id] = {"id": term_id, "name": name, "slug": name.lower(), "count": 0,
                                    "description": "", "parent": 0}
        return self.categories[term_id]

    def add_media(self, title: str = "photo", media_id: Optional[int] = None, mime_type: str = "image/jpeg",
                  content: bytes = b"\xff\xd8original-image-bytes") -> Dict[str, Any]:
        media_id = media_id or next(self._ids)
        filename = f"{title}.jpg"
        item = {
            "id": media_id,
            "title": _wrapped(title),
            "caption": _wrapped(""),
            "alt_text": "",
            "description": _wrapped(""),
            "media_type": "image" if mime_type.startswith("image/") else "file",
            "mime_type": mime_type,
            "source_url": f"{self.site}/wp-content/uploads/{filename}",
            "date": "2024-01-01T10:00:00",
            "link": f"{self.site}/{title}/",
            "slug": title,
            "media_details": {"width": 800, "height": 600, "filesize": len(content)},
        }
        self.media[media_id] = item
        self.remote_files[item["source_url"]] = (content, mime_type)
        return item

    def add_user(self, username: str, roles: List[str], email: Optional[str] = None,
                 registered_date: str = "2024-01-01T00:00:00+00:00") -> Dict[str, Any]:
        user_id = next(self._ids)
        self.users[user_id] = {
            "id": user_id, "username": username, "slug": username, "name": username.title(),
            "email": email or f"{username}@example.com", "first_name": "", "last_name": "",
            "roles": roles, "registered_date": registered_date,
            "capabilities": {role: True for role in roles},
        }
        return self.users[user_id]

    # === Routing ===

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url.copy_with(query=None))
        path = request.url.path

        if request.method == "GET" and url in self.remote_files:
            content, content_type = self.remote_files[url]
            return httpx.Response(200, content=content, headers={"Content-Type": content_type})

        failure = self.failures.get((request.method, path))
        if failure:
            return _error(failure, "internal_error", "Something went wrong")

        if path == "/wp-json/" and request.method == "GET":
            return httpx.Response(200, json={
                "name": "Example Site",
                "description": "Just another WordPress site",
                "url": self.site,
                "home": self.site,
                "gmt_offset": 0,
                "timezone_string": "UTC",
                "namespaces": ["oembed/1.0", "wp/v2", "wp-site-health/v1"],
            })

        if request.headers.get("Authorization") != self.auth:
            return _error(401, "rest_not_logged_in", "You are not currently logged in.")

        if path == "/wp-login.php":
            form = parse_qs(request.content.decode())
            self.lost_password_logins.extend(form.get("user_login", []))
            return httpx.Response(200, text="<html>Check your email</html>")

        if path.startswith("/wp-json/wp-site-health/v1"):
            return self._site_health(path[len("/wp-json/wp-site-health/v1"):])

        if not path.startswith(API):
            return _error(404, "rest_no_route", "No route was found matching the URL and request method.")

        parts = path[len(API):].strip("/").split("/")
        resource = parts[0]
        item_id = int(parts[1]) if len(parts) > 1 and parts[1].isdigit() else None
        handler = getattr(self, f"_{resource}", None)
        if handler is None:
            return _error(404, "rest_no_route", "No route was found matching the URL and request method.")
        return handler(request, item_id, parts[2:])

    @staticmethod
    def _body(request: httpx.Request) -> Dict[str, Any]:
        if not request.content:
            return {}
        return json.loads(request.content)

    @staticmethod
    def _paged(request: httpx.Request, items: List[Dict[str, Any]]) -> httpx.Response:
        per_page = int(request.url.params.get("per_page", 10))
        page = int(request.url.params.get("page", 1))
        total = len(items)
        total_pages = max(1, -(-total // per_page))
        window = items[(page - 1) * per_page: page * per_page]
        return httpx.Response(200, json=window, headers={
            "X-WP-Total": str(total),
            "X-WP-TotalPages": str(total_pages),
        })

    def _missing(self, resource: str) -> httpx.Response:
        return _error(404, f"rest_{resource}_invalid_id", f"Invalid {resource} ID.")

    # === Recursos ===

    def _users(self, request, item_id, rest):
        if item_id is None and request.url.path.rstrip("/").endswith("/users/me"):
            return httpx.Response(200, json=self.me)

        if item_id is None:
            if request.method == "POST":
                body = self._body(request)
                user = self.add_user(body["username"], body.get("roles") or ["subscriber"], email=body.get("email"))
                user.update({k: body[k] for k in ("first_name", "last_name", "name", "description", "url")
                             if k in body})
                return httpx.Response(201, json=user)
            users = list(self.users.values())
            search = request.url.params.get("search")
            if search:
                users = [u for u in users if search in u["email"] or search in u["username"]]
            role = request.url.params.get("roles")
            if role:
                users = [u for u in users if role in u["roles"]]
            return self._paged(request, users)

        user = self.users.get(item_id)
        if user is None:
            return self._missing("user")
        if request.method == "POST":
            body = self._body(request)
            if "roles" in body:
                user["roles"] = list(body.pop("roles"))
            if "role" in body:
                user["roles"] = [body.pop("role")]
            user.update(body)
        return httpx.Response(200, json=user)

    def _posts(self, request, item_id, rest):
        if item_id is None:
            if request.method == "POST":
                body = self._body(request)
                post = self.add_post(body["title"], status=body.get("status", "draft"),
                                     categories=body.get("categories") or None, tags=body.get("tags"),
                                     content=body.get("content", ""))
                post["excerpt"] = _wrapped(body.get("excerpt", ""))
                return httpx.Response(201, json=post)

            posts = list(self.posts.values())
            status = request.url.params.get("status", "publish")
            if status == "any":
                posts = [p for p in posts if p["status"] != "trash"]
            else:
                posts = [p for p in posts if p["status"] == status]
            for field in ("categories", "tags"):
                wanted = request.url.params.get(field)
                if wanted:
                    ids = {int(i) for i in wanted.split(",")}
                    posts = [p for p in posts if ids & set(p[field])]
            return self._paged(request, posts)

        post = self.posts.get(item_id)
        if post is None:
            return self._missing("post")

        if rest == ["revisions"]:
            return httpx.Response(200, json=self.revisions.get(item_id, []))

        if request.method == "DELETE":
            if request.url.params.get("force") == "true":
                del self.posts[item_id]
                return httpx.Response(200, json={"deleted": True, "previous": post})
            post["status"] = "trash"
            return httpx.Response(200, json=post)

        if request.method == "POST":
            body = self._body(request)
            for key in ("title", "content", "excerpt"):
                if key in body:
                    post[key] = _wrapped(body.pop(key))
            post.update(body)
        return httpx.Response(200, json=post)

    def _terms(self, store, request, item_id):
        if item_id is None:
            if request.method == "POST":
                body = self._body(request)
                term_id = next(self._ids)
                store[term_id] = {"id": term_id, "name": body["name"],
                                  "slug": body.get("slug") or body["name"].lower().replace(" ", "-"),
                                  "count": 0, "description": body.get("description", ""),
                                  "parent": body.get("parent", 0)}
                return httpx.Response(201, json=store[term_id])
            return self._paged(request, list(store.values()))

        term = store.get(item_id)
        if term is None:
            return _error(404, "rest_term_invalid", "Term does not exist.")
        if request.method == "DELETE":
            del store[item_id]
            return httpx.Response(200, json={"deleted": True, "previous": term})
        if request.method == "POST":
            term.update(self._body(request))
        return httpx.Response(200, json=term)

    def _categories(self, request, item_id, rest):
        return self._terms(self.categories, request, item_id)

    def _tags(self, request, item_id, rest):
        return self._terms(self.tags, request, item_id)

    def _taxonomies(self, request, item_id, rest):
        return httpx.Response(200, json={
            "category": {"name": "Categories", "slug": "category", "description": "", "hierarchical": True,
                         "rest_base": "categories", "types": ["post"]},
            "post_tag": {"name": "Tags", "slug": "post_tag", "description": "", "hierarchical": False,
                         "rest_base": "tags", "types": ["post"]},
        })

    def _media(self, request, item_id, rest):
        if item_id is None:
            if request.method == "POST":
                fields, filename, content = {}, "upload", b""
                for match in _FIELD_RE.finditer(request.content.decode("latin-1")):
                    name, file_name, value = match.groups()
                    if file_name:
                        filename, content = file_name, value.encode("latin-1")
                    else:
                        fields[name] = value
                item = self.add_media(filename.rsplit(".", 1)[0], content=content)
                item["title"] = _wrapped(fields.get("title", item["slug"]))
                item["caption"] = _wrapped(fields.get("caption", ""))
                item["alt_text"] = fields.get("alt_text", "")
                item["description"] = _wrapped(fields.get("description", ""))
                return httpx.Response(201, json=item)

            items = list(self.media.values())
            media_type = request.url.params.get("media_type")
            if media_type:
                items = [m for m in items if m["media_type"] == media_type]
            search = request.url.params.get("search")
            if search:
                items = [m for m in items if search in m["title"]["rendered"]]
            return self._paged(request, items)

        item = self.media.get(item_id)
        if item is None:
            return self._missing("post")
        if request.method == "DELETE":
            if request.url.params.get("force") != "true":
                return _error(501, "rest_trash_not_supported", "The media does not support trashing.")
            del self.media[item_id]
            return httpx.Response(200, json={"deleted": True, "previous": item})
        if request.method == "POST":
            body = self._body(request)
            for key in ("title", "caption", "description"):
                if key in body:
                    item[key] = _wrapped(body.pop(key))
            item.update(body)
        return httpx.Response(200, json=item)

    def _plugins(self, request, item_id, rest):
        return httpx.Response(200, json=[
            {"plugin": "akismet/akismet", "name": "Akismet", "version": "5.3", "status": "active"},
            {"plugin": "hello/hello", "name": "Hello Dolly", "version": "1.7", "status": "inactive"},
        ])

    def _themes(self, request, item_id, rest):
        return httpx.Response(200, json=[
            {"stylesheet": "twentytwentyfour", "name": {"rendered": "Twenty Twenty-Four"},
             "version": "1.0", "status": "active"},
        ])

    def _settings(self, request, item_id, rest):
        return httpx.Response(200, json={
            "title": "Example Site", "url": self.site, "email": "admin@example.com",
            "timezone": "UTC", "date_format": "F j, Y", "language": "en_US",
        })

    def _site_health(self, path: str) -> httpx.Response:
        if path == "/directory-sizes":
            return httpx.Response(200, json={"wordpress_size": {"size": "50 MB", "raw": 52428800}})
        test = path.rsplit("/", 1)[-1]
        if test not in self.health:
            return _error(404, "rest_no_route", "No route was found matching the URL and request method.")
        return httpx.Response(200, json={
            "test": test,
            "status": self.health[test],
            "label": f"{test} check",
            "badge": {"label": "Performance", "color": "blue"},
        })


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def wordpress():
    """An empty fake site with one administrator account."""
    return FakeWordPress()


@pytest.fixture
def session(wordpress):
    """A session wired to the fake site but not configured yet."""
    return Session(transport=wordpress.transport)


@pytest.fixture
async def auth_session(session):
    """A configured and authenticated session."""
    await session.configure(site_url=SITE, username=USERNAME, app_password=APP_PASSWORD)
    result = await session.test_authentication()
    assert result.success
    return session


@pytest.fixture
def tool_context(session, tmp_path):
    return ToolContext(
        session=session,
        drafts=DraftStore(tmp_path / "drafts.json"),
        compressor=ImageCompressor(api_key=""),
    )
