"""
Tests for the MCP tool layer: registry, parameter schemas and dispatch.
"""

import json

import pytest

from autowp.config import Settings
from autowp.server import AutoWPServer, ToolCallError, connect_from_settings
from autowp.tools import registry

from .conftest import APP_PASSWORD, SITE, USERNAME

EXPECTED_TOOLS = {
    "authenticate", "test-wp-connection", "create-blog-post", "save-draft", "load-draft",
    "format-wp-content", "update-post", "get-post", "list-posts", "delete-post", "trash-post",
    "restore-post", "schedule-post", "clone-post", "bulk-update-posts", "get-wp-categories",
    "get-wp-tags", "create-category", "update-category", "delete-category", "create-tag",
    "delete-tag", "merge-categories", "bulk-assign-categories", "bulk-assign-tags",
    "list-taxonomies", "upload-media", "list-media", "search-media", "get-media-details",
    "edit-media-metadata", "delete-media", "set-featured-image", "optimize-media",
    "bulk-delete-media", "list-users", "create-user", "update-user", "disable-user",
    "reset-user-password", "set-user-role", "list-user-roles", "get-site-health", "get-system-info",
}

AUTH_ARGS = {"siteUrl": SITE, "username": USERNAME, "appPassword": APP_PASSWORD}


async def _authenticate(ctx):
    response = await registry.call(ctx, "authenticate", AUTH_ARGS)
    assert response.is_error is False, response.texts
    return response


class TestRegistry:

    @pytest.mark.unit
    def test_every_tool_is_registered(self):
        assert set(registry.names()) == EXPECTED_TOOLS

    @pytest.mark.unit
    def test_schemas_use_camel_case(self):
        schema = registry.get("list-posts").to_tool().inputSchema

        assert schema["type"] == "object"
        assert schema["properties"]["perPage"]["maximum"] == 100
        assert schema["properties"]["perPage"]["default"] == 10
        assert "per_page" not in schema["properties"]
        assert set(schema["properties"]["order"]["enum"]) == {"asc", "desc"}

    @pytest.mark.unit
    def test_required_fields(self):
        schema = registry.get("merge-categories").to_tool().inputSchema
        assert set(schema["required"]) == {"sourceCategoryId", "targetCategoryId"}
        assert schema["properties"]["deleteSource"]["default"] is True


class TestDispatch:

    @pytest.mark.asyncio
    async def test_unknown_tool(self, tool_context):
        response = await registry.call(tool_context, "make-coffee", {})
        assert response.is_error is True
        assert "Unknown tool" in response.texts[0]

    @pytest.mark.asyncio
    async def test_authenticate_then_create_post(self, tool_context, wordpress):
        auth = await _authenticate(tool_context)
        assert "administrator" in auth.texts[0]

        response = await registry.call(tool_context, "create-blog-post",
                                       {"title": "Hello", "content": "<p>World</p>"})

        assert response.is_error is False
        envelope = json.loads(response.texts[1])
        assert envelope["success"] is True
        assert isinstance(envelope["post"]["id"], int)
        assert envelope["post"]["status"] == "draft"

    @pytest.mark.asyncio
    async def test_authenticate_requires_a_secret(self, tool_context, wordpress):
        response = await registry.call(tool_context, "authenticate", {"siteUrl": SITE, "username": USERNAME})

        assert response.is_error is True
        assert "password" in response.texts[0]
        assert wordpress.requests == []

    @pytest.mark.asyncio
    async def test_rejected_credentials_are_an_error(self, tool_context):
        response = await registry.call(tool_context, "authenticate",
                                       {"siteUrl": SITE, "username": USERNAME, "password": "wrong"})
        assert response.is_error is True
        assert response.texts[0].startswith("Authentication failed")

    @pytest.mark.asyncio
    async def test_not_authenticated_error_text(self, tool_context):
        await tool_context.session.configure(site_url=SITE)
        response = await registry.call(tool_context, "get-wp-categories", {})

        assert response.is_error is True
        assert response.texts == ["Failed to get categories: Not authenticated"]

    @pytest.mark.asyncio
    async def test_list_media_per_page_rejected_before_request(self, tool_context, wordpress):
        await _authenticate(tool_context)
        before = len(wordpress.requests)

        response = await registry.call(tool_context, "list-media", {"perPage": 101})

        assert response.is_error is True
        assert "perPage" in response.texts[0]
        assert len(wordpress.requests) == before

    @pytest.mark.asyncio
    async def test_bulk_delete_requires_ids(self, tool_context, wordpress):
        await _authenticate(tool_context)
        before = len(wordpress.requests)

        response = await registry.call(tool_context, "bulk-delete-media", {"mediaIds": []})

        assert response.is_error is True
        assert len(wordpress.requests) == before

    @pytest.mark.asyncio
    async def test_merge_same_category_rejected(self, tool_context, wordpress):
        await _authenticate(tool_context)
        before = len(wordpress.requests)

        response = await registry.call(tool_context, "merge-categories",
                                       {"sourceCategoryId": 3, "targetCategoryId": 3})

        assert response.is_error is True
        assert "different" in response.texts[0]
        assert len(wordpress.requests) == before

    @pytest.mark.asyncio
    async def test_optimize_without_key(self, tool_context):
        await _authenticate(tool_context)
        response = await registry.call(tool_context, "optimize-media", {"mediaId": 1})

        assert response.is_error is True
        assert "TINYPNG_API_KEY" in response.texts[0]

    @pytest.mark.asyncio
    async def test_remote_error_is_serialized(self, tool_context):
        await _authenticate(tool_context)
        response = await registry.call(tool_context, "get-post", {"postId": 999})

        assert response.is_error is True
        detail = json.loads(response.texts[0].split(": ", 1)[1])
        assert detail["status"] == 404
        assert detail["statusText"] == "Not Found"

    @pytest.mark.asyncio
    async def test_bulk_update_nested_updates(self, tool_context, wordpress):
        await _authenticate(tool_context)
        post = wordpress.add_post("A")

        response = await registry.call(tool_context, "bulk-update-posts",
                                       {"postIds": [post["id"]], "updates": {"status": "private"}})

        assert response.texts[0] == "Updated 1 posts, 0 failed"
        assert wordpress.posts[post["id"]]["status"] == "private"

    @pytest.mark.asyncio
    async def test_list_users_summary_counts_filtered_page(self, tool_context, wordpress):
        await _authenticate(tool_context)
        wordpress.add_user("old", ["author"], registered_date="2020-05-01T00:00:00+00:00")

        response = await registry.call(tool_context, "list-users", {"registeredBefore": "2021-01-01T00:00:00"})

        assert response.is_error is False
        assert response.texts[0].startswith("Showing 1 of 2 users on the site\n- old")

    @pytest.mark.asyncio
    async def test_connection_tool(self, tool_context):
        response = await registry.call(tool_context, "test-wp-connection", {"siteUrl": SITE})
        assert response.is_error is False

        missing = await registry.call(tool_context, "test-wp-connection", {})
        assert missing.texts == ["WordPress site URL not configured"]


class TestLocalTools:

    @pytest.mark.asyncio
    async def test_save_and_load_draft(self, tool_context):
        saved = await registry.call(tool_context, "save-draft",
                                    {"postId": "idea-1", "title": "Idea", "content": "Draft body"})
        assert saved.is_error is False

        loaded = await registry.call(tool_context, "load-draft", {"postId": "idea-1"})
        assert json.loads(loaded.texts[1]) == {"title": "Idea", "content": "Draft body"}

    @pytest.mark.asyncio
    async def test_load_missing_draft(self, tool_context):
        response = await registry.call(tool_context, "load-draft", {"postId": "nope"})
        assert response.is_error is True

    @pytest.mark.asyncio
    async def test_format_content(self, tool_context):
        response = await registry.call(tool_context, "format-wp-content", {"content": "One\n\nTwo"})
        assert response.texts == ["<p>One</p>\n<p>Two</p>"]


class TestServer:

    @pytest.mark.asyncio
    async def test_call_tool_returns_text_content(self, tool_context):
        server = AutoWPServer(settings=Settings(), session=tool_context.session)

        content = await server.call_tool("format-wp-content", {"content": "Hi"})

        assert [c.type for c in content] == ["text"]
        assert content[0].text == "<p>Hi</p>"

    @pytest.mark.asyncio
    async def test_call_tool_raises_on_error(self, tool_context):
        server = AutoWPServer(settings=Settings(), session=tool_context.session)

        with pytest.raises(ToolCallError, match="WordPress site URL not configured"):
            await server.call_tool("list-posts", {})

    @pytest.mark.asyncio
    async def test_connect_from_settings(self, session):
        settings = Settings(wp_url=SITE, wp_user=USERNAME, wp_app_password=APP_PASSWORD)
        assert await connect_from_settings(session, settings) is True
        assert session.is_authenticated is True

    @pytest.mark.asyncio
    async def test_connect_without_credentials(self, session, wordpress):
        assert await connect_from_settings(session, Settings()) is False
        assert wordpress.requests == []
