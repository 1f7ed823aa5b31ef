"""Herramientas de posts, borradores locales y formato de contenido"""

import logging
from typing import List, Literal, Optional

from pydantic import Field

from ..helpers import format_post_content
from ..wordpress import posts
from .base import ToolContext, ToolParams, ToolResponse, registry, respond, to_json

logger = logging.getLogger(__name__)

PostStatus = Literal['draft', 'publish', 'pending', 'private']
ListStatus = Literal['any', 'draft', 'publish', 'pending', 'private', 'future', 'trash']


class CreatePostParams(ToolParams):
    title: str = Field(..., min_length=1, description="Post title")
    content: str = Field(..., description="Post content (HTML)")
    status: PostStatus = Field('draft', description="Post status")
    excerpt: str = Field('', description="Post excerpt")
    categories: List[int] = Field(default_factory=list, description="Category IDs")
    tags: List[int] = Field(default_factory=list, description="Tag IDs")


class PostIdParams(ToolParams):
    post_id: int = Field(..., ge=1, description="Post ID")


class GetPostParams(PostIdParams):
    include_revisions: bool = Field(False, description="Include the revision history")


class UpdatePostParams(PostIdParams):
    title: Optional[str] = None
    content: Optional[str] = None
    status: Optional[PostStatus] = None
    excerpt: Optional[str] = None
    categories: Optional[List[int]] = None
    tags: Optional[List[int]] = None


class ListPostsParams(ToolParams):
    page: int = Field(1, ge=1)
    per_page: int = Field(10, ge=1, le=100, description="Posts per page (max 100)")
    status: ListStatus = 'any'
    author: Optional[int] = Field(None, ge=1)
    categories: Optional[List[int]] = None
    tags: Optional[List[int]] = None
    search: Optional[str] = None
    order_by: Literal['date', 'title', 'modified', 'id', 'author', 'slug'] = 'date'
    order: Literal['asc', 'desc'] = 'desc'


class DeletePostParams(PostIdParams):
    force: bool = Field(False, description="Delete permanently instead of moving to trash")


class SchedulePostParams(PostIdParams):
    publish_date: str = Field(..., description="Future publish date in ISO format (2024-12-25T10:00:00)")


class ClonePostParams(PostIdParams):
    new_title: Optional[str] = Field(None, description="Title for the copy; defaults to 'Copy of <title>'")
    status: PostStatus = 'draft'


class PostUpdates(ToolParams):
    title: Optional[str] = None
    content: Optional[str] = None
    status: Optional[PostStatus] = None
    excerpt: Optional[str] = None
    categories: Optional[List[int]] = None
    tags: Optional[List[int]] = None


class BulkUpdatePostsParams(ToolParams):
    post_ids: List[int] = Field(..., min_length=1, description="Posts to update")
    updates: PostUpdates


class SaveDraftParams(ToolParams):
    post_id: str = Field(..., min_length=1, description="Local draft key")
    title: str
    content: str


class LoadDraftParams(ToolParams):
    post_id: str = Field(..., min_length=1, description="Local draft key")


class FormatContentParams(ToolParams):
    content: str = Field(..., description="Plain text; blank lines separate paragraphs")


def _post_line(r) -> str:
    post = r["post"]
    return f"Post {post.id} '{post.title}' ({post.status}) {post.link}"


@registry.tool("create-blog-post", "Create a new WordPress post", CreatePostParams)
async def create_blog_post(ctx: ToolContext, params: CreatePostParams) -> ToolResponse:
    result = await posts.create_post(
        ctx.session, params.title, params.content, status=params.status,
        excerpt=params.excerpt, categories=params.categories, tags=params.tags,
    )
    return respond(result, "Failed to create post", lambda r: f"✅ Created: {_post_line(r)}")


@registry.tool("get-post", "Get a post with its content and optional revision history", GetPostParams)
async def get_post(ctx: ToolContext, params: GetPostParams) -> ToolResponse:
    result = await posts.get_post(ctx.session, params.post_id, include_revisions=params.include_revisions)
    return respond(result, "Failed to get post", _post_line)


@registry.tool("update-post", "Update fields of an existing post", UpdatePostParams)
async def update_post(ctx: ToolContext, params: UpdatePostParams) -> ToolResponse:
    fields = params.model_dump(exclude={'post_id'}, exclude_none=True)
    result = await posts.update_post(ctx.session, params.post_id, **fields)
    return respond(result, "Failed to update post",
                   lambda r: f"✅ Updated {', '.join(r['updated_fields'])}: {_post_line(r)}")


@registry.tool("list-posts", "List posts with pagination and filters", ListPostsParams)
async def list_posts(ctx: ToolContext, params: ListPostsParams) -> ToolResponse:
    result = await posts.list_posts(ctx.session, **params.model_dump())
    return respond(
        result, "Failed to list posts",
        lambda r: f"Found {r['total']} posts (page {params.page} of {r['total_pages']})",
    )


@registry.tool("delete-post", "Delete a post (trash, or permanently with force)", DeletePostParams)
async def delete_post(ctx: ToolContext, params: DeletePostParams) -> ToolResponse:
    result = await posts.delete_post(ctx.session, params.post_id, force=params.force)
    verb = "Deleted" if params.force else "Moved to trash"
    return respond(result, "Failed to delete post", lambda r: f"🗑️ {verb}: post {params.post_id}")


@registry.tool("trash-post", "Move a post to the trash", PostIdParams)
async def trash_post(ctx: ToolContext, params: PostIdParams) -> ToolResponse:
    result = await posts.trash_post(ctx.session, params.post_id)
    return respond(result, "Failed to trash post", lambda r: f"🗑️ Moved to trash: post {params.post_id}")


@registry.tool("restore-post", "Restore a post from the trash (as draft)", PostIdParams)
async def restore_post(ctx: ToolContext, params: PostIdParams) -> ToolResponse:
    result = await posts.restore_post(ctx.session, params.post_id)
    return respond(result, "Failed to restore post", lambda r: f"♻️ Restored: {_post_line(r)}")


@registry.tool("schedule-post", "Schedule a post for future publication", SchedulePostParams)
async def schedule_post(ctx: ToolContext, params: SchedulePostParams) -> ToolResponse:
    result = await posts.schedule_post(ctx.session, params.post_id, params.publish_date)
    return respond(result, "Failed to schedule post",
                   lambda r: f"📅 Scheduled for {r['scheduled_for']}: {_post_line(r)}")


@registry.tool("clone-post", "Duplicate a post with its content, categories and tags", ClonePostParams)
async def clone_post(ctx: ToolContext, params: ClonePostParams) -> ToolResponse:
    result = await posts.clone_post(ctx.session, params.post_id, new_title=params.new_title,
                                    status=params.status)
    return respond(result, "Failed to clone post", lambda r: f"✅ Cloned {params.post_id}: {_post_line(r)}")


@registry.tool("bulk-update-posts", "Apply the same changes to several posts", BulkUpdatePostsParams)
async def bulk_update_posts(ctx: ToolContext, params: BulkUpdatePostsParams) -> ToolResponse:
    updates = params.updates.model_dump(exclude_none=True)
    result = await posts.bulk_update_posts(ctx.session, params.post_ids, updates)
    return respond(
        result, "Bulk update failed",
        lambda r: f"Updated {len(r['updated'])} posts, {len(r['failed'])} failed",
    )


# === Borradores locales y formato ===

@registry.tool("save-draft", "Save a draft to the local drafts file", SaveDraftParams)
async def save_draft(ctx: ToolContext, params: SaveDraftParams) -> ToolResponse:
    try:
        ctx.drafts.save(params.post_id, params.title, params.content)
    except OSError as e:
        logger.error(f"Error guardando borrador {params.post_id}: {e}")
        return ToolResponse.error(f"Failed to save draft: {e}")
    return ToolResponse.text(f"💾 Draft '{params.post_id}' saved to {ctx.drafts.path}")


@registry.tool("load-draft", "Load a draft from the local drafts file", LoadDraftParams)
async def load_draft(ctx: ToolContext, params: LoadDraftParams) -> ToolResponse:
    draft = ctx.drafts.load(params.post_id)
    if draft is None:
        return ToolResponse.error(f"Draft '{params.post_id}' not found")
    return ToolResponse.text(f"Draft '{params.post_id}': {draft.get('title', '')}", to_json(draft))


@registry.tool("format-wp-content", "Wrap plain-text paragraphs in <p> tags for WordPress", FormatContentParams)
async def format_wp_content(ctx: ToolContext, params: FormatContentParams) -> ToolResponse:
    return ToolResponse.text(format_post_content(params.content))
