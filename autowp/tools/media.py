"""Herramientas de la biblioteca de medios"""

from typing import List, Literal, Optional

from pydantic import Field

from ..wordpress import media
from ..wordpress.media import MAX_SEARCH_RESULTS
from .base import ToolContext, ToolParams, ToolResponse, registry, respond

MediaType = Literal['any', 'image', 'video', 'audio', 'application']


class UploadMediaParams(ToolParams):
    source: str = Field(..., min_length=1, description="Local file path or http(s) URL")
    title: Optional[str] = None
    caption: Optional[str] = None
    alt_text: Optional[str] = None
    description: Optional[str] = None


class ListMediaParams(ToolParams):
    page: int = Field(1, ge=1)
    per_page: int = Field(20, ge=1, le=100, description="Items per page (max 100)")
    media_type: MediaType = 'any'
    mime_type: Optional[str] = Field(None, description="Exact MIME type, e.g. image/png")
    order_by: Literal['date', 'title', 'id', 'modified'] = 'date'
    order: Literal['asc', 'desc'] = 'desc'
    parent: Optional[int] = Field(None, ge=0, description="Only media attached to this post")


class SearchMediaParams(ToolParams):
    query: str = Field(..., min_length=1)
    media_type: MediaType = 'any'
    date_after: Optional[str] = Field(None, description="ISO date")
    date_before: Optional[str] = Field(None, description="ISO date")
    limit: int = Field(20, ge=1, le=MAX_SEARCH_RESULTS)


class MediaIdParams(ToolParams):
    media_id: int = Field(..., ge=1)


class EditMediaParams(MediaIdParams):
    title: Optional[str] = None
    caption: Optional[str] = None
    alt_text: Optional[str] = None
    description: Optional[str] = None


class DeleteMediaParams(MediaIdParams):
    force: bool = True


class BulkDeleteMediaParams(ToolParams):
    media_ids: List[int] = Field(..., min_length=1, description="Media to delete")
    force: bool = True


class FeaturedImageParams(ToolParams):
    post_id: int = Field(..., ge=1)
    media_id: int = Field(..., ge=1)


class OptimizeMediaParams(MediaIdParams):
    quality: int = Field(80, ge=10, le=100)
    replace_original: bool = Field(False, description="Delete the original after uploading the optimized copy")


def _media_line(item) -> str:
    return f"- {item.title or item.slug} (ID {item.id}, {item.mime_type}) {item.source_url}"


@registry.tool("upload-media", "Upload a file from a local path or URL to the media library", UploadMediaParams)
async def upload_media(ctx: ToolContext, params: UploadMediaParams) -> ToolResponse:
    result = await media.upload_media(ctx.session, **params.model_dump())
    return respond(result, "Failed to upload media", lambda r: f"✅ Uploaded:\n{_media_line(r['media'])}")


@registry.tool("list-media", "List the media library with pagination and filters", ListMediaParams)
async def list_media(ctx: ToolContext, params: ListMediaParams) -> ToolResponse:
    result = await media.list_media(ctx.session, **params.model_dump())
    return respond(
        result, "Failed to list media",
        lambda r: f"Found {r['total']} media items (page {params.page} of {r['total_pages']})",
    )


@registry.tool("search-media", "Search the media library by keyword, type and date", SearchMediaParams)
async def search_media(ctx: ToolContext, params: SearchMediaParams) -> ToolResponse:
    result = await media.search_media(ctx.session, **params.model_dump())
    return respond(
        result, "Failed to search media",
        lambda r: f"{r['total']} results for '{params.query}'\n" + "\n".join(_media_line(m) for m in r['media']),
    )


@registry.tool("get-media-details", "Get details of a media item", MediaIdParams)
async def get_media_details(ctx: ToolContext, params: MediaIdParams) -> ToolResponse:
    result = await media.get_media_details(ctx.session, params.media_id)
    return respond(result, "Failed to get media", lambda r: _media_line(r['media']))


@registry.tool("edit-media-metadata", "Update title, caption, alt text or description", EditMediaParams)
async def edit_media_metadata(ctx: ToolContext, params: EditMediaParams) -> ToolResponse:
    fields = params.model_dump(exclude={'media_id'}, exclude_none=True)
    result = await media.edit_media_metadata(ctx.session, params.media_id, **fields)
    return respond(result, "Failed to edit media",
                   lambda r: f"✅ Updated {', '.join(r['updated_fields'])}:\n{_media_line(r['media'])}")


@registry.tool("delete-media", "Delete a media item", DeleteMediaParams)
async def delete_media(ctx: ToolContext, params: DeleteMediaParams) -> ToolResponse:
    result = await media.delete_media(ctx.session, params.media_id, force=params.force)
    return respond(result, "Failed to delete media", lambda r: f"🗑️ Media {params.media_id} deleted")


@registry.tool("bulk-delete-media", "Delete several media items; failures do not stop the batch",
               BulkDeleteMediaParams)
async def bulk_delete_media(ctx: ToolContext, params: BulkDeleteMediaParams) -> ToolResponse:
    result = await media.bulk_delete_media(ctx.session, params.media_ids, force=params.force)
    return respond(result, "Bulk delete failed",
                   lambda r: f"🗑️ Deleted {len(r['deleted'])} media items, {len(r['failed'])} failed")


@registry.tool("set-featured-image", "Set the featured image of a post", FeaturedImageParams)
async def set_featured_image(ctx: ToolContext, params: FeaturedImageParams) -> ToolResponse:
    result = await media.set_featured_image(ctx.session, params.post_id, params.media_id)
    return respond(result, "Failed to set featured image",
                   lambda r: f"✅ Post {r['post_id']} now uses media {r['featured_media']} as featured image")


@registry.tool(
    "optimize-media",
    "Compress an image with TinyPNG and upload the optimized copy (requires TINYPNG_API_KEY)",
    OptimizeMediaParams,
)
async def optimize_media(ctx: ToolContext, params: OptimizeMediaParams) -> ToolResponse:
    result = await media.optimize_media(ctx.session, params.media_id, quality=params.quality,
                                        replace_original=params.replace_original,
                                        compressor=ctx.compressor)
    return respond(
        result, "Failed to optimize media",
        lambda r: f"✅ Media {r['original_id']} optimized as {r['media'].id}: "
                  f"{r['original_size']} -> {r['optimized_size']} bytes (-{r['savings_percent']}%)",
    )
