"""Herramientas de categorías, etiquetas y taxonomías"""

from typing import List, Optional

from pydantic import Field, model_validator

from ..wordpress import taxonomy
from .base import ToolContext, ToolParams, ToolResponse, registry, respond


class NoParams(ToolParams):
    pass


class CreateCategoryParams(ToolParams):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    slug: Optional[str] = None
    parent: Optional[int] = Field(None, ge=0, description="Parent category ID")


class UpdateCategoryParams(ToolParams):
    category_id: int = Field(..., ge=1)
    name: Optional[str] = None
    description: Optional[str] = None
    slug: Optional[str] = None
    parent: Optional[int] = Field(None, ge=0)


class CategoryIdParams(ToolParams):
    category_id: int = Field(..., ge=1)


class CreateTagParams(ToolParams):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    slug: Optional[str] = None


class TagIdParams(ToolParams):
    tag_id: int = Field(..., ge=1)


class MergeCategoriesParams(ToolParams):
    source_category_id: int = Field(..., ge=1, description="Category whose posts are moved")
    target_category_id: int = Field(..., ge=1, description="Category that receives the posts")
    delete_source: bool = Field(True, description="Delete the source category afterwards")

    @model_validator(mode="after")
    def check_distinct(self):
        if self.source_category_id == self.target_category_id:
            raise ValueError("Source and target categories must be different")
        return self


class BulkAssignCategoriesParams(ToolParams):
    post_ids: List[int] = Field(..., min_length=1)
    category_ids: List[int] = Field(..., min_length=1)
    replace_existing: bool = Field(False, description="Replace instead of adding to current categories")


class BulkAssignTagsParams(ToolParams):
    post_ids: List[int] = Field(..., min_length=1)
    tag_ids: List[int] = Field(..., min_length=1)
    replace_existing: bool = Field(False, description="Replace instead of adding to current tags")


def _terms(items) -> str:
    return "\n".join(f"- {t.name} (ID {t.id}, slug {t.slug}, {t.count} posts)" for t in items)


@registry.tool("get-wp-categories", "List all categories", NoParams)
async def get_wp_categories(ctx: ToolContext, params: NoParams) -> ToolResponse:
    result = await taxonomy.get_categories(ctx.session)
    return respond(result, "Failed to get categories",
                   lambda r: f"{len(r['categories'])} categories:\n{_terms(r['categories'])}")


@registry.tool("get-wp-tags", "List all tags", NoParams)
async def get_wp_tags(ctx: ToolContext, params: NoParams) -> ToolResponse:
    result = await taxonomy.get_tags(ctx.session)
    return respond(result, "Failed to get tags", lambda r: f"{len(r['tags'])} tags:\n{_terms(r['tags'])}")


@registry.tool("create-category", "Create a category", CreateCategoryParams)
async def create_category(ctx: ToolContext, params: CreateCategoryParams) -> ToolResponse:
    result = await taxonomy.create_category(ctx.session, params.name, description=params.description,
                                            slug=params.slug, parent=params.parent)
    return respond(result, "Failed to create category",
                   lambda r: f"✅ Category created: {r['category'].name} (ID {r['category'].id})")


@registry.tool("update-category", "Update a category", UpdateCategoryParams)
async def update_category(ctx: ToolContext, params: UpdateCategoryParams) -> ToolResponse:
    fields = params.model_dump(exclude={'category_id'}, exclude_none=True)
    result = await taxonomy.update_category(ctx.session, params.category_id, **fields)
    return respond(result, "Failed to update category",
                   lambda r: f"✅ Category updated: {r['category'].name} (ID {r['category'].id})")


@registry.tool("delete-category", "Delete a category permanently", CategoryIdParams)
async def delete_category(ctx: ToolContext, params: CategoryIdParams) -> ToolResponse:
    result = await taxonomy.delete_category(ctx.session, params.category_id)
    return respond(result, "Failed to delete category",
                   lambda r: f"🗑️ Category {params.category_id} deleted")


@registry.tool("create-tag", "Create a tag", CreateTagParams)
async def create_tag(ctx: ToolContext, params: CreateTagParams) -> ToolResponse:
    result = await taxonomy.create_tag(ctx.session, params.name, description=params.description,
                                       slug=params.slug)
    return respond(result, "Failed to create tag",
                   lambda r: f"✅ Tag created: {r['tag'].name} (ID {r['tag'].id})")


@registry.tool("delete-tag", "Delete a tag permanently", TagIdParams)
async def delete_tag(ctx: ToolContext, params: TagIdParams) -> ToolResponse:
    result = await taxonomy.delete_tag(ctx.session, params.tag_id)
    return respond(result, "Failed to delete tag", lambda r: f"🗑️ Tag {params.tag_id} deleted")


@registry.tool("list-taxonomies", "List the taxonomies registered on the site", NoParams)
async def list_taxonomies(ctx: ToolContext, params: NoParams) -> ToolResponse:
    result = await taxonomy.list_taxonomies(ctx.session)
    return respond(
        result, "Failed to list taxonomies",
        lambda r: "\n".join(f"- {t.slug}: {t.name}" for t in r['taxonomies']) or "No taxonomies",
    )


@registry.tool(
    "merge-categories",
    "Move every post from the source category to the target category, then optionally delete the source",
    MergeCategoriesParams,
)
async def merge_categories(ctx: ToolContext, params: MergeCategoriesParams) -> ToolResponse:
    result = await taxonomy.merge_categories(ctx.session, params.source_category_id,
                                             params.target_category_id, delete_source=params.delete_source)
    failure = "Failed to merge categories"
    if result.get('migrated_posts'):
        # Sin rollback: informar de lo que ya se movió
        failure = f"Merge failed after migrating posts {result['migrated_posts']}"
    return respond(
        result, failure,
        lambda r: f"✅ Merged {r['merged_posts']} posts into category {params.target_category_id}"
                  + (f"; category {params.source_category_id} deleted" if r['source_deleted'] else ""),
    )


@registry.tool("bulk-assign-categories", "Assign categories to several posts", BulkAssignCategoriesParams)
async def bulk_assign_categories(ctx: ToolContext, params: BulkAssignCategoriesParams) -> ToolResponse:
    result = await taxonomy.bulk_assign_categories(ctx.session, params.post_ids, params.category_ids,
                                                   replace_existing=params.replace_existing)
    return respond(result, "Bulk category assignment failed",
                   lambda r: f"Updated {len(r['updated'])} posts, {len(r['failed'])} failed")


@registry.tool("bulk-assign-tags", "Assign tags to several posts", BulkAssignTagsParams)
async def bulk_assign_tags(ctx: ToolContext, params: BulkAssignTagsParams) -> ToolResponse:
    result = await taxonomy.bulk_assign_tags(ctx.session, params.post_ids, params.tag_ids,
                                             replace_existing=params.replace_existing)
    return respond(result, "Bulk tag assignment failed",
                   lambda r: f"Updated {len(r['updated'])} posts, {len(r['failed'])} failed")
