"""Herramientas de usuarios y roles"""

from typing import Literal, Optional

from pydantic import Field, model_validator

from ..wordpress import users
from .base import EMAIL_PATTERN, URL_PATTERN, ToolContext, ToolParams, ToolResponse, registry, respond


class ListUsersParams(ToolParams):
    page: int = Field(1, ge=1)
    per_page: int = Field(10, ge=1, le=100)
    role: Optional[str] = None
    search: Optional[str] = None
    order_by: Literal['registered_date', 'name', 'id', 'email', 'slug'] = 'registered_date'
    order: Literal['asc', 'desc'] = 'desc'
    registered_after: Optional[str] = Field(None, description="ISO date")
    registered_before: Optional[str] = Field(None, description="ISO date")


class CreateUserParams(ToolParams):
    username: str = Field(..., min_length=1)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    display_name: Optional[str] = None
    role: str = 'subscriber'
    bio: Optional[str] = None
    website: Optional[str] = Field(None, pattern=URL_PATTERN)


class UpdateUserParams(ToolParams):
    user_id: int = Field(..., ge=1)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    display_name: Optional[str] = None
    bio: Optional[str] = None
    website: Optional[str] = Field(None, pattern=URL_PATTERN)
    password: Optional[str] = None


class DisableUserParams(ToolParams):
    user_id: int = Field(..., ge=1)
    reason: Optional[str] = None


class ResetPasswordParams(ToolParams):
    user_id: Optional[int] = Field(None, ge=1)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    send_email: bool = Field(True, description="Send the WordPress reset email instead of returning a new password")

    @model_validator(mode="after")
    def check_target(self):
        if self.user_id is None and not self.email:
            raise ValueError("Either userId or email must be provided")
        return self


class SetRoleParams(ToolParams):
    user_id: int = Field(..., ge=1)
    role: str = Field(..., min_length=1)
    remove_other_roles: bool = True


class ListRolesParams(ToolParams):
    include_capabilities: bool = False


def _user_line(user) -> str:
    return f"- {user.username} (ID {user.id}, {user.email or 'no email'}) roles: {', '.join(user.roles) or 'none'}"


@registry.tool("list-users", "List users with filters", ListUsersParams)
async def list_users(ctx: ToolContext, params: ListUsersParams) -> ToolResponse:
    result = await users.list_users(ctx.session, **params.model_dump())
    return respond(
        result, "Failed to list users",
        lambda r: f"Showing {r['count']} of {r['total']} users on the site\n"
                  + "\n".join(_user_line(u) for u in r['users']),
    )


@registry.tool("create-user", "Create a user account", CreateUserParams)
async def create_user(ctx: ToolContext, params: CreateUserParams) -> ToolResponse:
    result = await users.create_user(ctx.session, **params.model_dump())
    return respond(result, "Failed to create user", lambda r: f"✅ User created:\n{_user_line(r['user'])}")


@registry.tool("update-user", "Update a user profile", UpdateUserParams)
async def update_user(ctx: ToolContext, params: UpdateUserParams) -> ToolResponse:
    fields = params.model_dump(exclude={'user_id'}, exclude_none=True)
    result = await users.update_user(ctx.session, params.user_id, **fields)
    return respond(result, "Failed to update user",
                   lambda r: f"✅ Updated {', '.join(r['updated_fields'])}:\n{_user_line(r['user'])}")


@registry.tool("disable-user", "Disable a user account by removing all of its roles", DisableUserParams)
async def disable_user(ctx: ToolContext, params: DisableUserParams) -> ToolResponse:
    result = await users.disable_user(ctx.session, params.user_id, reason=params.reason)
    return respond(result, "Failed to disable user", lambda r: f"⚠️ User {params.user_id} disabled")


@registry.tool("reset-user-password", "Reset a user's password by email link or a generated password",
               ResetPasswordParams)
async def reset_user_password(ctx: ToolContext, params: ResetPasswordParams) -> ToolResponse:
    result = await users.reset_user_password(ctx.session, user_id=params.user_id, email=params.email,
                                             send_email=params.send_email)

    def summary(r):
        if r['email_sent']:
            return f"📧 Password reset email sent for user {r['user_id']}"
        return f"🔑 New password for user {r['user_id']}: {r['new_password']}"

    return respond(result, "Failed to reset password", summary)


@registry.tool("set-user-role", "Change a user's role", SetRoleParams)
async def set_user_role(ctx: ToolContext, params: SetRoleParams) -> ToolResponse:
    result = await users.set_user_role(ctx.session, params.user_id, params.role,
                                       remove_other_roles=params.remove_other_roles)
    return respond(result, "Failed to set role",
                   lambda r: f"✅ User {r['user_id']} roles: {', '.join(r['roles'])}")


@registry.tool("list-user-roles", "List the roles in use on the site", ListRolesParams)
async def list_user_roles(ctx: ToolContext, params: ListRolesParams) -> ToolResponse:
    result = await users.list_user_roles(ctx.session, include_capabilities=params.include_capabilities)
    return respond(
        result, "Failed to list roles",
        lambda r: "\n".join(f"- {role['name']} ({role['users']} users)" for role in r['roles']) or "No roles",
    )
