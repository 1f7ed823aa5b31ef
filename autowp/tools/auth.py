"""Herramientas de sesión: autenticación y prueba de conexión"""

from typing import Optional

from pydantic import Field, model_validator

from .base import URL_PATTERN, ToolContext, ToolParams, ToolResponse, registry, respond


class AuthenticateParams(ToolParams):
    site_url: str = Field(..., pattern=URL_PATTERN, description="WordPress site URL (e.g. https://example.com)")
    username: str = Field(..., min_length=1, description="WordPress username")
    password: Optional[str] = Field(None, description="Account password")
    app_password: Optional[str] = Field(None, description="Application password (preferred over password)")

    @model_validator(mode="after")
    def check_secret(self):
        if not self.password and not self.app_password:
            raise ValueError("Either password or appPassword must be provided")
        return self


class ConnectionParams(ToolParams):
    site_url: Optional[str] = Field(
        None, pattern=URL_PATTERN,
        description="Site to probe; defaults to the configured site",
    )


@registry.tool(
    "authenticate",
    "Configure the WordPress site and credentials, then verify them against /users/me",
    AuthenticateParams,
)
async def authenticate(ctx: ToolContext, params: AuthenticateParams) -> ToolResponse:
    await ctx.session.configure(
        site_url=params.site_url,
        username=params.username,
        password=params.password,
        app_password=params.app_password,
    )
    result = await ctx.session.test_authentication()

    def summary(r):
        user = r["user_info"]
        return f"✅ Authenticated on {ctx.session.config.site_url} as {user['name']} ({', '.join(user['roles'])})"

    return respond(result, "Authentication failed", summary)


@registry.tool(
    "test-wp-connection",
    "Check that a site exposes the WordPress REST API (wp/v2); no credentials needed",
    ConnectionParams,
)
async def test_wp_connection(ctx: ToolContext, params: ConnectionParams) -> ToolResponse:
    site_url = params.site_url or ctx.session.config.site_url
    if not site_url:
        return ToolResponse.error("WordPress site URL not configured")

    if await ctx.session.test_site_connection(site_url):
        return ToolResponse.text(f"✅ {site_url} exposes the WordPress REST API (wp/v2)")
    return ToolResponse.error(f"❌ Could not reach the WordPress REST API at {site_url}")
