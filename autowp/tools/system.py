"""Herramientas de salud del sitio e información del sistema"""

from pydantic import Field

from ..wordpress import system
from .base import ToolContext, ToolParams, ToolResponse, registry, respond

STATUS_ICONS = {"good": "✅", "should_improve": "⚠️", "critical": "❌"}


class SiteHealthParams(ToolParams):
    include_tests: bool = Field(True, description="Include the individual test results")
    include_info: bool = Field(False, description="Include directory sizes")


class SystemInfoParams(ToolParams):
    include_plugins: bool = True
    include_themes: bool = True
    include_server: bool = True


@registry.tool("get-site-health", "Run the WordPress Site Health tests", SiteHealthParams)
async def get_site_health(ctx: ToolContext, params: SiteHealthParams) -> ToolResponse:
    result = await system.get_site_health(ctx.session, include_tests=params.include_tests,
                                          include_info=params.include_info)
    return respond(result, "Failed to get site health",
                   lambda r: f"{STATUS_ICONS.get(r['status'], '')} Site health: {r['status']}")


@registry.tool("get-system-info", "Summarize the site, plugins, themes and settings", SystemInfoParams)
async def get_system_info(ctx: ToolContext, params: SystemInfoParams) -> ToolResponse:
    result = await system.get_system_info(ctx.session, **params.model_dump())

    def summary(r):
        site = r['site']
        lines = [f"{site['name']} ({site['url']})"]
        if 'plugins' in r.data:
            active = sum(1 for p in r['plugins'] if p['status'] == 'active')
            lines.append(f"Plugins: {len(r['plugins'])} installed, {active} active")
        if 'themes' in r.data:
            lines.append(f"Themes: {len(r['themes'])} installed")
        return "\n".join(lines)

    return respond(result, "Failed to get system info", summary)
