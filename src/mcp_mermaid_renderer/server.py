from __future__ import annotations
import logging
from mcp.server.fastmcp import FastMCP
from .engine.pool import create_mermaid_renderer
from .settings import Settings
from .tools import register as register_tools

logger = logging.getLogger("mcp.mermaid.server")

settings = Settings.from_env()

# One renderer per process; it launches a browser only while calls are running
renderer = create_mermaid_renderer(settings.browser, settings.launch_options(), settings=settings)

mcp = FastMCP("mermaid-renderer")

register_tools(mcp, renderer)
