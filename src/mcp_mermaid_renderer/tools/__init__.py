from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from ..engine.pool import MermaidRenderer
from .mermaid_render import register_mermaid_render

def register(mcp: FastMCP, renderer: MermaidRenderer) -> None:
    register_mermaid_render(mcp, renderer)
