"""Render Mermaid diagrams to SVG (and PNG) in a pooled headless browser."""
from .engine import BrowserSession, MermaidRenderer, PageRenderer, create_mermaid_renderer, create_page_renderer
from .errors import DiagramRenderError, InvalidRequestError, MermaidRendererError, SessionError
from .models import Fulfilled, Rejected, RenderOptions, RenderOutcome, RenderResult

__all__ = [
    "BrowserSession",
    "DiagramRenderError",
    "Fulfilled",
    "InvalidRequestError",
    "MermaidRenderer",
    "MermaidRendererError",
    "PageRenderer",
    "Rejected",
    "RenderOptions",
    "RenderOutcome",
    "RenderResult",
    "SessionError",
    "create_mermaid_renderer",
    "create_page_renderer",
]
