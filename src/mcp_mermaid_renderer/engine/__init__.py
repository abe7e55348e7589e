from .marshal import restore_error, settle
from .page_renderer import PageRenderer, create_page_renderer
from .pool import MermaidRenderer, create_mermaid_renderer
from .session import BrowserSession

__all__ = [
    "BrowserSession",
    "MermaidRenderer",
    "PageRenderer",
    "create_mermaid_renderer",
    "create_page_renderer",
    "restore_error",
    "settle",
]
