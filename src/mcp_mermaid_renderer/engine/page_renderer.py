# src/mcp_mermaid_renderer/engine/page_renderer.py
from __future__ import annotations

import logging
from typing import Iterable, List

from playwright.async_api import Page

from ..models.results import RenderOutcome
from ..resources import load_render_script
from .marshal import settle
from .pool import OptionsLike, coerce_diagrams, coerce_options

log = logging.getLogger("mcp.mermaid.engine.page")

class PageRenderer:
    """
    Renders on a page the caller already prepared with Mermaid.

    Nothing is launched, navigated or injected, and mermaid.initialize() is left
    to the caller, so ``mermaid_config`` and ``css`` are ignored. Ids come from a
    counter kept on the page, which keeps them unique across calls. Screenshots
    are not supported.
    """

    def __init__(self, page: Page) -> None:
        self._page = page

    async def render(self, diagrams: Iterable[str], options: OptionsLike = None) -> List[RenderOutcome]:
        return await self(diagrams, options)

    async def __call__(self, diagrams: Iterable[str], options: OptionsLike = None) -> List[RenderOutcome]:
        opts = coerce_options(options)
        ignored = [name for name in ("mermaid_config", "css", "screenshot") if getattr(opts, name)]
        if ignored:
            log.debug("page_renderer.options_ignored", extra={"options": ignored})

        raw = await self._page.evaluate(load_render_script(), {
            "containerStyle": opts.merged_container_style(),
            "diagrams": coerce_diagrams(diagrams),
            "mermaidConfig": None,
            "prefix": opts.prefix,
            "screenshot": False,
            "useCounter": True,
        })
        return settle(raw)

def create_page_renderer(page: Page) -> PageRenderer:
    return PageRenderer(page)
