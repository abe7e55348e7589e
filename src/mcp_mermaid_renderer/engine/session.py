# src/mcp_mermaid_renderer/engine/session.py
from __future__ import annotations

import logging
from contextlib import AsyncExitStack
from typing import Any, Dict, Optional, Union

from playwright.async_api import Browser, BrowserContext, BrowserType, Page, Playwright, async_playwright

from ..settings import BROWSER_TYPES

log = logging.getLogger("mcp.mermaid.engine.session")

class BrowserSession:
    """
    One browser plus one browser context.

    Pages are opened per render call; the context and browser are closed together.
    When the session started its own Playwright driver it stops that too.
    """

    def __init__(
        self,
        browser: Browser,
        context: BrowserContext,
        playwright: Optional[Playwright] = None,
    ) -> None:
        self._browser = browser
        self._context = context
        self._playwright = playwright
        self._closed = False

    @classmethod
    async def launch(
        cls,
        browser_type: Union[str, BrowserType] = "chromium",
        launch_options: Optional[Dict[str, Any]] = None,
    ) -> "BrowserSession":
        if isinstance(browser_type, str) and browser_type not in BROWSER_TYPES:
            raise ValueError(f"unknown browser type {browser_type!r}, expected one of {BROWSER_TYPES}")

        stack = AsyncExitStack()
        try:
            playwright: Optional[Playwright] = None
            if isinstance(browser_type, str):
                playwright = await async_playwright().start()
                stack.push_async_callback(playwright.stop)
                browser_type = getattr(playwright, browser_type)

            browser = await browser_type.launch(**(launch_options or {}))
            stack.push_async_callback(browser.close)
            context = await browser.new_context(bypass_csp=True)
        except BaseException:
            await stack.aclose()
            raise

        stack.pop_all()
        log.info("session.launched", extra={"browser": browser_type.name, "version": browser.version})
        return cls(browser, context, playwright)

    @property
    def closed(self) -> bool:
        return self._closed

    async def new_page(self) -> Page:
        return await self._context.new_page()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._context.close()
            await self._browser.close()
        finally:
            if self._playwright is not None:
                await self._playwright.stop()
        log.info("session.closed")
