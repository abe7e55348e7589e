# src/mcp_mermaid_renderer/engine/pool.py
from __future__ import annotations

import asyncio
import logging
import os
import time
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Set, Union

from playwright.async_api import BrowserType, Page

from ..errors import SessionError
from ..models.options import RenderOptions, to_resource_url
from ..models.results import Fulfilled, RenderOutcome
from ..resources import bootstrap_url, load_render_script
from ..settings import Settings
from ..utils.logging import preview, want_verbose_inputs
from .marshal import settle
from .session import BrowserSession

log = logging.getLogger("mcp.mermaid.engine.pool")

SessionFactory = Callable[[], Awaitable[BrowserSession]]
OptionsLike = Union[RenderOptions, Mapping[str, Any], None]

def coerce_options(options: OptionsLike) -> RenderOptions:
    if isinstance(options, RenderOptions):
        return options
    return RenderOptions.model_validate(dict(options or {}))

def coerce_diagrams(diagrams: Iterable[str]) -> List[str]:
    # a bare string would otherwise render one diagram per character
    if isinstance(diagrams, (str, bytes)):
        raise TypeError("diagrams must be a list of Mermaid sources, not a single string")
    return list(diagrams)

def css_string(value: str) -> str:
    """Quote ``value`` as a CSS string literal."""
    out = []
    for ch in value:
        if ch in "\"\\":
            out.append("\\" + ch)
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\{ord(ch):x} ")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'

def svg_selector(svg_id: str) -> str:
    return f"svg[id={css_string(svg_id)}]"

class MermaidRenderer:
    """
    Renders Mermaid diagrams in a shared headless browser.

    The browser is launched lazily by the first call and shared by every call
    that overlaps with it. Each call gets its own page. When the last running
    call finishes the browser is closed, so the next call launches a new one.
    """

    def __init__(
        self,
        browser_type: Union[str, BrowserType] = "chromium",
        launch_options: Optional[Dict[str, Any]] = None,
        *,
        settings: Optional[Settings] = None,
        session_factory: Optional[SessionFactory] = None,
    ) -> None:
        self._settings = settings or Settings()
        self._browser_type = browser_type
        self._launch_options = (
            dict(launch_options) if launch_options is not None else self._settings.launch_options()
        )
        self._session_factory = session_factory or self._launch_session
        self._session_task: Optional[asyncio.Future[BrowserSession]] = None
        self._count = 0
        self._closers: Set[asyncio.Future[None]] = set()

    @property
    def active_calls(self) -> int:
        return self._count

    @property
    def has_session(self) -> bool:
        return self._session_task is not None

    async def render(self, diagrams: Iterable[str], options: OptionsLike = None) -> List[RenderOutcome]:
        return await self(diagrams, options)

    async def __call__(self, diagrams: Iterable[str], options: OptionsLike = None) -> List[RenderOutcome]:
        """
        Render every diagram and return one outcome per diagram, in input order.

        A diagram Mermaid cannot render becomes a Rejected outcome. Failures of the
        browser itself raise SessionError for the whole call.
        """
        opts = coerce_options(options)
        batch = coerce_diagrams(diagrams)
        t0 = time.time()

        # No await between the count change and the slot check.
        self._count += 1
        if self._session_task is None:
            log.info("renderer.session.start", extra={"browser": self._browser_name()})
            self._session_task = asyncio.ensure_future(self._session_factory())
        task = self._session_task

        if want_verbose_inputs():
            log.info("renderer.request.verbose", extra={"diagrams": batch, "options": opts.model_dump()})
        else:
            log.info("renderer.request", extra={
                "count": len(batch),
                "prefix": opts.prefix,
                "screenshot": opts.screenshot,
                "first_preview": preview(batch[0], 120) if batch else "",
                "active_calls": self._count,
            })

        page: Optional[Page] = None
        try:
            session = await self._acquire(task)
            page = await self._stage("page", session.new_page())
            await self._prepare(page, opts)
            raw = await self._stage("evaluate", page.evaluate(load_render_script(), self._page_args(batch, opts)))
            outcomes = settle(raw)
            if opts.screenshot:
                await self._capture(page, outcomes)
        finally:
            await self._release(task, page)

        log.info("renderer.response", extra={
            "took_ms": int((time.time() - t0) * 1000),
            "fulfilled": sum(1 for o in outcomes if isinstance(o, Fulfilled)),
            "rejected": sum(1 for o in outcomes if not isinstance(o, Fulfilled)),
        })
        return outcomes

    # ---------------- session lifecycle ----------------

    def _browser_name(self) -> str:
        if isinstance(self._browser_type, str):
            return self._browser_type
        return getattr(self._browser_type, "name", type(self._browser_type).__name__)

    async def _launch_session(self) -> BrowserSession:
        return await BrowserSession.launch(self._browser_type, self._launch_options)

    async def _acquire(self, task: asyncio.Future[BrowserSession]) -> BrowserSession:
        # shield: a cancelled caller must not cancel the launch other callers wait on
        try:
            return await asyncio.shield(task)
        except SessionError:
            raise
        except Exception as exc:
            raise SessionError("launch", str(exc)) from exc

    async def _release(self, task: asyncio.Future[BrowserSession], page: Optional[Page]) -> None:
        try:
            if page is not None:
                await page.close()
        except Exception:
            log.warning("renderer.page.close_failed", exc_info=True)
        finally:
            self._count -= 1
            if not self._count and self._session_task is task:
                self._session_task = None
                await self._close_session(task)

    async def _close_session(self, task: asyncio.Future[BrowserSession]) -> None:
        if not task.done():
            # every caller was cancelled while the browser was still launching
            task.add_done_callback(self._close_when_launched)
            return
        if task.cancelled() or task.exception() is not None:
            return
        await self._shutdown(task.result())

    async def _shutdown(self, session: BrowserSession) -> None:
        # teardown never fails a call whose diagrams already rendered
        log.info("renderer.session.stop", extra={"browser": self._browser_name()})
        try:
            await session.close()
        except Exception:
            log.warning("renderer.session.close_failed", exc_info=True, extra={"browser": self._browser_name()})

    def _close_when_launched(self, task: asyncio.Future[BrowserSession]) -> None:
        if task.cancelled() or task.exception() is not None:
            return
        closer = asyncio.ensure_future(self._shutdown(task.result()))
        self._closers.add(closer)
        closer.add_done_callback(self._closers.discard)

    # ---------------- per call page work ----------------

    async def _stage(self, stage: str, aw: Awaitable[Any]) -> Any:
        try:
            return await aw
        except Exception as exc:
            raise SessionError(stage, str(exc)) from exc

    async def _prepare(self, page: Page, opts: RenderOptions) -> None:
        await self._stage("navigate", page.goto(bootstrap_url(), timeout=self._settings.navigation_timeout_ms))

        injections: List[Awaitable[Any]] = [
            page.add_style_tag(url=to_resource_url(self._settings.fontawesome_css)),
            self._add_mermaid_script(page),
        ]
        injections.extend(page.add_style_tag(url=url) for url in opts.css)
        await self._stage("inject", asyncio.gather(*injections))

    def _add_mermaid_script(self, page: Page) -> Awaitable[Any]:
        src = self._settings.mermaid_script
        if os.path.isfile(src):
            return page.add_script_tag(path=src)
        return page.add_script_tag(url=src)

    def _page_args(self, batch: List[str], opts: RenderOptions) -> Dict[str, Any]:
        return {
            "containerStyle": opts.merged_container_style(),
            "diagrams": batch,
            "mermaidConfig": opts.merged_mermaid_config(self._settings.font_family),
            "prefix": opts.prefix,
            "screenshot": opts.screenshot,
            "useCounter": False,
        }

    async def _capture(self, page: Page, outcomes: List[RenderOutcome]) -> None:
        # One diagram at a time, after the whole batch has rendered.
        for outcome in outcomes:
            if not isinstance(outcome, Fulfilled):
                continue
            locator = page.locator(svg_selector(outcome.value.id))
            outcome.value.screenshot = await self._stage(
                "screenshot", locator.screenshot(omit_background=True)
            )

def create_mermaid_renderer(
    browser_type: Union[str, BrowserType] = "chromium",
    launch_options: Optional[Dict[str, Any]] = None,
    *,
    settings: Optional[Settings] = None,
    session_factory: Optional[SessionFactory] = None,
) -> MermaidRenderer:
    """
    Create a Mermaid renderer.

    The renderer manages a browser instance. Diagrams rendered at the same time
    share it; once nothing is rendering the browser is closed.
    """
    return MermaidRenderer(
        browser_type,
        launch_options,
        settings=settings,
        session_factory=session_factory,
    )
