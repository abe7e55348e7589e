"""In-memory stand-ins for Playwright sessions and pages."""
from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from mcp_mermaid_renderer.engine.pool import MermaidRenderer
from mcp_mermaid_renderer.settings import Settings

INVALID_STACK = (
    "UnknownDiagramError: No diagram type detected matching given configuration for text: invalid\n"
    "    at detectType (https://cdn.jsdelivr.net/npm/mermaid@10/dist/mermaid.min.js:1:2345)"
)


def fake_render(diagram: str, rid: str) -> Dict[str, Any]:
    if diagram.strip().startswith("invalid"):
        return {
            "status": "rejected",
            "reason": {
                "name": "UnknownDiagramError",
                "message": f"No diagram type detected matching given configuration for text: {diagram}",
                "stack": INVALID_STACK,
            },
        }
    svg = (
        f'<svg xmlns="http://www.w3.org/2000/svg" id="{rid}" viewBox="0 0 100 50">'
        f"<g>{diagram}</g></svg>"
    )
    return {"status": "fulfilled", "value": {"id": rid, "svg": svg, "width": 100, "height": 50}}


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str) -> None:
        self.page = page
        self.selector = selector

    async def screenshot(self, omit_background: bool = False) -> bytes:
        self.page.world.events.append(("screenshot", self.selector))
        assert omit_background
        await asyncio.sleep(0)
        return b"\x89PNG" + self.selector.encode()


class FakePage:
    def __init__(self, world: "FakeWorld") -> None:
        self.world = world
        self.closed = False
        self.goto_calls: List[str] = []
        self.styles: List[str] = []
        self.scripts: List[Dict[str, Optional[str]]] = []
        self.evaluations: List[Dict[str, Any]] = []

    async def goto(self, url: str, timeout: Optional[float] = None) -> None:
        await asyncio.sleep(0)
        if self.world.fail_goto:
            raise RuntimeError("net::ERR_FILE_NOT_FOUND")
        self.goto_calls.append(url)

    async def add_style_tag(self, url: Optional[str] = None, **kwargs: Any) -> None:
        await asyncio.sleep(0)
        if self.world.fail_inject:
            raise RuntimeError(f"Failed to load stylesheet {url}")
        self.styles.append(url or "")

    async def add_script_tag(self, url: Optional[str] = None, path: Optional[str] = None, **kwargs: Any) -> None:
        await asyncio.sleep(0)
        self.scripts.append({"url": url, "path": path})

    async def evaluate(self, script: str, arg: Dict[str, Any]) -> List[Dict[str, Any]]:
        assert "Promise.allSettled" in script
        self.evaluations.append(arg)
        diagrams = arg["diagrams"]
        gate = self.world.gates.get(diagrams[0]) if diagrams else None
        self.world.waiting += 1
        if gate is not None:
            await gate.wait()
        else:
            await asyncio.sleep(0)
        self.world.waiting -= 1
        self.world.events.append(("evaluated", diagrams[0] if diagrams else None))
        results = []
        for index, diagram in enumerate(diagrams):
            if arg["useCounter"]:
                rid = f"{arg['prefix']}-{self.world.counter}"
                self.world.counter += 1
            else:
                rid = f"{arg['prefix']}-{index}"
            results.append(fake_render(diagram, rid))
        return results

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    async def close(self) -> None:
        self.closed = True
        self.world.events.append(("page_closed", None))


class FakeSession:
    def __init__(self, world: "FakeWorld") -> None:
        self.world = world
        self.pages: List[FakePage] = []
        self.close_count = 0

    async def new_page(self) -> FakePage:
        await asyncio.sleep(0)
        page = FakePage(self.world)
        self.pages.append(page)
        return page

    async def close(self) -> None:
        self.close_count += 1
        self.world.events.append(("session_closed", None))
        if self.world.fail_close:
            raise RuntimeError("Target page, context or browser has been closed")


class FakeWorld:
    """Shared state of every fake session one renderer launches."""

    def __init__(self) -> None:
        self.sessions: List[FakeSession] = []
        self.events: List[tuple] = []
        self.gates: Dict[str, asyncio.Event] = {}
        self.launch_gate: Optional[asyncio.Event] = None
        self.fail_launch = False
        self.fail_goto = False
        self.fail_inject = False
        self.fail_close = False
        self.waiting = 0
        self.counter = 0

    @property
    def launches(self) -> int:
        return len(self.sessions)

    @property
    def pages(self) -> List[FakePage]:
        return [p for s in self.sessions for p in s.pages]

    async def launch(self) -> FakeSession:
        if self.launch_gate is not None:
            await self.launch_gate.wait()
        else:
            await asyncio.sleep(0)
        if self.fail_launch:
            raise RuntimeError("Executable doesn't exist at /ms-playwright/chromium/chrome")
        session = FakeSession(self)
        self.sessions.append(session)
        self.events.append(("session_launched", None))
        return session


async def wait_until(predicate, attempts: int = 1000) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")


@pytest.fixture
def world() -> FakeWorld:
    return FakeWorld()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        mermaid_script="https://cdn.example.test/mermaid.min.js",
        fontawesome_css="https://cdn.example.test/fontawesome/all.css",
    )


@pytest.fixture
def renderer(world: FakeWorld, settings: Settings) -> MermaidRenderer:
    return MermaidRenderer(settings=settings, session_factory=world.launch)
