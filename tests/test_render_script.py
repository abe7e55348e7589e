"""Runs static/render_diagrams.js in a real browser against a stub Mermaid.

Needs a Playwright browser (``playwright install chromium``) but no network:
the page is built with ``set_content`` and the stub is injected inline.
"""
import pytest
import pytest_asyncio
from playwright.async_api import Error as PlaywrightError

from mcp_mermaid_renderer import DiagramRenderError, Fulfilled, Rejected, create_page_renderer
from mcp_mermaid_renderer.engine.marshal import settle
from mcp_mermaid_renderer.engine.pool import svg_selector
from mcp_mermaid_renderer.engine.session import BrowserSession
from mcp_mermaid_renderer.models.options import DEFAULT_CONTAINER_STYLE
from mcp_mermaid_renderer.resources import load_render_script

STUB_MERMAID = r"""
window.stubCalls = { initialize: [], containers: [] }
window.mermaid = {
  initialize (config) {
    window.stubCalls.initialize.push(config)
  },
  async render (id, text, container) {
    window.stubCalls.containers.push({
      connected: container.isConnected,
      hidden: container.getAttribute('aria-hidden'),
      opacity: container.style.opacity,
      maxWidth: container.style.maxWidth
    })
    if (text === 'plain') {
      throw 'not an Error'
    }
    if (!text.startsWith('graph')) {
      const error = new Error(`No diagram type detected matching given configuration for text: ${text}`)
      error.name = 'UnknownDiagramError'
      throw error
    }
    const open = `<svg xmlns="http://www.w3.org/2000/svg" id="${id}" width="240" viewBox="0 0 120 80"`
    if (text.includes('accessible')) {
      return {
        svg: `${open} aria-labelledby="${id}-t1 ${id}-t2" aria-describedby="${id}-d">` +
          `<title id="${id}-t2">decisions</title><desc id="${id}-d">Bob's process</desc>` +
          `<text id="${id}-t1">Big </text></svg>`
      }
    }
    if (text.includes('dangling')) {
      return { svg: `${open} aria-labelledby="${id}-nope" aria-describedby="${id}-gone"><g></g></svg>` }
    }
    return { svg: `${open}><g><text>${text}</text></g></svg>` }
  }
}
"""


@pytest_asyncio.fixture
async def page():
    try:
        session = await BrowserSession.launch("chromium", {"headless": True})
    except PlaywrightError as exc:
        pytest.skip(f"no Playwright chromium available: {str(exc).splitlines()[0]}")
    try:
        page = await session.new_page()
        await page.set_content("<!doctype html><html><body></body></html>")
        await page.add_script_tag(content=STUB_MERMAID)
        yield page
    finally:
        await session.close()


async def run(page, diagrams, **overrides):
    args = {
        "containerStyle": dict(DEFAULT_CONTAINER_STYLE),
        "diagrams": diagrams,
        "mermaidConfig": {"fontFamily": "arial,sans-serif"},
        "prefix": "mermaid",
        "screenshot": False,
        "useCounter": False,
    }
    args.update(overrides)
    return await page.evaluate(load_render_script(), args)


@pytest.mark.asyncio
async def test_mixed_batch_settles_per_diagram(page) -> None:
    raw = await run(page, ["graph A", "invalid", "graph B"])

    assert [r["status"] for r in raw] == ["fulfilled", "rejected", "fulfilled"]
    ok_a, bad, ok_b = settle(raw)
    assert isinstance(ok_a, Fulfilled)
    assert isinstance(ok_b, Fulfilled)
    assert [ok_a.value.id, ok_b.value.id] == ["mermaid-0", "mermaid-2"]
    for ok in (ok_a, ok_b):
        assert ok.value.svg.startswith("<svg")
        assert "viewBox" in ok.value.svg
        assert (ok.value.width, ok.value.height) == (120, 80)

    assert isinstance(bad, Rejected)
    assert isinstance(bad.reason, DiagramRenderError)
    assert bad.reason.name == "UnknownDiagramError"
    assert bad.reason.message == "No diagram type detected matching given configuration for text: invalid"
    assert bad.reason.stack


@pytest.mark.asyncio
async def test_aria_references_are_joined_in_reference_order(page) -> None:
    [outcome] = settle(await run(page, ["graph accessible"]))

    assert outcome.value.title == "Big decisions"
    assert outcome.value.description == "Bob's process"


@pytest.mark.asyncio
async def test_unresolved_aria_references_are_omitted(page) -> None:
    raw = await run(page, ["graph dangling", "graph plain"])

    for item in raw:
        assert "title" not in item["value"]
        assert "description" not in item["value"]
    dangling, plain = settle(raw)
    assert dangling.value.title is None
    assert dangling.value.description is None
    assert plain.value.title is None


@pytest.mark.asyncio
async def test_container_is_removed_after_a_failed_diagram(page) -> None:
    await run(page, ["invalid"], containerStyle={**DEFAULT_CONTAINER_STYLE, "maxWidth": "640px"})

    assert await page.locator("[aria-hidden]").count() == 0
    [container] = await page.evaluate("window.stubCalls.containers")
    assert container == {"connected": True, "hidden": "true", "opacity": "0", "maxWidth": "640px"}


@pytest.mark.asyncio
async def test_non_error_throw_stays_raw(page) -> None:
    raw = await run(page, ["plain"])

    assert raw == [{"status": "rejected", "reason": "not an Error"}]
    [outcome] = settle(raw)
    assert isinstance(outcome, Rejected)
    assert outcome.reason == "not an Error"


@pytest.mark.asyncio
async def test_config_is_applied_only_when_given(page) -> None:
    await run(page, ["graph A"], mermaidConfig={"theme": "dark"})
    await run(page, ["graph A"], mermaidConfig=None)

    assert await page.evaluate("window.stubCalls.initialize") == [{"theme": "dark"}]


@pytest.mark.asyncio
async def test_screenshot_svg_is_found_by_unicode_id(page) -> None:
    [outcome] = settle(await run(page, ["graph A"], prefix="café", screenshot=True))

    assert outcome.value.id == "café-0"
    locator = page.locator(svg_selector(outcome.value.id))
    assert await locator.count() == 1
    png = await locator.screenshot(omit_background=True, timeout=5000)
    assert png.startswith(b"\x89PNG")


@pytest.mark.asyncio
async def test_missing_engine_fails_the_evaluation(page) -> None:
    await page.evaluate("delete window.mermaid")

    with pytest.raises(PlaywrightError, match="Mermaid is not loaded"):
        await run(page, ["graph A"])


@pytest.mark.asyncio
async def test_page_renderer_counts_ids_on_the_page(page) -> None:
    renderer = create_page_renderer(page)

    first = await renderer(["graph A", "invalid"])
    second = await renderer(["graph B"], {"prefix": "doc"})

    assert first[0].value.id == "mermaid-0"
    assert isinstance(first[1].reason, DiagramRenderError)
    assert second[0].value.id == "doc-2"
    assert await page.evaluate("window.stubCalls.initialize") == []
