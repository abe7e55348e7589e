from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP
from pydantic import ValidationError

from ..engine.pool import MermaidRenderer
from ..engine.sanity import diagram_type, sanitize_mermaid
from ..errors import InvalidRequestError, SessionError
from ..models.io_contracts import RenderRequest, RenderResponse
from ..models.options import RenderOptions
from ..utils.logging import preview, want_verbose_inputs

log = logging.getLogger("mcp.mermaid.tools.render")

def _build_request(
    diagrams: List[str],
    prefix: Optional[str],
    mermaid_config: Optional[Dict[str, Any]],
    css: Optional[List[str]],
    screenshot: bool,
    container_style: Optional[Dict[str, str]],
) -> RenderRequest:
    opts: Dict[str, Any] = {
        "mermaid_config": mermaid_config or {},
        "css": css or [],
        "screenshot": bool(screenshot),
        "container_style": container_style or {},
    }
    if prefix:
        opts["prefix"] = prefix
    try:
        return RenderRequest(
            diagrams=[sanitize_mermaid(d) for d in (diagrams or [])],
            options=RenderOptions(**opts),
        )
    except ValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        raise InvalidRequestError(str(e), data={"errors": errors}) from e

async def render_diagrams(
    renderer: MermaidRenderer,
    diagrams: List[str],
    prefix: Optional[str] = None,
    mermaid_config: Optional[Dict[str, Any]] = None,
    css: Optional[List[str]] = None,
    screenshot: bool = False,
    container_style: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """
    Tool body: validate, render, and return a JSON-safe envelope.
      - results[i] is {"status": "fulfilled", "value": {...}} or
        {"status": "rejected", "reason": {"name", "message", "stack"}}
      - request and browser failures come back as "error" with no results;
        "detail" holds the JSON-RPC style error object (code, message, data)
    """
    t0 = time.time()
    try:
        req = _build_request(diagrams, prefix, mermaid_config, css, screenshot, container_style)
    except InvalidRequestError as e:
        log.warning("tool.request.invalid", extra={"error": e.message})
        return RenderResponse(error=f"invalid_request: {e.message}", detail=e.to_dict()).model_dump()

    if want_verbose_inputs():
        log.info("tool.request.verbose", extra={"diagrams": req.diagrams, "options": req.options.model_dump()})
    else:
        log.info("tool.request", extra={
            "count": len(req.diagrams),
            "types": [diagram_type(d) for d in req.diagrams],
            "first_preview": preview(req.diagrams[0], 120),
            "screenshot": req.options.screenshot,
        })

    try:
        outcomes = await renderer(req.diagrams, req.options)
    except SessionError as e:
        log.exception("tool.execution.session_failed", extra={"stage": e.stage})
        return RenderResponse(error=f"session_failed: {e.message}", detail=e.to_dict()).model_dump()

    resp = RenderResponse(results=[o.to_json() for o in outcomes]).model_dump()
    log.info("tool.response", extra={
        "took_ms": int((time.time() - t0) * 1000),
        "statuses": [r["status"] for r in resp["results"]],
    })
    return resp

def register_mermaid_render(mcp: FastMCP, renderer: MermaidRenderer) -> None:
    log.info("tool.register", extra={"tool": "diagram.mermaid.render"})

    @mcp.tool(name="diagram.mermaid.render", title="Render Mermaid Diagrams")
    async def diagram_mermaid_render(
        diagrams: List[str],
        prefix: Optional[str] = None,
        mermaid_config: Optional[Dict[str, Any]] = None,
        css: Optional[List[str]] = None,
        screenshot: bool = False,
        container_style: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Render Mermaid diagrams to SVG.
          - diagrams: Mermaid sources; results keep the same order
          - prefix: id prefix for the generated SVGs (default "mermaid")
          - mermaid_config: mermaid.initialize() config, e.g. {"theme": "dark"}
          - css: extra stylesheet URLs, e.g. for custom fonts
          - screenshot: also return a base64 PNG per rendered diagram
          - container_style: style overrides for the hidden render container
        """
        return await render_diagrams(
            renderer,
            diagrams,
            prefix=prefix,
            mermaid_config=mermaid_config,
            css=css,
            screenshot=screenshot,
            container_style=container_style,
        )
