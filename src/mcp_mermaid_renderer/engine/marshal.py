# src/mcp_mermaid_renderer/engine/marshal.py
from __future__ import annotations

import logging
from typing import Any, List, Mapping, Sequence

from ..errors import DiagramRenderError
from ..models.results import Fulfilled, Rejected, RenderOutcome, RenderResult

log = logging.getLogger("mcp.mermaid.engine.marshal")

_ERROR_KEYS = ("name", "message", "stack")

def is_error_descriptor(reason: Any) -> bool:
    return isinstance(reason, Mapping) and all(k in reason for k in _ERROR_KEYS)

def restore_error(reason: Any) -> Any:
    """
    Turn a plain {name, message, stack} descriptor back into a DiagramRenderError.
    Anything else (the page threw a non-Error value) is returned as is.
    """
    if isinstance(reason, DiagramRenderError) or not is_error_descriptor(reason):
        return reason
    return DiagramRenderError(
        name=str(reason["name"]),
        message=str(reason["message"]),
        stack=str(reason["stack"] or ""),
    )

def settle(raw: Sequence[Mapping[str, Any]]) -> List[RenderOutcome]:
    """
    Convert the page's Promise.allSettled() output into outcomes, keeping the
    input order.
    """
    outcomes: List[RenderOutcome] = []
    for index, item in enumerate(raw):
        status = item.get("status")
        if status == "fulfilled":
            outcomes.append(Fulfilled(RenderResult.model_validate(item["value"])))
        elif status == "rejected":
            outcomes.append(Rejected(restore_error(item.get("reason"))))
        else:
            raise ValueError(f"unexpected settled status at index {index}: {status!r}")
    rejected = sum(1 for o in outcomes if isinstance(o, Rejected))
    if rejected:
        log.debug("marshal.rejected", extra={"count": rejected, "total": len(outcomes)})
    return outcomes
