# src/mcp_mermaid_renderer/models/results.py
from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel

from ..errors import DiagramRenderError

class RenderResult(BaseModel):
    id: str
    svg: str
    width: float
    height: float
    description: Optional[str] = None
    title: Optional[str] = None
    screenshot: Optional[bytes] = None

    def to_json(self) -> Dict[str, Any]:
        """JSON-safe dict; absent fields are omitted and the PNG is base64 encoded."""
        data = self.model_dump(exclude_none=True, exclude={"screenshot"})
        if self.screenshot is not None:
            data["screenshot"] = base64.b64encode(self.screenshot).decode("ascii")
        return data

@dataclass(frozen=True)
class Fulfilled:
    value: RenderResult
    status: Literal["fulfilled"] = field(default="fulfilled", init=False)

    def to_json(self) -> Dict[str, Any]:
        return {"status": self.status, "value": self.value.to_json()}

@dataclass(frozen=True)
class Rejected:
    # A DiagramRenderError, unless the page threw something that was not an Error
    reason: Any
    status: Literal["rejected"] = field(default="rejected", init=False)

    def to_json(self) -> Dict[str, Any]:
        reason = self.reason
        if isinstance(reason, DiagramRenderError):
            return {"status": self.status, "reason": reason.to_descriptor()}
        if isinstance(reason, BaseException):
            return {
                "status": self.status,
                "reason": {"name": type(reason).__name__, "message": str(reason), "stack": ""},
            }
        return {"status": self.status, "reason": reason}

RenderOutcome = Union[Fulfilled, Rejected]
