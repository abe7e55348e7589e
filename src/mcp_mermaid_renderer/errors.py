"""Error types raised by the Mermaid renderer."""

from __future__ import annotations

from typing import Any, Dict, Optional


class MermaidRendererError(Exception):
    """Base exception for renderer errors."""

    def __init__(
        self,
        message: str,
        code: int = -32603,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-RPC style error object."""
        error: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data:
            error["data"] = self.data
        return error


class InvalidRequestError(MermaidRendererError):
    """Error for render requests that fail validation."""

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=-32602, data=data)


class SessionError(MermaidRendererError):
    """The browser session failed; the whole render call is lost.

    ``stage`` names the step that failed: ``launch``, ``page``, ``navigate``,
    ``inject``, ``evaluate`` or ``screenshot``.
    """

    def __init__(self, stage: str, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(f"{stage} failed: {message}", code=-32001, data={"stage": stage, **(data or {})})
        self.stage = stage


class DiagramRenderError(MermaidRendererError):
    """A single diagram was rejected by Mermaid inside the page.

    Carries the ``name``, ``message`` and ``stack`` of the JavaScript error, so
    callers can handle it like any other exception.
    """

    def __init__(self, name: str, message: str, stack: Optional[str] = None):
        super().__init__(message, code=-32002, data={"name": name})
        self.name = name
        self.stack = stack or ""

    def __str__(self) -> str:
        return f"{self.name}: {self.message}"

    def __repr__(self) -> str:
        return f"DiagramRenderError(name={self.name!r}, message={self.message!r})"

    def to_descriptor(self) -> Dict[str, str]:
        return {"name": self.name, "message": self.message, "stack": self.stack}
