# src/mcp_mermaid_renderer/models/options.py
from __future__ import annotations

import os
from pathlib import Path, PurePath
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..settings import DEFAULT_FONT_FAMILY

DEFAULT_CONTAINER_STYLE: Dict[str, str] = {"maxHeight": "0", "opacity": "0", "overflow": "hidden"}

def to_resource_url(value: Any) -> str:
    """Turn a path or URL into something ``add_style_tag(url=...)`` can load."""
    if isinstance(value, PurePath):
        return Path(value).resolve().as_uri()
    s = str(value).strip()
    if "://" in s or s.startswith("data:"):
        return s
    if os.path.exists(s):
        return Path(s).resolve().as_uri()
    return s

class RenderOptions(BaseModel):
    """
    Per-call options:
      - prefix: id namespace; each diagram gets the id "{prefix}-{index}"
      - mermaid_config: passed to mermaid.initialize(), merged over the default fontFamily
      - css: extra stylesheet URLs (or local paths) injected before rendering, e.g. fonts
      - screenshot: also capture a transparent PNG of every rendered diagram
      - container_style: style overrides for the hidden container diagrams render into.
        Keys use DOM style names (maxWidth, not max-width). Some styles change layout,
        e.g. maxWidth affects gantt diagrams.
    """

    model_config = ConfigDict(extra="forbid")

    prefix: str = Field(default="mermaid", min_length=1)
    mermaid_config: Dict[str, Any] = Field(default_factory=dict)
    css: List[str] = Field(default_factory=list)
    screenshot: bool = False
    container_style: Dict[str, str] = Field(default_factory=dict)

    @field_validator("css", mode="before")
    @classmethod
    def _normalize_css(cls, v: Any) -> List[str]:
        if v is None:
            return []
        if isinstance(v, (str, PurePath)):
            v = [v]
        return [to_resource_url(item) for item in v]

    @field_validator("container_style", mode="before")
    @classmethod
    def _stringify_style(cls, v: Any) -> Dict[str, str]:
        if v is None:
            return {}
        return {str(k): str(val) for k, val in dict(v).items()}

    def merged_mermaid_config(self, font_family: str = DEFAULT_FONT_FAMILY) -> Dict[str, Any]:
        return {"fontFamily": font_family, **self.mermaid_config}

    def merged_container_style(self) -> Dict[str, str]:
        return {**DEFAULT_CONTAINER_STYLE, **self.container_style}
