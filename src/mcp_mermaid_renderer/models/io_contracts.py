from __future__ import annotations

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from .options import RenderOptions

class RenderRequest(BaseModel):
    diagrams: List[str] = Field(min_length=1)
    options: RenderOptions = Field(default_factory=RenderOptions)

class RenderResponse(BaseModel):
    results: List[Dict[str, Any]] = Field(default_factory=list)
    error: Optional[str] = None
    detail: Optional[Dict[str, Any]] = None
