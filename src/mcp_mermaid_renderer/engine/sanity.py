# src/mcp_mermaid_renderer/engine/sanity.py
from __future__ import annotations

import re
from typing import Optional

_FRONTMATTER_RE = re.compile(r"^---\s*\n.*?\n---\s*\n", flags=re.DOTALL)
_DIRECTIVE_RE = re.compile(r"%%\{.*?\}%%", flags=re.DOTALL)

def sanitize_mermaid(text: str) -> str:
    """Strip surrounding code fences, e.g. from LLM output or markdown snippets."""
    s = (text or "").strip()
    if s.startswith("```"):
        s = re.sub(r"^```[a-zA-Z0-9]*\s*", "", s)
        s = re.sub(r"\s*```$", "", s)
    return s.strip()

def diagram_type(text: str) -> Optional[str]:
    """
    First keyword of the diagram (flowchart, graph, sequenceDiagram, ...), skipping
    frontmatter, %%{init}%% directives and %% comments. Only used for logging;
    Mermaid does the real detection.
    """
    s = _FRONTMATTER_RE.sub("", sanitize_mermaid(text), count=1)
    s = _DIRECTIVE_RE.sub("", s)
    for ln in s.splitlines():
        ln = ln.strip()
        if not ln or ln.startswith("%%"):
            continue
        m = re.match(r"^([A-Za-z][\w-]*)", ln)
        return m.group(1) if m else None
    return None
