# src/mcp_mermaid_renderer/settings.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

DEFAULT_MERMAID_SCRIPT = "https://cdn.jsdelivr.net/npm/mermaid@10/dist/mermaid.min.js"
DEFAULT_FONTAWESOME_CSS = "https://cdn.jsdelivr.net/npm/@fortawesome/fontawesome-free@6/css/all.min.css"
DEFAULT_FONT_FAMILY = "arial,sans-serif"

BROWSER_TYPES = ("chromium", "firefox", "webkit")

def _truthy(v: str | None) -> bool:
    return str(v or "").strip().lower() in {"1", "true", "yes", "y", "on"}

def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except Exception:
        return default

@dataclass
class Settings:
    # Browser
    browser: str = "chromium"
    headless: bool = True
    executable_path: Optional[str] = None
    launch_timeout_ms: float = 30000.0
    navigation_timeout_ms: float = 30000.0

    # Injected resources (URL, or a local file path for the script)
    mermaid_script: str = DEFAULT_MERMAID_SCRIPT
    fontawesome_css: str = DEFAULT_FONTAWESOME_CSS

    # Mermaid defaults
    font_family: str = DEFAULT_FONT_FAMILY

    @classmethod
    def from_env(cls) -> "Settings":
        browser = os.getenv("MERMAID_BROWSER", "chromium").strip().lower() or "chromium"
        if browser not in BROWSER_TYPES:
            browser = "chromium"

        headless = _truthy(os.getenv("MERMAID_HEADLESS", "true"))
        executable = (os.getenv("MERMAID_BROWSER_EXECUTABLE") or "").strip() or None

        script = (os.getenv("MERMAID_SCRIPT") or "").strip() or DEFAULT_MERMAID_SCRIPT
        fa_css = (os.getenv("FONTAWESOME_CSS") or "").strip() or DEFAULT_FONTAWESOME_CSS
        font_family = (os.getenv("MERMAID_FONT_FAMILY") or "").strip() or DEFAULT_FONT_FAMILY

        return cls(
            browser=browser,
            headless=headless,
            executable_path=executable,
            launch_timeout_ms=_float_env("MERMAID_LAUNCH_TIMEOUT_MS", 30000.0),
            navigation_timeout_ms=_float_env("MERMAID_NAVIGATION_TIMEOUT_MS", 30000.0),
            mermaid_script=script,
            fontawesome_css=fa_css,
            font_family=font_family,
        )

    def launch_options(self) -> Dict[str, Any]:
        """Keyword arguments for ``BrowserType.launch``."""
        opts: Dict[str, Any] = {
            "headless": self.headless,
            "timeout": self.launch_timeout_ms,
        }
        if self.executable_path:
            opts["executable_path"] = self.executable_path
        return opts
