from functools import lru_cache
from importlib import resources


@lru_cache(maxsize=None)
def load_render_script() -> str:
    """
    The function Page.evaluate() runs inside the browser. Its argument and its
    Promise.allSettled() result cross the page boundary as JSON, so rejections
    carry plain {name, message, stack} data instead of Error objects.
    """
    with resources.files(__package__).joinpath("static/render_diagrams.js").open("r", encoding="utf-8") as fh:
        return fh.read()


@lru_cache(maxsize=None)
def bootstrap_url() -> str:
    """file:// URL of the empty page each render call navigates to."""
    # Only valid while the package lives on disk, not inside a zip.
    with resources.as_file(resources.files(__package__).joinpath("static/index.html")) as path:
        return path.resolve().as_uri()
