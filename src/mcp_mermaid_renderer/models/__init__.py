from .io_contracts import RenderRequest, RenderResponse
from .options import DEFAULT_CONTAINER_STYLE, RenderOptions
from .results import Fulfilled, Rejected, RenderOutcome, RenderResult

__all__ = [
    "DEFAULT_CONTAINER_STYLE",
    "Fulfilled",
    "Rejected",
    "RenderOptions",
    "RenderOutcome",
    "RenderRequest",
    "RenderResponse",
    "RenderResult",
]
