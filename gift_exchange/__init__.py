"""Real-time secret gift exchange server."""

from .exchange import ActionResult, GiftExchange
from .sessions import SessionRegistry

__version__ = "0.1.0"

__all__ = ["ActionResult", "GiftExchange", "SessionRegistry", "__version__"]
