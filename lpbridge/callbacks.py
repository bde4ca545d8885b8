"""
Host side of the foreign callbacks

Each engine wraps these functions in ``ctypes.CFUNCTYPE`` trampolines with
the signature its library expects. The only argument that matters is the
opaque handle, which is resolved through the registry. Exceptions never
propagate into the foreign library: ctypes would print and drop them anyway,
so they are logged here and the callback reports "continue".
"""
import logging

from .registry import registry

logger = logging.getLogger(__name__)


def should_abort(handle) -> bool:
    """True if the context registered under ``handle`` is done."""
    try:
        ctx = registry.resolve(handle)
        return ctx is not None and ctx.error() is not None
    except Exception:
        logger.exception("abort poll failed")
        return False


def forward_message(handle, text) -> None:
    """Send a solver message to the logger of the model registered under ``handle``."""
    try:
        model = registry.resolve(handle)
        if model is None:
            return
        if isinstance(text, bytes):
            text = text.decode('utf-8', errors='replace')
        text = text.rstrip("\n")
        if text:
            model.logger.print(text)
    except Exception:
        logger.exception("forwarding solver message failed")
