"""
Logger sinks for solver diagnostics
"""
import logging
from typing import Optional, Protocol


class Logger(Protocol):
    """Anything with a ``print(*values)`` method can receive solver messages."""

    def print(self, *values) -> None:
        ...


class NoopLogger:
    """Discards every message. Default logger of a model."""

    def print(self, *values) -> None:
        pass

    def __repr__(self):
        return "NoopLogger()"


class StandardLogger:
    """
    Forward solver messages to a :mod:`logging` logger.

    Parameters
    ----------
    logger : logging.Logger, optional
        Target logger (default: the ``lpbridge.solver`` logger)
    level : int, optional
        Level used for every message (default: INFO)
    """

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO):
        self.logger = logger or logging.getLogger('lpbridge.solver')
        self.level = level

    def print(self, *values) -> None:
        message = " ".join(str(v) for v in values).rstrip("\n")
        if message:
            self.logger.log(self.level, message)

    def __repr__(self):
        return f"StandardLogger({self.logger.name!r})"
