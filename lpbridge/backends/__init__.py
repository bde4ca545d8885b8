"""
Solver engines and backend selection
"""
import logging
import os
from typing import Dict, Type, Union

from ..errors import BackendUnavailableError, ValidationError
from .base import Engine
from .glpk import GLPKEngine
from .lpsolve import LpSolveEngine

logger = logging.getLogger(__name__)

#: engines in default preference order
ENGINES: Dict[str, Type[Engine]] = {
    GLPKEngine.name: GLPKEngine,
    LpSolveEngine.name: LpSolveEngine,
}

BACKEND_ENV_VAR = 'LPBRIDGE_BACKEND'


def get_engine_class(backend: Union[str, Type[Engine]]) -> Type[Engine]:
    """
    Resolve a backend name or engine class and make sure it can be used.

    Raises
    ------
    ValidationError
        If the name is unknown
    BackendUnavailableError
        If the engine's native library cannot be loaded
    """
    if isinstance(backend, type) and issubclass(backend, Engine):
        engine_class = backend
    else:
        try:
            engine_class = ENGINES[str(backend).lower()]
        except KeyError:
            raise ValidationError(
                f"unknown backend {backend!r}, expected one of {', '.join(ENGINES)}"
            ) from None
    engine_class.ensure_available()
    return engine_class


def default_engine_class() -> Type[Engine]:
    """Backend named by ``LPBRIDGE_BACKEND``, else the first available engine."""
    name = os.environ.get(BACKEND_ENV_VAR)
    if name:
        logger.debug("backend %r selected by %s", name, BACKEND_ENV_VAR)
        return get_engine_class(name)
    for engine_class in ENGINES.values():
        if engine_class.available():
            logger.debug("backend %r selected", engine_class.name)
            return engine_class
    raise BackendUnavailableError(
        f"no solver engine available (tried {', '.join(ENGINES)}); "
        f"install GLPK or lp_solve 5.5, or point LPBRIDGE_GLPK_LIBRARY / "
        f"LPBRIDGE_LPSOLVE_LIBRARY at the shared library"
    )


def available_backends():
    """Names of the engines whose native library can be loaded"""
    return [name for name, engine_class in ENGINES.items() if engine_class.available()]


__all__ = [
    'Engine', 'GLPKEngine', 'LpSolveEngine', 'ENGINES',
    'get_engine_class', 'default_engine_class', 'available_backends',
]
