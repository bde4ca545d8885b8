"""
Functional options applied when a model is constructed

An option is a callable taking the model under construction. It raises to
reject the configuration, which aborts the construction with
:class:`~lpbridge.errors.OptionError`.

Options run before the engine problem exists, so they may only touch the
model's host-side configuration (logger, parameters, backend class).
"""
from typing import Callable, Type, Union

from .parameters import Parameters

Option = Callable[['Model'], None]


def with_logger(logger) -> Option:
    """Send solver messages to ``logger`` (anything with ``print(*values)``)."""
    def apply(model):
        if not callable(getattr(logger, 'print', None)):
            raise TypeError(f"logger must have a print() method, got {type(logger).__name__}")
        model.logger = logger
    return apply


def with_parameters(parameters: Parameters) -> Option:
    def apply(model):
        if not isinstance(parameters, Parameters):
            raise TypeError(f"expected Parameters, got {type(parameters).__name__}")
        model.parameters = parameters.copy()
    return apply


def with_verbose(verbose: bool = True) -> Option:
    def apply(model):
        model.parameters.verbose = bool(verbose)
    return apply


def with_presolve(presolve: bool = True) -> Option:
    def apply(model):
        model.parameters.presolve = bool(presolve)
    return apply


def with_backend(backend: Union[str, Type['Engine']]) -> Option:
    """
    Select the solver engine by name (``'glpk'``, ``'lpsolve'``) or class.

    The engine's native library is loaded here, so an unavailable backend
    fails the construction.
    """
    def apply(model):
        from .backends import get_engine_class
        model._engine_class = get_engine_class(backend)
    return apply
