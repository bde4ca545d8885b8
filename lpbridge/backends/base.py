"""
Interface every solver engine implements
"""
import abc
import ctypes
import ctypes.util
import logging
import os
import threading
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from ..bounds import Bound, BoundType
from ..errors import BackendUnavailableError, UnsupportedOperationError
from ..parameters import Method, Parameters
from ..status import Outcome, UnexpectedOutcome
from ..variable import VariableType

logger = logging.getLogger(__name__)

SolveOutcome = Union[Outcome, UnexpectedOutcome]


class NativeLibrary:
    """
    Lazily loaded shared library shared by all problems of an engine.

    The library is looked up once per process: first the path in
    ``env_var``, then :func:`ctypes.util.find_library` for each of
    ``names``, then the literal ``sonames``.
    """

    def __init__(self, env_var: str, names: Sequence[str], sonames: Sequence[str], prototypes):
        self.env_var = env_var
        self.names = tuple(names)
        self.sonames = tuple(sonames)
        self._prototypes = prototypes
        self._dll = None
        self._lock = threading.Lock()

    def _candidates(self):
        path = os.environ.get(self.env_var)
        if path:
            yield path
        for name in self.names:
            found = ctypes.util.find_library(name)
            if found:
                yield found
        yield from self.sonames

    def load(self) -> ctypes.CDLL:
        if self._dll is None:
            with self._lock:
                if self._dll is None:
                    tried = []
                    for candidate in self._candidates():
                        try:
                            dll = ctypes.CDLL(candidate)
                        except OSError as err:
                            tried.append(f"{candidate}: {err}")
                            continue
                        self._prototypes(dll)
                        logger.debug("loaded %s", candidate)
                        self._dll = dll
                        break
                    else:
                        raise BackendUnavailableError(
                            f"could not load any of {', '.join(self.names)} "
                            f"(set {self.env_var} to the library path)\n  " + "\n  ".join(tried)
                        )
        return self._dll

    def available(self) -> bool:
        try:
            self.load()
        except BackendUnavailableError:
            return False
        return True


def as_pointer(arr: np.ndarray, ctype):
    return arr.ctypes.data_as(ctypes.POINTER(ctype))


def encode_name(name: str) -> bytes:
    return name.encode('utf-8')


def decode_name(raw: Optional[bytes]) -> str:
    return raw.decode('utf-8') if raw else ""


class Engine(abc.ABC):
    """
    One problem instance inside a native solver engine.

    Columns and rows are addressed 1-based, as in the native libraries.
    Counts only grow: :meth:`add_columns` and :meth:`add_rows` raise
    :class:`~lpbridge.errors.UnsupportedOperationError` for negative counts.

    Engines are not thread-safe; the owning model serializes all calls.
    """

    #: registry name
    name = 'abstract'
    #: whether a row bounded on neither side is stored (True) or dropped (False)
    supports_free_rows = True
    #: whether solve() honours Method.SIMPLEX / Method.BRANCH_CUT
    selects_method = True

    @classmethod
    @abc.abstractmethod
    def available(cls) -> bool:
        """Whether the native library can be loaded"""

    @classmethod
    def ensure_available(cls) -> None:
        """Raise :class:`BackendUnavailableError` unless the engine can be used."""
        if not cls.available():
            raise BackendUnavailableError(f"solver engine {cls.name!r} is not available")

    # lifecycle

    @abc.abstractmethod
    def destroy(self) -> None:
        """Release the native problem. Called exactly once."""

    @abc.abstractmethod
    def copy(self) -> 'Engine':
        """Deep copy of the native problem, names included"""

    # problem

    def check_name(self, name: str) -> None:
        """Raise :class:`~lpbridge.errors.ValidationError` if the engine cannot store ``name``."""

    @abc.abstractmethod
    def set_name(self, name: str) -> None: ...

    @abc.abstractmethod
    def get_name(self) -> str: ...

    @abc.abstractmethod
    def set_maximize(self, maximize: bool) -> None: ...

    @abc.abstractmethod
    def is_maximize(self) -> bool: ...

    # columns

    @abc.abstractmethod
    def column_count(self) -> int: ...

    @abc.abstractmethod
    def _add_columns(self, count: int) -> int: ...

    def add_columns(self, count: int) -> int:
        """Append ``count`` empty columns; return the number of the first one."""
        if count < 0:
            raise UnsupportedOperationError("reducing the number of columns is not supported")
        return self._add_columns(count)

    @abc.abstractmethod
    def set_column_name(self, col: int, name: str) -> None: ...

    @abc.abstractmethod
    def column_name(self, col: int) -> str: ...

    @abc.abstractmethod
    def set_column_type(self, col: int, kind: VariableType) -> None: ...

    @abc.abstractmethod
    def set_column_bounds(self, col: int, bound: Bound) -> None: ...

    @abc.abstractmethod
    def column_bounds(self, col: int) -> Tuple[float, float]:
        """Semantic ``(lower, upper)`` with infinities for unbounded sides"""

    @abc.abstractmethod
    def set_objective_coefficient(self, col: int, value: float) -> None: ...

    @abc.abstractmethod
    def objective_coefficient(self, col: int) -> float: ...

    # rows

    @abc.abstractmethod
    def row_count(self) -> int: ...

    @abc.abstractmethod
    def _add_rows(self, count: int) -> int: ...

    def add_rows(self, count: int) -> int:
        """Append ``count`` free rows; return the number of the first one."""
        if count < 0:
            raise UnsupportedOperationError("reducing the number of rows is not supported")
        return self._add_rows(count)

    @abc.abstractmethod
    def set_row_bounds(self, row: int, bound: Bound) -> None: ...

    def add_row(self, bound: Bound) -> Tuple[int, ...]:
        """
        Append the row(s) representing one constraint.

        Returns the numbers of the rows that receive the constraint's
        coefficients; empty when the engine drops a FREE row.
        """
        if bound.type == BoundType.FREE and not self.supports_free_rows:
            return ()
        row = self.add_rows(1)
        self.set_row_bounds(row, bound)
        return (row,)

    @abc.abstractmethod
    def load_matrix(self, ia: np.ndarray, ja: np.ndarray, ar: np.ndarray) -> None:
        """Replace the constraint matrix with triplets (element 0 unused)."""

    # solving

    @abc.abstractmethod
    def solve(self, method: Method, parameters: Parameters, *,
              log_handle: Optional[int] = None) -> SolveOutcome:
        """
        Run the solver.

        ``method`` is never AUTO here. ``log_handle`` resolves to the model
        whose logger receives solver messages while the call runs.
        """

    @abc.abstractmethod
    def set_abort_handle(self, handle: Optional[int]) -> None:
        """Install (handle) or remove (None) the abort poll."""

    @abc.abstractmethod
    def primal_value(self, col: int, method: Method) -> float: ...

    @abc.abstractmethod
    def dual_value(self, col: int, method: Method) -> float: ...

    @abc.abstractmethod
    def objective_value(self, method: Method) -> float: ...
