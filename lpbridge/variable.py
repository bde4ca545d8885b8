"""
Decision variables
"""
from enum import Enum
from typing import Tuple


class VariableType(Enum):
    """Kind of a decision variable"""
    CONTINUOUS = 'continuous'
    INTEGER = 'integer'
    BINARY = 'binary'


class Variable:
    """
    A decision variable of a :class:`~lpbridge.model.Model`.

    A variable holds no solver state. It is a back-reference to its model
    plus its 0-based index, fixed at creation; every attribute is read from
    and written to the model. Create variables with the model's
    ``add_*variable`` methods only.

    A variable belongs to exactly one model. Using it with another model
    (including a clone of its own model) is undefined.

    Attributes
    ----------
    model : Model
        Owning model
    index : int
        0-based position in the model
    """

    __slots__ = ('model', 'index')

    def __init__(self, model, index: int):
        self.model = model
        self.index = index

    @property
    def column(self) -> int:
        """1-based column number used by the solver engine"""
        return self.index + 1

    @property
    def name(self) -> str:
        return self.model._column_name(self)

    @property
    def type(self) -> VariableType:
        return self.model._column_type(self)

    def set_type(self, kind: VariableType) -> None:
        """
        Change the variable kind.

        Making a variable BINARY also fixes its bounds to ``[0, 1]``.
        """
        self.model._set_column_type(self, VariableType(kind))

    @property
    def bounds(self) -> Tuple[float, float]:
        """``(lower, upper)``; unbounded sides are ``-inf`` / ``inf``"""
        return self.model._column_bounds(self)

    def set_bounds(self, lower: float, upper: float) -> None:
        """
        Set the bounds of the variable.

        Pass ``float('inf')`` or ``-float('inf')`` for an unbounded side; the
        sign of the infinity is ignored. Ignored for binary variables.
        """
        self.model._set_column_bounds(self, lower, upper)

    @property
    def coefficient(self) -> float:
        """Coefficient in the objective function"""
        return self.model._objective_coefficient(self)

    def set_objective_coefficient(self, coefficient: float) -> None:
        self.model._set_objective_coefficient(self, coefficient)

    def __repr__(self):
        if not self.model.is_valid():
            return f"Variable(index={self.index}, model freed)"
        return f"Variable({self.name!r}, index={self.index})"
