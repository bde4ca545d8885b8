"""
Parameters class for lpbridge solves
"""
from enum import Enum


class Method(Enum):
    """Solve strategy"""
    AUTO = 'auto'              # branch-and-cut if any integer/binary column, else simplex
    SIMPLEX = 'simplex'        # continuous relaxation
    BRANCH_CUT = 'branch_cut'  # mixed-integer search


class Parameters:
    """
    Configuration parameters for a model's solves.

    Attributes
    ----------
    verbose : bool
        Route the engine's diagnostic output to the model logger (default: False)
    presolve : bool
        Let the engine eliminate rows/columns before solving (default: True).
        Ignored by the lp_solve engine, whose presolver deletes columns.
    method : Method
        Solve strategy used when ``solve()`` gets no explicit method
        (default: Method.AUTO)

    Examples
    --------
    >>> param = Parameters()
    >>> param.verbose = True
    >>> param.method = Method.SIMPLEX
    """

    def __init__(self, verbose: bool = False, presolve: bool = True, method=Method.AUTO):
        self.verbose = verbose
        self.presolve = presolve
        self.method = Method(method)

    def __repr__(self):
        return (f"Parameters(verbose={self.verbose}, "
                f"presolve={self.presolve}, "
                f"method={self.method.value})")

    def __eq__(self, other):
        if not isinstance(other, Parameters):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def copy(self) -> 'Parameters':
        return Parameters.from_dict(self.to_dict())

    @classmethod
    def from_dict(cls, d):
        """Create Parameters from dictionary"""
        param = cls()
        for key, value in d.items():
            if key == 'method':
                value = Method(value)
            if hasattr(param, key):
                setattr(param, key, value)
        return param

    def to_dict(self):
        """Convert to dictionary"""
        return {
            'verbose': self.verbose,
            'presolve': self.presolve,
            'method': self.method.value,
        }
