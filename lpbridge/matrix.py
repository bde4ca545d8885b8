"""
Sparse constraint matrix assembled as (row, column, value) triplets
"""
from typing import Tuple

import numpy as np
from scipy import sparse


def _ensure_contiguous_int32(arr):
    """Ensure array is contiguous int32"""
    if not isinstance(arr, np.ndarray):
        arr = np.array(arr, dtype=np.int32)
    if arr.dtype != np.int32:
        arr = arr.astype(np.int32)
    return np.ascontiguousarray(arr)


def _ensure_contiguous_float64(arr):
    """Ensure array is contiguous float64"""
    if not isinstance(arr, np.ndarray):
        arr = np.array(arr, dtype=np.float64)
    if arr.dtype != np.float64:
        arr = arr.astype(np.float64)
    return np.ascontiguousarray(arr)


class SparseMatrix:
    """
    Constraint coefficients accumulated in solver addressing.

    Rows and columns are 1-based, as the solver engines expect. Entries are
    only appended; the engine receives the whole matrix right before a
    solve, so constraints and variables can be added in any order.

    Examples
    --------
    >>> m = SparseMatrix()
    >>> m.append_row(1, [1, 3], [2.0, -1.0])
    >>> m.nnz
    2
    >>> ia, ja, ar = m.triplets()
    >>> ia.tolist(), ja.tolist(), ar.tolist()
    ([0, 1, 1], [0, 1, 3], [0.0, 2.0, -1.0])
    """

    def __init__(self):
        self._rows = []
        self._cols = []
        self._vals = []

    @property
    def nnz(self) -> int:
        """Number of stored entries, duplicates included"""
        return len(self._vals)

    def append_row(self, row: int, columns, values) -> None:
        """Append the entries of one row (``columns`` are 1-based)."""
        if len(columns) != len(values):
            raise ValueError(f"{len(columns)} columns for {len(values)} values")
        self._rows.extend([row] * len(columns))
        self._cols.extend(int(c) for c in columns)
        self._vals.extend(float(v) for v in values)

    def _coalesced(self, shape) -> sparse.coo_matrix:
        coo = sparse.coo_matrix(
            (np.asarray(self._vals, dtype=np.float64),
             (np.asarray(self._rows, dtype=np.int64), np.asarray(self._cols, dtype=np.int64))),
            shape=shape,
        )
        coo.sum_duplicates()
        coo.eliminate_zeros()
        return coo

    def _shape(self):
        if not self._vals:
            return (1, 1)
        return (max(self._rows) + 1, max(self._cols) + 1)

    def triplets(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Return the matrix as parallel ``(ia, ja, ar)`` arrays.

        Element 0 of every array is reserved and unused, so entry ``k`` lives
        at ``ia[k], ja[k], ar[k]`` for ``k`` in ``1..nnz``. Duplicate
        ``(row, column)`` entries are summed and zeros dropped.

        Returns
        -------
        ia : np.ndarray
            Row numbers (int32)
        ja : np.ndarray
            Column numbers (int32)
        ar : np.ndarray
            Coefficients (float64)
        """
        coo = self._coalesced(self._shape())
        ia = _ensure_contiguous_int32(np.concatenate(([0], coo.row)))
        ja = _ensure_contiguous_int32(np.concatenate(([0], coo.col)))
        ar = _ensure_contiguous_float64(np.concatenate(([0.0], coo.data)))
        return ia, ja, ar

    def to_csr(self, num_rows: int, num_cols: int) -> sparse.csr_matrix:
        """Return the matrix 0-based as a ``num_rows x num_cols`` CSR matrix."""
        coo = self._coalesced((num_rows + 1, num_cols + 1))
        return coo.tocsr()[1:, 1:]

    def copy(self) -> 'SparseMatrix':
        clone = SparseMatrix()
        clone._rows = list(self._rows)
        clone._cols = list(self._cols)
        clone._vals = list(self._vals)
        return clone

    def __repr__(self):
        return f"<SparseMatrix nnz={self.nnz}>"
