from __future__ import annotations

from typing import List, Sequence

import numpy as np

from .types import DEFAULT_GRID_SIZE, CellKind

_VALID_KINDS = np.array([int(kind) for kind in CellKind], dtype=np.int8)


class Scenario:
    """Square grid of :class:`CellKind` values.

    The grid is always ``size`` x ``size``. Cells are stored as ``int8`` so the
    array doubles as the wire representation. Callers outside the session
    controller should only use :meth:`view` or :meth:`to_rows`.
    """

    def __init__(self, size: int = DEFAULT_GRID_SIZE) -> None:
        if size < 1:
            raise ValueError(f"grid size must be positive, got {size}")
        self._size = int(size)
        self._cells = np.full(
            (self._size, self._size), int(CellKind.EMPTY), dtype=np.int8
        )

    # ------------------------------------------------------------------
    @property
    def size(self) -> int:
        return self._size

    def __getitem__(self, pos: tuple[int, int]) -> CellKind:
        row, col = pos
        self._check_bounds(row, col)
        return CellKind(int(self._cells[row, col]))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Scenario):
            return NotImplemented
        return self._size == other._size and np.array_equal(
            self._cells, other._cells
        )

    def __repr__(self) -> str:
        return f"Scenario(size={self._size})"

    # ------------------------------------------------------------------
    def in_bounds(self, row: int, col: int) -> bool:
        """Return ``True`` if ``(row, col)`` addresses a cell of the grid."""
        return 0 <= row < self._size and 0 <= col < self._size

    def _check_bounds(self, row: int, col: int) -> None:
        if not self.in_bounds(row, col):
            raise IndexError(f"cell ({row}, {col}) outside {self._size}x{self._size}")

    def set_cell(self, row: int, col: int, kind: CellKind | int) -> None:
        """Replace exactly one cell with ``kind``."""
        self._check_bounds(row, col)
        self._cells[row, col] = int(CellKind(kind))

    def clear(self) -> None:
        """Set every cell to :attr:`CellKind.EMPTY`."""
        self._cells.fill(int(CellKind.EMPTY))

    def replace(self, rows: Sequence[Sequence[int]] | np.ndarray) -> None:
        """Replace the whole grid with ``rows``.

        ``rows`` must have the same ``size`` x ``size`` shape and contain only
        valid :class:`CellKind` values; otherwise ``ValueError`` is raised and
        the grid is left untouched.
        """
        try:
            grid = np.asarray(rows, dtype=np.int64)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"grid is not a rectangular matrix: {exc}") from exc
        if grid.shape != (self._size, self._size):
            raise ValueError(
                f"expected {self._size}x{self._size} grid, got shape {grid.shape}"
            )
        if not np.isin(grid, _VALID_KINDS).all():
            raise ValueError("grid contains unknown cell values")
        self._cells[...] = grid.astype(np.int8)

    # ------------------------------------------------------------------
    def count(self, kind: CellKind | int) -> int:
        """Return how many cells hold ``kind``."""
        return int(np.count_nonzero(self._cells == int(kind)))

    def view(self) -> np.ndarray:
        """Return a read-only view of the underlying array."""
        view = self._cells.view()
        view.flags.writeable = False
        return view

    def to_rows(self) -> List[List[int]]:
        """Return the grid as ``size`` lists of ``size`` plain ints."""
        return self._cells.astype(int).tolist()
