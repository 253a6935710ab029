"""
This module contains the class describing the spatial domain in which the
particles are distributed.
"""
from typing import Optional, Sequence

import numpy as np


class MeshDomain():
    """Regular, box-shaped domain covered by a Cartesian mesh.

    The domain is split into tiles, which are slabs of consecutive cells
    along the third dimension. Each tile owns the particles located within
    its bounds and is the unit of work handed out to the worker threads.

    Parameters
    ----------
    lo, hi : sequence of float
        Lower and upper corner of the domain in each dimension (m).
    n_cell : sequence of int
        Number of cells of the coarsest mesh level in each dimension.
    n_tiles : int, optional
        Number of tiles into which the domain is split. By default, 1.
    rank, n_ranks : int, optional
        Index of the current process and total number of processes. Only
        relevant in MPI-parallel runs.

    """

    def __init__(
        self,
        lo: Sequence[float],
        hi: Sequence[float],
        n_cell: Sequence[int],
        n_tiles: Optional[int] = 1,
        rank: Optional[int] = 0,
        n_ranks: Optional[int] = 1
    ) -> None:
        self.lo = np.asarray(lo, dtype=float)
        self.hi = np.asarray(hi, dtype=float)
        self.n_cell = np.asarray(n_cell, dtype=int)
        if self.lo.shape != (3,) or self.hi.shape != (3,):
            raise ValueError('Domain corners must have three components.')
        if np.any(self.hi <= self.lo):
            raise ValueError(
                'Upper domain corner {} must be above lower corner {}.'.format(
                    self.hi, self.lo))
        if self.n_cell.shape != (3,) or np.any(self.n_cell < 1):
            raise ValueError(
                'n_cell must contain three positive integers, '
                'got {}.'.format(n_cell))
        if n_tiles < 1:
            raise ValueError('n_tiles must be at least 1.')
        self.n_tiles = int(min(n_tiles, self.n_cell[2]))
        self.rank = rank
        self.n_ranks = n_ranks

        # Tile edges along the third dimension, aligned with cell faces.
        cell_edges = np.linspace(0, self.n_cell[2], self.n_tiles + 1)
        self.tile_cell_edges = np.round(cell_edges).astype(int)
        self.tile_edges = (
            self.lo[2] + self.tile_cell_edges * self.cell_size()[2])

    def cell_size(
        self,
        level: Optional[int] = 0,
        ref_ratio: Optional[Sequence[Sequence[int]]] = None
    ) -> np.ndarray:
        """Get the cell size of a mesh level.

        Parameters
        ----------
        level : int
            Mesh refinement level.
        ref_ratio : list
            Refinement ratio (per dimension) between each level and the
            next one. Only needed if `level > 0`.
        """
        return (self.hi - self.lo) / self.n_cell_at_level(level, ref_ratio)

    def n_cell_at_level(
        self,
        level: Optional[int] = 0,
        ref_ratio: Optional[Sequence[Sequence[int]]] = None
    ) -> np.ndarray:
        """ Get the number of cells of a mesh level. """
        n_cell = self.n_cell.copy()
        for lev in range(level):
            n_cell *= np.broadcast_to(np.asarray(ref_ratio[lev], int), 3)
        return n_cell

    def tile_index(self, z: np.ndarray) -> np.ndarray:
        """Get the index of the tile containing each position.

        Positions outside of the domain are assigned to the closest tile.
        """
        i_tile = np.searchsorted(self.tile_edges, z, side='right') - 1
        return np.clip(i_tile, 0, self.n_tiles - 1)
