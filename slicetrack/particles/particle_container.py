"""
This module contains the class defining the container of beam particles.
"""
from __future__ import annotations
from multiprocessing.pool import ThreadPool
from typing import Optional, Callable, Dict, List, Sequence, Tuple, Any

import numpy as np
import scipy.constants as ct

from slicetrack.utilities import numba as numba_config
from .deposition import get_n_guard, deposit_3d_distribution
from .domain import MeshDomain
from .frame import Frame, get_frame, get_position_names, get_momentum_names
from .particle_tile import ParticleTile, REAL_ATTRIBUTES, INT_ATTRIBUTES
from .reference_particle import ReferenceParticle


class ParticleContainer():
    """ Container of the beam macroparticles.

    The particles are distributed over the tiles of a `MeshDomain` and,
    in MPI-parallel runs, over several processes. The container also owns
    the reference particle of the beam.

    Parameters
    ----------
    domain : MeshDomain, optional
        Spatial domain of the simulation. Particles can only be added once
        the domain has been set, either here or by calling `init_domain`.
    ref_particle : ReferenceParticle, optional
        Reference particle of the beam.
    lost_particles : ParticleContainer, optional
        Container into which the lost particles will be transferred.
    comm : mpi4py communicator, optional
        Communicator used for the reductions over all processes. If not
        given, the container only holds the particles of a single process.
    n_threads : int, optional
        Number of threads among which the tiles are distributed. By
        default, the value of the `SLICETRACK_NUM_THREADS` environment
        variable (or 1).
    name : str, optional
        Name of the container.

    """

    def __init__(
        self,
        domain: Optional[MeshDomain] = None,
        ref_particle: Optional[ReferenceParticle] = None,
        lost_particles: Optional[ParticleContainer] = None,
        comm: Optional[Any] = None,
        n_threads: Optional[int] = None,
        name: Optional[str] = 'beam'
    ) -> None:
        self.domain = None
        self.tiles = []
        self.comm = comm
        self.n_threads = n_threads
        self.name = name
        self._ref_particle = (
            ReferenceParticle() if ref_particle is None else ref_particle)
        self._lost_particles = lost_particles
        self._particle_shape = None
        self._next_id = 1
        self._thread_pool = None
        self._thread_pool_size = 0
        if domain is not None:
            self.init_domain(domain)

    def __del__(self):
        self.close_thread_pool()

    def init_domain(self, domain: MeshDomain) -> None:
        """ Set the spatial domain and create the (empty) particle tiles. """
        self.domain = domain
        self.tiles = [ParticleTile() for _ in range(domain.n_tiles)]

    def add_n_particles(
        self,
        x: np.ndarray,
        y: np.ndarray,
        t: np.ndarray,
        px: np.ndarray,
        py: np.ndarray,
        pt: np.ndarray,
        qm: float,
        bunch_charge: float
    ) -> None:
        """Add new particles to the container at fixed s.

        Parameters
        ----------
        x, y : ndarray
            Transverse positions (m).
        t : ndarray
            Time of flight multiplied by the speed of light (m).
        px, py, pt : ndarray
            Momenta normalized to the reference momentum.
        qm : float
            Charge over mass of the particles (q_e/eV).
        bunch_charge : float
            Total charge of the added particles (C).
        """
        if self.domain is None:
            raise RuntimeError(
                'Particles can only be added to the container after its '
                'spatial domain has been initialized.')
        if get_frame() is not Frame.FIXED_S:
            raise RuntimeError(
                'Particles can only be added while the active frame is '
                'FIXED_S.')
        arrays = [np.atleast_1d(np.asarray(a, dtype=float))
                  for a in (x, y, t, px, py, pt)]
        n_part = arrays[0].shape[0]
        if any(a.shape != (n_part,) for a in arrays):
            raise ValueError(
                'All phase-space arrays must have the same length.')
        if n_part == 0:
            return
        ids = np.arange(self._next_id, self._next_id + n_part, dtype=np.int64)
        self._next_id += n_part
        new_particles = ParticleTile(
            *arrays,
            qm=np.full(n_part, qm),
            w=np.full(n_part, bunch_charge / ct.e / n_part),
            id=ids,
            cpu=np.full(n_part, self.domain.rank, dtype=np.int64)
        )
        self._add_to_tiles(new_particles)

    def set_lost_particle_container(
            self, lost_particles: ParticleContainer) -> None:
        """ Register the container that will receive the lost particles. """
        self._lost_particles = lost_particles

    def get_lost_particle_container(self) -> Optional[ParticleContainer]:
        return self._lost_particles

    def set_ref_particle(self, ref_particle: ReferenceParticle) -> None:
        self._ref_particle = ref_particle

    def get_ref_particle(self) -> ReferenceParticle:
        return self._ref_particle

    @property
    def ref_particle(self) -> ReferenceParticle:
        return self._ref_particle

    def set_particle_shape(self, order: int) -> None:
        """Set the order of the particle shape used for deposition.

        This can only be called once, since the size of the guard regions
        of the charge grids depends on it.
        """
        if self._particle_shape is not None:
            raise RuntimeError(
                'The particle shape has already been set to {} and cannot '
                'be changed.'.format(self._particle_shape))
        get_n_guard(order)
        self._particle_shape = order

    def get_particle_shape(self) -> int:
        if self._particle_shape is None:
            raise RuntimeError('The particle shape has not been set.')
        return self._particle_shape

    def iterate_tiles(self, func: Callable[[ParticleTile], Any]) -> List:
        """Apply a function to all non-empty tiles.

        With more than one thread, the tiles are handed out one at a time to
        the first idle worker. The number of particles per tile can be very
        uneven, so no fixed assignment of tiles to workers is used.

        Returns
        -------
        A list with the value returned for each tile (in no particular
        order).
        """
        tiles = [tile for tile in self.tiles if tile.n_particles > 0]
        return self._map_dynamic(func, tiles)

    def redistribute(self) -> None:
        """ Move the particles to the tile in which they are located. """
        all_particles = ParticleTile()
        for tile in self.tiles:
            all_particles.append(tile)
        self.tiles = [ParticleTile() for _ in range(self.domain.n_tiles)]
        self._add_to_tiles(all_particles)

    def collect_lost_particles(self) -> int:
        """Transfer all particles marked as lost to the lost container.

        The particles keep all their attributes. Their id is flipped back
        to a positive value in the lost container.

        Returns
        -------
        The number of particles transferred by this process.
        """
        n_lost = sum(int(np.sum(tile.lost_mask())) for tile in self.tiles)
        if n_lost == 0:
            return 0
        lost_pc = self._lost_particles
        if lost_pc is None:
            raise RuntimeError(
                '{} particles have been marked as lost but no lost particle '
                'container has been registered.'.format(n_lost))
        if lost_pc.domain is None:
            lost_pc.init_domain(self.domain)
        lost_pc.set_ref_particle(self._ref_particle.copy())
        for tile in self.tiles:
            lost = tile.extract(tile.lost_mask())
            if lost.n_particles > 0:
                lost.id = np.abs(lost.id)
                lost_pc._add_to_tiles(lost)
        return n_lost

    def total_number_of_particles(
        self,
        valid_only: Optional[bool] = True,
        local: Optional[bool] = False
    ) -> int:
        """Get the number of particles in the container.

        Parameters
        ----------
        valid_only : bool
            Whether to skip the particles marked as lost.
        local : bool
            Whether to count only the particles of this process.
        """
        n_part = 0
        for tile in self.tiles:
            if valid_only:
                n_part += int(np.sum(tile.id >= 0))
            else:
                n_part += tile.n_particles
        if self.comm is not None and not local:
            n_part = self.comm.allreduce(n_part)
        return n_part

    def min_and_max_positions(self) -> Tuple[float, ...]:
        """Compute the min and max of the particle position in each dimension.

        Lost particles are not taken into account.

        Returns
        -------
        x_min, y_min, z_min, x_max, y_max, z_max
        """
        p_min = np.full(3, np.inf)
        p_max = np.full(3, -np.inf)
        for tile in self.tiles:
            valid = tile.id >= 0
            if np.any(valid):
                for i, pos in enumerate((tile.x, tile.y, tile.pos_3)):
                    p_min[i] = min(p_min[i], np.min(pos[valid]))
                    p_max[i] = max(p_max[i], np.max(pos[valid]))
        if self.comm is not None:
            p_min = np.min(self.comm.allgather(p_min), axis=0)
            p_max = np.max(self.comm.allgather(p_max), axis=0)
        return (*p_min, *p_max)

    def mean_and_std_positions(self) -> Tuple[float, ...]:
        """Compute the mean and std of the particle position in each dimension.

        Lost particles are not taken into account.

        Returns
        -------
        x_mean, x_std, y_mean, y_std, z_mean, z_std
        """
        # Number of particles, and sum of the positions and their squares.
        sums = np.zeros(7)
        for tile in self.tiles:
            valid = tile.id >= 0
            sums[0] += np.sum(valid)
            for i, pos in enumerate((tile.x, tile.y, tile.pos_3)):
                sums[1 + 2 * i] += np.sum(pos[valid])
                sums[2 + 2 * i] += np.sum(pos[valid]**2)
        if self.comm is not None:
            sums = self.comm.allreduce(sums)
        n_part = sums[0]
        if n_part == 0:
            return (np.nan,) * 6
        stats = []
        for i in range(3):
            mean = sums[1 + 2 * i] / n_part
            var = sums[2 + 2 * i] / n_part - mean**2
            stats += [mean, np.sqrt(max(var, 0.))]
        return tuple(stats)

    def allocate_charge_grid(
        self,
        level: Optional[int] = 0,
        ref_ratio: Optional[Sequence[Sequence[int]]] = None
    ) -> np.ndarray:
        """Allocate a zeroed charge grid for the given mesh level.

        The grid includes the guard nodes needed by the particle shape,
        which therefore has to be set beforehand.
        """
        n_guard = get_n_guard(self.get_particle_shape())
        n_cell = self.domain.n_cell_at_level(level, ref_ratio)
        return np.zeros(n_cell + 1 + 2 * n_guard)

    def deposit_charge(
        self,
        rho: Dict[int, np.ndarray],
        ref_ratio: Optional[Sequence[Sequence[int]]] = None
    ) -> None:
        """Deposit the charge of the particles onto a grid.

        This resets the values in rho to zero and then deposits the particle
        charge. Each tile deposits into its own local grid. The local grids
        are then summed into `rho`, and, in MPI-parallel contexts, summed
        over all processes.

        Parameters
        ----------
        rho : dict
            Charge grid (C) of each mesh level, as returned by
            `allocate_charge_grid`.
        ref_ratio : list
            Mesh refinement ratio between each level and the next one.
        """
        order = self.get_particle_shape()
        n_guard = get_n_guard(order)
        self.redistribute()
        non_empty = [i for i, tile in enumerate(self.tiles)
                     if tile.n_particles > 0]
        for lev, rho_lev in rho.items():
            n_cell = self.domain.n_cell_at_level(lev, ref_ratio)
            if rho_lev.shape != tuple(n_cell + 1 + 2 * n_guard):
                raise ValueError(
                    'Charge grid of level {} has shape {}, expected '
                    '{}.'.format(lev, rho_lev.shape,
                                 tuple(n_cell + 1 + 2 * n_guard)))
            rho_lev[:] = 0.
            d = self.domain.cell_size(lev, ref_ratio)
            ratio_z = n_cell[2] // self.domain.n_cell[2]
            tile_cell_edges = self.domain.tile_cell_edges * ratio_z

            def deposit_tile(i_tile):
                tile = self.tiles[i_tile]
                k_0 = tile_cell_edges[i_tile]
                nz_tile = tile_cell_edges[i_tile + 1] - k_0
                lo = self.domain.lo.copy()
                lo[2] += k_0 * d[2]
                tile_n_cell = np.array([n_cell[0], n_cell[1], nz_tile])
                rho_tile = np.zeros(tile_n_cell + 1 + 2 * n_guard)
                deposit_3d_distribution(
                    tile.x, tile.y, tile.pos_3, tile.w * ct.e, tile.id,
                    lo, d, tile_n_cell, n_guard, rho_tile, order,
                    box=(self.domain.lo, self.domain.hi))
                return k_0, rho_tile

            local_grids = self._map_dynamic(deposit_tile, non_empty)

            # Sum the overlapping regions of the tile grids.
            for k_0, rho_tile in local_grids:
                rho_lev[:, :, k_0:k_0 + rho_tile.shape[2]] += rho_tile
            if self.comm is not None:
                rho_lev[:] = self.comm.allreduce(rho_lev)

    def position_names(self) -> List[str]:
        """ Get the name of each position attribute in the active frame. """
        return get_position_names()

    def momentum_names(self) -> List[str]:
        """ Get the name of each momentum attribute in the active frame. """
        return get_momentum_names()

    def get_arrays(self) -> Dict[str, np.ndarray]:
        """Get all particle attributes of this process, labeled by name.

        The returned arrays are copies of the tile data.
        """
        names = (self.position_names() + self.momentum_names() +
                 INT_ATTRIBUTES)
        all_particles = ParticleTile()
        for tile in self.tiles:
            all_particles.append(tile)
        return {
            name: getattr(all_particles, attr)
            for name, attr in zip(names, REAL_ATTRIBUTES + INT_ATTRIBUTES)
        }

    def copy(self) -> ParticleContainer:
        """Return a copy of the container.

        The copy contains copies of the particles and of the reference
        particle, but no lost particle container.
        """
        pc_copy = ParticleContainer(
            ref_particle=self._ref_particle.copy(),
            comm=self.comm,
            n_threads=self.n_threads,
            name=self.name
        )
        pc_copy.domain = self.domain
        pc_copy.tiles = [tile.copy() for tile in self.tiles]
        pc_copy._particle_shape = self._particle_shape
        pc_copy._next_id = self._next_id
        return pc_copy

    def close_thread_pool(self) -> None:
        """Stop the worker threads of the container, if any.

        A new pool is started the next time the tiles are iterated over.
        """
        pool = getattr(self, '_thread_pool', None)
        if pool is not None:
            pool.terminate()
            self._thread_pool = None
            self._thread_pool_size = 0

    def _map_dynamic(self, func, items):
        """ Apply `func` to each item, handing them out to idle threads. """
        n_threads = self.n_threads
        if n_threads is None:
            n_threads = numba_config.num_threads
        if n_threads > 1 and len(items) > 1:
            pool = self._get_thread_pool(n_threads)
            return list(pool.imap_unordered(func, items, chunksize=1))
        return [func(item) for item in items]

    def _get_thread_pool(self, n_threads):
        """ Get the pool of worker threads, starting it if needed. """
        if self._thread_pool_size != n_threads:
            self.close_thread_pool()
            self._thread_pool = ThreadPool(n_threads)
            self._thread_pool_size = n_threads
        return self._thread_pool

    def _add_to_tiles(self, particles: ParticleTile) -> None:
        """ Add particles to the tiles in which they are located. """
        i_tile = self.domain.tile_index(particles.pos_3)
        for i, tile in enumerate(self.tiles):
            in_tile = i_tile == i
            if np.any(in_tile):
                tile.append(particles.select(in_tile))
