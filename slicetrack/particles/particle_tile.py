"""
This module contains the class storing the particles of a single tile.
"""
from __future__ import annotations
from typing import Optional

import numpy as np

from .frame import Frame, get_frame


REAL_ATTRIBUTES = ['x', 'y', 'pos_3', 'px', 'py', 'mom_3', 'qm', 'w']
INT_ATTRIBUTES = ['id', 'cpu']


class ParticleTile():
    """Structure-of-arrays storage of the macroparticles of one tile.

    The third position and momentum components are stored in the
    frame-agnostic arrays `pos_3` and `mom_3`. They can be accessed by name
    as `t` and `pt` at fixed s, or as `z` and `pz` at fixed t.

    Parameters
    ----------
    x, y, pos_3 : ndarray
        Position of the macroparticles (m).
    px, py, mom_3 : ndarray
        Momentum of the macroparticles normalized to the reference momentum.
    qm : ndarray
        Charge-to-mass ratio (q_e/eV).
    w : ndarray
        Weight, i.e., number of real particles represented by each
        macroparticle.
    id : ndarray
        Particle identifiers. A negative value marks a lost particle.
    cpu : ndarray
        Rank on which each particle was created.

    """

    def __init__(
        self,
        x: Optional[np.ndarray] = None,
        y: Optional[np.ndarray] = None,
        pos_3: Optional[np.ndarray] = None,
        px: Optional[np.ndarray] = None,
        py: Optional[np.ndarray] = None,
        mom_3: Optional[np.ndarray] = None,
        qm: Optional[np.ndarray] = None,
        w: Optional[np.ndarray] = None,
        id: Optional[np.ndarray] = None,
        cpu: Optional[np.ndarray] = None
    ) -> None:
        values = locals()
        for name in REAL_ATTRIBUTES:
            arr = values[name]
            arr = np.zeros(0) if arr is None else np.asarray(arr, float)
            setattr(self, name, np.ascontiguousarray(arr))
        for name in INT_ATTRIBUTES:
            arr = values[name]
            arr = (np.zeros(0, np.int64) if arr is None
                   else np.asarray(arr, np.int64))
            setattr(self, name, np.ascontiguousarray(arr))

    @property
    def n_particles(self) -> int:
        return self.x.shape[0]

    @property
    def t(self) -> np.ndarray:
        _check_frame(Frame.FIXED_S, 't')
        return self.pos_3

    @property
    def pt(self) -> np.ndarray:
        _check_frame(Frame.FIXED_S, 'pt')
        return self.mom_3

    @property
    def z(self) -> np.ndarray:
        _check_frame(Frame.FIXED_T, 'z')
        return self.pos_3

    @property
    def pz(self) -> np.ndarray:
        _check_frame(Frame.FIXED_T, 'pz')
        return self.mom_3

    def lost_mask(self) -> np.ndarray:
        """ Get a boolean mask of the particles marked as lost. """
        return self.id < 0

    def append(self, other: ParticleTile) -> None:
        """ Append the particles of another tile. """
        for name in REAL_ATTRIBUTES + INT_ATTRIBUTES:
            setattr(self, name, np.concatenate(
                (getattr(self, name), getattr(other, name))))

    def select(self, mask: np.ndarray) -> ParticleTile:
        """ Return a new tile with a copy of the particles in `mask`. """
        return ParticleTile(
            **{name: getattr(self, name)[mask]
               for name in REAL_ATTRIBUTES + INT_ATTRIBUTES})

    def extract(self, mask: np.ndarray) -> ParticleTile:
        """Remove the particles selected by `mask` from this tile.

        Returns
        -------
        A new ParticleTile containing the removed particles.
        """
        removed = self.select(mask)
        keep = ~mask
        for name in REAL_ATTRIBUTES + INT_ATTRIBUTES:
            arr = getattr(self, name)[keep]
            setattr(self, name, np.ascontiguousarray(arr))
        return removed

    def copy(self) -> ParticleTile:
        """ Return a deep copy of the tile. """
        return ParticleTile(
            **{name: getattr(self, name).copy()
               for name in REAL_ATTRIBUTES + INT_ATTRIBUTES})


def _check_frame(frame, name):
    if get_frame() is not frame:
        raise RuntimeError(
            "Attribute '{}' is only defined in the {} frame, but the active "
            "frame is {}.".format(name, frame.name, get_frame().name))
