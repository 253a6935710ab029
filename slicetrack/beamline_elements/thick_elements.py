""" Contains the classes of all thick elements, applied in slices. """
from typing import Optional

import numpy as np

from slicetrack.particles.reference_particle import ReferenceParticle
from slicetrack.physics_models.beam_optics.exact_sbend import (
    push_exact_sbend, push_exact_drift, sbend_reference_map,
    drift_reference_map)
from slicetrack.physics_models.beam_optics.cf_bend import (
    push_cf_bend, cf_bend_reference_map)
from .base import BeamlineElement, ElementKind


class Drift(BeamlineElement):
    """
    Defines a field-free drift space tracked with the exact (non-paraxial)
    map.

    Parameters
    ----------
    ds : float
        Length of the drift space in meters.
    nslice : int
        Number of slices.

    """

    _kernel = staticmethod(push_exact_drift)

    def __init__(
        self,
        ds: float,
        nslice: Optional[int] = 1
    ) -> None:
        super().__init__(ElementKind.THICK, ds, nslice)
        self.element_name = 'drift'

    def push_reference(self, refpart: ReferenceParticle) -> None:
        drift_reference_map(refpart, self.slice_length)

    def _get_kernel_parameters(self, refpart):
        return (self.slice_length, refpart.beta())

    def _print_element_properties(self):
        print('Length = {:1.4f} m'.format(self.length))


class ExactSbend(BeamlineElement):
    """
    Defines an ideal sector bend with hard edges, tracked with the exact
    nonlinear map.

    The bending radius is taken from the magnetic field, if given, or
    otherwise from the length and the bending angle. A bend with neither
    field nor angle is tracked as an exact drift.

    Parameters
    ----------
    ds : float
        Arc length of the bend in meters.
    phi : float
        Bending angle in degrees.
    B : float, optional
        Magnetic field in Tesla. If ``0`` (default), the field is
        calculated from the reference particle so that it is bent along an
        arc of length `ds` and angle `phi`.
    nslice : int
        Number of slices.

    """

    def __init__(
        self,
        ds: float,
        phi: float,
        B: Optional[float] = 0.,
        nslice: Optional[int] = 1
    ) -> None:
        super().__init__(ElementKind.THICK, ds, nslice)
        self.phi = np.deg2rad(phi)
        self.B = B
        self.element_name = 'exact sector bend'

    @property
    def _kernel(self):
        if self.is_straight:
            return push_exact_drift
        return push_exact_sbend

    @property
    def is_straight(self) -> bool:
        return self.B == 0. and self.phi == 0.

    def get_radius(self, refpart: ReferenceParticle) -> float:
        """ Bending radius (m) of the reference particle. """
        if self.B != 0.:
            return refpart.rigidity_Tm() / self.B
        return self.length / self.phi

    def push_reference(self, refpart: ReferenceParticle) -> None:
        ds = self.slice_length
        if self.is_straight:
            drift_reference_map(refpart, ds)
            return
        sbend_reference_map(
            refpart, ds, self.phi / self.nslice, self.get_radius(refpart))

    def _get_kernel_parameters(self, refpart):
        if self.is_straight:
            return (self.slice_length, refpart.beta())
        rc = self.get_radius(refpart)
        return (self.phi / self.nslice, rc, refpart.beta())

    def _print_element_properties(self):
        print('Bending angle = {:1.4f} rad ({:1.4f} deg)'.format(
            self.phi, np.rad2deg(self.phi)))
        if self.B != 0.:
            print('Dipole field = {:1.4f} T'.format(self.B))
        print('Length = {:1.4f} m'.format(self.length))


class CFbend(BeamlineElement):
    """
    Defines a combined-function bend, i.e., an ideal sector bend with an
    upright quadrupole component, tracked with a linear transfer map.

    Parameters
    ----------
    ds : float
        Arc length of the bend in meters.
    rc : float
        Bending radius in meters.
    k : float
        Quadrupole strength in units of 1/m**2. A positive value focuses
        horizontally.
    nslice : int
        Number of slices.

    """

    _kernel = staticmethod(push_cf_bend)

    def __init__(
        self,
        ds: float,
        rc: float,
        k: float,
        nslice: Optional[int] = 1
    ) -> None:
        super().__init__(ElementKind.THICK, ds, nslice)
        self.rc = rc
        self.k = k
        self.element_name = 'combined-function bend'

    def push_reference(self, refpart: ReferenceParticle) -> None:
        cf_bend_reference_map(refpart, self.slice_length, self.rc)

    def _get_kernel_parameters(self, refpart):
        betgam2 = refpart.pt**2 - 1.
        return (self.slice_length, self.rc, self.k, betgam2, refpart.beta())

    def _print_element_properties(self):
        print('Bending radius = {:1.4f} m'.format(self.rc))
        print('Quadrupole strength = {:1.4f} 1/m^2'.format(self.k))
        print('Length = {:1.4f} m'.format(self.length))
