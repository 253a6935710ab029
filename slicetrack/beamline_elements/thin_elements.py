""" Contains the classes of all thin elements, applied in a single step. """
from typing import Optional

import numpy as np

from slicetrack.particles.reference_particle import ReferenceParticle
from slicetrack.physics_models.beam_optics.thin_dipole import push_thin_dipole
from slicetrack.physics_models.beam_optics.kicker import push_kicker
from slicetrack.physics_models.beam_optics.aperture import (
    apply_aperture, RECTANGULAR, ELLIPTICAL)
from slicetrack.physics_models.beam_optics.short_rf import (
    push_short_rf, rf_wavenumber, short_rf_reference_map)
from slicetrack.physics_models.beam_optics.dip_edge import (
    push_dip_edge, dip_edge_matrix_elements)
from .base import BeamlineElement, ElementKind


APERTURE_SHAPES = {'rectangular': RECTANGULAR, 'elliptical': ELLIPTICAL}
KICKER_UNITS = ['dimensionless', 'T-m']


class ThinDipole(BeamlineElement):
    """
    Defines a thin dipole kick including chromatic effects.

    Parameters
    ----------
    theta : float
        Bending angle in degrees.
    rc : float
        Radius of curvature in meters.

    """

    _kernel = staticmethod(push_thin_dipole)

    def __init__(
        self,
        theta: float,
        rc: float
    ) -> None:
        super().__init__(ElementKind.THIN)
        self.theta = np.deg2rad(theta)
        self.rc = rc
        self.element_name = 'thin dipole'

    def _get_kernel_parameters(self, refpart):
        return (self.theta, self.rc, refpart.beta())

    def _print_element_properties(self):
        print('Bending angle = {:1.4f} rad ({:1.4f} deg)'.format(
            self.theta, np.rad2deg(self.theta)))
        print('Bending radius = {:1.4f} m'.format(self.rc))


class Kicker(BeamlineElement):
    """
    Defines a thin transverse kicker.

    Parameters
    ----------
    xkick, ykick : float
        Horizontal and vertical kick.
    unit : str
        Units of the kicks. With ``'dimensionless'`` (default) the kicks are
        given in units of the reference momentum. With ``'T-m'`` they are
        integrated fields in T*m, which are normalized by the magnetic
        rigidity of the reference particle.

    """

    _kernel = staticmethod(push_kicker)

    def __init__(
        self,
        xkick: float,
        ykick: float,
        unit: Optional[str] = 'dimensionless'
    ) -> None:
        if unit not in KICKER_UNITS:
            raise ValueError(
                "Unknown kicker unit '{}'. Possible values are {}.".format(
                    unit, KICKER_UNITS))
        super().__init__(ElementKind.THIN)
        self.xkick = xkick
        self.ykick = ykick
        self.unit = unit
        self.element_name = 'kicker'

    def _get_kernel_parameters(self, refpart):
        dpx = self.xkick
        dpy = self.ykick
        if self.unit == 'T-m':
            dpx /= refpart.rigidity_Tm()
            dpy /= refpart.rigidity_Tm()
        return (dpx, dpy)

    def _print_element_properties(self):
        unit = '' if self.unit == 'dimensionless' else ' ' + self.unit
        print('Kick = ({:1.4e}, {:1.4e}){}'.format(
            self.xkick, self.ykick, unit))


class Aperture(BeamlineElement):
    """
    Defines a transverse aperture. Particles outside of it are marked as
    lost and later moved to the lost particle container.

    Parameters
    ----------
    xmax, ymax : float
        Maximum horizontal and vertical coordinate in meters.
    shape : str
        Either ``'rectangular'`` (default) or ``'elliptical'``.

    """

    _kernel = staticmethod(apply_aperture)

    def __init__(
        self,
        xmax: float,
        ymax: float,
        shape: Optional[str] = 'rectangular'
    ) -> None:
        if shape not in APERTURE_SHAPES:
            raise ValueError(
                "Unknown aperture shape '{}'. Possible values are {}.".format(
                    shape, list(APERTURE_SHAPES)))
        if xmax <= 0. or ymax <= 0.:
            raise ValueError('The aperture size must be positive.')
        super().__init__(ElementKind.THIN)
        self.xmax = xmax
        self.ymax = ymax
        self.shape = shape
        self.element_name = 'aperture'

    def _get_kernel_parameters(self, refpart):
        return (self.xmax, self.ymax, APERTURE_SHAPES[self.shape])

    def _print_element_properties(self):
        print('Shape = {}'.format(self.shape))
        print('Half size = ({:1.4e}, {:1.4e}) m'.format(self.xmax, self.ymax))


class ShortRF(BeamlineElement):
    """
    Defines a short RF cavity gap.

    The reference particle defines the phase of the cavity and is
    accelerated by ``V*cos(phase)``.

    Parameters
    ----------
    V : float
        Normalized voltage, i.e., maximum energy gain divided by m*c^2.
    freq : float
        RF frequency in Hz.
    phase : float
        Synchronous phase in degrees. A phase of -90 degrees corresponds to
        on-crest acceleration.

    """

    _kernel = staticmethod(push_short_rf)

    def __init__(
        self,
        V: float,
        freq: float,
        phase: float
    ) -> None:
        super().__init__(ElementKind.THIN)
        self.V = V
        self.freq = freq
        self.phase = np.deg2rad(phase)
        self.element_name = 'short RF gap'

    def push_reference(self, refpart: ReferenceParticle) -> None:
        short_rf_reference_map(refpart, self.V, self.phase)

    def _get_kernel_parameters(self, refpart):
        # The reference particle has already been accelerated.
        ptf = refpart.pt
        pti = ptf + self.V * np.cos(self.phase)
        bgf = np.sqrt(ptf**2 - 1.)
        bgi = np.sqrt(pti**2 - 1.)
        k = rf_wavenumber(self.freq)
        return (self.V, k, self.phase, bgi, bgf)

    def _print_element_properties(self):
        print('Normalized voltage = {:1.4e}'.format(self.V))
        print('Frequency = {:1.4e} Hz'.format(self.freq))
        print('Phase = {:1.4f} deg'.format(np.rad2deg(self.phase)))


class DipEdge(BeamlineElement):
    """
    Defines the linear edge focusing of a dipole.

    Parameters
    ----------
    psi : float
        Pole face angle in rad.
    rc : float
        Radius of curvature in meters.
    g : float
        Gap parameter in meters.
    K2 : float
        Fringe field integral (dimensionless).

    """

    _kernel = staticmethod(push_dip_edge)

    def __init__(
        self,
        psi: float,
        rc: float,
        g: float,
        K2: float
    ) -> None:
        super().__init__(ElementKind.THIN)
        self.psi = psi
        self.rc = rc
        self.g = g
        self.K2 = K2
        self.r21, self.r43 = dip_edge_matrix_elements(psi, rc, g, K2)
        self.element_name = 'dipole edge'

    def _get_kernel_parameters(self, refpart):
        return (self.r21, self.r43)

    def _print_element_properties(self):
        print('Pole face angle = {:1.4f} rad'.format(self.psi))
        print('Gap = {:1.4e} m, K2 = {:1.4f}'.format(self.g, self.K2))
