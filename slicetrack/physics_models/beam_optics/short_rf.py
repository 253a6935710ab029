"""
Transfer map of a short RF cavity gap.

The energy kick depends on the scaling of the momenta, which is different
before and after the gap. The kick is therefore applied in "dynamic" units
(normalized to m*c) and the momenta are converted from and back to the
"static" units (normalized to the reference momentum) using the reference
beta*gamma before and after the gap, respectively.
"""
import math

import numpy as np
import scipy.constants as ct

from slicetrack.utilities.numba import njit_serial


@njit_serial()
def push_short_rf(x, y, t, px, py, pt, id, v, k, phi, bgi, bgf):
    """
    Apply the RF energy kick to the particles.

    Parameters
    ----------
    x, y, t, px, py, pt : ndarray
        Phase space coordinates of the particles at fixed s.
    id : ndarray
        Particle identifiers.
    v : float
        Normalized RF voltage, i.e., maximum energy gain / (m*c^2).
    k : float
        RF wavenumber (1/m).
    phi : float
        Synchronous phase of the reference particle (rad).
    bgi, bgf : float
        Beta*gamma of the reference particle before and after the gap.
    """
    for i in range(x.shape[0]):
        if id[i] < 0:
            continue
        # Static to dynamic units.
        px_i = px[i] * bgi
        py_i = py[i] * bgi
        pt_i = pt[i] * bgi

        # Energy kick.
        pt_i = pt_i - v * math.cos(k * t[i] + phi) + v * math.cos(phi)

        # Dynamic to static units.
        px[i] = px_i / bgf
        py[i] = py_i / bgf
        pt[i] = pt_i / bgf


def rf_wavenumber(freq):
    """ Wavenumber (1/m) of an RF field of frequency `freq` (Hz). """
    return 2. * np.pi / ct.c * freq


def short_rf_reference_map(refpart, v, phi):
    """
    Apply the energy kick at the synchronous phase to the reference
    particle, which defines the zero of the RF phase.
    """
    bgi = refpart.beta_gamma()
    ptf = refpart.pt - v * np.cos(phi)
    if not ptf < -1.:
        raise ValueError(
            'The RF kick leaves the reference particle with pt = {}, '
            'below its rest energy.'.format(ptf))
    refpart.pt = ptf
    bgf = refpart.beta_gamma()
    refpart.px = refpart.px * bgf / bgi
    refpart.py = refpart.py * bgf / bgi
    refpart.pz = refpart.pz * bgf / bgi
