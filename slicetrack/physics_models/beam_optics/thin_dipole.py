"""
Thin-lens dipole kick with chromatic effects.

The model is the one described in Section 3.1 of G. Ripken, F. Schmidt,
"A Symplectic Six-Dimensional Thin-Lens Formalism for Tracking",
CERN/SL/95-12 (AP), 1995, which is also used for thin dipoles in MAD-X.
"""
import math

from slicetrack.utilities.numba import njit_serial


@njit_serial()
def push_thin_dipole(x, y, t, px, py, pt, id, theta, rc, beta):
    """
    Apply the thin dipole kick to the particles.

    Parameters
    ----------
    x, y, t, px, py, pt : ndarray
        Phase space coordinates of the particles at fixed s.
    id : ndarray
        Particle identifiers.
    theta : float
        Total bending angle (rad).
    rc : float
        Curvature radius (m).
    beta : float
        Relativistic beta of the reference particle.
    """
    # Equivalent arc length and curvature.
    ds = theta * rc
    kx = 1. / rc
    for i in range(x.shape[0]):
        if id[i] < 0:
            continue
        pt_i = pt[i]
        arg = 1. - 2. * pt_i / beta + pt_i**2
        if arg <= 0.:
            id[i] = -id[i]
            continue
        # dp/p expressed in terms of pt (labeled f by Ripken and Schmidt).
        f = -1. + math.sqrt(arg)
        fprime = (1. - beta * pt_i) / (beta * (1. + f))

        x_i = x[i]
        px[i] = px[i] - kx**2 * ds * x_i + kx * ds * f  # eq. (3.2b)
        t[i] = t[i] + kx * x_i * ds * fprime  # eq. (3.2e)
