"""
Exact nonlinear transfer map of an ideal sector bend and of a drift.

The bend map corresponds to the one described in D. L. Bruhwiler et al, in
Proc. of EPAC 98, pp. 1171-1173 (1998). In the ultrarelativistic limit, it is
equivalent to the map described in E. Forest et al, Part. Accel. 45,
pp. 65-94 (1994).
"""
import math

import numpy as np

from slicetrack.utilities.numba import njit_serial


@njit_serial()
def push_exact_sbend(x, y, t, px, py, pt, id, phi, rc, beta):
    """
    Push particles through a segment of an ideal sector bend with hard
    edges, where the pole faces are normal to the entry and exit velocity of
    the reference particle.

    Particles for which the longitudinal momentum becomes imaginary are
    marked as lost and not pushed.

    Parameters
    ----------
    x, y, t, px, py, pt : ndarray
        Phase space coordinates of the particles at fixed s.
    id : ndarray
        Particle identifiers.
    phi : float
        Bend angle of the segment (rad).
    rc : float
        Bending radius of the reference particle (m).
    beta : float
        Relativistic beta of the reference particle.
    """
    sin_phi = math.sin(phi)
    cos_phi = math.cos(phi)
    for i in range(x.shape[0]):
        if id[i] < 0:
            continue
        x_i = x[i]
        px_i = px[i]
        py_i = py[i]
        pt_i = pt[i]

        # Transverse momentum magnitude and initial pz.
        pperp2 = pt_i**2 - 2. / beta * pt_i - py_i**2 + 1.
        pzi2 = pperp2 - px_i**2
        if pzi2 <= 0.:
            id[i] = -id[i]
            continue
        pperp = math.sqrt(pperp2)
        pzi = math.sqrt(pzi2)
        rho = rc + x_i

        # Rotated horizontal momentum and final pz.
        pxout = px_i * cos_phi + (pzi - rho / rc) * sin_phi
        pzf2 = pperp2 - pxout**2
        if pzf2 <= 0.:
            id[i] = -id[i]
            continue
        pzf = math.sqrt(pzf2)

        # Angle of momentum rotation.
        theta = phi + math.asin(px_i / pperp) - math.asin(pxout / pperp)

        # Update positions and momenta.
        x[i] = -rc + rho * cos_phi + rc * (pzf + px_i * sin_phi
                                           - pzi * cos_phi)
        y[i] = y[i] + theta * rc * py_i
        t[i] = t[i] - theta * rc * (pt_i - 1. / beta) - phi * rc / beta
        px[i] = pxout


@njit_serial()
def push_exact_drift(x, y, t, px, py, pt, id, ds, beta):
    """
    Push particles through a field-free segment of length `ds` using the
    exact (non-paraxial) map.
    """
    for i in range(x.shape[0]):
        if id[i] < 0:
            continue
        pt_i = pt[i]
        pz2 = pt_i**2 - 2. / beta * pt_i - px[i]**2 - py[i]**2 + 1.
        if pz2 <= 0.:
            id[i] = -id[i]
            continue
        pz = math.sqrt(pz2)
        x[i] = x[i] + ds * px[i] / pz
        y[i] = y[i] + ds * py[i] / pz
        t[i] = t[i] + ds * ((1. / beta - pt_i) / pz - 1. / beta)


def sbend_reference_map(refpart, ds, theta, rc):
    """
    Rigidly rotate the reference trajectory by `theta` along an arc of
    radius `rc` and length `ds`.
    """
    x, y, z, t = refpart.x, refpart.y, refpart.z, refpart.t
    px, py, pz, pt = refpart.px, refpart.py, refpart.pz, refpart.pt

    b = refpart.beta_gamma() / rc
    sin_theta = np.sin(theta)
    cos_theta = np.cos(theta)

    # Advance momentum (bend).
    refpart.px = px * cos_theta - pz * sin_theta
    refpart.py = py
    refpart.pz = pz * cos_theta + px * sin_theta
    refpart.pt = pt

    # Advance position.
    refpart.x = x + (refpart.pz - pz) / b
    refpart.y = y + (theta / b) * py
    refpart.z = z - (refpart.px - px) / b
    refpart.t = t - (theta / b) * pt

    refpart.s += ds


def drift_reference_map(refpart, ds):
    """ Advance the reference particle along a straight line. """
    step = ds / refpart.beta_gamma()
    refpart.x += step * refpart.px
    refpart.y += step * refpart.py
    refpart.z += step * refpart.pz
    refpart.t -= step * refpart.pt
    refpart.s += ds
