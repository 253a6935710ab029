"""
Linear transfer map of a combined-function bend, i.e., an ideal sector bend
with an upright quadrupole focusing component.
"""
import math

from slicetrack.utilities.numba import njit_serial
from .exact_sbend import sbend_reference_map


@njit_serial()
def push_cf_bend(x, y, t, px, py, pt, id, ds, rc, k, betgam2, beta):
    """
    Push particles through a segment of a combined-function bend.

    The horizontal and longitudinal planes evolve under the combined
    focusing of the bend and the quadrupole, ``gx = k + 1/rc**2``, and the
    vertical plane under the quadrupole alone, ``gy = -k``. Depending on the
    sign of each strength, the oscillatory or the hyperbolic solution is
    used. A strength of exactly zero uses the limit of both solutions.

    Parameters
    ----------
    x, y, t, px, py, pt : ndarray
        Phase space coordinates of the particles at fixed s.
    id : ndarray
        Particle identifiers.
    ds : float
        Length of the segment (m).
    rc : float
        Bending radius (m).
    k : float
        Quadrupole strength (m^-2). ``k > 0`` is horizontally focusing.
    betgam2 : float
        Squared beta*gamma of the reference particle.
    beta : float
        Relativistic beta of the reference particle.
    """
    # Horizontal and longitudinal matrix elements.
    gx = k + rc**(-2)
    omega_x = math.sqrt(abs(gx))
    if gx > 0.:
        sinx = math.sin(omega_x * ds)
        cosx = math.cos(omega_x * ds)
        r11 = cosx
        r12 = sinx / omega_x
        r21 = -omega_x * sinx
        r16 = -(1. - cosx) / (gx * beta * rc)
        r26 = -sinx / (omega_x * beta * rc)
        r56 = ds / betgam2 + (sinx - omega_x * ds) / (
            gx * omega_x * beta**2 * rc**2)
    elif gx < 0.:
        sinhx = math.sinh(omega_x * ds)
        coshx = math.cosh(omega_x * ds)
        r11 = coshx
        r12 = sinhx / omega_x
        r21 = omega_x * sinhx
        r16 = -(1. - coshx) / (gx * beta * rc)
        r26 = -sinhx / (omega_x * beta * rc)
        r56 = ds / betgam2 + (sinhx - omega_x * ds) / (
            gx * omega_x * beta**2 * rc**2)
    else:
        r11 = 1.
        r12 = ds
        r21 = 0.
        r16 = -ds**2 / (2. * beta * rc)
        r26 = -ds / (beta * rc)
        r56 = ds / betgam2 - ds**3 / (6. * beta**2 * rc**2)
    # Symplecticity fixes the remaining elements of the t row.
    r51 = -r26
    r52 = -r16

    # Vertical matrix elements.
    gy = -k
    omega_y = math.sqrt(abs(gy))
    if gy > 0.:
        siny = math.sin(omega_y * ds)
        cosy = math.cos(omega_y * ds)
        r33 = cosy
        r34 = siny / omega_y
        r43 = -omega_y * siny
    elif gy < 0.:
        sinhy = math.sinh(omega_y * ds)
        coshy = math.cosh(omega_y * ds)
        r33 = coshy
        r34 = sinhy / omega_y
        r43 = omega_y * sinhy
    else:
        r33 = 1.
        r34 = ds
        r43 = 0.

    for i in range(x.shape[0]):
        if id[i] < 0:
            continue
        x_i = x[i]
        px_i = px[i]
        y_i = y[i]
        py_i = py[i]
        pt_i = pt[i]

        x[i] = r11 * x_i + r12 * px_i + r16 * pt_i
        px[i] = r21 * x_i + r11 * px_i + r26 * pt_i
        t[i] = r51 * x_i + r52 * px_i + t[i] + r56 * pt_i

        y[i] = r33 * y_i + r34 * py_i
        py[i] = r43 * y_i + r33 * py_i


def cf_bend_reference_map(refpart, ds, rc):
    """ Advance the reference particle along an arc of radius `rc`. """
    sbend_reference_map(refpart, ds, ds / rc, rc)
