"""
Linear focusing by the fringe field at the entry or exit of a dipole.

The map includes the first-order effect of a nonzero gap, g/rc, following
K. L. Brown, SLAC Report No. 75 (1982), and K. Hwang and S. Y. Lee,
PRAB 18, 122401 (2015).
"""
import numpy as np

from slicetrack.utilities.numba import njit_serial


def dip_edge_matrix_elements(psi, rc, g, k2):
    """
    Calculate the horizontal (R21) and vertical (R43) edge focusing matrix
    elements.

    Parameters
    ----------
    psi : float
        Pole face angle (rad).
    rc : float
        Radius of curvature (m).
    g : float
        Gap parameter (m).
    k2 : float
        Fringe field integral.
    """
    # Zero gap.
    r21 = np.tan(psi) / rc
    r43 = -r21
    # First-order effect of nonzero gap.
    vf = (1. + np.sin(psi)**2) / np.cos(psi)**3
    vf *= g * k2 / rc**2
    return r21, r43 + vf


@njit_serial()
def push_dip_edge(x, y, t, px, py, pt, id, r21, r43):
    """ Apply the linear edge focusing kick to the particles. """
    for i in range(x.shape[0]):
        if id[i] < 0:
            continue
        px[i] = px[i] + r21 * x[i]
        py[i] = py[i] + r43 * y[i]
