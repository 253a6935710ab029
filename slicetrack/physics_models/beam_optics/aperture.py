"""Transverse aperture boundary."""

from slicetrack.utilities.numba import njit_serial


RECTANGULAR = 0
ELLIPTICAL = 1


@njit_serial()
def apply_aperture(x, y, t, px, py, pt, id, xmax, ymax, shape):
    """
    Mark the particles outside of the aperture as lost by flipping the sign
    of their id. The momenta are not modified.

    Parameters
    ----------
    xmax, ymax : float
        Maximum horizontal and vertical coordinate (m).
    shape : int
        Either `RECTANGULAR` (0) or `ELLIPTICAL` (1).
    """
    for i in range(x.shape[0]):
        if id[i] < 0:
            continue
        u = x[i] / xmax
        v = y[i] / ymax
        if shape == RECTANGULAR:
            if u**2 > 1. or v**2 > 1.:
                id[i] = -id[i]
        else:
            if u**2 + v**2 > 1.:
                id[i] = -id[i]
