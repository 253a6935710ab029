"""Thin transverse kick from the reference orbit."""

from slicetrack.utilities.numba import njit_serial


@njit_serial()
def push_kicker(x, y, t, px, py, pt, id, dpx, dpy):
    """
    Add a constant displacement to the transverse momentum of the particles.

    Parameters
    ----------
    dpx, dpy : float
        Horizontal and vertical momentum kick, normalized to the reference
        momentum.
    """
    for i in range(x.shape[0]):
        if id[i] < 0:
            continue
        px[i] = px[i] + dpx
        py[i] = py[i] + dpy
