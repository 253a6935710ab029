"""
This module contains the methods for depositing the charge of a particle
distribution on a regular 3D Cartesian grid.

The grid is node centered: along each dimension the node `i` is located at
`lo + (i - n_guard) * d`, where `n_guard` is the number of guard nodes added
at each side of the `n_cell + 1` nodes covering the domain.
"""

import math

import numpy as np

from slicetrack.utilities.numba import njit_serial


# Supported particle shapes, by order.
SHAPE_NAMES = {1: 'linear', 2: 'quadratic', 3: 'cubic'}


def get_n_guard(order):
    """ Number of guard nodes needed at each side of the grid. """
    check_particle_shape(order)
    return (order + 2) // 2


def check_particle_shape(order):
    if order not in SHAPE_NAMES:
        err_string = ("Particle shape order '{}' not recognized. ".format(
            order) + "Possible values are 1 (linear), 2 (quadratic) or 3 "
            "(cubic).")
        raise ValueError(err_string)


def deposit_3d_distribution(x, y, z, q, id, lo, d, n_cell, n_guard,
                            deposition_array, order=1, box=None):
    """
    Deposit a quantity carried by each particle (e.g., its charge) into a
    3D grid.

    Parameters:
    -----------
    x, y, z : arrays
        Arrays containing the position of the particles.

    q : array
        Quantity carried by each particle which will be deposited into the
        grid.

    id : array
        Particle identifiers. Particles with a negative id are lost and are
        not deposited.

    lo : array
        Position of the lower corner of the domain.

    d : array
        Grid spacing along each dimension.

    n_cell : array
        Number of grid cells (excluding guard nodes) along each dimension.

    n_guard : int
        Number of guard nodes at each side of the grid.

    deposition_array : array
        The 3D array of size (n_cell + 1 + 2 * n_guard) along each dimension
        into which the quantity will be deposited (will be modified within
        this function).

    order : int
        Order of the particle shape. Possible values are 1 (linear),
        2 (quadratic) and 3 (cubic).

    box : tuple of arrays, optional
        Lower and upper corner of the region whose particles are deposited.
        Particles outside of it are skipped. By default, the region covered
        by the grid nodes (guard nodes excluded). A grid covering only part
        of the domain can use the bounds of the whole domain, as long as the
        particles lie within its cells up to rounding errors, which are
        absorbed by the guard nodes.

    """
    check_particle_shape(order)
    if box is None:
        box = (lo, lo + n_cell * d)
    box_lo = np.asarray(box[0], dtype=float)
    box_hi = np.asarray(box[1], dtype=float)
    deposit_3d_distribution_shape(
        x, y, z, q, id, lo[0], lo[1], lo[2], d[0], d[1], d[2], box_lo,
        box_hi, n_guard, order, deposition_array)


@njit_serial()
def shape_factors(u, order, sf):
    """
    Calculate the shape factors of a particle at position `u` (in cell units)
    and return the index of the first node to which it contributes.
    """
    if order == 1:
        i = int(math.floor(u))
        f = u - i
        sf[0] = 1. - f
        sf[1] = f
        return i
    elif order == 2:
        i = int(math.floor(u + 0.5))
        f = u - i
        sf[0] = 0.5 * (0.5 - f) ** 2
        sf[1] = 0.75 - f ** 2
        sf[2] = 0.5 * (0.5 + f) ** 2
        return i - 1
    else:
        i = int(math.floor(u))
        f = u - i
        v = 1. - f
        inv_6 = 1. / 6.
        sf[0] = inv_6 * v ** 3
        sf[1] = inv_6 * (3. * f**3 - 6. * f**2 + 4.)
        sf[2] = inv_6 * (3. * v**3 - 6. * v**2 + 4.)
        sf[3] = inv_6 * f ** 3
        return i - 1


@njit_serial()
def deposit_3d_distribution_shape(x, y, z, q, id, lo_x, lo_y, lo_z,
                                  dx, dy, dz, box_lo, box_hi, n_guard, order,
                                  deposition_array):
    """ Deposit particle quantity with a shape of arbitrary order. """
    sx = np.zeros(4)
    sy = np.zeros(4)
    sz = np.zeros(4)
    n_nodes = order + 1

    x_min, y_min, z_min = box_lo[0], box_lo[1], box_lo[2]
    x_max, y_max, z_max = box_hi[0], box_hi[1], box_hi[2]

    # Loop over particles.
    for i in range(x.shape[0]):
        if id[i] < 0:
            continue
        x_i = x[i]
        y_i = y[i]
        z_i = z[i]

        # Deposit only if particle is within field boundaries.
        if (x_i >= x_min and x_i <= x_max and y_i >= y_min and y_i <= y_max
                and z_i >= z_min and z_i <= z_max):
            # Indices of the first node, including guard offset.
            ix = shape_factors((x_i - lo_x) / dx, order, sx) + n_guard
            iy = shape_factors((y_i - lo_y) / dy, order, sy) + n_guard
            iz = shape_factors((z_i - lo_z) / dz, order, sz) + n_guard
            q_i = q[i]

            # Add contribution of particle to charge distribution.
            for a in range(n_nodes):
                for b in range(n_nodes):
                    q_ab = sx[a] * sy[b] * q_i
                    for c in range(n_nodes):
                        deposition_array[ix + a, iy + b, iz + c] += (
                            q_ab * sz[c])
