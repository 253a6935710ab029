"""
This module contains the transformations of the particle coordinates between
the fixed-s frame, (x, y, t, px, py, pt), and the fixed-t frame,
(x, y, z, px, py, pz).

In both frames the momenta are normalized to the momentum of the reference
particle. The transformations are done in "dynamic" units, normalized to
m*c, using the energy (pt = -gamma) of the reference particle.
"""
import math

from slicetrack.utilities.numba import njit_serial
from .frame import Frame, get_frame, set_frame


def to_fixed_t(container):
    """Transform the particles of a container from fixed s to fixed t.

    The particles of its lost particle container, if any, are transformed
    as well. Particles for which the longitudinal momentum would be
    imaginary are marked as lost, and their longitudinal coordinates, which
    have no fixed-t counterpart, are set to NaN.
    """
    _check_frame(Frame.FIXED_S)
    refpart = container.ref_particle
    ptd = refpart.pt
    pzd = refpart.beta_gamma()
    for pc in _get_containers(container):
        pc.iterate_tiles(
            lambda tile: transform_to_fixed_t(
                tile.x, tile.y, tile.pos_3, tile.px, tile.py, tile.mom_3,
                tile.id, ptd, pzd))
    set_frame(Frame.FIXED_T)


def to_fixed_s(container):
    """Transform the particles of a container from fixed t to fixed s.

    The particles of its lost particle container, if any, are transformed
    as well. Particles that do not move forward are marked as lost, and their
    longitudinal coordinates, which have no fixed-s counterpart, are set to
    NaN.
    """
    _check_frame(Frame.FIXED_T)
    refpart = container.ref_particle
    ptd = refpart.pt
    pzd = refpart.beta_gamma()
    for pc in _get_containers(container):
        pc.iterate_tiles(
            lambda tile: transform_to_fixed_s(
                tile.x, tile.y, tile.pos_3, tile.px, tile.py, tile.mom_3,
                tile.id, ptd, pzd))
    set_frame(Frame.FIXED_S)


@njit_serial()
def transform_to_fixed_t(x, y, t, px, py, pt, id, ptd, pzd):
    """
    Drift each particle from the time at which it crosses the current s to
    the time at which the reference particle does.
    """
    for i in range(x.shape[0]):
        if id[i] < 0:
            continue
        px_d = px[i] * pzd
        py_d = py[i] * pzd
        pt_f = ptd + pt[i] * pzd
        arg = pt_f**2 - 1. - px_d**2 - py_d**2
        if arg <= 0.:
            id[i] = -id[i]
            t[i] = math.nan
            pt[i] = math.nan
            continue
        pz_f = math.sqrt(arg)
        t_i = t[i]
        x[i] = x[i] + px_d * t_i / pt_f
        y[i] = y[i] + py_d * t_i / pt_f
        # At fixed t, the third components hold z and pz.
        t[i] = pz_f * t_i / pt_f
        pt[i] = (pz_f - pzd) / pzd


@njit_serial()
def transform_to_fixed_s(x, y, z, px, py, pz, id, ptd, pzd):
    """
    Drift each particle from the time of the reference particle to the time
    at which it crosses the current s.
    """
    for i in range(x.shape[0]):
        if id[i] < 0:
            continue
        px_d = px[i] * pzd
        py_d = py[i] * pzd
        pz_f = pzd + pz[i] * pzd
        if pz_f <= 0.:
            id[i] = -id[i]
            z[i] = math.nan
            pz[i] = math.nan
            continue
        pt_f = -math.sqrt(1. + px_d**2 + py_d**2 + pz_f**2)
        t_i = z[i] * pt_f / pz_f
        x[i] = x[i] - px_d * t_i / pt_f
        y[i] = y[i] - py_d * t_i / pt_f
        # At fixed s, the third components hold t and pt.
        z[i] = t_i
        pz[i] = (pt_f - ptd) / pzd


def _get_containers(container):
    containers = [container]
    lost_pc = container.get_lost_particle_container()
    if lost_pc is not None and lost_pc.domain is not None:
        containers.append(lost_pc)
    return containers


def _check_frame(frame):
    if get_frame() is not frame:
        raise RuntimeError(
            'The particles are expected to be in the {} frame, but the '
            'active frame is {}.'.format(frame.name, get_frame().name))
