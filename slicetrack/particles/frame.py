"""
This module defines the coordinate frame in which the particle attributes
are interpreted.

The storage of a particle is always the same six arrays. At fixed s, the
third position and momentum components are the time of flight (c*t) and the
energy deviation (pt). At fixed t, the same arrays hold the longitudinal
position (z) and momentum (pz). The active frame is a single process-wide
setting that is switched by the coordinate transformations.
"""
from enum import Enum


class Frame(Enum):
    """ Coordinate frame of the particle attributes. """
    FIXED_S = 's'
    FIXED_T = 't'


# Labels of the position attributes.
POSITION_NAMES = {
    Frame.FIXED_S: ['position_x', 'position_y', 'position_t'],
    Frame.FIXED_T: ['position_x', 'position_y', 'position_z'],
}

# Labels of the momentum and scalar attributes.
MOMENTUM_NAMES = {
    Frame.FIXED_S: ['momentum_x', 'momentum_y', 'momentum_t', 'qm',
                    'weighting'],
    Frame.FIXED_T: ['momentum_x', 'momentum_y', 'momentum_z', 'qm',
                    'weighting'],
}


_active_frame = Frame.FIXED_S


def get_frame() -> Frame:
    """ Get the coordinate frame currently used by all particles. """
    return _active_frame


def set_frame(frame: Frame) -> None:
    """ Set the coordinate frame used by all particles. """
    global _active_frame
    _active_frame = Frame(frame)


def get_position_names(frame=None):
    """ Get the labels of the position attributes in the given frame. """
    if frame is None:
        frame = _active_frame
    return list(POSITION_NAMES[Frame(frame)])


def get_momentum_names(frame=None):
    """ Get the labels of the momentum attributes in the given frame. """
    if frame is None:
        frame = _active_frame
    return list(MOMENTUM_NAMES[Frame(frame)])
