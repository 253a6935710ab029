__version__ = '0.1.0'


from .beamline_elements import (
    Drift, ExactSbend, CFbend, ThinDipole, Kicker, Aperture, ShortRF,
    DipEdge, Beamline)
from .particles import (
    ParticleContainer, ReferenceParticle, MeshDomain, Frame, get_frame,
    set_frame, to_fixed_t, to_fixed_s)


__all__ = ['__version__', 'Drift', 'ExactSbend', 'CFbend', 'ThinDipole',
           'Kicker', 'Aperture', 'ShortRF', 'DipEdge', 'Beamline',
           'ParticleContainer', 'ReferenceParticle', 'MeshDomain', 'Frame',
           'get_frame', 'set_frame', 'to_fixed_t', 'to_fixed_s']
