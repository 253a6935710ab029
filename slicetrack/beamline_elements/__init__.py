from .base import BeamlineElement, ElementKind
from .thick_elements import Drift, ExactSbend, CFbend
from .thin_elements import ThinDipole, Kicker, Aperture, ShortRF, DipEdge
from .beamline import Beamline


__all__ = [
    'BeamlineElement', 'ElementKind', 'Drift', 'ExactSbend', 'CFbend',
    'ThinDipole', 'Kicker', 'Aperture', 'ShortRF', 'DipEdge', 'Beamline']
