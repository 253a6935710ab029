from .frame import Frame, get_frame, set_frame
from .reference_particle import ReferenceParticle
from .domain import MeshDomain
from .particle_tile import ParticleTile
from .particle_container import ParticleContainer
from .coordinate_transformation import to_fixed_t, to_fixed_s


__all__ = ['Frame', 'get_frame', 'set_frame', 'ReferenceParticle',
           'MeshDomain', 'ParticleTile', 'ParticleContainer', 'to_fixed_t',
           'to_fixed_s']
