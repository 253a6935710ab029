""" Contains the base class of all beamline elements. """
from enum import Enum
from typing import Optional, Callable

from slicetrack.particles.frame import Frame, get_frame
from slicetrack.particles.particle_container import ParticleContainer
from slicetrack.particles.reference_particle import ReferenceParticle
from .beamline import track_elements


class ElementKind(Enum):
    """Thick elements have a length and are applied in slices. Thin
    elements have zero length and are applied once."""
    THICK = 'thick'
    THIN = 'thin'


class BeamlineElement():
    """
    Base class for all beamline elements.

    Every element provides a map for the reference particle and a map for
    the beam particles, which are applied once per slice, in this order.
    The particle map of each element is a numba kernel with the signature
    ``kernel(x, y, t, px, py, pt, id, *params)``, which is applied
    independently to each tile of the particle container. The parameters
    are derived from the reference particle after it has been pushed
    through the current slice.

    Parameters
    ----------
    kind : ElementKind
        Whether the element is thick or thin.
    length : float
        Length of the element (m). Must be zero for thin elements.
    nslice : int
        Number of slices in which a thick element is applied.

    """

    _kernel = None

    def __init__(
        self,
        kind: ElementKind,
        length: Optional[float] = 0.,
        nslice: Optional[int] = 1
    ) -> None:
        if int(nslice) != nslice or nslice < 1:
            raise ValueError(
                'nslice must be a positive integer, got {}.'.format(nslice))
        if kind is ElementKind.THIN and (length != 0. or nslice != 1):
            raise ValueError('Thin elements have zero length and one slice.')
        self.kind = kind
        self.length = length
        self.nslice = int(nslice)
        self.element_name = ''

    @property
    def slice_length(self) -> float:
        """ Length of each slice of the element. """
        return self.length / self.nslice

    def push_reference(self, refpart: ReferenceParticle) -> None:
        """Push the reference particle through one slice of the element.

        Thin elements leave the reference particle untouched unless they
        override this method.
        """
        if self.kind is ElementKind.THICK:
            raise NotImplementedError

    def push_particles(self, container: ParticleContainer) -> None:
        """ Push all particles through one slice of the element. """
        if get_frame() is not Frame.FIXED_S:
            raise RuntimeError(
                'Beamline elements can only be applied to particles in the '
                'FIXED_S frame.')
        kernel = self._kernel
        params = self._get_kernel_parameters(container.ref_particle)
        container.iterate_tiles(
            lambda tile: kernel(
                tile.x, tile.y, tile.pos_3, tile.px, tile.py, tile.mom_3,
                tile.id, *params))

    def finalize(self) -> None:
        """ Called once after all slices of the element have been applied. """
        pass

    def track(
        self,
        container: ParticleContainer,
        slice_callback: Optional[Callable] = None,
        show_progress_bar: Optional[bool] = True
    ) -> None:
        """
        Track the particles through the element.

        Parameters
        ----------
        container : ParticleContainer
            Particles to be tracked, together with their reference particle.
        slice_callback : callable, optional
            Function called after each slice as
            ``slice_callback(container, element, i_slice)``. This is where
            collective effects such as space charge can be applied.
        show_progress_bar : bool, optional
            Whether to print the element properties and show a progress
            bar of the tracking. By default ``True``.
        """
        if show_progress_bar:
            print('')
            print(self.element_name.capitalize())
            print('-'*len(self.element_name))
            self._print_element_properties()
            print('')
        track_elements(
            [self], container, slice_callback=slice_callback,
            description=self.element_name.capitalize(),
            show_progress_bar=show_progress_bar)

    def _get_kernel_parameters(self, refpart: ReferenceParticle) -> tuple:
        "To be implemented by each element. Parameters of the kernel."
        raise NotImplementedError

    def _print_element_properties(self):
        "To be implemented by each element. Prints the element properties"
        raise NotImplementedError
