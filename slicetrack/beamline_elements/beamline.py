from typing import Optional, Callable, List
import warnings

from slicetrack.particles.particle_container import ParticleContainer
from slicetrack.tracking.progress_bar import (
    get_progress_bar, set_current_element)


class Beamline():
    """
    Class for grouping beamline elements and allowing easier tracking.

    """

    def __init__(
        self,
        elements: List
    ) -> None:
        self.elements = elements

    @property
    def length(self) -> float:
        return sum(element.length for element in self.elements)

    def track(
        self,
        container: ParticleContainer,
        slice_callback: Optional[Callable] = None,
        show_progress_bar: Optional[bool] = True,
    ) -> None:
        """
        Track the particles through the beamline.

        Parameters
        ----------
        container : ParticleContainer
            Particles to be tracked, together with their reference particle.
        slice_callback : callable, optional
            Function called after each slice of each element as
            ``slice_callback(container, element, i_slice)``.
        show_progress_bar : bool, optional
            Whether to show a progress bar of the tracking through the
            beamline. By default ``True``.

        """
        track_elements(
            self.elements, container, slice_callback=slice_callback,
            description='Beamline', show_progress_bar=show_progress_bar)


def track_elements(
    elements: List,
    container: ParticleContainer,
    slice_callback: Optional[Callable] = None,
    description: Optional[str] = 'Tracking',
    show_progress_bar: Optional[bool] = True,
) -> None:
    """
    Run the slice loop over a list of elements.

    For every slice of every element, the reference particle is pushed
    first, then the particles. The particles marked as lost are then moved
    to the lost particle container and, finally, `slice_callback` is called.
    After the last slice of each element, its `finalize` method is called.

    If no lost particle container has been registered, one is created.
    """
    if container.get_lost_particle_container() is None:
        warnings.warn(
            "No lost particle container registered for '{}'. "
            "Creating one.".format(container.name))
        container.set_lost_particle_container(
            ParticleContainer(
                domain=container.domain, comm=container.comm,
                n_threads=container.n_threads,
                name=container.name + '_lost'))

    total_length = sum(abs(element.length) for element in elements)
    progress_bar = get_progress_bar(
        description, total_length, len(elements),
        disable=not show_progress_bar or total_length == 0.)
    refpart = container.ref_particle
    for i_element, element in enumerate(elements):
        set_current_element(progress_bar, i_element, element)
        for i_slice in range(element.nslice):
            element.push_reference(refpart)
            element.push_particles(container)
            container.collect_lost_particles()
            if slice_callback is not None:
                slice_callback(container, element, i_slice)
            progress_bar.update(abs(element.slice_length))
        element.finalize()
    progress_bar.close()
