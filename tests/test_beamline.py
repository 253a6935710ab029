from copy import deepcopy

import numpy as np
import pytest
from numpy.testing import assert_array_equal, assert_allclose

from slicetrack import (
    ParticleContainer, ReferenceParticle, MeshDomain, Beamline, Drift,
    ExactSbend, CFbend, Aperture, Kicker, DipEdge, ShortRF)


def make_beam(n_part=1000, n_threads=1):
    np.random.seed(0)
    ref = ReferenceParticle.from_kin_energy(250.)
    domain = MeshDomain([-1e-3] * 3, [1e-3] * 3, [16] * 3, n_tiles=8)
    pc = ParticleContainer(
        domain=domain, ref_particle=ref, n_threads=n_threads)
    pc.set_lost_particle_container(ParticleContainer(name='beam_lost'))
    x, y, t = np.random.normal(0., 1e-4, (3, n_part))
    px, py = np.random.normal(0., 1e-5, (2, n_part))
    pt = np.random.normal(0., 1e-3, n_part)
    pc.add_n_particles(x, y, t, px, py, pt, ref.qm_qeeV(), 1e-12)
    return pc


def copy_beam(pc):
    pc_copy = pc.copy()
    pc_copy.set_lost_particle_container(ParticleContainer(name='beam_lost'))
    return pc_copy


def assert_beams_equal(pc_1, pc_2):
    arrays_1 = pc_1.get_arrays()
    arrays_2 = pc_2.get_arrays()
    for name in arrays_1:
        assert_array_equal(arrays_2[name], arrays_1[name])


def make_elements():
    return [
        Drift(0.5, nslice=3),
        DipEdge(0.05, 4., 0.02, 0.5),
        ExactSbend(0.4, 5.7, nslice=4),
        DipEdge(0.05, 4., 0.02, 0.5),
        Kicker(1e-6, -2e-6),
        CFbend(0.3, 3., 0.8, nslice=2),
        ShortRF(0.1, 1.3e9, -20.),
        Aperture(3e-4, 3e-4, shape='elliptical'),
        Drift(0.2),
    ]


def test_single_element():
    """
    This test checks that tracking a beamline made up of a single element
    produces the same result as tracking the element in itself.

    """
    pc = make_beam()
    bend = ExactSbend(1., 10., nslice=5)
    bl = Beamline([deepcopy(bend)])

    pc_1 = copy_beam(pc)
    bend.track(pc_1)

    pc_2 = copy_beam(pc)
    bl.track(pc_2)

    assert_beams_equal(pc_1, pc_2)
    assert pc_1.ref_particle.s == pc_2.ref_particle.s


def test_multiple_elements():
    """
    This test checks that tracking a beamline made up of multiple elements
    produces the same result as tracking each element separately.

    """
    pc = make_beam()
    elements = make_elements()
    bl = Beamline(deepcopy(elements))

    pc_1 = copy_beam(pc)
    for element in elements:
        element.track(pc_1, show_progress_bar=False)

    pc_2 = copy_beam(pc)
    bl.track(pc_2, show_progress_bar=False)

    assert_beams_equal(pc_1, pc_2)
    assert_beams_equal(
        pc_1.get_lost_particle_container(), pc_2.get_lost_particle_container())
    assert pc_1.ref_particle.pt == pc_2.ref_particle.pt
    assert_allclose(pc_2.ref_particle.s, bl.length, rtol=1e-14)

    # Particles are either kept or lost.
    n_kept = pc_2.total_number_of_particles(valid_only=False)
    n_lost = pc_2.get_lost_particle_container().total_number_of_particles()
    assert n_lost > 0
    assert n_kept + n_lost == 1000


def test_threads():
    """
    Check that distributing the tiles among several threads gives exactly
    the same result as a single thread.
    """
    pc_1 = make_beam(n_threads=1)
    pc_2 = make_beam(n_threads=4)
    Beamline(make_elements()).track(pc_1, show_progress_bar=False)
    Beamline(make_elements()).track(pc_2, show_progress_bar=False)
    assert_beams_equal(pc_1, pc_2)


def test_slice_callback():
    """
    Check that the callback is called once per slice, in order, after the
    reference particle has been pushed through the slice and the lost
    particles have been collected.
    """
    pc = make_beam(n_part=100)
    elements = [Drift(0.3, nslice=3), Aperture(1e-5, 1e-5),
                ExactSbend(0.2, 3., nslice=2)]
    calls = []

    def callback(container, element, i_slice):
        assert container is pc
        n_lost = sum(np.sum(tile.id < 0) for tile in container.tiles)
        assert n_lost == 0
        calls.append((element, i_slice, container.ref_particle.s))

    Beamline(elements).track(
        pc, slice_callback=callback, show_progress_bar=False)

    assert [(c[0], c[1]) for c in calls] == [
        (elements[0], 0), (elements[0], 1), (elements[0], 2),
        (elements[1], 0), (elements[2], 0), (elements[2], 1)]
    assert_allclose([c[2] for c in calls], [0.1, 0.2, 0.3, 0.3, 0.4, 0.5],
                    rtol=1e-14)


def test_finalize_called_once_per_element():
    class CountingDrift(Drift):
        n_finalize = 0

        def finalize(self):
            self.n_finalize += 1

    drift = CountingDrift(0.1, nslice=4)
    Beamline([drift]).track(make_beam(n_part=10), show_progress_bar=False)
    assert drift.n_finalize == 1


def test_missing_lost_particle_container():
    """
    When no lost particle container has been registered, one is created
    with a warning.
    """
    pc = make_beam(n_part=100)
    pc.set_lost_particle_container(None)
    with pytest.warns(UserWarning):
        Beamline([Aperture(5e-5, 5e-5)]).track(pc, show_progress_bar=False)
    lost_pc = pc.get_lost_particle_container()
    assert lost_pc is not None
    assert lost_pc.name == 'beam_lost'
    assert (lost_pc.total_number_of_particles() +
            pc.total_number_of_particles() == 100)


def test_progress_bar(capsys):
    """ The progress bar shows the distance tracked and the last element. """
    pc = make_beam(n_part=10)
    Beamline([ExactSbend(0.2, 3., nslice=2), Drift(0.3, nslice=3)]).track(pc)
    out = capsys.readouterr().out
    assert '0.5000/0.5000 m' in out
    assert 'element 2/2: drift' in out


if __name__ == '__main__':
    test_single_element()
    test_multiple_elements()
    test_threads()
    test_slice_callback()
    test_finalize_called_once_per_element()
    test_missing_lost_particle_container()
