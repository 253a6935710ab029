import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from slicetrack import (
    ParticleContainer, ReferenceParticle, MeshDomain, Beamline, Drift,
    ExactSbend, CFbend, Frame, set_frame)
from slicetrack.beamline_elements import ElementKind
from slicetrack.physics_models.beam_optics.exact_sbend import push_exact_drift


PHASE_SPACE = ['position_x', 'position_y', 'position_t', 'momentum_x',
               'momentum_y', 'momentum_t']


def make_beam(n_part=500, energy_MeV=250.):
    np.random.seed(0)
    ref = ReferenceParticle.from_kin_energy(energy_MeV)
    domain = MeshDomain([-1e-3] * 3, [1e-3] * 3, [16] * 3, n_tiles=4)
    pc = ParticleContainer(domain=domain, ref_particle=ref)
    pc.set_lost_particle_container(ParticleContainer(name='beam_lost'))
    x, y, t = np.random.normal(0., 1e-4, (3, n_part))
    px, py = np.random.normal(0., 1e-4, (2, n_part))
    pt = np.random.normal(0., 1e-3, n_part)
    pc.add_n_particles(x, y, t, px, py, pt, ref.qm_qeeV(), 1e-12)
    return pc


def sorted_phase_space(pc):
    """ Get the phase space of the beam, sorted by particle id. """
    arrays = pc.get_arrays()
    order = np.argsort(arrays['id'])
    return {name: arrays[name][order] for name in PHASE_SPACE}


def assert_phase_space_close(ps_1, ps_2, atol=1e-12):
    for name in PHASE_SPACE:
        assert_allclose(ps_1[name], ps_2[name], rtol=0., atol=atol)


def test_exact_sbend_reference_orbit():
    """
    Check that the reference particle is bent along an arc of radius
    ds/phi and that its path length increases by the length of the bend.
    """
    ds, phi_deg = 1., 10.
    pc = make_beam(n_part=10)
    ref = pc.ref_particle
    bg = ref.beta_gamma()
    beta = ref.beta()
    phi = np.deg2rad(phi_deg)
    rc = ds / phi

    bend = ExactSbend(ds, phi_deg, nslice=4)
    assert bend.kind is ElementKind.THICK
    assert_allclose(bend.slice_length, 0.25)
    bend.track(pc, show_progress_bar=False)

    assert_allclose(ref.s, ds, rtol=1e-14)
    assert_allclose(ref.px, -bg * np.sin(phi), rtol=1e-12)
    assert_allclose(ref.pz, bg * np.cos(phi), rtol=1e-12)
    assert_allclose(ref.x, rc * (np.cos(phi) - 1.), rtol=1e-12)
    assert_allclose(ref.z, rc * np.sin(phi), rtol=1e-12)
    assert_allclose(ref.t, phi * rc / beta, rtol=1e-12)
    assert_allclose(ref.pt**2 - ref.px**2 - ref.pz**2, 1., rtol=1e-8)


def test_exact_sbend_inverse():
    """
    Check that a bend followed by a bend with negative length and angle
    brings the particles and the reference particle back to their initial
    state.
    """
    pc = make_beam()
    ps_0 = sorted_phase_space(pc)
    bl = Beamline([ExactSbend(1., 10., nslice=5),
                   ExactSbend(-1., -10., nslice=5)])
    bl.track(pc, show_progress_bar=False)
    assert pc.total_number_of_particles() == 500
    assert_phase_space_close(sorted_phase_space(pc), ps_0)

    ref = pc.ref_particle
    assert_allclose(ref.s, 0., atol=1e-14)
    assert_allclose([ref.x, ref.z, ref.t, ref.px], 0., atol=1e-10)


def test_exact_sbend_slicing():
    """ Tracking in many slices gives the same result as a single slice. """
    pc_1 = make_beam()
    pc_2 = pc_1.copy()
    pc_2.set_lost_particle_container(ParticleContainer(name='beam_lost'))
    ExactSbend(0.5, 15., nslice=1).track(pc_1, show_progress_bar=False)
    ExactSbend(0.5, 15., nslice=20).track(pc_2, show_progress_bar=False)
    assert_phase_space_close(
        sorted_phase_space(pc_2), sorted_phase_space(pc_1))
    assert_allclose(pc_2.ref_particle.px, pc_1.ref_particle.px, rtol=1e-12)
    assert_allclose(pc_2.ref_particle.s, pc_1.ref_particle.s, rtol=1e-14)


def test_exact_sbend_from_field():
    """
    A bend defined by its field gives the same result as one defined by
    its angle, when the bending radius is the same.
    """
    ds, phi_deg = 0.8, 12.
    pc_1 = make_beam()
    pc_2 = pc_1.copy()
    pc_2.set_lost_particle_container(ParticleContainer(name='beam_lost'))
    B = pc_1.ref_particle.rigidity_Tm() * np.deg2rad(phi_deg) / ds
    ExactSbend(ds, phi_deg).track(pc_1, show_progress_bar=False)
    ExactSbend(ds, phi_deg, B=B).track(pc_2, show_progress_bar=False)
    assert_phase_space_close(
        sorted_phase_space(pc_2), sorted_phase_space(pc_1))


def test_straight_exact_sbend_is_drift():
    pc_1 = make_beam()
    pc_2 = pc_1.copy()
    pc_2.set_lost_particle_container(ParticleContainer(name='beam_lost'))
    ExactSbend(1., 0., nslice=2).track(pc_1, show_progress_bar=False)
    Drift(1., nslice=2).track(pc_2, show_progress_bar=False)
    ps_1 = sorted_phase_space(pc_1)
    ps_2 = sorted_phase_space(pc_2)
    for name in PHASE_SPACE:
        assert_array_equal(ps_1[name], ps_2[name])
    assert_allclose(pc_1.ref_particle.z, 1., rtol=1e-14)
    assert_allclose(pc_2.ref_particle.z, 1., rtol=1e-14)


def test_exact_drift():
    """
    Check the exact drift against the free motion of the particles, and
    that a particle following the reference orbit is not modified.
    """
    ref = ReferenceParticle.from_kin_energy(5.)
    beta = ref.beta()
    x = np.array([0., 1e-4])
    y = np.array([0., 0.])
    t = np.array([0., 0.])
    px = np.array([0., 1e-2])
    py = np.array([0., 0.])
    pt = np.array([0., 0.])
    id = np.array([1, 2], dtype=np.int64)
    push_exact_drift(x, y, t, px, py, pt, id, 2., beta)

    assert_array_equal([x[0], t[0]], [0., 0.])
    pz = np.sqrt(1. - 1e-4)
    assert_allclose(x[1], 1e-4 + 2. * 1e-2 / pz, rtol=1e-14)
    # The particle takes a longer path than the reference particle.
    assert_allclose(t[1], 2. * (1. / pz - 1.) / beta, rtol=1e-10)
    assert t[1] > 0.


def test_imaginary_momentum_marks_particle_lost():
    """
    Particles with an imaginary longitudinal momentum are marked as lost
    and not pushed.
    """
    x = np.array([1e-4, 1e-4])
    y = np.zeros(2)
    t = np.zeros(2)
    px = np.array([2., 0.])
    py = np.zeros(2)
    pt = np.zeros(2)
    id = np.array([7, 8], dtype=np.int64)
    push_exact_drift(x, y, t, px, py, pt, id, 1., 0.9)
    assert_array_equal(id, [-7, 8])
    assert_array_equal(x, [1e-4, 1e-4])
    assert np.all(np.isfinite(t))


def test_cf_bend_inverse():
    """
    Check that tracking backwards undoes a combined-function bend for all
    combinations of horizontal and vertical focusing, including the
    limiting cases of zero focusing strength.
    """
    rc = 2.
    for k in [0.5, 0., -0.1, -rc**(-2), -1.]:
        pc = make_beam()
        ps_0 = sorted_phase_space(pc)
        bl = Beamline([CFbend(1.2, rc, k, nslice=3),
                       CFbend(-1.2, rc, k, nslice=3)])
        bl.track(pc, show_progress_bar=False)
        assert_phase_space_close(sorted_phase_space(pc), ps_0, atol=1e-13)
        assert_allclose(pc.ref_particle.s, 0., atol=1e-14)


def test_cf_bend_zero_strength_limit():
    """
    Check that the solutions for zero horizontal or vertical focusing
    strength are the limit of the solutions for a small nonzero strength.
    """
    rc = 2.
    for k_0 in [0., -rc**(-2)]:
        pc_0 = make_beam()
        CFbend(1., rc, k_0).track(pc_0, show_progress_bar=False)
        ps_0 = sorted_phase_space(pc_0)
        for dk in [1e-8, -1e-8]:
            pc = make_beam()
            CFbend(1., rc, k_0 + dk).track(pc, show_progress_bar=False)
            ps = sorted_phase_space(pc)
            for name in PHASE_SPACE:
                assert_allclose(ps[name], ps_0[name], rtol=1e-6, atol=1e-10)


def test_cf_bend_reference_orbit():
    pc = make_beam(n_part=10)
    ref = pc.ref_particle
    bg = ref.beta_gamma()
    CFbend(1., 2., 0.3, nslice=3).track(pc, show_progress_bar=False)
    assert_allclose(ref.s, 1., rtol=1e-14)
    assert_allclose(ref.px, -bg * np.sin(0.5), rtol=1e-12)
    assert_allclose(ref.pz, bg * np.cos(0.5), rtol=1e-12)


def test_invalid_number_of_slices():
    with pytest.raises(ValueError):
        ExactSbend(1., 1., nslice=0)
    with pytest.raises(ValueError):
        Drift(1., nslice=2.5)
    with pytest.raises(ValueError):
        CFbend(1., 2., 0., nslice=-1)


def test_push_requires_fixed_s_frame():
    pc = make_beam(n_part=10)
    set_frame(Frame.FIXED_T)
    try:
        with pytest.raises(RuntimeError):
            Drift(1.).push_particles(pc)
    finally:
        set_frame(Frame.FIXED_S)


if __name__ == '__main__':
    test_exact_sbend_reference_orbit()
    test_exact_sbend_inverse()
    test_exact_sbend_slicing()
    test_exact_sbend_from_field()
    test_straight_exact_sbend_is_drift()
    test_exact_drift()
    test_imaginary_momentum_marks_particle_lost()
    test_cf_bend_inverse()
    test_cf_bend_zero_strength_limit()
    test_cf_bend_reference_orbit()
    test_invalid_number_of_slices()
    test_push_requires_fixed_s_frame()
