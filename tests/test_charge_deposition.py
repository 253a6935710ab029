import numpy as np
import scipy.constants as ct
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from slicetrack import ParticleContainer, ReferenceParticle, MeshDomain
from slicetrack.particles.deposition import get_n_guard


def make_beam(order, n_part=2000, n_tiles=1, n_threads=1, q_tot=1e-12):
    np.random.seed(1)
    ref = ReferenceParticle.from_kin_energy(250.)
    domain = MeshDomain([-1e-3] * 3, [1e-3] * 3, [16, 12, 20],
                        n_tiles=n_tiles)
    pc = ParticleContainer(
        domain=domain, ref_particle=ref, n_threads=n_threads)
    pc.set_particle_shape(order)
    x, y, t = np.random.uniform(-0.8e-3, 0.8e-3, (3, n_part))
    zeros = np.zeros(n_part)
    pc.add_n_particles(x, y, t, zeros, zeros, zeros, ref.qm_qeeV(), q_tot)
    return pc


def test_total_charge():
    """
    Check that, for all particle shapes, the deposited charge equals the
    total charge of the particles, i.e., sum(w * q_e).
    """
    for order in [1, 2, 3]:
        pc = make_beam(order)
        rho = {0: pc.allocate_charge_grid()}
        n_guard = get_n_guard(order)
        assert rho[0].shape == (17 + 2 * n_guard, 13 + 2 * n_guard,
                                21 + 2 * n_guard)
        pc.deposit_charge(rho)
        w = pc.get_arrays()['weighting']
        assert_allclose(np.sum(rho[0]), np.sum(w) * ct.e, rtol=1e-10)
        assert_allclose(np.sum(rho[0]), 1e-12, rtol=1e-10)


def test_deposition_is_idempotent():
    """ Depositing twice gives the same grid, since it is reset first. """
    pc = make_beam(2)
    rho = {0: pc.allocate_charge_grid()}
    pc.deposit_charge(rho)
    rho_1 = rho[0].copy()
    pc.deposit_charge(rho)
    assert_array_equal(rho[0], rho_1)


def test_lost_particles_not_deposited():
    pc = make_beam(1, n_part=100)
    tile = pc.tiles[0]
    tile.id[:10] *= -1
    rho = {0: pc.allocate_charge_grid()}
    pc.deposit_charge(rho)
    assert_allclose(np.sum(rho[0]), 0.9e-12, rtol=1e-10)


def test_particle_on_node():
    """ With a linear shape, a particle on a grid node deposits only there. """
    domain = MeshDomain([0.] * 3, [1.] * 3, [4] * 3)
    pc = ParticleContainer(domain=domain)
    pc.set_particle_shape(1)
    pc.add_n_particles([0.25], [0.5], [0.75], [0.], [0.], [0.], -1., ct.e)
    rho = {0: pc.allocate_charge_grid()}
    pc.deposit_charge(rho)
    n_guard = get_n_guard(1)
    assert_allclose(rho[0][1 + n_guard, 2 + n_guard, 3 + n_guard], ct.e)
    assert_allclose(np.sum(rho[0]), ct.e)


def test_tiles_and_threads():
    """
    Check that splitting the domain into tiles, and depositing them from
    several threads, gives the same grid as a single tile.
    """
    for order in [1, 3]:
        pc_1 = make_beam(order, n_tiles=1)
        rho_1 = {0: pc_1.allocate_charge_grid()}
        pc_1.deposit_charge(rho_1)

        pc_2 = make_beam(order, n_tiles=5, n_threads=3)
        rho_2 = {0: pc_2.allocate_charge_grid()}
        pc_2.deposit_charge(rho_2)

        assert len([t for t in pc_2.tiles if t.n_particles > 0]) > 1
        assert_allclose(rho_2[0], rho_1[0], rtol=1e-10, atol=1e-30)


def test_particles_at_tile_edges():
    """
    Check that particles located right at the edges between tiles, or at
    the domain boundaries, are deposited exactly once.
    """
    for nz, n_tiles in [(7, 3), (20, 5), (16, 4), (13, 6)]:
        domain = MeshDomain([-1e-3] * 3, [1e-3] * 3, [4, 4, nz],
                            n_tiles=n_tiles)
        edges = domain.tile_edges
        z = np.concatenate([
            np.nextafter(edges[1:-1], -np.inf),
            edges[1:-1],
            np.nextafter(edges[1:-1], np.inf),
            [domain.lo[2], domain.hi[2]]
        ])
        n_part = z.shape[0]
        zeros = np.zeros(n_part)
        for order in [1, 2, 3]:
            pc = ParticleContainer(domain=domain)
            pc.set_particle_shape(order)
            pc.add_n_particles(zeros, zeros, z, zeros, zeros, zeros, -1.,
                               n_part * ct.e)
            rho = {0: pc.allocate_charge_grid()}
            pc.deposit_charge(rho)
            assert_allclose(np.sum(rho[0]), n_part * ct.e, rtol=1e-12)


def test_mesh_refinement_levels():
    """ Each refinement level receives the full charge on its own grid. """
    pc = make_beam(2)
    ref_ratio = [[2, 2, 2]]
    rho = {lev: pc.allocate_charge_grid(lev, ref_ratio) for lev in [0, 1]}
    n_guard = get_n_guard(2)
    assert rho[1].shape == (33 + 2 * n_guard, 25 + 2 * n_guard,
                            41 + 2 * n_guard)
    pc.deposit_charge(rho, ref_ratio)
    for lev in [0, 1]:
        assert_allclose(np.sum(rho[lev]), 1e-12, rtol=1e-10)


def test_wrong_grid_shape():
    pc = make_beam(1, n_part=10)
    with pytest.raises(ValueError):
        pc.deposit_charge({0: np.zeros((5, 5, 5))})


if __name__ == '__main__':
    test_total_charge()
    test_deposition_is_idempotent()
    test_lost_particles_not_deposited()
    test_particle_on_node()
    test_tiles_and_threads()
    test_particles_at_tile_edges()
    test_mesh_refinement_levels()
    test_wrong_grid_shape()
