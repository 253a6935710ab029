import numpy as np

from slicetrack import (
    ParticleContainer, ReferenceParticle, MeshDomain, Beamline, Drift,
    ExactSbend, DipEdge, Aperture)


def track_chicane():
    # create reference particle and beam
    ref = ReferenceParticle.from_kin_energy(1000.)
    domain = MeshDomain(lo=[-2e-3, -2e-3, -1e-3], hi=[2e-3, 2e-3, 1e-3],
                        n_cell=[32, 32, 64], n_tiles=8)
    beam = ParticleContainer(domain=domain, ref_particle=ref)
    beam.set_lost_particle_container(ParticleContainer(name='beam_lost'))
    beam.set_particle_shape(2)

    n_part = 100000
    x, y = np.random.normal(0., 1e-4, (2, n_part))
    t = np.random.normal(0., 2e-4, n_part)
    px, py = np.random.normal(0., 2e-5, (2, n_part))
    # energy chirp, higher energy at the tail
    pt = -0.01 * t / 2e-4 + np.random.normal(0., 1e-4, n_part)
    beam.add_n_particles(x, y, t, px, py, pt, ref.qm_qeeV(), 100e-12)

    # create chicane
    l_b = 0.3
    phi = 3.
    rc = l_b / np.deg2rad(phi)
    # rectangular bends, with half the bending angle at each edge
    psi = np.deg2rad(phi) / 2.

    def bend(sign):
        return [DipEdge(psi, sign * rc, 0., 0.),
                ExactSbend(l_b, sign * phi, nslice=10),
                DipEdge(psi, sign * rc, 0., 0.)]

    chicane = Beamline(
        bend(-1) + [Drift(2., nslice=10)] + bend(1) + [Drift(0.5)] +
        bend(1) + [Drift(2., nslice=10)] + bend(-1) +
        [Aperture(1e-3, 1e-3, shape='elliptical')])

    # deposit the charge after each slice, as a space-charge solver would
    rho = {0: beam.allocate_charge_grid()}
    peak_density = []

    def deposit(container, element, i_slice):
        container.deposit_charge(rho)
        peak_density.append(np.max(np.abs(rho[0])))

    print(beam.mean_and_std_positions())
    chicane.track(beam, slice_callback=deposit)
    print(beam.mean_and_std_positions())
    print('Lost particles: {}'.format(
        beam.get_lost_particle_container().total_number_of_particles()))
    print('Peak charge per node: {:.3e} C -> {:.3e} C'.format(
        peak_density[0], peak_density[-1]))


if __name__ == '__main__':
    track_chicane()
