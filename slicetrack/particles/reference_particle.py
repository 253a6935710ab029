"""
This module contains the class defining the reference particle.
"""
from __future__ import annotations
from typing import Optional

import numpy as np
import scipy.constants as ct


# Mass of 1 MeV/c^2 in kg.
MEV_INVC2 = 1e6 * ct.e / ct.c**2


class ReferenceParticle():
    """ Defines the reference particle of a beam.

    The reference particle follows the design trajectory through the
    beamline and defines the moving frame and the normalization of the
    momenta of all macroparticles.

    Parameters
    ----------
    x, y, z : float
        Position of the reference particle in the lab frame (m).
    t : float
        Time of flight multiplied by the speed of light (m).
    px, py, pz : float
        Momentum of the reference particle normalized to m*c.
    pt : float
        Energy of the reference particle normalized to m*c^2, with a
        negative sign, i.e., ``pt = -gamma``.
    s : float
        Integrated path length along the beamline (m).
    mass : float
        Rest mass of the particle species (kg). By default, the electron
        mass.
    charge : float
        Charge of the particle species (C). By default, the electron charge.

    """

    def __init__(
        self,
        x: Optional[float] = 0.,
        y: Optional[float] = 0.,
        z: Optional[float] = 0.,
        t: Optional[float] = 0.,
        px: Optional[float] = 0.,
        py: Optional[float] = 0.,
        pz: Optional[float] = 0.,
        pt: Optional[float] = -1.,
        s: Optional[float] = 0.,
        mass: Optional[float] = ct.m_e,
        charge: Optional[float] = -ct.e
    ) -> None:
        self.x = x
        self.y = y
        self.z = z
        self.t = t
        self.px = px
        self.py = py
        self.pz = pz
        self.pt = pt
        self.s = s
        self.mass = mass
        self.charge = charge

    @classmethod
    def from_kin_energy(
        cls,
        kin_energy_MeV: float,
        mass_MeV: Optional[float] = None,
        charge_qe: Optional[float] = -1.
    ) -> ReferenceParticle:
        """Create a reference particle moving along z.

        Parameters
        ----------
        kin_energy_MeV : float
            Kinetic energy in MeV.
        mass_MeV : float, optional
            Rest energy in MeV. By default, that of an electron.
        charge_qe : float, optional
            Charge in units of the elementary charge. By default, -1.
        """
        refpart = cls()
        if mass_MeV is not None:
            refpart.set_mass_MeV(mass_MeV)
        refpart.set_charge_qe(charge_qe)
        refpart.set_kin_energy_MeV(kin_energy_MeV)
        return refpart

    def gamma(self) -> float:
        """ Relativistic Lorentz factor. """
        return -self.pt

    def beta(self) -> float:
        """ Relativistic beta. """
        return np.sqrt(1. - self.pt**(-2))

    def beta_gamma(self) -> float:
        """ Normalized momentum, beta*gamma. """
        return np.sqrt(self.pt**2 - 1.)

    def rigidity_Tm(self) -> float:
        """ Magnetic rigidity, i.e. momentum over charge (T*m). """
        return self.mass * ct.c * self.beta_gamma() / self.charge

    def mass_MeV(self) -> float:
        """ Rest energy in MeV. """
        return self.mass / MEV_INVC2

    def charge_qe(self) -> float:
        """ Charge in units of the elementary charge. """
        return self.charge / ct.e

    def qm_qeeV(self) -> float:
        """ Charge over rest energy in units of q_e/eV. """
        return self.charge_qe() / (self.mass_MeV() * 1e6)

    def kin_energy_MeV(self) -> float:
        """ Kinetic energy in MeV. """
        return -self.mass_MeV() * (self.pt + 1.)

    def set_mass_MeV(self, mass_MeV: float) -> None:
        self.mass = mass_MeV * MEV_INVC2

    def set_charge_qe(self, charge_qe: float) -> None:
        self.charge = charge_qe * ct.e

    def set_kin_energy_MeV(self, kin_energy_MeV: float) -> None:
        """Set the kinetic energy, pointing the momentum along z.

        The mass has to be set beforehand.
        """
        if kin_energy_MeV <= 0.:
            raise ValueError(
                'The kinetic energy of the reference particle must be '
                'positive, got {} MeV.'.format(kin_energy_MeV))
        self.px = 0.
        self.py = 0.
        self.pt = -kin_energy_MeV / self.mass_MeV() - 1.
        self.pz = np.sqrt(self.pt**2 - 1.)

    def copy(self) -> ReferenceParticle:
        """ Return an independent copy of the reference particle. """
        return ReferenceParticle(
            x=self.x, y=self.y, z=self.z, t=self.t,
            px=self.px, py=self.py, pz=self.pz, pt=self.pt, s=self.s,
            mass=self.mass, charge=self.charge)

    def __repr__(self) -> str:
        return (
            'ReferenceParticle(s={:.6g} m, pt={:.10g}, pz={:.10g}, '
            'x={:.6g}, y={:.6g}, z={:.6g}, t={:.6g})'.format(
                self.s, self.pt, self.pz, self.x, self.y, self.z, self.t))
