"""
Input impedance of a bore with tone holes.

Walks the bore from the foot back to the embouchure, folding in each
segment and hole, then merges the main bore with the cork cavity and the
embouchure hole at the blowing end.
"""

from dataclasses import dataclass
from typing import Optional
import logging

import numpy as np
from scipy.optimize import brentq

from .bore import Bore, Hole
from .impedance import (
    SPEED_OF_SOUND, EPSILON, LARGE_ADMITTANCE,
    wavenumber, characteristic_impedance, transmission_line,
    radiation_impedance, tone_hole_impedance, parallel, admittance
)

logger = logging.getLogger(__name__)


def embouchure_hole_impedance(bore: Bore, freq):
    """
    Impedance of the embouchure hole: an open tone hole whose depth is the
    lip-plate chimney.
    """
    return tone_hole_impedance(freq, bore.embouchure_hole_radius,
                               bore.embouchure_chimney, open=True)


def cork_cavity_impedance(bore: Bore, freq):
    """
    Closed stub between the embouchure and the stopper:
    Z = -j Zc cot(k L_cork), using the lossless wavenumber.
    """
    k_real = 2 * np.pi * np.asarray(freq, dtype=float) / SPEED_OF_SOUND
    z_char = characteristic_impedance(bore.bore_area)
    tan_kl = np.tan(k_real * bore.cork_position)
    # A zero-length cavity (or DC) is an open circuit
    tan_kl = np.where(np.abs(tan_kl) < EPSILON, EPSILON, tan_kl)
    return (-1j * z_char / tan_kl)[()]


def embouchure_joint(bore: Bore, freq, z_bore):
    """
    Combine the main bore, cork cavity and embouchure hole in parallel.

    Returns 1 / (Y_bore + Y_cork + Y_emb). The playing frequency is where
    the imaginary part of this vanishes.
    """
    y_total = (admittance(z_bore)
               + admittance(cork_cavity_impedance(bore, freq))
               + admittance(embouchure_hole_impedance(bore, freq)))
    with np.errstate(divide='ignore', invalid='ignore'):
        z = 1.0 / y_total
    return np.where(np.abs(y_total) < EPSILON,
                    LARGE_ADMITTANCE + 1j * LARGE_ADMITTANCE, z)[()]


def input_impedance(bore: Bore, freq, holes: Optional[tuple[Hole, ...]] = None):
    """
    Complex input impedance at the embouchure for frequency *freq*.

    Args:
        bore: Bore geometry
        freq: Frequency in Hz (scalar or array)
        holes: Holes already sorted foot-to-embouchure. Defaults to
            ``bore.traversal_order()``; pass a snapshot when evaluating
            many frequencies against the same bore.

    Returns:
        Complex impedance (scalar for scalar *freq*, else array)
    """
    if holes is None:
        holes = bore.traversal_order()

    k = wavenumber(freq, bore.bore_radius)
    k_real = k.real
    z_char = characteristic_impedance(bore.bore_area)

    # Foot: radiation from the open end
    z = radiation_impedance(z_char, k_real, bore.bore_radius)
    current_pos = bore.length

    for hole in holes:
        dist = current_pos - hole.position
        if dist > 0:
            z = transmission_line(z, z_char, k, dist)
        current_pos = hole.position

        z_hole = tone_hole_impedance(freq, hole.radius, bore.wall_thickness, hole.open)
        z = parallel(z, z_hole)

    # Last hole (or foot) back to the embouchure at x = 0
    if current_pos > 0:
        z = transmission_line(z, z_char, k, current_pos)

    return embouchure_joint(bore, freq, z)


def reactance(bore: Bore, freq, holes: Optional[tuple[Hole, ...]] = None) -> float:
    """Imaginary part of the input impedance at a single frequency."""
    return float(np.imag(input_impedance(bore, freq, holes)))


@dataclass
class ImpedanceSpectrum:
    """Input impedance sampled over a frequency grid."""
    frequencies: np.ndarray    # Hz (ascending)
    impedance: np.ndarray      # Complex input impedance
    bore: Bore

    @property
    def admittance(self) -> np.ndarray:
        return admittance(self.impedance)

    @property
    def reactance(self) -> np.ndarray:
        return self.impedance.imag

    @property
    def magnitude(self) -> np.ndarray:
        return np.abs(self.impedance)

    def zero_crossings(self) -> list[tuple[float, float]]:
        """
        Frequency intervals over which Im(Z) changes sign.

        Returns (f_low, f_high) pairs on the sampling grid.
        """
        x = self.reactance
        brackets = []
        for i in range(len(x) - 1):
            if np.isfinite(x[i]) and np.isfinite(x[i + 1]) and x[i] * x[i + 1] < 0:
                brackets.append((float(self.frequencies[i]),
                                 float(self.frequencies[i + 1])))
        return brackets

    def resonances(self, xtol: float = 0.01) -> np.ndarray:
        """
        Frequencies where Im(Z) crosses zero, refined between grid points.

        Crossings where |Z| is large (anti-resonances of the joint) are
        reported as well; callers interested in the playing frequency
        near a guess should use :func:`flute_tuner.resonance.find_resonance`.
        """
        holes = self.bore.traversal_order()
        roots = []
        for f_lo, f_hi in self.zero_crossings():
            try:
                roots.append(brentq(
                    lambda f: reactance(self.bore, f, holes), f_lo, f_hi, xtol=xtol
                ))
            except ValueError:
                logger.debug("No root refined in [%.2f, %.2f] Hz", f_lo, f_hi)
        return np.array(roots)


def impedance_spectrum(
    bore: Bore,
    frequencies=None,
    f_min: float = 20.0,
    f_max: float = 3000.0,
    n_points: int = 2000
) -> ImpedanceSpectrum:
    """
    Evaluate the input impedance over a frequency grid.

    Args:
        bore: Bore geometry
        frequencies: Explicit grid (Hz); overrides f_min/f_max/n_points
        f_min, f_max, n_points: Linear grid used when *frequencies* is None

    Returns:
        ImpedanceSpectrum
    """
    if frequencies is None:
        frequencies = np.linspace(f_min, f_max, n_points)
    frequencies = np.asarray(frequencies, dtype=float)
    z = np.asarray(input_impedance(bore, frequencies), dtype=complex)
    return ImpedanceSpectrum(frequencies=frequencies, impedance=z, bore=bore)
