"""
Acoustic impedance transforms for cylindrical bore segments and tone holes.

Implements the building blocks of a one-dimensional transmission-line
(TMM) model: lossy propagation along a uniform duct, radiation from an
unflanged open end, and the shunt impedance of open and closed tone holes.

Every function accepts a scalar frequency or a numpy array of frequencies
and returns a value of matching shape. Units are CGS: cm, g, s.

Key references:
- Benade (1960) - On the mathematical theory of woodwind finger holes
- Levine & Schwinger (1948) - Radiation from an unflanged circular pipe
"""

import numpy as np


#: Speed of sound (cm/s)
SPEED_OF_SOUND = 34500.0
#: Density of air (g/cm^3)
AIR_DENSITY = 0.0012
#: Viscothermal loss coefficient (alpha = LOSS_COEFF * sqrt(f) / radius)
LOSS_COEFF = 1.2e-5
#: Magnitude below which an impedance or admittance is treated as zero
EPSILON = 1e-10
#: Stand-in for an infinite admittance (or impedance)
LARGE_ADMITTANCE = 1e10

#: Benade end correction for a tone hole, as a multiple of its radius
HOLE_END_CORRECTION = 1.5
#: Unflanged pipe radiation coefficients: Z = Zc (R ka^2 + j X ka)
RADIATION_RESISTANCE = 0.25
RADIATION_REACTANCE = 0.61


def angular_frequency(freq):
    return 2 * np.pi * np.asarray(freq, dtype=float)


def wavenumber(freq, bore_radius: float):
    """
    Complex wavenumber k = w/c - j*alpha with viscothermal wall losses.

    alpha grows with sqrt(f) and shrinks with the bore radius. Negative
    frequencies, and a bore with no radius, are treated as zero loss.
    """
    f = np.asarray(freq, dtype=float)
    if abs(bore_radius) < EPSILON:
        alpha = np.zeros_like(f)
    else:
        alpha = LOSS_COEFF * np.sqrt(np.maximum(f, 0.0)) / bore_radius
    return angular_frequency(f) / SPEED_OF_SOUND - 1j * alpha


def characteristic_impedance(area: float) -> float:
    """
    Z_c = rho c / A for a duct of cross-sectional area *area*.

    A duct with no area returns the large sentinel.
    """
    if abs(area) < EPSILON:
        return LARGE_ADMITTANCE
    return AIR_DENSITY * SPEED_OF_SOUND / area


def transmission_line(z_load, z_char, k, length: float):
    """
    Input impedance of a uniform lossy segment terminated by *z_load*.

    Z_in = Zc (Z_L + j Zc tan(kL)) / (Zc + j Z_L tan(kL))

    A vanishing denominator yields the large sentinel instead of inf.
    """
    j_tan = 1j * np.tan(k * length)
    numer = z_load + z_char * j_tan
    denom = z_char + z_load * j_tan
    with np.errstate(divide='ignore', invalid='ignore'):
        z_in = z_char * (numer / denom)
    return np.where(np.abs(denom) < EPSILON, LARGE_ADMITTANCE + 0j, z_in)[()]


def radiation_impedance(z_char, k_real, radius: float):
    """Radiation load of an unflanged open pipe end of the given radius."""
    ka = k_real * radius
    return z_char * (RADIATION_RESISTANCE * ka ** 2 + 1j * RADIATION_REACTANCE * ka)


def effective_depth(depth: float, radius: float) -> float:
    """Chimney depth plus the Benade end correction (t + 1.5 r)."""
    return depth + HOLE_END_CORRECTION * radius


def tone_hole_impedance(freq, radius: float, depth: float, open: bool = True):
    """
    Shunt impedance of a tone hole through a wall of thickness *depth*.

    Open holes are an inertance (mass of air in the chimney) plus the
    radiation resistance of the hole mouth. Closed holes are the
    compliance of the trapped volume, with no resistive part.

    A hole with no area has no effect on the bore and is returned as an
    open circuit (the large sentinel). A hole whose area overflows removes
    the wall entirely and is returned as a short (zero).
    """
    omega = angular_frequency(freq)
    area = np.pi * radius * radius
    t_eff = effective_depth(depth, radius)

    if area < EPSILON:
        return np.full(np.shape(omega), LARGE_ADMITTANCE + 0j)[()]
    if not np.isfinite(area):
        return np.zeros(np.shape(omega), dtype=complex)[()]

    if open:
        inertance = AIR_DENSITY * t_eff / area
        k_real = omega / SPEED_OF_SOUND
        # 0.25 (k r)^2 rho c / (pi r^2), with r cancelled
        resistance = RADIATION_RESISTANCE * k_real ** 2 * AIR_DENSITY * SPEED_OF_SOUND / np.pi
        return resistance + 1j * omega * inertance

    volume = area * t_eff
    if abs(volume) < EPSILON:
        return np.full(np.shape(omega), -1j * LARGE_ADMITTANCE)[()]
    stiffness = AIR_DENSITY * SPEED_OF_SOUND ** 2 / volume
    with np.errstate(divide='ignore', invalid='ignore'):
        z = -1j * stiffness / omega
    return np.where(np.abs(omega) < EPSILON, -1j * LARGE_ADMITTANCE, z)[()]


def parallel(z_main, z_shunt):
    """
    Parallel combination of a running load and a shunt branch.

    A shunt with |Z| below EPSILON shorts the line (returns 0). A vanishing
    sum (the two branches in anti-resonance) returns the large sentinel.
    """
    total = z_main + z_shunt
    with np.errstate(divide='ignore', invalid='ignore'):
        z = (z_main * z_shunt) / total
    z = np.where(np.abs(total) < EPSILON, LARGE_ADMITTANCE + 0j, z)
    return np.where(np.abs(z_shunt) < EPSILON, 0j, z)[()]


def admittance(z):
    """1/Z, or LARGE_ADMITTANCE where |Z| is below EPSILON."""
    with np.errstate(divide='ignore', invalid='ignore'):
        y = 1.0 / z
    return np.where(np.abs(z) < EPSILON, LARGE_ADMITTANCE + 0j, y)[()]
