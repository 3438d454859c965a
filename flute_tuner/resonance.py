"""
Resonance solver: the playing frequency of a bore near a guess.

A bounded secant search on the reactance (Im Z) of the embouchure input
impedance. The iteration count is hard-limited, so a call always returns
quickly, and out-of-band steps are damped back towards the guess instead
of being accepted.
"""

from dataclasses import dataclass
from typing import Optional
import math

from .bore import Bore
from .impedance import SPEED_OF_SOUND, EPSILON, HOLE_END_CORRECTION
from .network import reactance


@dataclass
class SolverConfig:
    """Tuning constants for the secant search."""
    max_iterations: int = 20
    initial_step_hz: float = 10.0      # f_prev = guess - initial_step_hz
    f_min: float = 20.0                # Admissible band (Hz)
    f_max: float = 5000.0
    tolerance_hz: float = 0.01         # Stop when successive estimates agree
    flat_threshold: float = 1e-6       # Stop when the secant slope vanishes


DEFAULT_CONFIG = SolverConfig()


@dataclass
class ResonanceResult:
    """Outcome of a resonance search."""
    frequency: float           # Final estimate (Hz)
    guess: float               # Starting frequency (Hz)
    converged: bool            # Successive estimates agreed within tolerance
    iterations: int
    message: str = ""

    def summary(self) -> str:
        status = "converged" if self.converged else "not converged"
        line = (f"{self.frequency:.2f} Hz ({status} after {self.iterations} "
                f"iterations, guess {self.guess:.2f} Hz)")
        if self.message:
            line += f" - {self.message}"
        return line


def hole_end_correction(bore: Bore, hole_radius: float) -> float:
    """
    Low-frequency length correction of an open tone hole:
    C = (A_bore / A_hole) * (t + 1.5 r).

    A hole with no area does not vent the bore; its correction is infinite.
    """
    hole_area = math.pi * hole_radius * hole_radius
    if hole_area < EPSILON:
        return math.inf
    return (bore.bore_area / hole_area) * (bore.wall_thickness
                                           + HOLE_END_CORRECTION * hole_radius)


def default_guess(bore: Bore, config: Optional[SolverConfig] = None) -> float:
    """
    Starting frequency when the caller has none.

    Uses the open hole nearest the embouchure (inside the bore, with a
    non-vanishing area) as the end of the sounding column, lengthened by
    its end correction and capped at the bore length. Without such a hole
    the guess is c / 2L.
    """
    config = config or DEFAULT_CONFIG
    effective = bore.length
    candidates = [h for h in bore.holes
                  if h.open and h.area >= EPSILON and 0 < h.position < bore.length]
    if candidates:
        nearest = min(candidates, key=lambda h: h.position)
        effective = min(bore.length,
                        nearest.position + hole_end_correction(bore, nearest.radius))

    # Keep the guess inside the admissible band for degenerate lengths
    shortest = SPEED_OF_SOUND / (2 * config.f_max)
    if not math.isfinite(effective) or effective < shortest:
        effective = shortest
    return SPEED_OF_SOUND / (2 * effective)


def solve_resonance(
    bore: Bore,
    guess_freq: float,
    config: Optional[SolverConfig] = None,
    verbose: bool = False
) -> ResonanceResult:
    """
    Find the zero of Im(Z) closest to *guess_freq* by the secant method.

    The bore's hole list is copied into a traversal snapshot once; the
    stored order is never touched.

    Args:
        bore: Bore geometry
        guess_freq: Starting frequency (Hz), expected > 0
        config: Solver constants (defaults match the interactive engine)
        verbose: Print each secant step

    Returns:
        ResonanceResult; ``frequency`` is the last estimate whether or not
        the search converged.
    """
    config = config or DEFAULT_CONFIG
    holes = bore.traversal_order()

    f_curr = guess_freq
    f_prev = guess_freq - config.initial_step_hz
    x_prev = reactance(bore, f_prev, holes)

    converged = False
    message = "iteration budget exhausted"
    iteration = 0

    for iteration in range(1, config.max_iterations + 1):
        x_curr = reactance(bore, f_curr, holes)

        if not abs(x_curr - x_prev) >= config.flat_threshold:
            message = "reactance too flat to continue"
            iteration -= 1
            break

        f_next = f_curr - x_curr * (f_curr - f_prev) / (x_curr - x_prev)

        f_prev, x_prev = f_curr, x_curr
        if config.f_min <= f_next <= config.f_max:
            f_curr = f_next
        else:
            # Divergence guard: pull back halfway towards the guess
            f_curr = (f_curr + guess_freq) / 2

        if verbose:
            print(f"  [{iteration}] f={f_curr:.3f} Hz  Im(Z)={x_curr:+.4e}")

        if abs(f_curr - f_prev) < config.tolerance_hz:
            converged = True
            message = ""
            break

    return ResonanceResult(
        frequency=f_curr,
        guess=guess_freq,
        converged=converged,
        iterations=iteration,
        message=message
    )


def find_resonance(
    bore: Bore,
    guess_freq: float,
    config: Optional[SolverConfig] = None
) -> float:
    """
    Playing frequency (Hz) of *bore* near *guess_freq*.

    Always returns a number: the last estimate of the secant search.
    """
    return solve_resonance(bore, guess_freq, config).frequency
