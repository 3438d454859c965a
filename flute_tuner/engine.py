"""
Host-facing engine: one bore per design session.

Thin layer over the bore model and the resonance solver used by an
interactive editor. Hole edits arrive as parallel arrays or single-index
updates; non-finite numbers are replaced rather than rejected so that
transiently invalid input while dragging never interrupts the session.
"""

from typing import Optional, Sequence
import logging
import math

from .bore import Bore, Hole, create_bore
from .impedance import EPSILON
from .resonance import SolverConfig, ResonanceResult, solve_resonance, default_guess
from .mesh import generate_flute_mesh
from .optimizer import frequency_to_note, estimate_hole_position as _estimate_hole_position

logger = logging.getLogger(__name__)


class InputError(ValueError):
    """Invalid input at the engine boundary."""


class LengthMismatchError(InputError):
    """Parallel hole arrays of unequal length."""


class HoleIndexError(InputError, IndexError):
    """Hole index outside the current hole collection."""


class FluteEngine:
    """
    Pitch engine for a single bore.

    Example::

        engine = FluteEngine(60.0, 0.95, 0.4)
        engine.replace_holes([30.0], [0.3], [True])
        engine.calculate_pitch(0)     # default guess
    """

    def __init__(self, length: float, bore_radius: float, wall_thickness: float,
                 config: Optional[SolverConfig] = None):
        self._bore = create_bore(length, bore_radius, wall_thickness)
        self.config = config

    @classmethod
    def from_bore(cls, bore: Bore, config: Optional[SolverConfig] = None) -> 'FluteEngine':
        """Wrap an existing bore (its holes are copied and sanitised)."""
        engine = cls(bore.length, bore.bore_radius, bore.wall_thickness, config)
        engine._bore = bore.copy_with_holes([])
        engine.replace_holes([h.position for h in bore.holes],
                             [h.radius for h in bore.holes],
                             [h.open for h in bore.holes])
        return engine

    @property
    def bore(self) -> Bore:
        return self._bore

    @property
    def holes(self) -> tuple[Hole, ...]:
        """Holes in the order they were supplied."""
        return tuple(self._bore.holes)

    def replace_holes(
        self,
        positions: Sequence[float],
        radii: Sequence[float],
        open_flags: Sequence[bool]
    ) -> None:
        """
        Replace every hole at once.

        Raises:
            LengthMismatchError: if the three arrays differ in length
        """
        n = len(positions)
        if len(radii) != n or len(open_flags) != n:
            raise LengthMismatchError(
                f"Hole arrays differ in length: {n} positions, "
                f"{len(radii)} radii, {len(open_flags)} open flags"
            )

        holes = []
        for position, radius, is_open in zip(positions, radii, open_flags):
            hole = Hole.sanitized(position, radius, is_open)
            self._log_substitution(position, radius, hole)
            holes.append(hole)
        self._bore.holes = holes

    def update_hole(self, index: int, position: float, radius: float, open: bool) -> None:
        """
        Replace the hole at *index*, keeping every other hole in place.

        Raises:
            HoleIndexError: if *index* is outside ``0 .. len(holes) - 1``
        """
        n = len(self._bore.holes)
        if not 0 <= index < n:
            raise HoleIndexError(f"Hole index {index} out of range for {n} holes")

        hole = Hole.sanitized(position, radius, open)
        self._log_substitution(position, radius, hole)
        self._bore.holes[index] = hole

    def solve(self, guess_hz: float = 0.0) -> ResonanceResult:
        """Run the resonance search and report convergence."""
        if not math.isfinite(guess_hz) or guess_hz <= 0:
            guess_hz = default_guess(self._bore, self.config)
        return solve_resonance(self._bore, guess_hz, self.config)

    def calculate_pitch(self, guess_hz: float = 0.0) -> float:
        """
        Playing frequency (Hz) near *guess_hz*.

        A guess of zero (or below, or non-finite) is replaced by a default
        derived from the nearest open hole or the bore length.
        """
        return self.solve(guess_hz).frequency

    def estimate_hole_position(self, target_freq: float, hole_radius: float) -> float:
        """
        Approximate position (cm) of an open hole sounding *target_freq*.

        Half-wave length c / 2f minus the hole's end correction. Not exact;
        see :func:`flute_tuner.optimizer.refine_hole_position` for a
        solver-based placement.
        """
        if not target_freq > 0:
            raise InputError(f"Target frequency must be positive, got {target_freq}")
        if not math.isfinite(hole_radius) or Hole(0.0, hole_radius).area < EPSILON:
            raise InputError(f"Hole radius must be non-zero and finite, got {hole_radius}")

        return _estimate_hole_position(self._bore, target_freq, hole_radius)

    def note_info(self, pitch_hz: Optional[float] = None) -> tuple[str, float]:
        """Nearest note name and cents deviation for a pitch (default: current)."""
        if pitch_hz is None:
            pitch_hz = self.calculate_pitch()
        return frequency_to_note(pitch_hz)

    def export_obj(self) -> str:
        """Solid-mesh export of the current bore as OBJ text."""
        return generate_flute_mesh(self._bore).to_obj()

    @staticmethod
    def _log_substitution(position, radius, hole: Hole) -> None:
        if hole.position != position or hole.radius != radius:
            logger.debug("Sanitised hole input (%r, %r) -> (%r, %r)",
                         position, radius, hole.position, hole.radius)
