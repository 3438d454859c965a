"""
Hole placement for flute tuning.

Places tone holes so that each fingering sounds a target note, starting
from the closed-form end-correction estimate and refining it against the
full transmission-line model.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Union
import warnings

import numpy as np
from scipy.optimize import brentq, minimize_scalar

from .bore import Bore, Hole
from .impedance import SPEED_OF_SOUND
from .resonance import find_resonance, default_guess, hole_end_correction


# =============================================================================
# Musical note utilities
# =============================================================================

NOTE_NAMES = ['C', 'C#', 'D', 'D#', 'E', 'F', 'F#', 'G', 'G#', 'A', 'A#', 'B']

def note_to_frequency(note: str) -> float:
    """
    Convert note name to frequency.

    Examples: 'A4' = 440 Hz, 'C4' = 261.63 Hz, 'F#3' = 185 Hz, 'Bb4' = 466.16 Hz
    """
    note = note.strip()
    if len(note) < 2:
        raise ValueError(f"Invalid note name: '{note}'")

    letter = note[0].upper()
    rest = note[1:]
    if letter not in NOTE_NAMES:
        raise ValueError(f"Invalid note name: '{note}'")

    idx = NOTE_NAMES.index(letter)
    if rest[0] == '#':
        idx += 1
        rest = rest[1:]
    elif rest[0] == 'b':
        idx -= 1
        rest = rest[1:]

    try:
        octave = int(rest)
    except ValueError:
        raise ValueError(f"Invalid note name: '{note}'") from None

    # Semitones from A4
    semitones = idx - NOTE_NAMES.index('A') + (octave - 4) * 12
    return 440.0 * (2 ** (semitones / 12))


def frequency_to_note(freq: float) -> tuple[str, float]:
    """
    Convert frequency to nearest note name and cents deviation.

    Returns:
        (note_name, cents_off) - e.g. ('A4', -5.2)
    """
    if not freq > 0:
        raise ValueError(f"Frequency must be positive, got {freq}")

    semitones = 12 * np.log2(freq / 440.0)
    semitones_rounded = int(round(semitones))
    cents = float((semitones - semitones_rounded) * 100)

    total_idx = NOTE_NAMES.index('A') + semitones_rounded
    octave = 4 + total_idx // 12
    note_name = f"{NOTE_NAMES[total_idx % 12]}{octave}"
    return note_name, cents


def cents_between(freq: float, reference: float) -> float:
    """Interval from *reference* to *freq* in cents."""
    return float(1200 * np.log2(freq / reference))


def _as_frequency(note: Union[str, float]) -> float:
    return note_to_frequency(note) if isinstance(note, str) else float(note)


# =============================================================================
# Single-hole placement
# =============================================================================

def estimate_hole_position(bore: Bore, target_freq: float, hole_radius: float) -> float:
    """
    Closed-form position (cm) of an open hole sounding *target_freq*.

    The sounding length c / 2f is shortened by the hole's end correction
    C = (A_bore / A_hole) (t + 1.5 r). Ignores the embouchure and the
    bore below the hole, so it is a starting point rather than an answer.
    """
    effective_length = SPEED_OF_SOUND / (2 * target_freq)
    return effective_length - hole_end_correction(bore, hole_radius)


@dataclass
class HolePlacement:
    """A hole position found for one target frequency."""
    position: float            # cm from embouchure
    radius: float              # cm
    target_frequency: float    # Hz
    achieved_frequency: float  # Hz, from the resonance solver
    estimate: float            # Closed-form starting estimate (cm)

    @property
    def cents_error(self) -> float:
        return cents_between(self.achieved_frequency, self.target_frequency)


def refine_hole_position(
    bore: Bore,
    target_freq: float,
    hole_radius: float,
    lower: Optional[float] = None,
    upper: Optional[float] = None,
    xtol: float = 0.01
) -> HolePlacement:
    """
    Position an extra open hole so the bore sounds *target_freq*.

    The existing holes of *bore* are kept as they are. The pitch falls as
    the hole moves towards the foot, so the position is bracketed between
    *lower* and *upper* and found with Brent's method. If the bracket does
    not contain the target, the closest achievable position is returned
    and a warning is issued.

    Args:
        bore: Bore with any holes already placed
        target_freq: Desired playing frequency (Hz)
        hole_radius: Radius of the new hole (cm)
        lower: Smallest allowed position (default: the cork distance)
        upper: Largest allowed position (default: 1 cm short of the foot)
        xtol: Position tolerance (cm)

    Returns:
        HolePlacement
    """
    if not target_freq > 0:
        raise ValueError(f"Target frequency must be positive, got {target_freq}")
    if hole_radius <= 0:
        raise ValueError(f"Hole radius must be positive, got {hole_radius}")

    lower = bore.cork_position if lower is None else lower
    upper = bore.length - 1.0 if upper is None else upper
    if not lower < upper:
        raise ValueError(f"Empty search interval [{lower}, {upper}] cm")

    estimate = estimate_hole_position(bore, target_freq, hole_radius)

    def pitch_at(position):
        trial = bore.copy_with_holes(bore.holes + [Hole(position, hole_radius, True)])
        return find_resonance(trial, target_freq)

    def error_cents(position):
        return cents_between(pitch_at(position), target_freq)

    e_lo = error_cents(lower)
    e_hi = error_cents(upper)

    if e_lo * e_hi < 0:
        position = brentq(error_cents, lower, upper, xtol=xtol)
    else:
        result = minimize_scalar(
            lambda p: error_cents(p) ** 2,
            bounds=(lower, upper), method='bounded', options={'xatol': xtol}
        )
        position = float(result.x)
        warnings.warn(
            f"{target_freq:.2f} Hz is not reachable with a {hole_radius} cm hole "
            f"between {lower:.1f} and {upper:.1f} cm; using closest position "
            f"{position:.2f} cm",
            stacklevel=2
        )

    return HolePlacement(
        position=float(position),
        radius=hole_radius,
        target_frequency=target_freq,
        achieved_frequency=pitch_at(position),
        estimate=estimate
    )


# =============================================================================
# Scale design
# =============================================================================

@dataclass
class ScaleDesign:
    """Holes placed for a rising sequence of notes."""
    bore: Bore                          # Bore with every designed hole (open)
    fundamental: float                  # All holes closed (Hz)
    placements: list[HolePlacement] = field(default_factory=list)

    def summary(self) -> str:
        """Generate a human-readable summary."""
        lines = []
        lines.append("=" * 60)
        lines.append("SCALE DESIGN")
        lines.append("=" * 60)
        lines.append(f"Bore: {self.bore.length:.1f} cm x {self.bore.bore_radius:.2f} cm "
                     f"radius, wall {self.bore.wall_thickness:.2f} cm")
        note, cents = frequency_to_note(self.fundamental)
        lines.append(f"All closed: {self.fundamental:.2f} Hz ({note} {cents:+.0f}¢)")
        lines.append("")
        lines.append(f"  {'Hole':<5} {'Pos (cm)':>9} {'Est (cm)':>9} {'Target':>9} "
                     f"{'Achieved':>9} {'Error':>7}")
        for i, p in enumerate(self.placements):
            lines.append(f"  {i+1:<5} {p.position:>9.2f} {p.estimate:>9.2f} "
                         f"{p.target_frequency:>9.2f} {p.achieved_frequency:>9.2f} "
                         f"{p.cents_error:>+6.1f}¢")
        lines.append("=" * 60)
        return "\n".join(lines)


def fingering_pitches(bore: Bore) -> np.ndarray:
    """
    Pitch of each standard fingering, lowest first.

    Fingering 0 has every hole closed; fingering n opens the n holes
    nearest the foot.
    """
    by_position = sorted(bore.holes, key=lambda h: h.position, reverse=True)
    pitches = []
    for n_open in range(len(by_position) + 1):
        holes = [Hole(h.position, h.radius, i < n_open) for i, h in enumerate(by_position)]
        trial = bore.copy_with_holes(holes)
        pitches.append(find_resonance(trial, default_guess(trial)))
    return np.array(pitches)


def design_scale(
    bore: Bore,
    notes: Sequence[Union[str, float]],
    hole_radius: Union[float, Sequence[float]] = 0.35,
    min_spacing: float = 1.0,
    verbose: bool = False
) -> ScaleDesign:
    """
    Place one hole per note so that opening holes from the foot upwards
    plays the notes in order.

    Holes already on *bore* are ignored. Each new hole is searched between
    the cork and the previously placed hole (less *min_spacing*), with all
    previously placed holes open.

    Args:
        bore: Plain bore (sets length, radius, wall and embouchure joint)
        notes: Rising sequence of note names or frequencies (Hz)
        hole_radius: One radius for every hole, or one per note (cm)
        min_spacing: Minimum centre-to-centre distance between holes (cm)
        verbose: Print progress

    Returns:
        ScaleDesign
    """
    freqs = [_as_frequency(n) for n in notes]
    if any(b <= a for a, b in zip(freqs, freqs[1:])):
        raise ValueError("Notes must be strictly rising")

    if np.ndim(hole_radius) == 0:
        radii = [float(hole_radius)] * len(freqs)
    else:
        radii = [float(r) for r in hole_radius]
        if len(radii) != len(freqs):
            raise ValueError(f"Got {len(radii)} radii for {len(freqs)} notes")

    current = bore.copy_with_holes([])
    fundamental = find_resonance(current, SPEED_OF_SOUND / (2 * bore.length))
    if verbose:
        note, cents = frequency_to_note(fundamental)
        print(f"All holes closed: {fundamental:.2f} Hz ({note} {cents:+.1f}¢)")

    placements = []
    upper = bore.length - min_spacing
    for i, (freq, radius) in enumerate(zip(freqs, radii)):
        if freq <= fundamental:
            raise ValueError(
                f"Note {i+1} ({freq:.2f} Hz) is not above the closed-bore "
                f"pitch ({fundamental:.2f} Hz)"
            )
        placement = refine_hole_position(current, freq, radius, upper=upper)
        placements.append(placement)
        current = current.copy_with_holes(
            current.holes + [Hole(placement.position, radius, True)]
        )
        upper = placement.position - min_spacing

        if verbose:
            print(f"  Hole {i+1}: {placement.position:.2f} cm "
                  f"(estimate {placement.estimate:.2f} cm) -> "
                  f"{placement.achieved_frequency:.2f} Hz ({placement.cents_error:+.1f}¢)")

        if upper <= bore.cork_position and i < len(freqs) - 1:
            raise ValueError(f"No room left for hole {i+2}; bore is too short for the scale")

    return ScaleDesign(bore=current, fundamental=fundamental, placements=placements)
