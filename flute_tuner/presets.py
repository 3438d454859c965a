"""
Bore presets for common transverse flutes.

Dimensions are in centimetres, measured from the embouchure centre. Hole
layouts, where given, are (position, radius) pairs listed from the
embouchure towards the foot; every preset hole starts open.
"""

from dataclasses import dataclass
from typing import Optional

from .bore import Bore, Hole


@dataclass(frozen=True)
class BorePreset:
    """Named bore dimensions plus an optional default hole layout."""
    name: str
    length: float              # Embouchure to foot (cm)
    bore_radius: float         # cm
    wall_thickness: float      # cm
    cork_position: float = 1.7
    embouchure_hole_radius: float = 0.5
    embouchure_chimney: float = 0.5
    holes: tuple[tuple[float, float], ...] = ()
    description: str = ""

    def build(self, with_holes: bool = True) -> Bore:
        """Create a fresh Bore from this preset."""
        holes = [Hole(p, r, True) for p, r in self.holes] if with_holes else []
        return Bore(
            length=self.length,
            bore_radius=self.bore_radius,
            wall_thickness=self.wall_thickness,
            holes=holes,
            cork_position=self.cork_position,
            embouchure_hole_radius=self.embouchure_hole_radius,
            embouchure_chimney=self.embouchure_chimney
        )


# =============================================================================
# Wooden flutes
# =============================================================================

STUDIO = BorePreset(
    name="studio",
    length=60.0,
    bore_radius=0.95,
    wall_thickness=0.4,
    holes=((25.0, 0.35), (28.0, 0.35), (32.0, 0.35),
           (36.0, 0.35), (40.0, 0.4), (45.0, 0.4)),
    description="60 cm wooden tube with six holes, roughly a D major scale"
)

CONCERT_C = BorePreset(
    name="concert_c",
    length=66.1,
    bore_radius=0.95,
    wall_thickness=0.4,
    description="Plain tube sounding near C4 (half-wave length for 261 Hz)"
)

BANSURI = BorePreset(
    name="bansuri",
    length=58.0,
    bore_radius=1.1,
    wall_thickness=0.35,
    cork_position=2.0,
    embouchure_hole_radius=0.5,
    embouchure_chimney=0.35,
    description="Bamboo bansuri; the embouchure chimney is the bamboo wall"
)

FIFE = BorePreset(
    name="fife",
    length=38.0,
    bore_radius=0.65,
    wall_thickness=0.3,
    cork_position=1.2,
    embouchure_hole_radius=0.4,
    embouchure_chimney=0.3,
    description="Six-hole military fife in Bb"
)

# =============================================================================
# Metal flutes
# =============================================================================

PICCOLO = BorePreset(
    name="piccolo",
    length=30.0,
    bore_radius=0.55,
    wall_thickness=0.03,
    cork_position=0.9,
    embouchure_hole_radius=0.3,
    embouchure_chimney=0.35,
    description="Cylindrical-bore piccolo, thin silver wall"
)

ALTO_G = BorePreset(
    name="alto_g",
    length=84.0,
    bore_radius=1.3,
    wall_thickness=0.04,
    cork_position=2.3,
    embouchure_hole_radius=0.6,
    embouchure_chimney=0.55,
    description="Alto flute in G, thin silver wall"
)


# =============================================================================
# Preset registry
# =============================================================================

PRESETS = {
    "studio": STUDIO,
    "concert_c": CONCERT_C,
    "concert": CONCERT_C,
    "bansuri": BANSURI,
    "fife": FIFE,
    "piccolo": PICCOLO,
    "alto_g": ALTO_G,
    "alto": ALTO_G,
}


def get_preset(name: str) -> BorePreset:
    """Get preset by name (case-insensitive)."""
    key = name.lower().replace(" ", "_").replace("-", "_")
    if key not in PRESETS:
        available = ", ".join(list_presets())
        raise ValueError(f"Unknown preset '{name}'. Available: {available}")
    return PRESETS[key]


def list_presets() -> list[str]:
    """List all available preset names."""
    return sorted(set(PRESETS.keys()))


def custom_bore(
    length: float,
    bore_radius: float,
    wall_thickness: Optional[float] = None,
    cork_position: Optional[float] = None
) -> Bore:
    """
    Create a bore from partial dimensions.

    Args:
        length: Embouchure to foot (cm)
        bore_radius: Inner radius (cm)
        wall_thickness: Defaults to 0.4 cm (a wooden flute)
        cork_position: Defaults to the standard 1.7 cm

    Returns:
        Bore instance with no holes
    """
    bore = Bore(length=length, bore_radius=bore_radius,
                wall_thickness=0.4 if wall_thickness is None else wall_thickness)
    if cork_position is not None:
        bore.cork_position = cork_position
    return bore
