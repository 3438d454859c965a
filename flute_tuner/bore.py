"""
Geometry definitions for flute bores.

A bore is a cylindrical air column with a set of tone holes drilled through
its wall. Positions are measured in centimetres from the embouchure (the
acoustic origin) towards the foot.
"""

from dataclasses import dataclass, field
import math


DEFAULT_POSITION = 0.0   # cm, substituted for a non-finite hole position
DEFAULT_RADIUS = 0.1     # cm, substituted for a non-finite hole radius


def sanitize_position(position) -> float:
    """Return *position* as a float, or 0.0 cm if it is not finite."""
    position = float(position)
    return position if math.isfinite(position) else DEFAULT_POSITION


def sanitize_radius(radius) -> float:
    """Return *radius* as a float, or 0.1 cm if it is not finite."""
    radius = float(radius)
    return radius if math.isfinite(radius) else DEFAULT_RADIUS


@dataclass(frozen=True)
class Hole:
    """
    A single tone hole.

    Holes are plain values: two holes with the same fields are
    interchangeable. Open holes radiate and shorten the sounding column;
    closed holes behave as a small trapped volume of air.
    """
    position: float        # Distance from embouchure (cm)
    radius: float          # Hole radius (cm)
    open: bool = True

    @classmethod
    def sanitized(cls, position, radius, open=True) -> 'Hole':
        """Build a hole, replacing non-finite numbers with safe defaults."""
        return cls(
            position=sanitize_position(position),
            radius=sanitize_radius(radius),
            open=bool(open)
        )

    @property
    def area(self) -> float:
        """Cross-sectional area of the hole (cm^2)."""
        return math.pi * self.radius * self.radius


@dataclass
class Bore:
    """
    Defines the geometry of a flute bore.

    The stored hole list keeps the order the caller supplied. Acoustic
    calculations never sort it; they work on :meth:`traversal_order`.
    """
    length: float              # Physical length, embouchure to foot (cm)
    bore_radius: float         # Inner radius (cm)
    wall_thickness: float      # Wall thickness (cm)
    holes: list[Hole] = field(default_factory=list)
    cork_position: float = 1.7            # Embouchure centre to stopper (cm)
    embouchure_hole_radius: float = 0.5   # cm
    embouchure_chimney: float = 0.5       # Lip-plate height (cm)

    @property
    def bore_area(self) -> float:
        """Cross-sectional area of the bore (cm^2)."""
        return math.pi * self.bore_radius * self.bore_radius

    @property
    def outer_radius(self) -> float:
        return self.bore_radius + self.wall_thickness

    def open_holes(self) -> list[Hole]:
        """Open holes, in stored order."""
        return [h for h in self.holes if h.open]

    def traversal_order(self) -> tuple[Hole, ...]:
        """
        Snapshot of the holes sorted foot-to-embouchure (decreasing position).

        Always a fresh tuple, so the caller-visible order of ``holes`` is
        untouched by any calculation that walks the bore.
        """
        return tuple(sorted(self.holes, key=lambda h: h.position, reverse=True))

    def copy_with_holes(self, holes: list[Hole]) -> 'Bore':
        """Create a copy of this bore with a different set of holes."""
        return Bore(
            length=self.length,
            bore_radius=self.bore_radius,
            wall_thickness=self.wall_thickness,
            holes=list(holes),
            cork_position=self.cork_position,
            embouchure_hole_radius=self.embouchure_hole_radius,
            embouchure_chimney=self.embouchure_chimney
        )


def create_bore(
    length_cm: float,
    bore_radius_cm: float,
    wall_thickness_cm: float
) -> Bore:
    """
    Create a bore with no holes and the default embouchure joint.

    Args:
        length_cm: Physical length from the embouchure to the foot
        bore_radius_cm: Inner radius of the tube
        wall_thickness_cm: Wall thickness (sets tone-hole chimney depth)

    Returns:
        Bore instance
    """
    return Bore(
        length=float(length_cm),
        bore_radius=float(bore_radius_cm),
        wall_thickness=float(wall_thickness_cm)
    )


def add_hole(
    bore: Bore,
    position_cm: float,
    radius_cm: float,
    open: bool = True
) -> Bore:
    """
    Add a hole to a bore.

    Returns:
        New Bore with the hole appended after the existing ones
    """
    return bore.copy_with_holes(
        bore.holes + [Hole.sanitized(position_cm, radius_cm, open)]
    )
