"""
Solid mesh export of a bore for CAD/CAM.

Builds the tube body and a set of cutter cylinders (one per open tone hole
plus the mouth hole) as a Wavefront OBJ text. The cutters are separate
groups intended for a boolean subtraction in the CAD tool.
"""

from pathlib import Path
from typing import Union
import math

from .bore import Bore

TUBE_SEGMENTS = 64
HOLE_SEGMENTS = 32
HEAD_EXTENSION = 5.0       # Tube extends past the embouchure to the stopper (cm)
CUTTER_MARGIN = 0.5        # Cutter overshoot beyond each wall surface (cm)
MOUTH_HOLE_RADIUS = 0.4    # cm


class Mesh:
    """Vertex list plus faces collected under named groups."""

    def __init__(self):
        self.vertices: list[tuple[float, float, float]] = []
        self.groups: list[tuple[str, list[list[int]]]] = [("default", [])]

    @property
    def current_group(self) -> str:
        return self.groups[-1][0]

    def set_group(self, name: str) -> None:
        if name != self.current_group:
            self.groups.append((name, []))

    def add_vertex(self, x: float, y: float, z: float) -> int:
        """Append a vertex and return its 1-based OBJ index."""
        self.vertices.append((x, y, z))
        return len(self.vertices)

    def add_face(self, indices: list[int]) -> None:
        self.groups[-1][1].append(list(indices))

    def faces(self, group: str) -> list[list[int]]:
        """All faces recorded under *group*."""
        return [f for name, faces in self.groups if name == group for f in faces]

    def to_obj(self) -> str:
        lines = ["# Flute Tuner Export", "o FluteProject"]
        for x, y, z in self.vertices:
            lines.append(f"v {x:.4f} {y:.4f} {z:.4f}")
        for name, faces in self.groups:
            if not faces:
                continue
            lines.append(f"g {name}")
            for face in faces:
                lines.append("f " + " ".join(str(i) for i in face))
        return "\n".join(lines) + "\n"


def _add_ring(mesh: Mesh, x: float, r: float, segments: int) -> list[int]:
    """Ring of vertices around the tube axis (x) at radius r."""
    ring = []
    for i in range(segments):
        theta = 2 * math.pi * i / segments
        ring.append(mesh.add_vertex(x, r * math.cos(theta), r * math.sin(theta)))
    return ring


def _stitch_rings(mesh: Mesh, r1: list[int], r2: list[int], flip: bool) -> None:
    """Join two rings of equal size with quads; *flip* reverses the winding."""
    n = len(r1)
    for i in range(n):
        nxt = (i + 1) % n
        if flip:
            mesh.add_face([r1[i], r1[nxt], r2[nxt], r2[i]])
        else:
            mesh.add_face([r1[i], r2[i], r2[nxt], r1[nxt]])


def _add_cutter(mesh: Mesh, x: float, radius: float, y_start: float, y_end: float,
                segments: int = HOLE_SEGMENTS) -> None:
    """Closed cylinder along y centred on (x, z=0), with n-gon caps."""
    def ring(y):
        return [
            mesh.add_vertex(x + radius * math.cos(2 * math.pi * j / segments), y,
                            radius * math.sin(2 * math.pi * j / segments))
            for j in range(segments)
        ]

    bottom = ring(y_start)
    top = ring(y_end)
    _stitch_rings(mesh, bottom, top, flip=False)
    mesh.add_face(bottom[::-1])
    mesh.add_face(top)


def generate_flute_mesh(bore: Bore) -> Mesh:
    """
    Build the export mesh for a bore.

    Groups:
        TubeBody: inner and outer walls from x = -5 cm to the foot, with
            both end rims
        HoleCutters: one capped cylinder per open hole, long enough to
            pass through the wall
        MouthHoleCutter: embouchure cutter at x = 0
    """
    mesh = Mesh()
    r_inner = bore.bore_radius
    r_outer = bore.outer_radius

    mesh.set_group("TubeBody")
    head_in = _add_ring(mesh, -HEAD_EXTENSION, r_inner, TUBE_SEGMENTS)
    head_out = _add_ring(mesh, -HEAD_EXTENSION, r_outer, TUBE_SEGMENTS)
    foot_in = _add_ring(mesh, bore.length, r_inner, TUBE_SEGMENTS)
    foot_out = _add_ring(mesh, bore.length, r_outer, TUBE_SEGMENTS)

    _stitch_rings(mesh, head_out, foot_out, flip=True)    # outer wall
    _stitch_rings(mesh, head_in, foot_in, flip=False)     # inner wall
    _stitch_rings(mesh, head_out, head_in, flip=False)    # head rim
    _stitch_rings(mesh, foot_out, foot_in, flip=True)     # foot rim

    y_start = r_inner - CUTTER_MARGIN
    y_end = r_outer + CUTTER_MARGIN

    mesh.set_group("HoleCutters")
    for hole in bore.open_holes():
        _add_cutter(mesh, hole.position, hole.radius, y_start, y_end)

    mesh.set_group("MouthHoleCutter")
    _add_cutter(mesh, 0.0, MOUTH_HOLE_RADIUS, y_start, y_end)

    return mesh


def write_obj(bore: Bore, path: Union[str, Path]) -> Path:
    """Write the OBJ export of *bore* to *path* and return the path."""
    path = Path(path)
    path.write_text(generate_flute_mesh(bore).to_obj())
    return path
