"""
Example: Predict the pitch of a flute bore and place holes for a scale.

This file walks through every knob the engine and the hole designer expose.
Adjust the values below to suit your tube, wall and embouchure.
"""

import logging

from flute_tuner import (
    FluteEngine, SolverConfig, get_preset, design_scale, fingering_pitches,
    frequency_to_note, write_obj
)

# =========================================================================
# Logging (optional)
# =========================================================================
# The engine logs hole inputs it had to sanitise (NaN/inf) at DEBUG level.

logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")


# =========================================================================
# Bore
# =========================================================================
# Built-in presets: 'studio', 'concert_c', 'bansuri', 'fife',
#                   'piccolo', 'alto_g'
# All dimensions are in cm, measured from the embouchure centre.

bore = get_preset('studio').build(with_holes=False)
bore.cork_position = 1.7            # Embouchure to stopper (cm)
bore.embouchure_hole_radius = 0.5   # Mouth hole radius (cm)
bore.embouchure_chimney = 0.5       # Lip-plate / wall depth at the mouth hole (cm)


# =========================================================================
# Solver
# =========================================================================
# The secant search stops after max_iterations regardless of convergence.
# Steps that leave [f_min, f_max] are pulled back halfway to the guess.

config = SolverConfig(
    max_iterations=20,        # Hard iteration cap
    initial_step_hz=10.0,     # Second secant point = guess - step
    f_min=20.0,               # Admissible band (Hz)
    f_max=5000.0,
    tolerance_hz=0.01         # Successive estimates this close = converged
)


# =========================================================================
# Run
# =========================================================================

if __name__ == '__main__':
    engine = FluteEngine.from_bore(bore, config)

    # -- All holes closed --
    result = engine.solve(0)         # 0 = automatic guess from the bore length
    note, cents = frequency_to_note(result.frequency)
    print(f"Plain tube: {result.summary()}  ({note} {cents:+.1f}¢)")

    # -- A single open hole --
    # Arrays are parallel: positions, radii, open flags.
    engine.replace_holes([30.0], [0.3], [True])
    print(f"Hole at 30 cm: {engine.calculate_pitch(0):.2f} Hz")

    # -- Dragging a hole --
    # update_hole keeps every other hole where it is.
    for position in (28.0, 26.0, 24.0):
        engine.update_hole(0, position, 0.3, True)
        print(f"  hole at {position:.0f} cm -> {engine.calculate_pitch(0):.2f} Hz")

    # -- Closed-form estimate vs the model --
    target = 587.33                  # D5
    estimate = engine.estimate_hole_position(target, 0.35)
    print(f"\nD5 estimate: {estimate:.2f} cm from the embouchure")


    # =========================================================================
    # Scale design
    # =========================================================================
    # Holes are placed foot-first; each search runs between the cork and the
    # previous hole less min_spacing, with the earlier holes open.

    design = design_scale(
        bore,
        ['E5', 'F#5', 'G5', 'A5'],   # Rising notes (names or Hz)
        hole_radius=0.35,            # One radius, or a list with one per note
        min_spacing=1.5,             # Minimum hole spacing (cm)
        verbose=True
    )
    print(design.summary())

    # -- Check every fingering of the finished design --
    for n_open, f in enumerate(fingering_pitches(design.bore)):
        name, off = frequency_to_note(f)
        print(f"  {n_open} open: {f:8.2f} Hz  {name:>4} {off:+6.1f}¢")

    # -- Mesh for CAD: tube body plus one cutter per open hole --
    path = write_obj(design.bore, 'flute.obj')
    print(f"\nMesh written to {path}")
