"""
Flute Tuner

Transmission-line (TMM) pitch prediction for cylindrical flute bores with
tone holes. Fast enough to recompute the playing frequency on every edit
of an interactive design tool.

Quick start:
    from flute_tuner import FluteEngine

    engine = FluteEngine(60.0, 0.95, 0.4)       # length, bore radius, wall (cm)
    engine.replace_holes([30.0], [0.3], [True])
    print(engine.calculate_pitch(0))             # 0 = automatic guess

    # Place holes for a scale
    from flute_tuner import get_preset, design_scale
    bore = get_preset('studio').build(with_holes=False)
    design = design_scale(bore, ['E5', 'F#5', 'G5', 'A5'])
    print(design.summary())
"""

from .bore import (
    Hole,
    Bore,
    create_bore,
    add_hole,
    sanitize_position,
    sanitize_radius
)

from .presets import (
    BorePreset,
    get_preset,
    list_presets,
    custom_bore,
    STUDIO, CONCERT_C, BANSURI, FIFE, PICCOLO, ALTO_G
)

from .impedance import (
    SPEED_OF_SOUND,
    AIR_DENSITY,
    wavenumber,
    characteristic_impedance,
    transmission_line,
    radiation_impedance,
    tone_hole_impedance
)

from .network import (
    input_impedance,
    impedance_spectrum,
    ImpedanceSpectrum
)

from .resonance import (
    SolverConfig,
    ResonanceResult,
    find_resonance,
    solve_resonance,
    default_guess
)

from .engine import (
    FluteEngine,
    InputError,
    LengthMismatchError,
    HoleIndexError
)

from .mesh import (
    Mesh,
    generate_flute_mesh,
    write_obj
)

from .optimizer import (
    HolePlacement,
    ScaleDesign,
    estimate_hole_position,
    refine_hole_position,
    design_scale,
    fingering_pitches,
    note_to_frequency,
    frequency_to_note
)

__version__ = '0.1.0'

__all__ = [
    # Bore model
    'Hole', 'Bore', 'create_bore', 'add_hole', 'sanitize_position', 'sanitize_radius',

    # Presets
    'BorePreset', 'get_preset', 'list_presets', 'custom_bore',
    'STUDIO', 'CONCERT_C', 'BANSURI', 'FIFE', 'PICCOLO', 'ALTO_G',

    # Acoustics
    'SPEED_OF_SOUND', 'AIR_DENSITY',
    'wavenumber', 'characteristic_impedance', 'transmission_line',
    'radiation_impedance', 'tone_hole_impedance',
    'input_impedance', 'impedance_spectrum', 'ImpedanceSpectrum',

    # Solver
    'SolverConfig', 'ResonanceResult', 'find_resonance', 'solve_resonance',
    'default_guess',

    # Engine
    'FluteEngine', 'InputError', 'LengthMismatchError', 'HoleIndexError',

    # Mesh
    'Mesh', 'generate_flute_mesh', 'write_obj',

    # Design
    'HolePlacement', 'ScaleDesign', 'estimate_hole_position',
    'refine_hole_position', 'design_scale', 'fingering_pitches',
    'note_to_frequency', 'frequency_to_note',
]
