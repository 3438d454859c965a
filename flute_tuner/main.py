#!/usr/bin/env python3
"""
Flute Tuner - CLI Interface

Predict the pitch of a flute bore, place tone holes for target notes, and
export the bore as a mesh.
"""

import argparse
import sys

import numpy as np

from .bore import Bore, Hole, create_bore
from .engine import FluteEngine
from .network import impedance_spectrum
from .mesh import write_obj
from .optimizer import (
    note_to_frequency, frequency_to_note, design_scale, fingering_pitches
)
from .presets import get_preset, list_presets, PRESETS


def parse_hole(text: str) -> Hole:
    """Parse 'POS:RAD' or 'POS:RAD:open|closed' into a sanitised Hole."""
    parts = text.split(':')
    if len(parts) not in (2, 3):
        raise argparse.ArgumentTypeError(
            f"Hole must be POS:RAD[:open|closed], got '{text}'")
    try:
        position, radius = float(parts[0]), float(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid hole numbers in '{text}'") from None

    is_open = True
    if len(parts) == 3:
        state = parts[2].lower()
        if state not in ('open', 'closed'):
            raise argparse.ArgumentTypeError(f"Hole state must be open or closed, got '{parts[2]}'")
        is_open = state == 'open'
    return Hole.sanitized(position, radius, is_open)


def build_bore(args) -> Bore:
    """Bore from --preset or explicit dimensions, plus any --hole options."""
    if args.preset:
        bore = get_preset(args.preset).build(with_holes=not args.holes)
    else:
        if args.length is None:
            raise SystemExit("error: specify --preset or --length")
        bore = create_bore(args.length, args.bore_radius, args.wall)
    if args.holes:
        bore = bore.copy_with_holes(args.holes)
    return bore


def target_frequency(args) -> float:
    return note_to_frequency(args.note) if args.note else args.frequency


def pitch_command(args):
    """Report the playing frequency of a bore."""
    bore = build_bore(args)
    engine = FluteEngine.from_bore(bore)
    result = engine.solve(args.guess)
    note, cents = frequency_to_note(result.frequency)

    print("\n" + "=" * 60)
    print("PITCH")
    print("=" * 60)
    print(f"Bore: {bore.length:.2f} cm long, radius {bore.bore_radius:.3f} cm, "
          f"wall {bore.wall_thickness:.3f} cm")
    if bore.holes:
        print(f"\n  {'Hole':<6} {'Pos (cm)':>9} {'Radius':>8} {'State':>8}")
        for i, h in enumerate(bore.holes):
            print(f"  {i+1:<6} {h.position:>9.2f} {h.radius:>8.3f} "
                  f"{'open' if h.open else 'closed':>8}")
    print("")
    print(f"Pitch: {result.frequency:.2f} Hz  ({note} {cents:+.1f}¢)")
    print(f"Solver: {result.summary()}")

    if args.fingerings and bore.holes:
        print("\nFINGERINGS (holes opened from the foot):")
        for n_open, f in enumerate(fingering_pitches(bore)):
            name, off = frequency_to_note(f)
            print(f"  {n_open} open: {f:>8.2f} Hz  {name:>4} {off:+6.1f}¢")
    print("=" * 60)


def estimate_command(args):
    """Closed-form hole position for a target note."""
    bore = build_bore(args)
    engine = FluteEngine.from_bore(bore)
    freq = target_frequency(args)
    position = engine.estimate_hole_position(freq, args.hole_radius)

    print(f"\nTarget: {freq:.2f} Hz", end="")
    print(f" ({args.note})" if args.note else "")
    print(f"  Estimated position: {position:.2f} cm from the embouchure "
          f"(hole radius {args.hole_radius} cm)")
    if not 0 < position < bore.length:
        print("  Warning: estimate lies outside the bore")
    else:
        engine.replace_holes(
            [h.position for h in bore.holes] + [position],
            [h.radius for h in bore.holes] + [args.hole_radius],
            [h.open for h in bore.holes] + [True]
        )
        check = engine.calculate_pitch(freq)
        print(f"  Model pitch with hole there: {check:.2f} Hz")


def design_command(args):
    """Place holes for a rising sequence of notes."""
    bore = build_bore(args).copy_with_holes([])
    notes = [n.strip() for n in args.notes.split(',') if n.strip()]
    radii = ([float(r) for r in args.radii.split(',')] if args.radii
             else args.hole_radius)

    print(f"\nDesigning {len(notes)} holes for {', '.join(notes)}...")
    design = design_scale(bore, notes, radii, min_spacing=args.min_spacing,
                          verbose=args.verbose)
    print("\n" + design.summary())

    if args.output:
        path = write_obj(design.bore, args.output)
        print(f"\nMesh written to {path}")


def spectrum_command(args):
    """Input impedance over a frequency range."""
    bore = build_bore(args)
    spectrum = impedance_spectrum(bore, f_min=args.fmin, f_max=args.fmax,
                                  n_points=args.points)

    print(f"\nIm(Z) zero crossings between {args.fmin:.0f} and {args.fmax:.0f} Hz:")
    for f in spectrum.resonances():
        name, cents = frequency_to_note(f)
        print(f"  {f:>8.2f} Hz  {name:>4} {cents:+6.1f}¢")

    if args.plot:
        try:
            plot_spectrum(spectrum)
        except ImportError:
            print("(matplotlib not available for plotting)")


def plot_spectrum(spectrum):
    """Plot |Z| and Im(Z) of an impedance spectrum."""
    import matplotlib.pyplot as plt

    fig, axes = plt.subplots(2, 1, figsize=(12, 8), sharex=True)

    ax1 = axes[0]
    ax1.semilogy(spectrum.frequencies, spectrum.magnitude)
    ax1.set_ylabel('|Z| (CGS acoustic ohms)')
    ax1.set_title('Input Impedance at the Embouchure')
    ax1.grid(True, alpha=0.3)

    ax2 = axes[1]
    ax2.plot(spectrum.frequencies, np.clip(spectrum.reactance, -50, 50))
    ax2.axhline(0, color='black', linewidth=0.5)
    for f in spectrum.resonances():
        ax2.axvline(f, color='red', linestyle='--', alpha=0.5)
    ax2.set_xlabel('Frequency (Hz)')
    ax2.set_ylabel('Im(Z), clipped')
    ax2.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig('impedance_spectrum.png', dpi=150)
    print("\nPlot saved to impedance_spectrum.png")
    plt.show()


def export_command(args):
    """Write the bore mesh as OBJ."""
    bore = build_bore(args)
    path = write_obj(bore, args.output)
    print(f"Mesh written to {path} ({len(bore.open_holes())} hole cutters)")


def presets_command(args):
    """List available presets."""
    print("\nAVAILABLE PRESETS:")
    print("=" * 60)

    seen = set()
    for name, preset in sorted(PRESETS.items()):
        if preset.name not in seen:
            seen.add(preset.name)
            print(f"\n{preset.name}:")
            print(f"  L = {preset.length:.1f} cm, r = {preset.bore_radius:.2f} cm, "
                  f"wall = {preset.wall_thickness:.2f} cm, {len(preset.holes)} holes")
            if preset.description:
                print(f"  {preset.description}")


def add_bore_arguments(parser):
    parser.add_argument('--preset', type=str, choices=list_presets(), help='Bore preset')
    parser.add_argument('--length', type=float, help='Bore length (cm)')
    parser.add_argument('--bore-radius', type=float, default=0.95, help='Bore radius (cm)')
    parser.add_argument('--wall', type=float, default=0.4, help='Wall thickness (cm)')
    parser.add_argument('--hole', dest='holes', type=parse_hole, action='append', default=[],
                        metavar='POS:RAD[:STATE]',
                        help='Tone hole, e.g. 30:0.3 or 30:0.3:closed (repeatable)')


def add_target_arguments(parser):
    parser.add_argument('--note', type=str, help='Target note (e.g., D5, F#5)')
    parser.add_argument('--frequency', type=float, help='Target frequency (Hz)')


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Flute Tuner - transmission-line pitch prediction for flute bores',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Pitch of a plain 60 cm tube
  flute-tuner pitch --length 60 --bore-radius 0.95 --wall 0.4

  # Pitch with an open hole at 30 cm
  flute-tuner pitch --length 60 --hole 30:0.3

  # Where should a hole for A5 go?
  flute-tuner estimate --length 60 --note A5 --hole-radius 0.35

  # Place six holes for a D major scale
  flute-tuner design --preset studio --notes E5,F#5,G5,A5,B5,C#6

  # Impedance curve
  flute-tuner spectrum --preset concert_c --plot

  # Export a mesh for CAD
  flute-tuner export --preset studio --output flute.obj
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    pitch_parser = subparsers.add_parser('pitch', help='Predict playing frequency')
    add_bore_arguments(pitch_parser)
    pitch_parser.add_argument('--guess', type=float, default=0.0,
                              help='Starting frequency (Hz); 0 = automatic')
    pitch_parser.add_argument('--fingerings', action='store_true',
                              help='Also report each fingering (holes opened from the foot)')

    est_parser = subparsers.add_parser('estimate', help='Estimate hole position for a note')
    add_bore_arguments(est_parser)
    add_target_arguments(est_parser)
    est_parser.add_argument('--hole-radius', type=float, default=0.35, help='Hole radius (cm)')

    design_parser = subparsers.add_parser('design', help='Place holes for a scale')
    add_bore_arguments(design_parser)
    design_parser.add_argument('--notes', type=str, required=True,
                               help='Comma-separated rising notes, e.g. E5,F#5,G5')
    design_parser.add_argument('--hole-radius', type=float, default=0.35, help='Hole radius (cm)')
    design_parser.add_argument('--radii', type=str, help='Per-hole radii, comma-separated (cm)')
    design_parser.add_argument('--min-spacing', type=float, default=1.0,
                               help='Minimum distance between holes (cm)')
    design_parser.add_argument('--output', type=str, help='Write the designed bore as OBJ')
    design_parser.add_argument('--verbose', action='store_true', help='Show progress')

    spectrum_parser = subparsers.add_parser('spectrum', help='Input impedance over frequency')
    add_bore_arguments(spectrum_parser)
    spectrum_parser.add_argument('--fmin', type=float, default=20.0, help='Lowest frequency (Hz)')
    spectrum_parser.add_argument('--fmax', type=float, default=3000.0, help='Highest frequency (Hz)')
    spectrum_parser.add_argument('--points', type=int, default=2000, help='Grid points')
    spectrum_parser.add_argument('--plot', action='store_true', help='Generate plots')

    export_parser = subparsers.add_parser('export', help='Export bore mesh as OBJ')
    add_bore_arguments(export_parser)
    export_parser.add_argument('--output', type=str, default='flute.obj', help='Output file')

    subparsers.add_parser('presets', help='List available presets')

    args = parser.parse_args(argv)

    if args.command == 'pitch':
        pitch_command(args)
    elif args.command == 'estimate':
        if not args.note and not args.frequency:
            parser.error("Must specify --note or --frequency")
        estimate_command(args)
    elif args.command == 'design':
        design_command(args)
    elif args.command == 'spectrum':
        spectrum_command(args)
    elif args.command == 'export':
        export_command(args)
    elif args.command == 'presets':
        presets_command(args)
    else:
        parser.print_help()
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
