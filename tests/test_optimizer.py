"""
Tests for note utilities and hole placement.
"""

import warnings

import pytest

from flute_tuner import (
    Hole, create_bore,
    note_to_frequency, frequency_to_note, estimate_hole_position,
    refine_hole_position, design_scale, fingering_pitches
)
from flute_tuner.optimizer import cents_between
from flute_tuner.resonance import hole_end_correction


class TestNotes:

    @pytest.mark.parametrize("note,freq", [
        ("A4", 440.0),
        ("C4", 261.63),
        ("Bb4", 466.16),
        ("A#4", 466.16),
        ("F#3", 185.0),
        ("D5", 587.33),
    ])
    def test_note_to_frequency(self, note, freq):
        assert note_to_frequency(note) == pytest.approx(freq, abs=0.01)

    @pytest.mark.parametrize("note", ["", "A", "H4", "A#", "Cx4"])
    def test_invalid_note(self, note):
        with pytest.raises(ValueError):
            note_to_frequency(note)

    def test_frequency_to_note_exact(self):
        assert frequency_to_note(440.0) == ("A4", 0.0)

    def test_frequency_to_note_cents(self):
        name, cents = frequency_to_note(note_to_frequency("C4") * 2 ** (10 / 1200))
        assert name == "C4"
        assert cents == pytest.approx(10.0)

    def test_frequency_to_note_low_octaves(self):
        name, _ = frequency_to_note(32.70)
        assert name == "C1"

    @pytest.mark.parametrize("freq", [0.0, -10.0])
    def test_frequency_to_note_rejects_non_positive(self, freq):
        with pytest.raises(ValueError):
            frequency_to_note(freq)

    def test_cents_between_octave(self):
        assert cents_between(880.0, 440.0) == pytest.approx(1200.0)


class TestEstimate:

    def test_formula(self, plain_bore):
        expected = 34500.0 / 880.0 - hole_end_correction(plain_bore, 0.35)
        assert estimate_hole_position(plain_bore, 440.0, 0.35) == pytest.approx(expected)

    def test_end_correction_value(self, plain_bore):
        # (0.95^2 / 0.35^2) * (0.4 + 1.5 * 0.35)
        assert hole_end_correction(plain_bore, 0.35) == pytest.approx(6.8148, abs=1e-3)

    def test_bigger_hole_sits_further_down(self, plain_bore):
        assert (estimate_hole_position(plain_bore, 440.0, 0.45)
                > estimate_hole_position(plain_bore, 440.0, 0.25))


class TestRefine:

    def test_bracketed_target_is_hit(self, plain_bore):
        placement = refine_hole_position(plain_bore, 335.0, 0.3, lower=43.0, upper=49.0)
        assert 43.0 < placement.position < 49.0
        assert abs(placement.cents_error) < 5.0
        assert placement.radius == 0.3
        assert placement.target_frequency == 335.0

    def test_existing_holes_are_kept(self, plain_bore):
        bore = plain_bore.copy_with_holes([Hole(50.0, 0.3, True)])
        refine_hole_position(bore, 335.0, 0.3, lower=43.0, upper=49.0)
        assert bore.holes == [Hole(50.0, 0.3, True)]

    @pytest.mark.parametrize("kwargs", [
        dict(target_freq=0.0, hole_radius=0.3),
        dict(target_freq=400.0, hole_radius=0.0),
        dict(target_freq=400.0, hole_radius=0.3, lower=30.0, upper=20.0),
    ])
    def test_invalid_arguments(self, plain_bore, kwargs):
        with pytest.raises(ValueError):
            refine_hole_position(plain_bore, **kwargs)


class TestFingerings:

    def test_opening_from_the_foot_rises(self, plain_bore):
        bore = plain_bore.copy_with_holes([Hole(30.0, 0.3), Hole(45.0, 0.3)])
        pitches = fingering_pitches(bore)
        assert len(pitches) == 3
        assert pitches[0] < pitches[1] < pitches[2]

    def test_no_holes(self, plain_bore):
        pitches = fingering_pitches(plain_bore)
        assert len(pitches) == 1
        assert 250.0 < pitches[0] < 320.0


class TestDesignScale:

    def test_notes_must_rise(self, plain_bore):
        with pytest.raises(ValueError, match="rising"):
            design_scale(plain_bore, ["A5", "G5"])

    def test_radii_must_match_notes(self, plain_bore):
        with pytest.raises(ValueError, match="radii"):
            design_scale(plain_bore, ["E5", "F#5"], hole_radius=[0.3, 0.3, 0.3])

    def test_note_below_closed_pitch(self, plain_bore):
        with pytest.raises(ValueError, match="not above"):
            design_scale(plain_bore, [200.0])

    def test_single_hole_design(self, plain_bore, capsys):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            design = design_scale(plain_bore, [335.0], hole_radius=0.3, verbose=True)

        assert len(design.placements) == 1
        placement = design.placements[0]
        assert plain_bore.cork_position <= placement.position <= plain_bore.length - 1.0
        assert design.bore.holes == [Hole(placement.position, 0.3, True)]
        assert 250.0 < design.fundamental < 320.0
        assert plain_bore.holes == []

        assert "Hole 1" in capsys.readouterr().out
        assert "SCALE DESIGN" in design.summary()

    def test_fundamental_ignores_existing_holes(self):
        bore = create_bore(60.0, 0.95, 0.4)
        bore.holes = [Hole(20.0, 0.3)]
        with pytest.raises(ValueError, match=r"\(2[5-9]\d\.\d\d Hz\)"):
            design_scale(bore, [100.0])
