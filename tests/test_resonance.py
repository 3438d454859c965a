"""
Tests for the Resonance Solver

Reference pitches for plain tubes, the effect of opening holes, and a
randomised robustness sweep over degenerate hole layouts.
"""

import math

import numpy as np
import pytest

from flute_tuner import (
    FluteEngine, Hole, create_bore, add_hole, input_impedance,
    SolverConfig, find_resonance, solve_resonance, default_guess
)
from flute_tuner.resonance import hole_end_correction


class TestReferencePitches:
    """Plain tubes land close to their nominal notes."""

    def test_concert_c4_tube(self):
        bore = create_bore(66.1, 0.95, 0.4)
        pitch = find_resonance(bore, 261.0)
        assert abs(pitch - 261.0) < 5.0

    def test_a4_tube(self):
        """The end corrections put this tube about 6.4 Hz flat (~433.6 Hz)."""
        bore = create_bore(39.2, 0.95, 0.4)
        pitch = find_resonance(bore, 440.0)
        assert pitch == pytest.approx(440.0, rel=0.02)

    def test_sixty_cm_tube(self, plain_bore):
        pitch = find_resonance(plain_bore, default_guess(plain_bore))
        assert 250.0 < pitch < 320.0

    def test_shorter_tube_plays_higher(self):
        long_pitch = find_resonance(create_bore(66.1, 0.95, 0.4), 261.0)
        short_pitch = find_resonance(create_bore(39.2, 0.95, 0.4), 440.0)
        assert short_pitch > long_pitch


class TestOpeningHoles:
    """Opening a hole shortens the sounding length."""

    def test_open_hole_raises_pitch(self, plain_bore):
        base = find_resonance(plain_bore, default_guess(plain_bore))
        with_hole = add_hole(plain_bore, 30.0, 0.3, open=True)
        raised = find_resonance(with_hole, default_guess(with_hole))
        assert raised > base

    def test_opening_from_the_foot_is_monotonic(self, plain_bore):
        none_open = find_resonance(plain_bore, default_guess(plain_bore))
        one = add_hole(plain_bore, 45.0, 0.3)
        one_open = find_resonance(one, default_guess(one))
        two = add_hole(one, 30.0, 0.3)
        two_open = find_resonance(two, default_guess(two))
        assert none_open < one_open < two_open

    def test_closed_hole_barely_moves_pitch(self, plain_bore):
        base = find_resonance(plain_bore, 287.5)
        closed = find_resonance(add_hole(plain_bore, 30.0, 0.3, open=False), 287.5)
        assert abs(closed - base) < 10.0


class TestSolverContract:

    def test_hole_order_preserved(self, shuffled_bore):
        before = list(shuffled_bore.holes)
        find_resonance(shuffled_bore, 440.0)
        assert shuffled_bore.holes == before

    def test_result_reports_convergence(self, plain_bore):
        result = solve_resonance(plain_bore, 287.5)
        assert result.converged
        assert result.guess == 287.5
        assert 1 <= result.iterations <= 20
        assert "converged" in result.summary()

    def test_iteration_budget_is_respected(self, plain_bore):
        config = SolverConfig(max_iterations=1)
        result = solve_resonance(plain_bore, 287.5, config)
        assert result.iterations <= 1
        assert math.isfinite(result.frequency)

    def test_out_of_band_step_is_damped(self, plain_bore):
        """A band that excludes the root keeps the estimate inside it."""
        config = SolverConfig(f_min=400.0, f_max=600.0)
        result = solve_resonance(plain_bore, 500.0, config)
        assert 400.0 <= result.frequency <= 600.0

    def test_verbose_prints_steps(self, plain_bore, capsys):
        solve_resonance(plain_bore, 287.5, verbose=True)
        assert "Im(Z)" in capsys.readouterr().out


class TestDefaultGuess:

    def test_plain_bore_uses_half_wave(self, plain_bore):
        assert default_guess(plain_bore) == pytest.approx(34500.0 / 120.0)

    def test_nearest_open_hole_sets_length(self, plain_bore):
        bore = plain_bore.copy_with_holes([
            Hole(45.0, 0.3, True), Hole(30.0, 0.3, True), Hole(20.0, 0.3, False)
        ])
        effective = 30.0 + hole_end_correction(bore, 0.3)
        assert default_guess(bore) == pytest.approx(34500.0 / (2 * effective))

    def test_ignores_zero_radius_and_outside_holes(self, plain_bore):
        bore = plain_bore.copy_with_holes([
            Hole(10.0, 0.0, True), Hole(-5.0, 0.3, True), Hole(70.0, 0.3, True)
        ])
        assert default_guess(bore) == pytest.approx(default_guess(plain_bore))

    def test_end_correction_is_capped_at_bore_length(self, plain_bore):
        bore = add_hole(plain_bore, 59.0, 0.05)
        assert default_guess(bore) == pytest.approx(default_guess(plain_bore))

    def test_degenerate_length_stays_in_band(self):
        bore = create_bore(0.0, 0.95, 0.4)
        guess = default_guess(bore)
        assert math.isfinite(guess)
        assert guess <= SolverConfig().f_max


class TestRobustness:
    """Randomised hole layouts, including positions outside the bore."""

    def test_fuzz_always_returns_finite_frequency(self):
        rng = np.random.default_rng(1234)
        config = SolverConfig()
        for _ in range(1000):
            holes = [
                Hole(float(rng.uniform(-50.0, 150.0)),
                     float(rng.uniform(0.1, 0.6)),
                     bool(rng.random() < 0.5))
                for _ in range(6)
            ]
            bore = create_bore(60.0, 0.95, 0.4)
            bore.holes = holes
            result = solve_resonance(bore, 440.0, config)
            assert math.isfinite(result.frequency)
            assert config.f_min <= result.frequency <= config.f_max
            assert result.iterations <= config.max_iterations

    @pytest.mark.parametrize("guess", [20.0, 25.0, 4999.0])
    def test_guess_at_band_edges(self, plain_bore, guess):
        assert math.isfinite(find_resonance(plain_bore, guess))

    def test_coincident_holes(self, plain_bore):
        bore = plain_bore.copy_with_holes([Hole(30.0, 0.3), Hole(30.0, 0.3)])
        assert math.isfinite(find_resonance(bore, default_guess(bore)))


class TestDegenerateRadii:
    """Vanishing, negative and overflowing radii never raise."""

    @pytest.mark.parametrize("radius", [0.0, 1e-200, -0.3, 1e200])
    @pytest.mark.parametrize("is_open", [True, False])
    @pytest.mark.parametrize("guess", [0.0, 440.0])
    def test_hole_radius(self, radius, is_open, guess):
        engine = FluteEngine(60.0, 0.95, 0.4)
        engine.replace_holes([30.0, 45.0], [radius, 0.3], [is_open, True])
        pitch = engine.calculate_pitch(guess)
        assert math.isfinite(pitch)
        assert SolverConfig().f_min <= pitch <= SolverConfig().f_max

    @pytest.mark.parametrize("bore_radius", [0.0, -0.95])
    @pytest.mark.parametrize("guess", [0.0, 287.5])
    def test_bore_radius(self, bore_radius, guess):
        engine = FluteEngine(60.0, bore_radius, 0.4)
        engine.replace_holes([30.0], [0.3], [True])
        pitch = engine.calculate_pitch(guess)
        assert math.isfinite(pitch)
        assert SolverConfig().f_min <= pitch <= SolverConfig().f_max

    def test_zero_bore_radius_impedance_is_finite(self):
        bore = create_bore(60.0, 0.0, 0.4)
        assert np.isfinite(input_impedance(bore, 287.5))

    def test_tiny_hole_is_ignored_by_default_guess(self, plain_bore):
        bore = add_hole(plain_bore, 30.0, 1e-200)
        assert default_guess(bore) == pytest.approx(default_guess(plain_bore))
        assert hole_end_correction(bore, 1e-200) == math.inf

    def test_huge_hole_vents_at_its_position(self, plain_bore):
        bore = add_hole(plain_bore, 30.0, 1e200)
        assert default_guess(bore) == pytest.approx(34500.0 / 60.0)
