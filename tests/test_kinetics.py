import math

import numba
import numpy as np
import pytest

import constants
import kinetics
from kinetics import active_site_integrity, rescale_probability


def test_speed_factor_is_one_at_q10_baseline():
    assert kinetics.speed_factor(25.0) == pytest.approx(1.0)
    assert kinetics.speed_factor(35.0) == pytest.approx(2.0)
    assert kinetics.speed_factor(15.0) == pytest.approx(0.5)


def test_collision_policy_keeps_growing_past_optimum():
    below = kinetics.speed_factor(37.0)
    above = kinetics.speed_factor(47.0)
    assert above == pytest.approx(below * 2.0)


def test_optimum_decay_policy_halves_every_half_life():
    policy = constants.SPEED_POLICY_OPTIMUM_DECAY
    at_optimum = kinetics.speed_factor(37.0, policy)
    assert at_optimum == pytest.approx(2 ** 1.2)
    assert kinetics.speed_factor(40.0, policy) == pytest.approx(at_optimum * 0.5)
    assert kinetics.speed_factor(43.0, policy, decay_half_life=6.0) == pytest.approx(at_optimum * 0.5)
    # Below the optimum both policies agree
    assert kinetics.speed_factor(30.0, policy) == pytest.approx(kinetics.speed_factor(30.0))


def test_unknown_speed_policy_is_rejected():
    with pytest.raises(ValueError, match="speed_policy"):
        kinetics.speed_factor(30.0, "linear")


def test_speed_factor_stays_finite_for_extreme_temperatures():
    assert math.isfinite(kinetics.speed_factor(1e9))
    assert kinetics.speed_factor(-1e9) >= 0.0


def test_temperature_efficiency_in_unit_interval_and_peaks_at_optimum():
    temps = np.linspace(-50.0, 150.0, 2001)
    values = [kinetics.temperature_efficiency(t) for t in temps]
    assert all(0.0 < v <= 1.0 for v in values)
    assert kinetics.temperature_efficiency(37.0) == 1.0
    assert temps[int(np.argmax(values))] == pytest.approx(37.0)


def test_temperature_efficiency_spread():
    # One standard deviation away gives exp(-1/2)
    assert kinetics.temperature_efficiency(51.0, spread=14.0) == pytest.approx(math.exp(-0.5))
    assert kinetics.temperature_efficiency(23.0, spread=14.0) == pytest.approx(math.exp(-0.5))


@pytest.mark.parametrize("degree", [38, 40, 45, 52, 60, 90])
def test_denature_probability_matches_formula(degree):
    over = degree - 37
    assert kinetics.denature_probability(degree) == pytest.approx(min(0.9, 0.05 * over ** 1.1))


def test_denature_probability_zero_at_or_below_optimum():
    assert kinetics.denature_probability(37) == 0.0
    assert kinetics.denature_probability(20) == 0.0


def test_denature_probability_is_capped():
    assert kinetics.denature_probability(200) == 0.9


def test_active_site_integrity_never_reaches_zero():
    assert kinetics.active_site_integrity(0.0) == 1.0
    assert kinetics.active_site_integrity(1.0) == pytest.approx(0.15)


@pytest.mark.parametrize("policy", constants.SPEED_POLICIES)
def test_theoretical_rate_uses_the_same_speed_policy(policy):
    for t in (10.0, 37.0, 45.0, 70.0):
        expected = kinetics.speed_factor(t, policy) * kinetics.temperature_efficiency(t)
        assert kinetics.theoretical_rate(t, policy) == pytest.approx(expected)


def test_optimum_decay_curve_peaks_near_optimum():
    policy = constants.SPEED_POLICY_OPTIMUM_DECAY
    temps = list(range(0, 81))
    rates = [kinetics.theoretical_rate(t, policy) for t in temps]
    assert temps[int(np.argmax(rates))] == 37


def test_rescale_probability():
    assert kinetics.rescale_probability(0.2, 1.0) == 0.2
    assert kinetics.rescale_probability(0.2, 0.0) == 0.0
    assert kinetics.rescale_probability(0.2, 2.0) == pytest.approx(1 - 0.8 ** 2)
    assert kinetics.rescale_probability(1.7, 1.0) == 1.0


@numba.jit(nopython=True)
def _per_frame_chance(base, denature_factor, frame_scale):
    return rescale_probability(base * active_site_integrity(denature_factor, 0.85), frame_scale)


def test_integrity_and_rescaling_compose_inside_compiled_code():
    assert _per_frame_chance(0.2, 0.0, 1.0) == pytest.approx(0.2)
    assert _per_frame_chance(0.2, 1.0, 2.0) == pytest.approx(1 - (1 - 0.2 * 0.15) ** 2)
    assert _per_frame_chance(0.2, 0.0, 0.0) == 0.0
