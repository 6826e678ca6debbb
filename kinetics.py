# kinetics.py

"""
Kinetic Model Formulas

Scalar functions shared by the kinetics engine and the rate chart. Keeping them
in one place is what guarantees the chart's reference curve and the engine use
the same speed policy.

Data Contract:
- Inputs are plain floats (Celsius for temperatures).
- Outputs are plain floats; no function here touches simulation state.
- active_site_integrity and rescale_probability are Numba-compiled so the
  reaction kernel calls the same code the Python side does.
"""

import math

import numba

import constants

# Bounds the Q10 exponent so extreme temperatures still give a finite factor.
MAX_Q10_EXPONENT = 200.0


def _q10(delta: float) -> float:
    exponent = min(max(delta / 10.0, -MAX_Q10_EXPONENT), MAX_Q10_EXPONENT)
    return constants.Q10 ** exponent


def validate_speed_policy(policy: str) -> str:
    if policy not in constants.SPEED_POLICIES:
        raise ValueError(
            f"Unknown speed_policy {policy!r}; expected one of {constants.SPEED_POLICIES}."
        )
    return policy


def speed_factor(temperature: float, policy: str = constants.SPEED_POLICY_COLLISION,
                 decay_half_life: float = 3.0) -> float:
    """
    Temperature-dependent velocity multiplier (Q10 = 2, referenced to 25 C).

    'collision': kinetic energy keeps rising with temperature, 2^((t-25)/10)
    for every t.
    'optimum_decay': growth stops at the optimum and the factor halves every
    `decay_half_life` degrees above it.
    """
    validate_speed_policy(policy)
    baseline = constants.Q10_BASELINE_TEMPERATURE
    optimum = constants.OPTIMUM_TEMPERATURE

    if policy == constants.SPEED_POLICY_COLLISION:
        return _q10(temperature - baseline)

    growth = _q10(min(temperature, optimum) - baseline)
    if temperature <= optimum:
        return growth
    decay_exponent = min((temperature - optimum) / decay_half_life, MAX_Q10_EXPONENT)
    return growth * 0.5 ** decay_exponent


def temperature_efficiency(temperature: float, spread: float = 14.0) -> float:
    """Gaussian efficiency centred on the optimum, 1.0 exactly at 37 C."""
    delta = temperature - constants.OPTIMUM_TEMPERATURE
    return math.exp(-(delta * delta) / (2.0 * spread * spread))


def denature_probability(degree: int, scale: float = 0.05, exponent: float = 1.1,
                         cap: float = 0.9) -> float:
    """
    Per-catalyst denaturation chance for one whole-degree band.

    Grows super-linearly with the degrees above the optimum and is capped.
    Bands at or below the optimum never denature.
    """
    over = degree - constants.OPTIMUM_TEMPERATURE
    if over <= 0:
        return 0.0
    return min(cap, scale * over ** exponent)


@numba.jit(nopython=True)
def active_site_integrity(denature_factor: float, integrity_loss: float = 0.85) -> float:
    # Never reaches zero: a fully denatured site keeps 1 - integrity_loss.
    return 1.0 - denature_factor * integrity_loss


def theoretical_rate(temperature: float, policy: str = constants.SPEED_POLICY_COLLISION,
                     spread: float = 14.0, decay_half_life: float = 3.0) -> float:
    """
    Relative reaction rate used as the chart's reference curve.

    This is the temperature-dependent part of the engine's per-contact
    reaction chance: speed factor times temperature efficiency, with the
    same speed policy the engine runs.
    """
    return (speed_factor(temperature, policy, decay_half_life)
            * temperature_efficiency(temperature, spread))


@numba.jit(nopython=True)
def rescale_probability(probability: float, frame_scale: float) -> float:
    """
    Converts a per-reference-tick probability to one for `frame_scale` ticks.

    1 - (1 - p)^k keeps the expected event rate per second stable when the
    driving loop runs slower or faster than the reference frame rate.
    """
    probability = min(max(probability, 0.0), 1.0)
    if frame_scale == 1.0:
        return probability
    if frame_scale <= 0.0:
        return 0.0
    return 1.0 - (1.0 - probability) ** frame_scale
