# kinetics_engine.py

import math
import time
import logging
from collections import deque

import numpy as np
import numba

import constants
import kinetics
from kinetics import active_site_integrity, rescale_probability
from particle import ReactionEvent, DenatureCheck
from particle_store import ParticleStore

logger = logging.getLogger("enzyme_sim")

# --- JIT-Compiled Kinetics Functions ---
# These functions are compiled to machine code by Numba. They are kept outside
# the KineticsEngine class and operate only on NumPy arrays and scalars, as
# required by Numba's nopython mode. All random draws are made by the engine
# beforehand and passed in as arrays.

@numba.jit(nopython=True)
def _reflect_axis_jit(position, velocity, radius, extent):
    """Clamps one coordinate to [radius, extent - radius] and reflects its velocity."""
    if extent - radius < radius:
        return extent / 2.0, velocity
    if position < radius:
        position = radius
        velocity = -velocity
    if position > extent - radius:
        position = extent - radius
        velocity = -velocity
    return position, velocity


@numba.jit(nopython=True)
def _integrate_motion_jit(positions, velocities, radii, steering, step_scale, steer_scale, max_speed, width, height):
    """
    Moves every particle by its scaled velocity, reflects it off the arena
    walls, applies the random steering nudge and caps its speed.
    """
    for i in range(positions.shape[0]):
        x = positions[i, 0] + velocities[i, 0] * step_scale
        y = positions[i, 1] + velocities[i, 1] * step_scale
        x, vx = _reflect_axis_jit(x, velocities[i, 0], radii[i], width)
        y, vy = _reflect_axis_jit(y, velocities[i, 1], radii[i], height)

        vx += steering[i, 0] * steer_scale
        vy += steering[i, 1] * steer_scale
        vmag = math.sqrt(vx * vx + vy * vy)
        if vmag > max_speed:
            vx = vx / vmag * max_speed
            vy = vy / vmag * max_speed

        positions[i, 0] = x
        positions[i, 1] = y
        velocities[i, 0] = vx
        velocities[i, 1] = vy


@numba.jit(nopython=True)
def _orient_substrates_jit(positions, orientations, denatured, catalyst_indices, substrate_indices, smoothing):
    """
    Rotates each substrate toward the nearest non-denatured catalyst along the
    shortest angular path. Orientation is left untouched when no active
    catalyst exists.
    """
    two_pi = 2.0 * math.pi
    for si in range(substrate_indices.shape[0]):
        s = substrate_indices[si]
        closest = -1
        closest_dist_sq = 0.0
        for ci in range(catalyst_indices.shape[0]):
            e = catalyst_indices[ci]
            if denatured[e]:
                continue
            dx = positions[e, 0] - positions[s, 0]
            dy = positions[e, 1] - positions[s, 1]
            dist_sq = dx * dx + dy * dy
            if closest == -1 or dist_sq < closest_dist_sq:
                closest = e
                closest_dist_sq = dist_sq
        if closest == -1:
            continue

        target = math.atan2(positions[closest, 1] - positions[s, 1], positions[closest, 0] - positions[s, 0])
        diff = (target - orientations[s] + 3.0 * math.pi) % two_pi - math.pi
        orientations[s] = (orientations[s] + diff * smoothing) % two_pi


@numba.jit(nopython=True)
def _resolve_reactions_jit(positions, radii, cooldowns, denatured, denature_factors,
                           catalyst_indices, substrate_indices, trial_draws,
                           base_chance, integrity_loss, proximity_slack,
                           catalyst_cooldown, substrate_cooldown, frame_scale):
    """
    Runs one reaction trial for every eligible (catalyst, substrate) pair in
    reach. A successful catalyst is put on cooldown immediately, so it reacts
    at most once per tick.

    Returns an (n, 2) array of (catalyst index, substrate index) pairs that reacted.
    """
    reacted = np.empty((catalyst_indices.shape[0], 2), dtype=np.int64)
    count = 0
    for ci in range(catalyst_indices.shape[0]):
        e = catalyst_indices[ci]
        if cooldowns[e] > 0 or denatured[e]:
            continue
        integrity = active_site_integrity(denature_factors[e], integrity_loss)
        chance = rescale_probability(base_chance * integrity, frame_scale)

        for si in range(substrate_indices.shape[0]):
            s = substrate_indices[si]
            if cooldowns[s] > 0:
                continue
            dx = positions[e, 0] - positions[s, 0]
            dy = positions[e, 1] - positions[s, 1]
            reach = radii[e] + radii[s] - proximity_slack
            if math.sqrt(dx * dx + dy * dy) >= reach:
                continue
            if trial_draws[ci, si] < chance:
                cooldowns[e] = catalyst_cooldown
                cooldowns[s] = substrate_cooldown
                reacted[count, 0] = e
                reacted[count, 1] = s
                count += 1
                break
    return reacted[:count]


class KineticsEngine:
    """
    Advances the enzyme/substrate population one discrete step at a time for
    the current ambient temperature, and keeps the reaction bookkeeping that
    the rate display and chart read.

    Each step runs in strict phases: speed factor, denaturation trials,
    movement, substrate orientation, reaction trials. Movement always finishes
    for every particle before any reaction trial is drawn.

    Data Contract:
    - Inputs:
        - config (dict): The 'simulation' section of the config file.
        - rng: The master random source. Only `random(size)` and
          `uniform(low, high, size)` are used, so any object exposing those
          (e.g. np.random.Generator) works.
        - bounds (tuple): The (width, height) of the arena.
        - clock (callable): Monotonic time source in seconds, used when
          `advance()` is called without an explicit time.
    - Outputs: None. This class mutates its ParticleStore in place.
    - Invariants:
        - total_products never decreases.
        - denature_factor is 0 for every particle that is not a denatured
          catalyst, and within [0, 1] otherwise.
        - A denatured catalyst never recovers.
        - Each whole degree above the optimum is rolled for denaturation at
          most once per session (one-way high-water latch).
    """
    def __init__(self, config: dict, rng, bounds: tuple, clock=time.monotonic):
        self.rng = rng
        self.clock = clock
        self.params = dict(constants.SIMULATION_DEFAULTS)
        self.params.update(config)
        self.speed_policy = kinetics.validate_speed_policy(self.params['speed_policy'])

        self.store = ParticleStore(config, rng, bounds)

        self._temperature = self._require_finite_temperature(self.params['initial_temperature'])
        self._total_products = 0
        self.reaction_timestamps = deque()
        self.pending_events = deque(maxlen=constants.PENDING_EVENT_LIMIT)
        self.denature_history = deque(maxlen=constants.DENATURE_HISTORY_LIMIT)
        # Nothing above the optimum has been rolled yet.
        self.last_denature_check_degree = int(constants.OPTIMUM_TEMPERATURE)

        self.tick = 0
        self.last_time = None
        self.last_speed_factor = self.speed_factor()

        logger.info(
            f"KineticsEngine created: policy={self.speed_policy}, "
            f"temperature={self._temperature:.1f}C, "
            f"base_reaction_rate={self.params['base_reaction_rate']}."
        )

    # --- Driver-facing interface ---

    @property
    def temperature(self) -> float:
        return self._temperature

    @property
    def total_products(self) -> int:
        return self._total_products

    def set_temperature(self, value):
        """Sets the ambient temperature. Any finite value is accepted."""
        value = self._require_finite_temperature(value)
        if value != self._temperature:
            logger.debug(f"Temperature set to {value:.2f}C (was {self._temperature:.2f}C).")
        self._temperature = value

    def resize(self, width, height):
        self.store.resize(width, height)

    def particles_snapshot(self):
        return self.store.snapshot()

    def drain_reaction_events(self):
        """Returns and clears the reaction events emitted since the last call."""
        events = list(self.pending_events)
        self.pending_events.clear()
        return events

    def current_rate_per_10s(self, now=None) -> float:
        """
        Average reactions per second over the trailing 10 second window.

        Prunes timestamps older than the window as a side effect; repeated
        calls at the same time return the same value.
        """
        if now is None:
            now = self.last_time if self.last_time is not None else self.clock()
        cutoff = now - constants.RATE_WINDOW_SECONDS
        while self.reaction_timestamps and self.reaction_timestamps[0] < cutoff:
            self.reaction_timestamps.popleft()
        return len(self.reaction_timestamps) / constants.RATE_WINDOW_SECONDS

    def speed_factor(self, temperature=None) -> float:
        if temperature is None:
            temperature = self._temperature
        return kinetics.speed_factor(temperature, self.speed_policy, self.params['decay_half_life'])

    def temperature_efficiency(self, temperature=None) -> float:
        if temperature is None:
            temperature = self._temperature
        return kinetics.temperature_efficiency(temperature, self.params['efficiency_spread'])

    def theoretical_rate(self, temperature: float) -> float:
        """Reference curve value for the chart, using this engine's speed policy."""
        return kinetics.theoretical_rate(
            temperature, self.speed_policy,
            self.params['efficiency_spread'], self.params['decay_half_life']
        )

    def denatured_count(self) -> int:
        store = self.store
        return int(np.count_nonzero(store.denatured[store.catalyst_indices]))

    # --- Simulation step ---

    def advance(self, now=None, dt=None):
        """
        Runs one full simulation step.

        `now` is the monotonic time of this step in seconds (read from the
        injected clock when omitted). `dt` is the elapsed time since the
        previous step; when omitted it is derived from `now`, and the first
        step assumes one reference frame. Displacements, steering, the
        denaturation ramp and per-tick probabilities are scaled by
        dt * REFERENCE_FPS so behaviour does not depend on the frame rate.
        """
        if now is None:
            now = self.clock()
        if dt is None:
            dt = 1.0 / constants.REFERENCE_FPS if self.last_time is None else now - self.last_time
        dt = self._clamp_frame_dt(dt)
        self.last_time = now
        frame_scale = dt * constants.REFERENCE_FPS

        # --- 1. Speed factor ---
        speed_factor = self.speed_factor()
        self.last_speed_factor = speed_factor

        # --- 2. Denaturation trials (whole-degree bands above the optimum) ---
        if self._temperature > constants.OPTIMUM_TEMPERATURE:
            self._run_denaturation_trials()

        # --- 3. Movement ---
        self._move_particles(speed_factor, frame_scale)

        # --- 4. Substrate orientation ---
        smoothing = rescale_probability(float(self.params['orientation_smoothing']), frame_scale)
        store = self.store
        _orient_substrates_jit(
            store.positions,
            store.orientations,
            store.denatured,
            store.catalyst_indices,
            store.substrate_indices,
            float(smoothing)
        )

        # --- 5. Reaction trials ---
        self._run_reaction_trials(speed_factor, frame_scale, now)

        self.tick += 1

    def _clamp_frame_dt(self, dt):
        dt = float(dt)
        max_dt = self.params['max_frame_dt']
        if not math.isfinite(dt) or dt < 0.0:
            logger.warning(f"Ignoring invalid frame delta {dt}; treating it as 0.")
            return 0.0
        if dt > max_dt:
            logger.warning(f"Frame delta {dt:.3f}s exceeds {max_dt}s; clamping.")
            return max_dt
        return dt

    def _run_denaturation_trials(self):
        """
        Rolls every whole degree between the high-water mark and the current
        floor, in ascending order, once each. Degrees at or below the mark are
        never rolled again, even if the temperature drops and rises back.
        """
        current_degree = math.floor(self._temperature)
        if current_degree <= self.last_denature_check_degree:
            return

        store = self.store
        first_degree = max(self.last_denature_check_degree + 1, int(constants.OPTIMUM_TEMPERATURE) + 1)
        for degree in range(first_degree, current_degree + 1):
            candidates = store.catalyst_indices[~store.denatured[store.catalyst_indices]]
            if len(candidates) == 0:
                logger.debug(
                    f"All catalysts denatured; skipping degrees {degree}..{current_degree}."
                )
                break

            probability = kinetics.denature_probability(
                degree,
                self.params['denature_probability_scale'],
                self.params['denature_probability_exponent'],
                self.params['denature_probability_cap']
            )
            hits = candidates[self.rng.random(len(candidates)) < probability]
            store.denatured[hits] = True
            store.denature_factors[hits] = self.params['denature_seed_factor']

            self.denature_history.append(
                DenatureCheck(degree=degree, probability=probability,
                              trials=len(candidates), denatured=len(hits))
            )
            for idx in hits:
                logger.debug(f"Catalyst {idx} denatured at {degree}C (p={probability:.3f}).")

        self.last_denature_check_degree = current_degree

    def _move_particles(self, speed_factor, frame_scale):
        store = self.store
        params = self.params

        # Cooldowns are counted in reference ticks and drain with elapsed time.
        np.maximum(store.cooldowns - frame_scale, 0.0, out=store.cooldowns)

        jitter = params['steering_jitter']
        steering = self.rng.uniform(-jitter, jitter, (store.num_particles, 2))
        max_speed = params['base_max_speed'] + speed_factor * params['speed_spread']
        _integrate_motion_jit(
            store.positions,
            store.velocities,
            store.radii,
            steering,
            float(speed_factor * frame_scale),
            float(params['steering_gain'] * speed_factor * frame_scale),
            float(max_speed),
            store.width,
            store.height
        )

        # Denatured catalysts degrade toward fully non-functional; everything
        # else stays pristine.
        ramp = params['denature_ramp_rate'] * speed_factor * frame_scale
        degrading = store.denatured
        store.denature_factors[degrading] = np.minimum(1.0, store.denature_factors[degrading] + ramp)
        store.denature_factors[~degrading] = 0.0

    def _run_reaction_trials(self, speed_factor, frame_scale, now):
        store = self.store
        params = self.params

        base_chance = params['base_reaction_rate'] * speed_factor * self.temperature_efficiency()
        trial_draws = self.rng.random((store.catalyst_count, store.substrate_count))
        reacted = _resolve_reactions_jit(
            store.positions,
            store.radii,
            store.cooldowns,
            store.denatured,
            store.denature_factors,
            store.catalyst_indices,
            store.substrate_indices,
            trial_draws,
            float(base_chance),
            float(params['integrity_loss']),
            float(params['proximity_slack']),
            float(params['catalyst_cooldown']),
            float(params['substrate_cooldown']),
            float(frame_scale)
        )
        if len(reacted) == 0:
            return

        for catalyst_idx, substrate_idx in reacted:
            self._total_products += 1
            self.reaction_timestamps.append(now)
            self.pending_events.append(ReactionEvent(
                x=float(store.positions[catalyst_idx, 0]),
                y=float(store.positions[catalyst_idx, 1]),
                started=now
            ))
        # The product leaves and a fresh substrate arrives somewhere else.
        store.place_uniformly(reacted[:, 1], params['respawn_margin'], self.rng)

    @staticmethod
    def _require_finite_temperature(value) -> float:
        value = float(value)
        if not math.isfinite(value):
            raise ValueError(f"Temperature must be a finite number, got {value}.")
        return value
