# particle_store.py

import math
import logging

import numpy as np

import constants
from particle import CATALYST, SUBSTRATE, ParticleSnapshot

logger = logging.getLogger("enzyme_sim")


def _require_finite_dimensions(width, height):
    width, height = float(width), float(height)
    if not (math.isfinite(width) and math.isfinite(height)):
        raise ValueError(f"Arena dimensions must be finite, got ({width}, {height}).")
    if width <= 0 or height <= 0:
        raise ValueError(f"Arena dimensions must be positive, got ({width}, {height}).")
    return width, height


def _require_positive_count(name, value):
    if isinstance(value, bool) or int(value) != value or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}.")
    return int(value)


def _require_radius_range(name, radius_range):
    low, high = (float(v) for v in radius_range)
    if not (0 < low <= high):
        raise ValueError(f"{name} must satisfy 0 < min <= max, got {tuple(radius_range)!r}.")
    return low, high


def clamp_axis(values: np.ndarray, radii: np.ndarray, extent: float):
    """
    Clamps coordinates into [radius, extent - radius], in place.
    An arena narrower than a particle's diameter pins it to the centre line.
    """
    upper = extent - radii
    np.minimum(values, upper, out=values)
    np.maximum(values, radii, out=values)
    too_narrow = upper < radii
    values[too_narrow] = extent / 2.0


class ParticleStore:
    """
    Holds the fixed particle population and the arena bounds using NumPy
    arrays (Structure of Arrays).

    Common state (positions, velocities, radii, cooldowns, shape seeds) lives
    in arrays indexed by particle. Kind-specific state is kept in arrays that
    are only meaningful for one kind: `denatured` and `denature_factors` for
    catalysts, `orientations` for substrates. The `kinds` array is the tag.

    Data Contract:
    - Inputs:
        - config (dict): The 'simulation' section of the config file.
        - rng: Random source exposing `random(size)` and `uniform(low, high, size)`.
        - bounds (tuple): The (width, height) of the arena.
    - Outputs: None. This class owns and exposes the particle arrays.
    - Side Effects: Draws initial positions, velocities and shape seeds from rng.
    - Invariants:
        - Particle count and kinds never change after construction.
        - Catalysts occupy indices [0, catalyst_count), substrates the rest.
        - Every position lies within [radius, width-radius] x [radius, height-radius].
        - Radii are always positive.
        - Cooldowns are non-negative and counted in reference ticks (1/60 s).
    """
    def __init__(self, config: dict, rng, bounds: tuple):
        defaults = constants.SIMULATION_DEFAULTS
        self.catalyst_count = _require_positive_count(
            'catalyst_count', config.get('catalyst_count', defaults['catalyst_count']))
        self.substrate_count = _require_positive_count(
            'substrate_count', config.get('substrate_count', defaults['substrate_count']))
        self.num_particles = self.catalyst_count + self.substrate_count

        width, height = _require_finite_dimensions(*bounds)
        self.bounds = np.array([width, height], dtype=float)
        # Radii scale relative to the arena the store was created with.
        self.reference_bounds = self.bounds.copy()

        catalyst_radius = float(config.get('catalyst_radius', defaults['catalyst_radius']))
        substrate_radius = float(config.get('substrate_radius', defaults['substrate_radius']))
        if catalyst_radius <= 0 or substrate_radius <= 0:
            raise ValueError(
                f"Particle radii must be positive, got catalyst={catalyst_radius}, "
                f"substrate={substrate_radius}."
            )
        self.catalyst_radius_range = _require_radius_range(
            'catalyst_radius_range', config.get('catalyst_radius_range', defaults['catalyst_radius_range']))
        self.substrate_radius_range = _require_radius_range(
            'substrate_radius_range', config.get('substrate_radius_range', defaults['substrate_radius_range']))

        # --- Kind tags and index sets, built once ---
        self.kinds = np.full(self.num_particles, SUBSTRATE, dtype=np.int8)
        self.kinds[:self.catalyst_count] = CATALYST
        self.catalyst_indices = np.flatnonzero(self.kinds == CATALYST).astype(np.int64)
        self.substrate_indices = np.flatnonzero(self.kinds == SUBSTRATE).astype(np.int64)
        self.is_catalyst = self.kinds == CATALYST

        # --- Common state ---
        self.base_radii = np.where(self.is_catalyst, catalyst_radius, substrate_radius).astype(float)
        self.radii = self.base_radii.copy()
        self.positions = np.zeros((self.num_particles, 2), dtype=float)
        self.velocities = rng.uniform(-1.0, 1.0, (self.num_particles, 2))
        self.cooldowns = np.zeros(self.num_particles, dtype=float)
        self.shape_seeds = rng.random(self.num_particles) * 2.0 * np.pi

        # --- Kind-specific state ---
        self.denatured = np.zeros(self.num_particles, dtype=np.bool_)
        self.denature_factors = np.zeros(self.num_particles, dtype=float)
        self.orientations = np.zeros(self.num_particles, dtype=float)
        self.orientations[self.substrate_indices] = rng.random(self.substrate_count) * 2.0 * np.pi

        catalyst_margin = float(config.get('catalyst_spawn_margin', defaults['catalyst_spawn_margin']))
        substrate_margin = float(config.get('substrate_spawn_margin', defaults['substrate_spawn_margin']))
        self.place_uniformly(self.catalyst_indices, catalyst_margin, rng)
        self.place_uniformly(self.substrate_indices, substrate_margin, rng)

        logger.info(
            f"ParticleStore created with {self.catalyst_count} catalysts and "
            f"{self.substrate_count} substrates in a {width:.0f}x{height:.0f} arena."
        )

    @property
    def width(self) -> float:
        return float(self.bounds[0])

    @property
    def height(self) -> float:
        return float(self.bounds[1])

    def place_uniformly(self, indices: np.ndarray, margin: float, rng):
        """
        Places the given particles at uniformly random positions at least
        `margin` (and at least their radius) away from every wall.
        """
        if len(indices) == 0:
            return
        radii = self.radii[indices]
        for axis in range(2):
            extent = self.bounds[axis]
            low = np.maximum(margin, radii)
            high = extent - low
            # Collapse an empty interval onto the centre line
            empty = high < low
            low = np.where(empty, extent / 2.0, low)
            high = np.where(empty, extent / 2.0, high)
            self.positions[indices, axis] = rng.uniform(low, high, len(indices))
        self.clamp_into_bounds(indices)

    def clamp_into_bounds(self, indices=None):
        if indices is None:
            indices = np.arange(self.num_particles)
        radii = self.radii[indices]
        for axis in range(2):
            column = self.positions[indices, axis]
            clamp_axis(column, radii, self.bounds[axis])
            self.positions[indices, axis] = column

    def radius_limits(self):
        """Per-particle (min, max) radius arrays, by kind."""
        low = np.where(self.is_catalyst, self.catalyst_radius_range[0], self.substrate_radius_range[0])
        high = np.where(self.is_catalyst, self.catalyst_radius_range[1], self.substrate_radius_range[1])
        return low, high

    def resize(self, new_width, new_height):
        """
        Rescales the arena and the particle layout.

        Positions scale independently per axis. Radii scale by the smaller of
        the two axis factors (relative to the construction-time arena) so
        particles stay round, then are clamped to the kind's radius range.
        Finally every particle is clamped back inside the new bounds.
        """
        new_width, new_height = _require_finite_dimensions(new_width, new_height)
        old_width, old_height = self.bounds
        scale_x = new_width / old_width
        scale_y = new_height / old_height

        self.positions[:, 0] *= scale_x
        self.positions[:, 1] *= scale_y
        self.bounds = np.array([new_width, new_height], dtype=float)

        uniform_scale = min(new_width / self.reference_bounds[0], new_height / self.reference_bounds[1])
        low, high = self.radius_limits()
        self.radii = np.clip(self.base_radii * uniform_scale, low, high)

        self.clamp_into_bounds()
        logger.info(
            f"Arena resized from {old_width:.0f}x{old_height:.0f} to "
            f"{new_width:.0f}x{new_height:.0f} (radius scale {uniform_scale:.3f})."
        )

    def snapshot(self):
        """Returns an immutable tuple of ParticleSnapshot records."""
        records = []
        for i in range(self.num_particles):
            catalyst = bool(self.is_catalyst[i])
            records.append(ParticleSnapshot(
                position=(float(self.positions[i, 0]), float(self.positions[i, 1])),
                radius=float(self.radii[i]),
                kind=int(self.kinds[i]),
                denatured=bool(self.denatured[i]) if catalyst else False,
                denature_factor=float(self.denature_factors[i]) if catalyst else 0.0,
                orientation=None if catalyst else float(self.orientations[i]),
                shape_seed=float(self.shape_seeds[i]),
            ))
        return tuple(records)
