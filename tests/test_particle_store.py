import math

import numpy as np
import pytest

from particle import CATALYST, SUBSTRATE
from particle_store import ParticleStore


def assert_within_bounds(store):
    radii = store.radii
    x, y = store.positions[:, 0], store.positions[:, 1]
    assert np.all(x >= radii - 1e-9)
    assert np.all(x <= store.width - radii + 1e-9)
    assert np.all(y >= radii - 1e-9)
    assert np.all(y <= store.height - radii + 1e-9)


def test_population_and_index_sets(sim_config, rng):
    store = ParticleStore(sim_config, rng, (800, 420))

    assert store.num_particles == 20
    assert list(store.catalyst_indices) == list(range(6))
    assert list(store.substrate_indices) == list(range(6, 20))
    assert np.all(store.kinds[store.catalyst_indices] == CATALYST)
    assert np.all(store.kinds[store.substrate_indices] == SUBSTRATE)
    assert_within_bounds(store)


def test_initial_catalyst_state_is_pristine(sim_config, rng):
    store = ParticleStore(sim_config, rng, (800, 420))
    assert not store.denatured.any()
    assert np.all(store.denature_factors == 0.0)
    assert np.all(store.cooldowns == 0)


def test_custom_counts(sim_config, rng):
    sim_config.update(catalyst_count=2, substrate_count=3)
    store = ParticleStore(sim_config, rng, (300, 300))
    assert store.catalyst_count == 2
    assert store.substrate_count == 3
    assert len(store.snapshot()) == 5


@pytest.mark.parametrize("key,value", [
    ("catalyst_count", 0),
    ("substrate_count", -3),
    ("catalyst_count", 2.5),
    ("catalyst_radius", 0),
    ("substrate_radius_range", (20, 5)),
])
def test_invalid_construction_parameters_fail_fast(sim_config, rng, key, value):
    sim_config[key] = value
    with pytest.raises(ValueError):
        ParticleStore(sim_config, rng, (800, 420))


@pytest.mark.parametrize("bounds", [(0, 420), (800, -1), (math.nan, 420), (800, math.inf)])
def test_invalid_arena_fails_fast(sim_config, rng, bounds):
    with pytest.raises(ValueError, match="Arena dimensions"):
        ParticleStore(sim_config, rng, bounds)


def test_resize_scales_positions_per_axis(sim_config, rng):
    store = ParticleStore(sim_config, rng, (800, 420))
    before = store.positions.copy()

    store.resize(1600, 840)

    assert store.width == 1600
    assert store.height == 840
    np.testing.assert_allclose(store.positions, before * 2.0)
    # Doubling both axes doubles the radii (within the kind ranges)
    np.testing.assert_allclose(store.radii[store.catalyst_indices], 40.0)
    np.testing.assert_allclose(store.radii[store.substrate_indices], 20.0)


def test_resize_uses_smaller_axis_scale_for_radii(sim_config, rng):
    store = ParticleStore(sim_config, rng, (800, 420))
    store.resize(1200, 441)  # x1.5 horizontally, x1.05 vertically
    np.testing.assert_allclose(store.radii[store.catalyst_indices], 22.0 * 1.05)
    np.testing.assert_allclose(store.radii[store.substrate_indices], 10.0 * 1.05)


def test_resize_clamps_radii_to_kind_ranges(sim_config, rng):
    store = ParticleStore(sim_config, rng, (800, 420))

    store.resize(80, 42)
    assert np.all(store.radii[store.catalyst_indices] == 10.0)
    assert np.all(store.radii[store.substrate_indices] == 5.0)

    store.resize(8000, 4200)
    assert np.all(store.radii[store.catalyst_indices] == 40.0)
    assert np.all(store.radii[store.substrate_indices] == 20.0)


def test_repeated_resizes_do_not_compound_radii(sim_config, rng):
    store = ParticleStore(sim_config, rng, (800, 420))
    store.resize(400, 210)
    store.resize(800, 420)
    np.testing.assert_allclose(store.radii, store.base_radii)


@pytest.mark.parametrize("size", [(300, 160), (1200, 300), (120, 900), (2000, 2000)])
def test_positions_stay_in_bounds_after_resize(sim_config, rng, size):
    store = ParticleStore(sim_config, rng, (800, 420))
    store.resize(*size)
    assert_within_bounds(store)
    assert np.all(store.radii > 0)


@pytest.mark.parametrize("size", [(0, 100), (100, -5), (math.nan, 100), (100, math.inf)])
def test_resize_rejects_invalid_dimensions(sim_config, rng, size):
    store = ParticleStore(sim_config, rng, (800, 420))
    before = store.positions.copy()
    with pytest.raises(ValueError):
        store.resize(*size)
    np.testing.assert_array_equal(store.positions, before)


def test_snapshot_is_read_only_view(sim_config, rng):
    store = ParticleStore(sim_config, rng, (800, 420))
    snapshot = store.snapshot()

    catalyst, substrate = snapshot[0], snapshot[-1]
    assert catalyst.kind == CATALYST
    assert catalyst.orientation is None
    assert substrate.kind == SUBSTRATE
    assert substrate.denatured is False
    assert substrate.denature_factor == 0.0
    assert isinstance(substrate.orientation, float)

    with pytest.raises(AttributeError):
        catalyst.radius = 100.0
    with pytest.raises(TypeError):
        catalyst.position[0] = -50.0

    # Moving the store does not change an already-taken snapshot
    store.positions += 1.0
    assert snapshot[0].position != store.snapshot()[0].position
