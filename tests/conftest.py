import json
import os
from pathlib import Path

# pygame must never try to open a real window during tests
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import numpy as np
import pytest

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"


class FixedDrawRng:
    """
    Random source whose `random()` always returns the same value, so trial
    outcomes are forced: 0.0 makes every trial succeed, 1.0 makes every trial
    fail. `uniform()` is delegated to a seeded generator so layouts stay
    realistic. Every `random()` call is recorded.
    """
    def __init__(self, value, seed=0):
        self.value = value
        self.generator = np.random.default_rng(seed)
        self.random_calls = []

    def random(self, size=None):
        self.random_calls.append(size)
        if size is None:
            return self.value
        return np.full(size, self.value, dtype=float)

    def uniform(self, low=0.0, high=1.0, size=None):
        return self.generator.uniform(low, high, size)


@pytest.fixture
def full_config():
    with open(CONFIG_PATH, "r") as f:
        return json.load(f)


@pytest.fixture
def sim_config(full_config):
    return dict(full_config["simulation"])


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def never_rng():
    return FixedDrawRng(1.0)


@pytest.fixture
def always_rng():
    return FixedDrawRng(0.0)
