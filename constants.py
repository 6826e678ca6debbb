# constants.py

"""
Application Constants

This module defines static configuration values for the application's framework
and the fixed reference points of the kinetic model. Tunable simulation
parameters live in config.json; the defaults below are used for any key the
'simulation' section leaves out.

Data Contract:
- All values are immutable constants.
- Units are specified in comments where applicable.
"""

# Screen dimensions (logical baseline, scaled on window resize)
WIDTH = 800  # Pixels
SIM_HEIGHT = 420  # Pixels, simulation arena
CHART_HEIGHT = 260  # Pixels, rate-vs-temperature chart
SLIDER_HEIGHT = 48  # Pixels, temperature control strip
MIN_LAYOUT_SCALE = 0.55
MAX_LAYOUT_SCALE = 1.4

# Framerate
FPS = 60  # Frames per second

# Colors (RGB)
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
BACKGROUND = (15, 23, 42)
CATALYST_COLOR = (56, 189, 248)
CATALYST_NOTCH_COLOR = (15, 23, 42)
DENATURED_COLOR = (37, 99, 235)
DENATURED_BLOB_COLOR = (220, 38, 38)
SUBSTRATE_COLOR = (251, 191, 36)
SUBSTRATE_RIDGE_COLOR = (255, 230, 179)
AXIS_COLOR = (148, 163, 184)
CURVE_COLOR = (74, 222, 128)
MARKER_COLOR = (248, 113, 113)
LABEL_COLOR = (241, 245, 249)

# Window Title
TITLE = "Enzyme Kinetics Simulator"

# Visual Effects
REACTION_RIPPLE_DURATION = 0.45  # Seconds
BLOOM_RADIUS = 12  # Downscale factor of the glow pass. Larger is more diffuse.
BLOOM_INTENSITY = 90  # The brightness of the glow (0-255).

# Chart
CHART_MIN_TEMP = 0.0  # Celsius
CHART_MAX_TEMP = 80.0  # Celsius
CHART_SAMPLE_STEP = 2  # Celsius between reference curve samples

# --- Kinetic model reference points ---
OPTIMUM_TEMPERATURE = 37.0  # Celsius, enzyme optimum and denaturation threshold
Q10_BASELINE_TEMPERATURE = 25.0  # Celsius, speed factor == 1 here
Q10 = 2.0  # Rate multiplier per 10 degrees
RATE_WINDOW_SECONDS = 10.0  # Sliding window for the reported reaction rate
REFERENCE_FPS = 60.0  # Frame rate the per-tick constants are calibrated for
DENATURE_HISTORY_LIMIT = 512  # Denaturation checks kept for inspection
PENDING_EVENT_LIMIT = 256  # Undrained reaction events kept for the renderer

SPEED_POLICY_COLLISION = "collision"
SPEED_POLICY_OPTIMUM_DECAY = "optimum_decay"
SPEED_POLICIES = (SPEED_POLICY_COLLISION, SPEED_POLICY_OPTIMUM_DECAY)

# --- Simulation defaults (overridden by config.json 'simulation') ---
SIMULATION_DEFAULTS = {
    'catalyst_count': 6,
    'substrate_count': 14,
    'catalyst_radius': 22.0,
    'substrate_radius': 10.0,
    'catalyst_radius_range': (10.0, 40.0),
    'substrate_radius_range': (5.0, 20.0),
    'catalyst_spawn_margin': 50.0,
    'substrate_spawn_margin': 30.0,
    'respawn_margin': 20.0,
    'initial_temperature': 25.0,
    'speed_policy': SPEED_POLICY_COLLISION,
    'decay_half_life': 3.0,  # Celsius past the optimum per halving
    'base_reaction_rate': 0.04,
    'proximity_slack': 6.0,
    'efficiency_spread': 14.0,
    'integrity_loss': 0.85,
    'catalyst_cooldown': 15,  # Reference ticks (1/60 s each)
    'substrate_cooldown': 10,  # Reference ticks (1/60 s each)
    'denature_seed_factor': 0.15,
    'denature_ramp_rate': 0.004,
    'denature_probability_scale': 0.05,
    'denature_probability_exponent': 1.1,
    'denature_probability_cap': 0.9,
    'orientation_smoothing': 0.15,
    'steering_jitter': 0.1,
    'steering_gain': 0.02,
    'base_max_speed': 1.2,
    'speed_spread': 0.8,
    'max_frame_dt': 0.1,  # Seconds
}
