# particle.py

"""
Particle kinds and the read-only records handed to rendering code.

The simulation itself stores particles as NumPy arrays (see particle_store.py);
these records are what leaves the engine. They are tuples, so a renderer
holding one cannot write back into simulation state.
"""

from collections import namedtuple

# Kind tags stored in ParticleStore.kinds
CATALYST = 0
SUBSTRATE = 1

# One particle as seen by a renderer.
# - position: (x, y) tuple of floats
# - kind: CATALYST or SUBSTRATE
# - denatured / denature_factor: catalyst state (False / 0.0 for substrates)
# - orientation: substrate facing in radians (None for catalysts)
# - shape_seed: fixed random phase used only for drawing
ParticleSnapshot = namedtuple(
    'ParticleSnapshot',
    ['position', 'radius', 'kind', 'denatured', 'denature_factor', 'orientation', 'shape_seed']
)

# A successful reaction, emitted for the renderer's ripple effect.
ReactionEvent = namedtuple('ReactionEvent', ['x', 'y', 'started'])

# One evaluated whole-degree denaturation band.
DenatureCheck = namedtuple('DenatureCheck', ['degree', 'probability', 'trials', 'denatured'])


def is_catalyst(snapshot: ParticleSnapshot) -> bool:
    return snapshot.kind == CATALYST
