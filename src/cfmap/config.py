"""
Global Configuration and Safety Defaults.

Constants that bound the layout engine and hierarchy walkers. Visual
properties live in GraphProperties (loaded from graph.toml), not here.
"""

from pathlib import Path

# --- Simulation schedule ---
# The solver is considered settled once alpha drops below this cutoff
DEFAULT_ALPHA_MIN = 0.05

# Per-tick decay, chosen so alpha would reach 0.001 after 300 ticks
DEFAULT_ALPHA_DECAY = 1 - pow(0.001, 1 / 300)

# Fraction of velocity kept after each tick is (1 - velocity decay)
DEFAULT_VELOCITY_DECAY = 0.4

# Hard cap on ticks per run; a run that reaches it stops unsettled
DEFAULT_MAX_TICKS = 300

# Squared distances below this are clamped in the repulsion term
DEFAULT_DISTANCE_MIN = 1.0

# Barnes-Hut opening criterion: a cell narrower than theta times its
# distance acts as one charge
DEFAULT_THETA = 0.9

# Scopes with at most this many nodes use the exact pairwise repulsion
DEFAULT_EXACT_CHARGE_LIMIT = 128

# Phyllotaxis seeding (radius step and golden angle)
INITIAL_RADIUS = 10.0
INITIAL_ANGLE_FACTOR = 3 - pow(5, 0.5)

# --- Hierarchy safety ---
# Deeper trees are treated as malformed input rather than walked
MAX_HIERARCHY_DEPTH = 64

# --- Files ---
DEFAULT_PROPERTIES_FILE = Path("graph.toml")
