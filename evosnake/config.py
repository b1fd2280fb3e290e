"""
Run-wide defaults for the evolutionary Snake trainer.

Classes take these as keyword defaults, so a single run can override any of
them without touching this module.
"""

# Game grid
GRID_WIDTH = 20
GRID_HEIGHT = 20
TILE_SIZE = 16  # pixels per cell, only used for rendering

# Network topology: 6 sensor inputs -> hidden layers -> 4 directions
NETWORK_INPUTS = 6
NETWORK_HIDDEN_LAYERS = (16, 16)
NETWORK_OUTPUTS = 4

# Snake fitness
EPISODES_PER_EVAL = 5
MAX_EPISODE_STEPS = 50_000
EMPTY_EPISODE_SCORE = 0.0  # score for an episode that ended before its first move

# Genetic operators
MUTATION_PROB = 0.1
MUTATION_AMOUNT = 2.5
BINARY_MUTATION_PROB = 0.05
BINARY_FITNESS_EXPONENT = 40

# Population
ELITE_FRACTION = 0.1
NUM_THREADS = 4
