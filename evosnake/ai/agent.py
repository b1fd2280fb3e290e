import math
from abc import ABC, abstractmethod

import numpy as np

from .. import config
from ..game.snake_game import Direction, Game
from .neural_network import NeuralNetwork, sigmoid


class Agent(ABC):
    """One evolvable individual.

    Agents are immutable: crossover() and mutate() return new agents and
    copy() returns an independent duplicate. Every method that needs
    randomness takes an optional numpy Generator.
    """

    @abstractmethod
    def fitness(self, rng=None):
        """Quality score, higher is better"""

    @abstractmethod
    def crossover(self, other, rng=None):
        """Child combining this agent's genome with other's"""

    @abstractmethod
    def mutate(self, rng=None):
        """Randomly perturbed child of this agent"""

    @abstractmethod
    def copy(self):
        """Duplicate sharing no mutable state with this agent"""

    def _check_same_kind(self, other):
        if type(other) is not type(self):
            raise TypeError(f"Cannot cross {type(self).__name__} with {type(other).__name__}")


class BinaryAgent(Agent):
    # Bit-string genome rewarded for having as many True bits as possible

    def __init__(self, bits=None, length=8, mutation_prob=config.BINARY_MUTATION_PROB, rng=None):
        if not 0.0 <= mutation_prob <= 1.0:
            raise ValueError(f"Mutation probability must be in [0, 1], got {mutation_prob}")
        if bits is None:
            rng = rng if rng is not None else np.random.default_rng()
            bits = rng.random(length) < 0.5
        self._bits = tuple(bool(bit) for bit in bits)
        self.mutation_prob = mutation_prob

    @property
    def bits(self):
        return self._bits

    def count_true(self):
        return sum(self._bits)

    def fitness(self, rng=None):
        return float(self.count_true()) ** config.BINARY_FITNESS_EXPONENT

    def crossover(self, other, rng=None):
        self._check_same_kind(other)
        if len(other.bits) != len(self._bits):
            raise ValueError(f"Cannot cross genomes of length {len(self._bits)} and {len(other.bits)}")
        rng = rng if rng is not None else np.random.default_rng()
        bits = [mine if rng.random() < 0.5 else theirs for mine, theirs in zip(self._bits, other.bits)]
        return BinaryAgent(bits, mutation_prob=self.mutation_prob)

    def mutate(self, rng=None):
        rng = rng if rng is not None else np.random.default_rng()
        bits = [bit ^ (rng.random() < self.mutation_prob) for bit in self._bits]
        return BinaryAgent(bits, mutation_prob=self.mutation_prob)

    def copy(self):
        return BinaryAgent(self._bits, mutation_prob=self.mutation_prob)

    def __repr__(self):
        return "BinaryAgent(" + "".join("1" if bit else "0" for bit in self._bits) + ")"


class SnakeAgent(Agent):
    """Snake player controlled by a feed-forward network.

    Each tick the six sensor readings are squashed through a sigmoid, fed
    to the network, and the strongest of the four outputs picks the next
    direction (0: up, 1: right, 2: down, 3: left).

    Fitness is the mean over several independent episodes of
    (best score reached) - (final distance to food / grid diagonal).
    """

    SHAPE = (config.NETWORK_INPUTS,) + tuple(config.NETWORK_HIDDEN_LAYERS) + (config.NETWORK_OUTPUTS,)

    def __init__(self, network=None, rng=None, grid_width=config.GRID_WIDTH, grid_height=config.GRID_HEIGHT,
                 episodes=config.EPISODES_PER_EVAL, max_steps=config.MAX_EPISODE_STEPS,
                 mutation_prob=config.MUTATION_PROB, mutation_amount=config.MUTATION_AMOUNT,
                 hunger_limit=None):
        # Args:
        #   network: controller; a random network of SHAPE is created when omitted
        #   grid_width, grid_height: size of the evaluation games
        #   episodes: games played per fitness evaluation
        #   max_steps: step cap for one game
        #   mutation_prob, mutation_amount: hyperparameters passed to NeuralNetwork.mutate
        #   hunger_limit: end a game after this many steps without eating (None = never)
        if network is None:
            network = NeuralNetwork(self.SHAPE, rng=rng)
        elif network.shape[0] != config.NETWORK_INPUTS or network.shape[-1] != config.NETWORK_OUTPUTS:
            raise ValueError(f"Snake networks need {config.NETWORK_INPUTS} inputs and "
                             f"{config.NETWORK_OUTPUTS} outputs, got shape {network.shape}")
        if episodes < 1:
            raise ValueError(f"At least one episode is needed, got {episodes}")
        self.network = network
        self.grid_width = grid_width
        self.grid_height = grid_height
        self.episodes = episodes
        self.max_steps = max_steps
        self.mutation_prob = mutation_prob
        self.mutation_amount = mutation_amount
        self.hunger_limit = hunger_limit

    def _settings(self):
        return dict(grid_width=self.grid_width, grid_height=self.grid_height, episodes=self.episodes,
                    max_steps=self.max_steps, mutation_prob=self.mutation_prob,
                    mutation_amount=self.mutation_amount, hunger_limit=self.hunger_limit)

    def _with_network(self, network):
        return SnakeAgent(network, **self._settings())

    def get_next_direction(self, stats):
        inputs = sigmoid(np.array(stats.as_inputs(), dtype=float))
        return Direction.from_index(self.network.act(inputs))

    def play_episode(self, game):
        """Drive game until it ends or hits the step cap.

        Returns (best score, last in-progress GameStats or None). A won game
        reports its final length, which no GameStats carries.
        """
        best_score = 0
        last_stats = None
        steps_since_growth = 0
        for _ in range(self.max_steps):
            stats = game.step()
            if stats is None:
                if game.won:
                    best_score = game.score
                break
            if stats.score > best_score:
                best_score = stats.score
                steps_since_growth = 0
            else:
                steps_since_growth += 1
            last_stats = stats
            if self.hunger_limit is not None and steps_since_growth >= self.hunger_limit:
                break
            game.turn(self.get_next_direction(stats))
        return best_score, last_stats

    def episode_score(self, rng=None, game=None):
        # Plays a fresh game unless one is given
        if game is None:
            game = Game(self.grid_width, self.grid_height, rng=rng)
        best_score, last_stats = self.play_episode(game)
        if game.won:
            # Nothing left to eat, so no distance penalty
            return float(best_score)
        if last_stats is None:
            return config.EMPTY_EPISODE_SCORE
        diagonal = math.hypot(self.grid_width, self.grid_height)
        distance = math.hypot(last_stats.food_dx, last_stats.food_dy)
        return best_score - distance / diagonal

    def fitness(self, rng=None):
        rng = rng if rng is not None else np.random.default_rng()
        scores = [self.episode_score(rng) for _ in range(self.episodes)]
        return float(np.mean(scores))

    def crossover(self, other, rng=None):
        self._check_same_kind(other)
        return self._with_network(self.network.merge(other.network, rng=rng))

    def mutate(self, rng=None):
        return self._with_network(self.network.mutate(self.mutation_prob, self.mutation_amount, rng=rng))

    def copy(self):
        return self._with_network(self.network.copy())

    def __repr__(self):
        return f"SnakeAgent(shape={list(self.network.shape)})"
