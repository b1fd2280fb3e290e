"""Tests for evosnake.ai.agent."""

import math

import numpy as np
import pytest

from evosnake.ai.agent import BinaryAgent, SnakeAgent
from evosnake.ai.matrix import Matrix
from evosnake.ai.neural_network import NeuralNetwork
from evosnake.game.snake_game import Direction, Game, GameStats


def small_snake(seed=0, **kwargs):
    settings = dict(grid_width=8, grid_height=8, episodes=2, max_steps=60)
    settings.update(kwargs)
    return SnakeAgent(rng=np.random.default_rng(seed), **settings)


def biased_network(output):
    # Zero weights, so the bias alone decides the winning output
    bias = [[0.0, 0.0, 0.0, 0.0]]
    bias[0][output] = 5.0
    return NeuralNetwork([6, 4], [Matrix(6, 4)], [Matrix.from_rows(bias, dtype=float)])


class TestBinaryAgent:
    def test_fitness_is_count_to_the_fortieth(self) -> None:
        assert BinaryAgent([True] * 8).fitness() == 8.0 ** 40
        assert BinaryAgent([True, False, True]).fitness() == 2.0 ** 40
        assert BinaryAgent([False] * 4).fitness() == 0.0

    def test_random_genome_length(self) -> None:
        agent = BinaryAgent(length=12, rng=np.random.default_rng(0))
        assert len(agent.bits) == 12

    def test_crossover_takes_each_bit_from_a_parent(self) -> None:
        ones = BinaryAgent([True] * 64)
        zeros = BinaryAgent([False] * 64)
        child = ones.crossover(zeros, np.random.default_rng(3))
        assert 0 < child.count_true() < 64
        assert ones.count_true() == 64
        assert zeros.count_true() == 0

    def test_crossover_length_mismatch(self) -> None:
        with pytest.raises(ValueError):
            BinaryAgent([True] * 3).crossover(BinaryAgent([True] * 4))

    def test_crossover_with_other_kind(self) -> None:
        with pytest.raises(TypeError):
            BinaryAgent([True] * 6).crossover(small_snake())

    def test_mutation_probability_extremes(self) -> None:
        bits = [True, False, True, True]
        assert BinaryAgent(bits, mutation_prob=0.0).mutate().bits == tuple(bits)
        assert BinaryAgent(bits, mutation_prob=1.0).mutate().bits == (False, True, False, False)

    def test_copy_is_equal_and_independent(self) -> None:
        agent = BinaryAgent([True, False], mutation_prob=0.2)
        duplicate = agent.copy()
        assert duplicate is not agent
        assert duplicate.bits == agent.bits
        assert duplicate.mutation_prob == 0.2


class TestSnakeAgent:
    def test_default_network_shape(self) -> None:
        agent = SnakeAgent(rng=np.random.default_rng(0))
        assert agent.network.shape[0] == 6
        assert agent.network.shape[-1] == 4

    def test_rejects_wrong_network_shape(self) -> None:
        with pytest.raises(ValueError):
            SnakeAgent(NeuralNetwork([5, 4]))

    @pytest.mark.parametrize("index,direction", [
        (0, Direction.UP), (1, Direction.RIGHT), (2, Direction.DOWN), (3, Direction.LEFT)])
    def test_arg_max_selects_direction(self, index, direction) -> None:
        agent = SnakeAgent(biased_network(index))
        stats = GameStats(1, -2, 3, 4, 5, 6, 1)
        assert agent.get_next_direction(stats) == direction

    def test_fitness_is_reproducible_with_seed(self) -> None:
        agent = small_snake()
        assert agent.fitness(np.random.default_rng(5)) == agent.fitness(np.random.default_rng(5))

    def test_fitness_lower_bound(self) -> None:
        # Every episode makes at least one move from the grid centre
        for seed in range(5):
            assert small_snake(seed).fitness(np.random.default_rng(seed)) >= 0.0

    def test_straight_runner_score(self) -> None:
        # Always heading right from (4, 4) on an 8x8 grid: 3 moves, then the wall
        agent = SnakeAgent(biased_network(1), grid_width=8, grid_height=8, episodes=1, max_steps=100)
        game = Game(8, 8, start=(4, 4), food=(0, 0))
        best_score, last_stats = agent.play_episode(game)
        assert best_score == 1
        assert game.head == (7, 4)
        assert (last_stats.food_dx, last_stats.food_dy) == (-7, -4)

    def test_episode_score_subtracts_scaled_food_distance(self) -> None:
        agent = SnakeAgent(biased_network(1), grid_width=8, grid_height=8, episodes=1, max_steps=100)
        game = Game(8, 8, start=(4, 4), food=(0, 0))
        expected = 1 - math.hypot(7, 4) / math.hypot(8, 8)
        assert agent.episode_score(game=game) == pytest.approx(expected)

    def test_fitness_is_mean_of_episode_scores(self) -> None:
        agent = small_snake(4, episodes=3)
        replay = np.random.default_rng(7)
        scores = [agent.episode_score(replay) for _ in range(3)]
        assert agent.fitness(np.random.default_rng(7)) == pytest.approx(sum(scores) / 3)

    def test_won_game_counts_final_length(self) -> None:
        # Right onto the food, back left, then left onto the last free cell
        agent = SnakeAgent(biased_network(3), grid_width=3, grid_height=1, episodes=1)
        game = Game(3, 1, start=(1, 0), food=(2, 0), rng=np.random.default_rng(0))
        best_score, _ = agent.play_episode(game)
        assert game.won
        assert best_score == game.score == 3

    def test_won_game_scores_without_distance_penalty(self) -> None:
        agent = SnakeAgent(biased_network(3), grid_width=3, grid_height=1, episodes=1)
        game = Game(3, 1, start=(1, 0), food=(2, 0), rng=np.random.default_rng(0))
        assert agent.episode_score(game=game) == 3.0

    def test_episode_without_moves_scores_minimum(self) -> None:
        agent = SnakeAgent(biased_network(1), grid_width=1, grid_height=1, episodes=3)
        assert agent.episode_score(np.random.default_rng(0)) == 0.0
        assert agent.fitness(np.random.default_rng(0)) == 0.0

    def test_hunger_limit_stops_episode(self) -> None:
        agent = SnakeAgent(biased_network(1), grid_width=50, grid_height=5, max_steps=1000, hunger_limit=3)
        game = Game(50, 5, start=(0, 2), food=(0, 0))
        agent.play_episode(game)
        assert game.steps == 4
        assert not game.done

    def test_step_cap(self) -> None:
        agent = small_snake(max_steps=2)
        game = Game(8, 8, rng=np.random.default_rng(0))
        agent.play_episode(game)
        assert game.steps <= 2

    def test_mutate_and_crossover_return_new_agents(self) -> None:
        a = small_snake(0)
        b = small_snake(1)
        child = a.crossover(b, np.random.default_rng(0))
        mutant = a.mutate(np.random.default_rng(0))
        for agent in (child, mutant):
            assert isinstance(agent, SnakeAgent)
            assert agent.network is not a.network
            assert agent.network.shape == a.network.shape
            assert agent.max_steps == a.max_steps

    def test_copy_shares_no_network(self) -> None:
        agent = small_snake()
        duplicate = agent.copy()
        assert duplicate.network == agent.network
        assert duplicate.network is not agent.network
        assert duplicate.network.weights[0] is not agent.network.weights[0]
