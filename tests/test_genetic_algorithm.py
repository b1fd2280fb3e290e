"""Tests for evosnake.ai.genetic_algorithm."""

import numpy as np
import pytest

from evosnake.ai.agent import Agent, BinaryAgent, SnakeAgent
from evosnake.ai.genetic_algorithm import Population


class ScoredAgent(Agent):
    """Deterministic test agent: fitness is a fixed value, mutants are strictly worse"""

    def __init__(self, value):
        self.value = value

    def fitness(self, rng=None):
        return float(self.value)

    def crossover(self, other, rng=None):
        return ScoredAgent((self.value + other.value) / 2)

    def mutate(self, rng=None):
        return ScoredAgent(self.value - 1)

    def copy(self):
        return ScoredAgent(self.value)


def binary_population(size=6, length=8, seed=0, **kwargs):
    rng = np.random.default_rng(seed)
    agents = [BinaryAgent(length=length, mutation_prob=0.05, rng=rng) for _ in range(size)]
    return Population(agents, rng=rng, **kwargs)


class TestEvaluate:
    def test_scores_in_agent_order(self) -> None:
        population = Population([ScoredAgent(v) for v in (3, 1, 2)])
        assert population.evaluate() == [3.0, 1.0, 2.0]

    def test_fitness_is_computed_once(self) -> None:
        calls = []

        class CountingAgent(ScoredAgent):
            def fitness(self, rng=None):
                calls.append(self)
                return super().fitness(rng)

        population = Population([CountingAgent(1), CountingAgent(2)])
        population.evaluate()
        population.get_best()
        population.breed()
        assert len(calls) == 2

    def test_snake_evaluation_independent_of_thread_count(self) -> None:
        def build(num_threads):
            rng = np.random.default_rng(11)
            agents = [SnakeAgent(rng=rng, grid_width=8, grid_height=8, episodes=2, max_steps=40)
                      for _ in range(6)]
            return Population(agents, rng=rng, num_threads=num_threads)

        assert build(1).evaluate() == build(4).evaluate()


class TestGetBest:
    def test_returns_fittest_agent(self) -> None:
        agents = [ScoredAgent(v) for v in (2, 9, 4)]
        best, score = Population(agents).get_best()
        assert best is agents[1]
        assert score == 9.0

    def test_ties_go_to_first_agent(self) -> None:
        agents = [ScoredAgent(5), ScoredAgent(5)]
        best, _ = Population(agents).get_best()
        assert best is agents[0]

    def test_empty_population(self) -> None:
        with pytest.raises(ValueError):
            Population([]).get_best()


class TestBreed:
    def test_requires_two_agents(self) -> None:
        with pytest.raises(ValueError, match="less than 2"):
            Population([ScoredAgent(1)]).breed()

    @pytest.mark.parametrize("size", [2, 5, 10, 23])
    def test_preserves_size(self, size) -> None:
        population = Population([ScoredAgent(v) for v in range(size)], rng=np.random.default_rng(0))
        child = population.breed()
        assert len(child) == size
        assert child.generation == 1

    def test_best_agent_is_copied_unchanged(self) -> None:
        agents = [ScoredAgent(v) for v in (3, 8, 5, 1)]
        population = Population(agents, rng=np.random.default_rng(0))
        child = population.breed()
        assert child.agents[0].value == 8
        assert child.agents[0] is not agents[1]

    def test_children_are_mutants_of_the_elite(self) -> None:
        # 20 agents -> elite of 2 (values 19 and 18), mutants lose 1
        population = Population([ScoredAgent(v) for v in range(20)], rng=np.random.default_rng(0))
        values = [agent.value for agent in population.breed()]
        assert values[0] == 19
        assert set(values[1:]) <= {18, 17}

    def test_old_generation_untouched(self) -> None:
        population = binary_population()
        before = [agent.bits for agent in population]
        population.breed()
        assert [agent.bits for agent in population] == before

    def test_elitism_is_monotonic(self) -> None:
        population = binary_population(size=10, length=12, seed=3)
        _, previous = population.get_best()
        for _ in range(15):
            population = population.breed()
            _, best = population.get_best()
            assert best >= previous
            previous = best

    def test_snake_population_breeds(self) -> None:
        rng = np.random.default_rng(2)
        agents = [SnakeAgent(rng=rng, grid_width=8, grid_height=8, episodes=1, max_steps=30) for _ in range(5)]
        child = Population(agents, rng=rng).breed()
        assert len(child) == 5
        assert all(isinstance(agent, SnakeAgent) for agent in child)


class TestRouletteBreeding:
    def test_preserves_size(self) -> None:
        population = binary_population(size=8, breeding='roulette')
        child = population.breed()
        assert len(child) == 8
        assert child.breeding == 'roulette'

    def test_single_positive_fitness_does_not_stall(self) -> None:
        agents = [BinaryAgent([True, False])] + [BinaryAgent([False, False]) for _ in range(3)]
        population = Population(agents, rng=np.random.default_rng(0), breeding='roulette')
        assert len(population.breed()) == 4

    def test_all_zero_fitness_falls_back_to_uniform(self) -> None:
        agents = [BinaryAgent([False] * 4) for _ in range(3)]
        population = Population(agents, rng=np.random.default_rng(0), breeding='roulette')
        assert len(population.breed()) == 3

    def test_unknown_policy(self) -> None:
        with pytest.raises(ValueError):
            Population([ScoredAgent(1)], breeding='tournament')


class TestBinaryEndToEnd:
    def test_six_agents_reach_all_true(self) -> None:
        population = binary_population(size=6, length=8, seed=1234)
        best, _ = population.get_best()
        counts = [best.count_true()]
        for _ in range(100):
            population = population.breed()
            best, _ = population.get_best()
            counts.append(best.count_true())

        assert all(later >= earlier for earlier, later in zip(counts, counts[1:]))
        assert counts[-1] == 8
