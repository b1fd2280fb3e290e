import math
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from .. import config

BREEDING_POLICIES = ('elitist', 'roulette')


class Population:
    """One generation of agents.

    A population never changes its agents: breed() returns the next
    generation as a new Population. Fitness is evaluated at most once per
    population (in parallel threads) and shared by evaluate(), get_best()
    and breed().
    """

    def __init__(self, agents, rng=None, num_threads=config.NUM_THREADS,
                 elite_fraction=config.ELITE_FRACTION, breeding='elitist', generation=0):
        # Args:
        #   agents: agents of this generation, all of the same kind
        #   rng: numpy Generator for evaluation seeds and parent sampling
        #   num_threads: worker threads for fitness evaluation
        #   elite_fraction: share of the best agents used as parents
        #   breeding: 'elitist' (mutate copies of the elite) or
        #             'roulette' (fitness-weighted crossover of two distinct parents)
        #   generation: generation counter, incremented by breed()
        if breeding not in BREEDING_POLICIES:
            raise ValueError(f"Unknown breeding policy {breeding!r}, expected one of {BREEDING_POLICIES}")
        if not 0.0 < elite_fraction <= 1.0:
            raise ValueError(f"Elite fraction must be in (0, 1], got {elite_fraction}")
        self.agents = tuple(agents)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.num_threads = max(1, num_threads)
        self.elite_fraction = elite_fraction
        self.breeding = breeding
        self.generation = generation
        self._fitnesses = None

    def __len__(self):
        return len(self.agents)

    def __iter__(self):
        return iter(self.agents)

    def evaluate(self):
        """Fitness of every agent, in agent order"""
        if self._fitnesses is None:
            # One independent seed per agent keeps results independent of thread scheduling
            seeds = self.rng.integers(0, 2**63 - 1, size=len(self.agents))
            with ThreadPoolExecutor(max_workers=self.num_threads) as executor:
                futures = [executor.submit(agent.fitness, np.random.default_rng(int(seed)))
                           for agent, seed in zip(self.agents, seeds)]
                self._fitnesses = tuple(future.result() for future in futures)
        return list(self._fitnesses)

    def get_best(self):
        """(agent, fitness) of the fittest agent; the earliest agent wins ties"""
        if not self.agents:
            raise ValueError("Cannot get the best agent of an empty population")
        fitnesses = self.evaluate()
        best_index = max(range(len(fitnesses)), key=lambda i: fitnesses[i])
        return self.agents[best_index], fitnesses[best_index]

    def average_fitness(self):
        return float(np.mean(self.evaluate()))

    def ranked_indices(self):
        """Agent indices sorted by ascending fitness"""
        fitnesses = self.evaluate()
        return sorted(range(len(fitnesses)), key=lambda i: fitnesses[i])

    def breed(self):
        """Build the next generation, of the same size, with the configured policy"""
        if len(self.agents) < 2:
            raise ValueError("Cannot breed with less than 2 agents")
        if self.breeding == 'roulette':
            new_agents = self._breed_roulette()
        else:
            new_agents = self._breed_elitist()
        return Population(new_agents, rng=self.rng, num_threads=self.num_threads,
                          elite_fraction=self.elite_fraction, breeding=self.breeding,
                          generation=self.generation + 1)

    def _breed_elitist(self):
        # Best agent survives unchanged, the rest are mutants of random elite members
        ranked = self.ranked_indices()
        # Rounded first so that e.g. 0.1 * 30 counts as 3, not 4
        elite_count = math.ceil(round(self.elite_fraction * len(self.agents), 9))
        elite = ranked[-elite_count:]

        new_agents = [self.agents[elite[-1]].copy()]
        while len(new_agents) < len(self.agents):
            parent = self.agents[elite[int(self.rng.integers(len(elite)))]]
            new_agents.append(parent.mutate(self.rng))
        return new_agents

    def _roulette_index(self, weights):
        total = weights.sum()
        if total <= 0:
            # No usable fitness signal: pick uniformly
            return int(self.rng.integers(len(weights)))
        return int(self.rng.choice(len(weights), p=weights / total))

    def _breed_roulette(self):
        fitnesses = np.array(self.evaluate(), dtype=float)
        weights = np.clip(fitnesses, 0.0, None)

        new_agents = []
        while len(new_agents) < len(self.agents):
            first = self._roulette_index(weights)
            if np.count_nonzero(weights) == 1:
                # Only one agent can win the wheel, so its partner is drawn uniformly
                others = [i for i in range(len(weights)) if i != first]
                second = others[int(self.rng.integers(len(others)))]
            else:
                second = first
                while second == first:
                    second = self._roulette_index(weights)
            child = self.agents[first].crossover(self.agents[second], self.rng)
            new_agents.append(child.mutate(self.rng))
        return new_agents
