# Headless Training Script for evolutionary Snake AI
# Evolves a population with the genetic algorithm and reports the best score
# of every generation. Runs without rendering for maximum speed.

import argparse
import multiprocessing
import sys
import time

import matplotlib.pyplot as plt
import numpy as np

from .. import config
from ..ai.agent import BinaryAgent, SnakeAgent
from ..ai.genetic_algorithm import Population


class EvolutionRun:
    # Final population of a training run plus its per-generation history

    def __init__(self, population):
        self.population = population
        self.best_fitness_history = []
        self.avg_fitness_history = []
        self.generation_time_history = []

    def record(self, population, elapsed):
        self.population = population
        _, best_fitness = population.get_best()
        self.best_fitness_history.append(best_fitness)
        self.avg_fitness_history.append(population.average_fitness())
        self.generation_time_history.append(elapsed)

    @property
    def best_agent(self):
        return self.population.get_best()[0]


def get_optimal_threads(population_size, cpu_count=None):
    """Worker threads for evaluating a population of the given size.

    One core is left for the main thread, and there are never more
    workers than agents to evaluate.
    """
    if cpu_count is None:
        cpu_count = multiprocessing.cpu_count()
    return max(1, min(cpu_count - 1, population_size, 16))


def create_agents(agent_type, population_size, rng, genome_length=8,
                  episodes=config.EPISODES_PER_EVAL, max_steps=config.MAX_EPISODE_STEPS, hunger_limit=None):
    # Build the initial generation
    if agent_type == 'binary':
        return [BinaryAgent(length=genome_length, rng=rng) for _ in range(population_size)]
    if agent_type == 'snake':
        return [SnakeAgent(rng=rng, episodes=episodes, max_steps=max_steps, hunger_limit=hunger_limit)
                for _ in range(population_size)]
    raise ValueError(f"Unknown agent type {agent_type!r}, expected 'snake' or 'binary'")


def train_genetic_algorithm(generations=50, population_size=50, agent_type='snake', seed=None,
                            num_threads=config.NUM_THREADS, breeding='elitist', episodes=config.EPISODES_PER_EVAL,
                            max_steps=config.MAX_EPISODE_STEPS, hunger_limit=None, genome_length=8,
                            verbose=True, quiet=False, generation_callback=None):
    """
    Train a population with the genetic algorithm

    Args:
        generations: Number of generations to breed
        population_size: Number of agents per generation
        agent_type: 'snake' (network-controlled players) or 'binary' (bit-string sanity check)
        seed: Seed for the run's random generator (None = fresh entropy)
        num_threads: Number of threads for parallel fitness evaluation
        breeding: 'elitist' or 'roulette' breeding policy
        episodes, max_steps, hunger_limit: Snake fitness settings
        genome_length: Bit count of binary agents
        verbose: Print per-generation results
        quiet: Minimal output mode
        generation_callback: Called as callback(generation, best_agent, best_fitness) after each generation;
            returning False stops the run early
    """
    rng = np.random.default_rng(seed)
    agents = create_agents(agent_type, population_size, rng, genome_length=genome_length,
                           episodes=episodes, max_steps=max_steps, hunger_limit=hunger_limit)
    population = Population(agents, rng=rng, num_threads=num_threads, breeding=breeding)
    run = EvolutionRun(population)

    if not quiet:
        print(f"Genetic Algorithm Training ({agent_type})")
        print(f"Population: {population_size}, Generations: {generations}, Threads: {num_threads}")
        print(f"Breeding: {breeding}, Seed: {seed}")
        print("=" * 60)

    start_time = time.time()

    for gen in range(1, generations + 1):
        gen_start = time.time()

        population = population.breed()
        best, best_fitness = population.get_best()
        run.record(population, time.time() - gen_start)

        if verbose and not quiet:
            print(f"Gen {gen:3d}: Best={best_fitness:.3f} Avg={run.avg_fitness_history[-1]:.3f} "
                  f"({run.generation_time_history[-1]:.1f}s)")
        elif quiet and gen % max(1, generations // 10) == 0:
            print(f"Gen {gen}/{generations}: Best={best_fitness:.3f}", end='\r')

        if generation_callback is not None and generation_callback(gen, best, best_fitness) is False:
            if not quiet:
                print(f"Stopped after generation {gen}")
            break

    elapsed_time = time.time() - start_time

    if not quiet and run.best_fitness_history:
        print(f"\nTraining completed in {elapsed_time:.1f} seconds")
        print(f"Final best fitness: {run.best_fitness_history[-1]:.3f}")
        print(f"Improvement: {run.best_fitness_history[-1] - run.best_fitness_history[0]:.3f}")

    return run


def plot_evolution_progress(run, save_path=None):
    # Plot the evolution progress over generations; shown on screen unless save_path is given
    fig = plt.figure(figsize=(15, 5))

    # Plot fitness evolution
    plt.subplot(1, 2, 1)
    plt.plot(run.best_fitness_history, label='Best Fitness', color='red', linewidth=2)
    plt.plot(run.avg_fitness_history, label='Average Fitness', color='blue', linewidth=2)
    plt.title('Fitness Evolution')
    plt.xlabel('Generation')
    plt.ylabel('Fitness')
    plt.legend()
    plt.grid(True, alpha=0.3)

    # Plot fitness distribution for last generation
    plt.subplot(1, 2, 2)
    plt.hist(run.population.evaluate(), bins=20, alpha=0.7, color='purple')
    plt.title(f'Fitness Distribution - Generation {run.population.generation}')
    plt.xlabel('Fitness')
    plt.ylabel('Count')
    plt.grid(True, alpha=0.3)

    plt.tight_layout()
    if save_path is not None:
        fig.savefig(save_path)
        plt.close(fig)
    else:
        plt.show()
    return fig


def build_parser():
    parser = argparse.ArgumentParser(description="Evolve Snake players with a genetic algorithm")
    parser.add_argument('--agent', choices=('snake', 'binary'), default='snake')
    parser.add_argument('--generations', type=int, default=50)
    parser.add_argument('--population', type=int, default=50)
    parser.add_argument('--threads', type=int, default=None,
                        help="fitness worker threads (default: based on CPU count and population)")
    parser.add_argument('--seed', type=int, default=None)
    parser.add_argument('--breeding', choices=('elitist', 'roulette'), default='elitist')
    parser.add_argument('--episodes', type=int, default=config.EPISODES_PER_EVAL)
    parser.add_argument('--max-steps', type=int, default=config.MAX_EPISODE_STEPS)
    parser.add_argument('--hunger-limit', type=int, default=None,
                        help="end a game after this many steps without eating")
    parser.add_argument('--quiet', action='store_true')
    parser.add_argument('--plot', nargs='?', const='', default=None, metavar='FILE',
                        help="show evolution plots, or save them to FILE")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    run = train_genetic_algorithm(
        generations=args.generations,
        population_size=args.population,
        agent_type=args.agent,
        seed=args.seed,
        num_threads=args.threads or get_optimal_threads(args.population),
        breeding=args.breeding,
        episodes=args.episodes,
        max_steps=args.max_steps,
        hunger_limit=args.hunger_limit,
        verbose=not args.quiet,
        quiet=args.quiet,
    )

    if args.plot is not None:
        plot_evolution_progress(run, save_path=args.plot or None)

    return run


def cli():
    try:
        main()
    except KeyboardInterrupt:
        print("\n\nTraining interrupted by user.")
        sys.exit(1)
    except Exception as e:
        print(f"\nError: {e}")
        sys.exit(1)


if __name__ == "__main__":
    cli()
