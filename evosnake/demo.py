#!/usr/bin/env python3
"""
Evolutionary Snake AI Demo

Evolves a population of Snake players and, after every generation, plays
one game with the generation's best agent in a pygame window. With
--manual the arrow keys steer the snake instead.
"""

import argparse
import sys

import numpy as np
import pygame

from . import config
from .ai.agent import SnakeAgent
from .ai.genetic_algorithm import Population
from .game.renderer import GameRenderer
from .game.snake_game import Direction, Game

ARROW_KEYS = {
    pygame.K_UP: Direction.UP,
    pygame.K_DOWN: Direction.DOWN,
    pygame.K_LEFT: Direction.LEFT,
    pygame.K_RIGHT: Direction.RIGHT,
}


def watch_agent(renderer, agent, rng, label=None, max_steps=2000):
    """Play one game with agent, drawing every tick. Returns False if the window was closed."""
    game = Game(agent.grid_width, agent.grid_height, renderer.tile_size, rng=rng)
    for _ in range(max_steps):
        stats = game.step()
        if not renderer.render(game, agent.network, label):
            return False
        if stats is None:
            break
        game.turn(agent.get_next_direction(stats))
    return True


def evolution_demo(population_size=200, seed=None, episodes=config.EPISODES_PER_EVAL,
                   max_steps=config.MAX_EPISODE_STEPS, hunger_limit=200, fps=30):
    """Breed generations until the window is closed"""
    rng = np.random.default_rng(seed)
    population = Population(
        [SnakeAgent(rng=rng, episodes=episodes, max_steps=max_steps, hunger_limit=hunger_limit)
         for _ in range(population_size)],
        rng=rng,
    )
    renderer = GameRenderer(config.GRID_WIDTH, config.GRID_HEIGHT, config.TILE_SIZE, render_delay=fps)

    print("Evolution demo - close the window to stop")
    print("=" * 40)

    generation = 1
    try:
        while True:
            population = population.breed()
            best, best_score = population.get_best()
            print(f"Best score of generation {generation}: {best_score:.3f}")
            if not watch_agent(renderer, best, rng, label=f"Generation {generation}"):
                break
            generation += 1
    finally:
        renderer.close()


def manual_demo(fps=10, seed=None):
    """Play Snake with the arrow keys"""
    rng = np.random.default_rng(seed)
    game = Game(config.GRID_WIDTH, config.GRID_HEIGHT, config.TILE_SIZE, rng=rng)
    renderer = GameRenderer(game.width, game.height, game.tile_size, render_delay=fps, show_network=False)

    print("Manual Snake - use the arrow keys, close the window to exit")
    try:
        while not game.done:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    return
                if event.type == pygame.KEYDOWN and event.key in ARROW_KEYS:
                    game.turn(ARROW_KEYS[event.key])
            game.step()
            if not renderer.render(game):
                return
        print(f"\nGame Over! Final score: {game.score}")
    finally:
        renderer.close()


def main():
    parser = argparse.ArgumentParser(description="Watch evolving Snake players, or play yourself")
    parser.add_argument('--manual', action='store_true', help="steer the snake with the arrow keys")
    parser.add_argument('--population', type=int, default=200)
    parser.add_argument('--seed', type=int, default=None)
    parser.add_argument('--episodes', type=int, default=config.EPISODES_PER_EVAL)
    parser.add_argument('--max-steps', type=int, default=config.MAX_EPISODE_STEPS)
    parser.add_argument('--hunger-limit', type=int, default=200)
    parser.add_argument('--fps', type=int, default=30)
    args = parser.parse_args()

    try:
        if args.manual:
            manual_demo(fps=args.fps, seed=args.seed)
        else:
            evolution_demo(population_size=args.population, seed=args.seed, episodes=args.episodes,
                           max_steps=args.max_steps, hunger_limit=args.hunger_limit, fps=args.fps)
    except KeyboardInterrupt:
        print("\n\nDemo interrupted by user.")
    except Exception as e:
        print(f"\nError: {e}")
        print("Make sure you have pygame installed: pip install pygame")
        sys.exit(1)


if __name__ == "__main__":
    main()
