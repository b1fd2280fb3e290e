"""
Training Module for evolutionary Snake

This module contains the headless training driver for the genetic algorithm.
"""

from .train_genetic import train_genetic_algorithm, plot_evolution_progress, EvolutionRun

__all__ = ['train_genetic_algorithm', 'plot_evolution_progress', 'EvolutionRun']
