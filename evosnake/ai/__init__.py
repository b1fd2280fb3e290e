"""
AI Module for evolutionary Snake

This module contains the matrix library, the feed-forward network with its
genetic operators, the agent genomes and the population breeding loop.
"""

from .matrix import Matrix
from .neural_network import NeuralNetwork, sigmoid
from .agent import Agent, BinaryAgent, SnakeAgent
from .genetic_algorithm import Population

__all__ = ['Matrix', 'NeuralNetwork', 'sigmoid', 'Agent', 'BinaryAgent', 'SnakeAgent', 'Population']
