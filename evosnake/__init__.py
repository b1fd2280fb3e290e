"""
Evolutionary Snake AI

Evolves fixed-topology feed-forward networks that play Snake (and a toy
bit-string genome as an optimizer sanity check) with a generational
genetic algorithm.
"""

__version__ = "0.1.0"
