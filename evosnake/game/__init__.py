"""
Snake Game Module

This module contains the headless Snake simulation used to score agents.
The pygame renderer lives in evosnake.game.renderer.
"""

from .snake_game import Game, GameStats, Direction

__all__ = ['Game', 'GameStats', 'Direction']
