"""
Deterministic grid-world Snake used as the fitness oracle.

The game has no notion of rendering or input devices: a controller calls
turn() to choose the next direction and step() to advance one tick.
step() returns a GameStats sensor snapshot while the game is running and
None once it is over.
"""

from collections import deque
from dataclasses import dataclass
from enum import Enum

import numpy as np

from .. import config


class Direction(Enum):
    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @staticmethod
    def get_index(direction):
        return {Direction.UP: 0, Direction.RIGHT: 1, Direction.DOWN: 2, Direction.LEFT: 3}[direction]

    @staticmethod
    def from_index(index):
        return (Direction.UP, Direction.RIGHT, Direction.DOWN, Direction.LEFT)[index]


@dataclass(frozen=True)
class GameStats:
    """Sensor snapshot taken after a successful move.

    food_dx / food_dy are signed (food minus head). The four distances count
    cells from the head to the nearest wall or body segment in that
    direction, so 1 means the neighbouring cell is blocked.
    """

    food_dx: int
    food_dy: int
    distance_up: int
    distance_right: int
    distance_down: int
    distance_left: int
    score: int

    def as_inputs(self):
        # Order matches the network's input layer
        return [self.food_dx, self.food_dy,
                self.distance_up, self.distance_right, self.distance_down, self.distance_left]


class Game:
    """Single-player Snake on a width x height grid"""

    def __init__(self, width=config.GRID_WIDTH, height=config.GRID_HEIGHT, tile_size=config.TILE_SIZE,
                 start=None, food=None, rng=None):
        # Args:
        #   width, height: grid size in cells
        #   tile_size: pixels per cell, only read by the renderer
        #   start: initial (x, y) of the one-cell snake (grid centre by default)
        #   food: initial (x, y) of the food (random free cell by default)
        #   rng: numpy Generator used for food placement
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid must be at least 1x1, got {width}x{height}")
        self.width = width
        self.height = height
        self.tile_size = tile_size
        self.rng = rng if rng is not None else np.random.default_rng()

        if start is None:
            start = (width // 2, height // 2)
        if not self._in_bounds(start):
            raise ValueError(f"Start position {start} is outside the {width}x{height} grid")

        # Head first, tail last
        self.snake_positions = deque([tuple(start)])
        self.direction = Direction.RIGHT
        self.done = False
        self.won = False
        self.steps = 0

        if food is None:
            self.food_position = self._place_food()
        else:
            food = tuple(food)
            if not self._in_bounds(food) or food in self.snake_positions:
                raise ValueError(f"Food position {food} must be a free cell inside the grid")
            self.food_position = food

    @property
    def head(self):
        return self.snake_positions[0]

    @property
    def score(self):
        return len(self.snake_positions)

    @property
    def in_progress(self):
        return not self.done

    def _in_bounds(self, position):
        x, y = position
        return 0 <= x < self.width and 0 <= y < self.height

    def _place_food(self):
        """Rejection-sample a random cell not covered by the snake"""
        if len(self.snake_positions) >= self.width * self.height:
            return None  # Grid is full
        occupied = set(self.snake_positions)
        while True:
            position = (int(self.rng.integers(self.width)), int(self.rng.integers(self.height)))
            if position not in occupied:
                return position

    def turn(self, direction):
        """Set the direction used by the next step()"""
        self.direction = direction

    def step(self):
        """Advance one tick. Returns GameStats while running, None once the game is over."""
        if self.done:
            return None

        self.steps += 1
        head = self.head
        dx, dy = self.direction.value
        new_head = (head[0] + dx, head[1] + dy)

        if not self._in_bounds(new_head):
            self.done = True
            return None

        # The tail moves out of the way on this tick, so it does not count as a collision
        body = list(self.snake_positions)[:-1]
        if new_head in body:
            self.done = True
            return None

        self.snake_positions.appendleft(new_head)
        if new_head == self.food_position:
            self.food_position = self._place_food()
            if self.food_position is None:
                self.done = True
                self.won = True
                return None
        else:
            self.snake_positions.pop()

        return self.get_stats()

    def get_stats(self):
        head_x, head_y = self.head
        food_x, food_y = self.food_position

        up = head_y + 1
        down = self.height - head_y
        left = head_x + 1
        right = self.width - head_x

        for x, y in list(self.snake_positions)[1:]:
            if x == head_x:
                offset = y - head_y
                if 0 < -offset < up:
                    up = -offset
                elif 0 < offset < down:
                    down = offset
            elif y == head_y:
                offset = x - head_x
                if 0 < -offset < left:
                    left = -offset
                elif 0 < offset < right:
                    right = offset

        return GameStats(
            food_dx=food_x - head_x,
            food_dy=food_y - head_y,
            distance_up=up,
            distance_right=right,
            distance_down=down,
            distance_left=left,
            score=self.score,
        )
