"""
Pygame renderer for the Snake game and the controlling network.

The renderer only reads game and network state; it never feeds anything
back into the simulation except the window's quit signal.
"""

import pygame


class GameRenderer:
    """Window showing the game grid on the left and the network graph on the right"""

    NETWORK_PANEL_WIDTH = 420

    def __init__(self, grid_width, grid_height, tile_size=16, render_delay=10, show_network=True):
        # Args:
        #   grid_width, grid_height: game size in cells
        #   tile_size: pixels per cell
        #   render_delay: frames per second cap (0 = unlimited)
        #   show_network: reserve a side panel for the network graph
        self.grid_width = grid_width
        self.grid_height = grid_height
        self.tile_size = tile_size
        self.render_delay = render_delay
        self.show_network = show_network

        pygame.init()
        self.game_width = grid_width * tile_size
        self.height = max(grid_height * tile_size, 300)
        self.width = self.game_width + (self.NETWORK_PANEL_WIDTH if show_network else 0)
        self.window = pygame.display.set_mode((self.width, self.height))
        pygame.display.set_caption("Snake AI - Genetic Algorithm")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 24)
        self.closed = False

        # Colors
        self.BACKGROUND = (127, 127, 127)
        self.SNAKE = (255, 0, 0)
        self.HEAD = (180, 0, 0)
        self.FOOD = (0, 255, 0)
        self.PANEL = (15, 15, 25)
        self.NODE = (150, 200, 255)
        self.POSITIVE = (60, 200, 90)
        self.NEGATIVE = (220, 70, 70)
        self.TEXT = (255, 255, 255)

    def poll_quit(self):
        """Drain the event queue; True once the window has been closed"""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.closed = True
        return self.closed

    def draw_game(self, game):
        game_rect = pygame.Rect(0, 0, self.game_width, self.grid_height * self.tile_size)
        pygame.draw.rect(self.window, self.BACKGROUND, game_rect)

        if game.food_position is not None:
            self._fill_cell(game.food_position, self.FOOD)

        for i, position in enumerate(game.snake_positions):
            self._fill_cell(position, self.HEAD if i == 0 else self.SNAKE)

        score_text = self.font.render(f"Score: {game.score}  Steps: {game.steps}", True, self.TEXT)
        self.window.blit(score_text, (10, 10))

    def _fill_cell(self, position, color):
        rect = pygame.Rect(position[0] * self.tile_size, position[1] * self.tile_size,
                           self.tile_size, self.tile_size)
        pygame.draw.rect(self.window, color, rect)

    def draw_network(self, network, label=None):
        if not self.show_network:
            return
        panel = pygame.Rect(self.game_width, 0, self.NETWORK_PANEL_WIDTH, self.height)
        pygame.draw.rect(self.window, self.PANEL, panel)

        margin = 30
        layer_gap = (self.NETWORK_PANEL_WIDTH - 2 * margin) / max(1, len(network.shape) - 1)
        positions = []
        for layer, size in enumerate(network.shape):
            x = self.game_width + margin + layer * layer_gap
            node_gap = (self.height - 2 * margin) / max(1, size)
            positions.append([(int(x), int(margin + node_gap * (node + 0.5))) for node in range(size)])

        # Connections colored by weight sign, thicker for larger magnitudes
        for layer, weight in enumerate(network.weights):
            for row in range(weight.height):
                for col in range(weight.width):
                    value = float(weight[row, col])
                    color = self.POSITIVE if value >= 0 else self.NEGATIVE
                    line_width = 1 if abs(value) < 1.5 else 2
                    pygame.draw.line(self.window, color, positions[layer][row], positions[layer + 1][col], line_width)

        for layer_positions in positions:
            for point in layer_positions:
                pygame.draw.circle(self.window, self.NODE, point, 5)

        if label:
            text = self.font.render(label, True, self.TEXT)
            self.window.blit(text, (self.game_width + 10, self.height - 25))

    def render(self, game, network=None, label=None):
        """Draw one frame; returns False once the window has been closed"""
        if self.poll_quit():
            return False
        self.draw_game(game)
        if network is not None:
            self.draw_network(network, label)
        pygame.display.flip()
        if self.render_delay > 0:
            self.clock.tick(self.render_delay)
        return True

    def close(self):
        pygame.quit()
