"""Pygame based renderer for the game client."""

from __future__ import annotations

from typing import Tuple

import pygame

from snake_server.grid import Grid
from snake_server.utils import Color, Coordinates


def cell_rect(coordinates: Coordinates, grid_height: int, cell: int, margin: int) -> Tuple[int, int, int, int]:
    """Return the screen rectangle ``(left, top, width, height)`` of a grid cell.

    Grid coordinates start at the bottom left corner while the screen starts
    at the top left one, so the y axis is flipped.
    """

    left = margin + (coordinates.x - 1) * cell
    top = margin + (grid_height - coordinates.y) * cell
    return left, top, cell, cell


def window_size(grid: Grid, cell: int) -> Tuple[int, int]:
    margin = 2 * cell
    return grid.width * cell + 2 * margin, grid.height * cell + 2 * margin


class Renderer:
    """Responsible for all drawing tasks."""

    def __init__(self, screen: pygame.Surface, cell: int = 20) -> None:
        self.screen = screen
        self.cell = cell
        self.margin = 2 * cell
        self.font = pygame.font.SysFont("arial", 16)
        self.background_color = Color.BLACK.to_tuple()
        self.frame_color = Color.WHITE.to_tuple()

    def clear(self) -> None:
        self.screen.fill(self.background_color)

    def draw_frame(self, grid: Grid) -> None:
        thickness = max(1, self.cell // 2)
        rect = pygame.Rect(
            self.margin - thickness,
            self.margin - thickness,
            grid.width * self.cell + 2 * thickness,
            grid.height * self.cell + 2 * thickness,
        )
        pygame.draw.rect(self.screen, self.frame_color, rect, width=thickness)

    def draw_grid(self, grid: Grid) -> None:
        for point in grid.data:
            rect = cell_rect(point.coordinates, grid.height, self.cell, self.margin)
            pygame.draw.rect(self.screen, point.color.to_tuple(), rect)

    def draw_status(self, text: str) -> None:
        surface = self.font.render(text, True, self.frame_color)
        self.screen.blit(surface, (self.margin, self.margin // 4))

    def present(self) -> None:
        pygame.display.flip()
