from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
import pygame

from falling_blocks_rl.game import COLORS, GameSnapshot, Piece, SessionState


BACKGROUND = (10, 10, 14)
FIELD = (30, 30, 36)
GRID_LINE = (45, 45, 52)
GHOST = (150, 150, 150)
TEXT = (235, 235, 235)
PANEL_CELLS = 4


def _color_for_value(v: int) -> Tuple[int, int, int]:
    if v == 0:
        return FIELD
    return COLORS.get(abs(v), (200, 200, 200))


class Renderer:
    """Draws engine snapshots; holds no game state of its own."""

    def __init__(self, cell_size: int = 30, margin: int = 20) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self._font: Optional[pygame.font.Font] = None
        self._big_font: Optional[pygame.font.Font] = None

    def window_size(self, width: int, height: int) -> Tuple[int, int]:
        side = PANEL_CELLS * self.cell_size
        return (
            side + width * self.cell_size + side + self.margin * 4,
            height * self.cell_size + self.margin * 2,
        )

    def _fonts(self) -> Tuple[pygame.font.Font, pygame.font.Font]:
        if self._font is None:
            if not pygame.font.get_init():
                pygame.font.init()
            self._font = pygame.font.SysFont(None, 26)
            self._big_font = pygame.font.SysFont(None, 48)
        return self._font, self._big_font

    def _cell_rect(self, x: int, y: int, cell: int) -> pygame.Rect:
        return pygame.Rect(x * cell, y * cell, cell - 1, cell - 1)

    def _grid_surface(self, grid: np.ndarray) -> pygame.Surface:
        h, w = grid.shape
        surf = pygame.Surface((w * self.cell_size, h * self.cell_size))
        surf.fill(GRID_LINE)
        for y in range(h):
            for x in range(w):
                pygame.draw.rect(surf, _color_for_value(int(grid[y, x])), self._cell_rect(x, y, self.cell_size))
        return surf

    def _draw_piece(self, surf: pygame.Surface, piece: Piece, x: int, y: int,
                    color: Tuple[int, int, int], cell: int, outline: bool = False) -> None:
        for cx, cy in piece.cells_at(x, y):
            if cy < 0:
                continue
            pygame.draw.rect(surf, color, self._cell_rect(cx, cy, cell), 2 if outline else 0)

    def _panel(self, title: str, pieces, rows: int) -> pygame.Surface:
        font, _ = self._fonts()
        cell = self.cell_size // 2
        surf = pygame.Surface((PANEL_CELLS * self.cell_size, 30 + rows * PANEL_CELLS * cell))
        surf.fill(BACKGROUND)
        surf.blit(font.render(title, True, TEXT), (0, 0))
        body = surf.subsurface(pygame.Rect(0, 30, surf.get_width(), surf.get_height() - 30))
        for i, piece in enumerate(pieces):
            if piece is not None:
                self._draw_piece(body, piece, 1, i * PANEL_CELLS + 1, COLORS[piece.kind], cell)
        return surf

    def draw_board(self, screen: pygame.Surface, snapshot: GameSnapshot) -> None:
        font, _ = self._fonts()
        side = PANEL_CELLS * self.cell_size
        field_x = self.margin * 2 + side

        field = self._grid_surface(snapshot.grid)
        piece = snapshot.current_piece
        if piece is not None and snapshot.ghost_y is not None:
            x, y = snapshot.position
            self._draw_piece(field, piece, x, snapshot.ghost_y, GHOST, self.cell_size, outline=True)
            self._draw_piece(field, piece, x, y, COLORS[piece.kind], self.cell_size)

        screen.fill(BACKGROUND)
        screen.blit(self._panel("Hold", [snapshot.held_piece], 1), (self.margin, self.margin))
        screen.blit(field, (field_x, self.margin))
        next_x = field_x + field.get_width() + self.margin
        screen.blit(self._panel("Next", snapshot.queue, len(snapshot.queue)), (next_x, self.margin))

        stats_y = self.margin + side + 20
        for i, line in enumerate((f"score: {snapshot.score}", f"level: {snapshot.level}",
                                  f"lines: {snapshot.lines_cleared_total}")):
            screen.blit(font.render(line, True, TEXT), (self.margin, stats_y + i * 28))

    def draw_menu(self, screen: pygame.Surface, title: str, lines) -> None:
        font, big = self._fonts()
        screen.fill(BACKGROUND)
        cx = screen.get_width() // 2
        heading = big.render(title, True, TEXT)
        screen.blit(heading, heading.get_rect(center=(cx, screen.get_height() // 3)))
        for i, line in enumerate(lines):
            text = font.render(line, True, TEXT)
            screen.blit(text, text.get_rect(center=(cx, screen.get_height() // 3 + 60 + i * 32)))

    def draw(self, screen: pygame.Surface, snapshot: GameSnapshot, menu_lines=()) -> None:
        state = snapshot.state
        if state is SessionState.PLAYING:
            self.draw_board(screen, snapshot)
        elif state is SessionState.PAUSED:
            self.draw_menu(screen, "Paused", menu_lines)
        elif state is SessionState.GAME_OVER:
            self.draw_menu(screen, "Game Over", [f"Score: {snapshot.score}", *menu_lines])
        elif state is SessionState.SETTINGS:
            self.draw_menu(screen, "Settings", menu_lines)
        else:
            self.draw_menu(screen, "Falling Blocks", menu_lines)
        pygame.display.flip()
