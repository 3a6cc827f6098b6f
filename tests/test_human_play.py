import pygame
import pytest

from falling_blocks_rl.game import Command, FallingBlocksGame, GameConfig, SessionState
from falling_blocks_rl.game.core import DEFAULT_KEY_BINDINGS
from falling_blocks_rl.visualization.human_play import build_key_map, handle_key, menu_lines
from falling_blocks_rl.visualization.renderer import Renderer


@pytest.fixture(autouse=True)
def _pygame():
    pygame.init()
    yield
    pygame.quit()


def test_default_bindings_map_to_commands():
    key_map = build_key_map(DEFAULT_KEY_BINDINGS)
    assert key_map[pygame.K_LEFT] is Command.MOVE_LEFT
    assert key_map[pygame.K_SPACE] is Command.HOLD
    assert key_map[pygame.K_p] is Command.TOGGLE_PAUSE
    assert len(key_map) == len(DEFAULT_KEY_BINDINGS)


def test_unknown_actions_and_keys_are_skipped():
    key_map = build_key_map({"hold": "c", "teleport": "t", "hard_drop": "not-a-key"})
    assert key_map == {pygame.K_c: Command.HOLD}


def test_menu_flow():
    game = FallingBlocksGame(GameConfig(random_seed=0))
    key_map = build_key_map(DEFAULT_KEY_BINDINGS)

    assert handle_key(game, pygame.K_s, key_map)
    assert game.state is SessionState.SETTINGS
    handle_key(game, pygame.K_LEFT, key_map)
    assert game.config.next_pieces_count == 4
    assert "Next pieces: 4" in menu_lines(game)[0]
    handle_key(game, pygame.K_ESCAPE, key_map)
    assert game.state is SessionState.TITLE

    handle_key(game, pygame.K_RETURN, key_map)
    assert game.state is SessionState.PLAYING
    assert len(game.queue) == 4
    x = game.current_x
    handle_key(game, pygame.K_LEFT, key_map)
    assert game.current_x == x - 1

    handle_key(game, pygame.K_p, key_map)
    assert game.state is SessionState.PAUSED
    handle_key(game, pygame.K_r, key_map)
    assert game.state is SessionState.PLAYING
    assert game.generation == 2

    handle_key(game, pygame.K_ESCAPE, key_map)
    handle_key(game, pygame.K_t, key_map)
    assert game.state is SessionState.TITLE
    assert not handle_key(game, pygame.K_ESCAPE, key_map)


def test_renderer_draws_snapshot_and_menus():
    game = FallingBlocksGame(GameConfig(random_seed=1))
    renderer = Renderer(cell_size=10, margin=5)
    surface = pygame.Surface(renderer.window_size(10, 20))
    renderer.draw_menu(surface, "Falling Blocks", menu_lines(game))
    game.start()
    game.hold()
    renderer.draw_board(surface, game.snapshot())
    assert surface.get_at((0, 0))[:3] == (10, 10, 14)
