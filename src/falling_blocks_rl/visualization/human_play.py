from __future__ import annotations

import argparse
import logging
from typing import Dict, List, Mapping

import pygame

from falling_blocks_rl.game import (
    Command,
    FallingBlocksGame,
    GameConfig,
    GameLoop,
    SessionState,
)
from falling_blocks_rl.game.core import DEFAULT_KEY_BINDINGS
from .renderer import Renderer


logger = logging.getLogger(__name__)

ACTION_COMMANDS: Dict[str, Command] = {
    "move_left": Command.MOVE_LEFT,
    "move_right": Command.MOVE_RIGHT,
    "soft_drop": Command.SOFT_DROP,
    "hard_drop": Command.HARD_DROP,
    "rotate_left": Command.ROTATE_LEFT,
    "rotate_right": Command.ROTATE_RIGHT,
    "hold": Command.HOLD,
    "toggle_pause": Command.TOGGLE_PAUSE,
}


def build_key_map(bindings: Mapping[str, str]) -> Dict[int, Command]:
    """Translate action -> key-name bindings into pygame key codes."""
    key_map: Dict[int, Command] = {}
    for action, key_name in bindings.items():
        command = ACTION_COMMANDS.get(action)
        if command is None:
            logger.warning("ignoring binding for unknown action %r", action)
            continue
        try:
            key_map[pygame.key.key_code(key_name)] = command
        except ValueError:
            logger.warning("ignoring unknown key name %r for %s", key_name, action)
    return key_map


def menu_lines(game: FallingBlocksGame) -> List[str]:
    state = game.state
    if state is SessionState.TITLE:
        return ["Enter - start", "S - settings", "Esc - quit"]
    if state is SessionState.SETTINGS:
        return [
            f"Next pieces: {game.config.next_pieces_count}  (Left/Right)",
            *(f"{action}: {key}" for action, key in game.config.key_bindings.items()),
            "Esc - back",
        ]
    if state is SessionState.PAUSED:
        return ["P - resume", "R - retry", "T - back to title"]
    if state is SessionState.GAME_OVER:
        return ["R - retry", "T - back to title"]
    return []


def handle_key(game: FallingBlocksGame, key: int, key_map: Mapping[int, Command]) -> bool:
    """Route one key press to the engine. Returns False when the player quits."""
    state = game.state
    if state is SessionState.TITLE:
        if key == pygame.K_RETURN:
            game.start()
        elif key == pygame.K_s:
            game.open_settings()
        elif key == pygame.K_ESCAPE:
            return False
    elif state is SessionState.SETTINGS:
        if key == pygame.K_LEFT:
            game.set_next_pieces_count(game.config.next_pieces_count - 1)
        elif key == pygame.K_RIGHT:
            game.set_next_pieces_count(game.config.next_pieces_count + 1)
        elif key == pygame.K_ESCAPE:
            game.close_settings()
    elif state is SessionState.PLAYING:
        command = key_map.get(key)
        if command is not None:
            game.dispatch(command)
        elif key == pygame.K_ESCAPE:
            game.toggle_pause()
    elif state is SessionState.PAUSED:
        if key_map.get(key) is Command.TOGGLE_PAUSE or key == pygame.K_ESCAPE:
            game.toggle_pause()
        elif key == pygame.K_r:
            game.start()
        elif key == pygame.K_t:
            game.back_to_title()
    elif state is SessionState.GAME_OVER:
        if key == pygame.K_r:
            game.start()
        elif key == pygame.K_t:
            game.back_to_title()
    return True


def run(config: GameConfig, cell_size: int = 28) -> None:
    pygame.init()
    try:
        clock = pygame.time.Clock()
        game = FallingBlocksGame(config)
        loop = GameLoop(game)
        renderer = Renderer(cell_size=cell_size)
        key_map = build_key_map(config.key_bindings)

        screen = pygame.display.set_mode(renderer.window_size(config.width, config.height))
        pygame.display.set_caption("Falling Blocks")

        running = True
        while running:
            # Key presses and gravity ticks are both applied from this loop
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    running = handle_key(game, event.key, key_map)

            loop.advance(clock.tick(60))
            renderer.draw(screen, game.snapshot(), menu_lines(game))

        if game.pieces_placed:
            print(f"Final stats: {game.get_game_stats()}")
        loop.close()
    finally:
        pygame.quit()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Falling Blocks with the keyboard")
    p.add_argument("--next-pieces", type=int, default=5, help="Lookahead queue size (1-5)")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--cell-size", type=int, default=28)
    p.add_argument("--bind", action="append", default=[], metavar="ACTION=KEY",
                   help="Override a key binding, e.g. --bind hold=c")
    p.add_argument("--log-level", default="WARNING")
    return p


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    bindings = dict(DEFAULT_KEY_BINDINGS)
    for item in args.bind:
        action, sep, key = item.partition("=")
        if not sep:
            raise SystemExit(f"--bind expects ACTION=KEY, got {item!r}")
        bindings[action.strip()] = key.strip()

    config = GameConfig(next_pieces_count=args.next_pieces, random_seed=args.seed, key_bindings=bindings)
    run(config, cell_size=args.cell_size)


if __name__ == "__main__":  # pragma: no cover
    main()
