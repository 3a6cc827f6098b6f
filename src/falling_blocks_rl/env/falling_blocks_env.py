from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from falling_blocks_rl.game import (
    COLORS,
    Command,
    FallingBlocksGame,
    GameConfig,
    GameLoop,
    SessionState,
)


# Agents play; pausing is left to humans
AGENT_COMMANDS: Tuple[Command, ...] = (
    Command.MOVE_LEFT,
    Command.MOVE_RIGHT,
    Command.SOFT_DROP,
    Command.HARD_DROP,
    Command.ROTATE_LEFT,
    Command.ROTATE_RIGHT,
    Command.HOLD,
    Command.NONE,
)


def _compute_action_mask(game: FallingBlocksGame) -> np.ndarray:
    """True for each agent command that would change the game right now."""
    mask = np.zeros((len(AGENT_COMMANDS),), dtype=np.bool_)
    if game.state is not SessionState.PLAYING or game.current_piece is None:
        mask[AGENT_COMMANDS.index(Command.NONE)] = True
        return mask
    piece, x, y = game.current_piece, game.current_x, game.current_y
    collides = game.grid.collides
    for i, command in enumerate(AGENT_COMMANDS):
        if command == Command.MOVE_LEFT:
            mask[i] = not collides(piece, x - 1, y)
        elif command == Command.MOVE_RIGHT:
            mask[i] = not collides(piece, x + 1, y)
        elif command == Command.ROTATE_LEFT:
            mask[i] = not collides(piece.rotated_left(), x, y)
        elif command == Command.ROTATE_RIGHT:
            mask[i] = not collides(piece.rotated_right(), x, y)
        else:
            # Drops and hold always act; NONE is always allowed
            mask[i] = True
    return mask


class FallingBlocksEnv(gym.Env):
    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 frame_ms: float = 100.0,
                 max_episode_steps: int = 10000,
                 line_reward_scale: float = 0.01,
                 terminal_penalty: float = 0.0) -> None:
        super().__init__()
        self.game = FallingBlocksGame(config)
        self.loop = GameLoop(self.game)
        self.render_mode = render_mode

        self.frame_ms = float(frame_ms)
        self.max_episode_steps = int(max_episode_steps)
        self.line_reward_scale = float(line_reward_scale)
        self.terminal_penalty = float(terminal_penalty)

        h, w = self.game.config.height, self.game.config.width
        n = self.game.config.next_pieces_count

        # Board: 0 empty, 1..7 locked colors, -1..-7 falling piece overlay
        self.observation_space = spaces.Dict(
            {
                "board": spaces.Box(low=-7, high=7, shape=(h, w), dtype=np.int8),
                "queue": spaces.Box(low=1, high=7, shape=(n,), dtype=np.int8),
                "held": spaces.Discrete(8),
            }
        )
        self.action_space = spaces.Discrete(len(AGENT_COMMANDS))

        self._last_obs: Optional[Dict[str, Any]] = None
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        queue = np.array([p.color for p in self.game.queue], dtype=np.int8)
        held = self.game.held_piece.color if self.game.held_piece is not None else 0
        return {
            "board": self.game.get_state().astype(np.int8),
            "queue": queue,
            "held": held,
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": _compute_action_mask(self.game),
            "score": self.game.score,
            "level": self.game.level,
            "lines_cleared_total": self.game.lines_cleared_total,
            "pieces_placed": self.game.pieces_placed,
            "holes": self.game.grid.count_holes(),
            "max_height": self.game.grid.get_max_height(),
        }

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.game)

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.game.rng.seed(seed)
        # Mid-episode resets go through the pause-menu retry path
        if self.game.state is SessionState.PLAYING:
            self.game.toggle_pause()
        self.game.start()
        self._steps = 0
        obs = self._get_obs()
        self._last_obs = obs
        return obs, self._get_info()

    def step(self, action: int):
        command = AGENT_COMMANDS[int(action)]
        score_before = self.game.score

        self.game.dispatch(command)
        # Gravity keeps running between agent decisions
        self.loop.advance(self.frame_ms)

        terminated = self.game.game_over
        self._steps += 1
        truncated = self._steps >= self.max_episode_steps and not terminated

        reward = float(self.game.score - score_before) * self.line_reward_scale
        if terminated:
            reward += self.terminal_penalty

        obs = self._get_obs()
        info = self._get_info()
        info["engine_score_delta"] = self.game.score - score_before
        self._last_obs = obs
        return obs, reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode == "rgb_array":
            board = self._last_obs["board"] if self._last_obs is not None else self.game.get_state()
            cell = 12
            h, w = board.shape
            img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
            for y in range(h):
                for x in range(w):
                    v = int(board[y, x])
                    color = COLORS.get(abs(v), (30, 30, 36)) if v else (30, 30, 36)
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
            return img
        # human rendering delegated to the pygame front-end; noop
        return None

    def close(self) -> None:
        self.loop.close()
