from __future__ import annotations

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from .falling_blocks_env import _compute_action_mask


class ResampleInvalidActionWrapper(gym.Wrapper):
    """If a sampled command would be rejected by the engine, resample among the valid ones.

    Keeps vanilla policies from spending steps pressing into walls.
    """

    def step(self, action):  # type: ignore[override]
        if isinstance(self.action_space, spaces.Discrete):
            mask = self.get_action_mask()
            if 0 <= int(action) < mask.shape[0] and not bool(mask[int(action)]):
                valid_idxs = np.flatnonzero(mask)
                if valid_idxs.size > 0:
                    action = int(self.np_random.choice(valid_idxs))
        return self.env.step(action)

    def get_action_mask(self) -> np.ndarray:
        if hasattr(self.env, "get_action_mask"):
            return getattr(self.env, "get_action_mask")()
        unwrapped = self.env.unwrapped
        if hasattr(unwrapped, "game"):
            return _compute_action_mask(unwrapped.game)
        raise AttributeError("Underlying env does not provide get_action_mask")
