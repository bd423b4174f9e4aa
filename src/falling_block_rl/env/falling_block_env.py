from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from falling_block_rl.game import Action, FallingBlockGame, GameConfig


# Fill value -> RGB, 0 is empty
PALETTE: Dict[int, Tuple[int, int, int]] = {
    0: (20, 20, 26),
    1: (0, 240, 240),  # I
    2: (240, 240, 0),  # O
    3: (160, 0, 240),  # T
    4: (0, 240, 0),    # S
    5: (240, 0, 0),    # Z
    6: (0, 0, 240),    # J
    7: (240, 160, 0),  # L
}


class FallingBlockEnv(gym.Env):
    """Headless environment over FallingBlockGame.

    One step is one action plus one frame of lock delay. Every
    `gravity_every` steps the piece also falls one row, as a drop timer would.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 reward_weights: Optional[Dict[str, float]] = None,
                 gravity_every: int = 4,
                 lock_delay_frames: int = 8,
                 max_episode_steps: int = 5000) -> None:
        super().__init__()
        # Steps have no wall clock, so the lock delay always counts frames
        config = replace(config or GameConfig(), lock_delay_mode="frames",
                         lock_delay_frames=int(lock_delay_frames))
        self.game = FallingBlockGame(config)
        self.render_mode = render_mode
        self.gravity_every = max(1, int(gravity_every))
        self.max_episode_steps = int(max_episode_steps)

        self.reward_weights: Dict[str, float] = {
            "score": 0.01,       # per point of engine score
            "holes": 0.1,        # penalize holes created
            "height": 0.02,      # penalize max height increase
            "terminal": 1.0,     # penalty on game over
        }
        if reward_weights:
            self.reward_weights.update({k: float(v) for k, v in reward_weights.items()})

        h, w = config.height, config.width
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=-7, high=7, shape=(h, w), dtype=np.int8),
                "next": spaces.Discrete(8),
            }
        )
        self.action_space = spaces.Discrete(len(Action))
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        return {
            "grid": self.game.get_state().astype(np.int8),
            "next": int(self.game.next_kind),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "score": self.game.score,
            "lines_cleared_total": self.game.lines_cleared_total,
            "pieces_locked": self.game.pieces_locked,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is None:
            # Derive a game seed from the env RNG so episodes stay reproducible
            seed = int(self.np_random.integers(0, 2**31 - 1))
        self.game.reset(seed)
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        holes_before = self.game.grid.count_holes()
        height_before = self.game.grid.get_max_height()

        _, score_delta, done, _ = self.game.step(Action(int(action)))
        self._steps += 1
        if not done and self._steps % self.gravity_every == 0:
            self.game.drop()
            done = self.game.game_over

        reward_components: Dict[str, float] = {
            "score": self.reward_weights["score"] * float(score_delta),
            "holes": -self.reward_weights["holes"] * float(
                max(0, self.game.grid.count_holes() - holes_before)),
            "height": -self.reward_weights["height"] * float(
                max(0, self.game.grid.get_max_height() - height_before)),
        }
        terminated = bool(done)
        if terminated:
            reward_components["terminal"] = -self.reward_weights["terminal"]
        truncated = self._steps >= self.max_episode_steps

        info = self._get_info()
        info["reward_components"] = reward_components
        return self._get_obs(), float(sum(reward_components.values())), terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        state = self.game.get_state()
        cell = 12
        h, w = state.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                color = PALETTE.get(abs(int(state[y, x])), (200, 200, 200))
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
        return img

    def close(self) -> None:
        pass
