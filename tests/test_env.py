import unittest

import gymnasium as gym
import numpy as np

import falling_block_rl.env  # noqa: F401
from falling_block_rl.env.falling_block_env import FallingBlockEnv
from falling_block_rl.game import Action, FrameLockDelay


class TestFallingBlockEnv(unittest.TestCase):
    def test_given_registered_id_when_making_then_env_resets_into_observation_space(self):
        env = gym.make("FallingBlock-10x20-v0")
        obs, info = env.reset(seed=1)
        self.assertTrue(env.observation_space.contains(obs))
        self.assertEqual(info["score"], 0)
        self.assertEqual(env.action_space.n, len(Action))
        env.close()

    def test_given_env_when_created_then_lock_delay_counts_frames(self):
        env = FallingBlockEnv(lock_delay_frames=4)
        self.assertIsInstance(env.game.progression.lock_delay, FrameLockDelay)
        self.assertEqual(env.game.progression.lock_delay.threshold_frames, 4)

    def test_given_same_seed_when_replaying_actions_then_identical_episodes(self):
        actions = [int(a) for a in (Action.LEFT, Action.ROTATE_CW, Action.NONE, Action.HARD_DROP,
                                    Action.RIGHT, Action.SOFT_DROP, Action.HARD_DROP)]
        runs = []
        for _ in range(2):
            env = FallingBlockEnv()
            obs, _ = env.reset(seed=42)
            grids, rewards = [obs["grid"].copy()], []
            for i in range(150):
                obs, reward, terminated, truncated, _ = env.step(actions[i % len(actions)])
                grids.append(obs["grid"].copy())
                rewards.append(reward)
                if terminated or truncated:
                    break
            runs.append((grids, rewards))
        (grids_a, rewards_a), (grids_b, rewards_b) = runs
        self.assertEqual(rewards_a, rewards_b)
        self.assertEqual(len(grids_a), len(grids_b))
        for a, b in zip(grids_a, grids_b):
            self.assertTrue(np.array_equal(a, b))

    def test_given_repeated_hard_drops_when_stacking_then_episode_terminates(self):
        env = FallingBlockEnv()
        env.reset(seed=7)
        terminated = False
        reward = 0.0
        for _ in range(500):
            _, reward, terminated, truncated, info = env.step(int(Action.HARD_DROP))
            if terminated:
                break
        self.assertTrue(terminated)
        self.assertIn("terminal", info["reward_components"])
        self.assertLess(reward, 0.0)

    def test_given_step_limit_when_reached_then_truncated(self):
        env = FallingBlockEnv(max_episode_steps=5)
        env.reset(seed=3)
        truncated = False
        for _ in range(5):
            _, _, terminated, truncated, _ = env.step(int(Action.NONE))
            self.assertFalse(terminated)
        self.assertTrue(truncated)

    def test_given_gravity_when_idling_then_piece_falls(self):
        env = FallingBlockEnv(gravity_every=1)
        env.reset(seed=5)
        start_y = env.game.current_piece.y
        for _ in range(3):
            env.step(int(Action.NONE))
        self.assertEqual(env.game.current_piece.y, start_y + 3)

    def test_given_rgb_mode_when_rendering_then_image_per_cell(self):
        env = FallingBlockEnv(render_mode="rgb_array")
        env.reset(seed=0)
        img = env.render()
        self.assertEqual(img.shape, (20 * 12, 10 * 12, 3))
        self.assertEqual(img.dtype, np.uint8)
        self.assertIsNone(FallingBlockEnv().render())


if __name__ == "__main__":
    unittest.main()
