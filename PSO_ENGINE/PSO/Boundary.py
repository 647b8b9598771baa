# File: PSO_ENGINE/PSO/Boundary.py
# Keeps moved positions inside the configured bounds.

from typing import Tuple

import numpy as np


def saturate(position: np.ndarray, velocity: np.ndarray,
             lows: np.ndarray, highs: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Clamps to the wall and zeroes the velocity of every clamped component."""
    out_of_bounds = (position < lows) | (position > highs)
    position = np.clip(position, lows, highs)
    velocity = np.where(out_of_bounds, 0.0, velocity)
    return position, velocity


def reflect(position: np.ndarray, velocity: np.ndarray,
            lows: np.ndarray, highs: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Mirrors overshoot back inside and reverses the velocity of reflected components."""
    below = position < lows
    above = position > highs
    position = np.where(below, 2.0 * lows - position, position)
    position = np.where(above, 2.0 * highs - position, position)
    velocity = np.where(below | above, -velocity, velocity)
    # An overshoot wider than the range lands outside again
    return np.clip(position, lows, highs), velocity


def clip(position: np.ndarray, velocity: np.ndarray,
         lows: np.ndarray, highs: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Clamps to the wall and leaves the velocity untouched."""
    return np.clip(position, lows, highs), velocity


POLICIES = {
    "saturate": saturate,
    "reflect": reflect,
    "clip": clip,
}


def apply_boundary(policy: str, position, velocity, lows, highs):
    return POLICIES[policy](position, velocity, lows, highs)
