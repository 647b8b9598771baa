# File: PSO_ENGINE/PSO/Update.py
# Per-round update: reconcile personal/global bests, then move every particle.

import math
from pathlib import Path
from typing import Iterable, Optional, Tuple

import numpy as np

from PSO_ENGINE.Logs.logger import log_debug
from PSO_ENGINE.PSO.Boundary import apply_boundary
from PSO_ENGINE.PSO.Cognitive.PositionSharing import KnowledgeSharingStrategy
from PSO_ENGINE.PSO.Config import Config

module_name = Path(__file__).stem


def round_best(results: Iterable[Tuple[int, float]]) -> Optional[Tuple[int, float]]:
    """
    Minimum (index, value) pair of a round.

    Ties resolve to the lowest particle index and NaN values are ignored, so
    the answer does not depend on the order the pairs arrive in.
    """
    best = None
    for index, value in results:
        if math.isnan(value):
            continue
        if best is None or (value, index) < (best[1], best[0]):
            best = (index, value)
    return best


def apply_bests(model, results) -> bool:
    """
    Folds one round of (index, value) pairs into the model.

    Personal bests are updated per particle. The global best is replaced only by
    the round minimum, and only if it beats the model's prior global best.
    Returns True when the global best improved.
    """
    results = list(results)
    for index, value in results:
        model.particles[index].record(value)

    best = round_best(results)
    if best is None:
        return False
    index, value = best
    if value < model.global_best_value:
        model.global_best_value = value
        model.global_best_position = model.particles[index].position.copy()
        return True
    return False


class UpdateEngine:
    def __init__(self, config: Config, strategy: KnowledgeSharingStrategy):
        self.config = config
        self.strategy = strategy
        self.lows = config.lows
        self.highs = config.highs
        self.v_max = config.v_max_vector()
        self.chi = config.constriction_factor if config.constriction else None

    def new_velocity(self, particle, social_target: Optional[np.ndarray],
                     rng: np.random.Generator) -> np.ndarray:
        """Inertia (or constriction) velocity update, clamped to +/- v_max."""
        cfg = self.config
        r1 = rng.random(particle.dim)
        r2 = rng.random(particle.dim)
        cognitive = cfg.cognitive_coeff * r1 * (particle.personal_best_position - particle.position)
        if social_target is None:
            social = np.zeros(particle.dim)
        else:
            social = cfg.social_coeff * r2 * (social_target - particle.position)

        if self.chi is not None:
            velocity = self.chi * (particle.velocity + cognitive + social)
        else:
            velocity = cfg.inertia_weight * particle.velocity + cognitive + social
        return np.clip(velocity, -self.v_max, self.v_max)

    def move(self, model, rng: np.random.Generator):
        """Computes every social target first, then moves all particles."""
        targets = [self.strategy.get_best_position(i, model) for i in range(len(model.particles))]
        for particle, target in zip(model.particles, targets):
            velocity = self.new_velocity(particle, target, rng)
            position, velocity = apply_boundary(self.config.boundary_policy,
                                                particle.position + velocity, velocity,
                                                self.lows, self.highs)
            particle.position = position
            particle.velocity = velocity
        log_debug(f"Moved {len(model.particles)} particles ({self.strategy}).", module_name)

    def apply(self, model, evaluation, rng: np.random.Generator) -> bool:
        """Runs one full update for an evaluated round. Returns True if the global best improved."""
        improved = apply_bests(model, evaluation.results)
        self.move(model, rng)
        return improved
