# File: PSO_ENGINE/PSO/Model.py
# Swarm state returned to the caller: particles, global best and evaluation bookkeeping.

from pathlib import Path
from typing import Callable, List, Optional

import numpy as np

from PSO_ENGINE.Logs.logger import log_debug
from PSO_ENGINE.PSO.Config import Config
from PSO_ENGINE.PSO.Evaluator import Evaluator
from PSO_ENGINE.PSO.Particle import Particle
from PSO_ENGINE.PSO.Update import apply_bests

module_name = Path(__file__).stem

ObjectiveFunction = Callable[[np.ndarray, int, tuple], float]


class Model:
    """
    The swarm plus its global-best state.

    Attributes:
        config (Config): The originating configuration.
        flat_dim (int): Length of every position/velocity vector.
        particles (List[Particle]): The current swarm.
        global_best_position (Optional[np.ndarray]): Best position ever found, None until
            a round produces a finite value.
        global_best_value (float): Best value ever found, +inf before the first round.
        evaluations_used (int): Objective calls charged against config.t_max.
        rounds (int): Completed rounds.
        history (List[float]): global_best_value after each round.
    """

    def __init__(self, config: Config, objective_fn: Optional[ObjectiveFunction] = None,
                 rng: Optional[np.random.Generator] = None):
        self.config = config
        self.flat_dim = config.flat_dim
        self.objective_fn = objective_fn
        self.rng = rng if rng is not None else np.random.default_rng(config.seed)

        self.particles: List[Particle] = [
            Particle.random(config, self.rng) for _ in range(config.swarm_size)
        ]

        self.global_best_position: Optional[np.ndarray] = None
        self.global_best_value = float('inf')
        self.evaluations_used = 0
        self.rounds = 0
        self.history: List[float] = []

        log_debug(f"Swarm initialized: {config.swarm_size} particles, {self.flat_dim} dimensions.",
                  module_name)

    # --- Read accessors ---

    def get_f_best(self) -> float:
        return self.global_best_value

    def get_x_best(self) -> Optional[np.ndarray]:
        """Flattened best position (a copy); reshaping is left to the caller."""
        if self.global_best_position is None:
            return None
        return self.global_best_position.copy()

    @property
    def best_value(self) -> float:
        return self.get_f_best()

    @property
    def best_position(self) -> Optional[np.ndarray]:
        return self.get_x_best()

    def positions(self) -> np.ndarray:
        return np.array([p.position for p in self.particles])

    def velocities(self) -> np.ndarray:
        return np.array([p.velocity for p in self.particles])

    def personal_best_values(self) -> np.ndarray:
        return np.array([p.personal_best_value for p in self.particles])

    def remaining_budget(self) -> int:
        return max(self.config.t_max - self.evaluations_used, 0)

    def budget_exhausted(self) -> bool:
        return self.evaluations_used >= self.config.t_max

    # --- Manual evaluation ---

    def get_f_values(self) -> List[float]:
        """
        Evaluates every particle's current position and folds the values into the
        personal and global bests.

        Meant for callers that edit positions by hand; these evaluations are not
        charged against t_max.
        """
        if self.objective_fn is None:
            raise RuntimeError("Model has no objective function to evaluate with.")
        with Evaluator(self.objective_fn, self.config) as evaluator:
            evaluation = evaluator.evaluate(self, count=len(self.particles))
        apply_bests(self, evaluation.results)
        return [value for _, value in evaluation.results]

    def get_error(self) -> float:
        self.get_f_values()
        return self.global_best_value

    def __repr__(self):
        return (f"Model(swarm_size={len(self.particles)}, flat_dim={self.flat_dim}, "
                f"global_best_value={self.global_best_value!r}, "
                f"evaluations_used={self.evaluations_used}/{self.config.t_max})")
