# File: PSO_ENGINE/PSO/Termination.py
# Ready-made predicates for PSO.run_to_completion(terminate=...).
# A predicate receives the global best value after each round and returns True to stop.

import collections
import math
from pathlib import Path
from typing import Callable

from PSO_ENGINE import CONFIG
from PSO_ENGINE.Logs.logger import log_debug

module_name = Path(__file__).stem


def below(threshold: float) -> Callable[[float], bool]:
    """Stops once the global best value drops below `threshold`."""
    def terminate(global_best_value: float) -> bool:
        return global_best_value < threshold
    return terminate


class Stagnation:
    """
    Stops when the global best has improved by less than `tolerance` over the
    last `patience` rounds.

    Stateful: use one instance per run, or call reset() between runs.
    """

    def __init__(self, patience: int = CONFIG.STAGNATION_PATIENCE,
                 tolerance: float = CONFIG.STAGNATION_TOLERANCE):
        if patience < 1:
            raise ValueError("patience must be >= 1.")
        self.patience = patience
        self.tolerance = tolerance
        self._history = collections.deque(maxlen=patience + 1)

    def reset(self):
        self._history.clear()

    def __call__(self, global_best_value: float) -> bool:
        self._history.append(global_best_value)
        if len(self._history) <= self.patience:
            return False
        oldest = self._history[0]
        if not (math.isfinite(oldest) and math.isfinite(global_best_value)):
            return False
        improvement = oldest - global_best_value
        if improvement < self.tolerance:
            log_debug(f"GBest stagnated for {self.patience} rounds (improvement {improvement:.3e}).",
                      module_name)
            return True
        return False
