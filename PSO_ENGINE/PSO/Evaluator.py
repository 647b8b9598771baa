# File: PSO_ENGINE/PSO/Evaluator.py
# Runs the objective function over one round of particles, in parallel when configured.

import os
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import List, Optional, Tuple

from PSO_ENGINE.Logs.logger import log_debug
from PSO_ENGINE.PSO.Config import Config

module_name = Path(__file__).stem


@dataclass
class RoundEvaluation:
    """
    Output of one evaluation round.

    results holds (particle_index, value) pairs ordered by particle index, one
    per evaluated particle. partial is True when the remaining budget did not
    cover the whole swarm.
    """
    results: List[Tuple[int, float]] = field(default_factory=list)
    partial: bool = False

    @property
    def count(self) -> int:
        return len(self.results)


def _call_objective(objective_fn, flat_dim, dimensions, position):
    return float(objective_fn(position, flat_dim, dimensions))


class Evaluator:
    """
    Evaluates rounds of particles, serially or on a worker pool.

    The pool is created on the first parallel round and reused by every round
    after it until close() is called. A closed Evaluator opens a fresh pool if
    it is asked to evaluate again.
    """

    def __init__(self, objective_fn, config: Config):
        """
        Args:
            objective_fn: Callable f(position, flat_dim, dimensions) -> float.
            config (Config): Supplies flat_dim, dimensions, workers and executor kind.
        """
        self.objective_fn = objective_fn
        self.config = config
        self.workers = config.workers if config.workers is not None else (os.cpu_count() or 1)
        self.pool_size = min(self.workers, config.swarm_size)
        self._pool: Optional[Executor] = None

    @property
    def pool(self) -> Optional[Executor]:
        return self._pool

    def _get_pool(self) -> Executor:
        if self._pool is None:
            pool_cls = ThreadPoolExecutor if self.config.executor == "thread" else ProcessPoolExecutor
            self._pool = pool_cls(max_workers=self.pool_size)
            log_debug(f"Started {self.config.executor} pool with {self.pool_size} worker(s).", module_name)
        return self._pool

    def close(self):
        """Shuts the worker pool down, waiting for running calls to finish."""
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None
            log_debug("Worker pool shut down.", module_name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, tb):
        self.close()
        return False

    def evaluate(self, model, count: Optional[int] = None) -> RoundEvaluation:
        """
        Evaluates the first `count` particles of the model.

        By default `count` is the swarm size capped by the model's remaining
        budget. Only values are returned; the caller folds them into the model
        and charges the evaluation counter.
        """
        swarm_size = len(model.particles)
        if count is None:
            count = min(swarm_size, model.remaining_budget())
        count = max(0, min(count, swarm_size))
        if count == 0:
            return RoundEvaluation(results=[], partial=swarm_size > 0)

        # Copies, so objective functions and workers never see live particle state
        positions = [model.particles[i].position.copy() for i in range(count)]
        call = partial(_call_objective, self.objective_fn, self.config.flat_dim, self.config.dimensions)

        if self.pool_size <= 1 or count == 1:
            values = [call(position) for position in positions]
        else:
            # map preserves input order whatever order the workers finish in
            values = list(self._get_pool().map(call, positions))

        log_debug(f"Evaluated {count}/{swarm_size} particles with {self.workers} worker(s).", module_name)
        return RoundEvaluation(results=list(enumerate(values)), partial=count < swarm_size)
