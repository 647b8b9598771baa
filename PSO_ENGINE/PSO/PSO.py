# File: PSO_ENGINE/PSO/PSO.py
# Controller: builds the swarm, drives evaluate/update rounds and decides when to stop.
# Entry points for callers are init() and run() at the bottom of this module.

import enum
import traceback
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from PSO_ENGINE import CONFIG
from PSO_ENGINE.Logs.logger import log_debug, log_error, log_info, log_success
from PSO_ENGINE.PSO.Cognitive.GBest import GlobalBestStrategy
from PSO_ENGINE.PSO.Cognitive.LBest import LocalBestStrategy
from PSO_ENGINE.PSO.Cognitive.PositionSharing import KnowledgeSharingStrategy
from PSO_ENGINE.PSO.Config import Config, ConfigurationError
from PSO_ENGINE.PSO.Evaluator import Evaluator
from PSO_ENGINE.PSO.Metrics.Metrics import SwarmMetrics
from PSO_ENGINE.PSO.Model import Model, ObjectiveFunction
from PSO_ENGINE.PSO.Update import UpdateEngine

module_name = Path(__file__).stem

TerminatePredicate = Callable[[float], bool]


class RunState(enum.Enum):
    INITIALIZED = "initialized"
    RUNNING = "running"
    TERMINATED = "terminated"


@dataclass
class RoundReport:
    """What the observer is told after every round."""
    round: int
    evaluations_used: int
    t_max: int
    global_best_value: float
    partial: bool
    improved: bool
    metrics: dict = field(default_factory=dict)


Observer = Callable[[RoundReport], None]


def log_progress(report: RoundReport):
    """Default observer used when Config.progress is on."""
    if report.round % CONFIG.PROGRESS_EVERY != 0 and report.evaluations_used < report.t_max:
        return
    percent = 100.0 * report.evaluations_used / report.t_max
    log_info(f"Round {report.round}: {report.evaluations_used}/{report.t_max} evaluations "
             f"({percent:.1f}%), GBest = {report.global_best_value:.6e}", module_name)


def make_strategy(config: Config) -> KnowledgeSharingStrategy:
    if config.neighborhood == "lbest":
        return LocalBestStrategy(config.swarm_size, config.rho)
    return GlobalBestStrategy(config.swarm_size)


class PSO:
    """
    A runnable optimization handle.

    Holds the Model and drives it round by round. Every round evaluates the
    swarm (in parallel), reconciles the bests, moves the particles, then checks
    termination: the evaluation budget first, then the caller's predicate.
    A handle stopped by its predicate can be driven again while budget remains.

    The evaluation pool lives as long as the handle is being driven.
    run_to_completion() and exhausting the budget shut it down; callers that
    only use step() or run_batch() should call close() or use the handle in a
    with block.
    """

    def __init__(self, model: Model, observer: Optional[Observer] = None):
        if model.objective_fn is None:
            raise TypeError("PSO needs a Model built with an objective function")
        self.model = model
        self.config = model.config
        self.evaluator = Evaluator(model.objective_fn, self.config)
        self.strategy = make_strategy(self.config)
        self.update_engine = UpdateEngine(self.config, self.strategy)
        self.observer = observer if observer is not None else (log_progress if self.config.progress else None)
        self.metrics_calculator = SwarmMetrics()

        self.state = RunState.INITIALIZED
        self.termination_reason: Optional[str] = None

        log_info(f"Initialized PSO: {self.config.swarm_size} particles, {model.flat_dim} dimensions, "
                 f"t_max={self.config.t_max}, topology={self.strategy}.", module_name)

    def step(self) -> Optional[RoundReport]:
        """
        Runs a single round. Returns None (and terminates) when the budget is
        already spent.
        """
        model = self.model
        if model.budget_exhausted():
            self._terminate("budget")
            return None
        self.state = RunState.RUNNING

        try:
            evaluation = self.evaluator.evaluate(model)
        except Exception as e:
            log_error(f"Objective function failed in round {model.rounds + 1}: {e}", module_name)
            log_debug(traceback.format_exc(), module_name)
            raise

        # Single-threaded reduction of the round
        model.evaluations_used += evaluation.count
        improved = self.update_engine.apply(model, evaluation, model.rng)
        model.rounds += 1
        model.history.append(model.global_best_value)

        report = RoundReport(
            round=model.rounds,
            evaluations_used=model.evaluations_used,
            t_max=self.config.t_max,
            global_best_value=model.global_best_value,
            partial=evaluation.partial,
            improved=improved,
        )
        if self.observer is not None:
            report.metrics = self.metrics_calculator.compute(model)
            self.observer(report)
        return report

    def run_batch(self, max_rounds: Optional[int] = None,
                  terminate: Optional[TerminatePredicate] = None) -> Model:
        """
        Drives at most `max_rounds` rounds (unbounded when None). Stops early when
        the budget runs out or `terminate(global_best_value)` returns True.
        """
        if self.model.budget_exhausted():
            self._terminate("budget")
            return self.model

        rounds_run = 0
        while max_rounds is None or rounds_run < max_rounds:
            self.step()
            rounds_run += 1
            if self.model.budget_exhausted():
                self._terminate("budget")
                break
            if terminate is not None and terminate(self.model.global_best_value):
                self._terminate("predicate")
                break
        return self.model

    def run_to_completion(self, terminate: Optional[TerminatePredicate] = None) -> Model:
        """Drives the loop from the current swarm state until termination, then closes the pool."""
        try:
            return self.run_batch(None, terminate)
        finally:
            self.close()

    def close(self):
        """Shuts down the evaluation pool. Driving the handle again reopens it."""
        self.evaluator.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, tb):
        self.close()
        return False

    @property
    def terminated(self) -> bool:
        return self.state is RunState.TERMINATED

    def _terminate(self, reason: str):
        if reason == "budget":
            self.close()
        if self.state is RunState.TERMINATED and self.termination_reason == reason:
            return
        self.state = RunState.TERMINATED
        self.termination_reason = reason
        log_success(f"Terminated ({reason}) after {self.model.rounds} rounds, "
                    f"{self.model.evaluations_used}/{self.config.t_max} evaluations. "
                    f"GBest = {self.model.global_best_value:.6e}", module_name)


def init(config: Config, objective_fn: ObjectiveFunction,
         observer: Optional[Observer] = None) -> PSO:
    """
    Validates the configuration and builds the initial swarm. Nothing is evaluated.

    Raises:
        ConfigurationError: if the configuration is invalid; no swarm is built.
    """
    if isinstance(config, dict):
        config = Config(**config)
    if not isinstance(config, Config):
        raise ConfigurationError(f"Expected a Config, got {type(config).__name__}")
    if not callable(objective_fn):
        raise TypeError("objective_fn must be callable as f(position, flat_dim, dimensions)")
    model = Model(config, objective_fn)
    return PSO(model, observer)


def run(config: Config, objective_fn: ObjectiveFunction,
        terminate: Optional[TerminatePredicate] = None,
        observer: Optional[Observer] = None) -> PSO:
    """init() followed by run_to_completion(terminate). Returns the finished handle with its pool closed."""
    with init(config, objective_fn, observer) as pso:
        pso.run_to_completion(terminate)
    return pso
