# File: PSO_ENGINE/PSO/Config.py
# Immutable problem description: shape, bounds, swarm size, coefficients and budget.

import math
import numbers
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from PSO_ENGINE import CONFIG
from PSO_ENGINE.Logs.logger import log_error
from PSO_ENGINE.PSO.Boundary import POLICIES

module_name = Path(__file__).stem

NEIGHBORHOODS = ("gbest", "lbest")
BOUNDARY_POLICIES = tuple(POLICIES)
EXECUTORS = ("thread", "process")


class ConfigurationError(ValueError):
    """Raised when a Config cannot describe a valid optimization problem."""


def _fail(message: str):
    log_error(f"Invalid configuration: {message}", module_name)
    raise ConfigurationError(message)


def _is_real(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


@dataclass(frozen=True)
class Config:
    """
    Description of one optimization problem.

    The engine works on flat vectors of length ``flat_dim = prod(dimensions)``;
    ``dimensions`` is only handed back to the objective function so the caller
    can reshape. ``bounds`` holds one ``(low, high)`` pair per flattened
    dimension. When it is omitted, ``CONFIG.DEFAULT_BOUNDS`` is repeated for
    every dimension.

    ``v_max`` may be a scalar (same cap for every dimension) or one value per
    flattened dimension. When omitted it defaults to ``v_clamp_ratio`` times
    each bound's width.
    """
    dimensions: Sequence[int] = CONFIG.DEFAULT_DIMENSIONS
    bounds: Optional[Sequence[Tuple[float, float]]] = None
    swarm_size: int = CONFIG.SWARM_SIZE
    t_max: int = CONFIG.T_MAX
    inertia_weight: float = CONFIG.INERTIA_WEIGHT
    cognitive_coeff: float = CONFIG.COGNITIVE_COEFF
    social_coeff: float = CONFIG.SOCIAL_COEFF
    v_max: Optional[Union[float, Sequence[float]]] = None
    v_clamp_ratio: float = CONFIG.V_CLAMP_RATIO
    neighborhood: str = CONFIG.NEIGHBORHOOD
    rho: int = CONFIG.RHO
    constriction: bool = CONFIG.USE_CONSTRICTION
    boundary_policy: str = CONFIG.BOUNDARY_POLICY
    workers: Optional[int] = CONFIG.WORKERS
    executor: str = CONFIG.EXECUTOR
    seed: Optional[int] = None
    progress: bool = CONFIG.SHOW_PROGRESS

    def __post_init__(self):
        dimensions = self._check_dimensions(self.dimensions)
        object.__setattr__(self, "dimensions", dimensions)
        flat_dim = math.prod(dimensions)

        if self.bounds is None:
            bounds = (tuple(float(b) for b in CONFIG.DEFAULT_BOUNDS),) * flat_dim
        else:
            bounds = self._check_bounds(self.bounds, flat_dim)
        object.__setattr__(self, "bounds", bounds)

        for name in ("swarm_size", "t_max"):
            value = getattr(self, name)
            if not isinstance(value, numbers.Integral) or isinstance(value, bool) or value <= 0:
                _fail(f"{name} must be a positive integer, got {value!r}")
            object.__setattr__(self, name, int(value))

        for name in ("inertia_weight", "cognitive_coeff", "social_coeff", "v_clamp_ratio"):
            value = getattr(self, name)
            if not _is_real(value) or not math.isfinite(value):
                _fail(f"{name} must be a finite real number, got {value!r}")
            object.__setattr__(self, name, float(value))
        if self.v_clamp_ratio <= 0:
            _fail(f"v_clamp_ratio must be > 0, got {self.v_clamp_ratio}")

        self._check_v_max(self.v_max, bounds)
        if self.v_max is not None and not _is_real(self.v_max):
            object.__setattr__(self, "v_max", tuple(float(v) for v in self.v_max))

        neighborhood = str(self.neighborhood).lower()
        if neighborhood not in NEIGHBORHOODS:
            _fail(f"neighborhood must be one of {NEIGHBORHOODS}, got {self.neighborhood!r}")
        object.__setattr__(self, "neighborhood", neighborhood)
        if neighborhood == "lbest" and (not isinstance(self.rho, numbers.Integral) or self.rho < 1):
            _fail(f"rho must be a positive integer for 'lbest', got {self.rho!r}")

        policy = str(self.boundary_policy).lower()
        if policy not in BOUNDARY_POLICIES:
            _fail(f"boundary_policy must be one of {BOUNDARY_POLICIES}, got {self.boundary_policy!r}")
        object.__setattr__(self, "boundary_policy", policy)

        executor = str(self.executor).lower()
        if executor not in EXECUTORS:
            _fail(f"executor must be one of {EXECUTORS}, got {self.executor!r}")
        object.__setattr__(self, "executor", executor)

        if self.workers is not None and (not isinstance(self.workers, numbers.Integral) or self.workers < 1):
            _fail(f"workers must be None or a positive integer, got {self.workers!r}")

        if self.constriction:
            phi = self.cognitive_coeff + self.social_coeff
            if phi <= 4.0:
                _fail(f"constriction needs cognitive_coeff + social_coeff > 4, got {phi}")

    # --- Validation helpers ---

    @staticmethod
    def _check_dimensions(dimensions) -> Tuple[int, ...]:
        if isinstance(dimensions, numbers.Integral):
            dimensions = (dimensions,)
        try:
            dimensions = tuple(dimensions)
        except TypeError:
            _fail(f"dimensions must be a sequence of positive integers, got {dimensions!r}")
        if not dimensions:
            _fail("dimensions must not be empty")
        for d in dimensions:
            if not isinstance(d, numbers.Integral) or isinstance(d, bool) or d <= 0:
                _fail(f"dimensions must be positive integers, got {dimensions!r}")
        return tuple(int(d) for d in dimensions)

    @staticmethod
    def _check_bounds(bounds, flat_dim: int) -> Tuple[Tuple[float, float], ...]:
        checked = []
        for i, pair in enumerate(bounds):
            try:
                low, high = pair
            except (TypeError, ValueError):
                _fail(f"bounds[{i}] must be a (low, high) pair, got {pair!r}")
            if not (_is_real(low) and _is_real(high)) or not (math.isfinite(low) and math.isfinite(high)):
                _fail(f"bounds[{i}] must hold finite real numbers, got {pair!r}")
            if low >= high:
                _fail(f"bounds[{i}] needs low < high, got {pair!r}")
            checked.append((float(low), float(high)))
        if len(checked) != flat_dim:
            _fail(f"bounds has {len(checked)} pairs but the flattened dimension is {flat_dim}")
        return tuple(checked)

    def _check_v_max(self, v_max, bounds) -> Tuple[float, ...]:
        if v_max is None:
            return tuple(self.v_clamp_ratio * (high - low) for low, high in bounds)
        if _is_real(v_max):
            v_max = (v_max,) * len(bounds)
        try:
            v_max = tuple(v_max)
        except TypeError:
            _fail(f"v_max must be a number or a sequence of numbers, got {v_max!r}")
        if len(v_max) != len(bounds):
            _fail(f"v_max has {len(v_max)} entries but the flattened dimension is {len(bounds)}")
        for v in v_max:
            if not _is_real(v) or not math.isfinite(v) or v <= 0:
                _fail(f"v_max entries must be finite and > 0, got {v_max!r}")
        return tuple(float(v) for v in v_max)

    # --- Derived values ---

    @property
    def flat_dim(self) -> int:
        return math.prod(self.dimensions)

    @property
    def lows(self) -> np.ndarray:
        return np.array([low for low, _ in self.bounds], dtype=float)

    @property
    def highs(self) -> np.ndarray:
        return np.array([high for _, high in self.bounds], dtype=float)

    def v_max_vector(self) -> np.ndarray:
        """Per-dimension velocity cap, derived from the bounds when v_max is omitted."""
        return np.array(self._check_v_max(self.v_max, self.bounds), dtype=float)

    @property
    def constriction_factor(self) -> float:
        """Clerc-Kennedy chi for phi = c1 + c2 (only defined for phi > 4)."""
        phi = self.cognitive_coeff + self.social_coeff
        return 2.0 / abs(2.0 - phi - math.sqrt(phi * phi - 4.0 * phi))

    # --- Constructors ---

    @classmethod
    def uniform(cls, dimensions, low: float, high: float, **kwargs) -> "Config":
        """Builds a Config whose every flattened dimension shares (low, high)."""
        dims = cls._check_dimensions(dimensions)
        return cls(dimensions=dims, bounds=[(low, high)] * math.prod(dims), **kwargs)

    def replace(self, **changes) -> "Config":
        return replace(self, **changes)
