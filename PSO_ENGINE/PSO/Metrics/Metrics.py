# File: PSO_ENGINE/PSO/Metrics/Metrics.py
# Descriptive swarm statistics attached to each round report.

from pathlib import Path

import numpy as np

from PSO_ENGINE.Logs.logger import log_debug

module_name = Path(__file__).stem


def check_poli_stability(omega: float, c1: float, c2: float) -> bool:
    """
    Poli's order-2 stability region: c1 + c2 < 24 (1 - w^2) / (7 - 5 w), |w| <= 1.
    """
    if not (-1.0 <= omega <= 1.0):
        return False
    denominator = 7.0 - 5.0 * omega
    if np.isclose(denominator, 0):
        return False
    return (c1 + c2) < 24.0 * (1.0 - omega ** 2) / denominator


class SwarmMetrics:
    """
    Computes per-round swarm statistics from a Model.

    Metrics:
        swarm_diversity: mean distance of particles to the swarm centroid.
        avg_velocity_magnitude: mean L2 norm of the particle velocities.
        pbest_std: standard deviation of the finite personal-best values.
        stable_parameters: 1.0 if (inertia, c1, c2) is inside Poli's region, else 0.0.
        walled_ratio: fraction of particles with at least one coordinate on a bound.
    """

    def compute(self, model) -> dict:
        positions = model.positions()
        velocities = model.velocities()
        cfg = model.config
        metrics = {}

        if positions.shape[0] > 1:
            centroid = np.mean(positions, axis=0)
            metrics['swarm_diversity'] = float(np.mean(np.linalg.norm(positions - centroid, axis=1)))
        else:
            metrics['swarm_diversity'] = 0.0

        metrics['avg_velocity_magnitude'] = float(np.mean(np.linalg.norm(velocities, axis=1)))

        pbest_values = model.personal_best_values()
        finite = pbest_values[np.isfinite(pbest_values)]
        metrics['pbest_std'] = float(np.std(finite)) if len(finite) >= 2 else float('nan')

        if cfg.constriction:
            # Constriction is stable by construction for phi > 4
            metrics['stable_parameters'] = 1.0
        else:
            stable = check_poli_stability(cfg.inertia_weight, cfg.cognitive_coeff, cfg.social_coeff)
            metrics['stable_parameters'] = 1.0 if stable else 0.0

        on_wall = np.any((positions <= cfg.lows) | (positions >= cfg.highs), axis=1)
        metrics['walled_ratio'] = float(np.mean(on_wall))

        log_debug(f"Computed metrics: {metrics}", module_name)
        return metrics
