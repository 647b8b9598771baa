from typing import List, Optional

import numpy as np

from PSO_ENGINE.PSO.Cognitive.PositionSharing import KnowledgeSharingStrategy


def ring_neighbors(swarm_size: int, rho: int) -> List[np.ndarray]:
    """
    Ring neighborhoods: particle i sees itself and rho particles on each side
    (indices wrap around). Each entry is sorted so ties resolve to the lowest index.
    """
    if swarm_size <= 0:
        raise ValueError("swarm_size must be positive.")
    if rho < 1:
        raise ValueError("rho must be >= 1.")
    if 2 * rho + 1 >= swarm_size:
        everyone = np.arange(swarm_size)
        return [everyone for _ in range(swarm_size)]
    return [
        np.array(sorted({(i + d) % swarm_size for d in range(-rho, rho + 1)}))
        for i in range(swarm_size)
    ]


class LocalBestStrategy(KnowledgeSharingStrategy):
    """Ring topology: each particle follows the best personal best among its neighbors."""

    def __init__(self, swarm_size: int, rho: int = 1):
        super().__init__(swarm_size)
        self.rho = rho
        self.neighborhoods = ring_neighbors(swarm_size, rho)

    def get_best_position(self, index: int, model) -> Optional[np.ndarray]:
        neighbors = self.neighborhoods[index]
        values = np.array([model.particles[j].personal_best_value for j in neighbors])
        best = int(np.argmin(values))
        if not np.isfinite(values[best]):
            return None
        return model.particles[neighbors[best]].personal_best_position

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(rho={self.rho})"
