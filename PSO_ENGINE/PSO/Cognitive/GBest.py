from typing import Optional

import numpy as np

from PSO_ENGINE.PSO.Cognitive.PositionSharing import KnowledgeSharingStrategy


class GlobalBestStrategy(KnowledgeSharingStrategy):
    """Fully connected swarm: every particle follows the model's global best."""

    def get_best_position(self, index: int, model) -> Optional[np.ndarray]:
        return model.global_best_position
