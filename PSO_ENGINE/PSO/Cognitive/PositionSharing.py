from abc import ABC, abstractmethod
from typing import Optional

import numpy as np


class KnowledgeSharingStrategy(ABC):
    """
    Decides which position pulls a particle through the social term.

    Subclasses return None when no finite best is known yet, in which case
    the social term is dropped for that particle.
    """

    def __init__(self, swarm_size: int):
        self.swarm_size = swarm_size

    @abstractmethod
    def get_best_position(self, index: int, model) -> Optional[np.ndarray]:
        pass

    def __str__(self) -> str:
        return self.__class__.__name__
