import numpy as np


class Particle:
    def __init__(self, position, velocity):
        self.position = np.array(position, dtype=float)
        self.velocity = np.array(velocity, dtype=float)
        self.dim = self.position.shape[0]

        self.personal_best_position = self.position.copy()
        self.personal_best_value = float('inf')

        self.value = float('nan')  # Last computed objective value

    @classmethod
    def random(cls, config, rng: np.random.Generator):
        """Uniform position within the bounds and uniform velocity in [-v_max, v_max]."""
        v_max = config.v_max_vector()
        position = rng.uniform(low=config.lows, high=config.highs)
        velocity = rng.uniform(low=-v_max, high=v_max)
        return cls(position, velocity)

    def record(self, value: float) -> bool:
        """Stores an evaluated value and returns True when it improves the personal best."""
        self.value = value
        if value < self.personal_best_value:
            self.personal_best_value = value
            self.personal_best_position = self.position.copy()
            return True
        return False

    def __repr__(self):
        return (f"Particle(position={self.position!r}, velocity={self.velocity!r}, "
                f"personal_best_value={self.personal_best_value!r})")
