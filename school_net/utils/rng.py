import numpy as np


class RandomStreams:
    """
    Hands out independent NumPy random generators derived from one seed.
    Each traffic source draws from its own stream, so adding a source to a
    scenario does not shift the draws of the others.
    """

    def __init__(self, seed: int):
        """
        Initialize the stream factory with a seed value.

        Args:
            seed (int): Root seed of the run.
        """
        self.seed = seed
        self._sequence = np.random.SeedSequence(seed)
        self.spawned = 0

    def stream(self) -> np.random.Generator:
        """
        Spawn the next independent generator.

        Returns:
            np.random.Generator: A generator no other stream shares state with.
        """
        (child,) = self._sequence.spawn(1)
        self.spawned += 1
        return np.random.default_rng(child)
