import os
import random

import numpy as np


def set_global_seed(seed: int | None = None) -> int:
    """Set deterministic seeds for Python and NumPy; return the seed used."""
    if seed is None:
        seed = int(os.getenv("RANDOM_SEED", "42"))

    random.seed(seed)
    np.random.seed(seed)

    return seed
