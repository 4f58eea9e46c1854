"""
Inferno perceptually-uniform palette (256 entries, black through purple and red to pale yellow)
"""
import numpy as np
from functools import lru_cache

from ._matplotlib import sample_colormap


@lru_cache(maxsize=1)
def forward_lut() -> np.ndarray:
    return sample_colormap("inferno", 256)
