"""
Plasma perceptually-uniform palette (256 entries, deep blue through magenta to yellow)
"""
import numpy as np
from functools import lru_cache

from ._matplotlib import sample_colormap


@lru_cache(maxsize=1)
def forward_lut() -> np.ndarray:
    return sample_colormap("plasma", 256)
