"""
Magma perceptually-uniform palette (256 entries, black through purple and pink to pale cream)
"""
import numpy as np
from functools import lru_cache

from ._matplotlib import sample_colormap


@lru_cache(maxsize=1)
def forward_lut() -> np.ndarray:
    return sample_colormap("magma", 256)
