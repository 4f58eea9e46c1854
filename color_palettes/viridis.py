"""
Viridis perceptually-uniform palette (256-entry lookup table)

* At the lowest value (index 0) → dark purple-navy; at the highest value → yellow
* Sampled from Matplotlib; importing it without Matplotlib raises an informative error.
"""
import numpy as np
from functools import lru_cache

from ._matplotlib import sample_colormap

name = "viridis"
description = "Viridis: dark purple → teal → yellow, 256 entries"


@lru_cache(maxsize=1)
def forward_lut() -> np.ndarray:
    """
    Build a uint8 lookup table of shape [256, 3]:

    1. Resample the Viridis colormap to 256 evenly spaced levels.
    2. Drop the alpha channel, scale to [0,255], round, clip, and cast to uint8.
    """
    return sample_colormap("viridis", 256)
