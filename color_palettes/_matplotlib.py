"""
Shared sampler for palettes taken from Matplotlib's registered colormaps.
"""
import numpy as np

try:
    import matplotlib
except ImportError as e:
    # If Matplotlib isn't installed, inform the user how to install it
    raise ImportError(
        "The Matplotlib-backed palettes require matplotlib. "
        "Please install it with: pip install matplotlib"
    ) from e


def sample_colormap(cmap_name: str, n: int = 256) -> np.ndarray:
    """
    Return a uint8 lookup table of shape [n, 3] sampled from a Matplotlib colormap.

    Entry 0 is the colormap's low end and entry n-1 its high end.
    """
    #    The colormap returns RGBA floats in [0, 1]; we slice off the alpha channel.
    cmap = matplotlib.colormaps[cmap_name].resampled(n)
    rgb = cmap(np.linspace(0, 1, n))[:, :3]

    #    Scale to [0,255], round, clip, and cast to uint8
    return np.clip(np.round(rgb * 255), 0, 255).astype(np.uint8)
