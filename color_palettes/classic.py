"""
Classic blue-green-orange-white palette (TerrainRGB-like), 256 entries
"""
import numpy as np
from functools import lru_cache
from skimage import color

# (position in [0, 1], hex colour); the table is interpolated in CIE Lab between stops
_SEGMENTS = (
    (0.000, "#081d58"), (0.250, "#225ea8"), (0.500, "#41b6c4"),
    (0.550, "#66c2a5"), (0.575, "#238b45"), (0.650, "#fdae61"),
    (0.775, "#a6611a"), (1.000, "#ffffff"),
)

N = 256

@lru_cache(maxsize=1)
def forward_lut() -> np.ndarray:
    t_pts = np.array([t for t, _ in _SEGMENTS], np.float32)
    rgb_pts = np.array(
        [tuple(int(c[i:i+2], 16)/255 for i in (1,3,5)) for _,c in _SEGMENTS],
        np.float32)
    lab_pts = color.rgb2lab(rgb_pts.reshape(-1,1,3)).reshape(-1,3)

    t_all = np.linspace(0, 1, N, dtype=np.float32)
    lab = np.empty((N,3), np.float32)
    for i in range(len(_SEGMENTS)-1):
        t0,t1 = t_pts[i:i+2]
        m = (t_all>=t0)&(t_all<=t1)
        w = (t_all[m]-t0)/(t1-t0)
        lab[m] = (1-w)[:,None]*lab_pts[i] + w[:,None]*lab_pts[i+1]
    rgb = color.lab2rgb(lab.reshape(-1,1,3)).reshape(-1,3)
    return np.clip(np.round(rgb*255),0,255).astype(np.uint8)
