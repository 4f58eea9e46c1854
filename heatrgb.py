"""
heatrgb: map 2-D scalar grids onto RGB rasters through a colormap lookup table.

Each sample is rescaled from the data range onto the table index range
[0, len(color_map) - 1] and replaced by the table entry at the truncated index.
Supported sample kinds: uint8, uint16, uint32, float32, float64.
"""

from __future__ import annotations
import logging
from typing import NamedTuple, Optional, Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_COLOR = (0, 0, 0)

# ---------------------------------------------------------------------
# Numeric capability: per-kind min/max, index casts and affine transform
# ---------------------------------------------------------------------

class Numeric:
    """Operations the colorizer needs from a sample kind."""

    def __init__(self, dtype) -> None:
        self.dtype = np.dtype(dtype)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.dtype.name})"

    def _check_non_empty(self, values: np.ndarray) -> None:
        if values.size == 0:
            raise ValueError("min/max of an empty sample buffer is undefined")

    def minimum(self, values: np.ndarray):
        self._check_non_empty(values)
        return self.dtype.type(values.min())

    def maximum(self, values: np.ndarray):
        self._check_non_empty(values)
        return self.dtype.type(values.max())

    def from_index(self, n: int):
        return self.dtype.type(n)

    def to_index(self, x) -> int:
        return int(np.trunc(x))

    def coerce(self, value):
        raise NotImplementedError

    def validate(self, values: np.ndarray) -> None:
        pass

    def span_is_finite(self, lo, hi) -> bool:
        return True

    def indices(self, values: np.ndarray, lo, hi, table_max: int) -> np.ndarray:
        raise NotImplementedError


class UIntNumeric(Numeric):
    """Unsigned integers: total order, exact integer transform."""

    def coerce(self, value):
        info = np.iinfo(self.dtype)
        if isinstance(value, (float, np.floating)) and not float(value).is_integer():
            raise ValueError(f"bound {value!r} is not an integer ({self.dtype.name} samples)")
        if not info.min <= int(value) <= info.max:
            raise ValueError(f"bound {value!r} does not fit in {self.dtype.name}")
        return self.dtype.type(int(value))

    def indices(self, values: np.ndarray, lo, hi, table_max: int) -> np.ndarray:
        # floor((v - lo) * table_max / (hi - lo)) in uint64; v >= lo is checked by the caller
        offset = values.astype(np.uint64) - np.uint64(lo)
        scaled = offset * np.uint64(table_max) // np.uint64(int(hi) - int(lo))
        return scaled.astype(np.intp)


class FloatNumeric(Numeric):
    """IEEE floats: NaN is rejected before any reduction."""

    def validate(self, values: np.ndarray) -> None:
        if np.isnan(values).any():
            raise ValueError(f"{self.dtype.name} samples contain NaN")

    def minimum(self, values: np.ndarray):
        self._check_non_empty(values)
        self.validate(values)
        return self.dtype.type(values.min())

    def maximum(self, values: np.ndarray):
        self._check_non_empty(values)
        self.validate(values)
        return self.dtype.type(values.max())

    def coerce(self, value):
        value = self.dtype.type(value)
        if np.isnan(value):
            raise ValueError("range bound is NaN")
        return value

    def span_is_finite(self, lo, hi) -> bool:
        with np.errstate(over="ignore"):
            return bool(np.isfinite(np.float64(hi) - np.float64(lo)))

    def indices(self, values: np.ndarray, lo, hi, table_max: int) -> np.ndarray:
        lo64, hi64 = np.float64(lo), np.float64(hi)
        # v == hi gives (hi - lo) / (hi - lo) == 1.0 exactly, so index(hi) == table_max
        t = (values.astype(np.float64) - lo64) / (hi64 - lo64)
        return np.trunc(t * table_max).astype(np.intp)


_NUMERICS = {
    np.dtype(np.uint8): UIntNumeric(np.uint8),
    np.dtype(np.uint16): UIntNumeric(np.uint16),
    np.dtype(np.uint32): UIntNumeric(np.uint32),
    np.dtype(np.float32): FloatNumeric(np.float32),
    np.dtype(np.float64): FloatNumeric(np.float64),
}


def supported_dtypes() -> list[np.dtype]:
    return list(_NUMERICS)


def numeric_for(dtype) -> Numeric:
    """Return the Numeric capability registered for *dtype*."""
    try:
        return _NUMERICS[np.dtype(dtype)]
    except KeyError:
        names = ", ".join(d.name for d in _NUMERICS)
        raise TypeError(f"Unsupported sample dtype '{np.dtype(dtype).name}'. Supported: {names}") from None

# ---------------------------------------------------------------------
# Range policy
# ---------------------------------------------------------------------

class DataRange(NamedTuple):
    """Automatic (min/max taken from the data) or explicit (lo, hi) bounds."""
    lo: Optional[float] = None
    hi: Optional[float] = None

    @classmethod
    def automatic(cls) -> "DataRange":
        return cls()

    @classmethod
    def min_max(cls, lo, hi) -> "DataRange":
        if lo is None or hi is None:
            raise ValueError("explicit range needs both bounds")
        return cls(lo, hi)

    @property
    def is_automatic(self) -> bool:
        return self.lo is None and self.hi is None


RangeLike = Union[DataRange, Tuple[float, float], None]


def _as_range(data_range: RangeLike) -> DataRange:
    if data_range is None:
        return DataRange.automatic()
    if isinstance(data_range, DataRange):
        if (data_range.lo is None) != (data_range.hi is None):
            raise ValueError("explicit range needs both bounds")
        return data_range
    lo, hi = data_range
    return DataRange.min_max(lo, hi)

# ---------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------

def as_color_map(color_map) -> np.ndarray:
    """Validate a colormap and return it as a uint8[N, 3] array."""
    arr = np.asarray(color_map)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"color map must have shape (N, 3), got {arr.shape}")
    if arr.shape[0] == 0:
        raise ValueError("color map is empty")
    if arr.dtype != np.uint8:
        if not np.issubdtype(arr.dtype, np.integer):
            raise TypeError(f"color map entries must be integers, got {arr.dtype.name}")
        if arr.min() < 0 or arr.max() > 255:
            raise ValueError("color map channels must lie in [0, 255]")
        arr = arr.astype(np.uint8)
    return arr


def _as_samples(width: int, height: int, data, dtype) -> np.ndarray:
    if width < 0 or height < 0:
        raise ValueError(f"negative raster size {width}x{height}")
    samples = np.asarray(data, dtype=dtype)
    if samples.ndim == 2:
        if samples.shape != (height, width):
            raise ValueError(f"2-D samples must have shape ({height}, {width}), got {samples.shape}")
        samples = samples.reshape(-1)
    elif samples.ndim != 1:
        raise ValueError(f"samples must be flat or (height, width), got {samples.ndim} dimensions")
    if samples.size != width * height:
        raise ValueError(f"{width}x{height} raster needs {width * height} samples, got {samples.size}")
    return samples


def blank_raster(width: int, height: int) -> np.ndarray:
    raster = np.empty((height, width, 3), np.uint8)
    raster[...] = DEFAULT_COLOR
    return raster

# ---------------------------------------------------------------------
# Core mapping
# ---------------------------------------------------------------------

def resolve_range(samples: np.ndarray, data_range: RangeLike = None):
    """Return (lo, hi) in the sample dtype, or None for an empty buffer."""
    samples = np.asarray(samples)
    numeric = numeric_for(samples.dtype)
    data_range = _as_range(data_range)
    if samples.size == 0:
        return None

    if data_range.is_automatic:
        lo, hi = numeric.minimum(samples), numeric.maximum(samples)
    else:
        lo, hi = numeric.coerce(data_range.lo), numeric.coerce(data_range.hi)

    if lo > hi:
        raise ValueError(f"range minimum {lo} is greater than maximum {hi}")
    return lo, hi


def _row_origins(width: int, height: int, row_stride: str) -> np.ndarray:
    if row_stride == "width":
        stride = width
    elif row_stride == "height":
        stride = height
    else:
        raise ValueError(f"row_stride must be 'width' or 'height', got {row_stride!r}")
    return np.arange(height, dtype=np.intp) * stride


def color(
    width: int,
    height: int,
    data,
    color_map,
    data_range: RangeLike = None,
    *,
    dtype=None,
    row_stride: str = "width",
) -> np.ndarray:
    """
    Map *data* (width*height samples, row-major) through *color_map*.

    Returns a new uint8 array of shape (height, width, 3). Empty data and a
    degenerate range (min == max) both give an all-black raster.

    row_stride="height" reproduces the legacy addressing where row y starts at
    sample y*height; it only differs from the default when width != height.
    """
    samples = _as_samples(width, height, data, dtype)
    numeric = numeric_for(samples.dtype)
    lut = as_color_map(color_map)
    origins = _row_origins(width, height, row_stride)

    if samples.size == 0:
        logger.debug("empty sample buffer, returning blank %dx%d raster", width, height)
        return blank_raster(width, height)

    lo, hi = resolve_range(samples, data_range)
    if lo == hi:
        logger.debug("degenerate range (min == max == %s), returning blank raster", lo)
        return blank_raster(width, height)
    if not numeric.span_is_finite(lo, hi):
        raise ValueError(f"range [{lo}, {hi}] has no finite span")

    table_max = lut.shape[0] - 1
    slope = np.float64(table_max) / (np.float64(hi) - np.float64(lo))
    logger.debug("map_len=%d, slope=%s, y_offset=-%s", table_max, slope, slope * np.float64(lo))

    positions = origins[:, None] + np.arange(width, dtype=np.intp)[None, :]
    if positions.size and positions.max() >= samples.size:
        raise ValueError(
            f"row stride '{row_stride}' addresses sample {positions.max()} "
            f"beyond the {samples.size}-sample buffer"
        )
    values = samples[positions]

    numeric.validate(values)
    if (values < lo).any() or (values > hi).any():
        raise ValueError(f"samples fall outside the range [{lo}, {hi}]")

    index = numeric.indices(values, lo, hi, table_max)
    if index.min() < 0 or index.max() >= lut.shape[0]:
        raise ValueError(f"computed index outside [0, {lut.shape[0]}) for a {lut.shape[0]}-entry color map")
    return lut[index]

# ---------------------------------------------------------------------
# Greyscale helpers
# ---------------------------------------------------------------------

def luma(rgb: np.ndarray) -> np.ndarray:
    """Return uint8 luma 0.299 R + 0.587 G + 0.114 B, truncated."""
    rgb = np.asarray(rgb)
    if rgb.shape[-1:] != (3,):
        raise ValueError(f"expected (..., 3) RGB array, got {rgb.shape}")
    r, g, b = (rgb[..., i].astype(np.float64) for i in range(3))
    y = 0.299 * r + 0.587 * g + 0.114 * b
    return np.clip(np.trunc(y), 0, 255).astype(np.uint8)


def color_greyscale(grey: np.ndarray, color_map) -> np.ndarray:
    """Color a 2-D uint8 channel over the fixed byte range [0, 255]."""
    grey = np.asarray(grey)
    if grey.ndim != 2:
        raise ValueError(f"expected a 2-D channel, got shape {grey.shape}")
    if grey.dtype != np.uint8:
        raise TypeError(f"greyscale channel must be uint8, got {grey.dtype.name}")
    height, width = grey.shape
    return color(width, height, grey, color_map, DataRange.min_max(0, 255))
