"""
color_palettes package
----------------------
Drop any *.py file in here and it is discovered automatically (modules whose
name starts with "_" are helpers, not palettes).
Each palette module *must* provide one of:

* forward_lut() -> np.ndarray (shape: [N, 3], dtype:uint8, N >= 1)
* LUT (defined directly as an np.ndarray)

Optionally:
    name        : display name (str)
    description : one-line description (str)
"""

from functools import lru_cache
import importlib
import pkgutil
import numpy as np

def _discover():
    """Scan the *.py files under color_palettes and return a {name: module} dict."""
    modules = {}
    for _, modname, ispkg in pkgutil.iter_modules(__path__):
        if ispkg or modname.startswith("_"):
            continue
        modules[modname] = importlib.import_module(f"{__name__}.{modname}")
    return modules

_MODULES = _discover()


def _check_lut(name: str, lut) -> np.ndarray:
    if isinstance(lut, np.ndarray) and lut.ndim == 2 and lut.shape[1] == 3 and lut.shape[0] >= 1:
        lut = lut.astype(np.uint8, copy=False)
        lut.flags.writeable = False
        return lut
    raise TypeError(f"{name} LUT must be a non-empty uint8[N,3] ndarray")

# ------------------------------------------------------------
# Public API
# ------------------------------------------------------------
def list_palettes():
    """Names of the available palettes."""
    return sorted(_MODULES.keys())


def describe(name: str) -> str:
    mod = _module(name)
    doc_lines = (mod.__doc__ or "").strip().splitlines()
    return getattr(mod, "description", None) or (doc_lines[0] if doc_lines else name)


def _module(name: str):
    if name not in _MODULES:
        raise ValueError(f"Unknown palette '{name}'. Available: {list_palettes()}")
    return _MODULES[name]


@lru_cache(maxsize=None)
def get_palette(name: str = "viridis") -> np.ndarray:
    """
    Return the read-only lookup table for the named palette.
    - module.forward_lut() is tried first
    - then a module.LUT ndarray
    """
    mod = _module(name)

    if hasattr(mod, "forward_lut") and callable(mod.forward_lut):
        return _check_lut(name, mod.forward_lut())
    if hasattr(mod, "LUT"):
        return _check_lut(name, mod.LUT)
    raise AttributeError(f"{name} must expose forward_lut() or LUT ndarray.")
