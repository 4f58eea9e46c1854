#!/usr/bin/env python3
"""
heatrgb CLI: colorize scalar rasters (GeoTIFF bands, greyscale or 16-bit PNGs,
ordinary photos reduced to luma) into RGB PNGs through a named palette.
Features:
  - Automatic (data min/max) or explicit --min/--max value range.
  - Optional JSON sidecar recording the range and palette, for legends.
  - Demo mode reproducing inferno/magma/plasma/viridis renders of a photo.

Usage:
  # Colorize rasters to PNG (+ optional sidecar JSON):
  python heatrgb_cli.py colorize "./dem_tiles/*.tif" [--palette NAME] [--min X --max Y] [--sidecar]

  # Greyscale a photo and render it with the four perceptual palettes:
  python heatrgb_cli.py demo ./example.png [--out-dir /tmp]

  # List palettes:
  python heatrgb_cli.py palettes
"""

from __future__ import annotations
import glob
import json
import logging
import warnings
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
from PIL import Image
import rasterio
import argparse

from color_palettes import describe, get_palette, list_palettes
from heatrgb import DataRange, color, color_greyscale, luma, resolve_range, supported_dtypes

logger = logging.getLogger(__name__)

RASTER_EXTS = (".tif", ".tiff")
IMAGE_EXTS = (".png", ".jpg", ".jpeg", ".bmp", ".webp")

# ---------------------------------------------------------------------
# Image codec: files <-> in-memory sample grids and RGB rasters
# ---------------------------------------------------------------------

def _supported_or_float64(arr: np.ndarray, source: Path) -> np.ndarray:
    if arr.dtype in supported_dtypes():
        return arr
    warnings.warn(f"{source.name}: {arr.dtype.name} samples are not supported, casting to float64.")
    return arr.astype(np.float64)


def _image_to_samples(img: Image.Image, source: Path) -> np.ndarray:
    """Return a 2-D sample grid from a PIL image, keeping single-band precision."""
    if img.mode == "L":
        return np.asarray(img, np.uint8)
    if img.mode.startswith("I;16"):
        return np.asarray(img).astype(np.uint16)
    if img.mode == "I":
        arr = np.asarray(img, np.int32)
        if arr.size and arr.min() >= 0:
            return arr.astype(np.uint32)
        return _supported_or_float64(arr, source)
    if img.mode == "F":
        return np.asarray(img, np.float32)
    return luma(np.asarray(img.convert("RGB"), np.uint8))


def load_samples(path: str | Path) -> np.ndarray:
    """Decode an image file into a 2-D (height, width) array of samples."""
    path = Path(path)
    if path.suffix.lower() in RASTER_EXTS:
        with rasterio.open(path) as src:
            band = src.read(1)
        return _supported_or_float64(band, path)

    with Image.open(path) as img:
        return _image_to_samples(img, path)


def load_rgb(path: str | Path) -> np.ndarray:
    with Image.open(path) as img:
        return np.array(img.convert("RGB"), dtype=np.uint8)


def save_rgb(raster: np.ndarray, path: str | Path) -> Path:
    """Write a (height, width, 3) uint8 raster as PNG."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(np.ascontiguousarray(raster, np.uint8)).save(path, optimize=True)
    logger.info("wrote %s", path)
    return path


def colorize_array(samples: np.ndarray, palette: str, data_range: Optional[DataRange] = None,
                   row_stride: str = "width") -> np.ndarray:
    """Colorize a 2-D sample grid with a named palette."""
    height, width = samples.shape
    return color(width, height, samples, get_palette(palette), data_range, row_stride=row_stride)

# ---------------------------------------------------------------------
# Batch routines
# ---------------------------------------------------------------------

def glob_paths(pattern: str, exts: Tuple[str, ...]) -> list[Path]:
    """Return sorted Paths matching glob pattern and extensions."""
    return sorted(
        Path(p) for p in glob.glob(pattern) if p.lower().endswith(exts)
    )


def range_metadata(samples: np.ndarray, palette: str, data_range: Optional[DataRange]) -> dict:
    """Describe how a grid was colorized: size, dtype, palette and resolved range."""
    resolved = resolve_range(samples, data_range)
    degenerate = resolved is None or bool(resolved[0] == resolved[1])
    return {
        "width": int(samples.shape[1]),
        "height": int(samples.shape[0]),
        "dtype": samples.dtype.name,
        "palette": palette,
        "palette_size": int(get_palette(palette).shape[0]),
        "range": None if resolved is None else [resolved[0].item(), resolved[1].item()],
        "degenerate": degenerate,
    }


def batch_colorize(
    pattern: str,
    palette: str = "viridis",
    data_range: Optional[DataRange] = None,
    out_dir: Optional[Path] = None,
    sidecar: bool = False,
    row_stride: str = "width",
) -> list[Path]:
    """Colorize all rasters/images matching pattern; return the PNGs written."""
    sources = glob_paths(pattern, RASTER_EXTS + IMAGE_EXTS)
    if not sources:
        raise FileNotFoundError(f"No rasters or images found for '{pattern}'.")

    written = []
    for src in sources:
        samples = load_samples(src)
        rgb = colorize_array(samples, palette, data_range, row_stride)

        folder = Path(out_dir) if out_dir else src.parent
        png_file = folder / f"{src.stem}_{palette}.png"
        written.append(save_rgb(rgb, png_file))

        if sidecar:
            metadata = range_metadata(samples, palette, data_range)
            if metadata["degenerate"]:
                warnings.warn(f"{src.name} has no contrast, wrote a blank image.")
            json_file = png_file.with_suffix(".json")
            json_file.write_text(json.dumps(metadata, separators=(",", ":")))
    return written


def run_demo(image: str | Path, out_dir: str | Path = "/tmp") -> list[Path]:
    """
    Greyscale a photo and render it with the inferno, magma, plasma and viridis palettes.

    inferno.png colors the greyscale channel directly; inferno2/magma use the
    fixed byte range [0, 255]; plasma/viridis stretch the photo's own range.
    """
    out_dir = Path(out_dir)
    grey = luma(load_rgb(image))
    byte_range = DataRange.min_max(0, 255)

    return [
        save_rgb(color_greyscale(grey, get_palette("inferno")), out_dir / "inferno.png"),
        save_rgb(colorize_array(grey, "inferno", byte_range), out_dir / "inferno2.png"),
        save_rgb(colorize_array(grey, "magma", byte_range), out_dir / "magma.png"),
        save_rgb(colorize_array(grey, "plasma"), out_dir / "plasma.png"),
        save_rgb(colorize_array(grey, "viridis"), out_dir / "viridis.png"),
    ]

# ---------------------------------------------------------------------
# CLI: Argument parsing and main
# ---------------------------------------------------------------------

def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="heatrgb: colorize scalar rasters through a colormap."
    )
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="-v for progress, -vv for transform details")
    sub = parser.add_subparsers(dest="command", required=True)

    col = sub.add_parser("colorize", help="Colorize rasters/images to PNGs")
    col.add_argument("pattern", help="Glob for input .tif/.tiff/.png/... files")
    col.add_argument(
        "--palette",
        default="viridis",
        choices=list_palettes(),
        help="Name of color palette",
    )
    col.add_argument("--min", type=float, dest="vmin", help="Explicit range minimum")
    col.add_argument("--max", type=float, dest="vmax", help="Explicit range maximum")
    col.add_argument("--out-dir", type=Path, help="Output folder (default: next to input)")
    col.add_argument(
        "--sidecar",
        action="store_true",
        help="Write a JSON file with the resolved range next to each PNG",
    )
    col.add_argument(
        "--legacy-row-stride",
        action="store_true",
        help="Address row y at sample y*height (only differs for non-square inputs)",
    )

    demo = sub.add_parser("demo", help="Render a photo with the four perceptual palettes")
    demo.add_argument("image", help="Input picture")
    demo.add_argument("--out-dir", type=Path, default=Path("/tmp"), help="Output folder")

    sub.add_parser("palettes", help="List available palettes")

    args = parser.parse_args(argv)
    if args.command == "colorize" and (args.vmin is None) != (args.vmax is None):
        parser.error("--min and --max must be given together")
    return args


def main(argv=None) -> None:
    args = parse_args(argv)
    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format='%(asctime)s - %(levelname)s - %(message)s')

    if args.command == "colorize":
        data_range = None if args.vmin is None else DataRange.min_max(args.vmin, args.vmax)
        batch_colorize(
            args.pattern,
            palette=args.palette,
            data_range=data_range,
            out_dir=args.out_dir,
            sidecar=args.sidecar,
            row_stride="height" if args.legacy_row_stride else "width",
        )
    elif args.command == "demo":
        run_demo(args.image, args.out_dir)
    elif args.command == "palettes":
        for name in list_palettes():
            print(f"{name:10s} {describe(name)}")


if __name__ == "__main__":
    main()
