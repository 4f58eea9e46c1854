import json

import numpy as np
import pytest
import rasterio
from PIL import Image
from rasterio.transform import Affine

import heatrgb_cli
from color_palettes import get_palette
from heatrgb import DataRange


@pytest.fixture
def gradient_png(tmp_path):
    grey = np.tile(np.arange(0, 200, 10, dtype=np.uint8), (5, 1))
    path = tmp_path / "gradient.png"
    Image.fromarray(grey).save(path)
    return path, grey


@pytest.fixture
def dem_tif(tmp_path):
    dem = np.linspace(-50.0, 1200.0, 12, dtype=np.float32).reshape(3, 4)
    path = tmp_path / "dem.tif"
    with rasterio.open(
        path, "w", driver="GTiff", width=4, height=3, count=1, dtype="float32",
        transform=Affine(1, 0, 0, 0, -1, 3),
    ) as dst:
        dst.write(dem, 1)
    return path, dem


class TestLoadSamples:

    @staticmethod
    def test_greyscale_png_is_uint8(gradient_png):
        path, grey = gradient_png
        samples = heatrgb_cli.load_samples(path)
        assert samples.dtype == np.uint8
        np.testing.assert_array_equal(samples, grey)

    @staticmethod
    def test_rgb_png_is_reduced_to_luma(tmp_path):
        rgb = np.zeros((2, 2, 3), np.uint8)
        rgb[..., 1] = 100
        path = tmp_path / "green.png"
        Image.fromarray(rgb).save(path)
        samples = heatrgb_cli.load_samples(path)
        assert samples.dtype == np.uint8
        assert (samples == int(0.587 * 100)).all()

    @staticmethod
    def test_float_geotiff_keeps_dtype(dem_tif):
        path, dem = dem_tif
        samples = heatrgb_cli.load_samples(path)
        assert samples.dtype == np.float32
        np.testing.assert_array_equal(samples, dem)

    @staticmethod
    def test_signed_geotiff_is_cast_with_warning(tmp_path):
        path = tmp_path / "signed.tif"
        with rasterio.open(
            path, "w", driver="GTiff", width=2, height=1, count=1, dtype="int16",
            transform=Affine(1, 0, 0, 0, -1, 1),
        ) as dst:
            dst.write(np.array([[-5, 7]], np.int16), 1)
        with pytest.warns(UserWarning, match="int16"):
            samples = heatrgb_cli.load_samples(path)
        assert samples.dtype == np.float64
        assert samples.tolist() == [[-5.0, 7.0]]


class TestBatch:

    @staticmethod
    def test_colorize_writes_png_and_sidecar(dem_tif, tmp_path):
        path, dem = dem_tif
        out_dir = tmp_path / "out"
        written = heatrgb_cli.batch_colorize(str(tmp_path / "*.tif"), palette="viridis",
                                             out_dir=out_dir, sidecar=True)
        assert written == [out_dir / "dem_viridis.png"]

        rgb = np.asarray(Image.open(written[0]).convert("RGB"))
        lut = get_palette("viridis")
        assert rgb.shape == (3, 4, 3)
        assert (rgb[0, 0] == lut[0]).all()
        assert (rgb[-1, -1] == lut[-1]).all()

        meta = json.loads((out_dir / "dem_viridis.json").read_text())
        assert meta["width"] == 4 and meta["height"] == 3
        assert meta["dtype"] == "float32"
        assert meta["range"] == [-50.0, 1200.0]
        assert meta["palette_size"] == 256
        assert meta["degenerate"] is False

    @staticmethod
    def test_explicit_range(gradient_png, tmp_path):
        heatrgb_cli.batch_colorize(str(tmp_path / "*.png"), palette="inferno",
                                   data_range=DataRange.min_max(0, 255), sidecar=True)
        meta = json.loads((tmp_path / "gradient_inferno.json").read_text())
        assert meta["range"] == [0, 255]

    @staticmethod
    def test_flat_image_warns(tmp_path):
        Image.fromarray(np.full((2, 2), 9, np.uint8)).save(tmp_path / "flat.png")
        with pytest.warns(UserWarning, match="no contrast"):
            written = heatrgb_cli.batch_colorize(str(tmp_path / "*.png"), sidecar=True)
        assert not np.asarray(Image.open(written[0])).any()

    @staticmethod
    def test_no_matches(tmp_path):
        with pytest.raises(FileNotFoundError):
            heatrgb_cli.batch_colorize(str(tmp_path / "*.tif"))


class TestDemo:

    @staticmethod
    def test_demo_outputs(tmp_path):
        rgb = np.random.default_rng(0).integers(0, 256, size=(6, 8, 3)).astype(np.uint8)
        src = tmp_path / "photo.png"
        Image.fromarray(rgb).save(src)

        written = heatrgb_cli.run_demo(src, tmp_path / "renders")
        names = [p.name for p in written]
        assert names == ["inferno.png", "inferno2.png", "magma.png", "plasma.png", "viridis.png"]

        direct = np.asarray(Image.open(written[0]).convert("RGB"))
        via_range = np.asarray(Image.open(written[1]).convert("RGB"))
        np.testing.assert_array_equal(direct, via_range)
        for path in written:
            assert Image.open(path).size == (8, 6)


class TestMain:

    @staticmethod
    def test_colorize_command(gradient_png, tmp_path):
        heatrgb_cli.main(["colorize", str(tmp_path / "*.png"), "--palette", "plasma",
                          "--min", "0", "--max", "255", "--out-dir", str(tmp_path / "o")])
        assert (tmp_path / "o" / "gradient_plasma.png").exists()

    @staticmethod
    def test_min_without_max_is_rejected(tmp_path):
        with pytest.raises(SystemExit):
            heatrgb_cli.main(["colorize", str(tmp_path / "*.png"), "--min", "3"])

    @staticmethod
    def test_unknown_palette_is_rejected(tmp_path):
        with pytest.raises(SystemExit):
            heatrgb_cli.main(["colorize", str(tmp_path / "*.png"), "--palette", "nope"])

    @staticmethod
    def test_palettes_command(capsys):
        heatrgb_cli.main(["palettes"])
        out = capsys.readouterr().out
        assert "viridis" in out and "classic" in out

    @staticmethod
    def test_legacy_row_stride_flag(tmp_path):
        Image.fromarray(np.arange(12, dtype=np.uint8).reshape(3, 4)).save(tmp_path / "wide.png")
        heatrgb_cli.main(["colorize", str(tmp_path / "wide.png"), "--legacy-row-stride"])
        assert (tmp_path / "wide_viridis.png").exists()
