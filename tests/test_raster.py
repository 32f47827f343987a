"""Tests for rasterization and sampling utilities."""

import numpy as np
import pytest

from threadart.raster import (
    bilinear_sample, blend_stroke, channel_average, compute_working_size,
    line_coverage, rasterize_filled_circle, resample, stroke_coverage,
)


@pytest.fixture
def blank():
    return np.zeros((64, 64), dtype=np.float32)


class TestWorkingSize:
    def test_landscape(self):
        assert compute_working_size(512, 128, 256) == (256, 64)

    def test_portrait(self):
        assert compute_working_size(128, 512, 256) == (64, 256)

    def test_upscales_small_images(self):
        assert compute_working_size(64, 32, 256) == (256, 128)

    def test_rounds_up(self):
        w, h = compute_working_size(1000, 3, 256)
        assert w == 256
        assert h == 1


class TestResample:
    def test_size(self):
        img = np.zeros((100, 200, 3), dtype=np.uint8)
        out = resample(img, (50, 25))
        assert out.shape == (25, 50, 3)

    def test_constant_image_stays_constant(self):
        img = np.full((300, 300, 3), 77, dtype=np.uint8)
        out = resample(img, (256, 256))
        assert np.all(out == 77)


class TestChannelAverage:
    def test_rgb_mean(self):
        img = np.zeros((2, 2, 3), dtype=np.uint8)
        img[..., 0] = 30
        img[..., 1] = 60
        img[..., 2] = 90
        assert np.allclose(channel_average(img), 60)

    def test_alpha_over_black(self):
        img = np.full((2, 2, 4), 200, dtype=np.uint8)
        img[..., 3] = 0
        assert np.allclose(channel_average(img), 0)

    def test_grayscale_passthrough(self):
        img = np.full((3, 3), 42, dtype=np.uint8)
        assert np.allclose(channel_average(img), 42)


class TestLineCoverage:
    def test_draws_pixels(self, blank):
        cov = line_coverage(blank.shape, (10, 10), (50, 50))
        assert cov.sum() > 0
        assert cov.min() >= 0.0
        assert cov.max() <= 1.0

    def test_horizontal_row(self, blank):
        cov = line_coverage(blank.shape, (0, 32), (63, 32))
        assert cov[32, 5:60].min() > 0.5
        assert cov[10].sum() == 0

    def test_out_of_bounds_no_crash(self, blank):
        line_coverage(blank.shape, (-10, -10), (100, 100))

    def test_thickness(self, blank):
        thin = line_coverage(blank.shape, (10, 10), (50, 50), 1)
        thick = line_coverage(blank.shape, (10, 10), (50, 50), 5)
        assert thick.sum() > thin.sum()


class TestStrokeCoverage:
    def test_sums_to_length(self, blank):
        segments = [((8, 32), (56, 32)), ((20.5, 4), (20.5, 60)),
                    ((5.3, 7.1), (58.2, 49.9))]
        for p1, p2 in segments:
            cov = stroke_coverage(blank.shape, p1, p2)
            length = np.hypot(p2[0] - p1[0], p2[1] - p1[1])
            assert cov.sum() == pytest.approx(length, rel=1e-4)

    def test_thinner_than_aa_line(self, blank):
        aa = line_coverage(blank.shape, (8, 32), (56, 32))
        cov = stroke_coverage(blank.shape, (8, 32), (56, 32))
        assert cov.shape == blank.shape
        assert cov.sum() < aa.sum()
        assert cov.max() <= 1.0

    def test_counts_ink_past_the_border(self, blank):
        # the half of the line above row 0 is dropped, not moved inside
        cov = stroke_coverage(blank.shape, (8, 0), (56, 0))
        assert 0 < cov.sum() < 48

    def test_zero_length(self, blank):
        assert stroke_coverage(blank.shape, (30, 30), (30, 30)).sum() == 0


class TestBlendStroke:
    def test_moves_towards_color(self, blank):
        blank[:] = 100.0
        cov = np.zeros_like(blank)
        cov[5, 5] = 1.0
        blend_stroke(blank, cov, 255.0, 0.5)
        assert blank[5, 5] == pytest.approx(177.5)
        assert blank[6, 6] == 100.0

    def test_rgb(self):
        img = np.full((4, 4, 3), 255.0, dtype=np.float32)
        cov = np.ones((4, 4), dtype=np.float32)
        blend_stroke(img, cov, 0.0, 0.25)
        assert np.allclose(img, 191.25)


class TestFilledCircle:
    def test_draws_pixels(self):
        img = np.zeros((64, 64, 3), dtype=np.float32)
        rasterize_filled_circle(img, (32, 32), 5, (255.0, 0.0, 0.0))
        assert img[32, 32, 0] > 0
        assert img[..., 1].sum() == 0


class TestBilinearSample:
    @pytest.fixture
    def ramp(self):
        # value = x, 8 wide, 4 high
        grid = np.tile(np.arange(8, dtype=np.float64), (4, 1))
        return grid.ravel(), 8, 4

    def test_integer_points(self, ramp):
        flat, w, h = ramp
        assert bilinear_sample(flat, w, h, 3.0, 2.0) == pytest.approx(3.0)

    def test_interpolates(self, ramp):
        flat, w, h = ramp
        assert bilinear_sample(flat, w, h, 2.25, 1.5) == pytest.approx(2.25)

    def test_clamps_outside(self, ramp):
        flat, w, h = ramp
        assert bilinear_sample(flat, w, h, -3.0, 0.0) == pytest.approx(0.0)
        assert bilinear_sample(flat, w, h, 20.0, 10.0) == pytest.approx(7.0)

    def test_vectorised(self, ramp):
        flat, w, h = ramp
        xs = np.array([0.5, 1.5, 6.0])
        ys = np.array([0.0, 3.0, 1.0])
        assert np.allclose(bilinear_sample(flat, w, h, xs, ys), [0.5, 1.5, 6.0])
