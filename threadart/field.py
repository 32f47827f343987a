"""
The luminance field: a small grayscale raster that is both the optimisation
target and the accumulator of every stroke drawn so far.

Values start on a halved scale (normal: ``g / 2`` in [0, 127]; inverted:
``128 - g / 2``) so that strokes, which lighten the field towards 255, have
headroom before they saturate.  Scores compare samples against the mid level
127, so a segment stops being attractive once enough strokes crossed it.
"""

import numpy as np

from threadart.config import STROKE_OPACITY, WORKING_SIZE
from threadart.raster import (
    bilinear_sample, blend_stroke, channel_average, compute_working_size,
    resample, stroke_coverage,
)


class LuminanceField:
    """Mutable working-resolution grayscale raster.

    Sampling reads through a flattened copy of the grid that is built lazily
    and dropped on every mutation, so it is either absent or exact.
    """

    def __init__(self, source, invert_colors=False, working_size=WORKING_SIZE):
        source = np.asarray(source)
        if source.ndim not in (2, 3) or source.shape[0] == 0 or source.shape[1] == 0:
            raise ValueError(f"Source image must be a non-empty raster, got shape {source.shape}")
        if source.dtype not in (np.uint8, np.float32):
            source = source.astype(np.float32)
        self.invert_colors = bool(invert_colors)
        self.working_size = working_size

        src_h, src_w = source.shape[:2]
        self.width, self.height = compute_working_size(src_w, src_h, working_size)
        gray = channel_average(resample(source, (self.width, self.height)))
        if self.invert_colors:
            self._grid = (128.0 - gray / 2).astype(np.float32)
        else:
            self._grid = (gray / 2).astype(np.float32)

        self._readback = None
        self.stroke_count = 0

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def draw_stroke(self, p1, p2):
        """Overlay one translucent white 1 px line from *p1* to *p2*.

        The stroke deposits one unit of coverage per unit of length whatever
        its direction.
        """
        coverage = stroke_coverage(self._grid.shape, (p1.x, p1.y), (p2.x, p2.y))
        blend_stroke(self._grid, coverage, 255.0, STROKE_OPACITY)
        self._readback = None
        self.stroke_count += 1

    # ------------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------------

    @property
    def cached(self):
        """True when a readback buffer is currently held."""
        return self._readback is not None

    def readback(self):
        """Flattened float64 copy of the grid, rebuilt on first read after a stroke."""
        if self._readback is None:
            self._readback = self._grid.astype(np.float64).ravel()
        return self._readback

    def sample(self, x, y):
        """Bilinear sample at a single point. Returns a float in [0, 255]."""
        return float(bilinear_sample(self.readback(), self.width, self.height, x, y))

    def sample_points(self, xs, ys):
        """Vectorised :meth:`sample` over coordinate arrays."""
        return bilinear_sample(self.readback(), self.width, self.height, xs, ys)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def shape(self):
        return self._grid.shape

    def view(self):
        """Read-only view of the grid, for debug display."""
        v = self._grid.view()
        v.flags.writeable = False
        return v

    def copy(self):
        other = LuminanceField.__new__(LuminanceField)
        other.invert_colors = self.invert_colors
        other.working_size = self.working_size
        other.width, other.height = self.width, self.height
        other._grid = self._grid.copy()
        other._readback = None
        other.stroke_count = self.stroke_count
        return other

    def __eq__(self, other):
        if not isinstance(other, LuminanceField):
            return NotImplemented
        return np.array_equal(self._grid, other._grid)

    __hash__ = None
