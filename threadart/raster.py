"""
Low-level raster utilities backed by OpenCV.

Lines are rasterised into uint8 coverage masks with ``LINE_AA`` (OpenCV only
anti-aliases 8-bit images) using fixed-point coordinates so that pegs at
fractional positions land where they should.  Coverage is returned as
float32 in [0, 1] and composited onto float32 rasters by the callers.
"""

import math

import cv2
import numpy as np


SHIFT_BITS = 4                  # fixed-point fractional bits for cv2 drawing
_SHIFT_SCALE = 1 << SHIFT_BITS


def _fixed(p):
    return (int(round(float(p[0]) * _SHIFT_SCALE)),
            int(round(float(p[1]) * _SHIFT_SCALE)))


# ---------------------------------------------------------------------------
# Sizing & resampling
# ---------------------------------------------------------------------------

def compute_working_size(width, height, max_size):
    """Scale (width, height) so the larger side equals *max_size*.

    Each side is rounded up, so the result is never smaller than 1x1.
    """
    factor = max_size / max(width, height)
    return math.ceil(width * factor), math.ceil(height * factor)


def resample(img, size):
    """Resize *img* to ``size = (width, height)``."""
    h, w = img.shape[:2]
    shrinking = size[0] < w or size[1] < h
    interp = cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR
    return cv2.resize(img, size, interpolation=interp)


def channel_average(img):
    """Return the per-pixel mean of the RGB channels as float32 [H, W].

    Grayscale input is returned as-is.  An alpha channel, if present, is
    composited over black first.
    """
    img = np.asarray(img)
    if img.ndim == 2:
        return img.astype(np.float32)
    rgb = img[..., :3].astype(np.float32)
    if img.shape[2] == 4:
        rgb *= img[..., 3:4].astype(np.float32) / 255.0
    return rgb.mean(axis=2)


# ---------------------------------------------------------------------------
# Lines
# ---------------------------------------------------------------------------

def line_coverage(shape, p1, p2, thickness=1):
    """Anti-aliased coverage of the segment p1-p2 as float32 [H, W] in [0, 1]."""
    mask = np.zeros(shape[:2], dtype=np.uint8)
    cv2.line(mask, _fixed(p1), _fixed(p2), 255, thickness,
             lineType=cv2.LINE_AA, shift=SHIFT_BITS)
    return mask.astype(np.float32) / 255.0


def stroke_coverage(shape, p1, p2, pad=2):
    """Coverage of a 1 px wide segment, scaled so it sums to the segment length.

    ``LINE_AA`` spreads about 1.3-1.4 units of ink per unit of length,
    depending on direction.  The mask is drawn with a *pad* px margin so that
    ink falling just outside the raster still counts towards the total, then
    rescaled and cropped back to *shape*.
    """
    h, w = shape[:2]
    length = math.hypot(p2[0] - p1[0], p2[1] - p1[1])
    padded = line_coverage((h + 2 * pad, w + 2 * pad),
                           (p1[0] + pad, p1[1] + pad), (p2[0] + pad, p2[1] + pad))
    total = float(padded.sum())
    if total == 0.0:
        return np.zeros((h, w), dtype=np.float32)
    padded *= length / total
    np.clip(padded, 0.0, 1.0, out=padded)
    return padded[pad:pad + h, pad:pad + w]


def blend_stroke(img, coverage, color, opacity):
    """Composite a translucent stroke of *color* onto float32 *img* in place.

    ``new = old * (1 - a) + color * a`` with ``a = opacity * coverage``.
    *img* may be [H, W] or [H, W, C]; *color* a scalar or per-channel tuple.
    """
    alpha = coverage * float(opacity)
    if img.ndim == 3:
        alpha = alpha[..., np.newaxis]
    img *= 1.0 - alpha
    img += np.asarray(color, dtype=np.float32) * alpha
    return img


def rasterize_filled_circle(img, center, radius, color=1.0):
    """Draw a filled anti-aliased disc."""
    cv2.circle(
        img,
        _fixed(center),
        int(max(round(radius * _SHIFT_SCALE), 1)),
        color,
        -1,
        lineType=cv2.LINE_AA,
        shift=SHIFT_BITS,
    )
    return img


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------

def bilinear_sample(flat, width, height, xs, ys):
    """Bilinearly interpolate a row-major flattened [height, width] raster.

    The four neighbours are ``floor``/``ceil`` of each coordinate clamped to
    the raster bounds; weights are the fractional parts ``x mod 1`` and
    ``y mod 1``.  Accepts scalars or arrays and returns the same shape.
    """
    xs = np.asarray(xs, dtype=np.float64)
    ys = np.asarray(ys, dtype=np.float64)

    min_x = np.clip(np.floor(xs), 0, width - 1).astype(np.intp)
    max_x = np.clip(np.ceil(xs), 0, width - 1).astype(np.intp)
    min_y = np.clip(np.floor(ys), 0, height - 1).astype(np.intp)
    max_y = np.clip(np.ceil(ys), 0, height - 1).astype(np.intp)

    top_left = flat[min_x + min_y * width]
    top_right = flat[max_x + min_y * width]
    bottom_left = flat[min_x + max_y * width]
    bottom_right = flat[max_x + max_y * width]

    fract_x = np.mod(xs, 1.0)
    fract_y = np.mod(ys, 1.0)
    top = top_left * (1 - fract_x) + top_right * fract_x
    bottom = bottom_left * (1 - fract_x) + bottom_right * fract_x
    return top * (1 - fract_y) + bottom * fract_y
