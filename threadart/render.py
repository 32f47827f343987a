"""
Rendering of a computed thread onto an output canvas.

The canvas is a float32 RGB array in [0, 255].  Threads are 1 px strokes
(scaled with the transform) at ``LINE_OPACITY``: black on white normally,
white on black when colours are inverted.  Peg markers are red discs.
"""

import math

import numpy as np

from threadart.config import LINE_OPACITY
from threadart.raster import blend_stroke, line_coverage, rasterize_filled_circle

PEG_COLOR = (255, 0, 0)


def blank_canvas(output_size, invert_colors=False):
    """Return an empty float32 [H, W, 3] canvas of ``output_size = (width, height)``."""
    width, height = output_size
    background = 0.0 if invert_colors else 255.0
    return np.full((height, width, 3), background, dtype=np.float32)


def draw_thread(canvas, points, invert_colors=False, line_width=1.0,
                opacity=LINE_OPACITY):
    """Draw consecutive translucent segments through *points* onto *canvas*.

    Each segment is rasterised and blended only inside its bounding box
    (grown by the line thickness), so the cost scales with the segment, not
    with the canvas.
    """
    color = 255.0 if invert_colors else 0.0
    thickness = max(int(round(line_width)), 1)
    margin = thickness + 2
    h, w = canvas.shape[:2]
    for p1, p2 in zip(points, points[1:]):
        x0 = max(int(math.floor(min(p1[0], p2[0]))) - margin, 0)
        y0 = max(int(math.floor(min(p1[1], p2[1]))) - margin, 0)
        x1 = min(int(math.ceil(max(p1[0], p2[0]))) + margin + 1, w)
        y1 = min(int(math.ceil(max(p1[1], p2[1]))) + margin + 1, h)
        if x0 >= x1 or y0 >= y1:
            continue
        region = canvas[y0:y1, x0:x1]
        coverage = line_coverage(region.shape, (p1[0] - x0, p1[1] - y0),
                                 (p2[0] - x0, p2[1] - y0), thickness)
        blend_stroke(region, coverage, color, opacity)
    return canvas


def draw_pegs(canvas, points, radius=3.0, color=PEG_COLOR):
    for p in points:
        rasterize_filled_circle(canvas, p, radius, tuple(float(c) for c in color))
    return canvas


def render_planner(planner, output_size, show_pegs=False):
    """Render the planner's current path at *output_size*.

    Returns a uint8 [H, W, 3] image.
    """
    transform = planner.transformation(output_size)
    invert = planner.config.invert_colors
    canvas = blank_canvas(output_size, invert)
    draw_thread(canvas, planner.thread_points(transform), invert,
                line_width=transform.scale)
    if show_pegs:
        draw_pegs(canvas, planner.peg_points(transform, limit=planner.target_segments),
                  radius=3.0 * transform.scale)
    return np.clip(canvas, 0, 255).astype(np.uint8)
