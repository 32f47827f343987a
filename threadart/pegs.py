"""
Peg layouts: where the thread may be anchored, and which pairs of anchors
are too close to be joined.

Layouts are pure functions of (width, height, shape, spacing); no randomness
is involved, so rebuilding a layout always yields the same pegs in the same
order.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

from threadart.config import MIN_PEG_ANGLE, TWO_PI, Shape


@dataclass(frozen=True)
class Peg:
    """One anchor point in working-space coordinates."""
    x: float
    y: float
    index: int = 0
    angle: Optional[float] = None   # placement angle, circular layouts only


@dataclass
class PegLayout:
    """Ordered pegs for one shape plus that shape's proximity rule."""
    shape: Shape
    width: int
    height: int
    pegs: List[Peg] = field(default_factory=list)

    def __len__(self):
        return len(self.pegs)

    def __getitem__(self, idx):
        return self.pegs[idx]

    def __iter__(self):
        return iter(self.pegs)

    def too_close(self, peg1, peg2):
        return too_close(self.shape, peg1, peg2)


# ---------------------------------------------------------------------------
# Proximity rules
# ---------------------------------------------------------------------------

def too_close(shape, peg1, peg2):
    """True if a segment between *peg1* and *peg2* must never be drawn.

    Rectangle: pegs sharing an x or a y coordinate lie on the same side (or
    are the same peg).  Circle: pegs less than 1/16 of a turn apart.
    """
    if shape == Shape.RECTANGLE:
        return peg1.x == peg2.x or peg1.y == peg2.y
    if shape == Shape.CIRCLE:
        delta = abs(peg1.angle - peg2.angle)
        return min(delta, TWO_PI - delta) <= MIN_PEG_ANGLE
    raise ValueError(f"Unknown shape: {shape}")


# ---------------------------------------------------------------------------
# Layout generation
# ---------------------------------------------------------------------------

def build_layout(width, height, shape, spacing) -> PegLayout:
    """Lay out pegs along the boundary of a ``width`` x ``height`` domain.

    Parameters
    ----------
    width, height : int
        Domain size in working-space pixels.
    shape : Shape
    spacing : float
        Approximate distance between neighbouring pegs, in pixels.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Domain must be at least 1x1, got {width}x{height}")
    if not spacing > 0:
        raise ValueError(f"spacing must be positive, got {spacing}")
    shape = Shape(shape)

    if shape == Shape.RECTANGLE:
        points = _rectangle_points(width, height, spacing)
        pegs = [Peg(x, y, i) for i, (x, y) in enumerate(points)]
    else:
        points = _circle_points(width, height, spacing)
        pegs = [Peg(x, y, i, angle) for i, (x, y, angle) in enumerate(points)]
    return PegLayout(shape=shape, width=width, height=height, pegs=pegs)


def _rectangle_points(width, height, spacing):
    max_x = float(width - 1)
    max_y = float(height - 1)
    # corners first
    points = [(0.0, 0.0), (max_x, 0.0), (max_x, max_y), (0.0, max_y)]

    per_width = math.ceil(width / spacing)
    for i in range(1, per_width):
        x = max_x * (i / per_width)
        points.append((x, 0.0))
        points.append((x, max_y))

    per_height = math.ceil(height / spacing)
    for j in range(1, per_height):
        y = max_y * (j / per_height)
        points.append((0.0, y))
        points.append((max_x, y))
    return points


def _circle_points(width, height, spacing):
    # pegs ring the ellipse inscribed in the domain
    num_pegs = math.ceil(0.5 * TWO_PI * max(width, height) / spacing)
    delta = TWO_PI / num_pegs
    points = []
    for i in range(num_pegs):
        angle = i * delta
        points.append((
            0.5 * width * (1 + math.cos(angle)),
            0.5 * height * (1 + math.sin(angle)),
            angle,
        ))
    return points
