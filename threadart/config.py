"""
Global configuration: working resolution, stroke opacities, peg shapes and
planner presets.

The working raster is deliberately small (256 px on its larger side): every
planning step scores O(pegs) candidate segments, each sampled once per pixel
of length, so the resolution directly bounds the cost of a step.
"""

import math
from dataclasses import dataclass
from enum import Enum

# ---------------------------------------------------------------------------
# Working raster
# ---------------------------------------------------------------------------

WORKING_SIZE = 256      # larger side of the luminance field, in pixels

# ---------------------------------------------------------------------------
# Stroke model
# ---------------------------------------------------------------------------

LINE_OPACITY = 0.512 / 8                 # opacity of one rendered thread
STROKE_OPACITY = 0.5 * LINE_OPACITY      # opacity applied to the field per stroke
MID_LEVEL = 127.0                        # reference level the scores aim for
STROKE_OFFSET = 0.5 * LINE_OPACITY * 255

TWO_PI = 2 * math.pi
MIN_PEG_ANGLE = TWO_PI / 16              # circular pegs closer than this are excluded

# ---------------------------------------------------------------------------
# Peg shapes
# ---------------------------------------------------------------------------


class Shape(Enum):
    """Boundary along which pegs are laid out."""

    RECTANGLE = "rectangle"
    CIRCLE = "circle"


# ---------------------------------------------------------------------------
# Planner configuration & presets
# ---------------------------------------------------------------------------

@dataclass
class PlannerConfig:
    shape: Shape = Shape.CIRCLE
    spacing: float = 6.0            # pixels between pegs, in working space
    invert_colors: bool = False     # white thread on a black background
    target_segments: int = 2000

    def __post_init__(self):
        if isinstance(self.shape, str):
            self.shape = Shape(self.shape)
        if not self.spacing > 0:
            raise ValueError(f"spacing must be positive, got {self.spacing}")
        if int(self.target_segments) != self.target_segments:
            raise ValueError(
                f"target_segments must be an integer, got {self.target_segments}")
        self.target_segments = int(self.target_segments)
        if self.target_segments < 0:
            raise ValueError(
                f"target_segments must be non-negative, got {self.target_segments}")


PRESET_FINE = PlannerConfig(
    shape=Shape.CIRCLE,
    spacing=4.0,
    target_segments=4000,
)

PRESET_DEFAULT = PlannerConfig(
    shape=Shape.CIRCLE,
    spacing=6.0,
    target_segments=2000,
)

PRESET_COARSE = PlannerConfig(
    shape=Shape.RECTANGLE,
    spacing=12.0,
    target_segments=800,
)

PRESETS = {"fine": PRESET_FINE, "default": PRESET_DEFAULT, "coarse": PRESET_COARSE}
