"""threadart - turn an image into a single continuous thread strung between pegs."""

from threadart.config import PRESETS, PlannerConfig, Shape
from threadart.field import LuminanceField
from threadart.pegs import Peg, PegLayout, build_layout
from threadart.planner import PlannerState, ThreadPlanner
from threadart.transform import Transformation
