"""Mapping from working-space coordinates to an output surface."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Transformation:
    """Uniform scale followed by an offset: ``out = p * scale + offset``."""
    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    @classmethod
    def fit(cls, output_size, working_size):
        """Largest uniform scaling of *working_size* that fits *output_size*, centred.

        Both sizes are ``(width, height)`` tuples.
        """
        out_w, out_h = output_size
        work_w, work_h = working_size
        scale = min(out_w / work_w, out_h / work_h)
        offset_x = (out_w - work_w * scale) / 2
        offset_y = (out_h - work_h * scale) / 2
        return cls(scale, offset_x, offset_y)

    def apply(self, point):
        if hasattr(point, "x"):
            x, y = point.x, point.y
        else:
            x, y = point
        return (x * self.scale + self.offset_x, y * self.scale + self.offset_y)

    def apply_all(self, points):
        return [self.apply(p) for p in points]
