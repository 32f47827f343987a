"""Text and JSON descriptions of a computed thread path."""

import json
import os
from datetime import datetime

import numpy as np

from threadart.config import PlannerConfig, Shape


class _NumpyEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy types and enums."""

    def default(self, obj):
        if isinstance(obj, (np.bool_,)):
            return bool(obj)
        if isinstance(obj, (np.integer,)):
            return int(obj)
        if isinstance(obj, (np.floating,)):
            return float(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, Shape):
            return obj.value
        return super().default(obj)


def path_to_text(planner, transform=None):
    """Human-readable description: a short header, then the peg indices in
    drawing order, comma separated."""
    config = planner.config
    lines = [
        f"shape: {config.shape.value}",
        f"pegs: {planner.num_pegs}",
        f"segments: {planner.num_segments}",
        f"thread length: {planner.thread_length(transform):.1f}",
        "",
        ",".join(str(i) for i in planner.path_indices),
    ]
    return "\n".join(lines) + "\n"


def save_path_text(planner, path, transform=None):
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w") as f:
        f.write(path_to_text(planner, transform))


def path_to_dict(planner):
    config = planner.config
    return {
        "config": {
            "shape": config.shape,
            "spacing": config.spacing,
            "invert_colors": config.invert_colors,
            "target_segments": config.target_segments,
        },
        "working_size": [planner.field.width, planner.field.height],
        "pegs": [[peg.x, peg.y] for peg in planner.pegs],
        "path": planner.path_indices,
        "timestamp": datetime.now().isoformat(),
    }


def save_path_json(planner, path):
    """Persist configuration, layout and path indices to *path*."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w") as f:
        json.dump(path_to_dict(planner), f, cls=_NumpyEncoder, indent=2)


def load_path_json(path, working_size=None):
    """Read a file written by :func:`save_path_json`.

    Returns ``(config, indices)``; feed them to ``ThreadPlanner.reset`` and
    ``ThreadPlanner.replay`` to resume.  If *working_size* ``(width, height)``
    is given, it must match the field size the path was computed on, otherwise
    the indices would refer to a different peg layout.
    """
    with open(path) as f:
        data = json.load(f)
    if working_size is not None and tuple(data["working_size"]) != tuple(working_size):
        raise ValueError(
            f"{path} was computed on a {data['working_size'][0]}x{data['working_size'][1]} "
            f"field, not {working_size[0]}x{working_size[1]}")
    config = PlannerConfig(**data["config"])
    return config, [int(i) for i in data["path"]]
