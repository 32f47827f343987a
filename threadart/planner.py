"""
Greedy thread planner.

Each step scores candidate segments against the luminance field, appends the
winning peg to the path and draws the new segment onto the field, so that
later steps see this stroke's contribution.  ``advance`` runs steps until the
target segment count is reached or a time budget is spent; it is meant to be
called repeatedly (e.g. once per UI tick).
"""

import math
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional

import numpy as np

from threadart.config import MID_LEVEL, STROKE_OFFSET, WORKING_SIZE, PlannerConfig
from threadart.field import LuminanceField
from threadart.pegs import Peg, build_layout
from threadart.transform import Transformation


class PlannerState(Enum):
    EMPTY = "empty"             # no segment yet
    GROWING = "growing"         # segments < target
    AT_TARGET = "at_target"     # segments >= target
    STALLED = "stalled"         # no valid candidate left to draw


@dataclass
class StepResult:
    """Outcome of one greedy step."""
    peg1: Peg
    peg2: Peg
    score: float
    num_ties: int = 1


def segment_score(field, peg1, peg2):
    """Mean gap between the mid level and the field along peg1-peg2.

    The segment is sampled at ``ceil(length)`` strictly interior points.  Each
    sample contributes ``127 - (v + offset)`` where *offset* is the lightening
    one more thread would add.  Higher is better.  Zero-length segments score
    ``-inf``.
    """
    dx = peg2.x - peg1.x
    dy = peg2.y - peg1.y
    num_samples = math.ceil(math.sqrt(dx * dx + dy * dy))
    if num_samples == 0:
        return -math.inf
    r = np.arange(1, num_samples + 1, dtype=np.float64) / (num_samples + 1)
    values = field.sample_points(peg1.x + dx * r, peg1.y + dy * r)
    contributions = MID_LEVEL - (values + STROKE_OFFSET)
    return float(contributions.sum() / num_samples)


class ThreadPlanner:
    """Builds a thread path over a peg layout, one segment per step.

    Parameters
    ----------
    image : ndarray
        Source raster, [H, W] grayscale or [H, W, 3|4] uint8.
    config : PlannerConfig or None
        Shape, spacing, colour inversion and target segment count.
    rng : numpy.random.Generator, int or None
        Tie-break source.  Equal seeds reproduce equal paths.
    working_size : int
        Larger side of the luminance field.
    """

    def __init__(self, image, config=None, rng=None, working_size=WORKING_SIZE):
        self.source = np.asarray(image)
        self.config = replace(config) if config is not None else PlannerConfig()
        self.rng = rng if isinstance(rng, np.random.Generator) else np.random.default_rng(rng)
        self.working_size = working_size
        self.reset_count = 0
        self.reset()

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    def reset(self, config=None):
        """Rebuild layout and field from the (optionally replaced) config and
        clear the path."""
        if config is not None:
            self.config = replace(config)
        self.field = LuminanceField(self.source, self.config.invert_colors,
                                    self.working_size)
        self.layout = build_layout(self.field.width, self.field.height,
                                   self.config.shape, self.config.spacing)
        self.path: List[Peg] = []
        self.scores: List[float] = []
        self.stalled = False
        self.reset_count += 1

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def target_segments(self):
        return self.config.target_segments

    @target_segments.setter
    def target_segments(self, value):
        if int(value) != value:
            raise ValueError(f"target_segments must be an integer, got {value}")
        if value < 0:
            raise ValueError(f"target_segments must be non-negative, got {value}")
        self.config.target_segments = int(value)

    @property
    def pegs(self):
        return self.layout.pegs

    @property
    def num_pegs(self):
        return len(self.layout)

    @property
    def num_segments(self):
        return len(self.path) - 1 if len(self.path) > 1 else 0

    @property
    def path_indices(self):
        return [peg.index for peg in self.path]

    @property
    def state(self):
        if self.stalled:
            return PlannerState.STALLED
        if self.num_segments >= self.target_segments:
            return PlannerState.AT_TARGET
        if self.num_segments == 0:
            return PlannerState.EMPTY
        return PlannerState.GROWING

    # ------------------------------------------------------------------
    # Candidate search
    # ------------------------------------------------------------------

    def score(self, peg1, peg2):
        return segment_score(self.field, peg1, peg2)

    def candidates(self):
        """Segments the next step may choose from, as (start, end) pairs."""
        pegs = self.layout.pegs
        too_close = self.layout.too_close
        if not self.path:
            return [(pegs[i], pegs[j])
                    for i in range(len(pegs))
                    for j in range(i + 1, len(pegs))
                    if not too_close(pegs[i], pegs[j])]
        last = self.path[-1]
        return [(last, peg) for peg in pegs if not too_close(last, peg)]

    def _best_candidate(self, candidates) -> Optional[StepResult]:
        best_score = -math.inf
        best = []
        for peg1, peg2 in candidates:
            s = self.score(peg1, peg2)
            if s > best_score:
                best_score = s
                best = [(peg1, peg2)]
            elif s == best_score and s != -math.inf:
                best.append((peg1, peg2))
        if not best:
            return None
        peg1, peg2 = best[self.rng.integers(len(best))]
        return StepResult(peg1, peg2, best_score, len(best))

    # ------------------------------------------------------------------
    # Step
    # ------------------------------------------------------------------

    def step(self) -> Optional[StepResult]:
        """Extend the path by one segment.

        Returns None (and marks the planner stalled) when no valid segment
        exists; the path is left untouched in that case.
        """
        if self.stalled:
            return None
        result = self._best_candidate(self.candidates())
        if result is None:
            self.stalled = True
            return None

        if not self.path:
            self.path.append(result.peg1)
        self.path.append(result.peg2)
        self.scores.append(result.score)
        self.field.draw_stroke(result.peg1, result.peg2)
        return result

    def advance(self, time_budget):
        """Step until the target is reached or *time_budget* seconds elapse.

        If the path already overshoots a lowered target, the planner is reset
        first.  Returns True once the target segment count is reached.
        """
        start = time.perf_counter()
        if self.num_segments > self.target_segments:
            self.reset()

        while (self.num_segments < self.target_segments
               and not self.stalled
               and time.perf_counter() - start < time_budget):
            self.step()

        return self.num_segments >= self.target_segments

    def run(self, slice_budget=0.05, callback=None):
        """Advance to the target in successive time slices.

        *callback*, if given, is called with the planner after every slice.
        Returns True if the target was reached, False if the planner stalled.
        """
        if not slice_budget > 0:
            raise ValueError(f"slice_budget must be positive, got {slice_budget}")
        while not self.advance(slice_budget):
            if callback is not None:
                callback(self)
            if self.stalled:
                return False
        if callback is not None:
            callback(self)
        return True

    def replay(self, indices):
        """Reset and redraw a path given as peg indices (e.g. from an export).

        The target is raised to the replayed segment count if it was lower, so
        the next ``advance`` does not discard the replayed path.

        Consecutive pegs must not be too close to each other.
        """
        indices = [int(i) for i in indices]
        for i in indices:
            if not 0 <= i < self.num_pegs:
                raise ValueError(f"Peg index {i} out of range for {self.num_pegs} pegs")
        pegs = self.layout.pegs
        for a, b in zip(indices, indices[1:]):
            if self.layout.too_close(pegs[a], pegs[b]):
                raise ValueError(f"Pegs {a} and {b} are too close to form a segment")
        self.reset()
        pegs = self.layout.pegs
        for i in indices:
            peg = pegs[i]
            if self.path:
                prev = self.path[-1]
                self.scores.append(self.score(prev, peg))
                self.field.draw_stroke(prev, peg)
            self.path.append(peg)
        if self.num_segments > self.target_segments:
            self.config.target_segments = self.num_segments

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------

    def transformation(self, output_size):
        return Transformation.fit(output_size, (self.field.width, self.field.height))

    def thread_points(self, transform=None):
        """Path pegs mapped to output space (working space if no transform)."""
        if transform is None:
            return [(peg.x, peg.y) for peg in self.path]
        return transform.apply_all(self.path)

    def peg_points(self, transform=None, limit=None):
        """Layout pegs mapped to output space, optionally truncated to *limit*."""
        pegs = self.layout.pegs if limit is None else self.layout.pegs[:limit]
        if transform is None:
            return [(peg.x, peg.y) for peg in pegs]
        return transform.apply_all(pegs)

    def thread_length(self, transform=None):
        """Total thread length, scaled by the transform's scale factor."""
        total = 0.0
        for peg1, peg2 in zip(self.path, self.path[1:]):
            total += math.hypot(peg1.x - peg2.x, peg1.y - peg2.y)
        return total * (transform.scale if transform is not None else 1.0)

    def debug_view(self):
        return self.field.view()
