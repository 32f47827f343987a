"""
Visualization and diagnostics.

Usage (from a notebook)::

    from threadart.viz import visualize_run, plot_score_curve
    visualize_run(planner)
    plot_score_curve(planner.scores)
"""

import os

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from threadart.render import render_planner


def visualize_run(planner, save_path="outputs/run.png", output_size=(512, 512)):
    """Save a 3-panel figure: source | luminance field | rendered thread.

    The field panel shows the working raster as the planner sees it, with
    every stroke drawn so far lightening it; areas still darker than mid
    grey are where the planner will keep adding thread.
    """
    fig, axes = plt.subplots(1, 3, figsize=(15, 5))

    source = planner.source
    axes[0].imshow(source, cmap="gray" if source.ndim == 2 else None)
    axes[0].set_title("Source")

    axes[1].imshow(planner.debug_view(), cmap="gray", vmin=0, vmax=255)
    axes[1].set_title(f"Field ({planner.field.stroke_count} strokes)")

    axes[2].imshow(render_planner(planner, output_size, show_pegs=True))
    axes[2].set_title(f"{planner.num_segments} segments, {planner.num_pegs} pegs")

    for ax in axes:
        ax.axis("off")

    plt.tight_layout()
    os.makedirs(os.path.dirname(save_path) or ".", exist_ok=True)
    fig.savefig(save_path, dpi=120, bbox_inches="tight")
    plt.close(fig)
    print(f"Run overview saved to {save_path}")


def plot_score_curve(scores, save_path="outputs/scores.png", window=50):
    """Plot the winning score of every step, with a moving average.

    Scores fall as the image fills in; a curve that drops below zero means
    new segments mostly cross areas that are already light enough.
    """
    scores = np.asarray(scores, dtype=np.float64)
    fig, ax = plt.subplots(figsize=(8, 4))
    if len(scores):
        ax.plot(np.arange(len(scores)), scores, linewidth=0.6, alpha=0.5)
        if len(scores) >= window:
            smooth = np.convolve(scores, np.ones(window) / window, mode="valid")
            ax.plot(np.arange(window - 1, len(scores)), smooth, color="orange",
                    linewidth=1.2, label=f"mean over {window}")
            ax.legend()
    ax.axhline(0.0, color="gray", linewidth=0.8)
    ax.set_xlabel("segment")
    ax.set_ylabel("score")
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    os.makedirs(os.path.dirname(save_path) or ".", exist_ok=True)
    fig.savefig(save_path, dpi=120, bbox_inches="tight")
    plt.close(fig)
    print(f"Score curve saved to {save_path}")
