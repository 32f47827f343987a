"""
Thread art demo.

Compute a thread path for an image, then save the rendered result, a GIF of
the thread growing, and the path as text and JSON.

Usage (CLI):
    python -m threadart.demo --image photo.png --shape circle --spacing 6 --lines 2000

Or from a notebook:
    from threadart.demo import compute_thread
    planner = compute_thread("photo.png", lines=1500)
"""

import argparse
import os
from dataclasses import replace

import cv2
from PIL import Image
from tqdm import tqdm

from threadart.config import PRESETS, Shape
from threadart.export import load_path_json, save_path_json, save_path_text
from threadart.planner import ThreadPlanner
from threadart.render import render_planner


def load_image(image_path):
    """Read an image file as an RGB(A) uint8 array."""
    img = cv2.imread(image_path, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise FileNotFoundError(f"Cannot read image: {image_path}")
    if img.ndim == 3 and img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    if img.ndim == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
    return img


def compute_thread(
    image_path,
    preset="default",
    shape=None,
    spacing=None,
    lines=None,
    invert=False,
    seed=None,
    slice_budget=0.05,
    output_size=(1024, 1024),
    frame_every=0,
    resume=None,
    save_dir="outputs",
):
    """Run the planner on an image and write its outputs.

    Parameters
    ----------
    image_path : str
        Source image.
    preset : str
        Name in ``threadart.config.PRESETS``; individual options override it.
    shape, spacing, lines, invert :
        Overrides for the preset's peg shape, peg spacing, target segment
        count and colour inversion.
    seed : int or None
        Tie-break seed.
    slice_budget : float
        Seconds per ``advance`` call.
    output_size : (int, int)
        Size of the rendered PNG and GIF frames.
    frame_every : int
        Add a GIF frame every *frame_every* segments (0 disables the GIF).
    resume : str or None
        JSON file from a previous run; its path is replayed before growing.
    save_dir : str
        Output directory.

    Returns
    -------
    ThreadPlanner
    """
    base = PRESETS[preset]
    overrides = {}
    if shape is not None:
        overrides["shape"] = Shape(shape)
    if spacing is not None:
        overrides["spacing"] = spacing
    if lines is not None:
        overrides["target_segments"] = lines
    if invert:
        overrides["invert_colors"] = True
    config = replace(base, **overrides)

    image = load_image(image_path)
    print(f"Loaded {image_path} ({image.shape[1]}x{image.shape[0]} pixels)")

    planner = ThreadPlanner(image, config, rng=seed)
    print(f"Field {planner.field.width}x{planner.field.height}, "
          f"{planner.num_pegs} pegs ({config.shape.value}, spacing {config.spacing})")

    if resume is not None:
        resumed_config, indices = load_path_json(
            resume, (planner.field.width, planner.field.height))
        resumed_config.target_segments = config.target_segments
        planner.reset(resumed_config)
        planner.replay(indices)
        print(f"Resumed {planner.num_segments} segments from {resume}")

    frames = []
    last_frame = -1
    pbar = tqdm(total=planner.target_segments, initial=planner.num_segments,
                desc="Threading", unit="seg")

    def on_slice(p):
        nonlocal last_frame
        pbar.update(p.num_segments - pbar.n)
        if frame_every and p.num_segments // frame_every != last_frame:
            last_frame = p.num_segments // frame_every
            frames.append(Image.fromarray(render_planner(p, output_size)))

    reached = planner.run(slice_budget, callback=on_slice)
    pbar.close()
    if not reached:
        print(f"Stalled after {planner.num_segments} segments: "
              "no valid peg pair left with this layout.")

    os.makedirs(save_dir, exist_ok=True)
    stem = os.path.splitext(os.path.basename(image_path))[0]
    transform = planner.transformation(output_size)

    png_path = os.path.join(save_dir, f"{stem}_thread.png")
    Image.fromarray(render_planner(planner, output_size)).save(png_path)
    save_path_text(planner, os.path.join(save_dir, f"{stem}_path.txt"), transform)
    save_path_json(planner, os.path.join(save_dir, f"{stem}_path.json"))

    if frames:
        gif_path = os.path.join(save_dir, f"{stem}_thread.gif")
        frames[0].save(gif_path, save_all=True, append_images=frames[1:],
                       duration=100, loop=0)
        print(f"Progress GIF saved to {gif_path} ({len(frames)} frames)")

    print(f"Thread saved to {png_path}")
    print(f"{planner.num_segments} segments, thread length "
          f"{planner.thread_length(transform):.0f} px at {output_size[0]}x{output_size[1]}")
    return planner


def main():
    p = argparse.ArgumentParser(description="Compute thread art from an image")
    p.add_argument("--image", required=True, help="Path to input image")
    p.add_argument("--preset", choices=sorted(PRESETS), default="default")
    p.add_argument("--shape", choices=[s.value for s in Shape], default=None)
    p.add_argument("--spacing", type=float, default=None,
                   help="Peg spacing in working-space pixels")
    p.add_argument("--lines", type=int, default=None, help="Number of segments")
    p.add_argument("--invert", action="store_true",
                   help="White thread on a black background")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--size", type=int, default=1024, help="Rendered output size")
    p.add_argument("--frame-every", type=int, default=0,
                   help="Save a GIF frame every N segments (0 = no GIF)")
    p.add_argument("--resume", default=None, help="JSON path from a previous run")
    p.add_argument("--save-dir", default="outputs")
    args = p.parse_args()
    compute_thread(
        args.image,
        preset=args.preset,
        shape=args.shape,
        spacing=args.spacing,
        lines=args.lines,
        invert=args.invert,
        seed=args.seed,
        output_size=(args.size, args.size),
        frame_every=args.frame_every,
        resume=args.resume,
        save_dir=args.save_dir,
    )


if __name__ == "__main__":
    main()
