"""End-to-end tests for the demo pipeline and diagnostics."""

import json
import os

import cv2
import numpy as np
import pytest

from threadart.demo import compute_thread, load_image
from threadart.viz import plot_score_curve, visualize_run


@pytest.fixture
def image_path(tmp_path):
    img = np.full((120, 160, 3), 255, dtype=np.uint8)
    cv2.circle(img, (80, 60), 30, (0, 0, 0), -1)
    path = tmp_path / "disc.png"
    cv2.imwrite(str(path), img)
    return str(path)


class TestLoadImage:
    def test_rgb(self, image_path):
        img = load_image(image_path)
        assert img.shape == (120, 160, 3)

    def test_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_image(str(tmp_path / "nope.png"))


class TestComputeThread:
    def test_writes_outputs(self, image_path, tmp_path):
        out = tmp_path / "out"
        planner = compute_thread(image_path, preset="coarse", lines=12, seed=0,
                                 output_size=(200, 150), frame_every=4,
                                 save_dir=str(out))
        assert planner.num_segments == 12
        for name in ("disc_thread.png", "disc_path.txt", "disc_path.json",
                     "disc_thread.gif"):
            assert os.path.exists(out / name)

    def test_resume(self, image_path, tmp_path):
        out = tmp_path / "out"
        first = compute_thread(image_path, shape="rectangle", spacing=16, lines=5,
                               seed=0, output_size=(100, 100), save_dir=str(out))
        second = compute_thread(image_path, shape="rectangle", spacing=16, lines=8,
                                seed=1, output_size=(100, 100),
                                resume=str(out / "disc_path.json"),
                                save_dir=str(tmp_path / "out2"))
        assert second.path_indices[:6] == first.path_indices
        with open(tmp_path / "out2" / "disc_path.json") as f:
            assert len(json.load(f)["path"]) == 9

    def test_resume_rejects_other_field_size(self, image_path, tmp_path):
        out = tmp_path / "out"
        compute_thread(image_path, shape="rectangle", spacing=16, lines=3, seed=0,
                       output_size=(100, 100), save_dir=str(out))
        square = tmp_path / "square.png"
        cv2.imwrite(str(square), np.zeros((100, 100, 3), dtype=np.uint8))
        with pytest.raises(ValueError):
            compute_thread(str(square), shape="rectangle", spacing=16, lines=6,
                           resume=str(out / "disc_path.json"),
                           save_dir=str(tmp_path / "out2"))


class TestViz:
    def test_run_figure(self, image_path, tmp_path):
        planner = compute_thread(image_path, preset="coarse", lines=5, seed=0,
                                 output_size=(100, 100), save_dir=str(tmp_path))
        save_path = tmp_path / "viz" / "run.png"
        visualize_run(planner, save_path=str(save_path), output_size=(128, 128))
        assert save_path.exists()

    def test_score_curve(self, tmp_path):
        scores = np.linspace(40, -5, 120)
        save_path = tmp_path / "scores.png"
        plot_score_curve(scores, save_path=str(save_path), window=10)
        assert save_path.exists()
