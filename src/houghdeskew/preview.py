"""
Debug output for intermediate pipeline stages.

The processing functions never display anything themselves; the pipeline
hands each stage to a preview sink chosen by the caller. The default sink
does nothing, so batch and headless runs are never blocked.
"""

import logging
import os
import re
import sys
from pathlib import Path
from typing import Optional, Tuple, Union

import cv2
import numpy as np

from .estimator import Classification

logger = logging.getLogger(__name__)

GREEN = (0, 255, 0)
RED = (0, 0, 255)


class PreviewSink:
    """Receives intermediate images. The base implementation discards them."""

    interactive = False

    def begin(self, label: str) -> None:
        """Called before the stages of a new image are shown."""

    def show(self, name: str, image: np.ndarray) -> None:
        pass


class NullPreview(PreviewSink):
    """Headless sink."""


class WindowPreview(PreviewSink):
    """Shows each stage in a window and waits for a key press."""

    interactive = True

    def show(self, name: str, image: np.ndarray) -> None:
        cv2.imshow(name, image)
        cv2.waitKey(0)
        cv2.destroyWindow(name)


class SnapshotPreview(PreviewSink):
    """Writes each stage as a PNG file into a directory."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
        self.label = "image"
        self.index = 0

    def begin(self, label: str) -> None:
        self.label = label
        self.index = 0

    def show(self, name: str, image: np.ndarray) -> None:
        self.index += 1
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / f"{self.label}_{self.index:02d}_{_slug(name)}.png"
        if cv2.imwrite(str(path), image):
            logger.debug("    Saved %s stage: %s", name, path)
        else:
            logger.warning("    Could not save %s stage to %s", name, path)


def has_display() -> bool:
    """Whether a window can be opened on this machine."""
    if sys.platform.startswith(("win", "darwin")):
        return True
    return bool(os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY"))


def select_preview(enabled: bool, snapshot_dir: Optional[Union[str, Path]] = None) -> PreviewSink:
    """Pick the sink for a run: snapshots, windows, or nothing."""
    if snapshot_dir is not None:
        return SnapshotPreview(snapshot_dir)
    if not enabled:
        return NullPreview()
    if has_display():
        return WindowPreview()
    logger.warning("Preview requested but no display is available, continuing without it")
    return NullPreview()


def draw_segments(shape: Tuple[int, ...], classification: Classification) -> np.ndarray:
    """Render candidates in green and outliers in red on a black canvas."""
    h, w = shape[:2]
    canvas = np.zeros((h, w, 3), dtype=np.uint8)
    for color, segments in ((GREEN, classification.candidates), (RED, classification.outliers)):
        for x1, y1, x2, y2 in segments:
            cv2.line(canvas, (x1, y1), (x2, y2), color)
    return canvas


def _slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
