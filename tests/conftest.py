"""
Pytest configuration and shared fixtures for deskew tests.

Pages are drawn synthetically: black horizontal strokes on white, tilted
by a known angle, so the expected skew is known exactly.
"""

import logging
import math
from pathlib import Path

import cv2
import numpy as np
import pytest

from houghdeskew.config import DeskewConfig


def draw_page(angle_degrees=0.0, width=1000, height=800, lines=12, channels=3):
    """White page with parallel black strokes descending to the right by angle_degrees."""
    shape = (height, width, channels) if channels > 1 else (height, width)
    page = np.full(shape, 255, dtype=np.uint8)
    color = (0,) * channels if channels > 1 else 0

    margin = width // 10
    rise = int(round((width - 2 * margin) * math.tan(math.radians(angle_degrees))))
    spacing = (height - 2 * margin - abs(rise)) // lines
    top = margin + max(0, -rise)
    for i in range(lines):
        y = top + i * spacing
        cv2.line(page, (margin, y), (width - margin, y + rise), color, 3)
    return page


@pytest.fixture
def config() -> DeskewConfig:
    return DeskewConfig()


@pytest.fixture
def page_factory():
    """Return the draw_page helper."""
    return draw_page


@pytest.fixture
def tilted_page():
    """A 1000x800 color page tilted by 3 degrees."""
    return draw_page(3.0)


@pytest.fixture
def blank_page():
    return np.full((600, 800, 3), 255, dtype=np.uint8)


@pytest.fixture
def page_file(tmp_path: Path, tilted_page) -> Path:
    path = tmp_path / "scan.png"
    cv2.imwrite(str(path), tilted_page)
    return path


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers the CLI attached, so later tests do not write to closed streams."""
    yield
    logger = logging.getLogger("houghdeskew")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
