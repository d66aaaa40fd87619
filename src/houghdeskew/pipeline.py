"""
Per-image and per-file processing.

Each (source, destination) pair is handled on its own: load, preprocess,
detect lines, estimate, rotate, save. Nothing is shared between pairs, so
a batch can run sequentially or on a process pool.
"""

import logging
import time
from dataclasses import dataclass
from functools import partial
from multiprocessing import Pool
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

import cv2
import numpy as np

from .config import DeskewConfig
from .correct import correct_skew
from .estimator import Classification, SkewEstimate, classify_segments, estimate_skew
from .exceptions import DeskewError, ImageLoadError, ImageWriteError
from .geometry import LineSegment
from .lines import detect_lines, min_line_length
from .preprocess import preprocess
from .preview import NullPreview, PreviewSink, draw_segments

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class SkewReport:
    """Estimate for one image together with the data it was computed from."""

    estimate: SkewEstimate
    binary: np.ndarray
    segments: List[LineSegment]
    classification: Classification


@dataclass
class PairResult:
    """Outcome of one (source, destination) pair."""

    source: Path
    destination: Path
    estimate: Optional[SkewEstimate] = None
    error: Optional[str] = None
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


def compute_skew(
    image: np.ndarray,
    config: Optional[DeskewConfig] = None,
    preview: Optional[PreviewSink] = None,
) -> SkewReport:
    """
    Estimate the skew of a loaded image.

    The minimum line length is derived from the width of the image as
    given, before it is scaled to working resolution.
    """
    config = config or DeskewConfig()
    preview = preview or NullPreview()

    binary = preprocess(image, config)
    preview.show("Resized and b/w", binary)

    min_length = min_line_length(image.shape[1], config)
    segments = detect_lines(binary, min_length, config.detect.max_gap, config)

    classification = classify_segments(segments, config)
    estimate = estimate_skew(segments, len(segments), config)
    preview.show("Lines", draw_segments(binary.shape, classification))

    return SkewReport(estimate, binary, segments, classification)


def deskew_image(
    image: np.ndarray,
    config: Optional[DeskewConfig] = None,
    preview: Optional[PreviewSink] = None,
) -> Tuple[np.ndarray, SkewReport]:
    """Estimate and correct the skew of a loaded image."""
    config = config or DeskewConfig()
    preview = preview or NullPreview()

    report = compute_skew(image, config, preview)
    corrected = correct_skew(image, report.estimate, config)
    preview.show("Corrected", corrected)
    return corrected, report


def load_image(path: PathLike) -> np.ndarray:
    """Read an image keeping its channels and bit depth."""
    path = Path(path)
    if not path.is_file():
        raise ImageLoadError("Source file not found", path)

    logger.debug("  Loading image: %s", path)
    img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise ImageLoadError("Could not load image", path)

    logger.debug("  ✓ Loaded image: %sx%s pixels", img.shape[1], img.shape[0])
    return img


def save_image(path: PathLike, image: np.ndarray) -> None:
    """Write an image in the format implied by the file extension."""
    path = Path(path)
    if not path.parent.is_dir():
        raise ImageWriteError("Destination directory does not exist", path)

    try:
        written = cv2.imwrite(str(path), image)
    except cv2.error as e:
        raise ImageWriteError(f"Could not write image: {e}", path) from e

    if not written:
        raise ImageWriteError("Could not write image", path)
    logger.debug("  ✓ Saved image: %s", path)


def deskew_file(
    src: PathLike,
    dst: PathLike,
    config: Optional[DeskewConfig] = None,
    preview: Optional[PreviewSink] = None,
) -> SkewEstimate:
    """Load src, correct its skew and write the result to dst."""
    preview = preview or NullPreview()
    preview.begin(Path(src).stem)

    img = load_image(src)
    corrected, report = deskew_image(img, config, preview)
    save_image(dst, corrected)
    return report.estimate


def process_pair(
    pair: Tuple[PathLike, PathLike],
    config: Optional[DeskewConfig] = None,
    preview: Optional[PreviewSink] = None,
) -> PairResult:
    """Process one pair, turning processing failures into an error result."""
    src, dst = Path(pair[0]), Path(pair[1])
    start_time = time.time()
    try:
        estimate = deskew_file(src, dst, config, preview)
    except (DeskewError, cv2.error) as e:
        return PairResult(src, dst, error=str(e), elapsed=time.time() - start_time)
    return PairResult(src, dst, estimate=estimate, elapsed=time.time() - start_time)


def process_pairs(
    pairs: Sequence[Tuple[PathLike, PathLike]],
    config: Optional[DeskewConfig] = None,
    preview: Optional[PreviewSink] = None,
    jobs: int = 1,
    fail_fast: bool = False,
    on_result: Optional[Callable[[PairResult], None]] = None,
) -> List[PairResult]:
    """
    Process a batch of (source, destination) pairs.

    Args:
        pairs: Files to process, in order
        config: Pipeline configuration
        preview: Sink for intermediate images
        jobs: Worker processes; 1 processes the pairs in the calling process
        fail_fast: Stop at the first failing pair and raise DeskewError
        on_result: Called with each result as soon as it is available

    Returns:
        One result per pair, in input order (shorter when fail_fast stopped early)

    Raises:
        DeskewError: With fail_fast, for the first pair that failed
        ValueError: If an interactive preview is combined with jobs > 1
    """
    config = config or DeskewConfig()
    preview = preview or NullPreview()
    if jobs < 1:
        raise ValueError("jobs must be at least 1")
    if jobs > 1 and preview.interactive:
        raise ValueError("Interactive preview cannot be used with parallel jobs")

    worker = partial(process_pair, config=config, preview=preview)
    results = []

    def collect(result):
        results.append(result)
        if result.ok:
            logger.debug("  ✓ %s → %s in %.2fs", result.source.name, result.destination.name, result.elapsed)
        else:
            logger.error("✗ Error processing %s: %s", result.source, result.error)
        if on_result is not None:
            on_result(result)
        if fail_fast and not result.ok:
            raise DeskewError(result.error, {"source": str(result.source)})

    if jobs == 1 or len(pairs) < 2:
        for pair in pairs:
            collect(worker(pair))
        return results

    with Pool(processes=min(jobs, len(pairs))) as pool:
        for result in pool.imap(worker, pairs):
            collect(result)
    return results
