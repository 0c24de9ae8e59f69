"""
Image Comparison - Main Orchestrator
------------------------------------
Compares one or more candidate HDR images against a reference image.

For every candidate, in order: decode, extract luminance, compute RMSE
against the reference and, when difference output is requested, locate the
worst pixel and export a difference image. Any failure aborts the whole run.

Usage:
    python -m imagediff.cli image1.exr image2.exr reference.exr [--diff]
"""

from dataclasses import dataclass
from pathlib import Path
import time
from typing import IO, Iterable, List, Optional, Sequence, Union

import numpy as np

from imagediff.config import Config, get_config, MAX_DIGITS10
from imagediff.diff_image import export_diff_image
from imagediff.errors import DimensionMismatch, UsageError
from imagediff.fileio import decode, detect_format
from imagediff.logger import setup_logger
from imagediff.luminance import extract_luminance
from imagediff.metrics import MaxDiff, max_diff, rmse

# --- Logger ---
logger = setup_logger("compare")

PathLike = Union[str, Path]

@dataclass(frozen=True)
class LuminanceImage:
    """Luminance field of one decoded image plus its geometry."""
    path: Path
    field: np.ndarray
    width: int
    height: int

@dataclass(frozen=True)
class ComparisonResult:
    """Outcome of comparing one candidate with the reference."""
    label: str
    path: Path
    rmse: float
    max_diff: Optional[MaxDiff] = None
    diff_path: Optional[Path] = None

def load_luminance(path: PathLike, config: Optional[Config] = None) -> LuminanceImage:
    """Decode an HDR image and reduce it to its luminance field."""
    config = config or get_config()
    buffer = decode(path)
    field = extract_luminance(buffer, config.LUMINANCE_WEIGHTS)
    return LuminanceImage(path=Path(path), field=field, width=buffer.width, height=buffer.height)

def _check_dimensions(images: Iterable[LuminanceImage], reference: LuminanceImage) -> None:
    for image in images:
        if (image.width, image.height) != (reference.width, reference.height):
            raise DimensionMismatch(
                f"{image.path} is {image.width}x{image.height} but reference "
                f"{reference.path} is {reference.width}x{reference.height}")

def compare_images(candidates: Sequence[PathLike], reference: PathLike,
                   with_diff: bool = False, config: Optional[Config] = None) -> List[ComparisonResult]:
    """
    Compare each candidate against the reference.

    Args:
        candidates: Candidate image paths, reported as Image1, Image2, ... in order.
        reference: Reference image path.
        with_diff: Also compute maxDiff and write one difference image per candidate.
        config: Configuration; the global config when omitted.

    Returns:
        One ComparisonResult per candidate, in candidate order.

    Raises:
        ImageDiffError: On the first failure of any kind; no partial results.
    """
    config = config or get_config()
    if not candidates:
        raise UsageError("At least one candidate image is required")

    run_start = time.perf_counter()
    # Reject unknown extensions before decoding anything
    for path in [*candidates, reference]:
        detect_format(path)

    reference_image = load_luminance(reference, config)
    candidate_images = [load_luminance(path, config) for path in candidates]
    _check_dimensions(candidate_images, reference_image)

    results = []
    for index, image in enumerate(candidate_images, start=1):
        label = f"Image{index}"
        value = rmse(image.field, reference_image.field)
        logger.info(f"{label} ({image.path.name}) RMSE vs {reference_image.path.name}: {value!r}")

        worst, diff_path = None, None
        if with_diff:
            worst = max_diff(image.field, reference_image.field)
            diff_path = export_diff_image(image.field, reference_image.field,
                                          image.width, image.height, config.diff_path(index))
            logger.info(f"{label} maxDiff at {worst.index} ({worst.value!r}); difference image: {diff_path}")

        results.append(ComparisonResult(label=label, path=image.path, rmse=value,
                                        max_diff=worst, diff_path=diff_path))

    logger.debug(f"Compared {len(results)} image(s) in {time.perf_counter() - run_start:.3f}s")
    return results

def compare_pair(image: PathLike, reference: PathLike, config: Optional[Config] = None) -> float:
    """RMSE between two image files."""
    config = config or get_config()
    for path in (image, reference):
        detect_format(path)
    first = load_luminance(image, config)
    second = load_luminance(reference, config)
    _check_dimensions([first], second)
    return rmse(first.field, second.field)

def _format_value(value: float, precision: int) -> str:
    return f"{value:.{precision}g}"

def format_report(results: Sequence[ComparisonResult], precision: int = MAX_DIGITS10) -> List[str]:
    """
    Report lines: every RMSE first, then every maxDiff (when computed).

    Args:
        results: Comparison results in candidate order.
        precision: Significant digits for floating-point values.
    """
    lines = [f"{result.label} RMSE: {_format_value(result.rmse, precision)}" for result in results]
    lines.extend(
        f"{result.label} maxDiff at: {result.max_diff.index} value: {_format_value(result.max_diff.value, precision)}"
        for result in results if result.max_diff is not None
    )
    return lines

def write_report(results: Sequence[ComparisonResult], stream: IO[str],
                 precision: int = MAX_DIGITS10) -> None:
    """Write the report to `stream`, one line per entry."""
    for line in format_report(results, precision):
        stream.write(line + "\n")
    stream.flush()
