"""
Stereo Depth Provider
======================

Depth map computation from stereo image pairs, through an intermediate
disparity field produced by a pluggable estimator.

Theory:
    depth = (focal_length × baseline) / disparity

Where disparity is the horizontal pixel difference between matching
points in left/right rectified images.

Output depth maps are int16 millimeters. Pixels with no reliable depth
(zero or negative disparity, non-finite or out-of-range depth) hold
INVALID_DEPTH.

This module provides:
- DisparityFormat: Supported disparity element types
- depth_from_disparity: Closed-form per-pixel conversion to meters
- depth_from_disparity_map: Vectorized conversion with range clipping
- DepthStats: Statistics over the valid pixels of a depth map
- DepthProvider: Stereo pair -> disparity -> depth orchestration
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from .config import INVALID_DEPTH, METERS_TO_MILLIMETERS, DepthRange
from .errors import DimensionMismatchError, UnsupportedFormatError

if TYPE_CHECKING:
    import numpy.typing as npt

    from .calibration import StereoCalibration
    from .estimator import DisparityEstimator


__all__ = [
    "DisparityFormat",
    "depth_from_disparity",
    "depth_from_disparity_map",
    "DepthStats",
    "DepthProvider",
]

logger = logging.getLogger(__name__)


class DisparityFormat(Enum):
    """Element types a disparity field may use."""

    FLOAT32 = "float32"  # Sub-pixel disparity
    INT16 = "int16"

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(self.value)

    @classmethod
    def from_dtype(cls, dtype: npt.DTypeLike) -> DisparityFormat:
        """
        Resolve the format of a disparity field.

        Raises:
            UnsupportedFormatError: If the element type is not supported
        """
        name = np.dtype(dtype).name
        for fmt in cls:
            if fmt.value == name:
                return fmt
        raise UnsupportedFormatError(name, tuple(fmt.value for fmt in cls))


def depth_from_disparity(
    disparity_px: npt.ArrayLike,
    calibration: StereoCalibration,
) -> np.float64 | npt.NDArray[np.float64]:
    """
    Convert disparity to depth in meters.

    Computes in float64 whatever the storage type of the disparity.
    Zero disparity gives an infinite depth and negative disparity a
    negative one; neither raises.

    Args:
        disparity_px: Disparity in pixels (scalar or array)
        calibration: Stereo rig calibration

    Returns:
        Depth in meters, same shape as the input
    """
    disparity = np.asarray(disparity_px, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        depth = calibration.depth_factor / disparity
    return depth[()]


def depth_from_disparity_map(
    disparity: npt.NDArray,
    calibration: StereoCalibration,
    depth_range: DepthRange = DepthRange(),
) -> npt.NDArray[np.int16]:
    """
    Compute an int16 depth map from a disparity map.

    Each pixel is converted to meters, scaled to millimeters and truncated
    toward zero. Depths that are non-finite or fall outside
    ``[depth_range.min_mm, depth_range.max_mm)`` become INVALID_DEPTH.

    Args:
        disparity: 2D float32 or int16 disparity map in pixels
        calibration: Stereo rig calibration
        depth_range: Depths to keep

    Returns:
        New int16 depth map in millimeters, same shape as the disparity

    Raises:
        UnsupportedFormatError: If the disparity element type is not supported
    """
    DisparityFormat.from_dtype(disparity.dtype)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        depth_mm = np.trunc(
            depth_from_disparity(disparity, calibration) * METERS_TO_MILLIMETERS
        )
        valid = (
            np.isfinite(depth_mm)
            & (depth_mm >= depth_range.min_mm)
            & (depth_mm < depth_range.max_mm)
        )

    out_depth = np.full(disparity.shape, INVALID_DEPTH, dtype=np.int16)
    out_depth[valid] = depth_mm[valid].astype(np.int16)
    return out_depth


@dataclass(frozen=True, slots=True)
class DepthStats:
    """Statistics about the valid pixels of an int16 depth map.

    Attributes:
        min_mm: Minimum valid depth
        max_mm: Maximum valid depth
        mean_mm: Mean depth value
        median_mm: Median depth value
        valid_ratio: Fraction of valid pixels (0.0 to 1.0)
    """

    min_mm: float
    max_mm: float
    mean_mm: float
    median_mm: float
    valid_ratio: float

    @classmethod
    def from_depth_map(cls, depth_map: npt.NDArray) -> DepthStats:
        """Compute statistics, skipping INVALID_DEPTH pixels."""
        valid = depth_map[depth_map != INVALID_DEPTH]

        if valid.size == 0:
            return cls(0.0, 0.0, 0.0, 0.0, 0.0)

        return cls(
            min_mm=float(np.min(valid)),
            max_mm=float(np.max(valid)),
            mean_mm=float(np.mean(valid)),
            median_mm=float(np.median(valid)),
            valid_ratio=valid.size / depth_map.size,
        )

    def format_verbose(self) -> str:
        """Format stats as multi-line verbose string."""
        return "\n".join([
            f"  Range: {self.min_mm:.0f} - {self.max_mm:.0f}mm",
            f"  Mean: {self.mean_mm:.0f}mm | Median: {self.median_mm:.0f}mm",
            f"  Valid: {self.valid_ratio*100:.1f}%",
        ])


class DepthProvider:
    """
    Computes depth maps from stereo pairs (stereo -> disparity -> depth).

    Disparity comes from the wrapped estimator. When ``input_is_depth`` is
    set, the estimator output is taken to be an int16 depth map already and
    is returned as-is: no conversion and no range clipping is applied in
    that mode, the estimator is trusted to emit clean depth.

    Instances hold no per-call state, so one provider may serve concurrent
    calls if its estimator can.

    Example:
        >>> provider = DepthProvider(SGBMDisparityEstimator())
        >>> depth = provider.depth_from_stereo(left, right, calibration)
        >>> depth.dtype
        dtype('int16')
    """

    __slots__ = ("_estimator", "_input_is_depth", "_depth_range")

    def __init__(
        self,
        estimator: DisparityEstimator,
        input_is_depth: bool = False,
        depth_range: DepthRange = DepthRange(),
    ) -> None:
        """
        Initialize depth provider.

        Args:
            estimator: Disparity estimation technique
            input_is_depth: Treat estimator output as depth maps and skip
                the depth-from-disparity computation
            depth_range: Depths kept by the conversion

        Raises:
            ValueError: If depth_range is invalid
        """
        self._estimator = estimator
        self._input_is_depth = input_is_depth
        self._depth_range = depth_range.validate()

        if input_is_depth:
            logger.info("Depth provider '%s': estimator output used as depth", self.name)
        else:
            logger.info(
                "Depth provider '%s': keeping depths in %s", self.name, depth_range
            )

    @property
    def name(self) -> str:
        """Name of the wrapped estimation technique."""
        return self._estimator.name

    @property
    def estimator(self) -> DisparityEstimator:
        return self._estimator

    @property
    def input_is_depth(self) -> bool:
        return self._input_is_depth

    @property
    def depth_range(self) -> DepthRange:
        return self._depth_range

    def depth_from_stereo(
        self,
        left: npt.NDArray,
        right: npt.NDArray,
        calibration: StereoCalibration,
    ) -> npt.NDArray[np.int16]:
        """
        Compute a depth map from a stereo image pair.

        Args:
            left: Left rectified image (H, W) or (H, W, C)
            right: Right rectified image, same shape as left
            calibration: Stereo rig calibration

        Returns:
            New (H, W) int16 depth map in millimeters, INVALID_DEPTH where
            no reliable depth exists

        Raises:
            DimensionMismatchError: If the images differ in shape or the
                estimator output does not match their (H, W)
            UnsupportedFormatError: If the disparity element type is not
                float32 or int16
        """
        if left.shape != right.shape:
            logger.error("Stereo pair shape mismatch: %s vs %s", left.shape, right.shape)
            raise DimensionMismatchError(left.shape, right.shape, what="right image")

        start_time = time.perf_counter()
        disparity = self._estimator.compute_disparity(left, right)
        estimate_ms = (time.perf_counter() - start_time) * 1000

        expected = left.shape[:2]
        if disparity.shape != expected:
            logger.error(
                "%s output shape %s does not match input %s",
                self.name, disparity.shape, expected,
            )
            raise DimensionMismatchError(
                expected, disparity.shape, what=f"{self.name} output"
            )

        if self._input_is_depth:
            logger.debug("%s: depth in %.1fms", self.name, estimate_ms)
            return disparity

        try:
            fmt = DisparityFormat.from_dtype(disparity.dtype)
        except UnsupportedFormatError as e:
            logger.error("%s: %s", self.name, e)
            raise

        out_depth = depth_from_disparity_map(disparity, calibration, self._depth_range)

        if logger.isEnabledFor(logging.DEBUG):
            stats = DepthStats.from_depth_map(out_depth)
            logger.debug(
                "%s: %s disparity in %.1fms, total %.1fms\n%s",
                self.name,
                fmt.value,
                estimate_ms,
                (time.perf_counter() - start_time) * 1000,
                stats.format_verbose(),
            )

        return out_depth
