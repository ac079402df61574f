"""
Disparity Estimator Interface
==============================

Protocol-based interface for disparity estimation techniques.
The depth map builder only depends on this capability; concrete
estimators (block matching, learned networks, offline results) are
independent and swappable.

This module provides:
- DisparityEstimator: Protocol defining the estimator capability
- SGBMDisparityEstimator: OpenCV Semi-Global Block Matching estimator
- PrecomputedEstimator: Replays maps computed ahead of time
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Protocol, runtime_checkable

import cv2
import numpy as np

from .config import SGBMParams
from .errors import EstimatorExhaustedError

if TYPE_CHECKING:
    import numpy.typing as npt


__all__ = [
    "DisparityEstimator",
    "SGBMDisparityEstimator",
    "PrecomputedEstimator",
]

logger = logging.getLogger(__name__)


@runtime_checkable
class DisparityEstimator(Protocol):
    """
    Protocol for disparity estimation techniques.

    Implementations must provide:
    - name: Human-readable name of the technique, for diagnostics
    - compute_disparity(): Return a disparity field for a stereo pair

    Example:
        >>> estimator: DisparityEstimator = SGBMDisparityEstimator()
        >>> disparity = estimator.compute_disparity(left, right)
        >>> print(estimator.name, disparity.dtype)
    """

    @property
    def name(self) -> str:
        """Name of the technique being used for disparity estimation."""
        ...

    def compute_disparity(
        self, left: npt.NDArray, right: npt.NDArray
    ) -> npt.NDArray:
        """
        Compute a disparity map from a rectified stereo pair.

        Args:
            left: Left camera image (H, W) or (H, W, C)
            right: Right camera image, same shape as left

        Returns:
            Newly allocated (H, W) array of float32 disparities in pixels,
            or int16 values. Estimators used in depth-passthrough mode
            return int16 depth in millimeters instead.
        """
        ...


def _to_gray(image: npt.NDArray) -> npt.NDArray:
    """Convert BGR or single-channel images to a 2D grayscale array."""
    if image.ndim == 3 and image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    if image.ndim == 3 and image.shape[2] == 1:
        return image[:, :, 0]
    return image


class SGBMDisparityEstimator:
    """
    Disparity estimation using OpenCV's Semi-Global Block Matching.

    Produces float32 sub-pixel disparities. Pixels the matcher could not
    resolve come out negative, which the depth builder marks invalid.

    Example:
        >>> estimator = SGBMDisparityEstimator(SGBMParams.for_preset(QualityPreset.FAST))
        >>> disparity = estimator.compute_disparity(left, right)
    """

    __slots__ = ("_params", "_matcher")

    def __init__(self, params: SGBMParams | None = None) -> None:
        """
        Initialize the SGBM matcher.

        Args:
            params: SGBM parameters (balanced defaults if None)

        Raises:
            ValueError: If the parameters violate matcher constraints
        """
        self._params = (params if params is not None else SGBMParams()).validate()
        self._matcher = self._create_stereo_matcher()
        logger.info(
            "Disparity estimator: %s (%d disparities, block %d)",
            self.name,
            self._params.num_disparities,
            self._params.block_size,
        )

    def _create_stereo_matcher(self) -> cv2.StereoSGBM:
        """Create SGBM stereo matcher from params."""
        sgbm = self._params

        return cv2.StereoSGBM_create(
            minDisparity=sgbm.min_disparity,
            numDisparities=sgbm.num_disparities,
            blockSize=sgbm.block_size,
            P1=sgbm.get_p1(),
            P2=sgbm.get_p2(),
            disp12MaxDiff=sgbm.disp12_max_diff,
            preFilterCap=sgbm.pre_filter_cap,
            uniquenessRatio=sgbm.uniqueness_ratio,
            speckleWindowSize=sgbm.speckle_window_size,
            speckleRange=sgbm.speckle_range,
            mode=sgbm.mode,
        )

    @property
    def name(self) -> str:
        return "sgbm"

    @property
    def params(self) -> SGBMParams:
        """Get SGBM parameters."""
        return self._params

    def compute_disparity(
        self, left: npt.NDArray, right: npt.NDArray
    ) -> npt.NDArray:
        """Compute float32 disparity from an 8-bit stereo pair."""
        left_gray = _to_gray(left)
        right_gray = _to_gray(right)

        # Fixed-point result, scaled by 16
        disparity_fp = self._matcher.compute(left_gray, right_gray)

        return disparity_fp.astype(np.float32) / 16.0


class PrecomputedEstimator:
    """
    Replays disparity (or depth) maps computed ahead of time.

    Useful for learned estimators run offline: each call returns the next
    stored map, ignoring the images. Pair with ``input_is_depth=True`` on
    the builder when the stored maps are already depth in millimeters.
    """

    __slots__ = ("_frames", "_index", "_name")

    def __init__(
        self, frames: Iterable[npt.NDArray], name: str = "precomputed"
    ) -> None:
        self._frames = list(frames)
        self._index = 0
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def remaining(self) -> int:
        """Number of maps not yet returned."""
        return len(self._frames) - self._index

    def compute_disparity(
        self, left: npt.NDArray, right: npt.NDArray
    ) -> npt.NDArray:
        """
        Return a copy of the next stored map.

        Raises:
            EstimatorExhaustedError: If every stored map was already returned
        """
        if self._index >= len(self._frames):
            raise EstimatorExhaustedError(
                f"{self._name}: all {len(self._frames)} maps already used"
            )
        frame = self._frames[self._index]
        self._index += 1
        return np.array(frame, copy=True)
