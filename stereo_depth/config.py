"""
Stereo Depth Configuration
===========================

Constants and immutable parameter bundles for depth map construction.
Depth values are in millimeters (mm) unless otherwise specified.

This module provides:
- Depth constants: unit conversion, default valid range, invalid sentinel
- DepthRange: Half-open range of depths kept in the output
- QualityPreset: Predefined quality/speed tradeoffs
- SGBMParams: Stereo matching algorithm parameters
"""

from __future__ import annotations

from enum import Enum, auto
from typing import NamedTuple

import cv2
import numpy as np


__all__ = [
    "METERS_TO_MILLIMETERS",
    "MIN_DEPTH_MM",
    "MAX_DEPTH_MM",
    "INVALID_DEPTH",
    "DepthRange",
    "QualityPreset",
    "SGBMParams",
]


METERS_TO_MILLIMETERS = 1000.0

# Too large a max depth gives noisy maps; too small only keeps the road
# and a couple of meters of sidewalk.
MIN_DEPTH_MM = 500
MAX_DEPTH_MM = 15000

# Marks "no reliable depth at this pixel" in int16 depth maps
INVALID_DEPTH = int(np.iinfo(np.int16).max)


class DepthRange(NamedTuple):
    """Range of depths kept in a depth map.

    The range is half-open: a depth ``d`` (mm) is kept when
    ``min_mm <= d < max_mm``, anything else becomes INVALID_DEPTH.
    """

    min_mm: int = MIN_DEPTH_MM
    max_mm: int = MAX_DEPTH_MM

    def validate(self) -> DepthRange:
        """Check the range fits int16 output, returning self."""
        if self.min_mm < 0:
            raise ValueError(f"min_mm must be non-negative: {self.min_mm}")
        if self.min_mm >= self.max_mm:
            raise ValueError(
                f"min_mm must be below max_mm: {self.min_mm} >= {self.max_mm}"
            )
        if self.max_mm >= INVALID_DEPTH:
            raise ValueError(
                f"max_mm must be below the invalid sentinel {INVALID_DEPTH}: {self.max_mm}"
            )
        return self

    def contains(self, depth_mm: float) -> bool:
        """Whether a single depth value would be kept."""
        return self.min_mm <= depth_mm < self.max_mm

    def __str__(self) -> str:
        return f"[{self.min_mm}, {self.max_mm})mm"


class QualityPreset(Enum):
    """Predefined quality/performance tradeoffs."""

    FAST = auto()  # Low latency, lower accuracy
    BALANCED = auto()  # Good tradeoff for most use cases
    QUALITY = auto()  # Best accuracy, higher latency


class SGBMParams(NamedTuple):
    """Semi-Global Block Matching algorithm parameters.

    These control the quality and speed of the reference disparity
    estimator. Use presets via SGBMParams.for_preset() for common
    configurations.
    """

    min_disparity: int = 0
    num_disparities: int = 64  # Must be divisible by 16
    block_size: int = 11  # Must be odd, >= 5
    p1: int | None = None  # Auto-calculate if None
    p2: int | None = None  # Auto-calculate if None
    disp12_max_diff: int = 1
    pre_filter_cap: int = 63
    uniqueness_ratio: int = 10
    speckle_window_size: int = 100
    speckle_range: int = 32
    mode: int = cv2.STEREO_SGBM_MODE_SGBM_3WAY

    @classmethod
    def for_preset(cls, preset: QualityPreset) -> SGBMParams:
        """Get SGBM parameters optimized for a quality preset."""
        match preset:
            case QualityPreset.FAST:
                return cls(
                    num_disparities=48,
                    block_size=5,
                    uniqueness_ratio=5,
                    speckle_window_size=50,
                    mode=cv2.STEREO_SGBM_MODE_SGBM,
                )
            case QualityPreset.QUALITY:
                return cls(
                    num_disparities=128,
                    block_size=11,
                    uniqueness_ratio=15,
                    speckle_window_size=200,
                    speckle_range=16,
                    mode=cv2.STEREO_SGBM_MODE_HH4,
                )
            case _:  # BALANCED
                return cls()  # Defaults are balanced

    def validate(self) -> SGBMParams:
        """Check matcher constraints, returning self."""
        if self.num_disparities <= 0 or self.num_disparities % 16 != 0:
            raise ValueError("num_disparities must be divisible by 16")
        if self.block_size < 5 or self.block_size % 2 == 0:
            raise ValueError("block_size must be odd and >= 5")
        return self

    def get_p1(self) -> int:
        """Get P1 penalty, auto-calculating if not set."""
        if self.p1 is not None:
            return self.p1
        return 8 * 3 * self.block_size**2

    def get_p2(self) -> int:
        """Get P2 penalty, auto-calculating if not set."""
        if self.p2 is not None:
            return self.p2
        return 32 * 3 * self.block_size**2
