"""
Stereo Depth Errors
====================

Exception hierarchy for fatal depth computation failures.

Per-pixel invalidity is never an error: out-of-range or non-finite
depth values are encoded in the output with the invalid sentinel.
"""

from __future__ import annotations


__all__ = [
    "StereoDepthError",
    "UnsupportedFormatError",
    "DimensionMismatchError",
    "EstimatorExhaustedError",
]


class StereoDepthError(Exception):
    """Base class for all stereo_depth errors."""


class UnsupportedFormatError(StereoDepthError, TypeError):
    """Disparity field has an element type the builder cannot convert."""

    def __init__(self, dtype: object, supported: tuple[str, ...] = ()) -> None:
        self.dtype = dtype
        self.supported = supported
        message = f"Unsupported data type for disparity map [{dtype}]."
        if supported:
            message += f" Supported are {', '.join(supported)}."
        super().__init__(message)


class DimensionMismatchError(StereoDepthError, ValueError):
    """Two buffers that must share spatial dimensions do not."""

    def __init__(
        self,
        expected: tuple[int, ...],
        actual: tuple[int, ...],
        what: str = "buffer",
    ) -> None:
        self.expected = tuple(expected)
        self.actual = tuple(actual)
        super().__init__(
            f"{what} has shape {self.actual}, expected {self.expected}"
        )


class EstimatorExhaustedError(StereoDepthError, IndexError):
    """A replaying estimator has no more frames to return."""
