"""
Stereo Rig Calibration
=======================

Immutable calibration of a rectified stereo rig: the two scalars the
disparity-to-depth conversion needs.

Calibration file format (YAML)::

    baseline_meters: 0.5372
    focal_length_px: 721.5377
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Self

import numpy as np
import yaml

if TYPE_CHECKING:
    import numpy.typing as npt


__all__ = [
    "StereoCalibration",
]


@dataclass(frozen=True, slots=True)
class StereoCalibration:
    """
    Calibration parameters of a stereo rig, such as the one used to
    record the KITTI dataset.

    Attributes:
        baseline_meters: Distance between the two camera centers
        focal_length_px: Focal length of the rectified cameras in pixels

    Example:
        >>> calib = StereoCalibration(baseline_meters=0.5, focal_length_px=700.0)
        >>> calib.depth_factor
        350.0
    """

    baseline_meters: float
    focal_length_px: float

    def __post_init__(self) -> None:
        """Validate that both parameters are finite and positive."""
        for name in ("baseline_meters", "focal_length_px"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be finite and positive: {value}")
            object.__setattr__(self, name, float(value))

    @property
    def depth_factor(self) -> float:
        """baseline * focal, the numerator of the depth conversion."""
        return self.baseline_meters * self.focal_length_px

    def scaled(self, factor: float) -> StereoCalibration:
        """Calibration for images resized by ``factor``."""
        if factor <= 0:
            raise ValueError(f"Scale factor must be positive: {factor}")
        return StereoCalibration(
            baseline_meters=self.baseline_meters,
            focal_length_px=self.focal_length_px * factor,
        )

    @classmethod
    def from_projection(cls, projection: npt.ArrayLike) -> Self:
        """
        Build calibration from the right camera's rectified projection matrix.

        For a rectified rig ``P = K [I | -B*x]``, so ``P[0, 3] = -f * B``.

        Args:
            projection: 3x4 projection matrix of the right camera

        Returns:
            StereoCalibration instance

        Raises:
            ValueError: If the matrix is not 3x4
        """
        P = np.asarray(projection, dtype=np.float64)
        if P.shape != (3, 4):
            raise ValueError(f"Projection matrix must be 3x4, got {P.shape}")

        focal = float(P[0, 0])
        if focal == 0:
            raise ValueError("focal_length_px must be finite and positive: 0.0")
        return cls(baseline_meters=-float(P[0, 3]) / focal, focal_length_px=focal)

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "baseline_meters": self.baseline_meters,
            "focal_length_px": self.focal_length_px,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """
        Create calibration from dictionary.

        Raises:
            ValueError: If a required key is missing
        """
        missing = [k for k in ("baseline_meters", "focal_length_px") if k not in data]
        if missing:
            raise ValueError(f"Calibration is missing keys: {', '.join(missing)}")
        return cls(
            baseline_meters=float(data["baseline_meters"]),
            focal_length_px=float(data["focal_length_px"]),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """
        Load calibration from a YAML file.

        Args:
            path: Path to YAML calibration file

        Returns:
            StereoCalibration instance

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file format is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Calibration file not found: {path}")

        with open(path, "r") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Invalid calibration file format: {path}")

        return cls.from_dict(data)

    def save_yaml(self, path: str | Path) -> None:
        """Save calibration to a YAML file (creates parent dirs)."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def __str__(self) -> str:
        return f"B={self.baseline_meters:.4f}m f={self.focal_length_px:.1f}px"
