"""
Stereo Depth
============

Metric depth maps from rectified stereo pairs, for dense mapping.

Quick Start::

    from stereo_depth import DepthProvider, SGBMDisparityEstimator, StereoCalibration

    calibration = StereoCalibration(baseline_meters=0.54, focal_length_px=721.5)
    provider = DepthProvider(SGBMDisparityEstimator())
    depth_mm = provider.depth_from_stereo(left, right, calibration)
    valid = depth_mm != INVALID_DEPTH

Precomputed Depth (e.g. from an offline network)::

    from stereo_depth import DepthProvider, PrecomputedEstimator

    provider = DepthProvider(PrecomputedEstimator(depth_maps), input_is_depth=True)
    depth_mm = provider.depth_from_stereo(left, right, calibration)

Modules:
    calibration: Stereo rig calibration
    config: Depth constants, valid range and SGBM parameters
    estimator: Disparity estimator interface and reference estimators
    depth: Disparity to depth conversion and depth map construction
    errors: Exception hierarchy
    log: Console logging setup
"""

__version__ = "1.0.0"

# Configuration
from .config import (
    METERS_TO_MILLIMETERS,
    MIN_DEPTH_MM,
    MAX_DEPTH_MM,
    INVALID_DEPTH,
    DepthRange,
    QualityPreset,
    SGBMParams,
)

# Calibration
from .calibration import StereoCalibration

# Errors
from .errors import (
    StereoDepthError,
    UnsupportedFormatError,
    DimensionMismatchError,
    EstimatorExhaustedError,
)

# Estimators
from .estimator import (
    DisparityEstimator,
    SGBMDisparityEstimator,
    PrecomputedEstimator,
)

# Depth
from .depth import (
    DisparityFormat,
    depth_from_disparity,
    depth_from_disparity_map,
    DepthStats,
    DepthProvider,
)

# Logging
from .log import setup_logger

__all__ = [
    # Version
    "__version__",
    # Config
    "METERS_TO_MILLIMETERS",
    "MIN_DEPTH_MM",
    "MAX_DEPTH_MM",
    "INVALID_DEPTH",
    "DepthRange",
    "QualityPreset",
    "SGBMParams",
    # Calibration
    "StereoCalibration",
    # Errors
    "StereoDepthError",
    "UnsupportedFormatError",
    "DimensionMismatchError",
    "EstimatorExhaustedError",
    # Estimators
    "DisparityEstimator",
    "SGBMDisparityEstimator",
    "PrecomputedEstimator",
    # Depth
    "DisparityFormat",
    "depth_from_disparity",
    "depth_from_disparity_map",
    "DepthStats",
    "DepthProvider",
    # Logging
    "setup_logger",
]
