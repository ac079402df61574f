"""
Unit tests for disparity estimator module.
"""

import numpy as np
import pytest

from stereo_depth import (
    INVALID_DEPTH,
    DepthProvider,
    DisparityEstimator,
    EstimatorExhaustedError,
    PrecomputedEstimator,
    QualityPreset,
    SGBMDisparityEstimator,
    SGBMParams,
    StereoCalibration,
)


def textured_pair(
    disparity: int, height: int = 120, width: int = 320, seed: int = 0
) -> tuple[np.ndarray, np.ndarray]:
    """Random texture pair where every pixel has the same disparity."""
    rng = np.random.default_rng(seed)
    coarse = rng.integers(0, 256, (height // 2, width // 2), dtype=np.uint8)
    left = np.kron(coarse, np.ones((2, 2), dtype=np.uint8))
    # A point at x in the left image is at x - disparity in the right one
    right = np.roll(left, -disparity, axis=1)
    return left, right


class TestProtocol:
    """Tests for DisparityEstimator protocol conformance."""

    def test_sgbm_is_estimator(self) -> None:
        assert isinstance(SGBMDisparityEstimator(), DisparityEstimator)

    def test_precomputed_is_estimator(self) -> None:
        assert isinstance(PrecomputedEstimator([]), DisparityEstimator)

    def test_plain_object_is_not_estimator(self) -> None:
        assert not isinstance(object(), DisparityEstimator)


class TestSGBMDisparityEstimator:
    """Tests for SGBMDisparityEstimator class."""

    @pytest.fixture
    def estimator(self) -> SGBMDisparityEstimator:
        return SGBMDisparityEstimator(SGBMParams(num_disparities=64, block_size=5))

    def test_name(self, estimator: SGBMDisparityEstimator) -> None:
        assert estimator.name == "sgbm"

    def test_params(self) -> None:
        params = SGBMParams.for_preset(QualityPreset.FAST)
        assert SGBMDisparityEstimator(params).params == params

    def test_invalid_params(self) -> None:
        with pytest.raises(ValueError, match="divisible by 16"):
            SGBMDisparityEstimator(SGBMParams(num_disparities=40))

    def test_output_shape_and_type(self, estimator: SGBMDisparityEstimator) -> None:
        left = np.random.randint(0, 255, (96, 128, 3), dtype=np.uint8)
        right = left.copy()

        disparity = estimator.compute_disparity(left, right)

        assert disparity.shape == (96, 128)
        assert disparity.dtype == np.float32

    def test_single_channel_input(self, estimator: SGBMDisparityEstimator) -> None:
        left = np.random.randint(0, 255, (96, 128, 1), dtype=np.uint8)

        disparity = estimator.compute_disparity(left, left.copy())

        assert disparity.shape == (96, 128)

    def test_recovers_shift(self, estimator: SGBMDisparityEstimator) -> None:
        left, right = textured_pair(20)

        disparity = estimator.compute_disparity(left, right)

        # Skip the left border the matcher cannot search and the wrapped edge
        center = disparity[20:-20, 100:-40]
        assert np.median(center) == pytest.approx(20.0, abs=0.5)

    def test_depth_end_to_end(self, estimator: SGBMDisparityEstimator) -> None:
        calib = StereoCalibration(baseline_meters=0.54, focal_length_px=720.0)
        provider = DepthProvider(estimator)
        left, right = textured_pair(50)

        depth = provider.depth_from_stereo(left, right, calib)

        assert depth.shape == left.shape
        assert depth.dtype == np.int16
        center = depth[20:-20, 100:-60]
        valid = center[center != INVALID_DEPTH]
        assert valid.size > 0.5 * center.size
        assert np.median(valid) == pytest.approx(7776, rel=0.02)
        # Left border has no match: marked invalid rather than failing
        assert np.all(depth[:, :32] == INVALID_DEPTH)


class TestPrecomputedEstimator:
    """Tests for PrecomputedEstimator class."""

    def test_replays_in_order(self) -> None:
        frames = [np.full((4, 4), v, dtype=np.float32) for v in (10.0, 20.0)]
        estimator = PrecomputedEstimator(frames)
        image = np.zeros((4, 4), dtype=np.uint8)

        assert estimator.remaining == 2
        assert np.all(estimator.compute_disparity(image, image) == 10.0)
        assert np.all(estimator.compute_disparity(image, image) == 20.0)
        assert estimator.remaining == 0

    def test_returns_copies(self) -> None:
        frame = np.full((2, 2), 5.0, dtype=np.float32)
        estimator = PrecomputedEstimator([frame])
        image = np.zeros((2, 2), dtype=np.uint8)

        out = estimator.compute_disparity(image, image)
        out[:] = 0.0

        assert np.all(frame == 5.0)

    def test_exhausted(self) -> None:
        estimator = PrecomputedEstimator([], name="dispnet")
        image = np.zeros((2, 2), dtype=np.uint8)

        with pytest.raises(EstimatorExhaustedError, match="dispnet"):
            estimator.compute_disparity(image, image)

    def test_exhausted_is_index_error(self) -> None:
        estimator = PrecomputedEstimator([])
        image = np.zeros((2, 2), dtype=np.uint8)

        with pytest.raises(IndexError):
            estimator.compute_disparity(image, image)

    def test_custom_name(self) -> None:
        assert PrecomputedEstimator([], name="dispnet").name == "dispnet"

    def test_depth_passthrough(self) -> None:
        depth_in = np.array([[1200, 40], [INVALID_DEPTH, 9000]], dtype=np.int16)
        provider = DepthProvider(PrecomputedEstimator([depth_in]), input_is_depth=True)
        image = np.zeros((2, 2, 3), dtype=np.uint8)
        calib = StereoCalibration(baseline_meters=0.54, focal_length_px=720.0)

        depth = provider.depth_from_stereo(image, image, calib)

        np.testing.assert_array_equal(depth, depth_in)
