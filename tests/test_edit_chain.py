"""
Tests for edit chains.

Tests cover:
- Chain validation
- Sequential execution
- Error wrapping
- Background submission
- Chain summaries
"""

import concurrent.futures
import unittest

from RT_Libs.ImageEditingLib.adjustment_pipeline import AdjustmentParameters
from RT_Libs.ImageEditingLib.filter_presets import FilterDescriptor, FilterKind, apply_filter
from RT_Libs.ImageEditingLib.image_models import RasterImage
from RT_Libs.ImageEditingLib.transform_ops import TransformParameters
from RT_Libs.PipelineLib.edit_chain import (
    EditChainError,
    EditStep,
    get_chain_summary,
    run_edit_chain,
    submit_edit_chain,
    validate_chain,
)
from RT_Libs.PipelineLib.operator_registry import OperatorRegistry


def _tracking_registry(calls):
    registry = OperatorRegistry()

    def first(image, params):
        calls.append(("first", params))
        return image.with_pixels(image.pixels.resize((image.width * 2, image.height)))

    def second(image, params):
        calls.append(("second", image.size))
        return image

    def broken(image, params):
        raise ValueError("operator exploded")

    registry.register("First", first, param_type=int)
    registry.register("Second", second)
    registry.register("Broken", broken)
    return registry


class TestValidateChain(unittest.TestCase):
    """Test chain validation."""

    def setUp(self):
        self.registry = _tracking_registry([])

    def test_valid_chain(self):
        is_valid, errors = validate_chain(
            [EditStep("First", 1), EditStep("Second", None)], self.registry
        )
        self.assertTrue(is_valid)
        self.assertEqual(errors, [])

    def test_unknown_operator(self):
        is_valid, errors = validate_chain([EditStep("Missing", None)], self.registry)
        self.assertFalse(is_valid)
        self.assertIn("unknown operator", errors[0])

    def test_wrong_param_type(self):
        is_valid, errors = validate_chain([EditStep("First", "one")], self.registry)
        self.assertFalse(is_valid)
        self.assertIn("Step 0", errors[0])

    def test_empty_chain_is_valid(self):
        self.assertEqual(validate_chain([], self.registry), (True, []))


class TestRunEditChain(unittest.TestCase):
    """Test sequential chain execution."""

    def setUp(self):
        self.image = RasterImage.new((8, 6), (50, 60, 70, 255))

    def test_empty_chain_returns_input(self):
        self.assertIs(run_edit_chain(self.image, [], OperatorRegistry()), self.image)

    def test_steps_feed_forward(self):
        calls = []
        registry = _tracking_registry(calls)

        result = run_edit_chain(
            self.image, [EditStep("First", 3), EditStep("Second", None)], registry
        )

        self.assertEqual(result.size, (16, 6))
        self.assertEqual(calls, [("first", 3), ("second", (16, 6))])

    def test_invalid_chain_runs_nothing(self):
        calls = []
        registry = _tracking_registry(calls)

        with self.assertRaises(KeyError):
            run_edit_chain(self.image, [EditStep("First", 1), EditStep("Missing", None)], registry)
        with self.assertRaises(TypeError):
            run_edit_chain(self.image, [EditStep("First", "x")], registry)
        self.assertEqual(calls, [])

    def test_operator_error_is_wrapped(self):
        registry = _tracking_registry([])

        with self.assertRaises(EditChainError) as ctx:
            run_edit_chain(self.image, [EditStep("Second", None), EditStep("Broken", None)], registry)

        self.assertEqual(ctx.exception.step_index, 1)
        self.assertEqual(ctx.exception.operator, "Broken")
        self.assertIsInstance(ctx.exception.__cause__, ValueError)

    def test_default_registry_chain(self):
        steps = [
            EditStep("Adjustments", AdjustmentParameters(exposure=0.3)),
            EditStep("Filter", FilterDescriptor(FilterKind.SEPIA, 0.5)),
            EditStep("Transform", TransformParameters(rotation=90)),
        ]

        result = run_edit_chain(self.image, steps)

        self.assertEqual(result.size, (6, 8))

    def test_chain_matches_direct_calls(self):
        descriptor = FilterDescriptor(FilterKind.MATTE)
        chained = run_edit_chain(self.image, [EditStep("Filter", descriptor)])
        self.assertTrue(chained.pixels_equal(apply_filter(self.image, descriptor)))


class TestSubmitEditChain(unittest.TestCase):
    """Test running chains on an executor."""

    def test_submit_returns_future(self):
        image = RasterImage.new((8, 6), (50, 60, 70, 255))
        steps = [EditStep("Center Crop", 1.0)]

        with concurrent.futures.ThreadPoolExecutor(max_workers=2) as pool:
            future = submit_edit_chain(pool, image, steps)
            result = future.result(timeout=10)

        self.assertEqual(result.size, (6, 6))

    def test_errors_surface_through_future(self):
        image = RasterImage.new((4, 4))
        registry = _tracking_registry([])

        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            future = submit_edit_chain(pool, image, [EditStep("Broken", None)], registry)
            with self.assertRaises(EditChainError):
                future.result(timeout=10)


class TestGetChainSummary(unittest.TestCase):
    """Test summary formatting."""

    def test_summary_format(self):
        summary = get_chain_summary([EditStep("Filter", None), EditStep("Transform", None)])

        self.assertEqual(summary, "Edit Chain: 2 steps\n  0. Filter\n  1. Transform")

    def test_single_step(self):
        self.assertTrue(get_chain_summary([EditStep("Filter", None)]).startswith("Edit Chain: 1 step\n"))


if __name__ == "__main__":
    unittest.main()
