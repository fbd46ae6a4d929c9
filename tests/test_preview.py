"""Tests for the preview module.

This module tests the preview/display, preview/export and preview/sinks
functionality including:
- Tone mapping functions (Reinhard, exposure)
- Gamma correction
- Float to 8-bit conversion and PNG export
- The in-memory debug line recorder

Note: Tests never open a window; the processing functions are tested
directly.
"""

import numpy as np
import pytest
from PIL import Image as PILImage


class TestToneMapping:
    """Reinhard and exposure tone mapping."""

    def test_reinhard_formula(self):
        from src.lensing.preview.display import tone_map_reinhard

        image = np.array([[[0.0, 1.0, 3.0]]], dtype=np.float32)
        result = tone_map_reinhard(image)

        assert np.allclose(result, [[[0.0, 0.5, 0.75]]])

    def test_reinhard_clamps_negative_input(self):
        from src.lensing.preview.display import tone_map_reinhard

        image = np.full((2, 2, 3), -1.0, dtype=np.float32)
        assert np.allclose(tone_map_reinhard(image), 0.0)

    def test_exposure_formula(self):
        from src.lensing.preview.display import tone_map_exposure

        image = np.full((2, 2, 3), 1.0, dtype=np.float32)
        result = tone_map_exposure(image, exposure=2.0)

        assert np.allclose(result, 1.0 - np.exp(-2.0))

    def test_exposure_higher_value_brighter(self):
        from src.lensing.preview.display import tone_map_exposure

        image = np.full((2, 2, 3), 0.5, dtype=np.float32)
        assert np.all(tone_map_exposure(image, 2.0) > tone_map_exposure(image, 1.0))


class TestApplyGamma:
    def test_gamma_one_is_identity(self):
        from src.lensing.preview.display import apply_gamma

        image = np.random.default_rng(0).random((4, 4, 3)).astype(np.float32)
        assert np.array_equal(apply_gamma(image, 1.0), image)

    def test_gamma_brightens_midtones(self):
        from src.lensing.preview.display import apply_gamma

        image = np.full((2, 2, 3), 0.25, dtype=np.float32)
        result = apply_gamma(image, 2.0)

        assert np.allclose(result, 0.5)

    def test_gamma_keeps_black_and_white(self):
        from src.lensing.preview.display import apply_gamma

        image = np.array([[[0.0, 1.0, 0.0]]], dtype=np.float32)
        assert np.allclose(apply_gamma(image, 2.2), image)

    def test_non_positive_gamma_raises(self):
        from src.lensing.preview.display import apply_gamma

        with pytest.raises(ValueError, match="Gamma"):
            apply_gamma(np.zeros((1, 1, 3), dtype=np.float32), 0.0)


class TestProcessImageForDisplay:
    def test_defaults_only_clamp(self):
        from src.lensing.preview.display import process_image_for_display

        image = np.array([[[-0.5, 0.3, 1.7]]], dtype=np.float32)
        result = process_image_for_display(image)

        assert np.allclose(result, [[[0.0, 0.3, 1.0]]])
        assert result.dtype == np.float32

    def test_does_not_modify_input(self):
        from src.lensing.preview.display import process_image_for_display

        image = np.full((2, 2, 3), 4.0, dtype=np.float32)
        process_image_for_display(image, tone_map="reinhard", gamma=2.2)

        assert np.all(image == 4.0)

    def test_unknown_tone_map_raises(self):
        from src.lensing.preview.display import process_image_for_display

        with pytest.raises(ValueError, match="tone mapping"):
            process_image_for_display(np.zeros((1, 1, 3), dtype=np.float32), tone_map="filmic")


class TestImageToUint8:
    def test_rounds_to_nearest(self):
        from src.lensing.preview.export import image_to_uint8

        image = np.array([[[0.0, 0.5, 1.0]]], dtype=np.float32)
        result = image_to_uint8(image)

        assert result.dtype == np.uint8
        assert result.tolist() == [[[0, 128, 255]]]

    def test_out_of_range_values_saturate(self):
        from src.lensing.preview.export import image_to_uint8

        image = np.array([[[-3.0, 2.0, 0.2]]], dtype=np.float32)
        assert image_to_uint8(image)[0, 0, :2].tolist() == [0, 255]


class TestSavePngFromArray:
    def test_writes_rgb_png(self, tmp_path):
        from src.lensing.preview.export import save_png_from_array

        image = np.zeros((5, 7, 3), dtype=np.float32)
        image[0, 0] = (1.0, 0.0, 0.0)
        path = save_png_from_array(image, tmp_path / "out.png")

        with PILImage.open(path) as img:
            assert img.size == (7, 5)
            assert img.mode == "RGB"
            # Row 0 of the array is the top row of the file
            assert img.getpixel((0, 0)) == (255, 0, 0)
            assert img.getpixel((6, 4)) == (0, 0, 0)

    def test_accepts_string_path(self, tmp_path):
        from src.lensing.preview.export import save_png_from_array

        path = save_png_from_array(
            np.ones((2, 2, 3), dtype=np.float32), str(tmp_path / "white.png")
        )
        assert path.exists()

    def test_rejects_non_rgb_image(self, tmp_path):
        from src.lensing.preview.export import save_png_from_array

        with pytest.raises(ValueError, match="H, W, 3"):
            save_png_from_array(np.zeros((4, 4), dtype=np.float32), tmp_path / "bad.png")


class TestSavePng:
    def test_save_png_from_renderer(self, tmp_path):
        from src.lensing.camera.pinhole import setup_camera
        from src.lensing.core.renderer import LensingRenderer, RenderSettings
        from src.lensing.preview.export import save_png
        from src.lensing.scene.demo_scenes import create_single_sphere_scene

        _, camera = create_single_sphere_scene()
        setup_camera(camera)
        renderer = LensingRenderer(RenderSettings(width=21, height=21))
        renderer.render()

        path = save_png(renderer, tmp_path / "sphere.png", tone_map="reinhard", gamma=2.2)

        with PILImage.open(path) as img:
            assert img.size == (21, 21)
            # The dead center faces away from the light above; the upper
            # half of the sphere is lit
            assert img.getpixel((10, 10)) == (0, 0, 0)
            r, g, b = img.getpixel((10, 8))
            assert r > 0
            assert g == 0 and b == 0


class TestLineRecorder:
    def test_records_in_order(self):
        from src.lensing.preview.sinks import LineRecorder

        recorder = LineRecorder()
        recorder.draw_line((0, 0, 0), (1, 0, 0), (1.0, 1.0, 1.0))
        recorder.draw_line((1, 0, 0), (1, 1, 0), (1, 0, 0))

        assert len(recorder) == 2
        first, second = list(recorder)
        assert np.allclose(first.end, second.start)
        assert second.color == (1.0, 0.0, 0.0)

    def test_filter_by_color_and_clear(self):
        from src.lensing.preview.sinks import LineRecorder

        recorder = LineRecorder()
        recorder.draw_line((0, 0, 0), (1, 0, 0), (1.0, 1.0, 1.0))
        recorder.draw_line((0, 0, 0), (0, 1, 0), (1.0, 0.0, 0.0))
        recorder.draw_line((0, 0, 0), (0, 0, 1), (1.0, 0.0, 0.0))

        assert len(recorder.segments_with_color((1.0, 0.0, 0.0))) == 2
        recorder.clear()
        assert len(recorder) == 0


class TestModuleExports:
    def test_preview_exports(self):
        import src.lensing.preview as preview

        for name in (
            "show_preview",
            "show_debug_lines",
            "process_image_for_display",
            "save_png",
            "save_png_from_array",
            "image_to_uint8",
            "LineRecorder",
        ):
            assert name in preview.__all__
            assert callable(getattr(preview, name))
