"""Tests for the SceneManager class and the demo scenes.

This module tests:
- Surface colors and primitives with material IDs
- Light slots, absent lights included
- The massive body
- Dictionary and JSON serialization
- Demo scene construction
"""

import json

import numpy as np
import pytest


class TestSceneManagerPrimitives:
    def test_new_scene_is_empty(self):
        from src.lensing.scene.manager import SceneManager

        scene = SceneManager()
        assert scene.get_primitive_count() == 0
        assert scene.get_light_count() == 0
        assert scene.massive_body is None

    def test_colored_primitives(self):
        from src.lensing.scene.manager import SceneManager

        scene = SceneManager()
        sphere_idx, red = scene.add_colored_sphere((0.0, 0.0, 5.0), 1.0, (1.0, 0.0, 0.0))
        quad_idx, gray = scene.add_colored_quad(
            (-1.0, -1.0, 3.0), (2.0, 0.0, 0.0), (0.0, 2.0, 0.0), (0.5, 0.5, 0.5)
        )

        assert (sphere_idx, red) == (0, 0)
        assert (quad_idx, gray) == (0, 1)
        assert scene.get_sphere_count() == 1
        assert scene.get_quad_count() == 1
        assert scene.get_surface_color_count() == 2
        assert scene.spheres[0].material_id == red

    def test_sphere_without_material(self):
        from src.lensing.materials.surface import NO_MATERIAL
        from src.lensing.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_sphere((0.0, 0.0, 5.0), 1.0)
        assert scene.spheres[0].material_id == NO_MATERIAL

    def test_invalid_material_id_raises(self):
        from src.lensing.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError, match="Invalid material_id"):
            scene.add_sphere((0.0, 0.0, 5.0), 1.0, material_id=3)

    def test_shared_material(self):
        from src.lensing.scene.intersection import query_scene
        from src.lensing.scene.manager import SceneManager

        scene = SceneManager()
        green = scene.add_surface_color((0.0, 1.0, 0.0))
        scene.add_sphere((0.0, 0.0, 5.0), 1.0, green)
        scene.add_sphere((3.0, 0.0, 5.0), 1.0, green)

        hit = query_scene((3.0, 0.0, 0.0), (0.0, 0.0, 1.0), 100.0)
        assert hit is not None
        assert np.allclose(hit.base_color, (0.0, 1.0, 0.0))

    def test_clear_removes_everything(self):
        from src.lensing.core.lensing import MassiveBody, is_body_enabled
        from src.lensing.scene.lights import PointLight, get_light_count
        from src.lensing.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_colored_sphere((0.0, 0.0, 5.0), 1.0, (1.0, 0.0, 0.0))
        scene.add_light(PointLight(position=(0.0, 5.0, 0.0)))
        scene.set_massive_body(MassiveBody(position=(0.0, 0.0, 10.0)))

        scene.clear()

        assert scene.get_primitive_count() == 0
        assert scene.get_surface_color_count() == 0
        assert get_light_count() == 0
        assert not is_body_enabled()
        assert scene.spheres == [] and scene.lights == []


class TestSceneManagerLightsAndBody:
    def test_absent_light_keeps_slot(self):
        from src.lensing.scene.lights import PointLight, get_light_count
        from src.lensing.scene.manager import SceneManager

        scene = SceneManager()
        assert scene.add_light(None) == 0
        assert scene.add_light(PointLight(position=(0.0, 5.0, 0.0))) == 1

        assert scene.get_light_count() == 2
        assert get_light_count() == 2
        assert scene.lights[0] is None

    def test_set_and_disable_body(self):
        from src.lensing.core.lensing import MassiveBody, get_massive_body, is_body_enabled
        from src.lensing.scene.manager import SceneManager

        scene = SceneManager()
        scene.set_massive_body(MassiveBody(position=(1.0, 2.0, 3.0), pull_strength=0.5))
        assert is_body_enabled()
        assert get_massive_body().pull_strength == 0.5

        scene.set_massive_body(None)
        assert not is_body_enabled()
        assert scene.massive_body is None


class TestSceneSerialization:
    def _build(self):
        from src.lensing.core.lensing import MassiveBody
        from src.lensing.scene.lights import PointLight
        from src.lensing.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_colored_sphere((0.0, 0.0, 5.0), 1.0, (1.0, 0.0, 0.0))
        scene.add_quad((-1.0, -1.0, 8.0), (2.0, 0.0, 0.0), (0.0, 2.0, 0.0))
        scene.add_light(None)
        scene.add_light(PointLight(position=(0.0, 5.0, 5.0), color=(1.0, 0.9, 0.8), intensity=0.7))
        scene.set_massive_body(MassiveBody(position=(0.0, 0.0, 10.0), angle_threshold=15.0))
        return scene

    def test_to_dict_contents(self):
        data = self._build().to_dict()

        assert data["surface_colors"] == [[1.0, 0.0, 0.0]]
        assert data["spheres"][0]["material_id"] == 0
        assert data["quads"][0]["material_id"] == -1
        assert data["lights"][0] is None
        assert data["lights"][1]["intensity"] == 0.7
        assert data["massive_body"]["angle_threshold"] == 15.0

    def test_dict_reload_restores_scene(self):
        from src.lensing.core.lensing import get_massive_body
        from src.lensing.scene.manager import SceneManager

        data = self._build().to_dict()
        scene = SceneManager()
        scene.from_dict(data)

        assert scene.to_dict() == data
        assert scene.get_sphere_count() == 1
        assert scene.get_quad_count() == 1
        assert get_massive_body().angle_threshold == pytest.approx(15.0)

    def test_unknown_keys_rejected(self):
        from src.lensing.scene.manager import SceneManager

        with pytest.raises(ValueError, match="Unknown scene keys"):
            SceneManager().from_dict({"spheres": [], "cameras": []})

    def test_light_without_position_rejected(self):
        from src.lensing.scene.manager import SceneManager

        with pytest.raises(ValueError, match="position"):
            SceneManager().from_dict({"lights": [{"intensity": 0.5}]})

    def test_body_without_position_rejected(self):
        from src.lensing.scene.manager import SceneManager

        with pytest.raises(ValueError, match="position"):
            SceneManager().from_dict({"massive_body": {"pull_strength": 2.0}})

    def test_json_file(self, tmp_path, caplog):
        from src.lensing.scene.manager import SceneManager

        original = self._build()
        path = original.save_json(tmp_path / "scene.json")
        assert json.loads(path.read_text())["spheres"][0]["radius"] == 1.0

        scene = SceneManager()
        with caplog.at_level("INFO", logger="src.lensing.scene.manager"):
            scene.load_json(path)

        assert scene.to_dict() == original.to_dict()
        assert "1 spheres, 1 quads, 2 lights" in caplog.text

    def test_missing_body_stays_disabled(self):
        from src.lensing.core.lensing import is_body_enabled
        from src.lensing.scene.manager import SceneManager

        scene = SceneManager()
        scene.from_dict({"spheres": [{"center": [0, 0, 5], "radius": 1.0}]})

        assert not is_body_enabled()
        assert scene.get_sphere_count() == 1


class TestDemoScenes:
    def test_lensing_scene(self):
        from src.lensing.scene.demo_scenes import LensingSceneParams, create_lensing_scene

        scene, camera = create_lensing_scene()

        assert scene.get_quad_count() == 2
        # Three colored spheres plus the body marker
        assert scene.get_sphere_count() == 4
        assert scene.get_light_count() == 2
        assert scene.massive_body.position == LensingSceneParams().body_position
        assert camera.lookat == scene.massive_body.position

    def test_lensing_scene_without_marker(self):
        from src.lensing.scene.demo_scenes import LensingSceneParams, create_lensing_scene

        params = LensingSceneParams(show_body=False, pull_strength=2.0, angle_threshold=20.0)
        scene, _ = create_lensing_scene(params)

        assert scene.get_sphere_count() == 3
        assert scene.massive_body.pull_strength == 2.0
        assert scene.massive_body.angle_threshold == 20.0

    def test_single_sphere_scene(self):
        from src.lensing.scene.demo_scenes import create_single_sphere_scene

        scene, camera = create_single_sphere_scene()

        assert scene.get_sphere_count() == 1
        assert scene.get_light_count() == 1
        assert scene.massive_body is None
        assert camera.vfov == 90.0
