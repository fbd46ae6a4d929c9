"""Ready-made scenes for the lensing renderer.

Two scenes are provided:

- ``create_lensing_scene``: a floor, a back wall and a few colored spheres
  arranged around a massive body, lit by two point lights. Rays aimed near
  the body bend down toward it, so objects behind it appear displaced.
- ``create_single_sphere_scene``: one red unit sphere five units in front of
  the camera, lit from above, with no massive body. Useful as a baseline.

The coordinate system is right-handed with +Y up; the camera looks toward +Z.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.lensing.scene.demo_scenes import create_lensing_scene
    >>> from src.lensing.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_lensing_scene()
    >>> setup_camera(camera)
"""

from dataclasses import dataclass

from src.lensing.camera.pinhole import PinholeCamera
from src.lensing.core.lensing import DEFAULT_ANGLE_THRESHOLD, MassiveBody
from src.lensing.scene.lights import PointLight
from src.lensing.scene.manager import SceneManager

# =============================================================================
# Lensing Scene Parameters
# =============================================================================


@dataclass
class LensingSceneParams:
    """Parameters for the lensing demo scene.

    Attributes:
        body_position: World position of the massive body.
        pull_strength: Midpoint sag of curved paths.
        angle_threshold: Degrees within which rays curve toward the body.
        show_body: Place a small dark sphere at the body position.
        light_intensity: Intensity of the key light.
    """

    body_position: tuple[float, float, float] = (0.0, 0.0, 10.0)
    pull_strength: float = 1.0
    angle_threshold: float = DEFAULT_ANGLE_THRESHOLD
    show_body: bool = True
    light_intensity: float = 1.0


# Surface colors
FLOOR_COLOR = (0.7, 0.7, 0.7)
BACK_WALL_COLOR = (0.6, 0.65, 0.8)
RED_COLOR = (0.9, 0.15, 0.1)
GREEN_COLOR = (0.15, 0.8, 0.2)
BLUE_COLOR = (0.15, 0.3, 0.9)
BODY_COLOR = (0.05, 0.05, 0.05)

# Radius of the sphere marking the massive body
BODY_MARKER_RADIUS = 0.4

# Fill light color and intensity
FILL_LIGHT_COLOR = (1.0, 0.85, 0.7)
FILL_LIGHT_INTENSITY = 0.5


def create_lensing_scene(
    params: LensingSceneParams | None = None,
) -> tuple[SceneManager, PinholeCamera]:
    """Create the lensing demo scene.

    Args:
        params: Optional LensingSceneParams; defaults to LensingSceneParams().

    Returns:
        A tuple of (SceneManager, PinholeCamera). The scene's primitives,
        lights and massive body are already uploaded.
    """
    if params is None:
        params = LensingSceneParams()

    scene = SceneManager()

    floor_mat = scene.add_surface_color(FLOOR_COLOR)
    wall_mat = scene.add_surface_color(BACK_WALL_COLOR)

    # Floor at y = -1, from just behind the camera to the back wall
    scene.add_quad(
        corner=(-10.0, -1.0, -5.0),
        edge_u=(0.0, 0.0, 30.0),
        edge_v=(20.0, 0.0, 0.0),
        material_id=floor_mat,
    )

    # Back wall at z = 25
    scene.add_quad(
        corner=(-10.0, -1.0, 25.0),
        edge_u=(20.0, 0.0, 0.0),
        edge_v=(0.0, 12.0, 0.0),
        material_id=wall_mat,
    )

    # Spheres around and behind the body
    scene.add_colored_sphere((-2.5, 0.0, 8.0), 1.0, RED_COLOR)
    scene.add_colored_sphere((2.5, 0.0, 12.0), 1.0, GREEN_COLOR)
    scene.add_colored_sphere((0.0, 0.5, 16.0), 1.5, BLUE_COLOR)

    if params.show_body:
        scene.add_colored_sphere(params.body_position, BODY_MARKER_RADIUS, BODY_COLOR)

    scene.add_light(PointLight(position=(0.0, 8.0, 6.0), intensity=params.light_intensity))
    scene.add_light(
        PointLight(
            position=(-6.0, 4.0, 0.0),
            color=FILL_LIGHT_COLOR,
            intensity=FILL_LIGHT_INTENSITY,
        )
    )

    scene.set_massive_body(
        MassiveBody(
            position=params.body_position,
            pull_strength=params.pull_strength,
            angle_threshold=params.angle_threshold,
        )
    )

    camera = PinholeCamera(
        lookfrom=(0.0, 1.0, -2.0),
        lookat=params.body_position,
        vup=(0.0, 1.0, 0.0),
        vfov=60.0,
    )

    return scene, camera


def create_single_sphere_scene() -> tuple[SceneManager, PinholeCamera]:
    """Create the baseline scene: one red sphere, one light, no massive body.

    The camera sits at the origin looking down +Z with a 90 degree field of
    view; the unit sphere is centered at (0, 0, 5) and the white light at
    (0, 5, 5) has intensity 1.

    Returns:
        A tuple of (SceneManager, PinholeCamera).
    """
    scene = SceneManager()
    scene.add_colored_sphere((0.0, 0.0, 5.0), 1.0, (1.0, 0.0, 0.0))
    scene.add_light(PointLight(position=(0.0, 5.0, 5.0), color=(1.0, 1.0, 1.0), intensity=1.0))

    camera = PinholeCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, 1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
    )
    return scene, camera
