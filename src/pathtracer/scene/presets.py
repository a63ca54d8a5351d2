"""Ready-made sphere scenes.

Each factory clears the global scene, fills it through a SceneManager and
returns the manager together with a Camera framing the scene. The camera
still has to be uploaded with setup_camera() before rendering.

Scenes:
    four_spheres: the classic red diffuse sphere on a yellow ground, flanked
        by a fuzzy gold metal sphere and a very rough silver metal sphere
    two_spheres: a diffuse sphere on a diffuse ground, small enough for tests
    glass: a hollow glass sphere (glass shell around an air bubble) between a
        diffuse and a metal sphere

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from pathtracer.camera.pinhole import setup_camera
    >>> from pathtracer.scene.presets import create_four_spheres_scene
    >>>
    >>> scene, camera = create_four_spheres_scene()
    >>> setup_camera(camera)
"""

from pathtracer.camera.pinhole import Camera
from pathtracer.materials.material import Dielectric, Diffuse, Metal
from pathtracer.scene.manager import SceneManager

# =============================================================================
# Shared Layout
# =============================================================================

GROUND_CENTER = (0.0, -100.5, -1.0)
GROUND_RADIUS = 100.0
SPHERE_RADIUS = 0.5

# Eye at the origin looking down -z through a 4 x 2 image plane at z = -1
DEFAULT_CAMERA = Camera(
    origin=(0.0, 0.0, 0.0),
    lower_left_corner=(-2.0, -1.0, -1.0),
    horizontal=(4.0, 0.0, 0.0),
    vertical=(0.0, 2.0, 0.0),
)

# The default camera's image plane is 2:1
DEFAULT_ASPECT_RATIO = 2.0


def create_four_spheres_scene() -> tuple[SceneManager, Camera]:
    """Create the four-sphere scene.

    Returns:
        Tuple of (SceneManager, Camera).
    """
    scene = SceneManager()

    scene.add_sphere_with_material((0.0, 0.0, -1.0), SPHERE_RADIUS, Diffuse(albedo=(0.8, 0.3, 0.3)))
    scene.add_sphere_with_material(GROUND_CENTER, GROUND_RADIUS, Diffuse(albedo=(0.8, 0.8, 0.0)))
    scene.add_sphere_with_material(
        (1.0, 0.0, -1.0), SPHERE_RADIUS, Metal(albedo=(0.8, 0.6, 0.2), fuzziness=0.3)
    )
    scene.add_sphere_with_material(
        (-1.0, 0.0, -1.0), SPHERE_RADIUS, Metal(albedo=(0.8, 0.8, 0.8), fuzziness=1.0)
    )

    return scene, DEFAULT_CAMERA


def create_two_spheres_scene() -> tuple[SceneManager, Camera]:
    """Create a diffuse sphere resting on a diffuse ground.

    Returns:
        Tuple of (SceneManager, Camera).
    """
    scene = SceneManager()

    scene.add_sphere_with_material((0.0, 0.0, -1.0), SPHERE_RADIUS, Diffuse(albedo=(0.5, 0.5, 0.5)))
    scene.add_sphere_with_material(GROUND_CENTER, GROUND_RADIUS, Diffuse(albedo=(0.5, 0.5, 0.5)))

    return scene, DEFAULT_CAMERA


def create_glass_scene(ior: float = 1.5) -> tuple[SceneManager, Camera]:
    """Create a hollow glass sphere between a diffuse and a metal sphere.

    The hollow sphere is two spheres sharing one glass material: the outer
    shell and a slightly smaller sphere with negative radius whose normals
    point inward.

    Args:
        ior: Index of refraction of the glass.

    Returns:
        Tuple of (SceneManager, Camera).
    """
    scene = SceneManager()

    scene.add_sphere_with_material(GROUND_CENTER, GROUND_RADIUS, Diffuse(albedo=(0.8, 0.8, 0.0)))
    scene.add_sphere_with_material((0.0, 0.0, -1.0), SPHERE_RADIUS, Diffuse(albedo=(0.1, 0.2, 0.5)))
    scene.add_sphere_with_material(
        (1.0, 0.0, -1.0), SPHERE_RADIUS, Metal(albedo=(0.8, 0.6, 0.2), fuzziness=0.0)
    )

    _, glass = scene.add_sphere_with_material(
        (-1.0, 0.0, -1.0), SPHERE_RADIUS, Dielectric(index_of_refraction=ior)
    )
    scene.add_sphere((-1.0, 0.0, -1.0), -0.45, glass)

    return scene, DEFAULT_CAMERA


PRESETS = {
    "four_spheres": create_four_spheres_scene,
    "two_spheres": create_two_spheres_scene,
    "glass": create_glass_scene,
}


def create_preset_scene(name: str) -> tuple[SceneManager, Camera]:
    """Create a preset scene by name.

    Raises:
        ValueError: If no preset has that name.
    """
    try:
        factory = PRESETS[name]
    except KeyError:
        raise ValueError(
            f"Unknown scene preset {name!r}; choose from {', '.join(sorted(PRESETS))}"
        ) from None
    return factory()
