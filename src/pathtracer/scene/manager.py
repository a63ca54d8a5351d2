"""Scene manager coordinating spheres and materials.

This module provides a high-level scene building API on top of the global
sphere table and material table. The SceneManager:
- Validates materials and spheres before they reach the GPU-side tables
- Keeps a Python-side record of everything added
- Adds a sphere together with a new material in one call
- Serializes scenes to and from plain dictionaries (JSON-friendly)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from pathtracer.materials.material import Diffuse, Metal
    >>> from pathtracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> red = scene.add_material(Diffuse(albedo=(0.8, 0.3, 0.3)))
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=red)
    >>> scene.add_sphere_with_material((1, 0, -1), 0.5, Metal((0.8, 0.6, 0.2), 0.3))
"""

from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from pathtracer.materials.material import (
    MAX_MATERIALS,
    MaterialSpec,
    add_material,
    clear_materials,
    get_material_count,
    material_from_dict,
)
from pathtracer.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The signed radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _as_vec3(values: Any, name: str) -> tuple[float, float, float]:
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


class SceneManager:
    """Scene builder over the global sphere and material tables.

    There is one scene per process: creating a SceneManager clears whatever
    the tables held before.

    Attributes:
        materials: Material descriptors, indexed by material ID.
        spheres: List of SphereInfo for all spheres in the scene.
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialSpec] = []
        self.spheres: list[SphereInfo] = []
        self.clear()

    def clear(self) -> None:
        """Clear the entire scene (spheres and materials)."""
        clear_scene()
        clear_materials()
        self.materials.clear()
        self.spheres.clear()

    # =========================================================================
    # Material Management
    # =========================================================================

    def add_material(self, material: MaterialSpec) -> int:
        """Add a material to the scene.

        Args:
            material: A Diffuse, Metal or Dielectric descriptor.

        Returns:
            The material ID.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
        """
        material_id = add_material(material)
        self.materials.append(material)
        return material_id

    def get_material(self, material_id: int) -> MaterialSpec | None:
        """Get a material descriptor by ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return get_material_count()

    # =========================================================================
    # Sphere Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        A negative radius keeps the sphere's geometry but turns its normals
        inward, which models a hollow shell (e.g. an air bubble in glass).

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The signed radius of the sphere (must not be zero).
            material_id: The material ID to assign to the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If the radius is zero or material_id is invalid.
        """
        if radius == 0.0:
            raise ValueError("Sphere radius must not be zero")
        if material_id < 0 or material_id >= get_material_count():
            raise ValueError(f"Invalid material_id: {material_id}")

        center = _as_vec3(center, "center")
        sphere_index = add_sphere(center, radius, material_id)

        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center,
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    def add_sphere_with_material(
        self,
        center: tuple[float, float, float],
        radius: float,
        material: MaterialSpec,
    ) -> tuple[int, int]:
        """Add a sphere with a new material.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The signed radius of the sphere.
            material: The material descriptor for the new material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_material(material)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for material in self.materials:
            config.materials.append(material.to_dict())

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Every entry is parsed and checked before the current scene is
        cleared, so an invalid configuration leaves the scene untouched.
        Materials are loaded first so that spheres can refer to them by
        position.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        materials = [material_from_dict(mat_config) for mat_config in config.materials]
        if len(materials) > MAX_MATERIALS:
            raise ValueError(f"Scene has {len(materials)} materials, maximum is {MAX_MATERIALS}")
        if len(config.spheres) > MAX_SPHERES:
            raise ValueError(f"Scene has {len(config.spheres)} spheres, maximum is {MAX_SPHERES}")

        spheres = []
        for sphere_config in config.spheres:
            center = _as_vec3(sphere_config.get("center", [0.0, 0.0, 0.0]), "center")
            radius = float(sphere_config.get("radius", 1.0))
            material_id = int(sphere_config.get("material_id", 0))
            if radius == 0.0:
                raise ValueError("Sphere radius must not be zero")
            if material_id < 0 or material_id >= len(materials):
                raise ValueError(f"Invalid material_id: {material_id}")
            spheres.append((center, radius, material_id))

        self.clear()
        for material in materials:
            self.add_material(material)
        for center, radius, material_id in spheres:
            self.add_sphere(center, radius, material_id)

        logger.debug(
            "Loaded scene with {} materials and {} spheres",
            len(self.materials),
            len(self.spheres),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "spheres": config.spheres,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary produced by to_dict()."""
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS

    def __repr__(self) -> str:
        return f"SceneManager(materials={len(self.materials)}, spheres={len(self.spheres)})"
