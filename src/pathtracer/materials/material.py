"""Material descriptors, the material table and the scatter result type.

Materials form a closed tagged variant. On the Python side each kind is a
frozen dataclass (Diffuse, Metal, Dielectric) validated on construction; on
the GPU side all kinds share one table keyed by material ID:

    material_kinds[id]      MaterialKind tag
    material_albedos[id]    albedo (Diffuse, Metal)
    material_fuzziness[id]  fuzziness (Metal)
    material_iors[id]       index of refraction (Dielectric)

The path tracer matches on the tag to select the scatter function.

Example:
    >>> from pathtracer.materials.material import Metal, add_material
    >>> gold = add_material(Metal(albedo=(0.8, 0.6, 0.2), fuzziness=0.3))
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Union

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3


class MaterialKind(IntEnum):
    """Tag of the material variant, stored per material ID."""

    DIFFUSE = 0
    METAL = 1
    DIELECTRIC = 2


def _validate_albedo(albedo: tuple[float, float, float]) -> None:
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}")
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )


@dataclass(frozen=True)
class Diffuse:
    """Lambertian (ideal diffuse) material.

    Attributes:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
    """

    albedo: tuple[float, float, float]

    def __post_init__(self) -> None:
        _validate_albedo(self.albedo)

    @property
    def kind(self) -> MaterialKind:
        return MaterialKind.DIFFUSE

    def to_dict(self) -> dict[str, Any]:
        return {"type": "diffuse", "albedo": list(self.albedo)}


@dataclass(frozen=True)
class Metal:
    """Specular metal with optional fuzz.

    Attributes:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzziness: Perturbation of the mirror direction in [0, 1].
            0 = perfect mirror, 1 = maximum fuzz.
    """

    albedo: tuple[float, float, float]
    fuzziness: float = 0.0

    def __post_init__(self) -> None:
        _validate_albedo(self.albedo)
        if self.fuzziness < 0.0 or self.fuzziness > 1.0:
            raise ValueError(
                f"Fuzziness = {self.fuzziness} is outside [0, 1]. "
                "Fuzziness must be between 0 (perfect mirror) and 1 (maximum fuzz)."
            )

    @property
    def kind(self) -> MaterialKind:
        return MaterialKind.METAL

    def to_dict(self) -> dict[str, Any]:
        return {"type": "metal", "albedo": list(self.albedo), "fuzziness": self.fuzziness}


@dataclass(frozen=True)
class Dielectric:
    """Clear refractive material (glass, water).

    Attributes:
        index_of_refraction: Ratio of the material's refractive index to the
            surrounding medium. Common values: water 1.33, glass 1.5,
            diamond 2.4. Values below 1 model an air pocket inside a denser
            medium.
    """

    index_of_refraction: float = 1.5

    def __post_init__(self) -> None:
        if self.index_of_refraction <= 0.0:
            raise ValueError(
                f"Index of refraction = {self.index_of_refraction} must be positive."
            )

    @property
    def kind(self) -> MaterialKind:
        return MaterialKind.DIELECTRIC

    def to_dict(self) -> dict[str, Any]:
        return {"type": "dielectric", "index_of_refraction": self.index_of_refraction}


MaterialSpec = Union[Diffuse, Metal, Dielectric]


def material_from_dict(data: dict[str, Any]) -> MaterialSpec:
    """Build a material descriptor from its dictionary form.

    Args:
        data: A dict with a "type" key ("diffuse", "metal" or "dielectric")
            and the variant's parameters.

    Returns:
        The material descriptor.

    Raises:
        ValueError: If the type is unknown or a parameter is out of range.
    """
    mat_type = str(data.get("type", "")).lower()
    if mat_type == "diffuse":
        albedo = data.get("albedo", [0.5, 0.5, 0.5])
        return Diffuse(albedo=(albedo[0], albedo[1], albedo[2]))
    if mat_type == "metal":
        albedo = data.get("albedo", [0.8, 0.8, 0.8])
        return Metal(
            albedo=(albedo[0], albedo[1], albedo[2]),
            fuzziness=data.get("fuzziness", 0.0),
        )
    if mat_type == "dielectric":
        return Dielectric(index_of_refraction=data.get("index_of_refraction", 1.5))
    raise ValueError(f"Unknown material type: {mat_type!r}")


# =============================================================================
# Material Table (GPU-side storage)
# =============================================================================

MAX_MATERIALS = 1024

material_kinds = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_fuzziness = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_iors = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear the material table.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def add_material(material: MaterialSpec) -> int:
    """Add a material to the material table.

    Args:
        material: The validated material descriptor.

    Returns:
        The material ID.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    albedo = (1.0, 1.0, 1.0)
    fuzziness = 0.0
    ior = 1.0
    if isinstance(material, Diffuse):
        albedo = material.albedo
    elif isinstance(material, Metal):
        albedo = material.albedo
        fuzziness = material.fuzziness
    elif isinstance(material, Dielectric):
        ior = material.index_of_refraction
    else:
        raise ValueError(f"Unsupported material: {material!r}")

    material_kinds[idx] = int(material.kind)
    material_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    material_fuzziness[idx] = fuzziness
    material_iors[idx] = ior
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the table."""
    return int(num_materials[None])


@ti.func
def get_material_kind(material_id: ti.i32) -> ti.i32:
    """Get the MaterialKind tag for a material ID, or -1 for invalid IDs."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_kinds[material_id]
    return result


@ti.func
def get_material_albedo(material_id: ti.i32) -> vec3:
    return material_albedos[material_id]


@ti.func
def get_material_fuzziness(material_id: ti.i32) -> ti.f32:
    return material_fuzziness[material_id]


@ti.func
def get_material_ior(material_id: ti.i32) -> ti.f32:
    return material_iors[material_id]


# =============================================================================
# Scatter Result
# =============================================================================


@ti.dataclass
class ScatterRecord:
    """Outcome of a material interaction.

    Attributes:
        scattered: 1 if the ray continues, 0 if it was absorbed (black).
        origin: Origin of the scattered ray (the hit point).
        direction: Direction of the scattered ray.
        attenuation: Per-channel factor applied to the radiance carried back
            along the scattered ray.
    """

    scattered: ti.i32
    origin: vec3
    direction: vec3
    attenuation: vec3


@ti.func
def make_absorbed() -> ScatterRecord:
    """Create a ScatterRecord for a fully absorbed ray."""
    return ScatterRecord(
        scattered=0,
        origin=vec3(0.0, 0.0, 0.0),
        direction=vec3(0.0, 0.0, 0.0),
        attenuation=vec3(0.0, 0.0, 0.0),
    )
