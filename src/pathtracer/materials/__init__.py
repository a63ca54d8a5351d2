"""Materials module.

Components:
    material: Material descriptors (Diffuse, Metal, Dielectric), the
        material table and the ScatterRecord result type
    diffuse: Lambertian scattering
    metal: Mirror reflection with optional fuzz
    dielectric: Refraction with Schlick reflectance and total internal
        reflection

Every scatter function either absorbs the ray or returns the scattered ray
and its attenuation.
"""

from .dielectric import refraction_ratio_for, scatter_dielectric
from .diffuse import scatter_diffuse
from .material import (
    MAX_MATERIALS,
    Dielectric,
    Diffuse,
    MaterialKind,
    MaterialSpec,
    Metal,
    ScatterRecord,
    add_material,
    clear_materials,
    get_material_count,
    material_from_dict,
)
from .metal import scatter_metal

__all__ = [
    "MaterialKind",
    "MaterialSpec",
    "Diffuse",
    "Metal",
    "Dielectric",
    "ScatterRecord",
    "material_from_dict",
    "add_material",
    "clear_materials",
    "get_material_count",
    "MAX_MATERIALS",
    "scatter_diffuse",
    "scatter_metal",
    "scatter_dielectric",
    "refraction_ratio_for",
]
