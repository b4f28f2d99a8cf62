"""
Default normalization

Fills the glTF-mandated defaults for optional fields after decoding, and
resolves one authoring conflict (an empty metallic-roughness block next to
the specular-glossiness extension).

Step order:
1. primitive mode -> TRIANGLES
2. pbrMetallicRoughness factors -> white / 1.0 / 1.0
3. normalTexture.scale, occlusionTexture.strength -> 1.0
4. alphaCutoff -> 0.5
5. specular-glossiness: drop a pbrMetallicRoughness block without
   baseColorTexture, then fill the extension's factors

Every fill only touches fields that are None, so the pass is idempotent.
"""

import logging

from gltfkit.schema.document import GLTFDocument, Material, Mesh, PrimitiveMode

logger = logging.getLogger(__name__)


def assign_defaults(doc: GLTFDocument) -> GLTFDocument:
    """Normalize doc in place and return it."""
    for mesh in doc.meshes:
        _mesh_defaults(mesh)
    for index, material in enumerate(doc.materials):
        _material_defaults(material, index)
    return doc


def _mesh_defaults(mesh: Mesh) -> None:
    for primitive in mesh.primitives:
        if primitive.mode is None:
            primitive.mode = int(PrimitiveMode.TRIANGLES)


def _material_defaults(material: Material, index: int) -> None:
    pbr = material.pbr_metallic_roughness
    if pbr is not None:
        if pbr.base_color_factor is None:
            pbr.base_color_factor = [1.0, 1.0, 1.0, 1.0]
        if pbr.metallic_factor is None:
            pbr.metallic_factor = 1.0
        if pbr.roughness_factor is None:
            pbr.roughness_factor = 1.0

    if material.normal_texture is not None and material.normal_texture.scale is None:
        material.normal_texture.scale = 1.0

    if material.occlusion_texture is not None and material.occlusion_texture.strength is None:
        material.occlusion_texture.strength = 1.0

    if material.alpha_cutoff is None:
        material.alpha_cutoff = 0.5

    gloss = material.extensions.pbr_specular_glossiness if material.extensions else None
    if gloss is None:
        return

    # Some exporters write an empty pbrMetallicRoughness: {} next to the
    # extension; such a block carries no information.
    if material.pbr_metallic_roughness is not None and material.pbr_metallic_roughness.base_color_texture is None:
        logger.debug(f"Material {index}: dropping pbrMetallicRoughness in favour of specular-glossiness")
        material.pbr_metallic_roughness = None

    if gloss.diffuse_factor is None:
        gloss.diffuse_factor = [1.0, 1.0, 1.0, 1.0]
    if gloss.specular_factor is None:
        gloss.specular_factor = [1.0, 1.0, 1.0]
    if gloss.glossiness_factor is None:
        gloss.glossiness_factor = 1.0
