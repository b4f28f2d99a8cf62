"""
glTF 2.0 Document Schema

Typed, in-memory form of the glTF JSON segment.

WIRE NAMES:
- JSON keys are camelCase (byteOffset, bufferView, ...)
- Python attributes are snake_case (byte_offset, buffer_view, ...)
- Both spellings are accepted when constructing models by hand

OPTIONAL FIELDS:
Every optional property is Optional[...] = None. "Absent" and "present with
value 0" stay distinguishable after decoding, which the default-normalization
pass relies on (it only fills fields that are None).

REFERENCES:
Cross references (BufferView.buffer, Accessor.buffer_view, Image.buffer_view,
...) are plain integer indices into the flat lists on GLTFDocument. They are
not resolved at decode time; the resolver validates them on every call.

ENUMERATED CODES:
- componentType must be one of the six ComponentType codes
- accessor type must be one of the seven AccessorType names
Anything else raises UnknownEnumValueError during validation. Other wire
constants (primitive modes, sampler filters, wrap modes) are exposed as
IntEnums for consumers but are not enforced.

MORPH TARGETS:
Morph targets are modelled as the fixed POSITION/NORMAL/TANGENT channel set.
Custom channel names (e.g. "_TEMPERATURE") are dropped.
"""

from __future__ import annotations
from enum import Enum, IntEnum
from typing import Any, Callable, Dict, List, Optional, Tuple
import copy
import threading

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator
from pydantic.alias_generators import to_camel

from gltfkit.exceptions import UnknownEnumValueError

# Type aliases for better readability
Vec3 = List[float]
Vec4 = List[float]

#########################
# WIRE ENUMS
#########################

class ComponentType(IntEnum):
    BYTE = 5120
    UNSIGNED_BYTE = 5121
    SHORT = 5122
    UNSIGNED_SHORT = 5123
    UNSIGNED_INT = 5125
    FLOAT = 5126

    @property
    def num_bytes(self) -> int:
        return _COMPONENT_BYTES[self]


_COMPONENT_BYTES = {
    ComponentType.BYTE: 1,
    ComponentType.UNSIGNED_BYTE: 1,
    ComponentType.SHORT: 2,
    ComponentType.UNSIGNED_SHORT: 2,
    ComponentType.UNSIGNED_INT: 4,
    ComponentType.FLOAT: 4,
}


class AccessorType(str, Enum):
    SCALAR = "SCALAR"
    VEC2 = "VEC2"
    VEC3 = "VEC3"
    VEC4 = "VEC4"
    MAT2 = "MAT2"
    MAT3 = "MAT3"
    MAT4 = "MAT4"

    @property
    def num_components(self) -> int:
        return _TYPE_COMPONENTS[self]


_TYPE_COMPONENTS = {
    AccessorType.SCALAR: 1,
    AccessorType.VEC2: 2,
    AccessorType.VEC3: 3,
    AccessorType.VEC4: 4,
    AccessorType.MAT2: 4,
    AccessorType.MAT3: 9,
    AccessorType.MAT4: 16,
}


class PrimitiveMode(IntEnum):
    POINTS = 0
    LINES = 1
    LINE_LOOP = 2
    LINE_STRIP = 3
    TRIANGLES = 4
    TRIANGLE_STRIP = 5
    TRIANGLE_FAN = 6


class SamplerFilter(IntEnum):
    NEAREST = 9728
    LINEAR = 9729
    NEAREST_MIPMAP_NEAREST = 9984
    LINEAR_MIPMAP_NEAREST = 9985
    NEAREST_MIPMAP_LINEAR = 9986
    LINEAR_MIPMAP_LINEAR = 9987


class WrapMode(IntEnum):
    CLAMP_TO_EDGE = 33071
    MIRRORED_REPEAT = 33648
    REPEAT = 10497


class BufferTarget(IntEnum):
    ARRAY_BUFFER = 34962
    ELEMENT_ARRAY_BUFFER = 34963


#########################
# BASE
#########################

class GLTFModel(BaseModel):
    """Base for all glTF objects: camelCase on the wire, unknown keys ignored."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore')

    extensions: Optional[Dict[str, Any]] = Field(None, description="Extension-specific objects.")
    extras: Optional[Any] = Field(None, description="Application-specific data.")


class ResourceCell:
    """
    Write-once holder for resolved buffer bytes and their MIME type.

    The first successful factory call wins; concurrent callers block on the
    lock and then observe the stored value. A factory that raises stores
    nothing, so the next call retries.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._value: Optional[Tuple[bytes, str]] = None

    @property
    def value(self) -> Optional[Tuple[bytes, str]]:
        return self._value

    def get_or_set(self, factory: Callable[[], Tuple[bytes, str]]) -> Tuple[bytes, str]:
        value = self._value
        if value is not None:
            return value
        with self._lock:
            if self._value is None:
                self._value = factory()
            return self._value

    def __deepcopy__(self, memo):
        cell = ResourceCell()
        cell._value = copy.deepcopy(self._value, memo)
        return cell


#########################
# BINARY RESOURCES
#########################

class Buffer(GLTFModel):
    """
    A flat byte array.

    An absent or empty uri means the GLB-embedded BIN chunk. Resolved bytes are
    memoised in a private ResourceCell for the lifetime of the document.
    """
    uri: Optional[str] = Field(None, description="Relative file path or data: URI; None for the BIN chunk.")
    byte_length: int = Field(..., ge=0, description="Declared length in bytes.")
    name: Optional[str] = None

    _cache: ResourceCell = PrivateAttr(default_factory=ResourceCell)

    @property
    def is_external(self) -> bool:
        # GLB-stored buffers must leave uri undefined
        return bool(self.uri)

    @property
    def cache(self) -> ResourceCell:
        return self._cache


class BufferView(GLTFModel):
    buffer: int = Field(..., ge=0, description="Index of the backing buffer.")
    byte_offset: int = Field(0, ge=0, description="Offset into the buffer in bytes.")
    byte_length: int = Field(..., ge=0, description="Length of the view in bytes.")
    byte_stride: Optional[int] = Field(None, description="Stride in bytes between vertex attributes (4-252).")
    target: Optional[int] = Field(None, description="GPU buffer type hint (34962 / 34963).")
    name: Optional[str] = None

    @field_validator('byte_stride')
    @classmethod
    def validate_byte_stride(cls, v):
        if v is not None and not 4 <= v <= 252:
            raise ValueError(f"byteStride must be within 4..252, got {v}")
        return v


class SparseIndices(GLTFModel):
    buffer_view: int = Field(..., ge=0)
    byte_offset: int = Field(0, ge=0)
    component_type: int


class SparseValues(GLTFModel):
    buffer_view: int = Field(..., ge=0)
    byte_offset: int = Field(0, ge=0)


class Sparse(GLTFModel):
    """Parsed for completeness only; the resolver rejects sparse accessors."""
    count: int = Field(..., ge=1)
    indices: SparseIndices
    values: SparseValues


class Accessor(GLTFModel):
    buffer_view: Optional[int] = Field(None, ge=0, description="Index of the backing bufferView.")
    byte_offset: int = Field(0, ge=0, description="Offset into the bufferView in bytes.")
    component_type: ComponentType = Field(..., description="Numeric type of each component.")
    normalized: Optional[bool] = None
    count: int = Field(..., ge=0, description="Number of elements.")
    type: AccessorType = Field(..., description="Element shape (SCALAR..MAT4).")
    max: Optional[List[float]] = None
    min: Optional[List[float]] = None
    sparse: Optional[Sparse] = None
    name: Optional[str] = None

    @field_validator('component_type', mode='before')
    @classmethod
    def validate_component_type(cls, v):
        if isinstance(v, bool) or v not in list(_COMPONENT_BYTES):
            raise UnknownEnumValueError('componentType', v)
        return v

    @field_validator('type', mode='before')
    @classmethod
    def validate_type(cls, v):
        if isinstance(v, AccessorType):
            return v
        if not isinstance(v, str) or v not in AccessorType.__members__:
            raise UnknownEnumValueError('accessor type', v)
        return v

    @property
    def element_size(self) -> int:
        """Bytes per element: component size times component count."""
        return self.component_type.num_bytes * self.type.num_components


class Image(GLTFModel):
    uri: Optional[str] = Field(None, description="Relative file path or data: URI.")
    mime_type: Optional[str] = Field(None, description="Explicit MIME type; required with bufferView.")
    buffer_view: Optional[int] = Field(None, ge=0, description="Index of a bufferView holding the image.")
    name: Optional[str] = None


#########################
# MESHES
#########################

class Attributes(GLTFModel):
    position: Optional[int] = Field(None, alias='POSITION')
    normal: Optional[int] = Field(None, alias='NORMAL')
    tangent: Optional[int] = Field(None, alias='TANGENT')
    texcoord_0: Optional[int] = Field(None, alias='TEXCOORD_0')
    texcoord_1: Optional[int] = Field(None, alias='TEXCOORD_1')
    texcoord_2: Optional[int] = Field(None, alias='TEXCOORD_2')
    texcoord_3: Optional[int] = Field(None, alias='TEXCOORD_3')
    color_0: Optional[int] = Field(None, alias='COLOR_0')
    color_1: Optional[int] = Field(None, alias='COLOR_1')
    color_2: Optional[int] = Field(None, alias='COLOR_2')
    color_3: Optional[int] = Field(None, alias='COLOR_3')
    joints_0: Optional[int] = Field(None, alias='JOINTS_0')
    joints_1: Optional[int] = Field(None, alias='JOINTS_1')
    joints_2: Optional[int] = Field(None, alias='JOINTS_2')
    joints_3: Optional[int] = Field(None, alias='JOINTS_3')
    weights_0: Optional[int] = Field(None, alias='WEIGHTS_0')
    weights_1: Optional[int] = Field(None, alias='WEIGHTS_1')
    weights_2: Optional[int] = Field(None, alias='WEIGHTS_2')
    weights_3: Optional[int] = Field(None, alias='WEIGHTS_3')


class MorphTarget(GLTFModel):
    # Fixed channel set; glTF allows application-specific names as well.
    position: Optional[int] = Field(None, alias='POSITION')
    normal: Optional[int] = Field(None, alias='NORMAL')
    tangent: Optional[int] = Field(None, alias='TANGENT')


class Primitive(GLTFModel):
    attributes: Attributes = Field(default_factory=Attributes)
    indices: Optional[int] = None
    material: Optional[int] = None
    mode: Optional[int] = Field(None, description="Topology; defaults to 4 (TRIANGLES).")
    targets: Optional[List[MorphTarget]] = None


class Mesh(GLTFModel):
    primitives: List[Primitive] = Field(default_factory=list)
    weights: Optional[List[float]] = None
    name: Optional[str] = None


#########################
# MATERIALS
#########################

class TextureInfo(GLTFModel):
    index: int = Field(..., ge=0)
    tex_coord: int = Field(0, ge=0)


class NormalTextureInfo(TextureInfo):
    scale: Optional[float] = Field(None, description="Normal scale; defaults to 1.0.")


class OcclusionTextureInfo(TextureInfo):
    strength: Optional[float] = Field(None, description="Occlusion strength; defaults to 1.0.")


class PbrMetallicRoughness(GLTFModel):
    base_color_factor: Optional[Vec4] = Field(None, description="Defaults to opaque white.")
    base_color_texture: Optional[TextureInfo] = None
    metallic_factor: Optional[float] = Field(None, description="Defaults to 1.0.")
    roughness_factor: Optional[float] = Field(None, description="Defaults to 1.0.")
    metallic_roughness_texture: Optional[TextureInfo] = None


class PbrSpecularGlossiness(GLTFModel):
    """KHR_materials_pbrSpecularGlossiness"""
    diffuse_factor: Optional[Vec4] = Field(None, description="Defaults to opaque white.")
    diffuse_texture: Optional[TextureInfo] = None
    specular_factor: Optional[Vec3] = Field(None, description="Defaults to [1, 1, 1].")
    glossiness_factor: Optional[float] = Field(None, description="Defaults to 1.0.")
    specular_glossiness_texture: Optional[TextureInfo] = None


class Clearcoat(GLTFModel):
    """KHR_materials_clearcoat"""
    clearcoat_factor: float = 0.0
    clearcoat_texture: Optional[TextureInfo] = None
    clearcoat_roughness_factor: float = 0.0
    clearcoat_roughness_texture: Optional[TextureInfo] = None
    clearcoat_normal_texture: Optional[NormalTextureInfo] = None


class Unlit(GLTFModel):
    """KHR_materials_unlit (no properties)"""
    pass


class MaterialExtensions(BaseModel):
    """Typed view of the material extensions this loader understands; others are kept as-is."""
    model_config = ConfigDict(populate_by_name=True, extra='allow')

    pbr_specular_glossiness: Optional[PbrSpecularGlossiness] = Field(None, alias='KHR_materials_pbrSpecularGlossiness')
    clearcoat: Optional[Clearcoat] = Field(None, alias='KHR_materials_clearcoat')
    unlit: Optional[Unlit] = Field(None, alias='KHR_materials_unlit')


class Material(GLTFModel):
    name: Optional[str] = None
    pbr_metallic_roughness: Optional[PbrMetallicRoughness] = None
    normal_texture: Optional[NormalTextureInfo] = None
    occlusion_texture: Optional[OcclusionTextureInfo] = None
    emissive_texture: Optional[TextureInfo] = None
    emissive_factor: Vec3 = Field(default_factory=lambda: [0.0, 0.0, 0.0])
    alpha_mode: str = Field('OPAQUE', description="OPAQUE, MASK or BLEND.")
    alpha_cutoff: Optional[float] = Field(None, description="Defaults to 0.5.")
    double_sided: bool = False
    extensions: Optional[MaterialExtensions] = None


class Texture(GLTFModel):
    sampler: Optional[int] = Field(None, description="None means repeat wrapping and auto filtering.")
    source: Optional[int] = Field(None, description="Index of the image.")
    name: Optional[str] = None


class Sampler(GLTFModel):
    mag_filter: Optional[int] = None
    min_filter: Optional[int] = None
    wrap_s: int = WrapMode.REPEAT
    wrap_t: int = WrapMode.REPEAT
    name: Optional[str] = None


#########################
# SCENE GRAPH
#########################

class Node(GLTFModel):
    name: Optional[str] = None
    camera: Optional[int] = None
    children: Optional[List[int]] = None
    skin: Optional[int] = None
    matrix: Optional[List[float]] = Field(None, description="Column-major 4x4 local transform.")
    mesh: Optional[int] = None
    rotation: Optional[List[float]] = Field(None, description="Quaternion [x, y, z, w].")
    scale: Optional[Vec3] = None
    translation: Optional[Vec3] = None
    weights: Optional[List[float]] = None


class Scene(GLTFModel):
    nodes: Optional[List[int]] = None
    name: Optional[str] = None


class Skin(GLTFModel):
    """Bind pose. inverseBindMatrices points at a MAT4 accessor."""
    inverse_bind_matrices: Optional[int] = None
    skeleton: Optional[int] = Field(None, description="Common root of the joint hierarchy.")
    joints: List[int] = Field(default_factory=list)
    name: Optional[str] = None


class Perspective(GLTFModel):
    aspect_ratio: Optional[float] = None
    yfov: float
    zfar: Optional[float] = None
    znear: float


class Orthographic(GLTFModel):
    xmag: float
    ymag: float
    zfar: float
    znear: float


class Camera(GLTFModel):
    type: str
    perspective: Optional[Perspective] = None
    orthographic: Optional[Orthographic] = None
    name: Optional[str] = None


#########################
# ANIMATION
#########################

class AnimationTarget(GLTFModel):
    node: Optional[int] = None
    path: str = Field(..., description="translation, rotation, scale or weights.")


class AnimationChannel(GLTFModel):
    sampler: int = Field(..., description="Index into the animation's samplers, not the texture samplers.")
    target: AnimationTarget


class AnimationSampler(GLTFModel):
    input: int = Field(..., description="Accessor with keyframe times.")
    output: int = Field(..., description="Accessor with keyframe values.")
    interpolation: str = Field('LINEAR', description="LINEAR, STEP or CUBICSPLINE.")


class Animation(GLTFModel):
    channels: List[AnimationChannel] = Field(default_factory=list)
    samplers: List[AnimationSampler] = Field(default_factory=list)
    name: Optional[str] = None


#########################
# TOP-LEVEL MODELS
#########################

class Asset(GLTFModel):
    version: str = '2.0'
    min_version: Optional[str] = None
    generator: Optional[str] = None
    copyright: Optional[str] = None


class GLTFDocument(GLTFModel):
    """
    Root of a decoded glTF asset.

    Besides the JSON content it carries the embedded binary resource (the GLB
    BIN chunk, possibly empty) and an optional base directory used to resolve
    relative file URIs.
    """
    asset: Optional[Asset] = None
    scene: Optional[int] = None
    scenes: List[Scene] = Field(default_factory=list)
    nodes: List[Node] = Field(default_factory=list)
    meshes: List[Mesh] = Field(default_factory=list)
    accessors: List[Accessor] = Field(default_factory=list)
    buffer_views: List[BufferView] = Field(default_factory=list)
    buffers: List[Buffer] = Field(default_factory=list)
    images: List[Image] = Field(default_factory=list)
    textures: List[Texture] = Field(default_factory=list)
    samplers: List[Sampler] = Field(default_factory=list)
    materials: List[Material] = Field(default_factory=list)
    skins: List[Skin] = Field(default_factory=list)
    cameras: List[Camera] = Field(default_factory=list)
    animations: List[Animation] = Field(default_factory=list)
    extensions_used: List[str] = Field(default_factory=list)
    extensions_required: List[str] = Field(default_factory=list)

    _bin: bytes = PrivateAttr(default=b"")
    _base_dir: Optional[str] = PrivateAttr(default=None)

    @property
    def bin(self) -> bytes:
        """Embedded binary resource (GLB BIN chunk); empty when absent."""
        return self._bin

    @property
    def base_dir(self) -> Optional[str]:
        return self._base_dir

    def attach_binary(self, data: Optional[bytes]) -> None:
        if not data:
            self._bin = b""
        elif isinstance(data, bytes):
            self._bin = data
        else:
            self._bin = bytes(data)

    def set_base_dir(self, base_dir: Optional[str]) -> None:
        self._base_dir = str(base_dir) if base_dir is not None else None


# Rebuild models for forward references
for _model in (
    Buffer, BufferView, SparseIndices, SparseValues, Sparse, Accessor, Image,
    Attributes, MorphTarget, Primitive, Mesh, TextureInfo, NormalTextureInfo,
    OcclusionTextureInfo, PbrMetallicRoughness, PbrSpecularGlossiness, Clearcoat,
    Unlit, MaterialExtensions, Material, Texture, Sampler, Node, Scene, Skin,
    Perspective, Orthographic, Camera, AnimationTarget, AnimationChannel,
    AnimationSampler, Animation, Asset, GLTFDocument,
):
    _model.model_rebuild()
