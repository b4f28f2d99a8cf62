"""glTF 2.0 schema definitions."""
from .document import (
    GLTFDocument,
    Asset,
    Buffer,
    BufferView,
    Accessor,
    AccessorType,
    ComponentType,
    Image,
    Material,
    Mesh,
    Primitive,
    PrimitiveMode,
    ResourceCell,
)

__all__ = [
    "GLTFDocument",
    "Asset",
    "Buffer",
    "BufferView",
    "Accessor",
    "AccessorType",
    "ComponentType",
    "Image",
    "Material",
    "Mesh",
    "Primitive",
    "PrimitiveMode",
    "ResourceCell",
]
