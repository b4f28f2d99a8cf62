"""
gltfkit - Load glTF 2.0 assets (.gltf / .glb) and resolve their binary resources

Splits and packs GLB containers, decodes the JSON document into typed models
with glTF defaults filled in, and resolves buffers, buffer views, accessors
and images into bounds-checked byte slices.
"""

from gltfkit.container import split, merge, split_bytes, merge_bytes, read_glb, write_glb
from gltfkit.decoder import decode_document, load
from gltfkit.normalize import assign_defaults
from gltfkit.resolver import (
    Resolver,
    resolve_buffer,
    resolve_buffer_view,
    resolve_accessor,
    resolve_image,
    read_accessor_array,
    open_image,
)
from gltfkit.schema.document import GLTFDocument
from gltfkit.exceptions import (
    GLTFError,
    MalformedContainerError,
    TruncatedError,
    UnsupportedVersionError,
    InvalidDocumentError,
    UnknownEnumValueError,
    IndexOutOfRangeError,
    RangeOverflowError,
    UnsupportedFeatureError,
    InvalidAccessorError,
    MissingResourceError,
    InvalidDataURIError,
)

__version__ = "0.1.0"
__all__ = [
    "split",
    "merge",
    "split_bytes",
    "merge_bytes",
    "read_glb",
    "write_glb",
    "decode_document",
    "load",
    "assign_defaults",
    "Resolver",
    "resolve_buffer",
    "resolve_buffer_view",
    "resolve_accessor",
    "resolve_image",
    "read_accessor_array",
    "open_image",
    "GLTFDocument",
    "GLTFError",
    "MalformedContainerError",
    "TruncatedError",
    "UnsupportedVersionError",
    "InvalidDocumentError",
    "UnknownEnumValueError",
    "IndexOutOfRangeError",
    "RangeOverflowError",
    "UnsupportedFeatureError",
    "InvalidAccessorError",
    "MissingResourceError",
    "InvalidDataURIError",
]
