"""
Resource resolution

Resolves the byte ranges a glTF document points at:

    buffer      -> GLB BIN chunk, data: URI, or local file
    bufferView  -> slice of a buffer
    accessor    -> strided slice of a bufferView
    image       -> bufferView, data: URI, or local file

Every index is validated on each call, and every range is checked against its
backing bytes before slicing. Buffer bytes are resolved lazily and memoised on
the Buffer for the lifetime of the document. Remote URIs are never fetched.
"""

import io
import logging
import os
from typing import Optional, Sequence, Tuple
from urllib.parse import unquote, urlsplit

import numpy as np
from PIL import Image

from gltfkit.datauri import DEFAULT_BASE64_MIME, decode_data_uri, is_data_uri
from gltfkit.exceptions import (
    IndexOutOfRangeError,
    InvalidAccessorError,
    MissingResourceError,
    RangeOverflowError,
    UnsupportedFeatureError,
)
from gltfkit.schema.document import AccessorType, Buffer, ComponentType, GLTFDocument

logger = logging.getLogger(__name__)

# Little-endian numpy dtypes per componentType
_DTYPES = {
    ComponentType.BYTE: '<i1',
    ComponentType.UNSIGNED_BYTE: '<u1',
    ComponentType.SHORT: '<i2',
    ComponentType.UNSIGNED_SHORT: '<u2',
    ComponentType.UNSIGNED_INT: '<u4',
    ComponentType.FLOAT: '<f4',
}


def _check_index(items: Sequence, index: int, what: str) -> None:
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(items):
        raise IndexOutOfRangeError(f"{what} {index} not found ({len(items)} defined)")


def _read_local_file(doc: GLTFDocument, uri: str, what: str) -> bytes:
    """Read a relative or file: URI from disk. Other schemes are refused."""
    parts = urlsplit(uri)
    if parts.scheme == 'file':
        path = unquote(parts.path)
    elif len(parts.scheme) > 1:
        # Single-letter schemes are Windows drive letters
        raise MissingResourceError(f"{what}: only local files are supported, got {uri!r}")
    else:
        path = unquote(uri)

    if doc.base_dir and not os.path.isabs(path):
        path = os.path.join(doc.base_dir, path)

    try:
        with open(path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise MissingResourceError(f"{what}: cannot read {path}: {e}") from e

    logger.debug(f"{what}: read {len(data)} bytes from {path}")
    return data


def _load_buffer(doc: GLTFDocument, buffer: Buffer, index: int) -> Tuple[bytes, str]:
    what = f"buffer {index}"
    if not buffer.is_external:
        if not doc.bin:
            raise MissingResourceError(f"{what}: no BIN chunk or empty")
        data, mime = doc.bin, DEFAULT_BASE64_MIME
    elif is_data_uri(buffer.uri):
        data, mime = decode_data_uri(buffer.uri)
    else:
        data, mime = _read_local_file(doc, buffer.uri, what), DEFAULT_BASE64_MIME

    if len(data) > buffer.byte_length:
        # GLB padding or a larger file; byteLength is authoritative
        data = data[:buffer.byte_length]
    elif len(data) < buffer.byte_length:
        logger.warning(f"{what}: source has {len(data)} bytes, byteLength declares {buffer.byte_length}")

    logger.debug(f"{what}: resolved {len(data)} bytes ({mime})")
    return data, mime


def resolve_buffer(doc: GLTFDocument, index: int) -> bytes:
    """
    Resolve the bytes of buffer index.

    An empty uri selects the embedded BIN chunk, a data: URI is decoded, and
    anything else is read as a local file. The result is truncated to
    byteLength and cached on the buffer.

    Raises:
        IndexOutOfRangeError: No such buffer
        MissingResourceError: BIN chunk absent, or the file cannot be read
        InvalidDataURIError: Malformed data: URI
    """
    _check_index(doc.buffers, index, "buffer")
    buffer = doc.buffers[index]
    data, _ = buffer.cache.get_or_set(lambda: _load_buffer(doc, buffer, index))
    return data


def resolve_buffer_mime(doc: GLTFDocument, index: int) -> str:
    """MIME type of buffer index (resolves the buffer if needed)."""
    _check_index(doc.buffers, index, "buffer")
    buffer = doc.buffers[index]
    _, mime = buffer.cache.get_or_set(lambda: _load_buffer(doc, buffer, index))
    return mime


def resolve_buffer_view(doc: GLTFDocument, index: int) -> bytes:
    """
    Resolve the bytes of bufferView index.

    Raises:
        IndexOutOfRangeError: No such bufferView or buffer
        RangeOverflowError: byteOffset + byteLength exceeds the buffer
    """
    _check_index(doc.buffer_views, index, "buffer view")
    view = doc.buffer_views[index]
    buf = resolve_buffer(doc, view.buffer)

    end = view.byte_offset + view.byte_length
    if end > len(buf):
        raise RangeOverflowError(
            f"buffer view {index} overflows buffer {view.buffer}: "
            f"{view.byte_offset}+{view.byte_length} > {len(buf)}"
        )
    return buf[view.byte_offset:end]


def resolve_accessor(doc: GLTFDocument, index: int) -> Tuple[bytes, int]:
    """
    Resolve the bytes of accessor index.

    The returned slice runs from the accessor's byteOffset to the end of its
    last element. The stride is the bufferView's byteStride, or the element
    size for tightly packed data.

    Returns:
        (data, stride)

    Raises:
        IndexOutOfRangeError: No such accessor, bufferView or buffer
        UnsupportedFeatureError: Sparse accessor
        InvalidAccessorError: count == 0, or no bufferView
        RangeOverflowError: Accessor does not fit its bufferView
    """
    _check_index(doc.accessors, index, "accessor")
    accessor = doc.accessors[index]

    if accessor.sparse is not None:
        raise UnsupportedFeatureError(f"accessor {index}: sparse accessors are not supported")
    if accessor.count == 0:
        raise InvalidAccessorError(f"accessor {index}: count == 0")
    if accessor.buffer_view is None:
        raise InvalidAccessorError(f"accessor {index}: no bufferView")

    data = resolve_buffer_view(doc, accessor.buffer_view)
    view = doc.buffer_views[accessor.buffer_view]

    element_size = accessor.element_size
    stride = view.byte_stride if view.byte_stride is not None else element_size

    # accessor.byteOffset + STRIDE * (count - 1) + SIZE_OF_ELEMENT <= bufferView.byteLength
    end = accessor.byte_offset + stride * (accessor.count - 1) + element_size
    if end > view.byte_length:
        raise RangeOverflowError(
            f"accessor {index} overflows buffer view {accessor.buffer_view}: "
            f"needs {end} bytes, view has {view.byte_length}"
        )
    return data[accessor.byte_offset:end], stride


def resolve_image(doc: GLTFDocument, index: int) -> Tuple[bytes, Optional[str]]:
    """
    Resolve the encoded bytes and MIME type of image index.

    A bufferView takes precedence over the uri. For bufferView and data: URI
    sources the image's mimeType overrides the detected type; for files the
    mimeType is the only source (None when unset).

    Raises:
        IndexOutOfRangeError: No such image, bufferView or buffer
        RangeOverflowError: bufferView exceeds its buffer
        InvalidDataURIError: Malformed data: URI
        MissingResourceError: File unreadable, or no source at all
    """
    _check_index(doc.images, index, "image")
    image = doc.images[index]

    if image.buffer_view is not None:
        data = resolve_buffer_view(doc, image.buffer_view)
        mime = resolve_buffer_mime(doc, doc.buffer_views[image.buffer_view].buffer)
        return data, image.mime_type or mime

    if is_data_uri(image.uri):
        data, mime = decode_data_uri(image.uri)
        return data, image.mime_type or mime

    if not image.uri:
        raise MissingResourceError(f"image {index}: neither bufferView nor uri")

    data = _read_local_file(doc, image.uri, f"image {index}")
    return data, image.mime_type


def read_accessor_array(doc: GLTFDocument, index: int) -> np.ndarray:
    """
    Read accessor index as a numpy array.

    SCALAR accessors give shape (count,), all others (count, components).
    Matrix elements stay flat in glTF's column-major order. Values are not
    de-normalized.

    Example:
        >>> positions = read_accessor_array(doc, prim.attributes.position)
        >>> positions.shape
        (24, 3)
    """
    data, stride = resolve_accessor(doc, index)
    accessor = doc.accessors[index]
    dtype = np.dtype(_DTYPES[accessor.component_type])
    components = accessor.type.num_components

    view = np.ndarray(
        shape=(accessor.count, components),
        dtype=dtype,
        buffer=data,
        strides=(stride, dtype.itemsize),
    )
    if accessor.type == AccessorType.SCALAR:
        view = view[:, 0]
    return view.copy()


def open_image(doc: GLTFDocument, index: int) -> Image.Image:
    """
    Decode image index with Pillow.

    Raises:
        PIL.UnidentifiedImageError: Bytes are not an image format Pillow knows
    """
    data, mime = resolve_image(doc, index)
    image = Image.open(io.BytesIO(data))
    image.load()
    logger.debug(f"image {index}: decoded {image.format} {image.size} (declared {mime})")
    return image


class Resolver:
    """
    Resolution helpers bound to one document.

    Example:
        >>> res = Resolver(load("model.glb"))
        >>> data, stride = res.accessor(0)
        >>> png, mime = res.image(0)
    """

    def __init__(self, doc: GLTFDocument):
        self.doc = doc

    def buffer(self, index: int) -> bytes:
        return resolve_buffer(self.doc, index)

    def buffer_view(self, index: int) -> bytes:
        return resolve_buffer_view(self.doc, index)

    def accessor(self, index: int) -> Tuple[bytes, int]:
        return resolve_accessor(self.doc, index)

    def accessor_array(self, index: int) -> np.ndarray:
        return read_accessor_array(self.doc, index)

    def image(self, index: int) -> Tuple[bytes, Optional[str]]:
        return resolve_image(self.doc, index)

    def open_image(self, index: int) -> Image.Image:
        return open_image(self.doc, index)
