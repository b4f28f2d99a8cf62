"""
Document decoding

Turns the JSON segment (and optional BIN segment) produced by the container
codec into a normalized GLTFDocument.
"""

import json
import logging
import os
from pathlib import Path
from typing import BinaryIO, Optional, Union

from pydantic import ValidationError

from gltfkit.container import split
from gltfkit.exceptions import InvalidDocumentError
from gltfkit.normalize import assign_defaults
from gltfkit.schema.document import GLTFDocument

logger = logging.getLogger(__name__)


def decode_document(
    json_chunk: Union[bytes, str],
    bin_chunk: Optional[bytes] = None,
    base_dir: Optional[str] = None,
) -> GLTFDocument:
    """
    Decode a glTF JSON segment into a normalized document.

    The BIN segment is attached verbatim as the embedded binary resource; its
    size is only checked when a buffer is resolved.

    Args:
        json_chunk: glTF JSON (bytes or str); trailing GLB padding is fine
        bin_chunk: GLB BIN chunk, or None/b"" when there is none
        base_dir: Directory for relative file URIs (default: current directory)

    Returns:
        GLTFDocument with defaults filled in

    Raises:
        InvalidDocumentError: JSON syntax error or schema mismatch
        UnknownEnumValueError: componentType or accessor type outside the allowed set
    """
    try:
        raw = json.loads(json_chunk)
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        raise InvalidDocumentError(f"invalid glTF JSON: {e}") from e

    if not isinstance(raw, dict):
        raise InvalidDocumentError(f"glTF root must be a JSON object, got {type(raw).__name__}")

    try:
        doc = GLTFDocument.model_validate(raw)
    except ValidationError as e:
        raise InvalidDocumentError(f"invalid glTF document: {e}") from e

    doc.attach_binary(bin_chunk)
    doc.set_base_dir(base_dir)
    assign_defaults(doc)

    logger.debug(
        f"Decoded glTF: {len(doc.buffers)} buffers, {len(doc.buffer_views)} views, "
        f"{len(doc.accessors)} accessors, {len(doc.images)} images, bin={len(doc.bin)} bytes"
    )
    return doc


def load(source: Union[str, os.PathLike, BinaryIO], base_dir: Optional[str] = None) -> GLTFDocument:
    """
    Load a .glb or .gltf from a path or binary stream.

    Args:
        source: File path or binary file-like object
        base_dir: Directory for relative file URIs. Defaults to the file's
                  directory when source is a path.

    Returns:
        Normalized GLTFDocument

    Raises:
        FileNotFoundError: If source is a path that does not exist
        GLTFError: Any container or document error

    Example:
        >>> doc = load("model.glb")
        >>> data, stride = resolve_accessor(doc, 0)
    """
    if isinstance(source, (str, os.PathLike)):
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Input file not found: {path}")
        if base_dir is None:
            base_dir = str(path.resolve().parent)
        with open(path, 'rb') as f:
            json_chunk, bin_chunk = split(f)
        logger.info(f"Loaded {path} (json={len(json_chunk)} bytes, bin={len(bin_chunk)} bytes)")
    else:
        json_chunk, bin_chunk = split(source)

    return decode_document(json_chunk, bin_chunk, base_dir=base_dir)
