"""
GLB container codec

Splits a binary glTF (GLB) stream into its JSON and BIN chunks, and packs the
two chunks back into a GLB stream. Knows nothing about the JSON schema.

Layout (little-endian):
    magic    uint32  0x46546C67 ("glTF")
    version  uint32  2
    length   uint32  total file length (informational)
    chunk 0: length uint32, type 0x4E4F534A ("JSON"), data padded with 0x20
    chunk 1: length uint32, type 0x004E4942 ("BIN\\0"), data padded with 0x00 (optional)

Declared chunk lengths include the padding. The JSON parser tolerates the
trailing spaces, and buffer.byteLength trims the BIN side at resolve time.
"""

import io
import logging
import struct
from typing import BinaryIO, Tuple, Union

from gltfkit.exceptions import MalformedContainerError, TruncatedError, UnsupportedVersionError

logger = logging.getLogger(__name__)

GLB_MAGIC = 0x46546C67
GLB_VERSION = 2
CHUNK_JSON = 0x4E4F534A
CHUNK_BIN = 0x004E4942

HEADER_SIZE = 12
CHUNK_HEADER_SIZE = 8
_UINT32_MAX = 0xFFFFFFFF

# First byte of the magic as it appears on disk ('g')
_MAGIC_BYTES = struct.pack('<I', GLB_MAGIC)


def pad_length(length: int) -> int:
    """Round length up to the next multiple of 4."""
    return (length + 3) & ~3


def _read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    """Read exactly size bytes or raise TruncatedError."""
    chunks = []
    remaining = size
    while remaining > 0:
        data = stream.read(remaining)
        if not data:
            got = size - remaining
            raise TruncatedError(f"truncated {what}: expected {size} bytes, got {got}")
        chunks.append(data)
        remaining -= len(data)
    return b"".join(chunks)


def _read_chunk_header(stream: BinaryIO, what: str, allow_eof: bool = False):
    """Read (length, type) of a chunk. Returns None on clean EOF when allowed."""
    first = stream.read(CHUNK_HEADER_SIZE)
    if not first and allow_eof:
        return None
    if len(first) < CHUNK_HEADER_SIZE:
        first += _read_exact(stream, CHUNK_HEADER_SIZE - len(first), what)
    return struct.unpack('<II', first)


def split(stream: BinaryIO) -> Tuple[bytes, bytes]:
    """
    Split a GLB stream into (json, bin).

    A stream that does not start with the magic byte 'g' is taken as a bare
    glTF JSON document: the whole stream (first byte included) is returned as
    json and bin is empty. This lets .gltf and .glb inputs share one entry
    point.

    Args:
        stream: Binary file-like object positioned at the start of the data

    Returns:
        (json, bin) tuple; bin is b"" when there is no BIN chunk

    Raises:
        TruncatedError: Stream ended inside a header or chunk body
        MalformedContainerError: Bad magic or unexpected chunk type
        UnsupportedVersionError: Container version is not 2
    """
    first = stream.read(1)
    if not first:
        raise TruncatedError("empty stream")

    if first[0] != _MAGIC_BYTES[0]:
        # Can't be GLB, decode as plain glTF JSON
        tail = stream.read()
        logger.debug(f"No GLB magic, treating {1 + len(tail)} bytes as bare JSON")
        return first + tail, b""

    magic = first + _read_exact(stream, 3, "magic")
    if magic != _MAGIC_BYTES:
        raise MalformedContainerError(f"not a glTF file (magic {magic!r})")

    version, total_length = struct.unpack('<II', _read_exact(stream, 8, "header"))
    if version != GLB_VERSION:
        raise UnsupportedVersionError(f"unsupported glTF version {version}")

    json_length, chunk_type = _read_chunk_header(stream, "JSON chunk header")
    if chunk_type != CHUNK_JSON:
        raise MalformedContainerError(f"first chunk is {chunk_type:08X}, not JSON")
    json_chunk = _read_exact(stream, json_length, "JSON chunk")
    consumed = HEADER_SIZE + CHUNK_HEADER_SIZE + json_length

    # EOF right after the JSON chunk is still a valid GLB
    header = _read_chunk_header(stream, "BIN chunk header", allow_eof=True)
    bin_chunk = b""
    if header is not None:
        bin_length, chunk_type = header
        if chunk_type != CHUNK_BIN:
            raise MalformedContainerError(f"second chunk is {chunk_type:08X}, not BIN")
        bin_chunk = _read_exact(stream, bin_length, "BIN chunk")
        consumed += CHUNK_HEADER_SIZE + bin_length

    if consumed != total_length:
        logger.warning(f"GLB header declares {total_length} bytes, chunks account for {consumed}")

    logger.debug(f"Split GLB: json={len(json_chunk)} bytes, bin={len(bin_chunk)} bytes")
    return json_chunk, bin_chunk


def merge(writer: BinaryIO, json: Union[bytes, str], bin: bytes = b"") -> None:
    """
    Write json and bin as a GLB stream.

    The JSON chunk is padded with spaces and the BIN chunk with zeros to a
    multiple of 4. No BIN chunk is written when bin is empty.

    Args:
        writer: Binary file-like object to write to
        json: JSON segment (str is encoded as UTF-8)
        bin: Binary segment, may be empty

    Raises:
        ValueError: If the packed size does not fit the 32-bit length fields
    """
    if isinstance(json, str):
        json = json.encode('utf-8')
    bin = bin or b""

    json_padded = pad_length(len(json))
    bin_padded = pad_length(len(bin))

    total_length = HEADER_SIZE + CHUNK_HEADER_SIZE + json_padded
    if bin:
        total_length += CHUNK_HEADER_SIZE + bin_padded
    if total_length > _UINT32_MAX:
        raise ValueError(f"GLB too large: {total_length} bytes")

    writer.write(struct.pack('<III', GLB_MAGIC, GLB_VERSION, total_length))

    writer.write(struct.pack('<II', json_padded, CHUNK_JSON))
    writer.write(json)
    writer.write(b' ' * (json_padded - len(json)))

    if bin:
        writer.write(struct.pack('<II', bin_padded, CHUNK_BIN))
        writer.write(bin)
        writer.write(b'\x00' * (bin_padded - len(bin)))

    logger.debug(f"Merged GLB: {total_length} bytes (json={json_padded}, bin={bin_padded if bin else 0})")


def split_bytes(data: bytes) -> Tuple[bytes, bytes]:
    """split() over an in-memory byte string."""
    return split(io.BytesIO(data))


def merge_bytes(json: Union[bytes, str], bin: bytes = b"") -> bytes:
    """merge() into a new byte string."""
    out = io.BytesIO()
    merge(out, json, bin)
    return out.getvalue()


def read_glb(path: str) -> Tuple[bytes, bytes]:
    """Split a .glb (or bare .gltf) file on disk."""
    with open(path, 'rb') as f:
        return split(f)


def write_glb(path: str, json: Union[bytes, str], bin: bytes = b"") -> None:
    """Pack json and bin into a .glb file on disk."""
    with open(path, 'wb') as f:
        merge(f, json, bin)
    logger.info(f"Wrote GLB: {path}")
