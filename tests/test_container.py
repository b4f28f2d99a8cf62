"""
Test GLB container split/merge
"""
import io
import os
import struct
import tempfile

import pytest

from gltfkit.container import (
    CHUNK_BIN,
    CHUNK_JSON,
    GLB_MAGIC,
    merge,
    merge_bytes,
    pad_length,
    read_glb,
    split,
    split_bytes,
    write_glb,
)
from gltfkit.exceptions import (
    MalformedContainerError,
    TruncatedError,
    UnsupportedVersionError,
)

# 27 bytes, not 4-aligned
MINIMAL_JSON = b'{"asset":{"version":"2.0"}}'
# 28 bytes, 4-aligned
ALIGNED_JSON = MINIMAL_JSON + b'\n'


def build_glb(json_chunk, bin_chunk=None, version=2, json_type=CHUNK_JSON, bin_type=CHUNK_BIN, magic=GLB_MAGIC):
    """Hand-assemble a GLB without going through merge()"""
    body = struct.pack('<II', len(json_chunk), json_type) + json_chunk
    if bin_chunk is not None:
        body += struct.pack('<II', len(bin_chunk), bin_type) + bin_chunk
    return struct.pack('<III', magic, version, 12 + len(body)) + body


class TrickleStream(io.RawIOBase):
    """Stream that hands out at most one byte per read() call"""

    def __init__(self, data):
        self._data = io.BytesIO(data)

    def readable(self):
        return True

    def read(self, size=-1):
        if size is None or size < 0:
            return self._data.read()
        return self._data.read(min(size, 1))


class TestPadLength:
    """Test 4-byte alignment helper"""

    def test_pad_length_values(self):
        """Test rounding up to multiples of 4"""
        assert pad_length(0) == 0
        assert pad_length(1) == 4
        assert pad_length(4) == 4
        assert pad_length(27) == 28
        assert pad_length(29) == 32


class TestMerge:
    """Test packing JSON and BIN into a GLB"""

    def test_header_fields(self):
        """Test magic, version and total length"""
        data = merge_bytes(ALIGNED_JSON, b'\x01\x02\x03\x04')
        magic, version, length = struct.unpack('<III', data[:12])
        assert data[:4] == b'glTF'
        assert magic == GLB_MAGIC
        assert version == 2
        assert length == len(data) == 12 + 8 + 28 + 8 + 4

    def test_json_padded_with_spaces(self):
        """Test JSON chunk is padded with 0x20 and declares the padded length"""
        data = merge_bytes(MINIMAL_JSON)
        chunk_length, chunk_type = struct.unpack('<II', data[12:20])
        assert chunk_length == 28
        assert chunk_type == CHUNK_JSON
        assert data[20:48] == MINIMAL_JSON + b' '

    def test_bin_padded_with_zeros(self):
        """Test BIN chunk is padded with 0x00 and declares the padded length"""
        data = merge_bytes(ALIGNED_JSON, b'\xff' * 5)
        offset = 12 + 8 + 28
        chunk_length, chunk_type = struct.unpack('<II', data[offset:offset + 8])
        assert chunk_length == 8
        assert chunk_type == CHUNK_BIN
        assert data[offset + 8:] == b'\xff' * 5 + b'\x00' * 3

    def test_no_bin_chunk_when_empty(self):
        """Test that an empty binary segment emits no BIN chunk"""
        data = merge_bytes(ALIGNED_JSON, b'')
        assert len(data) == 12 + 8 + 28
        _, _, length = struct.unpack('<III', data[:12])
        assert length == len(data)

    def test_str_json_is_encoded(self):
        """Test that str JSON is accepted and encoded as UTF-8"""
        assert merge_bytes(ALIGNED_JSON.decode()) == merge_bytes(ALIGNED_JSON)

    def test_merge_to_writer(self):
        """Test merge() writes to a file-like object"""
        out = io.BytesIO()
        merge(out, ALIGNED_JSON, b'abcd')
        assert out.getvalue() == merge_bytes(ALIGNED_JSON, b'abcd')


class TestSplit:
    """Test splitting a GLB into JSON and BIN"""

    def test_roundtrip_aligned(self):
        """Test split(merge(J, B)) == (J, B) for aligned segments"""
        bin_chunk = bytes(range(16))
        assert split_bytes(merge_bytes(ALIGNED_JSON, bin_chunk)) == (ALIGNED_JSON, bin_chunk)

    def test_roundtrip_unaligned_keeps_padding(self):
        """Test padding stays in the chunks and is recoverable"""
        json_chunk, bin_chunk = split_bytes(merge_bytes(MINIMAL_JSON, b'\x07' * 5))
        assert json_chunk == MINIMAL_JSON + b' '
        assert bin_chunk == b'\x07' * 5 + b'\x00' * 3

    def test_json_only_container(self):
        """Test a container that ends right after the JSON chunk"""
        json_chunk, bin_chunk = split_bytes(build_glb(ALIGNED_JSON))
        assert json_chunk == ALIGNED_JSON
        assert bin_chunk == b''

    def test_bare_json(self):
        """Test data without the magic byte is returned as bare JSON"""
        data = b'{"asset": {"version": "2.0"}, "buffers": []}'
        assert split_bytes(data) == (data, b'')

    def test_bare_json_with_leading_whitespace(self):
        """Test the first byte is kept when falling back to bare JSON"""
        data = b'\n  {"asset": {}}'
        assert split_bytes(data) == (data, b'')

    def test_empty_stream(self):
        """Test that an empty stream fails"""
        with pytest.raises(TruncatedError):
            split_bytes(b'')

    def test_bad_magic(self):
        """Test 'g' followed by the wrong magic bytes"""
        with pytest.raises(MalformedContainerError):
            split_bytes(b'gLTF' + b'\x00' * 16)

    def test_truncated_magic(self):
        """Test stream ending inside the magic"""
        with pytest.raises(TruncatedError):
            split_bytes(b'gl')

    def test_truncated_header(self):
        """Test stream ending inside the version/length header"""
        with pytest.raises(TruncatedError):
            split_bytes(b'glTF' + b'\x02\x00')

    def test_truncated_json_header(self):
        """Test stream ending inside the JSON chunk header"""
        with pytest.raises(TruncatedError):
            split_bytes(build_glb(ALIGNED_JSON)[:16])

    def test_unsupported_version(self):
        """Test version other than 2"""
        with pytest.raises(UnsupportedVersionError):
            split_bytes(build_glb(ALIGNED_JSON, version=1))

    def test_first_chunk_not_json(self):
        """Test first chunk with the BIN marker"""
        with pytest.raises(MalformedContainerError):
            split_bytes(build_glb(ALIGNED_JSON, json_type=CHUNK_BIN))

    def test_second_chunk_not_bin(self):
        """Test second chunk with the JSON marker"""
        with pytest.raises(MalformedContainerError):
            split_bytes(build_glb(ALIGNED_JSON, b'abcd', bin_type=CHUNK_JSON))

    def test_truncated_json_body(self):
        """Test stream ending inside the JSON chunk"""
        data = build_glb(ALIGNED_JSON)[:-5]
        with pytest.raises(TruncatedError):
            split_bytes(data)

    def test_truncated_bin_header(self):
        """Test partial chunk header after the JSON chunk"""
        data = build_glb(ALIGNED_JSON) + b'\x04\x00\x00'
        with pytest.raises(TruncatedError):
            split_bytes(data)

    def test_truncated_bin_body(self):
        """Test stream ending inside the BIN chunk"""
        data = build_glb(ALIGNED_JSON, b'12345678')[:-3]
        with pytest.raises(TruncatedError) as exc_info:
            split_bytes(data)
        # Truncation is a kind of malformed container
        assert isinstance(exc_info.value, MalformedContainerError)

    def test_total_length_is_informational(self):
        """Test that a wrong total length does not fail the split"""
        data = bytearray(build_glb(ALIGNED_JSON, b'abcd'))
        data[8:12] = struct.pack('<I', 9999)
        assert split_bytes(bytes(data)) == (ALIGNED_JSON, b'abcd')

    def test_short_reads(self):
        """Test a stream that returns fewer bytes than requested"""
        data = build_glb(ALIGNED_JSON, b'abcdefgh')
        assert split(TrickleStream(data)) == (ALIGNED_JSON, b'abcdefgh')


class TestFiles:
    """Test read_glb/write_glb on disk"""

    def test_write_then_read(self):
        """Test writing and reading a .glb file"""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "model.glb")
            write_glb(path, ALIGNED_JSON, b'\x00\x01\x02\x03')

            with open(path, 'rb') as f:
                assert f.read(4) == b'glTF'

            assert read_glb(path) == (ALIGNED_JSON, b'\x00\x01\x02\x03')

    def test_readable_by_pygltflib(self):
        """Test that merged output loads in a third-party GLB reader"""
        pygltflib = pytest.importorskip("pygltflib")

        json_chunk = b'{"asset":{"version":"2.0"},"buffers":[{"byteLength":6}]}'
        bin_chunk = b'\x01\x02\x03\x04\x05\x06'
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "model.glb")
            write_glb(path, json_chunk, bin_chunk)

            gltf = pygltflib.GLTF2().load_binary(path)
            assert gltf.asset.version == "2.0"
            assert gltf.buffers[0].byteLength == 6
            assert gltf.binary_blob()[:6] == bin_chunk
