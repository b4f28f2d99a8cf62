"""
Test data: URI decoding
"""
import pytest

from gltfkit.datauri import decode_data_uri, is_data_uri
from gltfkit.exceptions import InvalidDataURIError


class TestDecodeDataURI:
    """Test data:[<mediatype>][;base64],<payload>"""

    def test_base64_without_mediatype(self):
        """Test default MIME for base64 payloads"""
        assert decode_data_uri("data:;base64,AAECAw==") == (b'\x00\x01\x02\x03', "application/octet-stream")

    def test_base64_with_mediatype(self):
        """Test declared media type is returned"""
        data, mime = decode_data_uri("data:image/png;base64,iVBORw0K")
        assert data == b'\x89PNG\r\n'
        assert mime == "image/png"

    def test_plain_text_default_mime(self):
        """Test default MIME for non-base64 payloads"""
        assert decode_data_uri("data:,hello") == (b'hello', "text/plain;charset=US-ASCII")

    def test_plain_text_percent_decoded(self):
        """Test percent-encoded raw payload"""
        data, _ = decode_data_uri("data:text/plain,a%20b%00")
        assert data == b'a b\x00'

    def test_empty_payload(self):
        """Test empty payload decodes to no bytes"""
        assert decode_data_uri("data:application/octet-stream;base64,") == (b'', "application/octet-stream")

    def test_missing_comma(self):
        """Test URI without the payload separator"""
        with pytest.raises(InvalidDataURIError):
            decode_data_uri("data:application/octet-stream;base64")

    def test_bad_base64(self):
        """Test invalid base64 payload"""
        with pytest.raises(InvalidDataURIError):
            decode_data_uri("data:;base64,@@@@")

    def test_not_a_data_uri(self):
        """Test plain file names are rejected"""
        with pytest.raises(InvalidDataURIError):
            decode_data_uri("buffer.bin")

    def test_is_data_uri(self):
        """Test prefix detection"""
        assert is_data_uri("data:,x")
        assert not is_data_uri("model.bin")
        assert not is_data_uri("")
        assert not is_data_uri(None)
