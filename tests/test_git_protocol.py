"""Tests for pkt-line framing and protocol headers"""

import gzip

import pytest

from gitsmart.core.exceptions import ExchangeFailed
from gitsmart.core.git import Operation
from gitsmart.infrastructure.git_protocol import (FLUSH_PKT, NO_CACHE_HEADERS,
                                                  GitContentType,
                                                  advertisement_packet,
                                                  decode_request_body,
                                                  pkt_header, pkt_line,
                                                  response_headers)


class TestPktHeader:
    """Test the four hex digit length prefix"""

    def test_header_counts_itself(self):
        # 11 bytes of payload + 4 for the prefix = 15 = 0x000f
        assert pkt_header("hello world") == "000f"

    def test_empty_payload(self):
        assert pkt_header("") == "0004"

    def test_lowercase_hex(self):
        assert pkt_header("x" * (0xab - 4)) == "00ab"

    def test_bytes_payload(self):
        assert pkt_header(b"\x00\x01\x02") == "0007"

    @pytest.mark.parametrize("size", [0, 1, 251, 4092, 65531])
    def test_header_is_zero_padded_length(self, size):
        header = pkt_header("a" * size)

        assert len(header) == 4
        assert int(header, 16) == size + 4
        assert header == header.lower()

    def test_largest_representable_length(self):
        assert pkt_header("a" * (0xffff - 4)) == "ffff"

    def test_length_is_truncated_to_sixteen_bits(self):
        # 0x10003 keeps only its low four nibbles
        assert pkt_header("a" * 0xffff) == "0003"


class TestAdvertisementPacket:
    """Test the service announcement preamble"""

    def test_upload_pack_bytes(self):
        assert advertisement_packet(Operation.UPLOAD_PACK) == (
            "001e# service=git-upload-pack\n0000"
        )

    def test_receive_pack_bytes(self):
        assert advertisement_packet(Operation.RECEIVE_PACK) == (
            "001f# service=git-receive-pack\n0000"
        )

    @pytest.mark.parametrize("operation", list(Operation))
    def test_structure(self, operation):
        packet = advertisement_packet(operation)
        announce = f"# service=git-{operation.value}\n"

        assert packet[:4] == pkt_header(announce)
        assert packet.endswith(FLUSH_PKT)
        assert not packet.endswith("\n")
        assert packet == pkt_line(announce) + "0000"


class TestHeaders:
    """Test HTTP response headers"""

    def test_content_types(self):
        assert (
            GitContentType.for_operation(Operation.UPLOAD_PACK, GitContentType.ADVERTISEMENT)
            == "application/x-git-upload-pack-advertisement"
        )
        assert (
            GitContentType.for_operation(Operation.RECEIVE_PACK, GitContentType.RESULT)
            == "application/x-git-receive-pack-result"
        )

    def test_response_headers_include_no_cache(self):
        headers = response_headers(Operation.UPLOAD_PACK, GitContentType.RESULT)

        assert headers["Cache-Control"] == "no-cache, no-store, max-age=0, must-revalidate"
        assert headers["Pragma"] == "no-cache"
        assert headers["Expires"] == "Fri, 01 Jan 1980 00:00:00 GMT"
        assert headers["Content-Type"] == "application/x-git-upload-pack-result"

    def test_response_headers_do_not_mutate_shared_defaults(self):
        response_headers(Operation.RECEIVE_PACK, GitContentType.ADVERTISEMENT)

        assert "Content-Type" not in NO_CACHE_HEADERS


class TestDecodeRequestBody:
    """Test request body transfer decoding"""

    def test_plain_body_passes_through(self):
        body = b"0032want 0000000000000000000000000000000000000000\n0000"
        assert decode_request_body(body, Operation.UPLOAD_PACK) is body

    def test_gzip_body_is_decompressed(self):
        body = b"0009done\n"
        decoded = decode_request_body(gzip.compress(body), Operation.UPLOAD_PACK, "gzip")
        assert decoded == body

    def test_other_encodings_pass_through(self):
        assert decode_request_body(b"raw", Operation.UPLOAD_PACK, "identity") == b"raw"

    def test_corrupt_gzip_is_an_exchange_failure(self):
        with pytest.raises(ExchangeFailed, match="corrupt gzip"):
            decode_request_body(b"not gzip", Operation.RECEIVE_PACK, "gzip")
