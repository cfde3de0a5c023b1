"""Git Smart HTTP Protocol framing and HTTP headers"""

import gzip
import zlib
from typing import Dict, Optional, Union

from gitsmart.core.exceptions import ExchangeFailed
from gitsmart.core.git.git_types import Operation
from gitsmart.infrastructure.logging import get_logger

logger = get_logger(__name__)

HEX_DIGITS = "0123456789abcdef"
FLUSH_PKT = "0000"

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, max-age=0, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "Fri, 01 Jan 1980 00:00:00 GMT",
}


class GitContentType:
    """Git protocol content type nouns"""
    ADVERTISEMENT = "advertisement"
    RESULT = "result"

    @staticmethod
    def for_operation(operation: Operation, noun: str) -> str:
        return f"application/x-git-{operation.value}-{noun}"


def pkt_header(payload: Union[str, bytes]) -> str:
    """
    Length prefix of a pkt-line carrying ``payload``.

    The length counts the four header characters themselves and only its
    low 16 bits are kept.
    """
    length = len(payload) + 4
    return "".join(
        HEX_DIGITS[(length >> shift) & 0xF] for shift in (12, 8, 4, 0)
    )


def pkt_line(payload: str) -> str:
    return pkt_header(payload) + payload


def advertisement_packet(operation: Operation) -> str:
    """Service announcement that opens every info/refs response."""
    return pkt_line(f"# service={operation.service_name}\n") + FLUSH_PKT


def response_headers(operation: Operation, noun: str) -> Dict[str, str]:
    headers = dict(NO_CACHE_HEADERS)
    headers["Content-Type"] = GitContentType.for_operation(operation, noun)
    return headers


def decode_request_body(
    body: bytes, operation: Operation, content_encoding: Optional[str] = None
) -> bytes:
    """Undo the gzip transfer compression git clients apply to large requests."""
    if content_encoding is None or "gzip" not in content_encoding.lower():
        return body
    try:
        return gzip.decompress(body)
    except (OSError, EOFError, zlib.error) as e:
        logger.warning("git_request_body_corrupt", operation=operation.value, error=str(e))
        raise ExchangeFailed(operation.value, f"corrupt gzip request body: {e}") from e
